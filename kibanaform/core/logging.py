import copy
import http.client
import inspect
import logging
import logging.config
import re
import uuid

# tb: small hack to avoid the InsecureRequestWarning logs when KIBANA_VERIFY_SSL is off
import urllib3
from pythonjsonlogger import jsonlogger

from kibanaform.core.config import config

urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

LOG_LEVEL = config("LOG_LEVEL", default="INFO")
KIBANAFORM_LOG_FILE = config("KIBANAFORM_LOG_FILE", default=None)

LOG_FORMAT_JSON = "json"
LOG_FORMAT_DEVELOPMENT_TERMINAL = "dev_terminal"

LOG_FORMAT = config("LOG_FORMAT", default=LOG_FORMAT_JSON)

# http.client prints the raw request, headers separated by escaped CRLFs
AUTHORIZATION_HEADER = re.compile(r"(authorization: )[^\\\r\n']+", re.IGNORECASE)

logger = logging.getLogger(__name__)


class ProviderLoggerAdapter(logging.LoggerAdapter):
    def __init__(self, logger, tenant_id, provider_id, execution_id=None):
        super().__init__(logger, {})
        self.tenant_id = tenant_id
        self.provider_id = provider_id
        self.execution_id = execution_id or str(uuid.uuid4())

    def process(self, msg, kwargs):
        kwargs = kwargs.copy() if kwargs else {}
        if "extra" not in kwargs:
            kwargs["extra"] = {}

        kwargs["extra"].update(
            {
                "tenant_id": self.tenant_id,
                "provider_id": self.provider_id,
                "execution_id": self.execution_id,
            }
        )

        return msg, kwargs


class DevTerminalFormatter(logging.Formatter):
    def format(self, record):
        message = super().format(record)
        extra_info = ""

        # Use inspect to go up the stack until we find the _log function
        frame = inspect.currentframe()
        while frame:
            if frame.f_code.co_name == "_log":
                # Extract extra from the _log function's local variables
                extra = frame.f_locals.get("extra", {})
                if extra:
                    extra_info = " ".join(
                        [f"[{k}: {v}]" for k, v in extra.items() if k != "body"]
                    )
                break
            frame = frame.f_back

        return f"{message} {extra_info}".rstrip()


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    def __init__(self, *args, rename_fields=None, **kwargs):
        super().__init__(*args, rename_fields=rename_fields or {}, **kwargs)


CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "json": {
            "()": CustomJsonFormatter,
            "fmt": "%(asctime)s %(message)s %(levelname)s %(name)s %(filename)s %(threadName)s %(process)s %(module)s",
            "rename_fields": {
                "levelname": "severity",
                "asctime": "timestamp",
            },
        },
        "dev_terminal": {
            "()": DevTerminalFormatter,
            "format": "%(asctime)s - %(threadName)s %(levelname)s %(name)s - %(message)s",
        },
    },
    "handlers": {
        "default": {
            "level": LOG_LEVEL,
            "formatter": (
                "json" if LOG_FORMAT == LOG_FORMAT_JSON else "dev_terminal"
            ),
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stdout",
        },
    },
    "loggers": {
        "": {
            "handlers": ["default"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
        "urllib3": {
            "handlers": ["default"],
            "level": "WARNING",
            "propagate": False,
        },
        "opentelemetry.context": {
            "handlers": [],
            "level": "CRITICAL",
            "propagate": False,
        },
    },
}


def setup_logging(level: str | None = None, log_format: str | None = None):
    logging_config = copy.deepcopy(CONFIG)
    if level:
        logging_config["handlers"]["default"]["level"] = level
        logging_config["loggers"][""]["level"] = level
    if log_format:
        logging_config["handlers"]["default"]["formatter"] = (
            "json" if log_format == LOG_FORMAT_JSON else "dev_terminal"
        )

    # Add file handler if KIBANAFORM_LOG_FILE is set
    if KIBANAFORM_LOG_FILE:
        logging_config["handlers"]["file"] = {
            "level": "DEBUG",
            "formatter": "json",
            "class": "logging.FileHandler",
            "filename": KIBANAFORM_LOG_FILE,
            "mode": "a",
        }
        logging_config["loggers"][""]["handlers"].append("file")

    logging.config.dictConfig(logging_config)

    if logging_config["loggers"][""]["level"] != "DEBUG":
        http.client.HTTPConnection.debuglevel = 0
        return

    # MONKEY PATCHING http.client so request/response lines end up in the log
    # See: https://stackoverflow.com/questions/58738195/python-http-request-and-debug-level-logging-to-the-log-file
    http_client_logger = logging.getLogger("http.client")
    http_client_logger.setLevel(logging.DEBUG)
    http.client.HTTPConnection.debuglevel = 1

    def print_to_log(*args):
        http_client_logger.debug(
            redact_credentials(" ".join(str(arg) for arg in args))
        )

    http.client.print = print_to_log


def redact_credentials(message: str) -> str:
    return AUTHORIZATION_HEADER.sub(r"\1[REDACTED]", message)
