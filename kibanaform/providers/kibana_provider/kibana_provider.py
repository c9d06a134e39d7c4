"""
Kibana provider.
"""

import dataclasses
from typing import Optional

import pydantic

from kibanaform.contextmanager.contextmanager import ContextManager
from kibanaform.core.config import config as env_config
from kibanaform.exceptions.provider_config_exception import ProviderConfigException
from kibanaform.providers.base.base_provider import BaseProvider
from kibanaform.providers.base.provider_exceptions import (
    KibanaAlertException,
    TransportError,
)
from kibanaform.providers.kibana_provider.alert_api import (
    ALERTS_PATH,
    alert_path,
)
from kibanaform.providers.kibana_provider.kibana_client import KibanaClient
from kibanaform.providers.kibana_provider.resource_kibana_alert import (
    RESOURCE_NAME,
    resource_kibana_alert,
)
from kibanaform.providers.models.provider_config import ProviderConfig, ProviderScope

UrlPort = pydantic.conint(ge=1, le=65_535)


@pydantic.dataclasses.dataclass
class KibanaProviderAuthConfig:
    """Kibana authentication configuration."""

    kibana_host: pydantic.AnyHttpUrl = dataclasses.field(
        metadata={
            "required": True,
            "description": "Kibana Host",
            "hint": "https://my-deployment.kb.us-central1.gcp.cloud.es.io",
            "validation": "any_http_url",
        }
    )
    api_key: Optional[str] = dataclasses.field(
        metadata={
            "required": False,
            "description": "Kibana API Key",
            "sensitive": True,
        },
        default=None,
    )
    username: Optional[str] = dataclasses.field(
        metadata={
            "required": False,
            "description": "Kibana username (basic auth, when no API key is given)",
        },
        default=None,
    )
    password: Optional[str] = dataclasses.field(
        metadata={
            "required": False,
            "description": "Kibana password",
            "sensitive": True,
        },
        default=None,
    )
    kibana_port: Optional[UrlPort] = dataclasses.field(
        metadata={
            "required": False,
            "description": "Kibana Port (defaults to the port in the host, if any)",
            "validation": "port",
        },
        default=None,
    )
    verify_ssl: bool = dataclasses.field(
        metadata={
            "required": False,
            "description": "Verify the Kibana TLS certificate",
        },
        default=True,
    )
    timeout: float = dataclasses.field(
        metadata={
            "required": False,
            "description": "Request timeout in seconds",
        },
        default=KibanaClient.DEFAULT_TIMEOUT,
    )


class KibanaProvider(BaseProvider):
    """Manage Kibana alerts."""

    # Mock payload for validating the write scope
    MOCK_ALERT_PAYLOAD = {
        "name": "kibanaform-test-alert",
        "schedule": {"interval": "1m"},
        "alertTypeId": ".index-threshold",
        "consumer": "alerts",
        "notifyWhen": "onActionGroupChange",
        "enabled": False,
        "params": {
            "index": ["kibanaform-scope-validation"],
            "timeField": "@timestamp",
            "aggType": "count",
            "groupBy": "all",
            "timeWindowSize": 5,
            "timeWindowUnit": "m",
            "thresholdComparator": ">",
            "threshold": [1000],
        },
        "actions": [],
        "tags": [],
    }

    PROVIDER_SCOPES = [
        ProviderScope(
            name="alerts:read",
            description="Read alerts",
            mandatory=True,
            alias="Read Alerts",
        ),
        ProviderScope(
            name="alerts:write",
            description="Create and delete alerts",
            mandatory=True,
            alias="Modify Alerts",
        ),
    ]

    RESOURCES = {
        RESOURCE_NAME: resource_kibana_alert,
    }

    def __init__(
        self, context_manager: ContextManager, provider_id: str, config: ProviderConfig
    ):
        self._client = None
        super().__init__(context_manager, provider_id, config)

    @staticmethod
    def default_authentication() -> dict:
        """Authentication settings taken from the environment / .env file."""
        authentication = {
            "kibana_host": env_config("KIBANA_HOST", default=None),
            "kibana_port": env_config("KIBANA_PORT", cast=int, default=None),
            "api_key": env_config("KIBANA_API_KEY", default=None),
            "username": env_config("KIBANA_USERNAME", default=None),
            "password": env_config("KIBANA_PASSWORD", default=None),
            "verify_ssl": env_config("KIBANA_VERIFY_SSL", cast=bool, default=True),
            "timeout": env_config(
                "KIBANA_REQUEST_TIMEOUT",
                cast=float,
                default=KibanaClient.DEFAULT_TIMEOUT,
            ),
        }
        return {key: value for key, value in authentication.items() if value is not None}

    def validate_config(self):
        authentication = dict(self.config.authentication or {})
        host = authentication.get("kibana_host")
        if not host:
            raise ProviderConfigException(
                "kibana_host is required", provider_id=self.provider_id
            )
        if not (host.startswith("http://") or host.startswith("https://")):
            scheme = (
                "http://"
                if ("localhost" in host or "127.0.0.1" in host)
                else "https://"
            )
            authentication["kibana_host"] = scheme + host
        if not authentication.get("api_key") and not authentication.get("username"):
            raise ProviderConfigException(
                "Either api_key or username/password must be provided",
                provider_id=self.provider_id,
            )

        try:
            self.authentication_config = KibanaProviderAuthConfig(**authentication)
        except (pydantic.ValidationError, TypeError) as e:
            raise ProviderConfigException(
                f"Invalid Kibana configuration: {e}", provider_id=self.provider_id
            ) from e
        self.config.authentication = authentication

    @property
    def client(self) -> KibanaClient:
        if self._client is None:
            self._client = KibanaClient(
                kibana_host=self.authentication_config.kibana_host,
                kibana_port=self.authentication_config.kibana_port,
                api_key=self.authentication_config.api_key,
                username=self.authentication_config.username,
                password=self.authentication_config.password,
                verify_ssl=self.authentication_config.verify_ssl,
                timeout=self.authentication_config.timeout,
            )
        return self._client

    def validate_scopes(self) -> dict[str, bool | str]:
        """
        Validate the scopes of the provider.

        Returns:
            dict[str, bool | str]: A dictionary of scopes and whether they are valid or not
        """
        validated_scopes = {}
        for scope in self.PROVIDER_SCOPES:
            try:
                if scope.name == "alerts:read":
                    self.client.perform_request(
                        "GET", "api/alerts/_find", params={"per_page": 1}
                    )
                elif scope.name == "alerts:write":
                    alert = self.client.perform_request(
                        "POST", ALERTS_PATH, body=self.MOCK_ALERT_PAYLOAD
                    ).json()
                    self.client.perform_request("DELETE", alert_path(alert["id"]))
            except TransportError as e:
                if e.status_code in (401, 403):
                    validated_scopes[scope.name] = e.message
                    continue
                # this means we failed on something else which is not permissions and it's probably ok.
                self.logger.debug(
                    "Scope validation failed on a non permission error",
                    extra={"scope": scope.name, "error": e.message},
                )
            except (KibanaAlertException, ValueError, KeyError) as e:
                validated_scopes[scope.name] = str(e)
                continue
            validated_scopes[scope.name] = True
        return validated_scopes

    def dispose(self):
        if self._client is not None:
            self._client.session.close()
            self._client = None
