"""
Kibana HTTP client and the minimal version gate for the alerting endpoints.
"""

import abc
import logging
from typing import Literal

import requests
from packaging.version import InvalidVersion, Version

from kibanaform.providers.base.provider_exceptions import (
    ClientTypeUnsupported,
    DecodeError,
    NotFound,
    TransportError,
    UnsupportedVersion,
)

MINIMAL_KIBANA_VERSION = Version("7.11.0")
# if the status endpoint does not report a version, assume < 8 for backwards compatibility
FALLBACK_KIBANA_VERSION = "7.0.0"

logger = logging.getLogger(__name__)


class AlertingClient(metaclass=abc.ABCMeta):
    """
    Capability interface for clients that can reach the Kibana alerting API.
    """

    @abc.abstractmethod
    def get_version(self) -> Version:
        raise NotImplementedError("get_version() method not implemented")

    @abc.abstractmethod
    def perform_request(
        self,
        method: Literal["GET", "POST", "PUT", "DELETE"],
        path: str,
        body: dict | None = None,
        params: dict | None = None,
    ) -> requests.Response:
        raise NotImplementedError("perform_request() method not implemented")


class KibanaClient(AlertingClient):
    DEFAULT_TIMEOUT = 10

    def __init__(
        self,
        kibana_host: str,
        kibana_port: int | None = None,
        api_key: str | None = None,
        username: str | None = None,
        password: str | None = None,
        verify_ssl: bool = True,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ):
        self.kibana_host = str(kibana_host).rstrip("/")
        self.kibana_port = kibana_port
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.verify = verify_ssl
        self.session.headers["kbn-xsrf"] = "reporting"
        if api_key:
            self.session.headers["Authorization"] = f"ApiKey {api_key}"
        elif username:
            self.session.auth = (username, password or "")

    @property
    def base_url(self) -> str:
        if self.kibana_port:
            return f"{self.kibana_host}:{self.kibana_port}"
        return self.kibana_host

    def perform_request(
        self,
        method: Literal["GET", "POST", "PUT", "DELETE"],
        path: str,
        body: dict | None = None,
        params: dict | None = None,
    ) -> requests.Response:
        """
        Make a request to Kibana.

        Args:
            method (POST|GET|PUT|DELETE): The HTTP method
            path (str): The path to request, relative to the Kibana host (e.g. api/alerts/alert)
            body (dict, optional): JSON body
            params (dict, optional): Query string parameters

        Raises:
            NotFound: If Kibana answers 404
            TransportError: On any other failed request

        Returns:
            requests.Response: The successful response
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        logger.debug("Kibana request", extra={"method": method, "url": url})
        try:
            response = self.session.request(
                method, url, json=body, params=params, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise TransportError(f"{method} {url} failed: {e}") from e

        if response.ok:
            return response

        message = _error_message(response)
        if response.status_code == 404:
            raise NotFound(f"{method} {url}: {message}")
        raise TransportError(
            f"{method} {url} returned {response.status_code}: {message}",
            status_code=response.status_code,
        )

    def get_version(self) -> Version:
        response = self.perform_request("GET", "api/status")
        try:
            status = response.json()
        except requests.JSONDecodeError as e:
            raise DecodeError(f"Invalid Kibana status response: {e}") from e

        if not isinstance(status, dict) or not isinstance(
            status.get("version") or {}, dict
        ):
            raise DecodeError(f"Invalid Kibana status response: {status!r}")

        number = (status.get("version") or {}).get("number")
        if not number:
            logger.warning(
                "Kibana did not report a version, assuming %s",
                FALLBACK_KIBANA_VERSION,
            )
            number = FALLBACK_KIBANA_VERSION
        return parse_version(number)


def parse_version(number: str) -> Version:
    # e.g. 8.12.0-SNAPSHOT
    try:
        return Version(str(number).split("-", 1)[0])
    except InvalidVersion as e:
        raise DecodeError(f"Invalid Kibana version {number!r}") from e


def _error_message(response: requests.Response) -> str:
    try:
        response_json = response.json()
    except requests.JSONDecodeError:
        return response.text or response.reason
    if isinstance(response_json, dict):
        return response_json.get("message") or response_json.get("error") or ""
    return str(response_json)


def ensure_alerting_supported(client) -> Version:
    """
    Check that the client can reach the alerting API and that the server is
    recent enough.

    Raises:
        ClientTypeUnsupported: The client is not an AlertingClient
        UnsupportedVersion: The server is older than MINIMAL_KIBANA_VERSION
    """
    if not isinstance(client, AlertingClient):
        raise ClientTypeUnsupported(
            f"Kibana Alert endpoint only available from Kibana >= {MINIMAL_KIBANA_VERSION}, "
            f"got unsupported client {type(client).__name__}"
        )

    version = client.get_version()
    if version < MINIMAL_KIBANA_VERSION:
        raise UnsupportedVersion(
            f"Kibana Alert endpoint only available from Kibana >= {MINIMAL_KIBANA_VERSION}, "
            f"got version {version}",
            version=version,
        )
    return version
