"""
Kibana alert endpoints.
"""

import json
import logging
from urllib.parse import quote

import pydantic
import requests

from kibanaform.providers.base.provider_exceptions import DecodeError
from kibanaform.providers.kibana_provider.kibana_client import AlertingClient
from kibanaform.providers.kibana_provider.models import KibanaAlert

ALERTS_PATH = "api/alerts/alert"
ALERT_PATH = "api/alerts/alert/{id}"

logger = logging.getLogger(__name__)


def alert_path(id: str) -> str:
    # TODO: prefix with s/{space_id}/ once space scoping is wired in
    return ALERT_PATH.format(id=quote(str(id), safe=""))


def _parse_alert(response: requests.Response) -> KibanaAlert:
    try:
        return KibanaAlert.parse_obj(response.json())
    except requests.JSONDecodeError as e:
        raise DecodeError(
            f"error unmarshalling alert body: {e}: {response.text!r}"
        ) from e
    except pydantic.ValidationError as e:
        raise DecodeError(f"error unmarshalling alert body: {e}") from e


def get_alert(client: AlertingClient, id: str, space_id: str = "") -> KibanaAlert:
    """
    Get an alert by id.

    Raises:
        NotFound: Kibana doesn't know the alert
        DecodeError: The response body is not an alert
    """
    response = client.perform_request("GET", alert_path(id))
    return _parse_alert(response)


def post_alert(
    client: AlertingClient, id: str, space_id: str, alert: KibanaAlert
) -> KibanaAlert:
    """
    Create an alert.

    Returns:
        KibanaAlert: The created alert, including the id Kibana assigned.
    """
    body = alert.to_request_body()
    try:
        json.dumps(body)
    except (TypeError, ValueError) as e:
        logger.info(
            "Alert body could not be serialized", extra={"alert_name": alert.name}
        )
        raise DecodeError(f"Body Error: {e}") from e
    response = client.perform_request("POST", ALERTS_PATH, body=body)
    return _parse_alert(response)


def put_alert(client: AlertingClient, id: str, space_id: str, alert: KibanaAlert):
    """Updating alerts in place is not supported, nothing is sent."""
    logger.debug("Alert update is a no-op", extra={"alert_id": id})


def delete_alert(client: AlertingClient, id: str, space_id: str = ""):
    client.perform_request("DELETE", alert_path(id))
