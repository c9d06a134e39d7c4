import pytest
import responses

from kibanaform.contextmanager.contextmanager import ContextManager
from kibanaform.providers.kibana_provider.kibana_provider import KibanaProvider
from kibanaform.providers.kibana_provider.resource_kibana_alert import (
    resource_kibana_alert,
)
from kibanaform.providers.models.provider_config import ProviderConfig

KIBANA_URL = "http://kibana.local:5601"
STATUS_URL = f"{KIBANA_URL}/api/status"
ALERTS_URL = f"{KIBANA_URL}/api/alerts/alert"


@pytest.fixture
def context_manager():
    return ContextManager(tenant_id="test")


@pytest.fixture
def kibana_provider(context_manager):
    config = ProviderConfig(
        authentication={
            "kibana_host": "http://kibana.local",
            "kibana_port": 5601,
            "api_key": "test-api-key",
        },
        name="test-kibana",
    )
    return KibanaProvider(context_manager, "kibana", config)


@pytest.fixture
def alert_resource():
    return resource_kibana_alert()


@pytest.fixture
def mocked_responses():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


@pytest.fixture
def kibana_version(mocked_responses):
    """Register the status endpoint, returns a setter to change the version."""

    def _set(number="8.12.0"):
        mocked_responses.replace(
            responses.GET, STATUS_URL, json={"version": {"number": number}}
        )

    mocked_responses.add(
        responses.GET, STATUS_URL, json={"version": {"number": "8.12.0"}}
    )
    return _set


@pytest.fixture
def alert_config():
    return {
        "name": "cpu-usage",
        "space_id": "default",
        "tags": ["prod", "cpu"],
        "alert_type_id": ".index-threshold",
        "schedule": [{"interval": "5m"}],
        "throttle": "10m",
        "notify_when": "onThrottleInterval",
        "enabled": True,
        "consumer": "alerts",
        "params": {
            "index": ["metrics-*"],
            "timeField": "@timestamp",
            "threshold": [90],
        },
        "actions": [
            {
                "group": "threshold met",
                "id": "connector-1",
                "action_type_id": ".server-log",
                "params": {"message": "CPU is high", "level": "warn"},
            }
        ],
    }


def alert_response(id="alert-1", **overrides) -> dict:
    body = {
        "id": id,
        "name": "cpu-usage",
        "tags": ["prod", "cpu"],
        "alertTypeId": ".index-threshold",
        "schedule": {"interval": "5m"},
        "throttle": "10m",
        "notifyWhen": "onThrottleInterval",
        "enabled": True,
        "consumer": "alerts",
        "params": {
            "index": ["metrics-*"],
            "timeField": "@timestamp",
            "threshold": [90],
        },
        "actions": [
            {
                "group": "threshold met",
                "id": "connector-1",
                "actionTypeId": ".server-log",
                "params": {"message": "CPU is high", "level": "warn"},
            }
        ],
        "createdBy": "elastic",
        "updatedBy": "elastic",
        "createdAt": "2024-01-15T10:30:00.000Z",
        "updatedAt": "2024-01-15T10:30:00.000Z",
        "apiKeyOwner": "elastic",
        "muteAll": False,
        "mutedInstanceIds": [],
        "scheduledTaskId": "task-1",
        "executionStatus": {"status": "pending"},
    }
    body.update(overrides)
    return body


@pytest.fixture
def alert_body():
    return alert_response
