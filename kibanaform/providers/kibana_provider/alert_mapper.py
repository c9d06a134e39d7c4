"""
Mapping between the resource attributes and the KibanaAlert model.
"""

import pydantic

from kibanaform.providers.base.provider_exceptions import (
    ActionMappingError,
    MalformedSchedule,
)
from kibanaform.providers.kibana_provider.models import (
    KibanaAlert,
    KibanaAlertAction,
    KibanaAlertSchedule,
)
from kibanaform.schema.resource_data import ResourceData

ACTION_REQUIRED_KEYS = ("group", "id", "action_type_id")


def expand_schedule(schedules: list) -> KibanaAlertSchedule:
    if not schedules:
        raise MalformedSchedule("schedule must contain exactly one entry, got none")
    schedule = schedules[0]
    if not isinstance(schedule, dict) or not schedule.get("interval"):
        raise MalformedSchedule(f"schedule entry has no interval: {schedule!r}")
    return KibanaAlertSchedule(interval=schedule["interval"])


def expand_action(raw_action, index: int) -> KibanaAlertAction:
    if not isinstance(raw_action, dict):
        raise ActionMappingError(
            f"actions.{index}: expected a block, got {type(raw_action).__name__}",
            index=index,
        )
    missing = [key for key in ACTION_REQUIRED_KEYS if not raw_action.get(key)]
    if missing:
        raise ActionMappingError(
            f"actions.{index}: missing {', '.join(missing)}", index=index
        )
    params = raw_action.get("params") or {}
    if not isinstance(params, dict):
        raise ActionMappingError(
            f"actions.{index}.params: expected a map, got {type(params).__name__}",
            index=index,
        )
    try:
        return KibanaAlertAction(
            group=raw_action["group"],
            id=raw_action["id"],
            action_type_id=raw_action["action_type_id"],
            params=params,
        )
    except pydantic.ValidationError as e:
        raise ActionMappingError(f"actions.{index}: {e}", index=index) from e


def expand_actions(raw_actions: list) -> list[KibanaAlertAction]:
    return [expand_action(action, index) for index, action in enumerate(raw_actions)]


def flatten_actions(actions: list[KibanaAlertAction]) -> list[dict]:
    return [
        {
            "group": action.group,
            "id": action.id,
            "action_type_id": action.action_type_id,
            "params": action.params,
        }
        for action in actions
    ]


def expand_alert(data: ResourceData) -> KibanaAlert:
    """
    Build the alert to send to Kibana from the resource attributes.

    Raises:
        MalformedSchedule: The schedule list is empty
        ActionMappingError: One of the actions can't be mapped
    """
    schedule = expand_schedule(data.get("schedule"))
    actions = expand_actions(data.get("actions"))

    return KibanaAlert(
        name=data.get("name"),
        tags=data.get("tags"),
        alert_type_id=data.get("alert_type_id"),
        schedule=schedule,
        throttle=data.get("throttle") or None,
        notify_when=data.get("notify_when"),
        enabled=data.get("enabled"),
        consumer=data.get("consumer"),
        params=data.get("params"),
        actions=actions,
    )


def flatten_alert(alert: KibanaAlert, data: ResourceData):
    """Set every alert field on the resource attributes as is."""
    data.set("name", alert.name)
    data.set("tags", alert.tags)
    data.set("alert_type_id", alert.alert_type_id)
    data.set("schedule", [{"interval": alert.schedule.interval}])
    data.set("throttle", alert.throttle)
    data.set("notify_when", alert.notify_when)
    data.set("enabled", alert.enabled)
    data.set("consumer", alert.consumer)
    data.set("params", alert.params)
    data.set("actions", flatten_actions(alert.actions))
