"""
elasticsearch_kibana_alert resource.
"""

import logging

from kibanaform.providers.base.provider_exceptions import DecodeError, NotFound
from kibanaform.providers.kibana_provider.alert_api import (
    delete_alert,
    get_alert,
    post_alert,
    put_alert,
)
from kibanaform.providers.kibana_provider.alert_mapper import (
    expand_alert,
    flatten_alert,
)
from kibanaform.providers.kibana_provider.kibana_client import (
    ensure_alerting_supported,
)
from kibanaform.schema.resource_data import ResourceData
from kibanaform.schema.schema import Resource, Schema, SchemaType

RESOURCE_NAME = "elasticsearch_kibana_alert"
DEFAULT_SCHEDULE = [{"interval": "1m"}]

logger = logging.getLogger(__name__)


def _resource_logger(meta):
    return getattr(meta, "logger", None) or logger


def kibana_alert_schema() -> dict[str, Schema]:
    return {
        "name": Schema(type=SchemaType.STRING, required=True, force_new=True),
        "space_id": Schema(type=SchemaType.STRING, optional=True),
        "tags": Schema(
            type=SchemaType.SET,
            optional=True,
            elem=Schema(type=SchemaType.STRING),
        ),
        "alert_type_id": Schema(type=SchemaType.STRING, required=True),
        "schedule": Schema(
            type=SchemaType.LIST,
            optional=True,
            max_items=1,
            default=DEFAULT_SCHEDULE,
            elem={
                "interval": Schema(type=SchemaType.STRING, required=True),
            },
        ),
        "throttle": Schema(type=SchemaType.STRING, optional=True),
        "notify_when": Schema(type=SchemaType.STRING, required=True),
        "enabled": Schema(type=SchemaType.BOOL, optional=True, default=True),
        "consumer": Schema(type=SchemaType.STRING, required=True),
        "params": Schema(type=SchemaType.MAP, optional=True),
        "actions": Schema(
            type=SchemaType.LIST,
            optional=True,
            elem={
                "group": Schema(type=SchemaType.STRING, required=True),
                "id": Schema(type=SchemaType.STRING, required=True),
                "action_type_id": Schema(type=SchemaType.STRING, required=True),
                "params": Schema(type=SchemaType.MAP, optional=True),
            },
        ),
    }


def resource_kibana_alert() -> Resource:
    return Resource(
        name=RESOURCE_NAME,
        schema=kibana_alert_schema(),
        create=create_kibana_alert,
        read=read_kibana_alert,
        update=update_kibana_alert,
        delete=delete_kibana_alert,
        importer=import_kibana_alert,
        description="Kibana alert (legacy alerting API, Kibana >= 7.11)",
    )


def create_kibana_alert(data: ResourceData, meta):
    client = meta.client
    ensure_alerting_supported(client)

    alert = expand_alert(data)
    created = post_alert(client, data.id, data.get("space_id"), alert)
    if not created.id:
        raise DecodeError("Kibana did not return an alert id")
    data.set_id(created.id)
    _resource_logger(meta).info(
        "Kibana alert created", extra={"alert_id": created.id, "alert_name": alert.name}
    )


def read_kibana_alert(data: ResourceData, meta):
    client = meta.client
    ensure_alerting_supported(client)

    try:
        alert = get_alert(client, data.id, data.get("space_id"))
    except NotFound:
        _resource_logger(meta).warning(
            f"Kibana Alert ({data.id}) not found, removing from state"
        )
        data.set_id("")
        return

    flatten_alert(alert, data)


def update_kibana_alert(data: ResourceData, meta):
    put_alert(meta.client, data.id, data.get("space_id"), None)


def delete_kibana_alert(data: ResourceData, meta):
    client = meta.client
    ensure_alerting_supported(client)

    delete_alert(client, data.id, data.get("space_id"))
    _resource_logger(meta).info("Kibana alert deleted", extra={"alert_id": data.id})
    data.set_id("")


def import_kibana_alert(data: ResourceData, meta) -> list[ResourceData]:
    # passthrough, the following read fills the attributes
    return [data]
