from typing import Any, Optional

from pydantic import BaseModel, Extra, Field, validator

# fields Kibana computes, parsed from responses but never sent back
COMPUTED_FIELDS = {
    "id",
    "created_by",
    "updated_by",
    "created_at",
    "updated_at",
    "api_key_owner",
    "mute_all",
    "muted_instance_ids",
    "scheduled_task_id",
    "execution_status",
}


class KibanaAlertSchedule(BaseModel):
    interval: str

    class Config:
        extra = Extra.ignore


class KibanaAlertAction(BaseModel):
    group: str
    id: str
    action_type_id: str = Field(alias="actionTypeId")
    params: dict[str, Any] = {}

    @validator("params", pre=True, always=True)
    def params_default(cls, params):
        return params or {}

    class Config:
        extra = Extra.ignore
        allow_population_by_field_name = True


class KibanaAlert(BaseModel):
    """
    A Kibana alert as accepted and returned by /api/alerts/alert.
    """

    name: str
    tags: list[str] = []
    alert_type_id: str = Field(alias="alertTypeId")
    schedule: KibanaAlertSchedule
    throttle: Optional[str] = None
    notify_when: Optional[str] = Field(default=None, alias="notifyWhen")
    enabled: bool = True
    consumer: str
    params: dict[str, Any] = {}
    actions: list[KibanaAlertAction] = []

    id: Optional[str] = None
    created_by: Optional[str] = Field(default=None, alias="createdBy")
    updated_by: Optional[str] = Field(default=None, alias="updatedBy")
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")
    api_key_owner: Optional[str] = Field(default=None, alias="apiKeyOwner")
    mute_all: Optional[bool] = Field(default=None, alias="muteAll")
    muted_instance_ids: Optional[list[str]] = Field(
        default=None, alias="mutedInstanceIds"
    )
    scheduled_task_id: Optional[str] = Field(default=None, alias="scheduledTaskId")
    execution_status: Optional[dict[str, Any]] = Field(
        default=None, alias="executionStatus"
    )

    @validator("tags", "actions", pre=True, always=True)
    def list_default(cls, value):
        return value or []

    @validator("params", pre=True, always=True)
    def params_default(cls, params):
        return params or {}

    class Config:
        extra = Extra.ignore
        allow_population_by_field_name = True

    def to_request_body(self) -> dict:
        """The JSON body sent on creation, computed fields left out."""
        return self.dict(by_alias=True, exclude=COMPUTED_FIELDS)
