from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from alert_issues.errors import DecodeError

AlertStatus = Literal["firing", "resolved"]
IssueState = Literal["open", "closed"]
ReconcileAction = Literal["created", "closed", "noop"]

SUPPORTED_STATUSES: frozenset[str] = frozenset({"firing", "resolved"})


class Alert(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    status: str = ""
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)
    starts_at: datetime | None = Field(default=None, alias="startsAt")
    ends_at: datetime | None = Field(default=None, alias="endsAt")
    generator_url: str = Field(default="", alias="generatorURL")


class AlertNotification(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    group_key: str = Field(alias="groupKey")
    # Kept as a plain string so unknown values reach the reconciler instead of failing decode.
    status: str
    receiver: str = ""
    version: str = ""
    group_labels: dict[str, str] = Field(default_factory=dict, alias="groupLabels")
    common_labels: dict[str, str] = Field(default_factory=dict, alias="commonLabels")
    common_annotations: dict[str, str] = Field(default_factory=dict, alias="commonAnnotations")
    external_url: str = Field(default="", alias="externalURL")
    alerts: list[Alert] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def flatten_data(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        data = value.get("data")
        if not isinstance(data, dict):
            return value
        merged = {key: item for key, item in value.items() if key != "data"}
        merged.update(data)
        return merged

    @property
    def alertname(self) -> str:
        return self.group_labels.get("alertname", "")


class TrackedIssue(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    number: int
    title: str
    state: IssueState = "open"
    html_url: str = ""


def decode_notification(body: bytes | str) -> AlertNotification:
    try:
        return AlertNotification.model_validate_json(body)
    except ValidationError as exc:
        raise DecodeError(f"Invalid webhook payload: {exc.error_count()} error(s): {exc.errors()[0]['msg']}") from exc
