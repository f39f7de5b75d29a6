from collections.abc import Mapping
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class HealthStatus(str, Enum):
    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"


class ComponentKind(str, Enum):
    COMPONENT = "component"
    DATASTORE = "datastore"
    SYSTEM = "system"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProbeResult(BaseModel):
    """Outcome of one probe in one cycle."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    status: HealthStatus
    output: str | None = Field(None, description="Failure detail, unset when healthy")
    component_kind: ComponentKind | None = Field(None, serialization_alias="componentType")
    component_id: str | None = Field(None, serialization_alias="componentId")
    observed_at: datetime = Field(default_factory=utcnow, serialization_alias="time")

    @field_validator("output", "component_id")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        return value or None

    @field_serializer("observed_at")
    def _rfc3339(self, value: datetime) -> str:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


# Dependency name -> result of its latest probe run
Snapshot = Mapping[str, ProbeResult]


class HealthReport(BaseModel):
    """Liveness response body."""
    status: HealthStatus = Field(..., description="Aggregate status (pass, warn, fail)")
    version: str | None = Field(None, description="Gateway version")
    output: str | None = None
    description: str | None = None
    details: dict[str, ProbeResult] | None = Field(None, description="Per-dependency results")

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ErrorResponse(BaseModel):
    error: str
