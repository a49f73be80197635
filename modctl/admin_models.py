from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

SERVING = "SERVING"
STOPPED = "STOPPED"


class _Resource(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_body(self) -> dict[str, Any]:
        """JSON body with only the fields that were set."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ManualScaling(_Resource):
    instances: int | None = Field(None, description="Fixed number of instances")


class BasicScaling(_Resource):
    max_instances: int | None = Field(None, alias="maxInstances")
    idle_timeout: str | None = Field(None, alias="idleTimeout")


class AutomaticScaling(_Resource):
    # The admin API carries many tuning knobs here; none of them are read.
    model_config = ConfigDict(populate_by_name=True, extra="allow")


class Version(_Resource):
    id: str | None = None
    name: str | None = None
    serving_status: str | None = Field(None, alias="servingStatus", description="SERVING|STOPPED")
    manual_scaling: ManualScaling | None = Field(None, alias="manualScaling")
    basic_scaling: BasicScaling | None = Field(None, alias="basicScaling")
    automatic_scaling: AutomaticScaling | None = Field(None, alias="automaticScaling")


class TrafficSplit(_Resource):
    shard_by: str | None = Field(None, alias="shardBy")
    allocations: dict[str, float] = Field(default_factory=dict, description="version id -> share in [0, 1]")


class Service(_Resource):
    id: str | None = None
    name: str | None = None
    split: TrafficSplit | None = None


class ListServicesResponse(_Resource):
    services: list[Service] = Field(default_factory=list)
    next_page_token: str | None = Field(None, alias="nextPageToken")


class ListVersionsResponse(_Resource):
    versions: list[Version] = Field(default_factory=list)
    next_page_token: str | None = Field(None, alias="nextPageToken")


class Operation(_Resource):
    """Long-running operation handle returned by mutating calls."""

    name: str | None = None
    done: bool = False
    metadata: dict[str, Any] | None = None
    error: dict[str, Any] | None = None
