"""SQL recommended elastic pool values."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from armkit.pipeline.codec import ArmModel


class RecommendedElasticPoolMetric(ArmModel):
    """One observation of a recommended pool's resource usage."""

    date_time: datetime | None = None
    dtu: float | None = None
    size_gb: float | None = Field(default=None, alias="sizeGB")


class DatabaseProperties(ArmModel):
    collation: str | None = None
    creation_date: datetime | None = None
    edition: str | None = None
    status: str | None = None
    max_size_bytes: str | None = None
    elastic_pool_name: str | None = None
    requested_service_objective_name: str | None = None
    current_service_objective_id: str | None = None


class DatabaseInner(ArmModel):
    id: str | None = None
    name: str | None = None
    type: str | None = None
    location: str | None = None
    tags: dict[str, str] | None = None
    properties: DatabaseProperties = Field(default_factory=DatabaseProperties)


class RecommendedElasticPoolProperties(ArmModel):
    database_edition: str | None = None
    dtu: float | None = None
    database_dtu_min: float | None = None
    database_dtu_max: float | None = None
    storage_mb: float | None = Field(default=None, alias="storageMB")
    observation_period_start: datetime | None = None
    observation_period_end: datetime | None = None
    max_observed_dtu: float | None = None
    max_observed_storage_mb: float | None = Field(default=None, alias="maxObservedStorageMB")
    databases: list[DatabaseInner] | None = None
    metrics: list[RecommendedElasticPoolMetric] | None = None


class RecommendedElasticPoolInner(ArmModel):
    """A pool the service recommends for databases on one server."""

    id: str | None = None
    name: str | None = None
    type: str | None = None
    properties: RecommendedElasticPoolProperties = Field(
        default_factory=RecommendedElasticPoolProperties
    )
