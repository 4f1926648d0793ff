"""SQL recommended elastic pools."""

from armkit.sql.models import (
    DatabaseInner,
    DatabaseProperties,
    RecommendedElasticPoolInner,
    RecommendedElasticPoolMetric,
    RecommendedElasticPoolProperties,
)
from armkit.sql.operations import RecommendedElasticPoolsOperations

__all__ = [
    "DatabaseInner",
    "DatabaseProperties",
    "RecommendedElasticPoolInner",
    "RecommendedElasticPoolMetric",
    "RecommendedElasticPoolProperties",
    "RecommendedElasticPoolsOperations",
]
