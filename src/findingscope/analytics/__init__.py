"""Aggregation engine."""

from findingscope.analytics.aggregator import (
    compute_resource_distribution,
    compute_severity_distribution,
    compute_stats,
    compute_timeline,
)

__all__ = [
    "compute_resource_distribution",
    "compute_severity_distribution",
    "compute_stats",
    "compute_timeline",
]
