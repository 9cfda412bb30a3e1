"""Read-only analysis of parsed SDF delay files."""

from sdf_delay.analysis.query import query
from sdf_delay.analysis.stats import SDFStats, compute_stats

__all__ = [
    # query
    "query",
    # stats
    "SDFStats",
    "compute_stats",
]
