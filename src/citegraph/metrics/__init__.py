"""
Metrics Module
==============

This module provides aggregate statistics and partition quality scores.

Submodules
----------
statistics
    Counts, density and degree distribution summaries
quality
    Modularity, per-community cluster quality, partition comparison
"""

from .statistics import (
    graph_statistics,
    compute_degree_summary,
    degree_distribution,
)
from .quality import (
    modularity,
    cluster_quality,
    compute_nmi,
    compute_ari,
    compare_partitions,
)

__all__ = [
    # Statistics
    "graph_statistics",
    "compute_degree_summary",
    "degree_distribution",
    # Quality
    "modularity",
    "cluster_quality",
    "compute_nmi",
    "compute_ari",
    "compare_partitions",
]
