"""Row-count aggregation over partitioned release metrics."""

from .aggregation import MetricsAggregator, merge_totals, top_countries
from .partitions import discover_partitions, parse_partition_segment
from .rows import coerce_count, fold_partition_file
from .types import PartitionPath, PartitionTotals, Summary

__all__ = [
    'MetricsAggregator',
    'PartitionPath',
    'PartitionTotals',
    'Summary',
    'coerce_count',
    'discover_partitions',
    'fold_partition_file',
    'merge_totals',
    'parse_partition_segment',
    'top_countries',
]
