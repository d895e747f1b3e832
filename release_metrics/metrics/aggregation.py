"""Metrics aggregation logic."""

import asyncio
import time
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from loguru import logger

from release_metrics.releases import resolve_row_counts_dir
from .partitions import discover_partitions
from .rows import fold_partition_file
from .types import PartitionPath, PartitionTotals, Summary


DEFAULT_TOP_COUNTRIES = 50
DEFAULT_MAX_CONCURRENT_FILES = 8


def top_countries(counts: Dict[str, int], limit: int = DEFAULT_TOP_COUNTRIES) -> Dict[str, int]:
    """Keep the ``limit`` largest country buckets, largest first.

    Ties are ordered by country name so the selection does not depend on
    the order partitions were merged in.
    """
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return dict(ranked[:limit])


def merge_totals(subtotals: Iterable[PartitionTotals]) -> PartitionTotals:
    """Merge per-file subtotals into a fresh accumulator."""
    merged = PartitionTotals()
    for subtotal in subtotals:
        merged.merge(subtotal)
    return merged


class MetricsAggregator:
    """Aggregates a release's row-count partitions into a Summary."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """Initialize aggregator with configuration.

        Args:
            config: Configuration dictionary (see ``release_metrics.config``)
        """
        self.config = config or {}

        metrics_config = self.config.get('metrics', {})
        self.top_countries = metrics_config.get('top_countries', DEFAULT_TOP_COUNTRIES)
        self.parallel = metrics_config.get('parallel', True)
        self.max_concurrent_files = metrics_config.get(
            'max_concurrent_files', DEFAULT_MAX_CONCURRENT_FILES
        )

    def aggregate(self, root: Union[str, Path], release: str) -> Summary:
        """Aggregate a release from synchronous code.

        Must not be called from inside a running event loop; use
        :meth:`aggregate_async` there.
        """
        return asyncio.run(self.aggregate_async(root, release))

    async def aggregate_async(self, root: Union[str, Path], release: str) -> Summary:
        """Aggregate all partitions of a release.

        Args:
            root: Metrics root directory holding one directory per release
            release: Release identifier, e.g. ``2025-01-22.0``

        Returns:
            Summary with the country breakdown truncated to the top N

        Raises:
            NotFoundError: If ``root/release/row_counts`` does not exist
            MetricsIOError: If a partition cannot be listed or read
        """
        start_time = time.time()

        row_counts_dir = resolve_row_counts_dir(Path(root), release)
        partitions = discover_partitions(row_counts_dir)

        subtotals = await self.fold_partitions(partitions)
        totals = merge_totals(subtotals)
        summary = self.finalize(totals, release=release, partitions_processed=len(partitions))

        logger.info(
            f"Aggregated release {release}: {summary.total_records:,} records from "
            f"{len(partitions)} partitions in {(time.time() - start_time) * 1000:.0f} ms"
        )
        return summary

    async def fold_partitions(self, partitions: List[PartitionPath]) -> List[PartitionTotals]:
        """Fold every partition into its own subtotal.

        In parallel mode each file is read in a worker thread, at most
        ``max_concurrent_files`` at a time. Results keep the input order.
        """
        if self.parallel:
            semaphore = asyncio.Semaphore(max(1, self.max_concurrent_files))

            async def rate_limited_fold(partition: PartitionPath) -> PartitionTotals:
                async with semaphore:
                    return await asyncio.to_thread(fold_partition_file, partition)

            return list(await asyncio.gather(*[
                rate_limited_fold(partition) for partition in partitions
            ]))

        subtotals: List[PartitionTotals] = []
        for partition in partitions:
            subtotals.append(await asyncio.to_thread(fold_partition_file, partition))
        return subtotals

    def finalize(
        self,
        totals: PartitionTotals,
        release: Optional[str] = None,
        partitions_processed: int = 0,
    ) -> Summary:
        """Freeze merged totals into a Summary, truncating countries."""
        return Summary(
            total_records=totals.total_records,
            theme_counts=dict(totals.theme_counts),
            type_counts=dict(totals.type_counts),
            country_counts=top_countries(totals.country_counts, self.top_countries),
            release=release,
            partitions_processed=partitions_processed,
        )
