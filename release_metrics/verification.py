"""Cross-check aggregated row counts against per-release summary statistics.

The upstream pipeline also publishes ``theme_column_summary_stats/<release>*.csv``
files with one ``total_count`` per theme/type. Summing those gives an
independent expected total to compare the partition aggregation against.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from loguru import logger

from .errors import MetricsIOError, NotFoundError
from .metrics.aggregation import MetricsAggregator
from .metrics.rows import coerce_count, iter_records


DEFAULT_TOLERANCE_PERCENT = 2.0


@dataclass
class VerificationReport:
    """Expected vs. actual totals for one release."""
    release: str
    expected_total: int
    actual_total: int
    discrepancy_percent: float
    tolerance_percent: float
    passed: bool
    expected_theme_counts: Dict[str, int] = field(default_factory=dict)
    actual_theme_counts: Dict[str, int] = field(default_factory=dict)
    summary_files: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'release': self.release,
            'expected': {
                'total': self.expected_total,
                'themes': dict(self.expected_theme_counts),
            },
            'actual': {
                'total': self.actual_total,
                'themes': dict(self.actual_theme_counts),
            },
            'discrepancy_percent': self.discrepancy_percent,
            'tolerance_percent': self.tolerance_percent,
            'passed': self.passed,
            'summary_files': list(self.summary_files),
        }

    def get_summary_string(self) -> str:
        """Get human-readable summary."""
        verdict = "SUCCESS" if self.passed else "FAILURE"
        relation = "<" if self.passed else ">="
        return f"""
{'='*60}
Verification: {self.release}
{'='*60}
Expected Total: {self.expected_total:,} ({len(self.summary_files)} summary files)
Actual Total:   {self.actual_total:,}
Expected By Theme: {self.expected_theme_counts}
Actual By Theme:   {self.actual_theme_counts}

{verdict}: Discrepancy is {self.discrepancy_percent:.4f}% ({relation} {self.tolerance_percent}%)
{'='*60}
"""


def discrepancy_percent(expected: int, actual: int) -> float:
    """Absolute difference as a percentage of ``expected`` (0 when expected is 0)."""
    if expected <= 0:
        return 0.0
    return abs(expected - actual) / expected * 100


def load_expected_counts(summary_stats_dir: Path, release: str) -> Tuple[int, Dict[str, int], List[str]]:
    """Sum ``total_count`` across a release's summary statistics files.

    Returns:
        (total, per-theme totals, file names read)

    Raises:
        NotFoundError: If the summary statistics directory does not exist
        MetricsIOError: If a summary file cannot be read
    """
    if not summary_stats_dir.is_dir():
        raise NotFoundError(f"Summary stats directory not found at {summary_stats_dir}")

    summary_files = sorted(
        p for p in summary_stats_dir.iterdir()
        if p.name.startswith(release) and p.name.endswith('.csv')
    )

    total = 0
    theme_counts: Dict[str, int] = {}
    for path in summary_files:
        try:
            with path.open("r", encoding="utf-8-sig", errors="replace", newline="") as handle:
                for record in iter_records(handle):
                    count = coerce_count(record.get('total_count'))
                    theme = record.get('theme') or "Unknown"
                    total += count
                    theme_counts[theme] = theme_counts.get(theme, 0) + count
        except OSError as e:
            raise MetricsIOError(f"Failed to read summary stats {path}: {e}") from e

    return total, theme_counts, [p.name for p in summary_files]


def verify_release(
    root: Union[str, Path],
    release: str,
    summary_stats_dir: Union[str, Path],
    tolerance_percent: float = DEFAULT_TOLERANCE_PERCENT,
    aggregator: Optional[MetricsAggregator] = None,
) -> VerificationReport:
    """Compare the aggregated release total with its summary statistics.

    Args:
        root: Metrics root directory
        release: Release identifier
        summary_stats_dir: Directory holding ``<release>*.csv`` summary files
        tolerance_percent: Maximum accepted discrepancy (exclusive)
        aggregator: Aggregator to use, a default one if omitted

    Returns:
        VerificationReport; ``passed`` is False when the discrepancy
        reaches the tolerance
    """
    expected_total, expected_themes, files = load_expected_counts(Path(summary_stats_dir), release)
    logger.info(f"Expected {expected_total:,} records for {release} from {len(files)} summary files")

    aggregator = aggregator or MetricsAggregator()
    summary = aggregator.aggregate(root, release)

    discrepancy = discrepancy_percent(expected_total, summary.total_records)
    passed = discrepancy < tolerance_percent
    if not passed:
        logger.warning(f"Release {release} discrepancy {discrepancy:.4f}% exceeds {tolerance_percent}%")

    return VerificationReport(
        release=release,
        expected_total=expected_total,
        actual_total=summary.total_records,
        discrepancy_percent=discrepancy,
        tolerance_percent=tolerance_percent,
        passed=passed,
        expected_theme_counts=expected_themes,
        actual_theme_counts=dict(summary.theme_counts),
        summary_files=files,
    )
