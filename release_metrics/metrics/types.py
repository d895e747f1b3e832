"""Type definitions for metrics."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional


UNKNOWN_COUNTRY = "Unknown"
REMOVED_CHANGE_TYPE = "removed"


@dataclass(frozen=True)
class PartitionPath:
    """One CSV part-file located under ``theme=<theme>/type=<type>/``."""
    theme: str
    type: str
    file_name: str
    path: Path

    @property
    def type_key(self) -> str:
        """Key used in the type breakdown (``theme/type``)."""
        return f"{self.theme}/{self.type}"


@dataclass
class PartitionTotals:
    """Running totals for one partition file, or for several merged together.

    Each instance is owned by exactly one task while it is being filled;
    subtotals are combined with :meth:`merge` on a single thread.
    """
    total_records: int = 0
    theme_counts: Dict[str, int] = field(default_factory=dict)
    type_counts: Dict[str, int] = field(default_factory=dict)
    country_counts: Dict[str, int] = field(default_factory=dict)

    def add_row(self, theme: str, type_key: str, country: str, count: int) -> None:
        """Fold one accepted row into the totals."""
        self.total_records += count
        self.theme_counts[theme] = self.theme_counts.get(theme, 0) + count
        self.type_counts[type_key] = self.type_counts.get(type_key, 0) + count
        self.country_counts[country] = self.country_counts.get(country, 0) + count

    def merge(self, other: "PartitionTotals") -> "PartitionTotals":
        """Add another accumulator into this one and return self."""
        self.total_records += other.total_records
        for target, source in (
            (self.theme_counts, other.theme_counts),
            (self.type_counts, other.type_counts),
            (self.country_counts, other.country_counts),
        ):
            for key, value in source.items():
                target[key] = target.get(key, 0) + value
        return self


@dataclass(frozen=True)
class Summary:
    """Aggregated row counts for one release."""

    total_records: int
    theme_counts: Dict[str, int]
    type_counts: Dict[str, int]
    # Top-N countries only, ordered by count descending
    country_counts: Dict[str, int]

    # Metadata
    release: Optional[str] = None
    partitions_processed: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'totalRecords': self.total_records,
            'themeCounts': dict(self.theme_counts),
            'typeCounts': dict(self.type_counts),
            'countryCounts': dict(self.country_counts),
        }

    def get_summary_string(self) -> str:
        """Get human-readable summary."""
        themes = "\n".join(
            f"  {theme:<20} {count:>15,}" for theme, count in self.theme_counts.items()
        )
        return f"""
{'='*60}
Release Summary: {self.release or '-'}
{'='*60}
Total Records: {self.total_records:,}
Partitions:    {self.partitions_processed}

Themes:
{themes}

Types: {len(self.type_counts)}  Countries (top): {len(self.country_counts)}
{'='*60}
"""
