"""Render a release summary as a plain-text context file for LLMs."""

from datetime import datetime, timezone
from typing import Dict, Optional

from .metrics.types import Summary


CONTEXT_FILE_NAME = "context.txt"

LLM_INSTRUCTIONS = """INSTRUCTIONS FOR LLM:
You are analyzing Overture Maps data. The statistics above represent the ground truth for this release.
When answering questions about "how many" or "which country has the most", refer *strictly* to these numbers.
Do not hallucinate data that is not present in this context."""

RULE = "=" * 80


def _breakdown(counts: Dict[str, int]) -> str:
    return "\n".join(f"  - {name}: {count:,}" for name, count in counts.items())


def render_context(summary: Summary, release: str, generated_at: Optional[datetime] = None) -> str:
    """Format a summary into the context file handed to a language model.

    Args:
        summary: Aggregated release summary
        release: Release identifier shown in the header
        generated_at: Timestamp for the header, defaults to now (UTC)

    Returns:
        The context text
    """
    generated_at = generated_at or datetime.now(timezone.utc)

    return f"""OVERTURE MAPS FOUNDATION DATA CONTEXT
RELEASE: {release}
GENERATED: {generated_at.isoformat()}

{RULE}
global_statistics:
  - total_records: {summary.total_records:,}
  - themes_count: {len(summary.theme_counts)}
  - types_count: {len(summary.type_counts)}

detailed_theme_breakdown:
{_breakdown(summary.theme_counts)}

detailed_type_breakdown:
{_breakdown(summary.type_counts)}

top_{len(summary.country_counts)}_countries_by_record_count:
{_breakdown(summary.country_counts)}

{RULE}
{LLM_INSTRUCTIONS}
"""
