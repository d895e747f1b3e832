from __future__ import annotations

from datetime import datetime, timezone

from release_metrics.context import render_context
from release_metrics.metrics import Summary


def _summary() -> Summary:
    return Summary(
        total_records=1234567,
        theme_counts={"places": 1234000, "buildings": 567},
        type_counts={"places/place": 1234000, "buildings/building": 567},
        country_counts={"US": 1000000, "Unknown": 234567},
    )


def test_render_context_sections() -> None:
    text = render_context(_summary(), "2025-01-22.0", datetime(2025, 2, 1, tzinfo=timezone.utc))
    lines = text.splitlines()

    assert lines[0] == "OVERTURE MAPS FOUNDATION DATA CONTEXT"
    assert lines[1] == "RELEASE: 2025-01-22.0"
    assert lines[2] == "GENERATED: 2025-02-01T00:00:00+00:00"
    assert "  - total_records: 1,234,567" in lines
    assert "  - themes_count: 2" in lines
    assert "  - places: 1,234,000" in lines
    assert "  - buildings/building: 567" in lines
    assert "top_2_countries_by_record_count:" in lines
    assert "  - Unknown: 234,567" in lines
    assert "INSTRUCTIONS FOR LLM:" in lines
    assert text.endswith("Do not hallucinate data that is not present in this context.\n")


def test_render_context_keeps_country_order() -> None:
    text = render_context(_summary(), "2025-01-22.0")
    assert text.index("  - US: 1,000,000") < text.index("  - Unknown: 234,567")
