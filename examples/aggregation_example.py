"""Example of aggregating a small, generated release."""

import asyncio
import csv
import json
from pathlib import Path

from release_metrics.context import render_context
from release_metrics.metrics import MetricsAggregator


RELEASE = "2025-01-22.0"


def build_sample_release(root: Path) -> None:
    """Write a tiny partition tree under ``root``."""
    partitions = {
        ('places', 'place'): [
            ['', '10', 'US'],
            ['removed', '999', 'US'],   # Removal events are not counted
            ['', 'abc', ''],            # Counts as 0 for the Unknown bucket
        ],
        ('buildings', 'building'): [
            ['added', '120', 'US'],
            ['unchanged', '40', 'DE'],
        ],
        ('transportation', 'segment'): [
            ['data_changed', '75', 'FR'],
        ],
    }

    for (theme, type_name), rows in partitions.items():
        type_dir = root / RELEASE / 'row_counts' / f'theme={theme}' / f'type={type_name}'
        type_dir.mkdir(parents=True, exist_ok=True)
        with open(type_dir / 'part-00000.csv', 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(['change_type', 'total_count', 'country'])
            writer.writerows(rows)


async def aggregate_example():
    """Example: Aggregate a release and render its LLM context."""
    root = Path("output/example_metrics")
    build_sample_release(root)

    config = {
        'metrics': {
            'top_countries': 50,
            'parallel': True,
            'max_concurrent_files': 4,
        },
    }

    aggregator = MetricsAggregator(config)
    summary = await aggregator.aggregate_async(root, RELEASE)

    # Print summary
    print(summary.get_summary_string())
    print(json.dumps(summary.to_dict(), indent=2))

    # Save the context file
    output_file = Path("output") / "context.txt"
    output_file.write_text(render_context(summary, RELEASE), encoding='utf-8')
    print(f"\nContext file saved to: {output_file}")

    return summary


if __name__ == "__main__":
    # Run the example
    result = asyncio.run(aggregate_example())
    print(f"\nTotal Records: {result.total_records:,}")
