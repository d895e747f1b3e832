"""Release metrics aggregation and LLM context generation.

Walks ``<root>/<release>/row_counts/theme=<THEME>/type=<TYPE>/*.csv`` partition
trees and folds them into per-theme, per-type and per-country totals.
"""

__version__ = "0.1.0"
