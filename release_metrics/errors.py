"""Error types raised by the metrics system."""


class MetricsError(RuntimeError):
    """Base class for all release metrics errors."""


class NotFoundError(MetricsError):
    """A release, its row_counts directory or the metrics root is missing."""


class MetricsIOError(MetricsError):
    """A partition directory or file could not be read."""


class PartitionNameError(MetricsError):
    """A partition directory name is not a valid ``key=value`` segment."""


class ConfigError(MetricsError):
    """Configuration file could not be loaded."""
