"""HTTP interface to the metrics aggregator."""

from .app import build_app
from .server import start_server

__all__ = [
    'build_app',
    'start_server',
]
