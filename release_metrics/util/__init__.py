"""Helpers shared by the CLI and the HTTP server."""

from .llm_client import LLMClient

__all__ = [
    'LLMClient',
]
