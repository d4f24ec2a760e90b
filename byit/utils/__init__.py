"""Utility functions."""

from byit.utils.audit import log_action

__all__ = [
    "log_action",
]
