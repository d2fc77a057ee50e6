"""Core utilities for the JSON-file backed users API."""

from __future__ import annotations

from typing import Any

from .store import StoreError, UserStore


def create_app(*args: Any, **kwargs: Any):
    """Factory function that returns the users API application."""

    from .api import create_app as _create_app

    return _create_app(*args, **kwargs)


__all__ = [
    "StoreError",
    "UserStore",
    "create_app",
]
