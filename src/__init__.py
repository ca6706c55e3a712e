"""Top-level package for the RevSend CRM API."""
from __future__ import annotations

__version__ = "1.0.0"

__all__ = [
    "api",
    "cli",
    "core",
    "domain",
    "scoring",
    "utils",
]
