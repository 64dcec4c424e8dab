"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "marquee",
    "environment": "dev",
    "http": {
        "timeout_seconds": 10.0,
        "user_agent": "Marquee/0.1.0",
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "catalog": {
        "search_max_results": 100,
        "popular_max_results": 50,
        "min_query_length": 2,
        "max_concurrent_providers": 5,
    },
    "swarm": {
        "port": 8888,
        "poll_interval_seconds": 1.0,
        "poll_max_attempts": 30,
    },
    "player": {
        "fullscreen": True,
    },
}
