"""
Default configuration values.
"""

from __future__ import annotations

LOADING_DEFAULTS: dict[str, float] = {"start_delay": 0.33, "end_delay": 0.10}

DEFAULTS: dict[str, object] = {
    "loading": LOADING_DEFAULTS,
    "logging": {"level": "info"},
    "demo": {"latency": 1.2, "initial_fragment": "home"},
}
