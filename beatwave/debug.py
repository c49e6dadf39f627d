#!/usr/bin/env python3
#
# BeatWave
# Copyright (c) 2025 Martynas Jocius
#
"""Debug switches for BeatWave.

The flag starts from the ``BEATWAVE_DEBUG`` environment variable and can be
flipped at runtime with ``--debug``. Every helper is a no-op while the flag is
off so call sites in the render loop stay cheap.
"""

from __future__ import annotations

import os
from typing import Any, Dict, Optional

from .utils.debug import debug_manager

_TRUTHY = {"1", "true", "yes", "on"}


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    return bool(value)


DEBUG_ENABLED: bool = _as_bool(os.getenv("BEATWAVE_DEBUG", ""))
if DEBUG_ENABLED:
    debug_manager.enable()


def is_debug_enabled() -> bool:
    return DEBUG_ENABLED


def set_debug_mode(enabled: bool) -> None:
    """Toggle debug output and propagate to the debug manager."""
    global DEBUG_ENABLED
    DEBUG_ENABLED = bool(enabled)
    if DEBUG_ENABLED:
        debug_manager.enable()
    else:
        debug_manager.disable()


def debug_log(event_type: str, message: str, data: Optional[Dict[str, Any]] = None) -> None:
    if DEBUG_ENABLED:
        debug_manager.debug_log(event_type, message, data)


def update_state(component: str, key: str, value: Any, description: str = "") -> None:
    if DEBUG_ENABLED:
        debug_manager.update_state(component, key, value, description)


def log_operation(operation: str, component: str, details: Optional[Dict[str, Any]] = None) -> None:
    if DEBUG_ENABLED:
        debug_manager.log_operation(operation, component, details)


def log_error(
    error_type: str,
    component: str,
    error_msg: str,
    details: Optional[Dict[str, Any]] = None,
) -> None:
    if DEBUG_ENABLED:
        debug_manager.log_error(error_type, component, error_msg, details)


__all__ = [
    "DEBUG_ENABLED",
    "debug_log",
    "update_state",
    "log_operation",
    "log_error",
    "debug_manager",
    "is_debug_enabled",
    "set_debug_mode",
]
