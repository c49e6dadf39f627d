#!/usr/bin/env python3
#
# BeatWave
# Copyright (c) 2025 Martynas Jocius
#
"""Structured debug event tracking for BeatWave."""

import time
from typing import Any, Dict, List, Optional


class DebugManager:
    """Collects debug events and state changes for the visualizer."""

    def __init__(self):
        self.enabled = False
        self.start_time = time.time()
        self.state_changes: List[Dict[str, Any]] = []
        self.current_state: Dict[str, Dict[str, Any]] = {}

    def enable(self):
        self.enabled = True
        self.debug_log("DEBUG_MODE_ENABLED", "Debug mode activated")

    def disable(self):
        if self.enabled:
            self.debug_log("DEBUG_MODE_DISABLED", "Debug mode deactivated")
        self.enabled = False

    def _runtime(self) -> float:
        return time.time() - self.start_time

    def _emit(self, line: str) -> None:
        """Send a debug line to the TUI log when it is running, stdout otherwise."""
        from ..ui.tui import tui_manager

        if tui_manager.tui_enabled and tui_manager.live_display is not None:
            # Printing while Live owns the screen corrupts the frame
            tui_manager.log(line)
        else:
            print(line)

    def debug_log(self, event_type: str, message: str, data: Optional[Dict[str, Any]] = None):
        """Record a debug event and echo it with its payload."""
        if not self.enabled:
            return

        timestamp = time.time()
        runtime = timestamp - self.start_time
        entry = {
            "timestamp": timestamp,
            "runtime_seconds": round(runtime, 3),
            "event_type": event_type,
            "message": message,
        }
        if data:
            entry["data"] = data
        self.state_changes.append(entry)

        self._emit(f"[DEBUG:{runtime:7.3f}s] {event_type}: {message}")
        for key, value in (data or {}).items():
            self._emit(f"[DEBUG:{runtime:7.3f}s]   {key}: {value}")

    def update_state(self, component: str, key: str, value: Any, description: str = ""):
        """Update tracked state and log the transition."""
        if not self.enabled:
            return

        component_state = self.current_state.setdefault(component, {})
        old_value = component_state.get(key)
        component_state[key] = value

        prefix = f"{description} " if description else ""
        self.debug_log(
            "STATE_CHANGE",
            f"{prefix}{component}.{key}: {old_value} -> {value}",
            {
                "component": component,
                "key": key,
                "old_value": old_value,
                "new_value": value,
            },
        )

    def log_operation(self, operation: str, component: str, details: Optional[Dict[str, Any]] = None):
        if not self.enabled:
            return
        self.debug_log("OPERATION", f"{component}: {operation}", details or {})

    def log_error(
        self,
        error_type: str,
        component: str,
        error_msg: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        if not self.enabled:
            return

        error_data = {"component": component, "error_message": error_msg}
        if details:
            error_data.update(details)
        self.debug_log("ERROR", f"{component}: {error_type} - {error_msg}", error_data)

    def get_current_state(self) -> Dict[str, Any]:
        return {
            "runtime_seconds": round(self._runtime(), 3),
            "debug_enabled": self.enabled,
            "state": {name: dict(values) for name, values in self.current_state.items()},
            "total_state_changes": len(self.state_changes),
        }

    def print_state_summary(self):
        """Dump the tracked state, used on shutdown."""
        if not self.enabled:
            return

        state = self.get_current_state()
        runtime = state["runtime_seconds"]
        stamp = f"[DEBUG:{runtime:7.3f}s]"

        self._emit(f"{stamp} === STATE SUMMARY ===")
        self._emit(f"{stamp} Runtime: {runtime}s")
        self._emit(f"{stamp} Total state changes: {state['total_state_changes']}")
        for component, component_state in state["state"].items():
            self._emit(f"{stamp} {component}:")
            for key, value in component_state.items():
                self._emit(f"{stamp}   {key}: {value}")
        self._emit(f"{stamp} === END STATE SUMMARY ===")


# Global debug manager instance
debug_manager = DebugManager()
