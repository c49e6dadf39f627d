#!/usr/bin/env python3
#
# BeatWave
# Copyright (c) 2025 Martynas Jocius
#
"""Core visualizer exports for BeatWave."""

import importlib
from typing import Any

_EXPORTS = {
    "BeatClock": "beatwave.core.clock",
    "beat_phase": "beatwave.core.clock",
    "VisualizerSession": "beatwave.core.session",
    "VisualizerSettings": "beatwave.core.settings",
    "WaveStyle": "beatwave.core.waves",
    "render_wave_grid": "beatwave.core.waves",
}

__all__ = list(_EXPORTS)


def __getattr__(name: str) -> Any:
    if name in _EXPORTS:
        module = importlib.import_module(_EXPORTS[name])
        value = getattr(module, name)
        globals()[name] = value
        return value
    raise AttributeError(f"module 'beatwave.core' has no attribute {name!r}")
