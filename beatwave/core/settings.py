#!/usr/bin/env python3
#
# BeatWave
# Copyright (c) 2025 Martynas Jocius
#
"""Visualizer settings loaded from JSON configuration files."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from .. import BPM_MAX, BPM_MIN, BPM_STEP, DEFAULT_BPM, TICK_INTERVAL
from ..utils.colors import ColorScheme
from .waves import WaveStyle

MIN_TICK_MS = 10
MAX_TICK_MS = 1000

KNOWN_KEYS = {
    "name",
    "description",
    "bpm",
    "bpm_range",
    "bpm_step",
    "scheme",
    "style",
    "show_border",
    "tick_ms",
    "album_art",
    "effects",
}


def _number(data: Mapping[str, Any], key: str, default: float) -> float:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"'{key}' must be a number, got {value!r}")
    return float(value)


def _flag(data: Mapping[str, Any], key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ValueError(f"'{key}' must be true or false, got {value!r}")
    return value


@dataclass
class VisualizerSettings:
    name: str = "Default"
    description: str = "No description"
    bpm: float = DEFAULT_BPM
    bpm_range: Tuple[float, float] = (BPM_MIN, BPM_MAX)
    bpm_step: float = BPM_STEP
    scheme: ColorScheme = ColorScheme.CYAN
    style: WaveStyle = WaveStyle.LINEAR
    show_border: bool = True
    tick_ms: int = int(TICK_INTERVAL * 1000)
    album_art: Optional[Path] = None
    effects: bool = True
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def tick_interval(self) -> float:
        return self.tick_ms / 1000.0

    @classmethod
    def from_mapping(
        cls, data: Mapping[str, Any], base_path: Optional[Path] = None
    ) -> "VisualizerSettings":
        """Build settings from parsed config data, raising ``ValueError`` on bad values."""
        defaults = cls()

        bpm_range = data.get("bpm_range", list(defaults.bpm_range))
        if (
            not isinstance(bpm_range, (list, tuple))
            or len(bpm_range) != 2
            or not all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in bpm_range)
        ):
            raise ValueError(f"'bpm_range' must be a [min, max] pair of numbers, got {bpm_range!r}")
        bpm_min, bpm_max = float(bpm_range[0]), float(bpm_range[1])
        bpm = _number(data, "bpm", defaults.bpm)
        bpm_step = _number(data, "bpm_step", defaults.bpm_step)
        tick_ms = _number(data, "tick_ms", defaults.tick_ms)

        scheme = ColorScheme.from_name(data.get("scheme", defaults.scheme.value))
        style = WaveStyle.from_name(data.get("style", defaults.style.value))

        album_art = data.get("album_art")
        art_path = None
        if album_art is not None:
            if not isinstance(album_art, str) or not album_art.strip():
                raise ValueError(f"'album_art' must be a file path, got {album_art!r}")
            art_path = Path(album_art).expanduser()
            if not art_path.is_absolute() and base_path is not None:
                art_path = base_path / art_path

        return cls(
            name=str(data.get("name", defaults.name)),
            description=str(data.get("description", defaults.description)),
            bpm=bpm,
            bpm_range=(bpm_min, bpm_max),
            bpm_step=bpm_step,
            scheme=scheme,
            style=style,
            show_border=_flag(data, "show_border", defaults.show_border),
            tick_ms=int(tick_ms),
            album_art=art_path,
            effects=_flag(data, "effects", defaults.effects),
            extra={k: v for k, v in data.items() if k not in KNOWN_KEYS},
        ).validate()

    def with_overrides(self, **overrides: Any) -> "VisualizerSettings":
        """Copy with every non-``None`` override applied, re-checking value ranges."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes).validate()

    def validate(self) -> "VisualizerSettings":
        """Check value ranges; returns ``self`` or raises ``ValueError``."""
        bpm_min, bpm_max = self.bpm_range
        if not 0 < bpm_min <= bpm_max:
            raise ValueError(f"'bpm_range' must satisfy 0 < min <= max, got {list(self.bpm_range)!r}")
        if self.bpm <= 0:
            raise ValueError(f"'bpm' must be positive, got {self.bpm}")
        if self.bpm_step <= 0:
            raise ValueError(f"'bpm_step' must be positive, got {self.bpm_step}")
        if not MIN_TICK_MS <= self.tick_ms <= MAX_TICK_MS:
            raise ValueError(f"'tick_ms' must be between {MIN_TICK_MS} and {MAX_TICK_MS}, got {self.tick_ms}")
        return self
