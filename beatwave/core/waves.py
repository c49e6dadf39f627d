#!/usr/bin/env python3
#
# BeatWave
# Copyright (c) 2025 Martynas Jocius
#
"""Wave field renderers.

Each renderer turns an area size, the beat phase and the color inputs into a
full frame of ``WaveCell`` rows. Renderers are pure and share one signature,
so new styles only need an entry in ``WAVE_RENDERERS``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, NamedTuple, Optional, Tuple

from ..utils.colors import BLACK, RGB, WAVE_FALLBACK_COLOR, ColorScheme, resolve_color

BLANK_GLYPH = " "
LINE_GLYPH = "█"

# Linear wave shape
LINEAR_FREQUENCY = 0.2
LINEAR_DRIFT = 0.05  # Slow ambient drift, not a per-beat sweep
LINEAR_MIN_AMPLITUDE = 1.5

# Concentric rings
RING_EXPANSION = 15.0
RING_SPACING = 5.0
ROW_ASPECT = 2.0  # Terminal cells are roughly twice as tall as wide

# (threshold, glyph, tier level); intensity must exceed the threshold
RING_BANDS: Tuple[Tuple[float, str, int], ...] = (
    (0.7, "●", 0),
    (0.5, "◉", 1),
    (0.3, "○", 2),
    (0.15, "·", 3),
)


class WaveCell(NamedTuple):
    glyph: str
    color: RGB


BLANK_CELL = WaveCell(BLANK_GLYPH, BLACK)

Frame = List[List[WaveCell]]


class WaveStyle(Enum):
    LINEAR = "linear"
    RADIAL = "radial"

    @classmethod
    def from_name(cls, name: str) -> "WaveStyle":
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            known = ", ".join(style.value for style in cls)
            raise ValueError(f"Unknown wave style '{name}' (expected one of: {known})") from None


@dataclass(frozen=True)
class Area:
    """Rectangle on the display surface, in character cells."""

    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    def inner(self) -> "Area":
        """Area left inside a one cell border."""
        return Area(
            self.x + 1,
            self.y + 1,
            max(0, self.width - 2),
            max(0, self.height - 2),
        )

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def linear_wave_rows(width: int, height: int, beat_progress: float) -> List[int]:
    """Row index of the lit cell for every column, clamped into the area."""
    if width <= 0 or height <= 0:
        return []

    center_y = height / 2.0
    amplitude = max(height / 5.0, LINEAR_MIN_AMPLITUDE)
    phase_term = beat_progress * LINEAR_DRIFT

    rows = []
    for x in range(width):
        wave_y = _round_half_away(center_y + math.sin(x * LINEAR_FREQUENCY + phase_term) * amplitude)
        rows.append(min(max(wave_y, 0), height - 1))
    return rows


def render_linear_wave(
    width: int,
    height: int,
    beat_progress: float,
    album_color: Optional[RGB] = None,
    scheme: ColorScheme = ColorScheme.CYAN,
) -> Frame:
    """Single flat-colored sine line, one lit cell per column.

    The line is drawn in the album color (bright cyan without one) and does
    not go through the tier resolver, so ``scheme`` is accepted but unused.
    """
    del scheme
    lit = WaveCell(LINE_GLYPH, album_color if album_color is not None else WAVE_FALLBACK_COLOR)
    frame = [[BLANK_CELL] * max(width, 0) for _ in range(max(height, 0))]
    for x, wave_y in enumerate(linear_wave_rows(width, height, beat_progress)):
        frame[wave_y][x] = lit
    return frame


def ring_intensity(x: int, y: int, width: int, height: int, beat_progress: float) -> float:
    """Brightness in ``[0, 1]`` of the ring passing through cell ``(x, y)``."""
    dx = x - width / 2.0
    dy = (y - height / 2.0) * ROW_ASPECT
    dist = math.sqrt(dx * dx + dy * dy)

    wave_phase = (dist - beat_progress * RING_EXPANSION) % RING_SPACING
    if wave_phase < 1.0:
        return max(0.0, 1.0 - wave_phase)
    return 0.0


def ring_band(intensity: float) -> Optional[Tuple[str, int]]:
    """Glyph and tier level for an intensity, ``None`` for the blank band."""
    for threshold, glyph, level in RING_BANDS:
        if intensity > threshold:
            return glyph, level
    return None


def intensity_field(width: int, height: int, beat_progress: float) -> List[List[float]]:
    return [
        [ring_intensity(x, y, width, height, beat_progress) for x in range(width)]
        for y in range(height)
    ]


def render_concentric_waves(
    width: int,
    height: int,
    beat_progress: float,
    album_color: Optional[RGB] = None,
    scheme: ColorScheme = ColorScheme.CYAN,
) -> Frame:
    """Rings expanding from the area center, colored by tier."""
    frame: Frame = []
    for row in intensity_field(width, height, beat_progress):
        cells = []
        for intensity in row:
            band = ring_band(intensity)
            if band is None:
                cells.append(BLANK_CELL)
                continue
            glyph, level = band
            cells.append(WaveCell(glyph, resolve_color(scheme, intensity, level, album_color)))
        frame.append(cells)
    return frame


WaveRenderer = Callable[[int, int, float, Optional[RGB], ColorScheme], Frame]

WAVE_RENDERERS: Dict[WaveStyle, WaveRenderer] = {
    WaveStyle.LINEAR: render_linear_wave,
    WaveStyle.RADIAL: render_concentric_waves,
}


def render_wave_grid(
    style: WaveStyle,
    width: int,
    height: int,
    beat_progress: float,
    album_color: Optional[RGB] = None,
    scheme: ColorScheme = ColorScheme.CYAN,
) -> Frame:
    return WAVE_RENDERERS[style](width, height, beat_progress, album_color, scheme)


def count_lit_cells(frame: Frame) -> int:
    return sum(1 for row in frame for cell in row if cell.glyph != BLANK_GLYPH)
