#!/usr/bin/env python3
#
# BeatWave
# Copyright (c) 2025 Martynas Jocius
#
"""Color schemes, album palettes and tier color resolution for BeatWave."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

RGB = Tuple[int, int, int]

BLACK: RGB = (0, 0, 0)
WAVE_FALLBACK_COLOR: RGB = (0, 255, 255)  # Bright cyan, readable on dark themes
DOMINANT_FALLBACK_COLOR: RGB = (0, 200, 255)

TIER_COUNT = 4

# Per-tier channel scale applied to the album color in the custom scheme
CUSTOM_TIER_FACTORS = (1.0, 0.85, 0.7, 0.5)

PALETTE_SHIFT = 60


class ColorScheme(Enum):
    """Closed set of visualization color schemes."""

    CYAN = "cyan"
    WARM = "warm"
    PURPLE = "purple"
    GREEN = "green"
    SUNSET = "sunset"
    OCEAN = "ocean"
    CUSTOM = "custom"

    @property
    def label(self) -> str:
        return SCHEME_LABELS[self]

    @classmethod
    def from_name(cls, name: str) -> "ColorScheme":
        """Look up a scheme by its value, case-insensitively."""
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            known = ", ".join(scheme.value for scheme in cls)
            raise ValueError(f"Unknown color scheme '{name}' (expected one of: {known})") from None


SCHEME_LABELS: Dict[ColorScheme, str] = {
    ColorScheme.CYAN: "Cyan (Default)",
    ColorScheme.WARM: "Warm (Orange/Red)",
    ColorScheme.PURPLE: "Purple/Magenta",
    ColorScheme.GREEN: "Green/Emerald",
    ColorScheme.SUNSET: "Sunset Gradient",
    ColorScheme.OCEAN: "Ocean (Deep Blue)",
    ColorScheme.CUSTOM: "Album Art",
}

# Tier 0 is the brightest band, tier 3 the dimmest
SCHEME_BASE_COLORS: Dict[ColorScheme, Tuple[RGB, RGB, RGB, RGB]] = {
    ColorScheme.CYAN: ((0, 255, 255), (0, 200, 255), (0, 150, 200), (0, 100, 150)),
    ColorScheme.WARM: ((255, 100, 0), (255, 150, 50), (200, 100, 0), (150, 70, 0)),
    ColorScheme.PURPLE: ((200, 50, 255), (180, 80, 230), (150, 50, 200), (100, 30, 150)),
    ColorScheme.GREEN: ((50, 255, 150), (50, 220, 120), (30, 180, 100), (20, 120, 70)),
    ColorScheme.SUNSET: ((255, 100, 150), (255, 150, 100), (200, 100, 100), (150, 70, 80)),
    ColorScheme.OCEAN: ((0, 150, 255), (20, 120, 220), (10, 80, 180), (5, 50, 120)),
}

BUILTIN_SCHEMES: Tuple[ColorScheme, ...] = tuple(SCHEME_BASE_COLORS)


def get_default_palette() -> List[RGB]:
    """Cyan-family tones used when no album art is available."""
    return [
        (0, 255, 255),
        (0, 200, 255),
        (50, 150, 255),
        (100, 100, 255),
    ]


@dataclass
class AlbumPalette:
    """Ordered, never-empty set of colors derived from album art."""

    colors: List[RGB] = field(default_factory=get_default_palette)

    def __post_init__(self):
        self.colors = [tuple(int(channel) for channel in color) for color in self.colors]
        if not self.colors:
            self.colors = get_default_palette()

    @classmethod
    def default(cls) -> "AlbumPalette":
        return cls(get_default_palette())

    @classmethod
    def from_colors(cls, colors: Optional[Sequence[RGB]]) -> "AlbumPalette":
        """Build a palette, falling back to the default for empty input."""
        return cls(list(colors or []))

    @property
    def primary(self) -> RGB:
        return self.colors[0]

    def __len__(self) -> int:
        return len(self.colors)

    def __iter__(self):
        return iter(self.colors)


def saturating_add(channel: int, amount: int) -> int:
    return min(255, channel + amount)


def saturating_sub(channel: int, amount: int) -> int:
    return max(0, channel - amount)


def _blend(a: int, b: int) -> int:
    """Mix two channels 80/20, truncating like an integer cast."""
    return min(255, int(a * 0.8 + b * 0.2))


def generate_color_palette(r: int, g: int, b: int) -> AlbumPalette:
    """Expand one base color into a six color gradient.

    The order is fixed: base, complement, two analogous blends (rotating the
    channels in opposite directions), a lighter and a darker variant.
    """
    colors = [
        (r, g, b),
        (255 - r, 255 - g, 255 - b),
        (_blend(r, g), _blend(g, b), _blend(b, r)),
        (_blend(b, r), _blend(r, g), _blend(g, b)),
        (
            saturating_add(r, PALETTE_SHIFT),
            saturating_add(g, PALETTE_SHIFT),
            saturating_add(b, PALETTE_SHIFT),
        ),
        (
            saturating_sub(r, PALETTE_SHIFT),
            saturating_sub(g, PALETTE_SHIFT),
            saturating_sub(b, PALETTE_SHIFT),
        ),
    ]
    return AlbumPalette(colors)


def apply_intensity(color: RGB, intensity: float) -> RGB:
    """Scale every channel by ``intensity``, truncating toward zero."""
    return (
        int(color[0] * intensity),
        int(color[1] * intensity),
        int(color[2] * intensity),
    )


def custom_tier_color(album_color: RGB, level: int) -> RGB:
    factor = CUSTOM_TIER_FACTORS[min(max(level, 0), TIER_COUNT - 1)]
    return apply_intensity(album_color, factor)


def scheme_tier_color(scheme: ColorScheme, level: int) -> RGB:
    return SCHEME_BASE_COLORS[scheme][min(max(level, 0), TIER_COUNT - 1)]


def resolve_color(
    scheme: ColorScheme,
    intensity: float,
    level: int,
    album_color: Optional[RGB] = None,
) -> RGB:
    """Map a scheme, intensity and tier level to a concrete RGB color.

    ``intensity`` is expected in ``[0, 1]``; it is not clamped here. The custom
    scheme falls back to cyan when no album color is known.
    """
    if scheme is ColorScheme.CUSTOM:
        if album_color is None:
            return resolve_color(ColorScheme.CYAN, intensity, level, None)
        return apply_intensity(custom_tier_color(album_color, level), intensity)

    return apply_intensity(scheme_tier_color(scheme, level), intensity)


def rgb_style(color: RGB) -> str:
    """Rich style string for a foreground RGB color."""
    r, g, b = color
    return f"rgb({r},{g},{b})"


def scheme_cycle(album_color: Optional[RGB] = None) -> List[ColorScheme]:
    """Schemes reachable with next/previous; custom only when album art is known."""
    schemes = list(BUILTIN_SCHEMES)
    if album_color is not None:
        schemes.append(ColorScheme.CUSTOM)
    return schemes
