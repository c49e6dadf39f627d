#!/usr/bin/env python3
#
# BeatWave
# Copyright (c) 2025 Martynas Jocius
#
"""Album art loading and palette derivation for BeatWave."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional, Tuple, Union

import numpy as np
from PIL import Image
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

if TYPE_CHECKING:  # pragma: no cover - typing helpers
    from watchdog.events import FileSystemEvent

from ..debug import debug_log, log_error, log_operation
from .colors import DOMINANT_FALLBACK_COLOR, RGB, AlbumPalette, generate_color_palette

SAMPLE_SIZE = (64, 64)
SAMPLE_STRIDE = 4
# Exclusive brightness bounds; outside them pixels are treated as background
MIN_BRIGHTNESS = 20
MAX_BRIGHTNESS = 235

ImageSource = Union[Image.Image, np.ndarray]


def _select_resample_filter(image_module):
    """Pick the nearest-neighbour filter across Pillow API generations."""
    resampling_attr = getattr(image_module, "Resampling", None)
    if resampling_attr is not None:
        candidate = getattr(resampling_attr, "NEAREST", None)
        if candidate is not None:
            return candidate

    candidate = getattr(image_module, "NEAREST", None)
    if candidate is not None:
        return candidate
    return 0


def _fit_within(size: Tuple[int, int], bounds: Tuple[int, int]) -> Tuple[int, int]:
    """Largest size with the same aspect ratio that fits inside ``bounds``."""
    width, height = size
    max_width, max_height = bounds
    if width <= 0 or height <= 0:
        return (0, 0)
    scale = min(max_width / width, max_height / height)
    return (max(1, round(width * scale)), max(1, round(height * scale)))


def _to_rgb_image(image: ImageSource) -> Image.Image:
    if isinstance(image, np.ndarray):
        if image.ndim != 3 or image.shape[2] < 3:
            raise ValueError("Image array must have shape (H, W, 3)")
        return Image.fromarray(np.ascontiguousarray(image[..., :3]).astype(np.uint8))
    if image.mode != "RGB":
        return image.convert("RGB")
    return image


def extract_dominant_color(image: ImageSource) -> RGB:
    """Estimate the representative color of an already decoded image.

    The image is shrunk to fit 64x64, every 4th pixel on both axes is
    sampled, near-black and near-white samples are dropped and the survivors
    are averaged per channel. Returns a mid-bright cyan when nothing survives.
    """
    img = _to_rgb_image(image)
    target = _fit_within(img.size, SAMPLE_SIZE)
    if target == (0, 0):
        return DOMINANT_FALLBACK_COLOR
    if target != img.size:
        img = img.resize(target, resample=_select_resample_filter(Image))

    pixels = np.asarray(img, dtype=np.uint16)
    samples = pixels[::SAMPLE_STRIDE, ::SAMPLE_STRIDE].reshape(-1, 3)
    brightness = samples.sum(axis=1) // 3
    kept = samples[(brightness > MIN_BRIGHTNESS) & (brightness < MAX_BRIGHTNESS)]

    if len(kept) == 0:
        return DOMINANT_FALLBACK_COLOR

    totals = kept.astype(np.uint64).sum(axis=0)
    count = len(kept)
    return (int(totals[0] // count), int(totals[1] // count), int(totals[2] // count))


def derive_palette(image: ImageSource) -> AlbumPalette:
    """Dominant color of ``image`` expanded into a six color palette."""
    return generate_color_palette(*extract_dominant_color(image))


def load_album_art(path: Union[str, Path]) -> Image.Image:
    """Decode an album art file into an RGB image. Decode errors propagate."""
    with Image.open(path) as img:
        img.load()
        return img.convert("RGB")


class AlbumArtLoader:
    """Loads album art from disk and keeps the last derived palette."""

    def __init__(self, log: Optional[Callable[[str], None]] = None):
        self.last_error: Optional[str] = None
        self.path: Optional[Path] = None
        self.palette: Optional[AlbumPalette] = None
        self._log = log

    @property
    def dominant_color(self) -> Optional[RGB]:
        return self.palette.primary if self.palette is not None else None

    def load(self, path: Union[str, Path]) -> Optional[AlbumPalette]:
        """Derive the palette for ``path``; keeps the previous one on failure."""
        art_path = Path(path)
        try:
            image = load_album_art(art_path)
            palette = derive_palette(image)
        except (OSError, ValueError) as exc:
            self.last_error = f"Album art error: {exc}"
            log_error("ALBUM_ART_LOAD_FAILED", "artwork", self.last_error, {"path": str(art_path)})
            if self._log:
                self._log(self.last_error)
            return None

        self.path = art_path
        self.palette = palette
        self.last_error = None
        log_operation(
            "palette_derived",
            "artwork",
            {"path": str(art_path), "size": image.size, "dominant": palette.primary},
        )
        if self._log:
            r, g, b = palette.primary
            self._log(f"Album art loaded: {art_path.name} (dominant rgb({r},{g},{b}))")
        return palette


class AlbumArtFileHandler(FileSystemEventHandler):
    """Re-derive the palette whenever the watched album art file changes."""

    def __init__(self, loader: AlbumArtLoader, path: Path, on_palette: Callable[[AlbumPalette], None]):
        super().__init__()
        self.loader = loader
        self.path = path.resolve()
        self.on_palette = on_palette

    def _matches(self, event: "FileSystemEvent") -> bool:
        if event.is_directory:
            return False
        candidates = [getattr(event, "src_path", None), getattr(event, "dest_path", None)]
        return any(c and Path(c).resolve() == self.path for c in candidates)

    def on_modified(self, event: "FileSystemEvent") -> None:
        if self._matches(event):
            self._reload()

    def on_created(self, event: "FileSystemEvent") -> None:
        if self._matches(event):
            self._reload()

    def on_moved(self, event: "FileSystemEvent") -> None:
        if self._matches(event):
            self._reload()

    def _reload(self) -> None:
        palette = self.loader.load(self.path)
        if palette is not None:
            self.on_palette(palette)


class AlbumArtWatcher:
    """Watch an album art file on a watchdog observer thread."""

    def __init__(self, loader: AlbumArtLoader, path: Union[str, Path], on_palette: Callable[[AlbumPalette], None]):
        self.path = Path(path)
        self.handler = AlbumArtFileHandler(loader, self.path, on_palette)
        self._observer: Optional[Observer] = None
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._observer is not None

    def start(self) -> None:
        with self._lock:
            if self._observer is not None:
                return
            observer = Observer()
            observer.schedule(self.handler, str(self.path.resolve().parent), recursive=False)
            observer.daemon = True
            observer.start()
            self._observer = observer
        debug_log("ALBUM_ART_WATCH", "Watching album art for changes", {"path": str(self.path)})

    def stop(self) -> None:
        with self._lock:
            observer, self._observer = self._observer, None
        if observer is not None:
            observer.stop()
            observer.join(timeout=2)
