#!/usr/bin/env python3
#
# BeatWave
# Copyright (c) 2025 Martynas Jocius
#
"""Visualizer session state driven by the render loop."""

from __future__ import annotations

import threading
from collections import deque
from typing import Callable, Deque, Dict, List, Optional

from ..debug import debug_log, update_state
from ..utils.colors import RGB, AlbumPalette, ColorScheme, scheme_cycle
from .clock import BeatClock
from .effects import EffectsState, create_effects
from .settings import VisualizerSettings
from .waves import Area, Frame, WaveStyle, render_wave_grid

CMD_QUIT = "quit"
CMD_NEXT_SCHEME = "next_scheme"
CMD_PREV_SCHEME = "prev_scheme"
CMD_BPM_UP = "bpm_up"
CMD_BPM_DOWN = "bpm_down"
CMD_TOGGLE_STYLE = "toggle_style"
CMD_TOGGLE_BORDER = "toggle_border"
CMD_TOGGLE_LOG = "toggle_log"
CMD_TOGGLE_HELP = "toggle_help"
CMD_CLOSE_HELP = "close_help"

KEY_COMMANDS: Dict[str, str] = {
    "q": CMD_QUIT,
    "ctrl+c": CMD_QUIT,
    "right": CMD_NEXT_SCHEME,
    "n": CMD_NEXT_SCHEME,
    "left": CMD_PREV_SCHEME,
    "p": CMD_PREV_SCHEME,
    "up": CMD_BPM_UP,
    "down": CMD_BPM_DOWN,
    "s": CMD_TOGGLE_STYLE,
    "b": CMD_TOGGLE_BORDER,
    "l": CMD_TOGGLE_LOG,
    "?": CMD_TOGGLE_HELP,
    "esc": CMD_CLOSE_HELP,
}


class VisualizerSession:
    """All mutable visualizer state, owned by the render loop.

    Input is queued with :meth:`queue_command` and only applied by
    :meth:`apply_pending`, which the loop calls between frames. The album art
    watcher thread hands over palettes through :meth:`offer_palette`.
    """

    def __init__(
        self,
        settings: Optional[VisualizerSettings] = None,
        clock: Optional[BeatClock] = None,
        effects: Optional[EffectsState] = None,
    ):
        self.settings = settings or VisualizerSettings()
        bpm_min, bpm_max = self.settings.bpm_range
        self.clock = clock or BeatClock(
            bpm=self.settings.bpm,
            bpm_min=bpm_min,
            bpm_max=bpm_max,
            bpm_step=self.settings.bpm_step,
        )
        self.effects = effects or create_effects(self.settings.effects)
        self.scheme = self.settings.scheme
        self.style = self.settings.style
        self.show_border = self.settings.show_border
        self.palette = AlbumPalette.default()
        self.album_color: Optional[RGB] = None
        self.help_visible = False
        self.log_visible = False
        self.quit_requested = False

        self._commands: Deque[str] = deque()
        self._pending_palette: Optional[AlbumPalette] = None
        self._palette_lock = threading.Lock()
        self._handlers: Dict[str, Callable[[], None]] = {
            CMD_QUIT: self._quit,
            CMD_NEXT_SCHEME: self.next_scheme,
            CMD_PREV_SCHEME: self.prev_scheme,
            CMD_BPM_UP: self.clock.increase_bpm,
            CMD_BPM_DOWN: self.clock.decrease_bpm,
            CMD_TOGGLE_STYLE: self.toggle_style,
            CMD_TOGGLE_BORDER: self.toggle_border,
            CMD_TOGGLE_LOG: self.toggle_log,
            CMD_TOGGLE_HELP: self.toggle_help,
            CMD_CLOSE_HELP: self.close_help,
        }

    # -- color scheme -------------------------------------------------

    @property
    def scheme_label(self) -> str:
        return self.scheme.label

    def _step_scheme(self, offset: int) -> None:
        cycle = scheme_cycle(self.album_color)
        index = cycle.index(self.scheme) if self.scheme in cycle else 0
        self.scheme = cycle[(index + offset) % len(cycle)]
        update_state("session", "scheme", self.scheme.value)

    def next_scheme(self) -> None:
        self._step_scheme(1)

    def prev_scheme(self) -> None:
        self._step_scheme(-1)

    # -- toggles ------------------------------------------------------

    def toggle_style(self) -> None:
        styles = list(WaveStyle)
        self.style = styles[(styles.index(self.style) + 1) % len(styles)]
        update_state("session", "style", self.style.value)

    def toggle_border(self) -> None:
        self.show_border = not self.show_border

    def toggle_log(self) -> None:
        self.log_visible = not self.log_visible

    def toggle_help(self) -> None:
        self.help_visible = not self.help_visible

    def close_help(self) -> None:
        self.help_visible = False

    def _quit(self) -> None:
        # The first quit only dismisses the help overlay
        if self.help_visible:
            self.help_visible = False
            return
        self.quit_requested = True

    # -- album art ----------------------------------------------------

    def set_palette(self, palette: AlbumPalette) -> None:
        """Adopt an album palette and switch to the album driven scheme."""
        self.palette = palette
        self.album_color = palette.primary
        self.scheme = ColorScheme.CUSTOM
        update_state("session", "album_color", self.album_color)

    def offer_palette(self, palette: AlbumPalette) -> None:
        """Thread-safe handover of a palette derived off the loop thread."""
        with self._palette_lock:
            self._pending_palette = palette

    # -- command queue ------------------------------------------------

    def queue_command(self, command: str) -> None:
        if command not in self._handlers:
            raise ValueError(f"Unknown command: {command}")
        self._commands.append(command)

    def queue_key(self, key: str) -> bool:
        """Queue the command bound to ``key``; returns False for unbound keys."""
        command = KEY_COMMANDS.get(key)
        if command is None:
            return False
        self.queue_command(command)
        return True

    def apply_pending(self) -> List[str]:
        """Apply queued commands and any handed-over palette, in arrival order."""
        with self._palette_lock:
            palette, self._pending_palette = self._pending_palette, None
        if palette is not None:
            self.set_palette(palette)

        applied = []
        while self._commands:
            command = self._commands.popleft()
            self._handlers[command]()
            applied.append(command)
            debug_log("SESSION_COMMAND", f"Applied {command}", {"bpm": self.clock.bpm, "scheme": self.scheme.value})
        return applied

    # -- rendering ----------------------------------------------------

    def beat_progress(self) -> float:
        return self.clock.phase()

    def render_frame(self, area: Area, beat_progress: Optional[float] = None) -> Frame:
        if beat_progress is None:
            beat_progress = self.beat_progress()
        return render_wave_grid(
            self.style,
            area.width,
            area.height,
            beat_progress,
            self.album_color,
            self.scheme,
        )
