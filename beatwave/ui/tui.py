#!/usr/bin/env python3
#
# BeatWave
# Copyright (c) 2025 Martynas Jocius
#

import time
from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple, Union

import psutil
from rich.align import Align
from rich.console import Console, Group
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .. import (
    UI_APP_NAME,
    UI_PANEL_INFO,
    UI_PANEL_LOG,
    UI_PANEL_RINGS,
    UI_PANEL_VISUAL,
    UI_TAGLINE,
    VERSION,
)
from ..core.waves import Area, Frame, WaveStyle, render_wave_grid
from ..debug import debug_log
from ..utils.colors import RGB, ColorScheme, rgb_style

if TYPE_CHECKING:  # pragma: no cover - typing helpers
    from ..core.session import VisualizerSession

HEADER_HEIGHT = 3
INFO_HEIGHT = 5
LOG_HEIGHT = 8

VISUAL_PANEL_TITLES = {
    WaveStyle.LINEAR: UI_PANEL_VISUAL,
    WaveStyle.RADIAL: UI_PANEL_RINGS,
}


# ---------------------------------------------------------------------------
# Frame compositing
# ---------------------------------------------------------------------------


def compose_lines(frame: Frame) -> List[Text]:
    """One styled ``Text`` line per frame row, one span per cell."""
    lines = []
    for row in frame:
        line = Text(no_wrap=True, overflow="crop")
        for glyph, color in row:
            line.append(glyph, style=rgb_style(color))
        lines.append(line)
    return lines


def compose_frame(frame: Frame) -> Text:
    return Text("\n", no_wrap=True, overflow="crop").join(compose_lines(frame))


def build_wave_panel(
    frame: Frame, show_border: bool = True, title: str = UI_PANEL_VISUAL
) -> Union[Panel, Text]:
    content = compose_frame(frame)
    if not show_border:
        return content
    return Panel(content, title=title, border_style="cyan", padding=(0, 0), expand=True)


def render(
    target,
    area: Area,
    beat_progress: float,
    album_color: Optional[RGB] = None,
    show_border: bool = True,
    scheme: ColorScheme = ColorScheme.CYAN,
    style: WaveStyle = WaveStyle.LINEAR,
    title: Optional[str] = None,
) -> Frame:
    """Render one wave frame into ``target`` (anything with ``update``).

    With a border the wave is computed for the area inside it. Returns the
    frame that was drawn.
    """
    field_area = area.inner() if show_border else area
    frame = render_wave_grid(
        style, field_area.width, field_area.height, beat_progress, album_color, scheme
    )
    target.update(build_wave_panel(frame, show_border, title or VISUAL_PANEL_TITLES[style]))
    return frame


# ---------------------------------------------------------------------------
# Terminal UI
# ---------------------------------------------------------------------------


@dataclass
class LayoutContext:
    terminal_width: int
    terminal_height: int
    header_height: int
    info_height: int
    log_height: int
    visual_area: Area


@dataclass
class HelpDialogBuilder:
    app_name: str
    version: str
    keymaps: Sequence[Tuple[str, str]] = (
        ("?", "Show help"),
        ("q", "Quit BeatWave"),
        ("→ / n", "Next color scheme"),
        ("← / p", "Previous color scheme"),
        ("↑", "Faster (BPM +)"),
        ("↓", "Slower (BPM -)"),
        ("s", "Switch wave style"),
        ("b", "Toggle border"),
        ("l", "Toggle log panel"),
        ("Esc", "Close dialog"),
    )

    def build(self) -> Group:
        title = Text(f"{self.app_name} {self.version}", style="bold bright_cyan")
        tagline = Text(UI_TAGLINE, style="white")
        divider = Text("─" * 60, style="dim white")

        footer = Text()
        footer.append("Press ", style="dim white")
        footer.append("q", style="bold yellow")
        footer.append(" or ", style="dim white")
        footer.append("Esc", style="bold yellow")
        footer.append(" to close", style="dim white")

        return Group(
            Align.center(title),
            Text(""),
            Align.center(tagline),
            Text(""),
            Align.center(divider),
            Text(""),
            self._build_table(),
            Text(""),
            Align.center(divider),
            Text(""),
            Align.center(footer),
        )

    def _build_table(self) -> Table:
        help_table = Table(show_header=True, header_style="bold cyan", box=None, padding=(0, 2))
        help_table.add_column("Key", style="bold yellow", width=8)
        help_table.add_column("Action", style="white", width=24, justify="left")
        help_table.add_column("Key", style="bold yellow", width=8)
        help_table.add_column("Action", style="white", width=24, justify="left")

        keymap_list = list(self.keymaps)
        for i in range(0, len(keymap_list), 2):
            first_key, first_action = keymap_list[i]
            second_key, second_action = keymap_list[i + 1] if i + 1 < len(keymap_list) else ("", "")
            help_table.add_row(first_key, first_action, second_key, second_action)
        return help_table


class TUIManager:
    """Manages the terminal user interface for BeatWave."""

    def __init__(self):
        self.console = Console()
        self.log_buffer = deque(maxlen=50)  # Keep last 50 log messages
        self.log_file_handle = None
        self.log_file_path = None
        self.live_display: Optional[Live] = None
        self.tui_enabled = False
        self.last_cpu_check = 0.0
        self.cached_cpu_percent = 0.0
        self.last_frame: Optional[Frame] = None

    def _get_safe_terminal_size(self) -> Tuple[int, int]:
        try:
            size = self.console.size
            width, height = size.width, size.height
        except Exception:
            return (80, 24)
        if width <= 0 or height <= 0:
            return (80, 24)
        return (width, height)

    # -- logging ------------------------------------------------------

    def log(self, message):
        """Add a log message to the TUI log panel and the session log file."""
        timestamped = f"{time.strftime('%H:%M:%S')} {message}"

        if self.log_file_handle:
            try:
                self.log_file_handle.write(timestamped + "\n")
                self.log_file_handle.flush()
            except OSError:
                pass

        if self.tui_enabled:
            self.log_buffer.append(timestamped)
        else:
            print(message)

    def start_file_logging(self, log_path):
        """Enable file logging to the specified path."""
        try:
            if self.log_file_handle:
                self.stop_file_logging()
            self.log_file_handle = open(log_path, "w", encoding="utf-8")
            self.log_file_path = log_path
        except OSError as exc:
            self.log_file_handle = None
            self.log_file_path = None
            print(f"Warning: unable to start file logging ({exc})")

    def stop_file_logging(self):
        """Close file logging if active."""
        if self.log_file_handle:
            try:
                self.log_file_handle.flush()
                self.log_file_handle.close()
            except OSError:
                pass
            finally:
                self.log_file_handle = None
                self.log_file_path = None

    # -- layout -------------------------------------------------------

    def enable_tui(self):
        self.tui_enabled = True

    def disable_tui(self):
        self.tui_enabled = False
        self.stop_live_display()

    def _build_layout_context(self, session: "VisualizerSession") -> LayoutContext:
        terminal_width, terminal_height = self._get_safe_terminal_size()
        log_height = LOG_HEIGHT if session.log_visible else 0
        visual_height = max(0, terminal_height - HEADER_HEIGHT - INFO_HEIGHT - log_height)
        return LayoutContext(
            terminal_width=terminal_width,
            terminal_height=terminal_height,
            header_height=HEADER_HEIGHT,
            info_height=INFO_HEIGHT,
            log_height=log_height,
            visual_area=Area(0, HEADER_HEIGHT, terminal_width, visual_height),
        )

    def create_layout(self, session: "VisualizerSession", beat_progress: Optional[float] = None) -> Layout:
        """Build the full screen layout for one frame."""
        context = self._build_layout_context(session)
        if session.help_visible:
            return self._build_help_overlay(context)

        layout = Layout()
        sections = [
            Layout(name="header", size=context.header_height),
            Layout(name="visual", ratio=1),
            Layout(name="info", size=context.info_height),
        ]
        if context.log_height:
            sections.append(Layout(name="log", size=context.log_height))
        layout.split_column(*sections)

        self._populate_header(layout, session)
        self.last_frame = render(
            layout["visual"],
            context.visual_area,
            session.beat_progress() if beat_progress is None else beat_progress,
            album_color=session.album_color,
            show_border=session.show_border,
            scheme=session.scheme,
            style=session.style,
        )
        self._populate_info(layout, session)
        if context.log_height:
            self._populate_log(layout, context)
        return layout

    def _populate_header(self, layout: Layout, session: "VisualizerSession") -> None:
        app_text = Text()
        app_text.append(f"{UI_APP_NAME} {VERSION}", style="bold white")

        help_text = Text()
        help_text.append("Press ? for help", style="bold white")

        header_table = Table.grid(expand=True)
        header_table.add_column(justify="left")
        header_table.add_column(justify="center")
        header_table.add_column(justify="right")
        header_table.add_row(app_text, self._build_status_text(session), help_text)

        layout["header"].update(Panel(header_table, border_style="green", padding=(0, 2)))

    def _build_status_text(self, session: "VisualizerSession") -> Text:
        status = Text()
        status.append(f"{session.clock.bpm:.0f} BPM", style="bold bright_white")
        status.append("  ", style="dim white")
        status.append(session.scheme_label, style="yellow")
        status.append("  ", style="dim white")
        status.append(session.style.value.title(), style="cyan")

        interval = session.effects.last_interval
        if interval:
            status.append("  ", style="dim white")
            status.append(f"{interval * 1000:.0f} ms", style="magenta")

        try:
            current_time = time.time()
            if current_time - self.last_cpu_check > 1.0:
                self.cached_cpu_percent = psutil.cpu_percent(interval=None)
                self.last_cpu_check = current_time
            ram_percent = psutil.virtual_memory().percent
        except (OSError, RuntimeError):
            status.append("  System metrics unavailable", style="dim red")
            return status

        status.append("  ", style="dim white")
        status.append(f"CPU: {int(self.cached_cpu_percent)}%", style="yellow")
        status.append("  ", style="dim white")
        status.append(f"RAM: {int(ram_percent)}%", style="green")
        return status

    def _populate_info(self, layout: Layout, session: "VisualizerSession") -> None:
        description = "Linear wave drifting with the music" if session.style is WaveStyle.LINEAR else (
            "Expanding rings synchronized to the tempo"
        )

        controls = Text()
        controls.append("Controls: ")
        controls.append("←/→ or p/n", style="green")
        controls.append(" = Change colors | ")
        controls.append("↑/↓", style="green")
        controls.append(f" = BPM ({session.clock.bpm:.0f}) | ")
        controls.append("s", style="green")
        controls.append(" = Style | ")
        controls.append("q", style="red")
        controls.append(" = Quit")

        swatch = Text("Palette: ")
        for color in session.palette:
            swatch.append("██", style=rgb_style(color))
            swatch.append(" ")

        layout["info"].update(
            Panel(
                Group(Text(description), controls, swatch),
                title=UI_PANEL_INFO,
                border_style="blue",
                padding=(0, 1),
            )
        )

    def _populate_log(self, layout: Layout, context: LayoutContext) -> None:
        log_inner = max(1, context.log_height - 2)
        visible_lines = list(self.log_buffer)[-log_inner:]
        max_log_width = max(20, context.terminal_width - 4)
        log_text = "\n".join(line[:max_log_width] for line in visible_lines)
        layout["log"].update(Panel(log_text, title=UI_PANEL_LOG, border_style="yellow", padding=(0, 1)))

    def _build_help_overlay(self, context: LayoutContext) -> Layout:
        dialog_content = HelpDialogBuilder(UI_APP_NAME, VERSION).build()

        dialog_height = max(3, min(22, context.terminal_height - 4))
        dialog_width = max(20, min(80, context.terminal_width - 8))
        top_space = max(1, (context.terminal_height - dialog_height) // 2)
        side_margin = max(1, (context.terminal_width - dialog_width) // 2)

        overlay = Layout()
        overlay.split_column(
            Layout(name="overlay_top", size=top_space),
            Layout(name="overlay_center", size=dialog_height),
            Layout(name="overlay_bottom", ratio=1),
        )
        overlay["overlay_center"].split_row(
            Layout(name="overlay_left", size=side_margin),
            Layout(name="overlay_dialog", size=dialog_width),
            Layout(name="overlay_right", ratio=1),
        )
        overlay["overlay_dialog"].update(
            Panel(dialog_content, title="Help & Keybindings", border_style="bright_cyan", padding=(1, 2))
        )
        for name in ("overlay_top", "overlay_bottom", "overlay_left", "overlay_right"):
            overlay[name].update("")
        return overlay

    # -- live display -------------------------------------------------

    def start_live_display(self, session: "VisualizerSession"):
        """Take over the screen; frames are pushed by :meth:`update_display`."""
        if not self.tui_enabled:
            return
        self.live_display = Live(
            self.create_layout(session),
            console=self.console,
            auto_refresh=False,
            screen=True,
        )
        self.live_display.start()
        debug_log("TUI_LIVE_STARTED", "Live display started", {"size": self._get_safe_terminal_size()})

    def update_display(self, session: "VisualizerSession"):
        """Render and flush one frame. Terminal write errors propagate."""
        if not self.tui_enabled or self.live_display is None:
            return
        self.live_display.update(self.create_layout(session), refresh=True)

    def stop_live_display(self):
        """Stop the live display and give the screen back."""
        live, self.live_display = self.live_display, None
        if live is not None:
            try:
                live.stop()
            finally:
                self.console.show_cursor(True)


# Global TUI manager instance
tui_manager = TUIManager()
