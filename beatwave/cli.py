#!/usr/bin/env python3
#
# BeatWave
# Copyright (c) 2025 Martynas Jocius
#

import argparse
import json
import os
import select
import sys
import time
from contextlib import contextmanager
from pathlib import Path

from beatwave import BPM_MAX, BPM_MIN, UI_APP_NAME, VERSION
from beatwave.core.session import VisualizerSession
from beatwave.core.settings import VisualizerSettings
from beatwave.core.waves import Area, WaveStyle
from beatwave.debug import debug_log, debug_manager, log_operation, set_debug_mode
from beatwave.ui.tui import VISUAL_PANEL_TITLES, build_wave_panel, tui_manager
from beatwave.utils import list_available_configs
from beatwave.utils.colors import ColorScheme

__all__ = [
    "KeyReader",
    "terminal_input",
    "restore_terminal_settings",
    "validate_config_file",
    "run_health_checks",
    "run_visualizer",
    "main",
]

DEFAULT_CONFIG = "configs/default.json"

ESCAPE_SEQUENCES = {
    "[A": "up",
    "[B": "down",
    "[C": "right",
    "[D": "left",
    "OA": "up",
    "OB": "down",
    "OC": "right",
    "OD": "left",
}


class KeyReader:
    """Bounded, non-blocking key polling on a terminal file descriptor."""

    def __init__(self, fd):
        self.fd = fd

    def _read_byte(self, timeout):
        ready, _, _ = select.select([self.fd], [], [], max(0.0, timeout))
        if not ready:
            return None
        data = os.read(self.fd, 1)
        if not data:
            raise EOFError("Input stream closed")
        return data.decode("utf-8", errors="ignore")

    def read_key(self, timeout):
        """Wait up to ``timeout`` seconds for one key; ``None`` on timeout."""
        char = self._read_byte(timeout)
        if char is None:
            return None
        if char == "\x1b":
            sequence = ""
            while len(sequence) < 2:
                follow = self._read_byte(0.01)
                if follow is None:
                    break
                sequence += follow
            if not sequence:
                return "esc"
            return ESCAPE_SEQUENCES.get(sequence, "")
        if char == "\x03":
            return "ctrl+c"
        return char.lower()


def restore_terminal_settings(original_settings, fd=None):
    """Put the terminal back into the mode it had before cbreak."""
    if original_settings is None:
        return
    import termios

    termios.tcsetattr(
        sys.stdin.fileno() if fd is None else fd, termios.TCSADRAIN, original_settings
    )


@contextmanager
def terminal_input(stream=None):
    """Switch ``stream`` to cbreak mode and always restore it on exit."""
    import termios
    import tty

    stream = stream or sys.stdin
    fd = stream.fileno()
    original_settings = termios.tcgetattr(fd)
    try:
        tty.setcbreak(fd)
        yield KeyReader(fd)
    finally:
        restore_terminal_settings(original_settings, fd)


def validate_config_file(config_file):
    """Validate a visualizer config file before starting the display."""
    config_path = Path(config_file)

    if not config_path.exists():
        print(f"Error: Config file not found: {config_file}")
        print("Please check the file path and try again.")
        return False, None

    if not config_path.is_file():
        print(f"Error: Path is not a file: {config_file}")
        return False, None

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config_data = json.load(f)
    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON in config file: {config_file}")
        print(f"   JSON error at line {e.lineno}, column {e.colno}: {e.msg}")
        print("Please check the JSON syntax and try again.")
        return False, None
    except UnicodeDecodeError as e:
        print(f"Error: Unable to read config file (encoding issue): {config_file}")
        print(f"   {e}")
        return False, None
    except OSError as e:
        print(f"Error: Unable to read config file: {config_file}")
        print(f"   {e}")
        return False, None

    if not isinstance(config_data, dict):
        print(f"Error: Config file must contain a JSON object: {config_file}")
        print(f"   Found: {type(config_data).__name__}")
        return False, None

    try:
        settings = VisualizerSettings.from_mapping(config_data, base_path=config_path.parent)
    except ValueError as e:
        print(f"Error: Invalid setting in config file: {config_file}")
        print(f"   {e}")
        return False, None

    for key in settings.extra:
        print(f"Warning: Unknown config key '{key}' ignored")

    if settings.album_art is not None and not settings.album_art.exists():
        print(f"Warning: Album art not found: {settings.album_art}")

    return True, {
        "name": settings.name,
        "description": settings.description,
        "settings": settings,
        "data": config_data,
    }


def run_health_checks(album_art=None, enable_debug=False):
    """Check the terminal and the palette pipeline, optionally on real album art."""
    import numpy as np

    from beatwave.utils import artwork
    from beatwave.utils.colors import DOMINANT_FALLBACK_COLOR

    if enable_debug:
        set_debug_mode(True)
        debug_log("HEALTH_START", "Running health diagnostics", {"album_art": album_art})

    print(f"== {UI_APP_NAME} Health Check ==")
    success = True

    print("[1/3] Terminal capabilities…", flush=True)
    console = tui_manager.console
    size = console.size
    print(
        f"   ✅ Size {size.width}x{size.height}, color system: {console.color_system or 'none'}, "
        f"interactive: {'yes' if console.is_terminal else 'no'}"
    )

    print("[2/3] Palette pipeline test…", flush=True)
    gray = np.full((32, 32, 3), 127, dtype=np.uint8)
    black = np.zeros((32, 32, 3), dtype=np.uint8)
    gray_color = artwork.extract_dominant_color(gray)
    black_color = artwork.extract_dominant_color(black)
    palette = artwork.derive_palette(gray)
    if gray_color == (127, 127, 127) and black_color == DOMINANT_FALLBACK_COLOR and len(palette) == 6:
        print(f"   ✅ Palette derived: {len(palette)} colors from rgb{gray_color}")
    else:
        print(f"   ❌ Unexpected palette result: gray={gray_color}, black={black_color}, size={len(palette)}")
        success = False

    print("[3/3] Album art decode test…", flush=True)
    if album_art:
        loader = artwork.AlbumArtLoader()
        art_palette = loader.load(album_art)
        if art_palette is not None:
            print(f"   ✅ Dominant color: rgb{art_palette.primary}")
        else:
            print(f"   ❌ Decode failed: {loader.last_error or 'No additional details'}")
            success = False
    else:
        print("   Skipped (no --album-art given)")

    if success:
        print("Health check status: OK")
        return 0

    print("Health check status: FAILED")
    return 1


def run_visualizer(session, tui, key_reader=None, tick_interval=None, max_frames=None):
    """Drive the fixed tick render loop until quit is requested.

    Each tick draws a frame, then polls input for whatever is left of the
    tick and applies the queued commands before the next frame.
    """
    tick = session.settings.tick_interval if tick_interval is None else tick_interval
    frames = 0

    while not session.quit_requested:
        frame_start = time.monotonic()
        tui.update_display(session)
        session.effects.update()
        frames += 1
        if max_frames is not None and frames >= max_frames:
            break

        deadline = frame_start + tick
        if key_reader is None:
            remaining = deadline - time.monotonic()
            if remaining > 0:
                time.sleep(remaining)
        else:
            # Poll at least once per tick, even when the frame overran it
            while True:
                key = key_reader.read_key(max(0.0, deadline - time.monotonic()))
                if key is None:
                    break
                if session.queue_key(key):
                    debug_log("KEY", f"Key pressed: {key}")

        for command in session.apply_pending():
            tui.log(f"{command.replace('_', ' ').capitalize()} ({session.clock.bpm:.0f} BPM, {session.scheme_label})")

    return frames


def _print_snapshot(session, phase):
    """Print one frame to stdout for non-interactive use."""
    console = tui_manager.console
    width, height = tui_manager._get_safe_terminal_size()
    area = Area(0, 0, width, max(3, height - 2))
    field = area.inner() if session.show_border else area
    frame = session.render_frame(field, beat_progress=phase)
    console.print(build_wave_panel(frame, session.show_border, VISUAL_PANEL_TITLES[session.style]))


def _load_settings(args):
    config_path = args.config
    if config_path is None and Path(DEFAULT_CONFIG).exists():
        config_path = DEFAULT_CONFIG

    if config_path is None:
        settings = VisualizerSettings()
    else:
        print(f"Validating config file: {config_path}")
        is_valid, config_info = validate_config_file(config_path)
        if not is_valid:
            return None
        settings = config_info["settings"]
        log_operation("config_loaded", "cli", {"path": str(config_path), "name": config_info["name"]})
        print(f"✅ Config validated: {config_info['name']}")
        print(f"   Description: {config_info['description']}")

    try:
        return settings.with_overrides(
            bpm=args.bpm,
            scheme=ColorScheme.from_name(args.scheme) if args.scheme else None,
            style=WaveStyle.from_name(args.style) if args.style else None,
            album_art=Path(args.album_art) if args.album_art else None,
            tick_ms=args.tick_ms,
            show_border=False if args.no_border else None,
            effects=False if args.no_effects else None,
        )
    except ValueError as e:
        print(f"Error: Invalid command line option: {e}")
        return None


def main(argv=None):
    """Main entry point for BeatWave."""
    parser = argparse.ArgumentParser(
        description="BeatWave - Tempo-Reactive Terminal Visualizer",
        epilog=f"BeatWave v{VERSION}",
    )
    parser.add_argument(
        "config",
        nargs="?",
        default=None,
        help=f"Path to config JSON file (default: {DEFAULT_CONFIG} when present)",
    )
    parser.add_argument("--bpm", type=float, help=f"Tempo in beats per minute ({BPM_MIN:.0f}-{BPM_MAX:.0f})")
    parser.add_argument(
        "--scheme", choices=[scheme.value for scheme in ColorScheme], help="Initial color scheme"
    )
    parser.add_argument("--style", choices=[style.value for style in WaveStyle], help="Wave style")
    parser.add_argument("--album-art", help="Album art image used for the custom color scheme")
    parser.add_argument("--tick-ms", type=int, help="Frame interval in milliseconds (default: 50)")
    parser.add_argument("--no-border", action="store_true", help="Draw the wave without a border")
    parser.add_argument("--no-effects", action="store_true", help="Disable the frame timing effects")
    parser.add_argument(
        "--no-tui",
        action="store_true",
        help="Print a single frame instead of starting the live display",
    )
    parser.add_argument(
        "--phase", type=float, default=0.0, help="Beat phase used for the --no-tui frame (0-1)"
    )
    parser.add_argument("--list-configs", action="store_true", help="List available config files")
    parser.add_argument("--list-schemes", action="store_true", help="List color schemes")
    parser.add_argument(
        "--health",
        action="store_true",
        help="Run environment diagnostics (terminal and palette pipeline) and exit",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode with detailed state information",
    )
    parser.add_argument(
        "--disable-logging",
        action="store_true",
        help="Disable per-session log file writes (logs directory)",
    )
    parser.add_argument("--version", action="version", version=f"BeatWave {VERSION}")

    args = parser.parse_args(argv)

    if args.health:
        return run_health_checks(album_art=args.album_art, enable_debug=args.debug)

    if args.list_configs:
        print("Available configs:")
        configs = list_available_configs()
        if configs:
            for config in configs:
                print(f"  {config['file']}: {config['name']} - {config['description']}")
        else:
            print("  No configs directory found")
        return 0

    if args.list_schemes:
        print("Color schemes:")
        for scheme in ColorScheme:
            print(f"  {scheme.value:<8} {scheme.label}")
        return 0

    if args.debug:
        set_debug_mode(True)

    settings = _load_settings(args)
    if settings is None:
        print(f"\n{UI_APP_NAME} startup cancelled due to configuration errors.")
        return 1

    try:
        session = VisualizerSession(settings)
    except ValueError as exc:
        print(f"Error: {exc}")
        return 1

    debug_log(
        "STARTUP",
        "BeatWave starting",
        {
            "config": settings.name,
            "bpm": session.clock.bpm,
            "scheme": session.scheme.value,
            "style": session.style.value,
            "version": VERSION,
        },
    )

    if not args.disable_logging and not args.no_tui:
        try:
            logs_dir = Path("logs")
            logs_dir.mkdir(parents=True, exist_ok=True)
            stem = Path(args.config).stem if args.config else "session"
            log_file_path = logs_dir / f"{stem}-{time.strftime('%Y%m%d-%H%M%S')}.log"
            tui_manager.start_file_logging(log_file_path)
            tui_manager.log(f"Session log: {log_file_path}")
        except OSError as exc:
            print(f"Warning: could not initialize file logging ({exc})")

    watcher = None
    exit_code = 0
    try:
        if settings.album_art is not None:
            from beatwave.utils.artwork import AlbumArtLoader, AlbumArtWatcher

            loader = AlbumArtLoader(log=tui_manager.log)
            palette = loader.load(settings.album_art)
            if palette is not None:
                session.set_palette(palette)
            if not args.no_tui and settings.album_art.parent.is_dir():
                watcher = AlbumArtWatcher(loader, settings.album_art, session.offer_palette)
                watcher.start()

        if args.no_tui:
            _print_snapshot(session, args.phase)
            return 0

        if not sys.stdin.isatty() or not sys.stdout.isatty():
            print("Non-interactive terminal detected; printing a single frame")
            _print_snapshot(session, args.phase)
            return 0

        with terminal_input(sys.stdin) as key_reader:
            tui_manager.enable_tui()
            try:
                tui_manager.start_live_display(session)
                run_visualizer(session, tui_manager, key_reader)
            finally:
                tui_manager.disable_tui()
        tui_manager.log("Quit requested by user (q)")

    except KeyboardInterrupt:
        tui_manager.log("Interrupted by user (Ctrl+C)")
    except (OSError, EOFError) as e:
        tui_manager.log(f"Error: {e}")
        exit_code = 1
    finally:
        if watcher is not None:
            watcher.stop()
        tui_manager.disable_tui()
        if args.debug:
            debug_log("SHUTDOWN", "BeatWave shutting down")
            debug_manager.print_state_summary()
        tui_manager.stop_file_logging()

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
