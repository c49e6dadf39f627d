#
# BeatWave
# Copyright (c) 2025 Martynas Jocius
#
import unittest

from beatwave.core.clock import BeatClock
from beatwave.core.effects import NullEffects, TimerEffects
from beatwave.core.session import (
    CMD_BPM_UP,
    CMD_NEXT_SCHEME,
    CMD_QUIT,
    KEY_COMMANDS,
    VisualizerSession,
)
from beatwave.core.settings import VisualizerSettings
from beatwave.core.waves import Area, WaveStyle, render_wave_grid
from beatwave.utils.colors import BUILTIN_SCHEMES, AlbumPalette, ColorScheme, generate_color_palette


class FakeTime:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


def make_session(**settings):
    clock_time = FakeTime()
    config = VisualizerSettings(**settings)
    clock = BeatClock(
        bpm=config.bpm,
        bpm_min=config.bpm_range[0],
        bpm_max=config.bpm_range[1],
        bpm_step=config.bpm_step,
        time_source=clock_time,
    )
    return VisualizerSession(config, clock=clock), clock_time


class CommandQueueTests(unittest.TestCase):
    def test_commands_apply_only_between_frames(self):
        session, _ = make_session()
        self.assertTrue(session.queue_key("up"))
        self.assertTrue(session.queue_key("right"))
        self.assertEqual(session.clock.bpm, 120.0)
        self.assertIs(session.scheme, ColorScheme.CYAN)

        applied = session.apply_pending()

        self.assertEqual(applied, [CMD_BPM_UP, CMD_NEXT_SCHEME])
        self.assertEqual(session.clock.bpm, 130.0)
        self.assertIs(session.scheme, ColorScheme.WARM)
        self.assertEqual(session.apply_pending(), [])

    def test_unbound_keys_are_ignored(self):
        session, _ = make_session()
        self.assertFalse(session.queue_key("x"))
        self.assertFalse(session.queue_key(""))
        self.assertEqual(session.apply_pending(), [])

    def test_unknown_command_rejected(self):
        session, _ = make_session()
        with self.assertRaises(ValueError):
            session.queue_command("explode")

    def test_every_bound_key_maps_to_a_known_command(self):
        session, _ = make_session()
        for key in KEY_COMMANDS:
            self.assertTrue(session.queue_key(key))

    def test_bpm_stays_within_range(self):
        session, _ = make_session()
        for _ in range(20):
            session.queue_key("up")
        session.apply_pending()
        self.assertEqual(session.clock.bpm, 200.0)

        for _ in range(30):
            session.queue_key("down")
        session.apply_pending()
        self.assertEqual(session.clock.bpm, 60.0)


class SchemeCycleTests(unittest.TestCase):
    def test_cycle_wraps_over_builtin_schemes(self):
        session, _ = make_session()
        seen = []
        for _ in range(len(BUILTIN_SCHEMES)):
            seen.append(session.scheme)
            session.next_scheme()
        self.assertEqual(seen, list(BUILTIN_SCHEMES))
        self.assertIs(session.scheme, ColorScheme.CYAN)

        session.prev_scheme()
        self.assertIs(session.scheme, BUILTIN_SCHEMES[-1])

    def test_custom_scheme_joins_cycle_with_album_color(self):
        session, _ = make_session()
        session.set_palette(generate_color_palette(100, 50, 200))
        self.assertIs(session.scheme, ColorScheme.CUSTOM)
        self.assertEqual(session.album_color, (100, 50, 200))

        session.next_scheme()
        self.assertIs(session.scheme, ColorScheme.CYAN)
        session.prev_scheme()
        self.assertIs(session.scheme, ColorScheme.CUSTOM)

    def test_configured_custom_without_album_art_moves_on(self):
        session, _ = make_session(scheme=ColorScheme.CUSTOM)
        self.assertEqual(session.scheme_label, ColorScheme.CUSTOM.label)
        session.next_scheme()
        self.assertIs(session.scheme, ColorScheme.WARM)


class ToggleTests(unittest.TestCase):
    def test_quit_closes_help_first(self):
        session, _ = make_session()
        session.queue_key("?")
        session.apply_pending()
        self.assertTrue(session.help_visible)

        session.queue_key("q")
        session.apply_pending()
        self.assertFalse(session.help_visible)
        self.assertFalse(session.quit_requested)

        session.queue_command(CMD_QUIT)
        session.apply_pending()
        self.assertTrue(session.quit_requested)

    def test_escape_only_closes_help(self):
        session, _ = make_session()
        session.queue_key("esc")
        session.apply_pending()
        self.assertFalse(session.help_visible)
        self.assertFalse(session.quit_requested)

    def test_style_border_and_log_toggles(self):
        session, _ = make_session()
        for key in ("s", "b", "l"):
            session.queue_key(key)
        session.apply_pending()
        self.assertIs(session.style, WaveStyle.RADIAL)
        self.assertFalse(session.show_border)
        self.assertTrue(session.log_visible)

        session.toggle_style()
        self.assertIs(session.style, WaveStyle.LINEAR)

    def test_effects_follow_settings(self):
        self.assertIsInstance(VisualizerSession(VisualizerSettings()).effects, TimerEffects)
        self.assertIsInstance(VisualizerSession(VisualizerSettings(effects=False)).effects, NullEffects)


class PaletteHandoverTests(unittest.TestCase):
    def test_offered_palette_applies_on_next_frame(self):
        session, _ = make_session()
        palette = AlbumPalette.from_colors([(10, 20, 30)])
        session.offer_palette(palette)
        self.assertIsNone(session.album_color)

        session.apply_pending()
        self.assertEqual(session.album_color, (10, 20, 30))
        self.assertIs(session.palette, palette)
        self.assertIs(session.scheme, ColorScheme.CUSTOM)

    def test_latest_offer_wins(self):
        session, _ = make_session()
        session.offer_palette(AlbumPalette.from_colors([(1, 2, 3)]))
        session.offer_palette(AlbumPalette.from_colors([(4, 5, 6)]))
        session.apply_pending()
        self.assertEqual(session.album_color, (4, 5, 6))


class RenderFrameTests(unittest.TestCase):
    def test_render_uses_clock_phase(self):
        session, clock_time = make_session(style=WaveStyle.RADIAL)
        clock_time.now = 0.25  # half a beat at 120 BPM
        self.assertAlmostEqual(session.beat_progress(), 0.5)
        self.assertEqual(
            session.render_frame(Area(0, 0, 20, 10)),
            render_wave_grid(WaveStyle.RADIAL, 20, 10, 0.5),
        )

    def test_explicit_phase_overrides_clock(self):
        session, _ = make_session()
        self.assertEqual(
            session.render_frame(Area(0, 0, 12, 6), beat_progress=0.75),
            render_wave_grid(WaveStyle.LINEAR, 12, 6, 0.75),
        )


if __name__ == "__main__":
    unittest.main()
