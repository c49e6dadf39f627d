#
# BeatWave
# Copyright (c) 2025 Martynas Jocius
#
import unittest

from beatwave.core.effects import NullEffects, TimerEffects, create_effects


class FakeTime:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


class EffectsTests(unittest.TestCase):
    def test_timer_tracks_interval_between_updates(self):
        clock = FakeTime(10.0)
        effects = TimerEffects(time_source=clock)
        self.assertIsNone(effects.last_interval)

        clock.now = 10.05
        effects.update()
        self.assertAlmostEqual(effects.last_interval, 0.05)

        clock.now = 10.2
        self.assertAlmostEqual(effects.elapsed(), 0.15)

    def test_timer_clear_resets_interval(self):
        clock = FakeTime()
        effects = TimerEffects(time_source=clock)
        clock.now = 1.0
        effects.update()
        effects.clear()
        self.assertIsNone(effects.last_interval)
        self.assertEqual(effects.elapsed(), 0.0)

    def test_null_effects_do_nothing(self):
        effects = NullEffects()
        effects.update()
        effects.clear()
        self.assertIsNone(effects.elapsed())
        self.assertIsNone(effects.last_interval)
        self.assertFalse(effects.enabled)

    def test_factory_selects_capability(self):
        self.assertIsInstance(create_effects(True), TimerEffects)
        self.assertIsInstance(create_effects(False), NullEffects)


if __name__ == "__main__":
    unittest.main()
