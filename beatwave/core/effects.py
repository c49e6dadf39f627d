#!/usr/bin/env python3
#
# BeatWave
# Copyright (c) 2025 Martynas Jocius
#
"""Optional UI effects timer.

``TimerEffects`` tracks when the display was last refreshed; ``NullEffects``
is the no-op used when effects are switched off in the configuration.
"""

from __future__ import annotations

import time
from typing import Callable, Optional


class EffectsState:
    """Capability interface for frame-timing effects."""

    enabled = False

    def update(self) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError

    def elapsed(self) -> Optional[float]:
        """Seconds since the previous update, ``None`` when not tracked."""
        raise NotImplementedError


class TimerEffects(EffectsState):
    enabled = True

    def __init__(self, time_source: Callable[[], float] = time.monotonic):
        self._time_source = time_source
        self.last_update = time_source()
        self.last_interval: Optional[float] = None

    def update(self) -> None:
        now = self._time_source()
        self.last_interval = now - self.last_update
        self.last_update = now

    def clear(self) -> None:
        self.last_update = self._time_source()
        self.last_interval = None

    def elapsed(self) -> Optional[float]:
        return self._time_source() - self.last_update


class NullEffects(EffectsState):
    last_interval = None

    def update(self) -> None:
        pass

    def clear(self) -> None:
        pass

    def elapsed(self) -> Optional[float]:
        return None


def create_effects(enabled: bool) -> EffectsState:
    return TimerEffects() if enabled else NullEffects()
