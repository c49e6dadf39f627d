#!/usr/bin/env python3
#
# BeatWave
# Copyright (c) 2025 Martynas Jocius
#
"""Beat phase clock for BeatWave."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable

from .. import BPM_MAX, BPM_MIN, BPM_STEP, DEFAULT_BPM


def beat_phase(elapsed_seconds: float, bpm: float) -> float:
    """Fractional position within the current beat, in ``[0, 1)``.

    ``bpm`` must be positive; callers clamp it with :func:`clamp_bpm`.
    """
    phase = (elapsed_seconds * bpm / 60.0) % 1.0
    # Float modulo can land exactly on 1.0 for tiny negative products
    return 0.0 if phase >= 1.0 else phase


def clamp_bpm(bpm: float, minimum: float = BPM_MIN, maximum: float = BPM_MAX) -> float:
    return min(max(float(bpm), minimum), maximum)


@dataclass
class BeatClock:
    """Monotonic playback clock that turns elapsed time into beat phase."""

    bpm: float = DEFAULT_BPM
    bpm_min: float = BPM_MIN
    bpm_max: float = BPM_MAX
    bpm_step: float = BPM_STEP
    time_source: Callable[[], float] = field(default=time.monotonic, repr=False)
    start_time: float = field(init=False)

    def __post_init__(self):
        if not 0 < self.bpm_min <= self.bpm_max:
            raise ValueError(f"Invalid BPM range: {self.bpm_min}-{self.bpm_max}")
        self.bpm = clamp_bpm(self.bpm, self.bpm_min, self.bpm_max)
        self.start_time = self.time_source()

    def reset(self) -> None:
        self.start_time = self.time_source()

    def elapsed(self) -> float:
        return max(0.0, self.time_source() - self.start_time)

    def phase(self) -> float:
        return beat_phase(self.elapsed(), self.bpm)

    def set_bpm(self, bpm: float) -> float:
        self.bpm = clamp_bpm(bpm, self.bpm_min, self.bpm_max)
        return self.bpm

    def increase_bpm(self, step: float | None = None) -> float:
        return self.set_bpm(self.bpm + (self.bpm_step if step is None else step))

    def decrease_bpm(self, step: float | None = None) -> float:
        return self.set_bpm(self.bpm - (self.bpm_step if step is None else step))
