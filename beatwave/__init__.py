#!/usr/bin/env python3
#
# BeatWave
# Copyright (c) 2025 Martynas Jocius
#

__version__ = "0.3"
__author__ = "Martynas Jocius"
__license__ = "MIT"

VERSION = __version__

DEFAULT_BPM = 120.0
BPM_MIN = 60.0
BPM_MAX = 200.0
BPM_STEP = 10.0

TICK_INTERVAL = 0.05  # 20 FPS

UI_APP_NAME = "BeatWave"
UI_PANEL_VISUAL = "Visualization"
UI_PANEL_RINGS = "Concentric Waves"
UI_PANEL_INFO = "Info"
UI_PANEL_LOG = "Log"
UI_TAGLINE = "Tempo-reactive waves for the terminal"
