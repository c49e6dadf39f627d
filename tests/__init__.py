#
# BeatWave
# Copyright (c) 2025 Martynas Jocius
#
"""Test suite for BeatWave."""
