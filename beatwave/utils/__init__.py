#!/usr/bin/env python3
#
# BeatWave
# Copyright (c) 2025 Martynas Jocius
#
"""Utility helpers shared across BeatWave."""

import json
from importlib import import_module
from pathlib import Path
from typing import Any, Dict, List

__all__ = ("list_available_configs", "artwork", "colors")


def list_available_configs(configs_dir="configs") -> List[Dict[str, str]]:
    """List visualizer config files with their name and description."""
    configs_path = Path(configs_dir)
    configs = []

    if not configs_path.is_dir():
        return configs

    for config_file in sorted(configs_path.glob("*.json")):
        entry = {"file": config_file.name, "path": str(config_file)}
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError):
            entry.update(name=config_file.stem, description="(invalid JSON)")
        else:
            if not isinstance(data, dict):
                data = {}
            entry.update(
                name=str(data.get("name", config_file.stem)),
                description=str(data.get("description", "No description")),
            )
        configs.append(entry)

    return configs


def __getattr__(name: str) -> Any:
    # Pillow/numpy are only imported once album art is actually needed
    if name in ("artwork", "colors"):
        module = import_module(f"beatwave.utils.{name}")
        globals()[name] = module
        return module
    raise AttributeError(f"module 'beatwave.utils' has no attribute {name!r}")
