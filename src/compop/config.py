"""Configuration loading and validation."""

from __future__ import annotations

import os
from typing import Any

from compop.types import CompopConfig


def _flag(value: str) -> bool:
    return value.lower() in ("1", "true", "yes")


def load_config(**overrides: Any) -> CompopConfig:
    """Load configuration from environment variables and overrides."""
    env_mappings: dict[str, tuple[str, Any]] = {
        "COMPOP_ALLOW_PATHS": ("allow_paths", _flag),
        "COMPOP_RECYCLE": ("recycle", _flag),
        "COMPOP_VERBOSE": ("verbose", _flag),
    }

    config_data: dict[str, Any] = {}
    for env_var, (field_name, converter) in env_mappings.items():
        val = os.environ.get(env_var)
        if val is not None:
            config_data[field_name] = converter(val)

    config_data.update({k: v for k, v in overrides.items() if v is not None})
    return CompopConfig(**config_data)
