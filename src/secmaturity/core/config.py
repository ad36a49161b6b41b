"""3-layer configuration system.

Loads and merges configuration from:
1. Default settings (built-in)
2. Project config (.secmaturity/config.yaml)
3. CLI parameters (override)
"""

from __future__ import annotations

import copy
import math
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel

from .maturity import MATURITY_BANDS, MaturityBand, bands_from_config
from .scope import as_id_list

CONFIG_DIR = ".secmaturity"

DEFAULT_GAP_THRESHOLD = 0.5
DEFAULT_WEIGHT = 1.0

DEFAULT_CONFIG: dict = {
    "project": {
        "name": "",
        "catalog": "",
        "answers": "",
    },
    "scoring": {
        "gap_threshold": DEFAULT_GAP_THRESHOLD,
        "default_weight": DEFAULT_WEIGHT,
    },
    "maturity": {
        "bands": [],
    },
    "frameworks": {
        "selected": [],
    },
    "questions": {
        "disabled": [],
    },
    "output": {
        "format": "table",
        "top_gaps": 10,
    },
    "roadmap": {
        "max_items": 10,
        "per_domain": 3,
    },
}


class EngineSettings(BaseModel):
    """Tunable constants threaded into each engine call."""

    gap_threshold: float = DEFAULT_GAP_THRESHOLD
    default_weight: float = DEFAULT_WEIGHT
    bands: tuple[MaturityBand, ...] = MATURITY_BANDS


def deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dicts. Arrays are replaced, not merged."""
    result = {}
    for key in base:
        result[key] = base[key]
    for key, value in override.items():
        base_value = result.get(key)
        if isinstance(base_value, dict) and isinstance(value, dict):
            result[key] = deep_merge(base_value, value)
        else:
            result[key] = value
    return result


def load_project_config(project_path: Path) -> dict:
    """Load project configuration from .secmaturity/config.yaml."""
    config_path = project_path / CONFIG_DIR / "config.yaml"
    if not config_path.exists():
        return {}
    content = config_path.read_text(encoding="utf-8-sig")  # utf-8-sig strips BOM
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {config_path}: {e}") from e
    return data if isinstance(data, dict) else {}


def get_effective_config(
    project_path: Path,
    cli_overrides: Optional[dict] = None,
) -> dict:
    """Get the fully resolved configuration for an assessment run."""
    config = copy.deepcopy(DEFAULT_CONFIG)

    project_config = load_project_config(project_path)
    if project_config:
        config = deep_merge(config, project_config)

    if cli_overrides:
        config = deep_merge(config, cli_overrides)

    config["_project_path"] = str(project_path)
    return config


def _finite_or(value: object, fallback: float) -> float:
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return fallback
    return number if math.isfinite(number) else fallback


def config_section(config: dict, name: str) -> dict:
    """Return a top-level config section; anything but a mapping is an error."""
    section = config.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ValueError(f"Config section '{name}' must be a mapping, got {section!r}")
    return section


def config_int(config: dict, name: str, key: str, default: int) -> int:
    """Read a non-negative integer setting such as ``roadmap.max_items``."""
    value = config_section(config, name).get(key, default)
    if value is None:
        return default
    if isinstance(value, bool):
        raise ValueError(f"Invalid {name}.{key}: {value!r}")
    try:
        number = int(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid {name}.{key}: {value!r}") from e
    return max(0, number)


def config_ids(config: dict, name: str, key: str) -> list[str]:
    """Read an id list such as ``frameworks.selected``; a single id is accepted."""
    try:
        return as_id_list(config_section(config, name).get(key))
    except ValueError as e:
        raise ValueError(f"Invalid {name}.{key}: {e}") from e


def settings_from_config(config: dict) -> EngineSettings:
    """Build engine settings, defaulting out-of-range values.

    Raises ValueError when a section has the wrong shape or a band entry
    cannot be read.
    """
    scoring = config_section(config, "scoring")
    threshold = _finite_or(scoring.get("gap_threshold"), DEFAULT_GAP_THRESHOLD)
    weight = _finite_or(scoring.get("default_weight"), DEFAULT_WEIGHT)

    return EngineSettings(
        gap_threshold=min(1.0, max(0.0, threshold)),
        default_weight=weight if weight > 0 else DEFAULT_WEIGHT,
        bands=bands_from_config(config_section(config, "maturity").get("bands")),
    )
