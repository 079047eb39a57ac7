"""Configuration loading from YAML.

A configuration file describes one case half and how to render it.  Files
are looked up in this order unless an explicit path is given:

    1. Directories from the PTEROSPHERA_CONFIG environment variable
    2. User config directory (~/.config/pterosphera/)
    3. The bundled ``data/default.yaml``

Environment Variables:
    PTEROSPHERA_CONFIG: Colon-separated (or semicolon on Windows) paths to
                        directories containing a ``pterosphera.yaml``.

Every section maps directly onto a frozen dataclass; unknown keys are
rejected rather than ignored so a typo never silently falls back to a
default.
"""

from __future__ import annotations

import dataclasses
import os
import sys
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigurationError
from .settings import LayoutSettings, RenderSettings, material_by_name
from .specs import (
    BTUSpec,
    CaseSpec,
    FingerSpec,
    HandSpec,
    MXSwitchSocketSpec,
    SensorMountSpec,
    Side,
    TrackballSocketSpec,
)

__all__ = [
    "PTEROSPHERA_CONFIG",
    "CONFIG_FILENAME",
    "Config",
    "load_config",
    "parse_config",
    "find_config",
    "clear_cache",
]

PTEROSPHERA_CONFIG = "PTEROSPHERA_CONFIG"
CONFIG_FILENAME = "pterosphera.yaml"

_BUNDLED_DATA_DIR = Path(__file__).parent / "data"
_BUNDLED_DEFAULT = _BUNDLED_DATA_DIR / "default.yaml"


@dataclass(frozen=True)
class Config:
    """A loaded configuration: the case to build and how to render it."""

    case: CaseSpec
    render: RenderSettings
    source: Optional[str] = None


def clear_cache() -> None:
    """Forget cached directories and parsed files."""
    _config_dirs.cache_clear()
    _load_cached.cache_clear()


@lru_cache(maxsize=None)
def _config_dirs() -> tuple[Path, ...]:
    dirs: List[Path] = []

    env_path = os.environ.get(PTEROSPHERA_CONFIG)
    if env_path:
        sep = ";" if sys.platform == "win32" else ":"
        for p in env_path.split(sep):
            p = p.strip()
            if p:
                path = Path(p).expanduser().resolve()
                if path.is_dir():
                    dirs.append(path)

    if sys.platform == "win32":
        config_base = Path(os.environ.get("APPDATA", "~")).expanduser()
    else:
        config_base = Path.home() / ".config"
    user_config = config_base / "pterosphera"
    if user_config.is_dir():
        dirs.append(user_config)

    return tuple(dirs)


def find_config() -> Path:
    """Return the configuration file the search order selects."""

    for d in _config_dirs():
        path = d / CONFIG_FILENAME
        if path.exists():
            return path
    return _BUNDLED_DEFAULT


def load_config(path: Optional[Path | str] = None) -> Config:
    """Load a configuration file.

    Args:
        path: explicit YAML file; when omitted the search order applies.

    Returns:
        The parsed :class:`Config`.

    Raises:
        FileNotFoundError: if an explicit path does not exist.
        ConfigurationError: if the file is malformed or has unknown keys.
    """

    if path is not None:
        path = Path(path).expanduser()
        if not path.exists():
            raise FileNotFoundError(f"Configuration not found: {path}")
    else:
        path = find_config()
    return _load_cached(str(path.resolve()))


@lru_cache(maxsize=32)
def _load_cached(path_str: str) -> Config:
    path = Path(path_str)
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"invalid YAML in {path}: {exc}") from exc
    return parse_config(data, source=str(path))


def parse_config(data: Any, source: Optional[str] = None) -> Config:
    """Build a :class:`Config` from an already-parsed mapping."""

    where = source or "configuration"
    if not isinstance(data, dict):
        raise ConfigurationError(f"invalid format in {where}: expected a mapping at root")
    schema_version = str(data.get("schema_version", "1.0"))
    if not schema_version.startswith("1."):
        raise ConfigurationError(
            f"unsupported schema version '{schema_version}' in {where}, expected 1.x",
            field="schema_version")

    data = dict(data)
    data.pop("schema_version", None)
    _reject_unknown(data, {"hand", "layout", "switch", "trackball", "trackball_offset",
                           "thumb", "thumb_offset", "thumb_rotation", "render"}, None)
    if "hand" not in data:
        raise ConfigurationError(f"{where} is missing the 'hand' section", field="hand")

    hand = _hand(data["hand"])
    case = CaseSpec(
        hand=hand,
        layout=_section(LayoutSettings, data.get("layout"), "layout"),
        switch=_section(MXSwitchSocketSpec, data.get("switch"), "switch"),
        trackball=_trackball(data["trackball"]) if data.get("trackball") else None,
        trackball_offset=_vector(data.get("trackball_offset", (0, 0, 0)), "trackball_offset"),
        thumb=_finger(data["thumb"]) if data.get("thumb") else None,
        thumb_offset=_vector(data.get("thumb_offset", (0, 0, 0)), "thumb_offset"),
        thumb_rotation=_number(data.get("thumb_rotation", 0.0), "thumb_rotation"),
    )
    return Config(case=case, render=_render(data.get("render")), source=source)


def _reject_unknown(data: Dict[str, Any], allowed, section: Optional[str]) -> None:
    unknown = sorted(set(data) - set(allowed))
    if unknown:
        prefix = f"{section}." if section else ""
        raise ConfigurationError(f"unknown key(s) {unknown}", field=prefix + unknown[0])


def _section(cls, data: Optional[Dict[str, Any]], name: str, **extra):
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"section '{name}' must be a mapping", field=name)
    names = {f.name for f in dataclasses.fields(cls)}
    _reject_unknown(data, names - set(extra), name)
    try:
        return cls(**data, **extra)
    except TypeError as exc:
        raise ConfigurationError(str(exc), field=name) from exc


def _number(value, name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"expected a number, got {value!r}", field=name) from None


def _vector(value, name: str) -> tuple:
    try:
        vec = tuple(float(v) for v in value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"expected three numbers, got {value!r}", field=name) from None
    if len(vec) != 3:
        raise ConfigurationError(f"expected three numbers, got {value!r}", field=name)
    return vec


def _finger(data) -> FingerSpec:
    return _section(FingerSpec, data, "finger")


def _hand(data) -> HandSpec:
    if not isinstance(data, dict):
        raise ConfigurationError("section 'hand' must be a mapping", field="hand")
    _reject_unknown(data, {"side", "fingers"}, "hand")
    fingers = data.get("fingers") or []
    if not isinstance(fingers, list):
        raise ConfigurationError("'fingers' must be a list", field="hand.fingers")
    return HandSpec(side=Side.parse(data.get("side", "left")),
                    fingers=tuple(_finger(f) for f in fingers))


def _trackball(data) -> TrackballSocketSpec:
    if not isinstance(data, dict):
        raise ConfigurationError("section 'trackball' must be a mapping", field="trackball")
    data = dict(data)
    btu = _section(BTUSpec, data.pop("btu", None), "trackball.btu")
    sensor = data.pop("sensor_mount", None)
    mount = _section(SensorMountSpec, sensor, "trackball.sensor_mount") if sensor else None
    return _section(TrackballSocketSpec, data, "trackball", btu=btu, sensor_mount=mount)


def _render(data) -> RenderSettings:
    if data is None:
        return RenderSettings()
    if not isinstance(data, dict):
        raise ConfigurationError("section 'render' must be a mapping", field="render")
    data = dict(data)
    if "material" in data:
        data["material"] = material_by_name(str(data["material"]))
    return _section(RenderSettings, data, "render")
