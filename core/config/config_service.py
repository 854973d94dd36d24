"""Typed, layered configuration loader with precedence handling."""
from __future__ import annotations

import os
import configparser
from dataclasses import dataclass, fields
from pathlib import Path
from threading import RLock
from typing import Any, Callable, Dict, Optional, Tuple

# --------------------------------------------------------------------------- #
#  Paths & default definitions
# --------------------------------------------------------------------------- #

def _find_project_root() -> Path:
    here = Path(__file__).resolve()
    for parent in here.parents:
        if (parent / "core").is_dir():
            return parent
    return here.parent

PROJECT_ROOT = _find_project_root()
CONFIG_DIR = PROJECT_ROOT / "core" / "config"
DEFAULTS_INI = CONFIG_DIR / "defaults.ini"

ENV_PREFIX = "PDFOVERLAY_"


_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "General": {
        "app_name": "PDF Overlay Editor",
        "version": "0.1.0",
    },
    "Render": {
        "oversample": "2.0",
        "default_viewport_width": "600",
    },
    "Overlay": {
        "default_text": "New Text",
        "default_font_family": "Inter",
        "default_font_size": "16",
        "default_color": "#000000",
        "default_font_weight": "normal",
        "default_text_decoration": "none",
        "center_offset_x": "50",
        "center_offset_y": "10",
    },
    "Export": {
        "underline_offset_ratio": "0.1",
        "underline_thickness": "1.0",
    },
    "Storage": {
        "upload_dir": (PROJECT_ROOT / "data" / "uploads").as_posix(),
    },
}


# --------------------------------------------------------------------------- #
#  Datamodels
# --------------------------------------------------------------------------- #

@dataclass
class GeneralConfig:
    app_name: str = ""
    version: str = ""


@dataclass
class RenderConfig:
    oversample: float = 2.0
    default_viewport_width: float = 600.0


@dataclass
class OverlayConfig:
    default_text: str = "New Text"
    default_font_family: str = "Inter"
    default_font_size: float = 16.0
    default_color: str = "#000000"
    default_font_weight: str = "normal"
    default_text_decoration: str = "none"
    center_offset_x: float = 50.0
    center_offset_y: float = 10.0


@dataclass
class ExportConfig:
    underline_offset_ratio: float = 0.1
    underline_thickness: float = 1.0


@dataclass
class StorageConfig:
    upload_dir: Path = PROJECT_ROOT / "data" / "uploads"


# --------------------------------------------------------------------------- #
#  Helpers
# --------------------------------------------------------------------------- #

def _cp_to_dict(cp: configparser.ConfigParser) -> Dict[str, Dict[str, Any]]:
    data: Dict[str, Dict[str, Any]] = {}
    for section in cp.sections():
        data[section] = {k: v for k, v in cp.items(section)}
    return data


def _read_ini(path: Path) -> Dict[str, Dict[str, Any]]:
    cp = configparser.ConfigParser()
    cp.read(path, encoding="utf-8")
    return _cp_to_dict(cp)


def _apply(target: Dict[str, Dict[str, Any]], source: Dict[str, Dict[str, Any]],
           layer: str, origin: str,
           sources: Dict[Tuple[str, str], Dict[str, str]]) -> None:
    for section, items in source.items():
        sec = target.setdefault(section, {})
        for key, value in items.items():
            sec[key] = value
            sources[(section, key)] = {"layer": layer, "source": origin}


def _cast(value: Any, typ: Any) -> Any:
    # fields carry string annotations because of "from __future__ import annotations"
    if isinstance(typ, str):
        typ = {"Path": Path, "bool": bool, "int": int, "float": float, "str": str}.get(typ, str)
    if typ is Path:
        return Path(str(value)).expanduser()
    if typ is bool:
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in {"1", "true", "yes", "on"}
    if typ is int:
        return int(value)
    if typ is float:
        return float(value)
    return typ(value)


def _build_dataclass(cls: type, data: Dict[str, Any]) -> Any:
    kwargs = {}
    for field in fields(cls):
        val = data.get(field.name, field.default)
        kwargs[field.name] = _cast(val, field.type)
    return cls(**kwargs)


def _env_overlays() -> Dict[str, Dict[str, Any]]:
    result: Dict[str, Dict[str, Any]] = {}
    for env_key, value in os.environ.items():
        if not env_key.startswith(ENV_PREFIX):
            continue
        remainder = env_key[len(ENV_PREFIX):]
        parts = remainder.split("__", 1)
        if len(parts) != 2:
            continue
        section, key = parts
        section = section.title()
        key = key.lower()
        result.setdefault(section, {})[key] = value
    return result


def _user_config_path() -> Path:
    if os.name == "nt":
        appdata = os.environ.get("APPDATA") or (Path.home() / "AppData" / "Roaming")
        return Path(appdata) / "PdfOverlay" / "config.ini"
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")) / "pdfoverlay" / "config.ini"


# --------------------------------------------------------------------------- #
#  ConfigService
# --------------------------------------------------------------------------- #


class ConfigService:
    """Facade merging layered configuration with type safety.

    Precedence (lowest first): embedded defaults, defaults.ini, environment
    (``PDFOVERLAY_<SECTION>__<KEY>``), user config file.
    """

    def __init__(self, *, defaults_ini: Optional[Path] = None,
                 user_ini: Optional[Path] = None) -> None:
        self._lock = RLock()
        self._defaults_ini = Path(defaults_ini) if defaults_ini else DEFAULTS_INI
        self._user_ini = Path(user_ini) if user_ini else None
        self.reload()

    # ------------------------------------------------------------------ #
    def reload(self) -> None:
        with self._lock:
            merged: Dict[str, Dict[str, Any]] = {}
            sources: Dict[Tuple[str, str], Dict[str, str]] = {}

            # Layer 0: embedded defaults
            _apply(merged, _DEFAULTS, "code", "embedded", sources)

            # Layer 1: defaults.ini
            if self._defaults_ini.exists():
                _apply(merged, _read_ini(self._defaults_ini), "defaults.ini",
                       str(self._defaults_ini), sources)

            # Layer 2: environment variables
            _apply(merged, _env_overlays(), "env", "os.environ", sources)

            # Layer 3: user overrides
            user_ini = self._user_ini or _user_config_path()
            if user_ini.exists():
                _apply(merged, _read_ini(user_ini), "user", str(user_ini), sources)

            self._merged = merged
            self._sources = sources

            self.general = _build_dataclass(GeneralConfig, merged.get("General", {}))
            self.render = _build_dataclass(RenderConfig, merged.get("Render", {}))
            self.overlay = _build_dataclass(OverlayConfig, merged.get("Overlay", {}))
            self.export = _build_dataclass(ExportConfig, merged.get("Export", {}))
            self.storage = _build_dataclass(StorageConfig, merged.get("Storage", {}))

    # ------------------------------------------------------------------ #
    def get(self, section: str, key: str, *, cast: Callable[[Any], Any] | type = str) -> Any:
        val = self._merged.get(section, {}).get(key)
        if val is None:
            return None
        if isinstance(cast, type):
            return _cast(val, cast)
        return cast(val)

    def meta_source(self, section: str, key: str) -> Dict[str, str] | None:
        return self._sources.get((section, key))


# Global singleton
config_service = ConfigService()
