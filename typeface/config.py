"""Configuration loading for typeface (.typeface.yml)."""

from __future__ import annotations

import os
import platform
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".typeface.yml"

_MACHINE_TO_GOARCH = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "armv7l": "arm",
    "armv6l": "arm",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
    "riscv64": "riscv64",
}


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


def default_goos() -> str:
    env = os.environ.get("GOOS")
    if env:
        return env
    system = platform.system().lower()
    return system or "linux"


def default_goarch() -> str:
    env = os.environ.get("GOARCH")
    if env:
        return env
    machine = platform.machine().lower()
    return _MACHINE_TO_GOARCH.get(machine, machine or "amd64")


@dataclass
class LoaderConfig:
    """Tolerance policy and build context used when loading Go packages."""

    skip_function_bodies: bool = True
    suppress_diagnostics: bool = True
    allow_unresolved_imports: bool = True
    cgo_enabled: bool = True
    goos: str = field(default_factory=default_goos)
    goarch: str = field(default_factory=default_goarch)
    build_tags: List[str] = field(default_factory=list)


@dataclass
class TypefaceConfig:
    """Represents the settings defined in .typeface.yml."""

    root: Path
    loader: LoaderConfig = field(default_factory=LoaderConfig)


_BOOL_OPTIONS = {"skip_function_bodies", "suppress_diagnostics", "allow_unresolved_imports", "cgo_enabled"}
_STR_OPTIONS = {"goos", "goarch"}
_LIST_OPTIONS = {"build_tags"}
_TOP_LEVEL_KEYS = {"loader"}


def load_config(config_path: Optional[Path] = None) -> TypefaceConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path or Path.cwd())
    root = config_file.parent.resolve()

    if not config_file.exists():
        return TypefaceConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    unknown = sorted(set(data) - _TOP_LEVEL_KEYS)
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

    loader_data = data.get("loader") or {}
    if not isinstance(loader_data, dict):
        raise ConfigError("'loader' must be a mapping")

    return TypefaceConfig(root=root, loader=_parse_loader(loader_data))


def _parse_loader(data: Dict[str, Any]) -> LoaderConfig:
    known = {item.name for item in fields(LoaderConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown loader options: {', '.join(unknown)}")

    loader = LoaderConfig()
    for key, value in data.items():
        if key in _BOOL_OPTIONS:
            setattr(loader, key, _as_bool(key, value))
        elif key in _STR_OPTIONS:
            setattr(loader, key, _as_str(key, value))
        elif key in _LIST_OPTIONS:
            setattr(loader, key, _as_str_list(key, value))
    return loader


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    raise ConfigError(f"loader.{key} must be true or false")


def _as_str(key: str, value: Any) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    raise ConfigError(f"loader.{key} must be a non-empty string")


def _as_str_list(key: str, value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        if not all(isinstance(item, str) for item in value):
            raise ConfigError(f"loader.{key} must be a list of strings")
        return list(value)
    raise ConfigError(f"loader.{key} must be a list of strings")


__all__ = ["CONFIG_FILENAME", "ConfigError", "LoaderConfig", "TypefaceConfig", "load_config"]
