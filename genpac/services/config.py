"""Settings for a genpac run.

Values are layered: explicit overrides (command line) win over the INI config
file, which wins over the defaults below. The compiler core never sees this
module; callers pass plain values down.
"""

from __future__ import annotations

import configparser
import os
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional

from genpac.services.errors import ConfigError


DEFAULT_GFWLIST_URL = "https://raw.githubusercontent.com/gfwlist/gfwlist/master/gfwlist.txt"

CONFIG_SECTION = "config"

_STRIP_CHARS = " '\t\""

_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    proxy: str = ""
    output: str = ""
    gfwlist_url: str = DEFAULT_GFWLIST_URL
    gfwlist_proxy: str = ""
    gfwlist_local: str = ""
    update_gfwlist_local: bool = True
    gfwlist_disabled: bool = False
    user_rules: List[str] = field(default_factory=list)
    user_rule_files: List[str] = field(default_factory=list)
    compress: bool = False
    base64: bool = False
    precise: bool = False
    config_from: str = ""

    @property
    def pac_proxy(self) -> str:
        return self.proxy or "DIRECT"


# INI key -> (Settings attribute, kind)
_KEYS: Dict[str, tuple] = {
    "proxy": ("proxy", "str"),
    "output": ("output", "path"),
    "gfwlist-url": ("gfwlist_url", "str"),
    "gfwlist-proxy": ("gfwlist_proxy", "str"),
    "gfwlist-local": ("gfwlist_local", "path"),
    "update-gfwlist-local": ("update_gfwlist_local", "bool"),
    "gfwlist-disabled": ("gfwlist_disabled", "bool"),
    "user-rule": ("user_rules", "list"),
    "user-rule-from": ("user_rule_files", "pathlist"),
    "compress": ("compress", "bool"),
    "base64": ("base64", "bool"),
    "precise": ("precise", "bool"),
}


def abspath(path: Optional[str]) -> str:
    p = (path or "").strip()
    if not p:
        return ""
    return os.path.abspath(os.path.expanduser(p))


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip(_STRIP_CHARS).lower() in _TRUE_VALUES


def _split_list(value: str) -> List[str]:
    return [p.strip(_STRIP_CHARS) for p in (value or "").split(",") if p.strip(_STRIP_CHARS)]


def _convert(kind: str, raw: str) -> Any:
    v = (raw or "").strip(_STRIP_CHARS)
    if kind == "bool":
        return parse_bool(v)
    if kind == "path":
        return abspath(v)
    if kind == "list":
        return _split_list(v)
    if kind == "pathlist":
        return [abspath(p) for p in _split_list(v)]
    return v


def read_config_file(path: str) -> Dict[str, Any]:
    """Read the [config] section into Settings field values."""
    p = abspath(path)
    if not p:
        return {}
    parser = configparser.ConfigParser(interpolation=None)
    try:
        with open(p, "r", encoding="utf-8") as f:
            parser.read_file(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config file {p}: {e}") from e
    except configparser.Error as e:
        raise ConfigError(f"Malformed config file {p}: {e}") from e

    if not parser.has_section(CONFIG_SECTION):
        raise ConfigError(f"Config file {p} has no [{CONFIG_SECTION}] section.")

    values: Dict[str, Any] = {}
    for key, raw in parser.items(CONFIG_SECTION):
        entry = _KEYS.get(key.strip().lower())
        if entry is None:
            continue
        attr, kind = entry
        values[attr] = _convert(kind, raw)
    return values


def load_settings(
    config_from: Optional[str] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> Settings:
    """Build Settings from an optional config file plus explicit overrides.

    Overrides whose value is None are treated as unset.
    """
    settings = Settings(config_from=abspath(config_from))
    file_values = read_config_file(config_from) if config_from else {}
    if file_values:
        settings = replace(settings, **file_values)

    explicit: Dict[str, Any] = {}
    for attr, value in (overrides or {}).items():
        if value is None:
            continue
        if attr in ("output", "gfwlist_local"):
            value = abspath(value)
        elif attr == "user_rule_files":
            value = [abspath(p) for p in value if p]
        explicit[attr] = value
    if explicit:
        try:
            settings = replace(settings, **explicit)
        except TypeError as e:
            raise ConfigError(f"Unknown setting: {e}") from e
    return settings


def settings_from_env() -> Settings:
    """Settings for the HTTP service, located through GENPAC_CONFIG."""
    return load_settings(config_from=(os.environ.get("GENPAC_CONFIG") or "").strip() or None)
