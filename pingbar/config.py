# Copyright 2026 icecake0141
# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# This file was created or modified with the assistance of an AI (Large Language Model).
# Review required for correctness, security, and licensing.

"""
Persistent settings for PingBar, read from ~/.pingbar.conf.

The file is INI or YAML; both carry a ``default`` section of option values and
an optional ``hosts`` section listing hosts to monitor. Values found here sit
between command-line options (which win) and the built-in defaults.
"""

import configparser
import logging
import os
from typing import Any, Dict, Iterable, List, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = os.path.expanduser("~/.pingbar.conf")

OPTION_TYPES: Dict[str, type] = {
    "probe_timeout": float,
    "count": int,
    "interval": float,
    "transport": str,
    "ping_command": str,
    "ping_helper": str,
    "max_workers": int,
    "color": bool,
    "log_level": str,
    "log_file": str,
}

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

_TRUTHY = {"true", "yes", "on", "1"}
_FALSY = {"false", "no", "off", "0"}


def _to_bool(text: str) -> bool:
    word = text.strip().lower()
    if word in _TRUTHY:
        return True
    if word in _FALSY:
        return False
    raise ValueError(f"'{text}' is not a boolean (expected one of: {', '.join(sorted(_TRUTHY | _FALSY))}).")


def _to_log_level(value: Any) -> str:
    level = str(value).strip().upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"Option 'log_level' must be one of: {', '.join(LOG_LEVELS)}, got {value!r}.")
    return level


def convert_option(name: str, value: Any) -> Any:
    """
    Convert a raw option value to the type registered in OPTION_TYPES.

    YAML may already deliver typed values; INI always delivers strings.
    A YAML boolean is never accepted for a numeric or string option.
    log_level is upper-cased and must name one of LOG_LEVELS.

    Raises:
        ValueError: If the value cannot be converted
    """
    wanted = OPTION_TYPES[name]
    if isinstance(value, bool) and wanted is not bool:
        raise ValueError(f"Option '{name}' must be {wanted.__name__}, not a boolean.")
    if name == "log_level":
        return _to_log_level(value)
    if isinstance(value, wanted):
        return value
    try:
        return _to_bool(str(value)) if wanted is bool else wanted(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Option '{name}' must be {wanted.__name__}: {exc}") from exc


def _read_options(pairs: Iterable[Tuple[str, Any]], path: str) -> Dict[str, Any]:
    options: Dict[str, Any] = {}
    for name, value in pairs:
        if name not in OPTION_TYPES:
            logger.warning("Ignoring unknown option '%s' in %s", name, path)
        elif value is None:
            logger.warning("Ignoring option '%s' without a value in %s", name, path)
        else:
            options[name] = convert_option(name, value)
    return options


def _host_record(host: Any, interval: Any = None, enabled: Any = True) -> Dict[str, Any]:
    """Build a ``{"host", "interval", "enabled"}`` record; interval None means the default."""
    return {
        "host": host,
        "interval": None if interval is None or interval == "" else float(interval),
        "enabled": enabled if isinstance(enabled, bool) else _to_bool(str(enabled)),
    }


def _read_yaml_hosts(items: List[Any], path: str) -> List[Dict[str, Any]]:
    records = []
    for item in items:
        if isinstance(item, dict):
            host = str(item.get("host") or "").strip()
            if not host:
                logger.warning("Ignoring host item without a 'host' key in %s: %r", path, item)
                continue
            try:
                records.append(_host_record(host, item.get("interval"), item.get("enabled", True)))
            except (TypeError, ValueError) as exc:
                raise ValueError(f"Bad host item {item!r} in {path}: {exc}") from exc
        elif item is not None and str(item).strip():
            records.append(_host_record(str(item).strip()))
    return records


def load_ini_config(path: str) -> Dict[str, Any]:
    """
    Read an INI settings file.

    ``[default]`` holds ``name = value`` options. ``[hosts]`` holds one host per
    line, optionally followed by ``= interval``. Only ``=`` is a delimiter, so
    hosts containing ``:`` are kept whole.

    Raises:
        ValueError: If the file is malformed or an option value is invalid
    """
    parser = configparser.ConfigParser(allow_no_value=True, delimiters=("=",))
    try:
        if not parser.read(path, encoding="utf-8"):
            raise ValueError(f"Cannot read config file {path}.")
    except configparser.Error as exc:
        raise ValueError(f"Malformed config file {path}: {exc}") from exc

    settings: Dict[str, Any] = {}
    if parser.has_section("default"):
        settings.update(_read_options(parser.items("default"), path))
    if parser.has_section("hosts"):
        records = []
        for host, interval in parser.items("hosts"):
            try:
                records.append(_host_record(host.strip(), interval.strip() if interval else None))
            except ValueError as exc:
                raise ValueError(f"Bad interval {interval!r} for host {host} in {path}.") from exc
        if records:
            settings["hosts"] = records
    return settings


def load_yaml_config(path: str) -> Dict[str, Any]:
    """
    Read a YAML settings file with ``yaml.safe_load``.

    ``default`` is a mapping of options. ``hosts`` is a list whose items are
    host strings or mappings with ``host`` and optional ``interval``/``enabled``.

    Raises:
        ValueError: If the YAML is invalid or has the wrong shape
    """
    try:
        with open(path, "r", encoding="utf-8") as stream:
            document = yaml.safe_load(stream)
    except yaml.YAMLError as exc:
        raise ValueError(f"Malformed YAML in {path}: {exc}") from exc
    except OSError as exc:
        raise ValueError(f"Cannot read config file {path}: {exc}") from exc

    if document is None:
        return {}
    if not isinstance(document, dict):
        raise ValueError(f"{path} must hold a mapping at the top level, found {type(document).__name__}.")

    defaults = document.get("default") or {}
    if not isinstance(defaults, dict):
        raise ValueError(f"'default' in {path} must be a mapping.")
    settings = _read_options(defaults.items(), path)

    hosts = document.get("hosts")
    if hosts is not None:
        if not isinstance(hosts, list):
            raise ValueError(f"'hosts' in {path} must be a list.")
        records = _read_yaml_hosts(hosts, path)
        if records:
            settings["hosts"] = records
    return settings


def detect_format(path: str) -> str:
    """Return "ini" when the first meaningful line is a ``[section]`` header, else "yaml"."""
    with open(path, "r", encoding="utf-8") as stream:
        for line in stream:
            text = line.strip()
            if text and not text.startswith("#"):
                return "ini" if text.startswith("[") else "yaml"
    return "yaml"


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load settings from ``path`` (default ``~/.pingbar.conf``).

    A missing file yields an empty dict.

    Raises:
        ValueError: If the file exists but cannot be read or parsed
    """
    path = path or DEFAULT_CONFIG_PATH
    if not os.path.exists(path):
        return {}
    try:
        file_format = detect_format(path)
    except OSError as exc:
        raise ValueError(f"Cannot read config file {path}: {exc}") from exc
    logger.debug("Reading %s settings from %s", file_format.upper(), path)
    if file_format == "ini":
        return load_ini_config(path)
    return load_yaml_config(path)
