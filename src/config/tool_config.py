#!/usr/bin/env python3
"""
Tool Configuration Manager

Layers the settings every script needs:
- JSON configuration file (first one found in CONFIG_LOCATIONS)
- environment variables
- command-line flags (applied by the scripts via with_overrides)
"""

import json
import os
from dataclasses import dataclass, replace
from typing import Any, Dict, Mapping, Optional

from config import (
    CONFIG_LOCATIONS,
    DEFAULT_LOG_LEVEL,
    ENV_LOG_LEVEL,
    ENV_OUTPUT_DIR,
    ENV_POWERSHELL,
    ENV_USER,
)
from src.core.errors import ConfigurationError


@dataclass(frozen=True)
class ToolConfig:
    """Settings shared by the compliance helper scripts"""
    user_principal_name: Optional[str] = None
    powershell_path: Optional[str] = None
    output_dir: Optional[str] = None
    log_level: str = DEFAULT_LOG_LEVEL

    def with_overrides(self, **overrides: Any) -> "ToolConfig":
        """Copy with every non-None override applied"""
        values = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **values)


_FILE_KEYS = {
    'user_principal_name': 'user_principal_name',
    'powershell_path': 'powershell_path',
    'output_dir': 'output_dir',
    'log_level': 'log_level',
}

_ENV_KEYS = {
    ENV_USER: 'user_principal_name',
    ENV_POWERSHELL: 'powershell_path',
    ENV_OUTPUT_DIR: 'output_dir',
    ENV_LOG_LEVEL: 'log_level',
}


def _read_config_file(path: str) -> Optional[Dict[str, Any]]:
    """Read a JSON configuration file; None when it does not exist"""
    if not os.path.exists(path):
        return None
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Could not read configuration from {path}: {e}")
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration in {path} must be a JSON object")
    return data


def load_config(config_path: Optional[str] = None,
                environ: Optional[Mapping[str, str]] = None) -> ToolConfig:
    """
    Load configuration.

    Args:
        config_path: Explicit configuration file (must exist when given)
        environ: Environment mapping (defaults to os.environ)

    Returns:
        ToolConfig
    """
    environ = os.environ if environ is None else environ
    values: Dict[str, Any] = {}

    if config_path:
        expanded = os.path.expanduser(config_path)
        data = _read_config_file(expanded)
        if data is None:
            raise ConfigurationError(f"Configuration file does not exist: {expanded}")
    else:
        data = None
        for location in CONFIG_LOCATIONS:
            data = _read_config_file(os.path.expanduser(location))
            if data is not None:
                break

    for key, field_name in _FILE_KEYS.items():
        if data and data.get(key):
            values[field_name] = str(data[key])

    for env_name, field_name in _ENV_KEYS.items():
        if environ.get(env_name):
            values[field_name] = environ[env_name]

    return ToolConfig(**values)
