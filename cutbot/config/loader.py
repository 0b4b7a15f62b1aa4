from __future__ import annotations

import logging
import os
import sys
from typing import Any

import yaml
from dotenv import load_dotenv

from .validator import validate_config, ConfigValidationError


DEFAULT_CONFIG_FILE = "config.yaml"
CONFIG_ENV_VAR = "CONFIG_PATH"

# env var -> (section path, cast)
ENV_OVERRIDES: dict[str, tuple[tuple[str, ...], type]] = {
    "DISCORD_TOKEN": (("bot_token",), str),
    "DISCORD_CLIENT_ID": (("client_id",), int),
    "DISCORD_GUILD_ID": (("guild_id",), int),
    "API_BASE_URL": (("api", "base_url"), str),
    "API_KEY": (("api", "api_key"), str),
    "API_TIMEOUT": (("api", "timeout_ms"), int),
    "LOG_LEVEL": (("log_level",), str),
}


def get_config_path() -> str:
    """
    Resolve the config path, preferring an explicit environment override.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return env_path
    return DEFAULT_CONFIG_FILE


def _load_raw_config(path: str | None = None) -> dict[str, Any]:
    cfg_path = path or get_config_path()
    try:
        with open(cfg_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logging.error("Config file not found: %s", cfg_path)
        sys.exit(1)
    except yaml.YAMLError as e:
        logging.error("YAML parsing error in %s: %s", cfg_path, e)
        sys.exit(1)

    if not isinstance(data, dict):
        logging.error("Config root must be a mapping, got %s", type(data).__name__)
        sys.exit(1)

    return data


def apply_env_overrides(cfg: dict[str, Any], environ: dict[str, str] | None = None) -> dict[str, Any]:
    """
    Overlay secrets and connection settings from the environment (.env included).
    Values that fail to cast are left as strings so validation reports them.
    """
    environ = os.environ if environ is None else environ
    for var, (keys, cast) in ENV_OVERRIDES.items():
        raw = environ.get(var)
        if raw is None or raw == "":
            continue
        try:
            value: Any = cast(raw)
        except ValueError:
            value = raw
        section = cfg
        for key in keys[:-1]:
            if not isinstance(section.get(key), dict):
                section[key] = {}
            section = section[key]
        section[keys[-1]] = value
    return cfg


def get_config(path: str | None = None) -> dict[str, Any]:
    """
    Public helper for loading configuration.

    - Loads .env, then respects CONFIG_PATH if set.
    - Environment variables override values from the file.
    - Performs comprehensive validation.
    - Exits with error code 1 if validation fails.
    - Returns the raw dict; typed helpers live in cutbot.config.models.
    """
    load_dotenv()
    cfg_path = path or get_config_path()
    cfg = apply_env_overrides(_load_raw_config(cfg_path))

    try:
        validate_config(cfg, cfg_path)
    except ConfigValidationError:
        sys.exit(1)

    return cfg
