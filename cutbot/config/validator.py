"""
Configuration validator for config.yaml (after environment overrides).

Validates structure, required fields, and common misconfigurations.
"""

from __future__ import annotations

import logging
from typing import Any


logger = logging.getLogger(__name__)

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ConfigValidationError(Exception):
    """Raised when config validation fails."""
    pass


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_config(cfg: dict[str, Any], config_path: str = "config.yaml") -> None:
    """
    Comprehensive validation of the bot configuration.

    Raises ConfigValidationError if validation fails.
    Logs detailed error messages before raising.

    Args:
        cfg: The loaded config dictionary
        config_path: Path to config file (for error messages)

    Raises:
        ConfigValidationError: If validation fails
    """
    errors = []
    warnings = []

    # ── Check root structure ────────────────────────────────────────────────
    if not isinstance(cfg, dict):
        errors.append(f"Config root must be a mapping, got {type(cfg).__name__}")
        cfg = {}

    # ── Discord credentials ─────────────────────────────────────────────────
    token = cfg.get("bot_token")
    if not token:
        errors.append("Missing 'bot_token' (set it in config.yaml or DISCORD_TOKEN in .env)")
    elif not isinstance(token, str):
        errors.append(f"'bot_token' must be a string, got {type(token).__name__}")

    for key in ("client_id", "guild_id"):
        if cfg.get(key) is not None and not _is_int(cfg[key]):
            errors.append(f"'{key}' must be an integer Discord id, got {cfg[key]!r}")

    # ── Validate api section ────────────────────────────────────────────────
    api = cfg.get("api")
    if api is None:
        errors.append("Missing required top-level key: 'api'")
    elif not isinstance(api, dict):
        errors.append(f"'api' must be a mapping, got {type(api).__name__}")
    else:
        base_url = api.get("base_url")
        if base_url is not None and (
            not isinstance(base_url, str) or not base_url.startswith(("http://", "https://"))
        ):
            errors.append(f"'api.base_url' must be an http(s) URL, got {base_url!r}")

        if not api.get("api_key"):
            warnings.append("'api.api_key' is empty; requests will be sent without Authorization (set API_KEY)")

        if "timeout_ms" in api:
            timeout = api["timeout_ms"]
            if not _is_int(timeout) or timeout <= 0:
                errors.append(f"'api.timeout_ms' must be a positive integer, got {timeout!r}")

        if "retry" in api:
            retry = api["retry"]
            if not isinstance(retry, dict):
                errors.append(f"'api.retry' must be a mapping, got {type(retry).__name__}")
            else:
                if "max_attempts" in retry:
                    attempts = retry["max_attempts"]
                    if not _is_int(attempts) or attempts < 1:
                        errors.append(f"'api.retry.max_attempts' must be an integer >= 1, got {attempts!r}")
                if "base_delay_ms" in retry:
                    delay = retry["base_delay_ms"]
                    if not _is_int(delay) or delay < 0:
                        errors.append(f"'api.retry.base_delay_ms' must be an integer >= 0, got {delay!r}")

    # ── Validate permissions section ───────────────────────────────────────
    if "permissions" in cfg:
        perms = cfg["permissions"]
        if not isinstance(perms, dict):
            errors.append(
                f"'permissions' must be a mapping, got {type(perms).__name__}"
            )
        else:
            if "admin_roles" in perms:
                roles = perms["admin_roles"]
                if not isinstance(roles, list) or not all(isinstance(r, str) for r in roles):
                    errors.append("'permissions.admin_roles' must be a list of role names")
                elif not roles:
                    warnings.append("'permissions.admin_roles' is empty; nobody can run admin commands")
            if "users" in perms:
                users = perms["users"]
                if not isinstance(users, dict):
                    errors.append(
                        f"'permissions.users' must be a mapping, got {type(users).__name__}"
                    )
                elif "admin_ids" in users:
                    ids = users["admin_ids"]
                    if not isinstance(ids, list):
                        errors.append(
                            f"'permissions.users.admin_ids' must be a list, got {type(ids).__name__}"
                        )
                    elif not all(_is_int(i) for i in ids):
                        errors.append("'permissions.users.admin_ids' must contain integer Discord ids")

    # ── Logging ─────────────────────────────────────────────────────────────
    level = cfg.get("log_level")
    if level is not None and str(level).upper() not in VALID_LOG_LEVELS:
        errors.append(
            f"'log_level' must be one of {', '.join(sorted(VALID_LOG_LEVELS))}, got {level!r}"
        )
    if cfg.get("log_dir") is not None and not isinstance(cfg["log_dir"], str):
        errors.append(f"'log_dir' must be a path string, got {type(cfg['log_dir']).__name__}")

    # ── Log warnings ────────────────────────────────────────────────────────
    for warning in warnings:
        logger.warning("Config warning: %s", warning)

    # ── Log errors and raise if any ─────────────────────────────────────────
    if errors:
        logger.error("=" * 70)
        logger.error("CONFIG VALIDATION FAILED (%s)", config_path)
        logger.error("=" * 70)
        for i, error in enumerate(errors, 1):
            logger.error("[%d] %s", i, error)
        logger.error("=" * 70)
        logger.error("Please fix the errors above and restart the bot.")
        logger.error("=" * 70)
        raise ConfigValidationError(f"Config validation failed with {len(errors)} error(s)")
