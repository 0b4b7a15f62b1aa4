"""
Typed views over the validated config dict.

The loader hands out the raw mapping; the pieces that are consumed as a unit
(the backend connection) are turned into frozen dataclasses here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from cutbot.api.models import RetryPolicy


DEFAULT_BASE_URL = "http://localhost:3000/api/v1"
DEFAULT_TIMEOUT_MS = 5000
DEFAULT_ADMIN_ROLES = ("CUT Admin", "Moderator")


@dataclass(frozen=True)
class ApiSettings:
    """Connection settings for the ladder backend."""
    base_url: str = DEFAULT_BASE_URL
    api_key: Optional[str] = None
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    retry: RetryPolicy = field(default_factory=RetryPolicy)

    @property
    def timeout_s(self) -> float:
        return self.timeout_ms / 1000

    @classmethod
    def from_config(cls, cfg: dict[str, Any]) -> "ApiSettings":
        api = cfg.get("api") or {}
        retry = api.get("retry") or {}
        return cls(
            base_url=str(api.get("base_url") or DEFAULT_BASE_URL).rstrip("/"),
            api_key=api.get("api_key") or None,
            timeout_ms=int(api.get("timeout_ms", DEFAULT_TIMEOUT_MS)),
            retry=RetryPolicy(
                max_attempts=retry.get("max_attempts", RetryPolicy.max_attempts),
                base_delay_ms=retry.get("base_delay_ms", RetryPolicy.base_delay_ms),
            ),
        )


def admin_roles(cfg: dict[str, Any]) -> tuple[str, ...]:
    roles = (cfg.get("permissions") or {}).get("admin_roles")
    if roles is None:
        return DEFAULT_ADMIN_ROLES
    return tuple(str(r) for r in roles)


def admin_ids(cfg: dict[str, Any]) -> list[int]:
    return list(((cfg.get("permissions") or {}).get("users") or {}).get("admin_ids") or [])
