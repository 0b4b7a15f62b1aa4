"""
Plain data carriers shared by the API client and its callers.

Kept dependency-free so the command layer and tests can build them directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class RetryPolicy:
    """
    How many times a call is attempted and how long to wait in between.

    The delay before attempt n (n >= 2) is base_delay_ms * 2 ** (n - 2),
    i.e. 1x, 2x, 4x the base for attempts 2, 3, 4.
    """
    max_attempts: int = 3
    base_delay_ms: int = 1000

    def __post_init__(self) -> None:
        if isinstance(self.max_attempts, bool) or not isinstance(self.max_attempts, int) or self.max_attempts < 1:
            raise ValueError(f"max_attempts must be an integer >= 1, got {self.max_attempts!r}")
        if isinstance(self.base_delay_ms, bool) or not isinstance(self.base_delay_ms, int) or self.base_delay_ms < 0:
            raise ValueError(f"base_delay_ms must be an integer >= 0, got {self.base_delay_ms!r}")

    def delay_before(self, attempt: int) -> float:
        """Seconds to wait before `attempt` (1-based). Zero for the first one."""
        if attempt < 2:
            return 0.0
        return self.base_delay_ms * 2 ** (attempt - 2) / 1000


@dataclass(frozen=True)
class Request:
    """A single backend call. Params and body are frozen on construction."""
    method: str
    path: str
    params: Optional[Mapping[str, Any]] = None
    body: Optional[Mapping[str, Any]] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", self.method.upper())
        if not self.path.startswith("/"):
            object.__setattr__(self, "path", "/" + self.path)
        if self.params is not None:
            object.__setattr__(self, "params", MappingProxyType(dict(self.params)))
        if self.body is not None:
            object.__setattr__(self, "body", MappingProxyType(dict(self.body)))

    def describe(self) -> str:
        return f"{self.method} {self.path}"


@dataclass(frozen=True)
class ApiResponse:
    """Successful envelope `{success, data}` plus how it was obtained."""
    data: Any
    success: bool = True
    status_code: int = 200
    attempts: int = 1
    raw: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)
