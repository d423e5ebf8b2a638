"""
Uniform outcome of an upstream call or cache lookup.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union

from shared.errors import ProxyException


class Origin(Enum):
    """Where a successful payload came from."""
    CACHE = "cache"
    UPSTREAM = "upstream"


@dataclass(frozen=True)
class Success:
    """Raw upstream body, passed through untouched."""

    payload: bytes
    origin: Origin = Origin.UPSTREAM

    @property
    def from_cache(self) -> bool:
        return self.origin is Origin.CACHE


@dataclass(frozen=True)
class Failure:
    """Classified upstream failure; status 0 means no HTTP status was received."""

    status: int
    error: str
    details: Optional[str] = None
    hint: Optional[str] = None

    @property
    def http_status(self) -> int:
        return self.status or 500

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.error}
        if self.details is not None:
            body["details"] = self.details
        if self.hint:
            body["hint"] = self.hint
        return body

    @classmethod
    def from_exception(cls, exc: ProxyException) -> "Failure":
        return cls(status=exc.status_code, error=exc.message, details=exc.details, hint=exc.hint)


ResultEnvelope = Union[Success, Failure]
