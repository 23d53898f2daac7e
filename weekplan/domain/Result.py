"""Explicit success/failure outcome returned by every gateway-backed operation."""
from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Result:
    ok: bool
    value: Any = None
    error: Optional[str] = None

    @classmethod
    def success(cls, value) -> "Result":
        return cls(True, value, None)

    @classmethod
    def failure(cls, error: str, value=None) -> "Result":
        '''On failure `value` carries the untouched input, if any, so callers can keep using it.'''
        return cls(False, value, error)

    def __bool__(self) -> bool:
        return self.ok
