from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


class TermFieldsError(RuntimeError):
    """Base error for the term fields library."""


class FieldGroupLoadError(TermFieldsError):
    """Raised when ACF field group definitions cannot be read."""


class SettingsError(TermFieldsError):
    """Erro ao carregar ou validar settings."""


@dataclass(slots=True)
class WPError:
    """Error value returned by a failed term retrieval.

    It is a value, not an exception: retrieval paths hand it over in place of
    the term or term list, and every decoration path returns it unchanged.

    Args:
        code: Machine readable error code, e.g. ``invalid_taxonomy``.
        message: Human readable message.
        data: Optional extra payload.
    """

    code: str
    message: str = ""
    data: Optional[Dict[str, Any]] = field(default=None)

    def __str__(self) -> str:
        return f"{self.code}: {self.message}" if self.message else self.code


def is_wp_error(value: Any) -> bool:
    """Return True when value is a retrieval error sentinel."""
    return isinstance(value, WPError)


__all__ = [
    "TermFieldsError",
    "FieldGroupLoadError",
    "SettingsError",
    "WPError",
    "is_wp_error",
]
