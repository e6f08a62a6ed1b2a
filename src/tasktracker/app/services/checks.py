"""Bridge field rules into ``ValidationError`` for service callers."""

from __future__ import annotations

from typing import Callable, TypeVar

from ..errors import ValidationError

T = TypeVar("T")


def checked(field: str, rule: Callable[[object], T], value: object) -> T:
    """Apply ``rule`` to ``value``, reporting failures against ``field``."""
    try:
        return rule(value)
    except ValueError as exc:
        raise ValidationError.for_field(field, str(exc)) from exc


__all__ = ["checked"]
