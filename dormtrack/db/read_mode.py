"""
Read-mode selection.

Callers declare how fresh a read must be; this module decides which copy
of the store answers it. ``strong`` always goes to the primary. ``eventual``
and ``weak`` go to the secondary copy, which an out-of-band job fills and
which may lag the primary arbitrarily. Without a secondary copy every read
goes to the primary and the caller is not told.
"""

from enum import Enum
from typing import Optional, Union

from dormtrack.core.exceptions import ValidationError


class ReadMode(str, Enum):
    """Caller-declared consistency hint."""
    STRONG = "strong"
    EVENTUAL = "eventual"
    WEAK = "weak"


class StoreRole(str, Enum):
    """Copy of the store that served a read."""
    PRIMARY = "primary"
    SECONDARY = "secondary"


def parse_read_mode(
    value: Optional[Union[str, ReadMode]],
    default: Union[str, ReadMode] = ReadMode.STRONG,
) -> ReadMode:
    """
    Normalise a query-string mode.

    Missing or blank values use ``default``; anything else that is not a
    known mode is a validation error.
    """
    if isinstance(value, ReadMode):
        return value
    if value is None or not str(value).strip():
        return ReadMode(default)
    try:
        return ReadMode(str(value).strip().lower())
    except ValueError:
        raise ValidationError(
            "Unknown read mode",
            field_errors={"mode": [f"must be one of: {', '.join(m.value for m in ReadMode)}"]},
        )


def select_store(mode: ReadMode, has_secondary: bool) -> StoreRole:
    """Route a read to the primary or the secondary copy."""
    if mode is ReadMode.STRONG:
        return StoreRole.PRIMARY
    if not has_secondary:
        return StoreRole.PRIMARY
    return StoreRole.SECONDARY
