"""
Half-open interval overlap test shared by every conflict check.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol


class Bounded(Protocol):
    """Anything exposing ``start`` and ``end`` timestamps."""

    start: datetime
    end: datetime


def overlaps(a: Bounded, b: Bounded) -> bool:
    """
    Return True when ``a`` and ``b`` share at least one instant.

    Touching endpoints (``a.end == b.start``) do not overlap.
    """
    return a.start < b.end and a.end > b.start
