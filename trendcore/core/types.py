"""
Shared data structures for the trend engine.

Bars are ephemeral per-tick inputs; the enums are the categorical
outputs of the ADX classifier and the SAR state machine.
"""
from enum import Enum
from typing import NamedTuple, Optional

from trendcore.core.errors import InvalidInputError


class Bar(NamedTuple):
    """One price bar. close is optional only for Parabolic SAR."""
    high: float
    low: float
    close: Optional[float] = None
    volume: Optional[float] = None


# ─── Trend Classification ──────────────────────────────────────

class TrendDirection(str, Enum):
    UP = 'UP'
    DOWN = 'DOWN'
    SIDEWAYS = 'SIDEWAYS'   # ADX only: +DI == -DI


class TrendStrength(str, Enum):
    WEAK = 'WEAK'                   # ADX below strong threshold
    STRONG = 'STRONG'               # strong <= ADX < very strong
    VERY_STRONG = 'VERY_STRONG'     # ADX >= very strong threshold
    INSUFFICIENT = 'INSUFFICIENT'   # ADX window not full yet


class Phase(str, Enum):
    """
    Lifecycle of a bar-by-bar state machine.

    SEED:           no bar seen yet
    AWAITING_TREND: one bar seen, trend decided on the next one
    STEADY:         trend established, reversal tested every bar
    """
    SEED = 'SEED'
    AWAITING_TREND = 'AWAITING_TREND'
    STEADY = 'STEADY'


def as_bar(raw) -> Bar:
    """
    Coerce a Bar, a (high, low[, close[, volume]]) sequence or a mapping
    with 'high'/'low'/'close' keys into a Bar.
    """
    if isinstance(raw, Bar):
        return raw
    if isinstance(raw, dict):
        try:
            return Bar(raw['high'], raw['low'], raw.get('close'), raw.get('volume'))
        except KeyError as e:
            raise InvalidInputError(f"Bar is missing field {e}") from None
    try:
        values = tuple(raw)
    except TypeError:
        raise InvalidInputError(f"Cannot build a bar from {type(raw).__name__}") from None
    if not 2 <= len(values) <= 4:
        raise InvalidInputError(f"Bar needs 2-4 values, got {len(values)}")
    return Bar(*values)
