"""
Bar and configuration validation.

Validators run first on every calculate() call and never touch state.
Bar validators return a cleaned Bar with float fields.
"""
import math
import numbers

from trendcore.core.errors import (
    InvalidInputError, InvalidPriceError,
    InvalidHLCError, InvalidHLError, CloseOutOfRangeError,
    InvalidPeriodError, InvalidThresholdsError, InvalidAccelerationError,
)
from trendcore.core.types import Bar


def _finite(value) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidPriceError(f"Price {value!r} is not a number") from None
    if not math.isfinite(value):
        raise InvalidPriceError(f"Price {value} is not finite")
    return value


def validate_hlc(bar: Bar) -> Bar:
    """
    Validate a bar for HLC calculators (ADX, ATR).

    close is required; high >= low and low <= close <= high.
    """
    if bar.close is None:
        raise InvalidInputError("close is required")
    high, low, close = _finite(bar.high), _finite(bar.low), _finite(bar.close)

    if high < low:
        raise InvalidHLCError(f"high {high} < low {low}")
    if close < low or close > high:
        raise InvalidHLCError(f"close {close} outside [{low}, {high}]")

    return Bar(high, low, close, bar.volume)


def validate_hl(bar: Bar) -> Bar:
    """Validate a bar for Parabolic SAR, where close is optional."""
    high, low = _finite(bar.high), _finite(bar.low)

    if high < low:
        raise InvalidHLError(f"high {high} < low {low}")

    close = None
    if bar.close is not None:
        close = _finite(bar.close)
        if close < low or close > high:
            raise CloseOutOfRangeError(f"close {close} outside [{low}, {high}]")

    return Bar(high, low, close, bar.volume)


# ─── Configuration ─────────────────────────────────────────────

def validate_periods(*periods):
    for period in periods:
        if (not isinstance(period, numbers.Integral) or isinstance(period, bool)
                or period <= 0):
            raise InvalidPeriodError(f"Period must be a positive integer, got {period!r}")


def validate_thresholds(strong: float, very_strong: float):
    if not (math.isfinite(strong) and math.isfinite(very_strong)) or strong >= very_strong:
        raise InvalidThresholdsError(
            f"strong threshold {strong} must be below very strong threshold {very_strong}")


def validate_acceleration(start: float, increment: float, maximum: float):
    if not all(math.isfinite(x) for x in (start, increment, maximum)):
        raise InvalidAccelerationError("Acceleration parameters must be finite")
    if start <= 0.0 or increment <= 0.0 or maximum <= start:
        raise InvalidAccelerationError(
            f"Need start > 0, increment > 0, maximum > start "
            f"(got {start}, {increment}, {maximum})")
