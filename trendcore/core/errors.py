"""
Error taxonomy shared by every calculator.

All errors are raised during validation, before any state is touched,
so a rejected bar can be corrected and resubmitted.
"""


class IndicatorError(Exception):
    """Base class for every calculator error."""


class InvalidInputError(IndicatorError):
    """Caller-supplied batch or shape error (e.g. mismatched array lengths)."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class InvalidPriceError(IndicatorError):
    """A price is NaN or infinite."""


# ─── Price ordering ────────────────────────────────────────────

class PriceOrderError(IndicatorError):
    """A bar violates low <= close <= high."""


class InvalidHLCError(PriceOrderError):
    """high < low, or close outside [low, high] (HLC calculators)."""


class InvalidHLError(PriceOrderError):
    """high < low (Parabolic SAR)."""


class CloseOutOfRangeError(PriceOrderError):
    """Optional close outside [low, high] (Parabolic SAR)."""


# ─── Configuration ─────────────────────────────────────────────

class ConfigError(IndicatorError):
    """Malformed calculator configuration."""


class InvalidPeriodError(ConfigError):
    """A period or smoothing window is not a positive integer."""


class InvalidThresholdsError(ConfigError):
    """strong_trend_threshold must be below very_strong_trend_threshold."""


class InvalidAccelerationError(ConfigError):
    """Acceleration parameters must be positive with maximum > start."""


class DivisionByZeroError(IndicatorError):
    """An internal computation produced a non-finite value."""
