"""
Wilder Smoothing (RMA) accumulator.

Two phases, switched exactly once:
  1. Seed:   running sum of the first `period` values, then value = sum / period
  2. Smooth: value = (value * (period - 1) + x) / period

Same recurrence Wilder uses for ATR, the DI inputs and ADX itself.
"""
import numbers
from dataclasses import dataclass, asdict, replace
from typing import Optional


def window_size(n) -> int:
    """Buffer size for a configured period; 0 for an invalid one."""
    # Unchecked configs are only rejected on calculate(); keep state constructible.
    if isinstance(n, numbers.Integral) and not isinstance(n, bool) and n > 0:
        return int(n)
    return 0


@dataclass
class WilderSmoother:
    period: int
    count: int = 0                  # Values seen during the seed phase
    total: float = 0.0              # Running sum during the seed phase
    value: Optional[float] = None   # Smoothed value once seeded

    @property
    def is_seeded(self) -> bool:
        return self.value is not None

    @property
    def level(self) -> Optional[float]:
        """Smoothed value once seeded, the running sum before, None if empty."""
        if self.value is not None:
            return self.value
        if self.count == 0:
            return None
        return self.total

    def update(self, x: float) -> Optional[float]:
        """Feed one value. Returns the smoothed value, or None while seeding."""
        if self.value is None:
            self.total += x
            self.count += 1
            if self.count >= self.period:
                self.value = self.total / self.period
            return self.value

        self.value = (self.value * (self.period - 1) + x) / self.period
        return self.value

    def copy(self) -> 'WilderSmoother':
        return replace(self)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> 'WilderSmoother':
        return cls(period=data['period'], count=data.get('count', 0),
                   total=data.get('total', 0.0), value=data.get('value'))
