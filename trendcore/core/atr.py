"""
ATR (Average True Range): streaming Wilder implementation.

TR  = max(H - L, |H - Prev_Close|, |L - Prev_Close|)   (first bar: H - L)
ATR = Wilder smoothed TR, seeded by the mean of the first `period` TRs
"""
import logging
from dataclasses import dataclass, asdict, fields, replace
from typing import Optional, Tuple

import numpy as np

from trendcore.config import ATR_PARAMS
from trendcore.core.batch import run_batch
from trendcore.core.directional import true_range
from trendcore.core.errors import IndicatorError, InvalidInputError
from trendcore.core.types import as_bar
from trendcore.core.validation import validate_hlc, validate_periods
from trendcore.core.wilder import WilderSmoother, window_size

logger = logging.getLogger('trendcore.atr')


@dataclass(frozen=True)
class ATRConfig:
    period: int = ATR_PARAMS['period']

    @classmethod
    def from_dict(cls, params: dict) -> 'ATRConfig':
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in params.items() if k in known})

    def validate(self):
        validate_periods(self.period)


@dataclass(frozen=True)
class ATROutput:
    atr: float          # 0.0 until is_ready
    true_range: float
    is_ready: bool


@dataclass
class ATRState:
    config: ATRConfig
    previous_close: Optional[float] = None
    smoother: Optional[WilderSmoother] = None

    def __post_init__(self):
        if self.smoother is None:
            self.smoother = WilderSmoother(window_size(self.config.period))

    def copy(self) -> 'ATRState':
        return replace(self, smoother=self.smoother.copy())

    def to_dict(self) -> dict:
        return {
            'config': asdict(self.config),
            'previous_close': self.previous_close,
            'smoother': self.smoother.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'ATRState':
        return cls(config=ATRConfig.from_dict(data['config']),
                   previous_close=data.get('previous_close'),
                   smoother=WilderSmoother.from_dict(data['smoother']))


def atr_step(state: ATRState, bar) -> Tuple[ATRState, ATROutput]:
    bar = validate_hlc(as_bar(bar))
    state.config.validate()

    new_state = state.copy()
    tr = true_range(bar.high, bar.low, new_state.previous_close)
    atr = new_state.smoother.update(tr)
    if atr is not None and not state.smoother.is_seeded:
        logger.debug(f"ATR ready: seed {atr:.6f} from {state.config.period} bars")
    new_state.previous_close = bar.close

    return new_state, ATROutput(atr=atr if atr is not None else 0.0,
                                true_range=tr, is_ready=atr is not None)


class ATR:
    requires_close = True

    def __init__(self, config: Optional[ATRConfig] = None):
        self._state = ATRState(config if config is not None else ATRConfig())

    @classmethod
    def with_period(cls, period: int) -> 'ATR':
        validate_periods(period)
        return cls(ATRConfig(period=period))

    @classmethod
    def with_config(cls, config: ATRConfig) -> 'ATR':
        return cls(config)

    @property
    def config(self) -> ATRConfig:
        return self._state.config

    def calculate(self, bar) -> ATROutput:
        try:
            new_state, output = atr_step(self._state, bar)
        except IndicatorError as e:
            logger.debug(f"Rejected bar {bar!r}: {type(e).__name__}: {e}")
            raise
        self._state = new_state
        return output

    def calculate_batch(self, bars) -> list:
        return run_batch(self, bars)

    def reset(self):
        self._state = ATRState(self._state.config)

    def get_state(self) -> ATRState:
        return self._state.copy()

    def set_state(self, state: ATRState):
        self._state = state.copy()


def calculate_atr_simple(highs, lows, closes, period: int = ATR_PARAMS['period']) -> np.ndarray:
    """Stateless ATR over HLC arrays; 0.0 until the first `period` bars are seen."""
    high = np.asarray(highs, dtype=np.float64)
    low = np.asarray(lows, dtype=np.float64)
    close = np.asarray(closes, dtype=np.float64)
    if high.ndim != 1 or low.ndim != 1 or close.ndim != 1:
        raise InvalidInputError("Price arrays must be one-dimensional")

    n = len(high)
    if n != len(low) or n != len(close):
        raise InvalidInputError("All price arrays must have same length")

    atr = np.zeros(n, dtype=np.float64)
    if n == 0:
        return atr

    calc = ATR.with_period(period)
    for i, out in enumerate(calc.calculate_batch(zip(high, low, close))):
        atr[i] = out.atr

    return atr
