"""
ADX (Average Directional Index): streaming implementation.

ADX measures trend STRENGTH (not direction):
- ADX < 25:   weak trend or ranging market
- 25 to 50:   strong trend
- ADX >= 50:  very strong trend
+DI vs -DI gives the direction.

Per bar:
  1. True Range (TR), Directional Movement (+DM, -DM)
  2. Wilder smoothing of TR, +DM, -DM (sum-seeded, then recursive)
  3. +DI, -DI = 100 * smoothed DM / smoothed TR
  4. DX = 100 * |+DI - -DI| / (+DI + -DI)
  5. ADX = Wilder smoothed DX, seeded by the mean of the first window
     (DX counts from the second bar, so ADX is ready on bar adx_smoothing)

One bar in, one output out. Bars must arrive in order: every stage is a
recurrence.
"""
import logging
import math
from collections import deque
from dataclasses import dataclass, asdict, fields, replace
from typing import Optional, Tuple

import numpy as np

from trendcore.config import ADX_PARAMS
from trendcore.core.batch import run_batch
from trendcore.core.directional import true_range, directional_movement
from trendcore.core.errors import IndicatorError, InvalidInputError, DivisionByZeroError
from trendcore.core.types import Bar, TrendDirection, TrendStrength, as_bar
from trendcore.core.validation import validate_hlc, validate_periods, validate_thresholds
from trendcore.core.wilder import WilderSmoother, window_size

logger = logging.getLogger('trendcore.adx')


@dataclass(frozen=True)
class ADXConfig:
    period: int = ADX_PARAMS['period']
    adx_smoothing: int = ADX_PARAMS['adx_smoothing']
    strong_trend_threshold: float = ADX_PARAMS['strong_trend_threshold']
    very_strong_trend_threshold: float = ADX_PARAMS['very_strong_trend_threshold']

    @classmethod
    def from_dict(cls, params: dict) -> 'ADXConfig':
        """Build from a params dict (e.g. config.ADX_PARAMS); unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in params.items() if k in known})

    def validate(self):
        validate_periods(self.period, self.adx_smoothing)
        validate_thresholds(self.strong_trend_threshold, self.very_strong_trend_threshold)


@dataclass(frozen=True)
class ADXPeriodData:
    true_range: float
    plus_dm: float
    minus_dm: float
    plus_di: float
    minus_di: float
    dx: float


@dataclass(frozen=True)
class ADXOutput:
    adx: float
    plus_di: float
    minus_di: float
    dx: float
    true_range: float
    trend_strength: TrendStrength
    trend_direction: TrendDirection
    di_spread: float        # +DI - -DI, in [-100, 100]


@dataclass
class ADXState:
    """
    Complete ADX calculator state.

    tr / plus_dm / minus_dm hold the Wilder smoothers for the DI inputs,
    adx the smoother fed with every DX from the second bar on.
    """
    config: ADXConfig
    previous_high: Optional[float] = None
    previous_low: Optional[float] = None
    previous_close: Optional[float] = None
    period_data: Optional[deque] = None
    tr: Optional[WilderSmoother] = None
    plus_dm: Optional[WilderSmoother] = None
    minus_dm: Optional[WilderSmoother] = None
    dx_history: Optional[deque] = None
    adx: Optional[WilderSmoother] = None
    has_di_data: bool = False
    has_adx_data: bool = False
    is_first: bool = True

    def __post_init__(self):
        period = window_size(self.config.period)
        smoothing = window_size(self.config.adx_smoothing)
        if self.period_data is None:
            self.period_data = deque(maxlen=period)
        if self.dx_history is None:
            self.dx_history = deque(maxlen=smoothing)
        if self.tr is None:
            self.tr = WilderSmoother(period)
        if self.plus_dm is None:
            self.plus_dm = WilderSmoother(period)
        if self.minus_dm is None:
            self.minus_dm = WilderSmoother(period)
        if self.adx is None:
            self.adx = WilderSmoother(smoothing)

    @property
    def smoothed_tr(self) -> Optional[float]:
        return self.tr.level

    @property
    def smoothed_plus_dm(self) -> Optional[float]:
        return self.plus_dm.level

    @property
    def smoothed_minus_dm(self) -> Optional[float]:
        return self.minus_dm.level

    @property
    def current_adx(self) -> Optional[float]:
        return self.adx.value

    def copy(self) -> 'ADXState':
        return replace(
            self,
            period_data=deque(self.period_data, maxlen=self.period_data.maxlen),
            dx_history=deque(self.dx_history, maxlen=self.dx_history.maxlen),
            tr=self.tr.copy(),
            plus_dm=self.plus_dm.copy(),
            minus_dm=self.minus_dm.copy(),
            adx=self.adx.copy(),
        )

    def to_dict(self) -> dict:
        return {
            'config': asdict(self.config),
            'previous_high': self.previous_high,
            'previous_low': self.previous_low,
            'previous_close': self.previous_close,
            'period_data': [asdict(p) for p in self.period_data],
            'tr': self.tr.to_dict(),
            'plus_dm': self.plus_dm.to_dict(),
            'minus_dm': self.minus_dm.to_dict(),
            'dx_history': list(self.dx_history),
            'adx': self.adx.to_dict(),
            'has_di_data': self.has_di_data,
            'has_adx_data': self.has_adx_data,
            'is_first': self.is_first,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'ADXState':
        config = ADXConfig.from_dict(data['config'])
        return cls(
            config=config,
            previous_high=data.get('previous_high'),
            previous_low=data.get('previous_low'),
            previous_close=data.get('previous_close'),
            period_data=deque((ADXPeriodData(**p) for p in data.get('period_data', [])),
                              maxlen=window_size(config.period)),
            tr=WilderSmoother.from_dict(data['tr']),
            plus_dm=WilderSmoother.from_dict(data['plus_dm']),
            minus_dm=WilderSmoother.from_dict(data['minus_dm']),
            dx_history=deque(data.get('dx_history', []),
                             maxlen=window_size(config.adx_smoothing)),
            adx=WilderSmoother.from_dict(data['adx']),
            has_di_data=data.get('has_di_data', False),
            has_adx_data=data.get('has_adx_data', False),
            is_first=data.get('is_first', True),
        )


# ─── Trend Classifier ──────────────────────────────────────────

def classify_trend_strength(adx: float, config: ADXConfig,
                            has_adx_data: bool = True) -> TrendStrength:
    if not has_adx_data:
        return TrendStrength.INSUFFICIENT
    if adx >= config.very_strong_trend_threshold:
        return TrendStrength.VERY_STRONG
    if adx >= config.strong_trend_threshold:
        return TrendStrength.STRONG
    return TrendStrength.WEAK


def classify_trend_direction(plus_di: float, minus_di: float) -> TrendDirection:
    if plus_di > minus_di:
        return TrendDirection.UP
    if minus_di > plus_di:
        return TrendDirection.DOWN
    return TrendDirection.SIDEWAYS


# ─── Pipeline stages ───────────────────────────────────────────

def _directional_indicators(state: ADXState) -> Tuple[float, float]:
    # Ratio of smoothed DM to smoothed TR; running sums before the seed completes.
    s_tr = state.smoothed_tr
    if not s_tr:
        return 0.0, 0.0
    plus_di = 100.0 * state.smoothed_plus_dm / s_tr
    minus_di = 100.0 * state.smoothed_minus_dm / s_tr
    return plus_di, minus_di


def _dx(plus_di: float, minus_di: float) -> float:
    denom = plus_di + minus_di
    if denom == 0.0:
        return 0.0
    return 100.0 * abs(plus_di - minus_di) / denom


def _update_adx(state: ADXState, dx: float) -> float:
    """Push DX into the ADX window. Returns 0.0 until the window is full."""
    state.dx_history.append(dx)
    adx = state.adx.update(dx)
    if adx is None:
        return 0.0

    if not state.has_adx_data:
        state.has_adx_data = True
        logger.debug(f"ADX ready: seed {adx:.4f} from {state.config.adx_smoothing} DX values")
    return adx


def _first_bar(state: ADXState, bar: Bar) -> ADXOutput:
    state.previous_high = bar.high
    state.previous_low = bar.low
    state.previous_close = bar.close
    state.is_first = False

    return ADXOutput(
        adx=0.0, plus_di=0.0, minus_di=0.0, dx=0.0,
        true_range=true_range(bar.high, bar.low),
        trend_strength=TrendStrength.INSUFFICIENT,
        trend_direction=TrendDirection.SIDEWAYS,
        di_spread=0.0,
    )


def _next_bar(state: ADXState, bar: Bar) -> ADXOutput:
    config = state.config

    tr = true_range(bar.high, bar.low, state.previous_close)
    plus_dm, minus_dm = directional_movement(
        bar.high, bar.low, state.previous_high, state.previous_low)

    state.tr.update(tr)
    state.plus_dm.update(plus_dm)
    state.minus_dm.update(minus_dm)
    if not state.has_di_data and state.tr.is_seeded:
        state.has_di_data = True
        logger.debug(f"DI seeded after {config.period} bars: "
                     f"TR={state.smoothed_tr:.6f}")

    plus_di, minus_di = _directional_indicators(state)
    dx = _dx(plus_di, minus_di)
    adx = _update_adx(state, dx)

    if not all(math.isfinite(v) for v in (plus_di, minus_di, dx, adx)):
        raise DivisionByZeroError(
            f"Non-finite result: +DI={plus_di} -DI={minus_di} DX={dx} ADX={adx}")

    state.period_data.append(ADXPeriodData(
        true_range=tr, plus_dm=plus_dm, minus_dm=minus_dm,
        plus_di=plus_di, minus_di=minus_di, dx=dx))

    state.previous_high = bar.high
    state.previous_low = bar.low
    state.previous_close = bar.close

    return ADXOutput(
        adx=adx,
        plus_di=plus_di,
        minus_di=minus_di,
        dx=dx,
        true_range=tr,
        trend_strength=classify_trend_strength(adx, config, state.has_adx_data),
        trend_direction=classify_trend_direction(plus_di, minus_di),
        di_spread=plus_di - minus_di,
    )


def adx_step(state: ADXState, bar) -> Tuple[ADXState, ADXOutput]:
    """
    Pure ADX transition: (state, bar) -> (new state, output).

    The input state is never modified; on error nothing changes.
    """
    bar = validate_hlc(as_bar(bar))
    state.config.validate()

    new_state = state.copy()
    if new_state.is_first:
        output = _first_bar(new_state, bar)
    else:
        output = _next_bar(new_state, bar)
    return new_state, output


class ADX:
    """
    Streaming ADX calculator.

    Owns one ADXState; feed bars in order through calculate(). One
    instance per series; calls on one instance must not overlap.
    """

    requires_close = True

    def __init__(self, config: Optional[ADXConfig] = None):
        self._state = ADXState(config if config is not None else ADXConfig())

    @classmethod
    def with_period(cls, period: int) -> 'ADX':
        validate_periods(period)
        return cls(ADXConfig(period=period, adx_smoothing=period))

    @classmethod
    def with_periods(cls, period: int, adx_smoothing: int) -> 'ADX':
        validate_periods(period, adx_smoothing)
        return cls(ADXConfig(period=period, adx_smoothing=adx_smoothing))

    @classmethod
    def with_config(cls, config: ADXConfig) -> 'ADX':
        """Unchecked: an invalid config is reported by the first calculate()."""
        return cls(config)

    @property
    def config(self) -> ADXConfig:
        return self._state.config

    def calculate(self, bar) -> ADXOutput:
        try:
            new_state, output = adx_step(self._state, bar)
        except IndicatorError as e:
            logger.debug(f"Rejected bar {bar!r}: {type(e).__name__}: {e}")
            raise
        self._state = new_state
        return output

    def calculate_batch(self, bars) -> list:
        return run_batch(self, bars)

    def reset(self):
        self._state = ADXState(self._state.config)

    def get_state(self) -> ADXState:
        return self._state.copy()

    def set_state(self, state: ADXState):
        self._state = state.copy()

    def trend_strength(self) -> TrendStrength:
        adx = self._state.current_adx
        if adx is None:
            return TrendStrength.INSUFFICIENT
        return classify_trend_strength(adx, self._state.config, self._state.has_adx_data)

    def trend_direction(self) -> Optional[TrendDirection]:
        if not self._state.period_data:
            return None
        last = self._state.period_data[-1]
        return classify_trend_direction(last.plus_di, last.minus_di)


def _as_price_array(values, name: str) -> np.ndarray:
    arr = np.asarray(values, dtype=np.float64)
    if arr.ndim != 1:
        raise InvalidInputError(f"{name} must be one-dimensional")
    return arr


def calculate_adx_simple(highs, lows, closes, period: int = ADX_PARAMS['period']) -> np.ndarray:
    """
    Stateless ADX over HLC arrays.

    Returns:
        adx: float64 array, same length as input; 0.0 until the ADX window fills.
    """
    high = _as_price_array(highs, 'highs')
    low = _as_price_array(lows, 'lows')
    close = _as_price_array(closes, 'closes')

    n = len(high)
    if n != len(low) or n != len(close):
        raise InvalidInputError("All price arrays must have same length")

    adx = np.zeros(n, dtype=np.float64)
    if n == 0:
        return adx

    calc = ADX.with_period(period)
    for i in range(n):
        adx[i] = calc.calculate(Bar(high[i], low[i], close[i])).adx

    return adx
