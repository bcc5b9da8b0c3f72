"""
Parabolic SAR (Stop and Reverse): streaming state machine.

SAR = Prev_SAR + AF * (EP - Prev_SAR)

  AF: acceleration factor, starts at 0.02, +0.02 per new extreme, capped at 0.20
  EP: extreme point, highest high in an uptrend, lowest low in a downtrend

Phases:
  SEED            bar 0, provisional output only
  AWAITING_TREND  bar 1, trend from high vs previous high, initial SAR/EP
  STEADY          every later bar: reverse when price touches SAR, else advance

In an uptrend SAR never rises above the current or previous low; in a
downtrend it never drops below the current or previous high.
"""
import logging
from dataclasses import dataclass, asdict, fields, replace
from typing import Optional, Tuple

import numpy as np

from trendcore.config import SAR_PARAMS
from trendcore.core.batch import run_batch
from trendcore.core.errors import IndicatorError, InvalidInputError
from trendcore.core.types import Bar, Phase, TrendDirection, as_bar
from trendcore.core.validation import validate_hl, validate_acceleration

logger = logging.getLogger('trendcore.parabolic_sar')


@dataclass(frozen=True)
class ParabolicSARConfig:
    acceleration_start: float = SAR_PARAMS['acceleration_start']
    acceleration_increment: float = SAR_PARAMS['acceleration_increment']
    acceleration_maximum: float = SAR_PARAMS['acceleration_maximum']

    @classmethod
    def from_dict(cls, params: dict) -> 'ParabolicSARConfig':
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in params.items() if k in known})

    def validate(self):
        validate_acceleration(self.acceleration_start,
                              self.acceleration_increment,
                              self.acceleration_maximum)


@dataclass(frozen=True)
class ParabolicSAROutput:
    sar: float
    trend: TrendDirection
    acceleration_factor: float
    extreme_point: float
    trend_reversal: bool
    trend_periods: int
    provisional: bool = False   # True only on the seed bar: not a real SAR level


@dataclass
class ParabolicSARState:
    config: ParabolicSARConfig
    phase: Phase = Phase.SEED
    trend: Optional[TrendDirection] = None
    current_sar: Optional[float] = None
    acceleration_factor: Optional[float] = None
    extreme_point: Optional[float] = None
    previous_high: Optional[float] = None
    previous_low: Optional[float] = None
    previous_close: Optional[float] = None
    trend_periods: int = 0

    def __post_init__(self):
        if self.acceleration_factor is None:
            self.acceleration_factor = self.config.acceleration_start

    @property
    def is_first(self) -> bool:
        return self.phase is Phase.SEED

    @property
    def is_second(self) -> bool:
        return self.phase is Phase.AWAITING_TREND

    def copy(self) -> 'ParabolicSARState':
        return replace(self)

    def to_dict(self) -> dict:
        data = asdict(self)
        data['phase'] = self.phase.value
        data['trend'] = self.trend.value if self.trend is not None else None
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'ParabolicSARState':
        trend = data.get('trend')
        return cls(
            config=ParabolicSARConfig.from_dict(data['config']),
            phase=Phase(data.get('phase', Phase.SEED.value)),
            trend=TrendDirection(trend) if trend is not None else None,
            current_sar=data.get('current_sar'),
            acceleration_factor=data.get('acceleration_factor'),
            extreme_point=data.get('extreme_point'),
            previous_high=data.get('previous_high'),
            previous_low=data.get('previous_low'),
            previous_close=data.get('previous_close'),
            trend_periods=data.get('trend_periods', 0),
        )


# ─── Phase handlers ────────────────────────────────────────────

def _seed(state: ParabolicSARState, bar: Bar) -> ParabolicSAROutput:
    state.phase = Phase.AWAITING_TREND
    return ParabolicSAROutput(
        sar=bar.low,
        trend=TrendDirection.UP,
        acceleration_factor=state.config.acceleration_start,
        extreme_point=bar.high,
        trend_reversal=False,
        trend_periods=1,
        provisional=True,
    )


def _establish_trend(state: ParabolicSARState, bar: Bar) -> ParabolicSAROutput:
    prev_high, prev_low = state.previous_high, state.previous_low

    if bar.high > prev_high:
        trend = TrendDirection.UP
        sar, ep = prev_low, max(bar.high, prev_high)
    else:
        trend = TrendDirection.DOWN
        sar, ep = prev_high, min(bar.low, prev_low)

    state.phase = Phase.STEADY
    state.trend = trend
    state.current_sar = sar
    state.extreme_point = ep
    state.acceleration_factor = state.config.acceleration_start
    state.trend_periods = 1
    logger.debug(f"Trend established: {trend.value} SAR={sar} EP={ep}")

    return ParabolicSAROutput(
        sar=sar, trend=trend,
        acceleration_factor=state.acceleration_factor,
        extreme_point=ep, trend_reversal=False,
        trend_periods=state.trend_periods,
    )


def _reverse(state: ParabolicSARState, bar: Bar) -> ParabolicSAROutput:
    if state.trend is TrendDirection.UP:
        new_trend, new_ep = TrendDirection.DOWN, bar.low
    else:
        new_trend, new_ep = TrendDirection.UP, bar.high

    # Old extreme becomes the new stop level
    new_sar = state.extreme_point

    logger.debug(f"Reversal {state.trend.value} -> {new_trend.value} after "
                 f"{state.trend_periods} bars: SAR={new_sar} EP={new_ep}")

    state.trend = new_trend
    state.current_sar = new_sar
    state.extreme_point = new_ep
    state.acceleration_factor = state.config.acceleration_start
    state.trend_periods = 1

    return ParabolicSAROutput(
        sar=new_sar, trend=new_trend,
        acceleration_factor=state.acceleration_factor,
        extreme_point=new_ep, trend_reversal=True,
        trend_periods=state.trend_periods,
    )


def _advance(state: ParabolicSARState, bar: Bar) -> ParabolicSAROutput:
    config = state.config
    trend = state.trend
    ep = state.extreme_point

    if trend is TrendDirection.UP:
        new_extreme = bar.high > ep
        if new_extreme:
            ep = bar.high
    else:
        new_extreme = bar.low < ep
        if new_extreme:
            ep = bar.low

    if new_extreme:
        state.acceleration_factor = min(
            state.acceleration_factor + config.acceleration_increment,
            config.acceleration_maximum)

    sar = state.current_sar + state.acceleration_factor * (ep - state.current_sar)

    # Keep SAR out of the last two bars' range
    if trend is TrendDirection.UP:
        prev_low = state.previous_low if state.previous_low is not None else bar.low
        sar = min(sar, bar.low, prev_low)
    else:
        prev_high = state.previous_high if state.previous_high is not None else bar.high
        sar = max(sar, bar.high, prev_high)

    state.current_sar = sar
    state.extreme_point = ep
    state.trend_periods += 1

    return ParabolicSAROutput(
        sar=sar, trend=trend,
        acceleration_factor=state.acceleration_factor,
        extreme_point=ep, trend_reversal=False,
        trend_periods=state.trend_periods,
    )


def _is_reversal(state: ParabolicSARState, bar: Bar) -> bool:
    if state.trend is TrendDirection.UP:
        return bar.low <= state.current_sar
    return bar.high >= state.current_sar


def sar_step(state: ParabolicSARState, bar) -> Tuple[ParabolicSARState, ParabolicSAROutput]:
    """
    Pure SAR transition: (state, bar) -> (new state, output).

    The input state is never modified; on error nothing changes.
    """
    bar = validate_hl(as_bar(bar))
    state.config.validate()

    new_state = state.copy()
    if new_state.phase is Phase.SEED:
        output = _seed(new_state, bar)
    elif new_state.phase is Phase.AWAITING_TREND:
        output = _establish_trend(new_state, bar)
    elif _is_reversal(new_state, bar):
        output = _reverse(new_state, bar)
    else:
        output = _advance(new_state, bar)

    # Every branch: this bar becomes "previous"
    new_state.previous_high = bar.high
    new_state.previous_low = bar.low
    if bar.close is not None:
        new_state.previous_close = bar.close

    return new_state, output


class ParabolicSAR:
    """
    Streaming Parabolic SAR calculator.

    The first output is provisional (flagged provisional=True) and carries
    no SAR level; the trend is decided on the second bar.
    """

    requires_close = False

    def __init__(self, config: Optional[ParabolicSARConfig] = None):
        self._state = ParabolicSARState(
            config if config is not None else ParabolicSARConfig())

    @classmethod
    def with_acceleration(cls, start: float, increment: float,
                          maximum: float) -> 'ParabolicSAR':
        validate_acceleration(start, increment, maximum)
        return cls(ParabolicSARConfig(start, increment, maximum))

    @classmethod
    def with_config(cls, config: ParabolicSARConfig) -> 'ParabolicSAR':
        """Unchecked: an invalid config is reported by the first calculate()."""
        return cls(config)

    @property
    def config(self) -> ParabolicSARConfig:
        return self._state.config

    def calculate(self, bar) -> ParabolicSAROutput:
        try:
            new_state, output = sar_step(self._state, bar)
        except IndicatorError as e:
            logger.debug(f"Rejected bar {bar!r}: {type(e).__name__}: {e}")
            raise
        self._state = new_state
        return output

    def calculate_batch(self, bars) -> list:
        return run_batch(self, bars)

    def reset(self):
        self._state = ParabolicSARState(self._state.config)

    def get_state(self) -> ParabolicSARState:
        return self._state.copy()

    def set_state(self, state: ParabolicSARState):
        self._state = state.copy()

    def current_trend(self) -> Optional[TrendDirection]:
        return self._state.trend

    def current_acceleration_factor(self) -> float:
        return self._state.acceleration_factor


def calculate_parabolic_sar_simple(highs, lows,
                                   acceleration_start: Optional[float] = None,
                                   acceleration_increment: Optional[float] = None,
                                   acceleration_maximum: Optional[float] = None) -> np.ndarray:
    """
    Stateless Parabolic SAR over HL arrays.

    Missing acceleration arguments fall back to config.SAR_PARAMS.
    Index 0 holds the provisional seed value (the first low).
    """
    high = np.asarray(highs, dtype=np.float64)
    low = np.asarray(lows, dtype=np.float64)
    if high.ndim != 1 or low.ndim != 1:
        raise InvalidInputError("Highs and lows must be one-dimensional")
    if len(high) != len(low):
        raise InvalidInputError("Highs and lows must have same length")

    n = len(high)
    sar = np.zeros(n, dtype=np.float64)
    if n == 0:
        return sar

    config = ParabolicSARConfig(
        acceleration_start=(acceleration_start if acceleration_start is not None
                            else SAR_PARAMS['acceleration_start']),
        acceleration_increment=(acceleration_increment if acceleration_increment is not None
                                else SAR_PARAMS['acceleration_increment']),
        acceleration_maximum=(acceleration_maximum if acceleration_maximum is not None
                              else SAR_PARAMS['acceleration_maximum']),
    )
    calc = ParabolicSAR.with_config(config)
    for i in range(n):
        sar[i] = calc.calculate(Bar(high[i], low[i])).sar

    return sar
