"""
Streaming trend-strength engine: ADX pipeline, Parabolic SAR state machine, ATR.
"""
from trendcore.core.errors import (
    IndicatorError, InvalidInputError, InvalidPriceError,
    PriceOrderError, InvalidHLCError, InvalidHLError, CloseOutOfRangeError,
    ConfigError, InvalidPeriodError, InvalidThresholdsError, InvalidAccelerationError,
    DivisionByZeroError,
)
from trendcore.core.types import Bar, Phase, TrendDirection, TrendStrength, as_bar
from trendcore.core.wilder import WilderSmoother
from trendcore.core.adx import (
    ADX, ADXConfig, ADXOutput, ADXPeriodData, ADXState,
    adx_step, calculate_adx_simple,
)
from trendcore.core.parabolic_sar import (
    ParabolicSAR, ParabolicSARConfig, ParabolicSAROutput, ParabolicSARState,
    sar_step, calculate_parabolic_sar_simple,
)
from trendcore.core.atr import ATR, ATRConfig, ATROutput, ATRState, atr_step, calculate_atr_simple
from trendcore.core.batch import run_batch, run_frame
