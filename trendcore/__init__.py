"""
trendcore: streaming trend-strength and trend-reversal indicators.

Bars go in one at a time; every calculator keeps bounded state and
emits one output per bar.
"""
from trendcore.core import (
    Bar, TrendDirection, TrendStrength, IndicatorError,
    ADX, ADXConfig, calculate_adx_simple,
    ParabolicSAR, ParabolicSARConfig, calculate_parabolic_sar_simple,
    ATR, ATRConfig, calculate_atr_simple,
    run_batch, run_frame,
)

__version__ = '1.0.0'
