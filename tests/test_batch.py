"""
Tests for the batch fold and the pandas frame runner.
"""
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import numpy as np
import pandas as pd
import pytest
from trendcore.core.adx import ADX, calculate_adx_simple
from trendcore.core.atr import ATR
from trendcore.core.batch import run_batch, run_frame
from trendcore.core.errors import InvalidHLCError, InvalidHLError, InvalidInputError, InvalidPriceError
from trendcore.core.parabolic_sar import ParabolicSAR
from trendcore.core.types import Bar


def make_frame(n=100):
    np.random.seed(42)
    close = 100 + np.cumsum(np.random.normal(0, 1, n))
    high = close + np.abs(np.random.normal(0, 0.5, n))
    low = close - np.abs(np.random.normal(0, 0.5, n))
    index = pd.date_range('2024-01-01', periods=n, freq='h')
    return pd.DataFrame({'high': high, 'low': low, 'close': close}, index=index)


class TestRunBatch:
    def test_one_output_per_bar(self):
        bars = [Bar(10.0 + i, 8.0 + i, 9.0 + i) for i in range(20)]
        assert len(run_batch(ADX.with_period(5), bars)) == 20

    def test_fail_fast_with_index(self):
        bars = [Bar(10.0, 8.0, 9.0), Bar(11.0, 9.0, 10.0), Bar(8.0, 12.0, 9.0), Bar(12.0, 10.0, 11.0)]
        adx = ADX.with_period(3)
        with pytest.raises(InvalidHLCError) as exc:
            adx.calculate_batch(bars)
        assert exc.value.bar_index == 2
        # Bars before the failure were committed; the bad one was not
        assert adx.get_state().previous_close == 10.0

    def test_accepts_generators(self):
        outs = run_batch(ParabolicSAR(), ((10.0 + i, 8.0 + i) for i in range(5)))
        assert len(outs) == 5

    def test_empty(self):
        assert run_batch(ATR(), []) == []


class TestRunFrame:
    def test_adx_frame(self):
        df = make_frame()
        result = run_frame(ADX.with_period(10), df)
        assert list(result.index) == list(df.index)
        assert {'adx', 'plus_di', 'minus_di', 'dx', 'true_range',
                'trend_strength', 'trend_direction', 'di_spread'} <= set(result.columns)
        assert result['trend_strength'].iloc[0] == 'INSUFFICIENT'
        np.testing.assert_array_equal(
            result['adx'].to_numpy(),
            calculate_adx_simple(df['high'], df['low'], df['close'], 10))

    def test_sar_without_close(self):
        df = make_frame().drop(columns=['close'])
        result = run_frame(ParabolicSAR(), df)
        assert len(result) == len(df)
        assert result['provisional'].iloc[0]
        assert set(result['trend'].unique()) <= {'UP', 'DOWN'}

    def test_missing_close_for_adx(self):
        df = make_frame().drop(columns=['close'])
        with pytest.raises(InvalidInputError):
            run_frame(ADX(), df)

    def test_text_cell_is_invalid_price(self):
        df = pd.DataFrame({'high': ['10', 'abc', '12'], 'low': [8.0, 9.0, 10.0],
                           'close': [9.0, 10.0, 11.0]})
        with pytest.raises(InvalidPriceError) as exc:
            run_frame(ADX(), df)
        assert exc.value.bar_index == 1

    def test_sar_blank_close_is_optional(self):
        df = pd.DataFrame({'high': [10.0, 12.0, 14.0], 'low': [8.0, 9.0, 10.0],
                           'close': [9.0, np.nan, 12.0]})
        result = run_frame(ParabolicSAR(), df)
        assert len(result) == 3
        assert result['trend'].iloc[1] == 'UP'

    def test_sar_text_close_rejected(self):
        df = pd.DataFrame({'high': [10.0, 12.0], 'low': [8.0, 9.0], 'close': [9.0, 'n/a']})
        with pytest.raises(InvalidPriceError):
            run_frame(ParabolicSAR(), df)

    def test_adx_blank_close_rejected(self):
        df = pd.DataFrame({'high': [10.0, 12.0], 'low': [8.0, 9.0], 'close': [9.0, np.nan]})
        with pytest.raises(InvalidPriceError) as exc:
            run_frame(ADX(), df)
        assert exc.value.bar_index == 1

    def test_bad_row_reports_position(self):
        df = make_frame(30)
        df.iloc[12, df.columns.get_loc('high')] = df['low'].iloc[12] - 1.0
        with pytest.raises(InvalidHLError) as exc:
            run_frame(ParabolicSAR(), df)
        assert exc.value.bar_index == 12


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
