"""
Batch Runner: fold a bar sequence through any calculator.

Every calculator exposes calculate(bar); the fold is strictly sequential
and fails fast, discarding partial results. Re-run from a checkpoint
(get_state/set_state) if partial output is needed.
"""
import logging
from dataclasses import asdict
from enum import Enum

import numpy as np
import pandas as pd

from trendcore.core.errors import IndicatorError, InvalidInputError
from trendcore.core.types import Bar

logger = logging.getLogger('trendcore.batch')


def run_batch(calculator, bars) -> list:
    """
    Feed bars one by one into calculator.calculate().

    On the first error the exception propagates with a `bar_index`
    attribute set to the position of the offending bar.
    """
    outputs = []
    for i, bar in enumerate(bars):
        try:
            outputs.append(calculator.calculate(bar))
        except IndicatorError as e:
            e.bar_index = i
            logger.debug(f"Batch stopped at bar {i}: {type(e).__name__}: {e}")
            raise
    return outputs


def _output_row(output) -> dict:
    row = asdict(output)
    for key, value in row.items():
        if isinstance(value, Enum):
            row[key] = value.value
    return row


def _numeric(column: pd.Series) -> np.ndarray:
    return pd.to_numeric(column, errors='coerce').to_numpy(dtype=float)


def run_frame(calculator, frame: pd.DataFrame) -> pd.DataFrame:
    """
    Run a calculator over a DataFrame with high/low(/close) columns.

    Returns one row per input bar, output fields as columns, same index.
    close is required unless the calculator declares requires_close = False.
    """
    requires_close = getattr(calculator, 'requires_close', True)
    required = ['high', 'low']
    if requires_close:
        required.append('close')
    missing = [c for c in required if c not in frame.columns]
    if missing:
        raise InvalidInputError(f"Missing columns: {missing}")

    # Non-numeric cells become NaN and are rejected by the bar validators
    highs = _numeric(frame['high'])
    lows = _numeric(frame['low'])
    if 'close' in frame.columns:
        closes = _numeric(frame['close'])
        if not requires_close:
            # Optional close: a blank cell means "no close", not a bad price
            blank = frame['close'].isna().to_numpy()
            closes = [None if b else c for b, c in zip(blank, closes)]
        bars = [Bar(h, l, c) for h, l, c in zip(highs, lows, closes)]
    else:
        bars = [Bar(h, l) for h, l in zip(highs, lows)]

    outputs = run_batch(calculator, bars)
    return pd.DataFrame([_output_row(o) for o in outputs], index=frame.index)
