"""
trendcore CLI Entry Point.

Runs one indicator over a CSV of bars (columns: high, low, close).

Usage:
  python3 -m trendcore.main --csv bars.csv
  python3 -m trendcore.main --csv bars.csv --indicator sar --af-max 0.3
  python3 -m trendcore.main --csv bars.csv --indicator adx --period 10 --out adx.csv
"""
import argparse
import sys

import pandas as pd

from trendcore.config import ADX_PARAMS, SAR_PARAMS, ATR_PARAMS, CLI_CONFIG
from trendcore.core.adx import ADX, ADXConfig
from trendcore.core.atr import ATR, ATRConfig
from trendcore.core.batch import run_frame
from trendcore.core.errors import IndicatorError
from trendcore.core.parabolic_sar import ParabolicSAR, ParabolicSARConfig
from trendcore.logger import setup_logging


def load_bars(path: str) -> pd.DataFrame:
    """Read a bar CSV; column names are matched case-insensitively."""
    df = pd.read_csv(path)
    df.columns = [str(c).strip().lower() for c in df.columns]
    return df


def build_calculator(args):
    """Build a validated calculator from CLI args over the config defaults."""
    if args.indicator == 'adx':
        params = ADX_PARAMS.copy()
        if args.period is not None:
            params['period'] = args.period
            params['adx_smoothing'] = args.period
        if args.adx_smoothing is not None:
            params['adx_smoothing'] = args.adx_smoothing
        config = ADXConfig.from_dict(params)
        config.validate()
        return ADX.with_config(config)

    if args.indicator == 'sar':
        params = SAR_PARAMS.copy()
        if args.af_start is not None:
            params['acceleration_start'] = args.af_start
        if args.af_increment is not None:
            params['acceleration_increment'] = args.af_increment
        if args.af_max is not None:
            params['acceleration_maximum'] = args.af_max
        config = ParabolicSARConfig.from_dict(params)
        config.validate()
        return ParabolicSAR.with_config(config)

    params = ATR_PARAMS.copy()
    if args.period is not None:
        params['period'] = args.period
    config = ATRConfig.from_dict(params)
    config.validate()
    return ATR.with_config(config)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="trendcore: streaming ADX / Parabolic SAR / ATR")
    parser.add_argument("--csv", required=True, help="Bar CSV with high, low, close columns")
    parser.add_argument("--indicator", choices=['adx', 'sar', 'atr'],
                        default=CLI_CONFIG['indicator'], help="Indicator to run")
    parser.add_argument("--period", type=int, default=None, help="ADX/ATR period")
    parser.add_argument("--adx-smoothing", type=int, default=None, help="ADX smoothing window")
    parser.add_argument("--af-start", type=float, default=None, help="SAR acceleration start")
    parser.add_argument("--af-increment", type=float, default=None, help="SAR acceleration step")
    parser.add_argument("--af-max", type=float, default=None, help="SAR acceleration cap")
    parser.add_argument("--out", default=None, help="Write results CSV here instead of printing")
    parser.add_argument("--tail", type=int, default=CLI_CONFIG['tail'],
                        help="Rows to print when --out is not given")
    parser.add_argument("--log-level", default=CLI_CONFIG['log_level'])
    parser.add_argument("--log-dir", default=CLI_CONFIG['log_dir'])
    args = parser.parse_args(argv)

    log = setup_logging(args.log_level, args.log_dir)

    try:
        frame = load_bars(args.csv)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        log.error(f"Cannot read {args.csv}: {e}")
        return 1
    log.info(f"{len(frame)} bars loaded from {args.csv}")

    try:
        calc = build_calculator(args)
    except IndicatorError as e:
        log.error(f"Invalid {args.indicator} configuration: {type(e).__name__}: {e}")
        return 1

    try:
        result = run_frame(calc, frame)
    except IndicatorError as e:
        where = getattr(e, 'bar_index', None)
        where = f" at bar {where}" if where is not None else ""
        log.error(f"{args.indicator.upper()} failed{where}: {type(e).__name__}: {e}")
        return 1

    if args.out:
        result.to_csv(args.out, float_format=CLI_CONFIG['float_format'])
        log.info(f"{len(result)} rows written to {args.out}")
    else:
        print(f"\n{'='*62}")
        print(f"  {args.indicator.upper()} | {calc.config}")
        print(f"{'='*62}")
        print(result.tail(args.tail).to_string())

    return 0


if __name__ == "__main__":
    sys.exit(main())
