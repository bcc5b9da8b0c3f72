"""
trendcore Default Configuration.

Default parameters for the streaming trend-strength engine.
Calculators read their defaults from here; override per instance.
"""

# ─── ADX (Average Directional Index) ──────────────────────────
ADX_PARAMS = {
    'period': 14,                       # DI lookback (Wilder's default)
    'adx_smoothing': 14,                # DX smoothing window for ADX
    'strong_trend_threshold': 25.0,     # ADX >= this = strong trend
    'very_strong_trend_threshold': 50.0,  # ADX >= this = very strong trend
}

# ─── Parabolic SAR ────────────────────────────────────────────
SAR_PARAMS = {
    'acceleration_start': 0.02,         # AF at the start of every trend
    'acceleration_increment': 0.02,     # AF step per new extreme point
    'acceleration_maximum': 0.20,       # AF cap
}

# ─── ATR (Average True Range) ─────────────────────────────────
ATR_PARAMS = {
    'period': 14,                       # Wilder smoothing window
}

# ─── Command Line Runner ──────────────────────────────────────
CLI_CONFIG = {
    'indicator': 'adx',                 # adx | sar | atr
    'tail': 20,                         # Rows printed when no --out given
    'log_level': 'INFO',
    'log_dir': None,                    # None = console only
    'float_format': '%.6f',             # CSV float format for --out
}
