"""
True Range and Directional Movement extraction.

TR  = max(H - L, |H - Prev_Close|, |L - Prev_Close|)
+DM = H - Prev_H   if it beats the down move and is positive, else 0
-DM = Prev_L - L   if it beats the up move and is positive, else 0

Ties and negative moves give zero on both sides (Wilder's tie-break).
"""
from typing import Optional, Tuple


def true_range(high: float, low: float, prev_close: Optional[float] = None) -> float:
    """True Range; with no previous close it is just high - low."""
    hl = high - low
    if prev_close is None:
        return hl
    hc = abs(high - prev_close)
    lc = abs(low - prev_close)
    return max(hl, hc, lc)


def directional_movement(high: float, low: float,
                         prev_high: Optional[float],
                         prev_low: Optional[float]) -> Tuple[float, float]:
    """Raw (+DM, -DM) for the current bar against the previous one."""
    if prev_high is None or prev_low is None:
        return 0.0, 0.0

    up = high - prev_high
    down = prev_low - low
    plus_dm = up if (up > down and up > 0) else 0.0
    minus_dm = down if (down > up and down > 0) else 0.0
    return plus_dm, minus_dm
