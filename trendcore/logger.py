"""
Logging setup for command-line runs.

Provides:
  - Console output (formatted)
  - File logging with rotation (optional)

The library modules only create child loggers ('trendcore.adx',
'trendcore.parabolic_sar', 'trendcore.atr', 'trendcore.batch'); handlers are
installed here, on the 'trendcore' parent they propagate to.
"""
import os
import logging
import logging.handlers
from typing import Optional


def setup_logging(log_level: str = 'INFO', log_dir: Optional[str] = None) -> logging.Logger:
    """
    Install console (+ rotating file) handlers on the 'trendcore' logger.

    Safe to call repeatedly: handlers are added once, later calls only
    adjust the level. Returns the 'trendcore' logger.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    log = logging.getLogger('trendcore')
    log.setLevel(level)

    # Avoid duplicate handlers on re-init
    if log.handlers:
        for h in log.handlers:
            if not isinstance(h, logging.FileHandler):
                h.setLevel(level)
        return log

    # Console handler
    ch = logging.StreamHandler()
    ch.setLevel(level)
    ch.setFormatter(logging.Formatter('%(levelname)s | %(name)s | %(message)s'))
    log.addHandler(ch)

    # File handler with rotation (10MB, 5 backups)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        fh = logging.handlers.RotatingFileHandler(
            os.path.join(log_dir, 'trendcore.log'),
            maxBytes=10 * 1024 * 1024, backupCount=5)
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(
            '%(asctime)s | %(levelname)s | %(name)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'))
        log.addHandler(fh)

    return log
