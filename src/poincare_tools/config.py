"""Configuration: log level and default output file from environment."""

import os

from poincare_tools.constants import DEFAULT_OUTFILENAME

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


def get_log_level() -> str | None:
    """Return log level name from POINCARE_TOOLS_LOG, or None if unset/invalid.

    Returns:
        Upper-case level name (e.g. 'DEBUG') or None.
    """
    level = os.environ.get('POINCARE_TOOLS_LOG', '').strip().upper()
    if level in LOG_LEVELS:
        return level
    return None


def get_default_outfile() -> str:
    """Return default output file name (POINCARE_OUTFILE env var or 'aout.mp').

    Returns:
        Path string.
    """
    return os.environ.get('POINCARE_OUTFILE', '').strip() or DEFAULT_OUTFILENAME
