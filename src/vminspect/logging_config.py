"""
Logging setup for the vminspect CLI.

Diagnostics go to stderr so they never mix with the rendered report on stdout.
"""

import logging
import sys


def setup_logging(level: str = "WARNING") -> None:
    """
    Configure Python logging.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR)

    Log Format:
        YYYY-MM-DD HH:MM:SS [LEVEL] Message
    """
    log_level = getattr(logging, level.upper(), logging.WARNING)

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        stream=sys.stderr,
        force=True,
    )
