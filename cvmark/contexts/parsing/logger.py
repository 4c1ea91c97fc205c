"""
Parsing context logger.

Provides logging interface for the parsing context with automatic [parse] prefix.
All parsing modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path
from typing import Optional

from loguru import logger

from cvmark.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[parse]"


def setup_parsing_logger(
    log_dir: Optional[Path] = None, source: Optional[Path] = None, level: str = "INFO"
) -> Optional[Path]:
    """
    Setup logger for the parsing context.

    Args:
        log_dir: Directory for this parsing session (None for console only)
        source: Document being parsed, recorded in the provenance header
        level: Console log level

    Returns:
        Path to log file, or None when logging to console only
    """
    extra = {"Source": source} if source else None
    return _setup_logger(
        context_name="parse",
        log_dir=log_dir,
        extra_provenance=extra,
        level=level,
    )


# Wrapper functions with automatic [parse] prefix


def _log_warning(message: str) -> None:
    """Log warning message with [parse] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [parse] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")
