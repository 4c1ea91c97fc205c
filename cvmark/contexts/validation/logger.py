"""
Validation context logger.

Provides logging interface for the validation context with automatic [validate] prefix.
All validation modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path
from typing import Optional

from loguru import logger

from cvmark.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[validate]"


def setup_validation_logger(
    log_dir: Optional[Path] = None, format: str = "cv", level: str = "INFO"
) -> Optional[Path]:
    """
    Setup logger for the validation context.

    Args:
        log_dir: Directory for this validation session (None for console only)
        format: Output format being validated, recorded in the provenance header
        level: Console log level

    Returns:
        Path to log file, or None when logging to console only

    Example:
        from cvmark.contexts.validation.logger import setup_validation_logger, _log_info

        log_file = setup_validation_logger(log_dir, format="rirekisho")
        _log_info("Validating...")
    """
    return _setup_logger(
        context_name="validate",
        log_dir=log_dir,
        extra_provenance={"Format": format},
        level=level,
    )


# Wrapper functions with automatic [validate] prefix


def _log_info(message: str) -> None:
    """Log info message with [validate] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [validate] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [validate] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [validate] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [validate] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


class ValidationLogger:
    """Warning sink handed to validate_cv() by default; forwards to loguru."""

    def warning(self, message: str) -> None:
        _log_warning(message)
