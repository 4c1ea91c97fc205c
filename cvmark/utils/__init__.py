"""
Shared utilities for cvmark.

Common functionality used across contexts:
- Source positions and ranges
- Result values
- Logging and configuration (import from their modules directly)
"""

from cvmark.utils.position import (
    LineIndex,
    Located,
    Position,
    Range,
    create_position,
    create_range,
    create_range_from_numbers,
    located,
)
from cvmark.utils.result import Failure, Result, Success, failure, success

__all__ = [
    "Position",
    "Range",
    "Located",
    "LineIndex",
    "create_position",
    "create_range",
    "create_range_from_numbers",
    "located",
    "Result",
    "Success",
    "Failure",
    "success",
    "failure",
]
