"""
Validation Context

Responsibilities:
- Checks required metadata and sections for an output format
- Warns about headings the section registry does not recognize

Owns: ValidatedCV, ValidationError
Never: Modifies the parsed document
"""

from cvmark.contexts.validation.validator import (
    ValidatedCV,
    ValidationError,
    format_validation_error,
    validate_cv,
)

__all__ = ["validate_cv", "format_validation_error", "ValidatedCV", "ValidationError"]
