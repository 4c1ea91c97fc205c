"""
CV validation for an output format.

Checks a ParsedCV against what a renderer needs:

- Every required metadata field resolves (frontmatter first, then environment)
- Every section required by the output format is present
- Unrecognized H1 headings are reported as warnings, never as errors

All errors are collected in one pass and returned together, so an editor or
the command line can show the whole list at once.
"""

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Union

from cvmark.contexts.parsing.cv_data_structure import ParsedCV
from cvmark.contexts.parsing.cv_parser import scan_headings
from cvmark.contexts.parsing.metadata import (
    METADATA_FIELDS,
    find_missing_required_fields,
    missing_field_message,
    resolve_metadata,
)
from cvmark.contexts.parsing.section_registry import (
    OutputFormat,
    find_section_by_tag,
    get_required_sections_for_format,
    get_section_definition,
)
from cvmark.contexts.validation.logger import (
    ValidationLogger,
    _log_debug,
    _log_error,
    _log_info,
    _log_success,
)
from cvmark.utils.position import Range
from cvmark.utils.result import Result, failure, success

_VALIDATOR_SEAL = object()


@dataclass(frozen=True)
class ValidationError:
    """
    A single validation failure.

    Attributes:
        message: Human-readable description
        field: Metadata field or section id the error is about
        expected_type: What was expected ("string", "section")
        actual_value: What was found ("undefined", "missing", or the raw value)
        range: Source span to highlight, when one exists
    """

    message: str
    field: str
    expected_type: str
    actual_value: Any
    range: Optional[Range] = None


@dataclass(frozen=True)
class ValidatedCV(ParsedCV):
    """
    A ParsedCV that passed validation for a given format.

    Only validate_cv() can create one. metadata holds the values resolved
    against the environment at validation time.
    """

    format: OutputFormat = OutputFormat.CV
    _seal: object = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        if self._seal is not _VALIDATOR_SEAL:
            raise TypeError("ValidatedCV instances are created by validate_cv()")


def validate_metadata(cv: ParsedCV, environ: Mapping[str, str] = None) -> List[ValidationError]:
    """One error per required metadata field that resolves to nothing."""
    errors = []
    for field_name in find_missing_required_fields(cv.metadata, environ):
        written = None
        for key in METADATA_FIELDS[field_name].frontmatter_keys:
            if key in cv.frontmatter:
                written = cv.frontmatter[key]
                break
        errors.append(
            ValidationError(
                message=missing_field_message(field_name),
                field=field_name,
                expected_type="string",
                actual_value=written.value if written else "undefined",
                range=written.range if written else None,
            )
        )
    return errors


def validate_sections(cv: ParsedCV, format: OutputFormat) -> List[ValidationError]:
    """One error per section the format requires but the document lacks."""
    present = set(cv.section_ids)
    errors = []
    for section_id in get_required_sections_for_format(format):
        if section_id in present:
            continue
        definition = get_section_definition(section_id)
        errors.append(
            ValidationError(
                message=(
                    f"Missing required section for {format.value}: {section_id}. "
                    f"Use one of: {', '.join(definition.tags)}"
                ),
                field=section_id,
                expected_type="section",
                actual_value="missing",
            )
        )
    return errors


def warn_unknown_sections(raw_content: str, logger) -> int:
    """
    Warn once for every H1 heading the section registry does not know.

    Returns:
        Number of warnings emitted
    """
    count = 0
    for heading in scan_headings(raw_content):
        if find_section_by_tag(heading.value) is None:
            logger.warning(f'Unknown section "{heading.value}" will be ignored')
            count += 1
    return count


def validate_cv(
    cv: ParsedCV,
    format: Union[OutputFormat, str] = OutputFormat.CV,
    logger=None,
    environ: Mapping[str, str] = None,
) -> Result:
    """
    Validate a parsed CV for an output format.

    Args:
        cv: Parser output
        format: Target output format
        logger: Object with a warning(message) method; defaults to loguru
        environ: Environment for metadata fallback (defaults to os.environ)

    Returns:
        Success(ValidatedCV) when no errors were found,
        Failure(List[ValidationError]) otherwise

    Example:
        >>> result = validate_cv(parse_markdown(text), "rirekisho")
        >>> if is_failure(result):
        ...     for error in result.error:
        ...         print(format_validation_error(error))
    """
    if not isinstance(format, OutputFormat):
        format = OutputFormat(format)
    if logger is None:
        logger = ValidationLogger()

    _log_info(f"Validating {len(cv.sections)} section(s) for {format.value}")
    errors = validate_metadata(cv, environ) + validate_sections(cv, format)
    warnings = warn_unknown_sections(cv.raw_content, logger)

    if errors:
        _log_error(f"Validation for {format.value} failed with {len(errors)} error(s)")
        return failure(errors)

    if warnings:
        _log_debug(f"Validation for {format.value} passed with {warnings} warning(s)")
    else:
        _log_success(f"Validation for {format.value} passed")

    return success(
        ValidatedCV(
            metadata=resolve_metadata(cv.metadata, environ),
            sections=list(cv.sections),
            raw_content=cv.raw_content,
            frontmatter=dict(cv.frontmatter),
            issues=list(cv.issues),
            unknown_sections=list(cv.unknown_sections),
            format=format,
            _seal=_VALIDATOR_SEAL,
        )
    )


def format_validation_error(error: ValidationError) -> str:
    """
    One-line rendering of a validation error for logs and the command line.

    Example:
        >>> format_validation_error(error)
        '3:1 Missing required field: name. ...'
    """
    if error.range is None:
        return error.message
    start = error.range.start
    return f"{start.line + 1}:{start.character + 1} {error.message}"
