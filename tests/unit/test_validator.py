"""Unit tests for CV validation."""

import pytest

from cvmark.contexts.parsing.cv_data_structure import ParsedCV, ParsedSection, TextContent
from cvmark.contexts.parsing.cv_parser import parse_markdown
from cvmark.contexts.parsing.section_registry import OutputFormat
from cvmark.contexts.validation.validator import (
    ValidatedCV,
    ValidationError,
    format_validation_error,
    validate_cv,
)
from cvmark.utils.position import create_range_from_numbers
from cvmark.utils.result import is_failure, is_success, unwrap

FULL_ENV = {
    "NAME": "Env Name",
    "EMAIL_ADDRESS": "env@example.com",
    "PHONE_NUMBER": "03-0000-0000",
}

VALID_DOC = """---
name: Taro Yamada
email_address: taro@example.com
phone_number: 090-1234-5678
---

# Experience

```resume:experience
- company: Example Corp
  title: Engineer
```
"""


class RecordingLogger:
    def __init__(self):
        self.warnings = []

    def warning(self, message):
        self.warnings.append(message)


def make_cv(metadata=None, section_ids=(), raw_content=""):
    sections = [
        ParsedSection(id=section_id, title=section_id, content=TextContent())
        for section_id in section_ids
    ]
    return ParsedCV(metadata=metadata or {}, sections=sections, raw_content=raw_content)


@pytest.mark.unit
def test_valid_document_passes():
    """Test a complete document validates for every format."""
    cv = parse_markdown(VALID_DOC, environ={})

    for format in OutputFormat:
        result = validate_cv(cv, format, logger=RecordingLogger(), environ={})
        assert is_success(result)
        validated = unwrap(result)
        assert isinstance(validated, ValidatedCV)
        assert validated.format is format
        assert validated.sections == cv.sections
        assert validated.metadata["name"] == "Taro Yamada"


@pytest.mark.unit
def test_format_accepts_strings():
    """Test that the format may be given by its value."""
    cv = parse_markdown(VALID_DOC, environ={})
    result = validate_cv(cv, "rirekisho", logger=RecordingLogger(), environ={})

    assert unwrap(result).format is OutputFormat.RIREKISHO


@pytest.mark.unit
def test_all_errors_are_accumulated():
    """Test that every missing field and section is reported at once."""
    result = validate_cv(make_cv(), "cv", logger=RecordingLogger(), environ={})

    assert is_failure(result)
    assert [error.field for error in result.error] == [
        "name",
        "email_address",
        "phone_number",
        "experience",
    ]


@pytest.mark.unit
def test_missing_metadata_error_shape():
    """Test message, expected type and actual value for a missing field."""
    cv = make_cv(metadata={"name": "A", "email_address": "a@x.jp"}, section_ids=["experience"])
    result = validate_cv(cv, "cv", logger=RecordingLogger(), environ={})

    assert result.error == [
        ValidationError(
            message=(
                "Missing required field: phone_number. Set via environment variable "
                "(PHONE_NUMBER or PHONE_NUMBER1) or frontmatter (phone_number or phone_number1)."
            ),
            field="phone_number",
            expected_type="string",
            actual_value="undefined",
        )
    ]


@pytest.mark.unit
def test_missing_name_and_phone_are_both_reported():
    """Test one error per missing field, each naming its environment variable and frontmatter."""
    cv = make_cv(metadata={"email_address": "a@x.jp"}, section_ids=["experience"])
    result = validate_cv(cv, "cv", logger=RecordingLogger(), environ={})

    assert is_failure(result)
    assert len(result.error) == 2
    name_error, phone_error = result.error
    assert name_error.field == "name"
    assert "NAME" in name_error.message
    assert "frontmatter" in name_error.message
    assert phone_error.field == "phone_number"
    assert "PHONE_NUMBER" in phone_error.message
    assert "frontmatter" in phone_error.message


@pytest.mark.unit
def test_missing_section_error_shape():
    """Test the required-section error lists acceptable tags."""
    cv = make_cv(metadata={"name": "A", "email_address": "a@x.jp", "phone_number": "1"})
    error = validate_cv(cv, "rirekisho", logger=RecordingLogger(), environ={}).error[0]

    assert error.message == (
        "Missing required section for rirekisho: experience. Use one of: "
        "職歴, 職務経歴, 職務履歴, Experience, Work Experience, Professional Experience"
    )
    assert error.field == "experience"
    assert error.expected_type == "section"
    assert error.actual_value == "missing"
    assert error.range is None


@pytest.mark.unit
def test_environment_satisfies_required_metadata():
    """Test that env values fill fields the frontmatter lacks."""
    cv = make_cv(section_ids=["experience"])
    result = validate_cv(cv, "cv", logger=RecordingLogger(), environ=FULL_ENV)

    assert is_success(result)
    assert unwrap(result).metadata["email_address"] == "env@example.com"


@pytest.mark.unit
def test_frontmatter_wins_over_conflicting_environment():
    """Test that validation keeps the frontmatter value when env disagrees."""
    cv = parse_markdown(VALID_DOC, environ={})
    validated = unwrap(validate_cv(cv, "cv", logger=RecordingLogger(), environ=FULL_ENV))

    assert validated.metadata["name"] == "Taro Yamada"
    assert validated.metadata["phone_number"] == "090-1234-5678"


@pytest.mark.unit
def test_blank_frontmatter_value_points_at_key():
    """Test that the error for a blank frontmatter field carries its range."""
    text = VALID_DOC.replace("name: Taro Yamada", "name: ")
    cv = parse_markdown(text, environ={})
    result = validate_cv(cv, "cv", logger=RecordingLogger(), environ={})

    error = result.error[0]
    assert error.field == "name"
    assert error.actual_value == ""
    assert error.range == create_range_from_numbers(1, 4, 1, 4)


@pytest.mark.unit
def test_unknown_headings_warn_once_each():
    """Test one warning per unrecognized H1, never an error."""
    text = VALID_DOC + "\n# Hobbies\nClimbing\n\n# Hobbies\n\n```\n# not a heading\n```\n"
    cv = parse_markdown(text, environ={})
    logger = RecordingLogger()
    result = validate_cv(cv, "cv", logger=logger, environ={})

    assert is_success(result)
    assert logger.warnings == [
        'Unknown section "Hobbies" will be ignored',
        'Unknown section "Hobbies" will be ignored',
    ]


@pytest.mark.unit
def test_default_logger_is_used_without_error():
    """Test validation with the built-in loguru-backed logger."""
    cv = parse_markdown(VALID_DOC + "\n# Hobbies\n", environ={})
    assert is_success(validate_cv(cv, "cv", environ={}))


@pytest.mark.unit
def test_validated_cv_cannot_be_built_directly():
    """Test that only the validator creates ValidatedCV values."""
    with pytest.raises(TypeError):
        ValidatedCV(metadata={}, sections=[], raw_content="")


@pytest.mark.unit
def test_format_validation_error():
    """Test one-line rendering with and without a range."""
    plain = ValidationError("Missing thing", "x", "string", "undefined")
    located = ValidationError(
        "Blank name", "name", "string", "", create_range_from_numbers(1, 4, 1, 4)
    )

    assert format_validation_error(plain) == "Missing thing"
    assert format_validation_error(located) == "2:5 Blank name"
