"""Unit tests for logger setup and context wrappers."""

import pytest
from loguru import logger

from cvmark.contexts.parsing.cv_parser import parse_markdown
from cvmark.contexts.parsing.logger import CONTEXT_PREFIX as PARSE_PREFIX
from cvmark.contexts.parsing.logger import setup_parsing_logger
from cvmark.contexts.validation import logger as validation_logger
from cvmark.contexts.validation.validator import validate_cv
from cvmark.utils.logger import setup_logger


@pytest.fixture
def captured():
    messages = []
    handler_id = logger.add(messages.append, format="{level}|{message}", level="DEBUG")
    yield messages
    logger.remove(handler_id)


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger.remove()


@pytest.mark.unit
def test_setup_logger_creates_file_sink(tmp_path):
    """Test that a log file is created when a directory is given."""
    log_file = setup_logger("validate", log_dir=tmp_path / "logs", extra_provenance={"Format": "cv"})

    assert log_file == tmp_path / "logs" / "validate.log"
    logger.complete()
    content = log_file.read_text()
    assert "Format: cv" in content
    assert "Python:" in content


@pytest.mark.unit
def test_setup_logger_console_only():
    """Test that no file is created without a log directory."""
    assert setup_logger("parse") is None


@pytest.mark.unit
def test_setup_parsing_logger_records_source(tmp_path):
    """Test the parsing context wrapper around setup_logger."""
    log_file = setup_parsing_logger(tmp_path, source="resume.md")

    assert log_file.name == "parse.log"
    assert "Source: resume.md" in log_file.read_text()


@pytest.mark.unit
def test_validation_wrappers_add_prefix(captured):
    """Test the [validate] prefix on context log helpers."""
    validation_logger._log_warning("Unknown section")
    validation_logger.ValidationLogger().warning("Another")

    assert captured[0].strip() == "WARNING|[validate] Unknown section"
    assert captured[1].strip() == "WARNING|[validate] Another"


@pytest.mark.unit
def test_parse_prefix():
    """Test the parsing context prefix."""
    assert PARSE_PREFIX == "[parse]"


@pytest.mark.unit
def test_parse_issues_are_logged(captured):
    """Test that every parse issue is logged as a [parse] warning with its position."""
    parse_markdown("# Education\n```resume:education\n- school: A\n", environ={})

    warnings = [message.strip() for message in captured if message.startswith("WARNING")]
    assert warnings == ["WARNING|[parse] 2:1 Code block '```resume:education' is never closed"]


@pytest.mark.unit
def test_validation_logs_start_and_failure(captured):
    """Test the [validate] info and error lines around a failing validation."""
    cv = parse_markdown("# Summary\nHello\n", environ={})
    validate_cv(cv, "cv", logger=validation_logger.ValidationLogger(), environ={})

    lines = [message.strip() for message in captured]
    assert "INFO|[validate] Validating 1 section(s) for cv" in lines
    assert "ERROR|[validate] Validation for cv failed with 4 error(s)" in lines
