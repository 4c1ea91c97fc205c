"""Unit tests for editor diagnostics and hover."""

import pytest

from cvmark.contexts.editor.diagnostics import (
    DOCUMENT_START,
    Diagnostic,
    DiagnosticSeverity,
    collect_diagnostics,
    hover_at,
    iter_located,
)
from cvmark.contexts.parsing.cv_parser import parse_markdown
from cvmark.utils.position import Position, create_range_from_numbers

DOC = """---
name: Taro Yamada
email_address: taro@example.com
phone_number: 090-1234-5678
---

# Experience

```resume:experience
- company: Example Corp
  roles:
    - title: Engineer
      start: 2020-04
      end: someday
```

# Hobbies
"""


@pytest.mark.unit
def test_collect_diagnostics_for_clean_document():
    """Test that a valid document without unknown headings has no diagnostics."""
    text = DOC.replace("someday", "present").replace("# Hobbies\n", "")
    assert collect_diagnostics(text, "cv", environ={}) == []


@pytest.mark.unit
def test_collect_diagnostics_reports_every_problem():
    """Test parse issues, validation errors and warnings as separate diagnostics."""
    text = DOC.replace("name: Taro Yamada\n", "")
    diagnostics = collect_diagnostics(text, "cv", environ={})

    assert [d.severity for d in diagnostics] == [
        DiagnosticSeverity.ERROR,
        DiagnosticSeverity.ERROR,
        DiagnosticSeverity.WARNING,
    ]
    date_issue, missing_name, unknown = diagnostics
    assert date_issue.message.startswith("Invalid date 'someday'")
    assert date_issue.source == "cvmark:experience"
    assert date_issue.range == create_range_from_numbers(12, 11, 12, 18)
    assert missing_name.message.startswith("Missing required field: name.")
    assert missing_name.range == DOCUMENT_START
    assert unknown.message == 'Unknown section "Hobbies" will be ignored'
    assert unknown.range == create_range_from_numbers(15, 2, 15, 9)


@pytest.mark.unit
def test_diagnostic_to_dict():
    """Test the LSP JSON shape of a diagnostic."""
    diagnostic = Diagnostic(
        create_range_from_numbers(1, 2, 3, 4), "Broken", DiagnosticSeverity.WARNING
    )

    assert diagnostic.to_dict() == {
        "range": {"start": {"line": 1, "character": 2}, "end": {"line": 3, "character": 4}},
        "message": "Broken",
        "severity": 2,
        "source": "cvmark",
    }


@pytest.mark.unit
def test_iter_located_paths():
    """Test that every located value is reachable with a readable path."""
    cv = parse_markdown(DOC, environ={})
    paths = dict(iter_located(cv))

    assert paths["frontmatter.name"].value == "Taro Yamada"
    assert paths["sections[0].title"].value == "Experience"
    assert paths["sections[0].content.entries[0].company"].value == "Example Corp"
    assert paths["sections[0].content.entries[0].roles[0].title"].value == "Engineer"
    assert paths["unknown_sections[0]"].value == "Hobbies"


@pytest.mark.unit
def test_hover_returns_innermost_value():
    """Test hover on a role title, a date and a section heading."""
    cv = parse_markdown(DOC, environ={})

    title = hover_at(cv, Position(11, 15))
    assert title.range == create_range_from_numbers(11, 13, 11, 21)
    assert title.contents == "`sections[0].content.entries[0].roles[0].title`\n\nEngineer"

    start = hover_at(cv, Position(12, 14))
    assert start.contents.endswith("2020-04-01")

    heading = hover_at(cv, Position(6, 4))
    assert heading.contents.endswith("Experience")


@pytest.mark.unit
def test_hover_outside_values():
    """Test hover on blank space returns nothing."""
    cv = parse_markdown(DOC, environ={})
    assert hover_at(cv, Position(5, 0)) is None
