"""
Editor-facing views of a parse.

Turns parse issues, validation errors and unknown-heading warnings into
independent Diagnostic values, and answers hover queries from the source
ranges kept on every decoded value. Shapes follow the Language Server
Protocol (zero-based positions, severity 1 = error, 2 = warning) so a
language server can forward them unchanged.
"""

import dataclasses
import datetime
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from cvmark.contexts.parsing.cv_data_structure import ParsedCV, ParseIssue
from cvmark.contexts.parsing.cv_parser import parse_markdown
from cvmark.contexts.parsing.section_registry import OutputFormat
from cvmark.contexts.validation.validator import ValidationError, validate_cv
from cvmark.utils.position import Located, Position, Range
from cvmark.utils.result import is_failure

DIAGNOSTIC_SOURCE = "cvmark"

# Errors that carry no source span are shown at the top of the document
DOCUMENT_START = Range(Position(0, 0), Position(0, 0))


class DiagnosticSeverity(IntEnum):
    ERROR = 1
    WARNING = 2


@dataclass(frozen=True)
class Diagnostic:
    range: Range
    message: str
    severity: DiagnosticSeverity
    source: str = DIAGNOSTIC_SOURCE

    def to_dict(self) -> Dict[str, Any]:
        """LSP JSON shape."""
        return {
            "range": {
                "start": {"line": self.range.start.line, "character": self.range.start.character},
                "end": {"line": self.range.end.line, "character": self.range.end.character},
            },
            "message": self.message,
            "severity": int(self.severity),
            "source": self.source,
        }


@dataclass(frozen=True)
class HoverPayload:
    """
    Hover response.

    Attributes:
        range: Span of the value under the cursor
        contents: Markdown text describing the value
    """

    range: Range
    contents: str


class _CollectingLogger:
    def __init__(self):
        self.messages: List[str] = []

    def warning(self, message: str) -> None:
        self.messages.append(message)


# =============================================================================
# DIAGNOSTICS
# =============================================================================


def diagnostics_from_parse_issues(issues: List[ParseIssue]) -> List[Diagnostic]:
    return [
        Diagnostic(
            issue.range,
            issue.message,
            DiagnosticSeverity.ERROR,
            f"{DIAGNOSTIC_SOURCE}:{issue.source}",
        )
        for issue in issues
    ]


def diagnostics_from_validation_errors(errors: List[ValidationError]) -> List[Diagnostic]:
    return [
        Diagnostic(error.range or DOCUMENT_START, error.message, DiagnosticSeverity.ERROR)
        for error in errors
    ]


def diagnostics_from_unknown_sections(unknown_sections: List[Located[str]]) -> List[Diagnostic]:
    return [
        Diagnostic(
            heading.range,
            f'Unknown section "{heading.value}" will be ignored',
            DiagnosticSeverity.WARNING,
        )
        for heading in unknown_sections
    ]


def collect_diagnostics(
    text: str,
    format: Union[OutputFormat, str] = OutputFormat.CV,
    environ: Mapping[str, str] = None,
) -> List[Diagnostic]:
    """
    Parse and validate a document, returning every problem as a diagnostic.

    Parse issues come first, then validation errors, then unknown-heading
    warnings. Warnings are taken from the parse so each carries the
    heading's range.

    Args:
        text: Full document text
        format: Output format to validate for
        environ: Environment for metadata fallback (defaults to os.environ)

    Returns:
        Independent diagnostics, one per issue, error or warning
    """
    cv = parse_markdown(text, environ)
    diagnostics = diagnostics_from_parse_issues(cv.issues)

    result = validate_cv(cv, format, logger=_CollectingLogger(), environ=environ)
    if is_failure(result):
        diagnostics.extend(diagnostics_from_validation_errors(result.error))

    diagnostics.extend(diagnostics_from_unknown_sections(cv.unknown_sections))
    return diagnostics


# =============================================================================
# HOVER
# =============================================================================


def _walk(value: Any, path: str) -> Iterator[Tuple[str, Located]]:
    if isinstance(value, Located):
        yield path, value
    elif isinstance(value, (list, tuple)):
        for number, item in enumerate(value):
            yield from _walk(item, f"{path}[{number}]")
    elif dataclasses.is_dataclass(value) and not isinstance(value, (Range, Position)):
        for field in dataclasses.fields(value):
            yield from _walk(getattr(value, field.name), f"{path}.{field.name}")


def iter_located(cv: ParsedCV) -> Iterator[Tuple[str, Located]]:
    """
    Every located value in the document with a dotted path to it.

    Paths look like "sections[1].content.entries[0].roles[0].title".
    Section titles are included as "sections[N].title".
    """
    for key, value in cv.frontmatter.items():
        yield f"frontmatter.{key}", value
    for number, section in enumerate(cv.sections):
        path = f"sections[{number}]"
        if section.title_range is not None:
            yield f"{path}.title", Located(section.title, section.title_range)
        yield from _walk(section.content, f"{path}.content")
    for number, heading in enumerate(cv.unknown_sections):
        yield f"unknown_sections[{number}]", heading


def _describe(value: Any) -> str:
    if isinstance(value, datetime.date):
        return value.isoformat()
    return str(value)


def hover_at(cv: ParsedCV, position: Position) -> Optional[HoverPayload]:
    """
    Hover payload for the innermost located value under position.

    Returns:
        HoverPayload, or None when nothing located covers the position
    """
    best: Optional[Tuple[str, Located]] = None
    for path, item in iter_located(cv):
        if not item.range.contains(position):
            continue
        if best is None or best[1].range.encloses(item.range):
            best = (path, item)
    if best is None:
        return None

    path, item = best
    return HoverPayload(range=item.range, contents=f"`{path}`\n\n{_describe(item.value)}")
