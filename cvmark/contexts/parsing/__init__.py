"""
Parsing Context

Responsibilities:
- Recognizes section headings (English and Japanese) via the section registry
- Resolves metadata from frontmatter with environment variable fallback
- Parses CV markdown into a typed ParsedCV with source ranges on every value

Owns: Section registry, metadata field table, CV document model
Never: Decides whether a document is complete enough to render
"""

from cvmark.contexts.parsing.cv_data_structure import (
    PRESENT,
    ParsedCV,
    ParsedSection,
    ParseIssue,
)
from cvmark.contexts.parsing.cv_parser import parse_markdown, scan_headings
from cvmark.contexts.parsing.exceptions import InvalidDocumentError
from cvmark.contexts.parsing.metadata import resolve_metadata
from cvmark.contexts.parsing.section_registry import (
    SECTION_DEFINITIONS,
    OutputFormat,
    find_section_by_tag,
)

__all__ = [
    # Parsing entry points
    "parse_markdown",
    "scan_headings",
    "resolve_metadata",
    "find_section_by_tag",
    # Data structure classes
    "ParsedCV",
    "ParsedSection",
    "ParseIssue",
    "PRESENT",
    "SECTION_DEFINITIONS",
    "OutputFormat",
    "InvalidDocumentError",
]
