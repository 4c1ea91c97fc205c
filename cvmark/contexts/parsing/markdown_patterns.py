"""
Pattern constants for CV markdown scanning.

Pattern classes follow the same convention throughout the package:
- Dataclasses with frozen=True for immutability
- Class-level constants for patterns
"""

import re
from dataclasses import dataclass

# =============================================================================
# DOCUMENT STRUCTURE PATTERNS
# =============================================================================


@dataclass(frozen=True)
class FrontmatterPatterns:
    """
    Frontmatter delimiters and line formats.

    "---" blocks hold YAML; "+++" blocks hold flat `key = value` lines.
    """

    YAML_DELIMITER: str = "---"
    TOML_DELIMITER: str = "+++"

    # key = "value" / key = 'value' / key = value
    TOML_FIELD = re.compile(r"^\s*([A-Za-z0-9_.-]+)\s*=\s*(.*?)\s*$")

    HTML_COMMENT_OPEN: str = "<!--"
    HTML_COMMENT_CLOSE: str = "-->"


@dataclass(frozen=True)
class HeadingPatterns:
    """
    ATX heading patterns.

    Only H1 headings delimit sections. Up to three leading spaces are
    allowed, closing hashes are dropped.
    """

    H1 = re.compile(r"^ {0,3}#(?:[ \t]+(.*?))?(?:[ \t]+#+)?[ \t]*$")


@dataclass(frozen=True)
class FencePatterns:
    """
    Fenced code block patterns.

    Group 1: indentation, group 2: fence run, group 3: info string.
    """

    OPENING = re.compile(r"^( {0,3})(`{3,}|~{3,})[ \t]*([^`]*?)[ \t]*$")

    # resume:<kind> info strings
    RESUME_INFO = re.compile(r"^resume:([A-Za-z_-]+)$")


# =============================================================================
# FREE-TEXT CONTENT PATTERNS
# =============================================================================


@dataclass(frozen=True)
class ListPatterns:
    """
    List item markers: -, *, + or ordered 1. / 1)

    Group 1: indentation, group 2: item text.
    """

    ITEM = re.compile(r"^(\s*)(?:[-*+]|\d{1,9}[.)])\s+(.*)$")


@dataclass(frozen=True)
class TablePatterns:
    """Pipe table rows and the header separator row."""

    ROW = re.compile(r"^\s*\|.*\|\s*$")
    SEPARATOR = re.compile(r"^\s*\|?\s*:?-{1,}:?\s*(\|\s*:?-{1,}:?\s*)*\|?\s*$")


@dataclass(frozen=True)
class InlinePatterns:
    """Inline markdown stripped from heading titles and list items."""

    EMPHASIS = re.compile(r"(\*\*|\*|~~|`)(.+?)\1")
    # Underscores only mark emphasis at word boundaries: snake_case stays intact
    UNDERSCORE_EMPHASIS = re.compile(r"(?<!\w)(__|_)(.+?)\1(?!\w)")
    LINK = re.compile(r"\[([^\]]*)\]\([^)]*\)")


# =============================================================================
# DATE PATTERNS
# =============================================================================


@dataclass(frozen=True)
class DatePatterns:
    """
    Accepted date literals inside resume blocks.

    Day defaults to 1 and month to January when omitted.
    """

    YEAR_MONTH_DAY = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
    YEAR_MONTH = re.compile(r"^(\d{4})[-/](\d{1,2})$")
    YEAR_MONTH_JAPANESE = re.compile(r"^(\d{4})年(\d{1,2})月$")
    YEAR_ONLY = re.compile(r"^(\d{4})$")

    PRESENT_WORDS: tuple = ("present", "現在")
