"""
CV markdown parsing for the Parsing context.

Turns CV markdown into a ParsedCV. The document is read line by line:

1. Leading HTML comments are skipped, then an optional frontmatter block
   ("---" YAML or "+++" key = value lines) is decoded.
2. H1 headings outside fenced code split the body into sections. Headings
   the section registry recognizes become ParsedSection values in source
   order; the rest are kept in unknown_sections.
3. A section holding resume:<kind> fences is decoded by block_decoder.
   Otherwise its text becomes a table, a list or paragraphs.

Parsing never raises on malformed content. Every problem is recorded as a
ParseIssue on the result, and the rest of the document is still parsed.
"""

import dataclasses
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Tuple

from yaml.nodes import MappingNode, ScalarNode

from cvmark.contexts.parsing.block_decoder import (
    BLOCK_KINDS,
    NULL_TAG,
    BlockDecoder,
    BlockLocator,
    compose_yaml,
    decode_block,
)
from cvmark.contexts.parsing.cv_data_structure import (
    ListContent,
    ParsedCV,
    ParsedSection,
    ParseIssue,
    SectionContent,
    SkillsContent,
    TableContent,
    TableRow,
    TextContent,
)
from cvmark.contexts.parsing.exceptions import InvalidDocumentError
from cvmark.contexts.parsing.logger import _log_debug, _log_warning
from cvmark.contexts.parsing.markdown_patterns import (
    FencePatterns,
    FrontmatterPatterns,
    HeadingPatterns,
    InlinePatterns,
    ListPatterns,
    TablePatterns,
)
from cvmark.contexts.parsing.metadata import resolve_metadata
from cvmark.contexts.parsing.section_registry import find_section_by_tag
from cvmark.utils.position import LineIndex, Located, Position, Range, utf16_length

FRONTMATTER_DELIMITERS = (FrontmatterPatterns.YAML_DELIMITER, FrontmatterPatterns.TOML_DELIMITER)


@dataclass
class _Heading:
    line: int
    title: str
    title_range: Range


@dataclass
class _Fence:
    """
    A fenced code block.

    Content lines are [first_line, end_line). closing_line is None for a
    fence that is never closed.
    """

    info: str
    opening_line: int
    first_line: int
    end_line: int
    closing_line: Optional[int]
    indent: int


# =============================================================================
# PUBLIC API
# =============================================================================


def parse_markdown(text: str, environ: Mapping[str, str] = None) -> ParsedCV:
    """
    Parse CV markdown into a ParsedCV.

    Args:
        text: Full document text
        environ: Environment used as metadata fallback (defaults to os.environ)

    Returns:
        ParsedCV; content problems are listed in its issues

    Raises:
        InvalidDocumentError: If text is not a string

    Example:
        >>> cv = parse_markdown("# Summary\\nBackend engineer.")
        >>> cv.sections[0].id
        'summary'
    """
    if not isinstance(text, str):
        raise InvalidDocumentError("Document must be a string", type(text).__name__)

    index = LineIndex(text)
    issues: List[ParseIssue] = []

    frontmatter, body_start = _parse_frontmatter(index, issues)
    headings, fences = _scan_body(index, body_start, issues)

    if headings:
        preamble = [line for line in index.lines[body_start : headings[0].line] if line.strip()]
        if preamble:
            _log_debug(f"Ignoring {len(preamble)} line(s) before the first heading")

    sections: List[ParsedSection] = []
    unknown_sections: List[Located[str]] = []
    for position, heading in enumerate(headings):
        end_line = headings[position + 1].line if position + 1 < len(headings) else len(index.lines)
        definition = find_section_by_tag(heading.title)
        if definition is None:
            unknown_sections.append(Located(heading.title, heading.title_range))
            continue

        section_fences = [f for f in fences if heading.line < f.opening_line < end_line]
        content = _section_content(index, heading, end_line, section_fences, issues)
        sections.append(
            ParsedSection(
                id=definition.id,
                title=heading.title,
                content=content,
                title_range=heading.title_range,
                range=_section_range(index, heading.line, end_line),
            )
        )

    metadata = resolve_metadata(
        {key: value.value for key, value in frontmatter.items()}, environ
    )

    _log_debug(
        f"Parsed {len(sections)} section(s), {len(unknown_sections)} unknown heading(s), "
        f"{len(issues)} issue(s)"
    )
    for issue in issues:
        start = issue.range.start
        _log_warning(f"{start.line + 1}:{start.character + 1} {issue.message}")
    return ParsedCV(
        metadata=metadata,
        sections=sections,
        raw_content=text,
        frontmatter=frontmatter,
        issues=issues,
        unknown_sections=unknown_sections,
    )


def scan_headings(text: str) -> List[Located[str]]:
    """
    Every H1 heading title outside frontmatter and fenced code.

    Titles have inline markdown removed. Empty headings are skipped.
    """
    index = LineIndex(text)
    ignored: List[ParseIssue] = []
    _, body_start = _parse_frontmatter(index, ignored)
    headings, _ = _scan_body(index, body_start, ignored)
    return [Located(heading.title, heading.title_range) for heading in headings]


# =============================================================================
# FRONTMATTER
# =============================================================================


def _skip_leading_comments(text: str) -> int:
    """Offset of the first character after leading whitespace and HTML comments."""
    offset = 0
    while True:
        rest = text[offset:]
        offset += len(rest) - len(rest.lstrip(" \t\r\n\ufeff"))
        if not text.startswith(FrontmatterPatterns.HTML_COMMENT_OPEN, offset):
            return offset

        depth = 0
        cursor = offset
        while cursor < len(text):
            if text.startswith(FrontmatterPatterns.HTML_COMMENT_OPEN, cursor):
                depth += 1
                cursor += len(FrontmatterPatterns.HTML_COMMENT_OPEN)
            elif text.startswith(FrontmatterPatterns.HTML_COMMENT_CLOSE, cursor):
                depth -= 1
                cursor += len(FrontmatterPatterns.HTML_COMMENT_CLOSE)
                if depth == 0:
                    break
            else:
                cursor += 1
        if depth:
            # Unclosed comment
            return offset
        offset = cursor


def _parse_frontmatter(
    index: LineIndex, issues: List[ParseIssue]
) -> Tuple[Dict[str, Located[str]], int]:
    """
    Decode the frontmatter block, if any.

    Returns:
        (frontmatter values, first body line). The body starts at line 0
        when there is no usable frontmatter.
    """
    opening_line, column = index.locate(_skip_leading_comments(index.text))
    delimiter = index.lines[opening_line][column:].strip()
    if delimiter not in FRONTMATTER_DELIMITERS:
        return {}, 0

    opening_range = index.line_range(opening_line, column)
    closing_line = None
    for line in range(opening_line + 1, len(index.lines)):
        candidate = index.lines[line].strip()
        if candidate == delimiter:
            closing_line = line
            break
        if candidate in FRONTMATTER_DELIMITERS:
            issues.append(
                ParseIssue(
                    f"Frontmatter opened with '{delimiter}' must be closed with '{delimiter}', "
                    f"found '{candidate}'",
                    index.line_range(line),
                    "frontmatter",
                )
            )
            return {}, 0

    if closing_line is None:
        issues.append(
            ParseIssue(
                f"Frontmatter opened with '{delimiter}' is never closed",
                opening_range,
                "frontmatter",
            )
        )
        return {}, 0

    if delimiter == FrontmatterPatterns.YAML_DELIMITER:
        frontmatter = _yaml_frontmatter(index, opening_line, closing_line, issues)
    else:
        frontmatter = _key_value_frontmatter(index, opening_line, closing_line, issues)
    return frontmatter, closing_line + 1


def _yaml_frontmatter(
    index: LineIndex, opening_line: int, closing_line: int, issues: List[ParseIssue]
) -> Dict[str, Located[str]]:
    body_lines = index.lines[opening_line + 1 : closing_line]
    locator = BlockLocator(index, opening_line + 1, [0] * len(body_lines))
    root, issue = compose_yaml(
        "\n".join(body_lines),
        locator,
        index.line_range(opening_line),
        "frontmatter",
        "frontmatter",
    )
    if issue is not None:
        issues.append(issue)
        return {}
    if root is None or root.tag == NULL_TAG:
        return {}
    if not isinstance(root, MappingNode):
        issues.append(
            ParseIssue(
                "Frontmatter must be a mapping of key: value pairs",
                locator.range_of(root),
                "frontmatter",
            )
        )
        return {}

    frontmatter = {}
    for key_node, value_node in root.value:
        if not isinstance(key_node, ScalarNode):
            issues.append(
                ParseIssue(
                    "Frontmatter keys must be plain text",
                    locator.range_of(key_node),
                    "frontmatter",
                )
            )
            continue
        key = key_node.value.strip()
        if not isinstance(value_node, ScalarNode):
            issues.append(
                ParseIssue(
                    f"Frontmatter value for '{key}' must be a single value",
                    locator.range_of(value_node),
                    "frontmatter",
                )
            )
            continue
        if value_node.tag == NULL_TAG:
            key_end = locator.position(key_node.end_mark)
            frontmatter[key] = Located("", Range(key_end, key_end))
        else:
            frontmatter[key] = Located(value_node.value, locator.range_of(value_node))
    return frontmatter


def _key_value_frontmatter(
    index: LineIndex, opening_line: int, closing_line: int, issues: List[ParseIssue]
) -> Dict[str, Located[str]]:
    frontmatter = {}
    for line in range(opening_line + 1, closing_line):
        text = index.lines[line]
        if not text.strip() or text.lstrip().startswith("#"):
            continue

        match = FrontmatterPatterns.TOML_FIELD.match(text)
        if not match:
            issues.append(
                ParseIssue(
                    "Invalid frontmatter line. Expected key = value",
                    index.line_range(line),
                    "frontmatter",
                )
            )
            continue

        key = match.group(1)
        value = match.group(2)
        start, end = match.start(2), match.end(2)
        if value[:1] in ("[", "{"):
            issues.append(
                ParseIssue(
                    f"Frontmatter value for '{key}' must be a single value",
                    Range(index.position_in_line(line, start), index.position_in_line(line, end)),
                    "frontmatter",
                )
            )
            continue
        if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
            value = value[1:-1]
            start, end = start + 1, end - 1

        frontmatter[key] = Located(
            value, Range(index.position_in_line(line, start), index.position_in_line(line, end))
        )
    return frontmatter


# =============================================================================
# BODY SCANNING
# =============================================================================


def _closes_fence(line: str, fence: str) -> bool:
    stripped = line.strip()
    indent = len(line) - len(line.lstrip(" "))
    return (
        indent <= 3
        and len(stripped) >= len(fence)
        and set(stripped) == {fence[0]}
    )


def _heading_at(index: LineIndex, line: int) -> Optional[_Heading]:
    match = HeadingPatterns.H1.match(index.lines[line])
    if not match or not match.group(1):
        return None
    title = strip_inline_markdown(match.group(1)).strip()
    if not title:
        return None
    title_range = Range(
        index.position_in_line(line, match.start(1)), index.position_in_line(line, match.end(1))
    )
    return _Heading(line, title, title_range)


def _scan_body(
    index: LineIndex, start_line: int, issues: List[ParseIssue]
) -> Tuple[List[_Heading], List[_Fence]]:
    """
    Find H1 headings and fenced blocks from start_line on.

    A fence closes at the first matching closing line before the next
    fence that carries an info string. A fence that never closes is
    reported and runs to the next H1 or the next fence with an info
    string, whichever comes first.
    """
    lines = index.lines
    headings: List[_Heading] = []
    fences: List[_Fence] = []

    line = start_line
    while line < len(lines):
        opening = FencePatterns.OPENING.match(lines[line])
        if opening is None:
            heading = _heading_at(index, line)
            if heading:
                headings.append(heading)
            line += 1
            continue

        fence_run = opening.group(2)
        info = opening.group(3)
        closing_line = None
        next_opener = len(lines)
        for candidate in range(line + 1, len(lines)):
            if _closes_fence(lines[candidate], fence_run):
                closing_line = candidate
                break
            other = FencePatterns.OPENING.match(lines[candidate])
            if other and other.group(3):
                next_opener = candidate
                break

        if closing_line is not None:
            end_line = closing_line
            next_line = closing_line + 1
        else:
            end_line = line + 1
            while end_line < next_opener and _heading_at(index, end_line) is None:
                end_line += 1
            next_line = end_line
            issues.append(
                ParseIssue(
                    f"Code block '{fence_run}{info}' is never closed",
                    index.line_range(line, len(opening.group(1))),
                    "markdown",
                )
            )

        fences.append(
            _Fence(
                info=info,
                opening_line=line,
                first_line=line + 1,
                end_line=end_line,
                closing_line=closing_line,
                indent=len(opening.group(1)),
            )
        )
        line = next_line

    return headings, fences


def _section_range(index: LineIndex, heading_line: int, end_line: int) -> Range:
    last = heading_line
    for line in range(heading_line, end_line):
        if index.lines[line].strip():
            last = line
    return Range(Position(heading_line, 0), index.line_range(last).end)


# =============================================================================
# SECTION CONTENT
# =============================================================================


def _section_content(
    index: LineIndex,
    heading: _Heading,
    end_line: int,
    fences: List[_Fence],
    issues: List[ParseIssue],
) -> SectionContent:
    content = _block_content(index, heading, fences, issues)
    if content is not None:
        return content

    fenced = set()
    for fence in fences:
        last = fence.closing_line if fence.closing_line is not None else fence.end_line - 1
        fenced.update(range(fence.opening_line, last + 1))
    body = [
        (line, index.lines[line])
        for line in range(heading.line + 1, end_line)
        if line not in fenced and not _is_comment_line(index.lines[line])
    ]
    return _free_text_content(index, body, issues)


def _block_content(
    index: LineIndex, heading: _Heading, fences: List[_Fence], issues: List[ParseIssue]
) -> Optional[SectionContent]:
    """
    Decode and merge the section's resume blocks.

    Returns None when the section has no resume block of a known kind.
    """
    content: Optional[SectionContent] = None
    section_kind: Optional[str] = None

    for fence in fences:
        match = FencePatterns.RESUME_INFO.match(fence.info)
        if not match:
            continue
        kind = match.group(1).lower()
        opening_range = index.line_range(fence.opening_line, fence.indent)

        if kind not in BLOCK_KINDS:
            issues.append(
                ParseIssue(
                    f"Unknown block type 'resume:{kind}'. "
                    f"Expected one of: {', '.join('resume:' + name for name in BLOCK_KINDS)}",
                    opening_range,
                    "markdown",
                )
            )
            continue
        if section_kind is not None and kind != section_kind:
            issues.append(
                ParseIssue(
                    f"Section '{heading.title}' already holds resume:{section_kind} data; "
                    f"resume:{kind} block ignored",
                    opening_range,
                    kind,
                )
            )
            continue
        section_kind = kind

        body_lines = []
        indents = []
        for line in range(fence.first_line, fence.end_line):
            text = index.lines[line]
            removed = min(fence.indent, len(text) - len(text.lstrip(" ")))
            body_lines.append(text[removed:])
            indents.append(removed)

        last_line = fence.closing_line if fence.closing_line is not None else fence.end_line - 1
        block_range = Range(
            index.position_in_line(fence.opening_line, fence.indent), index.line_range(last_line).end
        )
        locator = BlockLocator(index, fence.first_line, indents)
        decoded, block_issues = decode_block(kind, "\n".join(body_lines), locator, block_range)
        issues.extend(block_issues)
        if decoded is None:
            continue
        content = decoded if content is None else _merge_content(content, decoded)

    if content is None and section_kind is not None:
        # Every block of the section was unreadable
        content = BLOCK_KINDS[section_kind](BlockDecoder(section_kind, None, issues), None)
    if content is not None:
        _log_debug(f"Section '{heading.title}' decoded as resume:{section_kind}")
    return content


def _merge_content(first: SectionContent, second: SectionContent) -> SectionContent:
    """Append the entries of a later block of the same kind; skills options follow the later block."""
    if isinstance(second, SkillsContent):
        return dataclasses.replace(
            first, entries=first.entries + second.entries, options=second.options
        )
    return dataclasses.replace(first, entries=first.entries + second.entries)


def _is_comment_line(text: str) -> bool:
    stripped = text.strip()
    return stripped.startswith(FrontmatterPatterns.HTML_COMMENT_OPEN) and stripped.endswith(
        FrontmatterPatterns.HTML_COMMENT_CLOSE
    )


def strip_inline_markdown(text: str) -> str:
    """Remove links, emphasis and code spans, keeping their text."""
    text = InlinePatterns.LINK.sub(r"\1", text)
    previous = None
    while previous != text:
        previous = text
        text = InlinePatterns.EMPHASIS.sub(r"\2", text)
        text = InlinePatterns.UNDERSCORE_EMPHASIS.sub(r"\2", text)
    return text


def _text_range(index: LineIndex, first: int, last: int) -> Range:
    """Range from the first non-space character of line first to the end of line last."""
    text = index.lines[first]
    start = len(text) - len(text.lstrip())
    end_text = index.lines[last].rstrip()
    return Range(
        index.position_in_line(first, start),
        Position(last, utf16_length(end_text)),
    )


def _free_text_content(
    index: LineIndex, body: List[Tuple[int, str]], issues: List[ParseIssue]
) -> SectionContent:
    table = _table_content(index, body, issues)
    if table is not None:
        return table

    items, paragraph_lines = _list_items(index, body)
    if items and len(items) > paragraph_lines:
        return ListContent(items=items)

    return TextContent(paragraphs=_paragraphs(index, body))


def _list_items(
    index: LineIndex, body: List[Tuple[int, str]]
) -> Tuple[List[Located[str]], int]:
    """
    Collect list items from the section body.

    A non-blank line directly below an item continues that item.

    Returns:
        (items, number of non-blank lines outside any item)
    """
    items: List[Located[str]] = []
    paragraph_lines = 0

    current_text: Optional[str] = None
    current_line = 0
    current_column = 0
    last_line = 0
    previous_line = None

    def close_item():
        if current_text is None:
            return
        end_text = index.lines[last_line].rstrip()
        item_range = Range(
            index.position_in_line(current_line, current_column),
            Position(last_line, utf16_length(end_text)),
        )
        items.append(Located(current_text.strip(), item_range))

    for line, text in body:
        if not text.strip():
            close_item()
            current_text = None
            previous_line = None
            continue

        match = ListPatterns.ITEM.match(text)
        if match:
            close_item()
            current_text = match.group(2)
            current_line = line
            current_column = match.start(2)
            last_line = line
        elif current_text is not None and previous_line == line - 1:
            current_text = f"{current_text} {text.strip()}"
            last_line = line
        else:
            close_item()
            current_text = None
            paragraph_lines += 1
        previous_line = line

    close_item()
    return items, paragraph_lines


def _paragraphs(index: LineIndex, body: List[Tuple[int, str]]) -> List[Located[str]]:
    paragraphs = []
    block: List[Tuple[int, str]] = []
    for line, text in body + [(-1, "")]:
        if text.strip() and (not block or block[-1][0] == line - 1):
            block.append((line, text))
            continue
        if block:
            value = "\n".join(part.strip() for _, part in block)
            paragraphs.append(Located(value, _text_range(index, block[0][0], block[-1][0])))
        block = [(line, text)] if text.strip() else []
    return paragraphs


def _split_cells(text: str) -> List[Tuple[str, int, int]]:
    """Cells of a pipe table row as (text, start column, end column)."""
    cells = []
    start = text.index("|") + 1
    end = text.rindex("|")
    cursor = start
    for part in text[start:end].split("|"):
        leading = len(part) - len(part.lstrip())
        stripped = part.strip()
        cells.append((stripped, cursor + leading, cursor + leading + len(stripped)))
        cursor += len(part) + 1
    return cells


def _table_content(
    index: LineIndex, body: List[Tuple[int, str]], issues: List[ParseIssue]
) -> Optional[TableContent]:
    """
    Decode the first pipe table of the body as year/month/content rows.

    The header row and its separator are skipped. Returns None when the
    body has no table.
    """
    for position in range(len(body) - 1):
        header_line, header = body[position]
        separator_line, separator = body[position + 1]
        if not (
            TablePatterns.ROW.match(header)
            and separator_line == header_line + 1
            and TablePatterns.SEPARATOR.match(separator)
        ):
            continue

        rows = []
        previous = separator_line
        for line, text in body[position + 2 :]:
            if line != previous + 1 or not TablePatterns.ROW.match(text):
                break
            previous = line
            cells = _split_cells(text)
            row_range = _text_range(index, line, line)
            if len(cells) < 3:
                issues.append(
                    ParseIssue(
                        "Table row needs year, month and content cells",
                        row_range,
                        "table",
                    )
                )
                continue

            def cell(number: int) -> Located[str]:
                value, start, end = cells[number]
                return Located(
                    value,
                    Range(index.position_in_line(line, start), index.position_in_line(line, end)),
                )

            rows.append(TableRow(year=cell(0), month=cell(1), content=cell(2), range=row_range))
        return TableContent(rows=rows)
    return None
