"""
Decoding of fenced `resume:<kind>` blocks.

Block bodies are YAML. They are composed (not loaded) with PyYAML so every
scalar keeps its start/end marks, which BlockLocator translates into
document positions. Composing also keeps scalars as their source text, so
"2020-04" or "03-1234-5678" are never coerced into dates or numbers.

Decoding never raises on bad content. Problems are collected as ParseIssue
values and the offending entry is skipped; the rest of the block is still
decoded.
"""

import datetime
from typing import Callable, Dict, List, Optional, Tuple

import yaml
from yaml.nodes import MappingNode, Node, ScalarNode, SequenceNode

from cvmark.contexts.parsing.cv_data_structure import (
    PRESENT,
    CertificationEntry,
    CertificationsContent,
    CompetenciesContent,
    CompetencyEntry,
    EducationContent,
    EducationEntry,
    EndDate,
    ExperienceContent,
    ExperienceEntry,
    LanguageEntry,
    LanguagesContent,
    ParseIssue,
    ProjectEntry,
    RoleEntry,
    SectionContent,
    SkillEntry,
    SkillsContent,
    SkillsFormat,
    SkillsOptions,
)
from cvmark.contexts.parsing.markdown_patterns import DatePatterns
from cvmark.utils.position import LineIndex, Located, Position, Range

NULL_TAG = "tag:yaml.org,2002:null"
DEFAULT_SKILL_COLUMNS = 3


def parse_date_literal(text: str) -> Optional[datetime.date]:
    """
    Parse a block date literal.

    Accepts YYYY-MM-DD, YYYY-MM, YYYY/MM, YYYY年MM月 and bare YYYY.

    Returns:
        The date (day and month default to 1), or None if unrecognized
    """
    text = text.strip()
    try:
        match = DatePatterns.YEAR_MONTH_DAY.match(text)
        if match:
            return datetime.date(int(match.group(1)), int(match.group(2)), int(match.group(3)))

        match = DatePatterns.YEAR_MONTH.match(text) or DatePatterns.YEAR_MONTH_JAPANESE.match(text)
        if match:
            return datetime.date(int(match.group(1)), int(match.group(2)), 1)

        match = DatePatterns.YEAR_ONLY.match(text)
        if match:
            return datetime.date(int(match.group(1)), 1, 1)
    except ValueError:
        # Month or day out of range
        return None
    return None


def is_present_literal(text: str) -> bool:
    return text.strip().lower() in DatePatterns.PRESENT_WORDS


class BlockLocator:
    """
    Translates PyYAML marks inside a fenced block into document positions.

    Attributes:
        index: Line index of the whole document
        first_line: Document line of the first content line of the block
        indents: Number of indentation characters removed from each content line
    """

    def __init__(self, index: LineIndex, first_line: int, indents: List[int]):
        self.index = index
        self.first_line = first_line
        self.indents = indents

    def position(self, mark) -> Position:
        if mark.line >= len(self.indents):
            return self.index.position_in_line(self.first_line + mark.line, 0)
        return self.index.position_in_line(
            self.first_line + mark.line, self.indents[mark.line] + mark.column
        )

    def range_of(self, node: Node) -> Range:
        """Span from a node's start to the end of its last descendant."""
        return Range(self.position(node.start_mark), self.position(_last_mark(node)))


def _last_mark(node: Node):
    # Block collection end marks sit at the start of the following token,
    # so the span is closed at the last nested scalar instead.
    if isinstance(node, MappingNode) and node.value:
        return _last_mark(node.value[-1][1])
    if isinstance(node, SequenceNode) and node.value:
        return _last_mark(node.value[-1])
    return node.end_mark


def _is_null(node: Optional[Node]) -> bool:
    return node is None or (isinstance(node, ScalarNode) and node.tag == NULL_TAG)


class BlockDecoder:
    """
    Decodes the YAML body of one resume block into typed entries.

    Args:
        kind: Block kind (used as the ParseIssue source)
        locator: Mark-to-position translator for this block
        issues: List that receives every problem found
    """

    def __init__(self, kind: str, locator: BlockLocator, issues: List[ParseIssue]):
        self.kind = kind
        self.locator = locator
        self.issues = issues

    # =========================================================================
    # PRIMITIVES
    # =========================================================================

    def _issue(self, message: str, node: Node) -> None:
        self.issues.append(ParseIssue(message, self.locator.range_of(node), self.kind))

    def _fields(self, node: Node, what: str) -> Optional[Dict[str, Node]]:
        if not isinstance(node, MappingNode):
            self._issue(f"Expected {what} to be a mapping of fields", node)
            return None
        fields = {}
        for key_node, value_node in node.value:
            if isinstance(key_node, ScalarNode):
                fields[key_node.value.strip()] = value_node
        return fields

    def _text(self, node: Optional[Node], field: str) -> Optional[Located[str]]:
        if _is_null(node):
            return None
        if not isinstance(node, ScalarNode):
            self._issue(f"'{field}' must be a single value", node)
            return None
        value = node.value.strip()
        if not value:
            return None
        return Located(value, self.locator.range_of(node))

    def _text_list(self, node: Optional[Node], field: str) -> List[Located[str]]:
        if _is_null(node):
            return []
        if isinstance(node, ScalarNode):
            single = self._text(node, field)
            return [single] if single else []
        if isinstance(node, MappingNode):
            return [self._pairs_text(node)]

        items = []
        for item in node.value:
            if isinstance(item, MappingNode):
                items.append(self._pairs_text(item))
            elif isinstance(item, ScalarNode):
                text = self._text(item, field)
                if text:
                    items.append(text)
            else:
                self._issue(f"Items of '{field}' must be text", item)
        return items

    def _pairs_text(self, node: MappingNode) -> Located[str]:
        # {"GPA": "3.8/4.0"} reads as "GPA: 3.8/4.0"
        parts = []
        for key_node, value_node in node.value:
            value = value_node.value.strip() if isinstance(value_node, ScalarNode) else ""
            parts.append(f"{key_node.value}: {value}")
        return Located(", ".join(parts), self.locator.range_of(node))

    def _date(
        self, node: Optional[Node], field: str, allow_present: bool = False
    ) -> Optional[Located[EndDate]]:
        text = self._text(node, field)
        if text is None:
            return None

        if is_present_literal(text.value):
            if allow_present:
                return Located(PRESENT, text.range)
            self._issue(f"'{field}' cannot be 'present'; only a role end date can be ongoing", node)
            return None

        parsed = parse_date_literal(text.value)
        if parsed is None:
            self._issue(
                f"Invalid date '{text.value}' for '{field}'. Use YYYY-MM or YYYY-MM-DD", node
            )
            return None
        return Located(parsed, text.range)

    def _entries(self, root: Optional[Node]) -> List[Node]:
        """Top-level entries: a list, or a single mapping treated as one entry."""
        if _is_null(root):
            return []
        if isinstance(root, SequenceNode):
            return list(root.value)
        if isinstance(root, MappingNode):
            return [root]
        self._issue(f"resume:{self.kind} block must contain a list of entries", root)
        return []

    # =========================================================================
    # BLOCK KINDS
    # =========================================================================

    def education(self, root: Optional[Node]) -> EducationContent:
        entries = []
        for node in self._entries(root):
            fields = self._fields(node, "an education entry")
            if fields is None:
                continue
            school = self._text(fields.get("school"), "school")
            if school is None:
                self._issue("Education entry is missing 'school'", node)
                continue
            entries.append(
                EducationEntry(
                    school=school,
                    range=self.locator.range_of(node),
                    degree=self._text(fields.get("degree"), "degree"),
                    location=self._text(fields.get("location"), "location"),
                    start=self._date(fields.get("start"), "start"),
                    end=self._date(fields.get("end"), "end"),
                    details=self._text_list(fields.get("details"), "details"),
                )
            )
        return EducationContent(entries=entries)

    def experience(self, root: Optional[Node]) -> ExperienceContent:
        entries = []
        for node in self._entries(root):
            fields = self._fields(node, "an experience entry")
            if fields is None:
                continue

            roles = []
            roles_node = fields.get("roles")
            if isinstance(roles_node, SequenceNode):
                for role_node in roles_node.value:
                    role = self._role(role_node)
                    if role:
                        roles.append(role)
            elif not _is_null(roles_node):
                self._issue("'roles' must be a list", roles_node)
            elif "title" in fields or "role" in fields:
                # Flat form: title/team/start/end next to company
                role = self._role(node)
                if role:
                    roles.append(role)

            company = self._text(fields.get("company"), "company")
            if company is None:
                self._issue("Experience entry is missing 'company'", node)
                continue
            if not roles:
                self._issue(f"Experience entry '{company.value}' has no valid roles", node)
                continue

            entries.append(
                ExperienceEntry(
                    company=company,
                    range=self.locator.range_of(node),
                    roles=roles,
                    location=self._text(fields.get("location"), "location"),
                )
            )
        return ExperienceContent(entries=entries)

    def _role(self, node: Node) -> Optional[RoleEntry]:
        fields = self._fields(node, "a role")
        if fields is None:
            return None
        title = self._text(fields.get("title"), "title") or self._text(fields.get("role"), "role")
        if title is None:
            self._issue("Role is missing 'title'", node)
            return None

        projects = []
        projects_node = fields.get("projects")
        if isinstance(projects_node, SequenceNode):
            for project_node in projects_node.value:
                project = self._project(project_node)
                if project:
                    projects.append(project)
        elif not _is_null(projects_node):
            self._issue("'projects' must be a list", projects_node)

        return RoleEntry(
            title=title,
            range=self.locator.range_of(node),
            team=self._text(fields.get("team"), "team"),
            start=self._date(fields.get("start"), "start"),
            end=self._date(fields.get("end"), "end", allow_present=True),
            summary=self._text_list(fields.get("summary"), "summary"),
            highlights=self._text_list(fields.get("highlights"), "highlights"),
            projects=projects,
        )

    def _project(self, node: Node) -> Optional[ProjectEntry]:
        fields = self._fields(node, "a project")
        if fields is None:
            return None
        name = self._text(fields.get("name"), "name")
        if name is None:
            self._issue("Project is missing 'name'", node)
            return None
        return ProjectEntry(
            name=name,
            range=self.locator.range_of(node),
            start=self._date(fields.get("start"), "start"),
            end=self._date(fields.get("end"), "end"),
            bullets=self._text_list(fields.get("bullets"), "bullets"),
        )

    def certifications(self, root: Optional[Node]) -> CertificationsContent:
        entries = []
        for node in self._entries(root):
            fields = self._fields(node, "a certification")
            if fields is None:
                continue
            name = self._text(fields.get("name"), "name")
            if name is None:
                self._issue("Certification is missing 'name'", node)
                continue
            entries.append(
                CertificationEntry(
                    name=name,
                    range=self.locator.range_of(node),
                    issuer=self._text(fields.get("issuer"), "issuer"),
                    date=self._date(fields.get("date"), "date"),
                    url=self._text(fields.get("url"), "url"),
                )
            )
        return CertificationsContent(entries=entries)

    def skills(self, root: Optional[Node]) -> SkillsContent:
        """
        Decode skills in any of three shapes:

        1. Flat grid:        {columns: 3, items: [Python, Go]}
        2. Categorized:      {categories: [{category: Languages, items: [...]}]}
        3. Legacy list:      [{category: Languages, description: "..."}]

        All shapes decode to SkillEntry values; a flat list becomes one
        entry with an empty category.
        """
        if _is_null(root):
            return SkillsContent()
        if isinstance(root, SequenceNode):
            entries = [entry for entry in map(self._skill_entry, root.value) if entry]
            return SkillsContent(
                entries=entries,
                options=SkillsOptions(DEFAULT_SKILL_COLUMNS, SkillsFormat.CATEGORIZED),
            )

        fields = self._fields(root, "the skills block")
        if fields is None:
            return SkillsContent()
        columns = self._columns(fields.get("columns"))

        items_node = fields.get("items")
        if items_node is not None and "category" not in fields:
            entry = SkillEntry(
                category=Located("", self.locator.range_of(items_node)),
                range=self.locator.range_of(root),
                items=self._text_list(items_node, "items"),
            )
            return SkillsContent(entries=[entry], options=SkillsOptions(columns, SkillsFormat.GRID))

        categories_node = fields.get("categories")
        if isinstance(categories_node, SequenceNode):
            entries = [entry for entry in map(self._skill_entry, categories_node.value) if entry]
        elif categories_node is None:
            # A single category mapping
            entry = self._skill_entry(root)
            entries = [entry] if entry else []
        else:
            self._issue("'categories' must be a list", categories_node)
            entries = []
        return SkillsContent(
            entries=entries, options=SkillsOptions(columns, SkillsFormat.CATEGORIZED)
        )

    def _columns(self, node: Optional[Node]) -> int:
        text = self._text(node, "columns")
        if text is None:
            return DEFAULT_SKILL_COLUMNS
        if not text.value.isdigit() or int(text.value) < 1:
            self._issue(f"'columns' must be a positive integer, got '{text.value}'", node)
            return DEFAULT_SKILL_COLUMNS
        return int(text.value)

    def _skill_entry(self, node: Node) -> Optional[SkillEntry]:
        fields = self._fields(node, "a skill category")
        if fields is None:
            return None
        node_range = self.locator.range_of(node)
        category = self._text(fields.get("category"), "category")
        return SkillEntry(
            category=category or Located("", Range(node_range.start, node_range.start)),
            range=node_range,
            items=self._text_list(fields.get("items"), "items"),
            description=self._text(fields.get("description"), "description"),
            level=self._text(fields.get("level"), "level"),
        )

    def competencies(self, root: Optional[Node]) -> CompetenciesContent:
        entries = []
        for node in self._entries(root):
            fields = self._fields(node, "a competency")
            if fields is None:
                continue
            header = self._text(fields.get("header"), "header")
            if header is None:
                self._issue("Competency is missing 'header'", node)
                continue
            entries.append(
                CompetencyEntry(
                    header=header,
                    range=self.locator.range_of(node),
                    description=self._text(fields.get("description"), "description"),
                )
            )
        return CompetenciesContent(entries=entries)

    def languages(self, root: Optional[Node]) -> LanguagesContent:
        entries = []
        for node in self._entries(root):
            fields = self._fields(node, "a language")
            if fields is None:
                continue
            language = self._text(fields.get("language"), "language")
            if language is None:
                self._issue("Language entry is missing 'language'", node)
                continue
            entries.append(
                LanguageEntry(
                    language=language,
                    range=self.locator.range_of(node),
                    level=self._text(fields.get("level"), "level"),
                )
            )
        return LanguagesContent(entries=entries)


BLOCK_KINDS: Dict[str, Callable[[BlockDecoder, Optional[Node]], SectionContent]] = {
    "education": BlockDecoder.education,
    "experience": BlockDecoder.experience,
    "certifications": BlockDecoder.certifications,
    "skills": BlockDecoder.skills,
    "competencies": BlockDecoder.competencies,
    "languages": BlockDecoder.languages,
}


def compose_yaml(
    body: str, locator: BlockLocator, fallback_range: Range, label: str, source: str
) -> Tuple[Optional[Node], Optional[ParseIssue]]:
    """
    Compose YAML text into a node tree.

    Args:
        body: YAML text
        locator: Mark-to-position translator for body
        fallback_range: Issue range when the error carries no mark
        label: Human name of the YAML region (e.g., "frontmatter")
        source: ParseIssue source

    Returns:
        (root node or None, issue or None)
    """
    try:
        return yaml.compose(body, Loader=yaml.SafeLoader), None
    except yaml.MarkedYAMLError as e:
        mark = e.problem_mark or e.context_mark
        issue_range = fallback_range
        if mark is not None:
            position = locator.position(mark)
            issue_range = Range(position, position)
        problem = e.problem or e.context or "syntax error"
        return None, ParseIssue(f"Invalid YAML in {label}: {problem}", issue_range, source)
    except yaml.YAMLError as e:
        return None, ParseIssue(f"Invalid YAML in {label}: {e}", fallback_range, source)


def decode_block(
    kind: str, body: str, locator: BlockLocator, block_range: Range
) -> Tuple[Optional[SectionContent], List[ParseIssue]]:
    """
    Decode the body of a resume:<kind> block.

    Args:
        kind: One of BLOCK_KINDS
        body: Block text with fence indentation removed
        locator: Mark-to-position translator for the block
        block_range: Span of the whole fenced block (for block-level issues)

    Returns:
        (content, issues); content is None when the YAML itself is unreadable
    """
    root, issue = compose_yaml(body, locator, block_range, f"resume:{kind} block", kind)
    if issue is not None:
        return None, [issue]

    issues: List[ParseIssue] = []
    decoder = BlockDecoder(kind, locator, issues)
    content = BLOCK_KINDS[kind](decoder, root)
    return content, issues
