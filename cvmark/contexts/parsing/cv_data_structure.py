"""
CV Data Structures

Typed document model produced by the parser. Every scalar decoded from the
source is a Located value, and every structured entry carries the range of
its whole declaration, so editors can map data back to source text.

Section content is a tagged union: each content class has a fixed `kind`
discriminator so renderers can dispatch exhaustively on ContentKind.
"""

import datetime
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Union

from cvmark.utils.position import Located, Range

# Role end date sentinel meaning "ongoing"; distinct from an absent end date (None)
PRESENT = "present"

EndDate = Union[datetime.date, str]


class ContentKind(str, Enum):
    TEXT = "text"
    LIST = "list"
    EDUCATION = "education"
    EXPERIENCE = "experience"
    CERTIFICATIONS = "certifications"
    SKILLS = "skills"
    COMPETENCIES = "competencies"
    LANGUAGES = "languages"
    TABLE = "table"


class SkillsFormat(str, Enum):
    GRID = "grid"
    CATEGORIZED = "categorized"


# =============================================================================
# ENTRY TYPES
# =============================================================================


@dataclass(frozen=True)
class EducationEntry:
    """
    One school in a resume:education block.

    Attributes:
        school: School name
        range: Span of the whole entry
        degree: Degree or course name
        location: City/country
        start: Start date
        end: Graduation (or expected) date
        details: Free-form detail lines (GPA, thesis, honors)
    """

    school: Located[str]
    range: Range
    degree: Optional[Located[str]] = None
    location: Optional[Located[str]] = None
    start: Optional[Located[datetime.date]] = None
    end: Optional[Located[datetime.date]] = None
    details: List[Located[str]] = field(default_factory=list)


@dataclass(frozen=True)
class ProjectEntry:
    name: Located[str]
    range: Range
    start: Optional[Located[datetime.date]] = None
    end: Optional[Located[datetime.date]] = None
    bullets: List[Located[str]] = field(default_factory=list)


@dataclass(frozen=True)
class RoleEntry:
    """
    One position held at a company.

    Attributes:
        title: Job title
        range: Span of the whole role declaration
        team: Team or department
        start: Start date
        end: End date, PRESENT for an ongoing role, None when unspecified
        summary: Summary paragraphs
        highlights: Highlight bullets
        projects: Projects in declared order
    """

    title: Located[str]
    range: Range
    team: Optional[Located[str]] = None
    start: Optional[Located[datetime.date]] = None
    end: Optional[Located[EndDate]] = None
    summary: List[Located[str]] = field(default_factory=list)
    highlights: List[Located[str]] = field(default_factory=list)
    projects: List[ProjectEntry] = field(default_factory=list)

    @property
    def is_ongoing(self) -> bool:
        return self.end is not None and self.end.value == PRESENT


@dataclass(frozen=True)
class ExperienceEntry:
    company: Located[str]
    range: Range
    roles: List[RoleEntry] = field(default_factory=list)
    location: Optional[Located[str]] = None


@dataclass(frozen=True)
class CertificationEntry:
    name: Located[str]
    range: Range
    issuer: Optional[Located[str]] = None
    date: Optional[Located[datetime.date]] = None
    url: Optional[Located[str]] = None


@dataclass(frozen=True)
class SkillEntry:
    """
    A skill group.

    Flat skill lists decode to a single entry whose category is "".

    Attributes:
        category: Category name ("" for a flat list)
        range: Span of the whole entry
        items: Individual skills
        description: Descriptive text used instead of (or with) items
        level: Proficiency label
    """

    category: Located[str]
    range: Range
    items: List[Located[str]] = field(default_factory=list)
    description: Optional[Located[str]] = None
    level: Optional[Located[str]] = None


@dataclass(frozen=True)
class SkillsOptions:
    columns: int = 3
    format: SkillsFormat = SkillsFormat.GRID


@dataclass(frozen=True)
class CompetencyEntry:
    header: Located[str]
    range: Range
    description: Optional[Located[str]] = None


@dataclass(frozen=True)
class LanguageEntry:
    language: Located[str]
    range: Range
    level: Optional[Located[str]] = None


@dataclass(frozen=True)
class TableRow:
    """A rirekisho-style chronological row (year, month, content)."""

    year: Located[str]
    month: Located[str]
    content: Located[str]
    range: Range


# =============================================================================
# SECTION CONTENT VARIANTS
# =============================================================================


@dataclass(frozen=True)
class TextContent:
    paragraphs: List[Located[str]] = field(default_factory=list)
    kind: ContentKind = field(default=ContentKind.TEXT, init=False)

    @property
    def text(self) -> str:
        return "\n\n".join(paragraph.value for paragraph in self.paragraphs)


@dataclass(frozen=True)
class ListContent:
    items: List[Located[str]] = field(default_factory=list)
    kind: ContentKind = field(default=ContentKind.LIST, init=False)


@dataclass(frozen=True)
class EducationContent:
    entries: List[EducationEntry] = field(default_factory=list)
    kind: ContentKind = field(default=ContentKind.EDUCATION, init=False)


@dataclass(frozen=True)
class ExperienceContent:
    entries: List[ExperienceEntry] = field(default_factory=list)
    kind: ContentKind = field(default=ContentKind.EXPERIENCE, init=False)


@dataclass(frozen=True)
class CertificationsContent:
    entries: List[CertificationEntry] = field(default_factory=list)
    kind: ContentKind = field(default=ContentKind.CERTIFICATIONS, init=False)


@dataclass(frozen=True)
class SkillsContent:
    entries: List[SkillEntry] = field(default_factory=list)
    options: SkillsOptions = field(default_factory=SkillsOptions)
    kind: ContentKind = field(default=ContentKind.SKILLS, init=False)


@dataclass(frozen=True)
class CompetenciesContent:
    entries: List[CompetencyEntry] = field(default_factory=list)
    kind: ContentKind = field(default=ContentKind.COMPETENCIES, init=False)


@dataclass(frozen=True)
class LanguagesContent:
    entries: List[LanguageEntry] = field(default_factory=list)
    kind: ContentKind = field(default=ContentKind.LANGUAGES, init=False)


@dataclass(frozen=True)
class TableContent:
    rows: List[TableRow] = field(default_factory=list)
    kind: ContentKind = field(default=ContentKind.TABLE, init=False)


SectionContent = Union[
    TextContent,
    ListContent,
    EducationContent,
    ExperienceContent,
    CertificationsContent,
    SkillsContent,
    CompetenciesContent,
    LanguagesContent,
    TableContent,
]


# =============================================================================
# DOCUMENT
# =============================================================================


@dataclass(frozen=True)
class ParseIssue:
    """
    A non-fatal problem found while parsing.

    Attributes:
        message: Human-readable description
        range: Source span of the offending construct
        source: Construct kind (e.g., "frontmatter", "experience", "table")
    """

    message: str
    range: Range
    source: str = "markdown"


@dataclass(frozen=True)
class ParsedSection:
    """
    A recognized section.

    Attributes:
        id: Canonical section id from the registry
        title: Heading text with inline markdown removed
        content: Decoded section body
        title_range: Span of the heading text
        range: Span from the heading to the end of the section body
    """

    id: str
    title: str
    content: SectionContent
    title_range: Optional[Range] = None
    range: Optional[Range] = None


@dataclass(frozen=True)
class ParsedCV:
    """
    Result of one parse of a CV markdown document.

    Never mutated after construction. Section order is source order and
    becomes render order.

    Attributes:
        metadata: Resolved metadata (canonical field name -> value)
        sections: Recognized sections in source order
        raw_content: Original source text
        frontmatter: Raw frontmatter values with their source ranges
        issues: Non-fatal parse problems
        unknown_sections: Unrecognized H1 titles with their ranges
    """

    metadata: Dict[str, str]
    sections: List[ParsedSection]
    raw_content: str
    frontmatter: Dict[str, Located[str]] = field(default_factory=dict)
    issues: List[ParseIssue] = field(default_factory=list)
    unknown_sections: List[Located[str]] = field(default_factory=list)

    def get_section(self, section_id: str) -> Optional[ParsedSection]:
        """First section with the given id, or None."""
        for section in self.sections:
            if section.id == section_id:
                return section
        return None

    @property
    def section_ids(self) -> List[str]:
        return [section.id for section in self.sections]
