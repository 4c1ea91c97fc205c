"""
Section registry for CV and rirekisho documents.

Maps H1 heading text ("tags") to canonical section ids. English and
Japanese tags live in the same table so a document may mix headings.

The table is a module-level tuple of frozen dataclasses, built once at
import time and never mutated. Tags must be distinct across sections
(case-insensitive); this is checked on import.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Tuple, Union


class OutputFormat(str, Enum):
    """Target output format for validation and rendering."""

    CV = "cv"
    RIREKISHO = "rirekisho"
    BOTH = "both"


class SectionUsage(str, Enum):
    """Which output format(s) a section appears in."""

    CV = "cv"
    RIREKISHO = "rirekisho"
    BOTH = "both"


@dataclass(frozen=True)
class SectionDef:
    """
    Definition of a recognized section.

    Attributes:
        id: Canonical section id (e.g., "experience")
        tags: Recognized heading titles, in display order
        usage: Output format(s) the section is rendered in
        required_for: Formats that fail validation without this section
    """

    id: str
    tags: Tuple[str, ...]
    usage: SectionUsage
    required_for: FrozenSet[OutputFormat] = frozenset()


SECTION_DEFINITIONS: Tuple[SectionDef, ...] = (
    SectionDef(
        id="summary",
        tags=(
            "概要",
            "職務要約",
            "Summary",
            "Professional Summary",
            "Profile",
            "Profile Summary",
            "Executive Summary",
        ),
        usage=SectionUsage.CV,
    ),
    SectionDef(
        id="education",
        tags=("学歴", "Education"),
        usage=SectionUsage.BOTH,
    ),
    SectionDef(
        id="experience",
        tags=(
            "職歴",
            "職務経歴",
            "職務履歴",
            "Experience",
            "Work Experience",
            "Professional Experience",
        ),
        usage=SectionUsage.BOTH,
        required_for=frozenset({OutputFormat.CV, OutputFormat.RIREKISHO, OutputFormat.BOTH}),
    ),
    SectionDef(
        id="certifications",
        tags=("免許・資格", "資格", "免許", "Certifications"),
        usage=SectionUsage.BOTH,
    ),
    SectionDef(
        id="motivation",
        tags=(
            "志望動機",
            "自己PR",
            "Motivation for Applying",
            "Core Competencies",
            "Key Competencies",
            "Competencies",
            "Key Highlights",
            "Superpowers",
        ),
        usage=SectionUsage.BOTH,
    ),
    SectionDef(
        id="notes",
        tags=("本人希望記入欄", "Notes"),
        usage=SectionUsage.RIREKISHO,
    ),
    SectionDef(
        id="skills",
        tags=("スキル", "Skills", "Technical Skills"),
        usage=SectionUsage.BOTH,
    ),
    SectionDef(
        id="languages",
        tags=("語学", "Languages", "Language Skills"),
        usage=SectionUsage.CV,
    ),
)

# Hiragana, Katakana, CJK ideographs, halfwidth Katakana
JAPANESE_TEXT = re.compile(r"[\u3040-\u309f\u30a0-\u30ff\u4e00-\u9fff\u3400-\u4dbf\uff66-\uff9f]")


def _normalize_tag(tag: str) -> str:
    return tag.strip().lower()


def _build_tag_index(definitions: Tuple[SectionDef, ...]) -> Dict[str, SectionDef]:
    """
    Index definitions by normalized tag.

    Raises:
        ValueError: If two definitions share a tag
    """
    index: Dict[str, SectionDef] = {}
    for definition in definitions:
        for tag in definition.tags:
            key = _normalize_tag(tag)
            owner = index.get(key)
            if owner is not None and owner.id != definition.id:
                raise ValueError(
                    f"Section tag '{tag}' is shared by '{owner.id}' and '{definition.id}'"
                )
            index[key] = definition
    return index


_TAG_INDEX = _build_tag_index(SECTION_DEFINITIONS)
_ID_INDEX = {definition.id: definition for definition in SECTION_DEFINITIONS}


def _coerce_format(format: Union[OutputFormat, str]) -> OutputFormat:
    return format if isinstance(format, OutputFormat) else OutputFormat(format)


def find_section_by_tag(tag: str) -> Optional[SectionDef]:
    """
    Find the section definition for a heading title.

    Matching is case-insensitive and ignores surrounding whitespace. An
    unmatched heading returns None; callers treat it as an unknown section.
    """
    return _TAG_INDEX.get(_normalize_tag(tag))


def get_section_definition(section_id: str) -> Optional[SectionDef]:
    return _ID_INDEX.get(section_id)


def get_valid_tags_for_format(format: Union[OutputFormat, str]) -> List[str]:
    """All tags usable in a document targeting format."""
    format = _coerce_format(format)
    tags = []
    for definition in SECTION_DEFINITIONS:
        if (
            format is OutputFormat.BOTH
            or definition.usage is SectionUsage.BOTH
            or definition.usage.value == format.value
        ):
            tags.extend(definition.tags)
    return tags


def get_required_sections_for_format(format: Union[OutputFormat, str]) -> List[str]:
    """
    Section ids required by format.

    For BOTH, a section is required if either concrete format requires it.
    """
    format = _coerce_format(format)
    if format is OutputFormat.BOTH:
        wanted = {OutputFormat.CV, OutputFormat.RIREKISHO}
    else:
        wanted = {format, OutputFormat.BOTH}
    return [
        definition.id for definition in SECTION_DEFINITIONS if definition.required_for & wanted
    ]


def is_section_valid_for_format(section_id: str, format: Union[OutputFormat, str]) -> bool:
    definition = _ID_INDEX.get(section_id)
    if definition is None:
        return False
    format = _coerce_format(format)
    if format is OutputFormat.BOTH:
        return True
    return definition.usage is SectionUsage.BOTH or definition.usage.value == format.value


def is_japanese_text(text: str) -> bool:
    """True if text contains any Japanese character."""
    return bool(JAPANESE_TEXT.search(text))


def get_tags_for_language(section_id: str, language: str) -> List[str]:
    """
    Tags of a section in one language.

    Args:
        section_id: Canonical section id
        language: "ja" for Japanese tags, anything else for English

    Returns:
        Matching tags in table order, empty for unknown ids
    """
    definition = _ID_INDEX.get(section_id)
    if definition is None:
        return []
    want_japanese = language == "ja"
    return [tag for tag in definition.tags if is_japanese_text(tag) == want_japanese]
