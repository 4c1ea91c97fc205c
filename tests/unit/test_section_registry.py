"""Unit tests for the section registry."""

import pytest

from cvmark.contexts.parsing.section_registry import (
    SECTION_DEFINITIONS,
    OutputFormat,
    SectionDef,
    SectionUsage,
    _build_tag_index,
    find_section_by_tag,
    get_required_sections_for_format,
    get_section_definition,
    get_tags_for_language,
    get_valid_tags_for_format,
    is_japanese_text,
    is_section_valid_for_format,
)


@pytest.mark.unit
@pytest.mark.parametrize(
    "tag,expected_id",
    [
        ("Experience", "experience"),
        ("  work experience ", "experience"),
        ("職務履歴", "experience"),
        ("免許・資格", "certifications"),
        ("PROFESSIONAL SUMMARY", "summary"),
        ("自己PR", "motivation"),
        ("本人希望記入欄", "notes"),
        ("Language Skills", "languages"),
    ],
)
def test_find_section_by_tag(tag, expected_id):
    """Test case-insensitive, whitespace-tolerant tag lookup."""
    definition = find_section_by_tag(tag)
    assert definition is not None
    assert definition.id == expected_id


@pytest.mark.unit
def test_find_section_by_tag_unknown():
    """Test that unrecognized and partial tags return None."""
    assert find_section_by_tag("Hobbies") is None
    assert find_section_by_tag("Experienced") is None
    assert find_section_by_tag("") is None


@pytest.mark.unit
def test_tags_are_distinct_across_sections():
    """Test that no tag maps to two sections."""
    seen = {}
    for definition in SECTION_DEFINITIONS:
        for tag in definition.tags:
            key = tag.strip().lower()
            assert seen.setdefault(key, definition.id) == definition.id


@pytest.mark.unit
def test_shared_tag_is_rejected():
    """Test that building an index with a shared tag raises ValueError."""
    clashing = (
        SectionDef(id="one", tags=("Profile",), usage=SectionUsage.CV),
        SectionDef(id="two", tags=("profile",), usage=SectionUsage.CV),
    )
    with pytest.raises(ValueError, match="shared by 'one' and 'two'"):
        _build_tag_index(clashing)


@pytest.mark.unit
def test_experience_is_required_for_every_format():
    """Test required sections for each output format."""
    for format in OutputFormat:
        assert get_required_sections_for_format(format) == ["experience"]
    assert get_required_sections_for_format("rirekisho") == ["experience"]


@pytest.mark.unit
def test_valid_tags_for_format():
    """Test that format-specific tags are filtered by usage."""
    cv_tags = get_valid_tags_for_format(OutputFormat.CV)
    rirekisho_tags = get_valid_tags_for_format(OutputFormat.RIREKISHO)
    both_tags = get_valid_tags_for_format(OutputFormat.BOTH)

    assert "Summary" in cv_tags
    assert "Notes" not in cv_tags
    assert "Notes" in rirekisho_tags
    assert "Languages" not in rirekisho_tags
    assert "Experience" in cv_tags and "Experience" in rirekisho_tags
    assert set(cv_tags) | set(rirekisho_tags) == set(both_tags)


@pytest.mark.unit
def test_is_section_valid_for_format():
    """Test per-format section validity, including unknown ids."""
    assert is_section_valid_for_format("summary", "cv")
    assert not is_section_valid_for_format("summary", "rirekisho")
    assert is_section_valid_for_format("notes", "rirekisho")
    assert is_section_valid_for_format("notes", OutputFormat.BOTH)
    assert is_section_valid_for_format("education", "cv")
    assert not is_section_valid_for_format("hobbies", "cv")


@pytest.mark.unit
def test_get_section_definition():
    """Test lookup by canonical id."""
    assert get_section_definition("skills").tags[0] == "スキル"
    assert get_section_definition("hobbies") is None


@pytest.mark.unit
def test_tags_by_language():
    """Test splitting tags into Japanese and English."""
    assert get_tags_for_language("education", "ja") == ["学歴"]
    assert get_tags_for_language("education", "en") == ["Education"]
    assert get_tags_for_language("motivation", "ja") == ["志望動機", "自己PR"]
    assert get_tags_for_language("hobbies", "ja") == []


@pytest.mark.unit
def test_is_japanese_text():
    """Test detection of hiragana, katakana and kanji."""
    assert is_japanese_text("やまだ")
    assert is_japanese_text("スキル")
    assert is_japanese_text("職歴")
    assert not is_japanese_text("Skills")
