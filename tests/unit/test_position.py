"""Unit tests for source position primitives."""

import pytest

from cvmark.utils.position import (
    LineIndex,
    Located,
    Position,
    Range,
    create_position,
    create_range,
    create_range_from_numbers,
    located,
    utf16_length,
)


@pytest.mark.unit
def test_constructors_build_equal_values():
    """Test that the helper constructors agree with direct construction."""
    start = create_position(1, 2)
    end = create_position(3, 4)

    assert start == Position(1, 2)
    assert create_range(start, end) == Range(Position(1, 2), Position(3, 4))
    assert create_range_from_numbers(1, 2, 3, 4) == create_range(start, end)


@pytest.mark.unit
def test_positions_order_by_line_then_character():
    """Test total ordering of positions."""
    assert Position(0, 10) < Position(1, 0)
    assert Position(2, 3) < Position(2, 4)
    assert sorted([Position(1, 1), Position(0, 5), Position(1, 0)]) == [
        Position(0, 5),
        Position(1, 0),
        Position(1, 1),
    ]


@pytest.mark.unit
def test_range_contains_is_inclusive():
    """Test containment at both ends and outside the range."""
    span = create_range_from_numbers(1, 2, 3, 4)

    assert span.contains(Position(1, 2))
    assert span.contains(Position(2, 0))
    assert span.contains(Position(3, 4))
    assert not span.contains(Position(1, 1))
    assert not span.contains(Position(3, 5))


@pytest.mark.unit
def test_range_encloses():
    """Test nested range detection."""
    outer = create_range_from_numbers(0, 0, 5, 0)
    inner = create_range_from_numbers(1, 3, 2, 0)

    assert outer.encloses(inner)
    assert outer.encloses(outer)
    assert not inner.encloses(outer)


@pytest.mark.unit
def test_located_holds_any_value():
    """Test Located wraps values of any type, including None."""
    span = create_range_from_numbers(0, 0, 0, 3)

    assert located("abc", span).value == "abc"
    assert located(None, span).value is None
    assert located(42, span) == Located(42, span)


@pytest.mark.unit
def test_positions_are_immutable():
    """Test that Position cannot be modified after creation."""
    position = Position(0, 0)
    with pytest.raises(AttributeError):
        position.line = 3


@pytest.mark.unit
def test_utf16_length_counts_surrogate_pairs():
    """Test UTF-16 code unit counting for BMP and non-BMP text."""
    assert utf16_length("abc") == 3
    assert utf16_length("山田") == 2
    assert utf16_length("a😀b") == 4


@pytest.mark.unit
def test_line_index_position_at():
    """Test offset to position conversion across lines."""
    index = LineIndex("ab\ncd\n")

    assert index.position_at(0) == Position(0, 0)
    assert index.position_at(2) == Position(0, 2)
    assert index.position_at(3) == Position(1, 0)
    assert index.position_at(4) == Position(1, 1)
    assert index.position_at(6) == Position(2, 0)


@pytest.mark.unit
def test_line_index_uses_utf16_columns():
    """Test that characters after an emoji are shifted by two code units."""
    index = LineIndex("😀x")

    assert index.locate(1) == (0, 1)
    assert index.position_at(1) == Position(0, 2)
    assert index.position_at(2) == Position(0, 3)


@pytest.mark.unit
def test_line_index_clamps_offsets():
    """Test that out-of-document offsets clamp to the document bounds."""
    index = LineIndex("ab\ncd")

    assert index.position_at(-5) == Position(0, 0)
    assert index.position_at(100) == Position(1, 2)
    assert index.end_position() == Position(1, 2)


@pytest.mark.unit
def test_line_index_line_range():
    """Test whole-line and partial-line ranges."""
    index = LineIndex("# Title\nbody")

    assert index.line_range(0) == create_range_from_numbers(0, 0, 0, 7)
    assert index.line_range(0, 2) == create_range_from_numbers(0, 2, 0, 7)
    assert index.position_in_line(5, 0) == index.end_position()


@pytest.mark.unit
def test_line_index_crlf_line_endings():
    """Test that a CRLF terminator is not part of the line text or its columns."""
    index = LineIndex("ab\r\ncd")

    assert index.lines == ["ab", "cd"]
    assert index.position_at(2) == Position(0, 2)
    assert index.position_at(4) == Position(1, 0)
    assert index.line_range(0) == create_range_from_numbers(0, 0, 0, 2)
