"""Bounded buffer tests."""

from __future__ import annotations

import pytest

from gemini_mcp.runtime.buffers import TRUNCATION_MARKER, BoundedTextBuffer, CappedList


class TestCappedList:
    """Test CappedList."""

    def test_keeps_items_up_to_capacity(self):
        items = CappedList(3)
        assert [items.append(i) for i in range(5)] == [True, True, True, False, False]
        assert items.to_list() == [0, 1, 2]
        assert len(items) == 3
        assert items.is_full

    def test_empty(self):
        items: CappedList[str] = CappedList(2)
        assert not items
        assert list(items) == []
        assert not items.is_full

    def test_zero_capacity(self):
        items = CappedList(0)
        assert not items.append("x")
        assert items.is_full

    def test_negative_capacity_rejected(self):
        with pytest.raises(ValueError):
            CappedList(-1)


class TestBoundedTextBuffer:
    """Test BoundedTextBuffer."""

    def test_lines_joined_with_newline(self):
        buf = BoundedTextBuffer(100)
        buf.append_line("one")
        buf.append_line("two")

        assert buf.getvalue() == "one\ntwo"
        assert buf.size == len("one\ntwo")
        assert not buf.truncated

    def test_empty_lines_are_kept(self):
        buf = BoundedTextBuffer(100)
        buf.append_line("a")
        buf.append_line("")
        buf.append_line("b")

        assert buf.getvalue() == "a\n\nb"

    def test_overflow_keeps_prefix_and_marker(self):
        buf = BoundedTextBuffer(10)
        buf.append_line("abcdef")
        buf.append_line("ghijkl")

        assert buf.getvalue() == "abcdef\nghi" + TRUNCATION_MARKER
        assert buf.size == 10
        assert buf.truncated

    def test_lines_after_truncation_discarded(self):
        buf = BoundedTextBuffer(5)
        buf.append_line("abcdefgh")
        buf.append_line("more")
        buf.append_line("and more")

        assert buf.getvalue() == "abcde" + TRUNCATION_MARKER
        assert buf.getvalue().count(TRUNCATION_MARKER) == 1

    def test_exactly_full_then_more(self):
        """Filling the buffer exactly adds the marker on the next line only."""
        buf = BoundedTextBuffer(3)
        buf.append_line("abc")
        assert buf.getvalue() == "abc"
        assert not buf.truncated

        buf.append_line("d")
        assert buf.getvalue() == "abc" + TRUNCATION_MARKER
        assert buf.truncated

    def test_multibyte_cut_on_character_boundary(self):
        buf = BoundedTextBuffer(4)
        buf.append_line("日本")  # 6 bytes

        assert buf.getvalue() == "日" + TRUNCATION_MARKER
        assert buf.size == 3

    def test_custom_marker(self):
        buf = BoundedTextBuffer(2, marker="[cut]")
        buf.append_line("xyz")
        assert buf.getvalue() == "xy[cut]"

    def test_bool(self):
        buf = BoundedTextBuffer(10)
        assert not buf
        buf.append_line("x")
        assert buf
