"""Tests for mark activity resolution.

Covers:
- Cursor selections: stored marks, fallback to marks at the cursor, inclusivity
- Attribute containment for link-style marks
- Coverage over single and multiple ranges, with partial overlaps
- Exclusion credit (code excludes every other mark)
- Containers that cannot carry a mark (code blocks, rules)
- Queries without a mark kind
"""

from __future__ import annotations

import re

import pytest

from markstate.errors import UnknownMarkKind
from markstate.model import DEFAULT_SCHEMA, Builder, EditorState, Selection
from markstate.resolver import active_marks, get_mark_kind, is_mark_active

b = Builder(DEFAULT_SCHEMA)


def _state(doc, *pairs: tuple[int, int], stored=None) -> EditorState:
    return EditorState(doc=doc, selection=Selection.of(*pairs), stored_marks=stored)


# ---------------------------------------------------------------------------
# Cursor
# ---------------------------------------------------------------------------

def test_cursor_uses_stored_marks() -> None:
    doc = b.doc(b.node("paragraph", b.text("abc")))
    state = _state(doc, (1, 1), stored=(b.mark("bold"), b.mark("italic")))

    assert is_mark_active(state, "bold") is True
    assert is_mark_active(state, "italic") is True
    assert is_mark_active(state, "strike") is False


def test_cursor_with_empty_stored_marks_does_not_fall_back() -> None:
    doc = b.doc(b.node("paragraph", b.text("abc", "bold")))
    state = _state(doc, (2, 2), stored=())

    assert is_mark_active(state, "bold") is False


def test_cursor_falls_back_to_marks_at_position() -> None:
    doc = b.doc(b.node("paragraph", b.text("ab", "bold"), b.text("cd")))

    assert is_mark_active(_state(doc, (2, 2)), "bold") is True
    # Boundary after bold text inherits from the text before it.
    assert is_mark_active(_state(doc, (3, 3)), "bold") is True
    assert is_mark_active(_state(doc, (5, 5)), "bold") is False


def test_cursor_drops_non_inclusive_mark_at_its_end() -> None:
    link = b.mark("link", href="https://example.com")
    doc = b.doc(b.node("paragraph", b.text("ab", link), b.text("cd")))

    assert is_mark_active(_state(doc, (2, 2)), "link") is True
    assert is_mark_active(_state(doc, (3, 3)), "link") is False
    assert is_mark_active(_state(doc, (1, 1)), "link") is False


def test_cursor_in_empty_paragraph_has_no_marks() -> None:
    doc = b.doc(b.node("paragraph"))
    state = _state(doc, (1, 1))

    assert is_mark_active(state) is False
    assert is_mark_active(state, "bold") is False


def test_cursor_any_mark() -> None:
    doc = b.doc(b.node("paragraph", b.text("ab", "italic")))

    assert is_mark_active(_state(doc, (2, 2))) is True
    assert is_mark_active(_state(doc, (2, 2), stored=())) is False


# ---------------------------------------------------------------------------
# Attributes
# ---------------------------------------------------------------------------

def test_link_attributes_match_by_containment() -> None:
    link = b.mark("link", href="a", title="t")
    doc = b.doc(b.node("paragraph", b.text("link", link)))

    for state in (_state(doc, (2, 2)), _state(doc, (1, 5))):
        assert is_mark_active(state, "link", {"href": "a"}) is True
        assert is_mark_active(state, "link", {"href": "a", "title": "t"}) is True
        assert is_mark_active(state, "link", {"href": "b"}) is False
        assert is_mark_active(state, "link", {"rel": "nofollow"}) is False


def test_attribute_patterns_are_searched() -> None:
    link = b.mark("link", href="https://example.com/docs")
    doc = b.doc(b.node("paragraph", b.text("docs", link)))
    state = _state(doc, (1, 5))

    assert is_mark_active(state, "link", {"href": re.compile(r"^https://")}) is True
    assert is_mark_active(state, "link", {"href": re.compile(r"^mailto:")}) is False


def test_links_with_different_targets_split_coverage() -> None:
    doc = b.doc(
        b.node(
            "paragraph",
            b.text("ab", b.mark("link", href="a")),
            b.text("cd", b.mark("link", href="b")),
        )
    )
    state = _state(doc, (1, 5))

    assert is_mark_active(state, "link") is True
    assert is_mark_active(state, "link", {"href": "a"}) is False


# ---------------------------------------------------------------------------
# Coverage
# ---------------------------------------------------------------------------

def test_fully_marked_text_is_active() -> None:
    doc = b.doc(b.node("paragraph", b.text("hello", "bold")))

    assert is_mark_active(_state(doc, (1, 6)), "bold") is True


def test_half_marked_selection_is_inactive() -> None:
    doc = b.doc(b.node("paragraph", b.text("aaaa", "bold"), b.text("bbbb")))

    assert is_mark_active(_state(doc, (1, 9)), "bold") is False


def test_partial_overlap_is_clamped_to_selection() -> None:
    doc = b.doc(b.node("paragraph", b.text("aaaa", "bold"), b.text("bbbb")))

    assert is_mark_active(_state(doc, (2, 5)), "bold") is True
    assert is_mark_active(_state(doc, (3, 7)), "bold") is False


def test_multiple_ranges_are_summed() -> None:
    doc = b.doc(
        b.node("paragraph", b.text("aaaa", "bold"), b.text("bbbb"), b.text("cccc", "bold"))
    )

    assert is_mark_active(_state(doc, (1, 5), (9, 13)), "bold") is True
    assert is_mark_active(_state(doc, (1, 5), (5, 9)), "bold") is False


def test_marked_inline_leaf_counts_toward_selection() -> None:
    doc = b.doc(
        b.node(
            "paragraph",
            b.text("ab", "bold"),
            b.node("image", src="x.png", marks=("italic",)),
            b.text("cd", "bold"),
        )
    )

    assert is_mark_active(_state(doc, (1, 6)), "bold") is False
    assert is_mark_active(_state(doc, (1, 3)), "bold") is True


def test_unmarked_inline_leaf_is_ignored() -> None:
    doc = b.doc(
        b.node("paragraph", b.text("ab", "bold"), b.node("hard_break"), b.text("cd", "bold"))
    )

    assert is_mark_active(_state(doc, (1, 6)), "bold") is True


# ---------------------------------------------------------------------------
# Exclusion
# ---------------------------------------------------------------------------

def test_excluding_mark_alone_is_not_credited() -> None:
    doc = b.doc(b.node("paragraph", b.text("abcd", "code")))

    assert is_mark_active(_state(doc, (1, 5)), "bold") is False


def test_excluding_mark_is_credited_alongside_a_match() -> None:
    doc = b.doc(b.node("paragraph", b.text("aaaa", "bold"), b.text("bbbb", "code")))

    assert is_mark_active(_state(doc, (1, 9)), "bold") is True


def test_non_excluding_mark_is_not_credited() -> None:
    doc = b.doc(b.node("paragraph", b.text("aaaa", "bold"), b.text("bbbb", "italic")))

    assert is_mark_active(_state(doc, (1, 9)), "bold") is False


def test_excluded_kind_does_not_credit_its_excluder() -> None:
    doc = b.doc(b.node("paragraph", b.text("aaaa", "code"), b.text("bbbb", "bold")))

    # bold does not exclude code, so only half of the selection is code.
    assert is_mark_active(_state(doc, (1, 9)), "code") is False


# ---------------------------------------------------------------------------
# Containers that cannot carry a mark
# ---------------------------------------------------------------------------

def _bold_around_code_block():
    return b.doc(
        b.node("paragraph", b.text("aaaa", "bold")),
        b.node("code_block", b.text("x=1")),
        b.node("paragraph", b.text("bbbb", "bold")),
    )


def test_code_block_is_skipped_for_marks_it_cannot_hold() -> None:
    doc = _bold_around_code_block()

    assert is_mark_active(_state(doc, (1, 16)), "bold") is True


def test_selection_inside_code_block_is_inactive() -> None:
    doc = b.doc(b.node("code_block", b.text("let x")))

    assert is_mark_active(_state(doc, (1, 6)), "bold") is False
    assert is_mark_active(_state(doc, (1, 6)), "code") is False
    assert is_mark_active(_state(doc, (1, 6))) is False


def test_horizontal_rule_between_marked_paragraphs() -> None:
    doc = b.doc(
        b.node("paragraph", b.text("aa", "bold")),
        b.node("horizontal_rule"),
        b.node("paragraph", b.text("bb", "bold")),
    )

    assert is_mark_active(_state(doc, (1, 8)), "bold") is True
    # Without a mark kind the rule is skipped only because it carries no marks.
    assert is_mark_active(_state(doc, (1, 8))) is True


def test_blockquote_content_is_visited() -> None:
    doc = b.doc(b.node("blockquote", b.node("paragraph", b.text("quote", "italic"))))

    assert is_mark_active(_state(doc, (2, 7)), "italic") is True


# ---------------------------------------------------------------------------
# Queries without a kind
# ---------------------------------------------------------------------------

def test_any_mark_fully_covered() -> None:
    doc = b.doc(b.node("paragraph", b.text("aa", "bold"), b.text("bb", "italic")))

    assert is_mark_active(_state(doc, (1, 5))) is True
    assert is_mark_active(_state(doc, (1, 5)), None, {}) is True


def test_any_mark_mostly_unmarked() -> None:
    doc = b.doc(b.node("paragraph", b.text("a", "bold"), b.text("bbb")))

    assert is_mark_active(_state(doc, (1, 5))) is False


def test_any_mark_counts_each_range_as_excluded_as_well() -> None:
    doc = b.doc(b.node("paragraph", b.text("aa", "bold"), b.text("bb")))

    # matched 2 plus excluded 2 covers the 4 selected positions.
    assert is_mark_active(_state(doc, (1, 5))) is True


def test_empty_name_means_any_mark() -> None:
    doc = b.doc(b.node("paragraph", b.text("ab", "strike")))

    assert is_mark_active(_state(doc, (1, 3)), "") is True


# ---------------------------------------------------------------------------
# Name resolution
# ---------------------------------------------------------------------------

def test_unknown_mark_name_raises() -> None:
    doc = b.doc(b.node("paragraph", b.text("ab")))

    with pytest.raises(UnknownMarkKind):
        is_mark_active(_state(doc, (1, 3)), "underline")


def test_get_mark_kind_accepts_kind_or_name() -> None:
    bold = DEFAULT_SCHEMA.mark_kind("bold")

    assert get_mark_kind("bold", DEFAULT_SCHEMA) is bold
    assert get_mark_kind(bold, DEFAULT_SCHEMA) is bold


def test_mark_kind_handle_is_accepted() -> None:
    doc = b.doc(b.node("paragraph", b.text("ab", "bold")))

    assert is_mark_active(_state(doc, (1, 3)), DEFAULT_SCHEMA.mark_kind("bold")) is True


def test_active_marks_reports_every_kind() -> None:
    doc = b.doc(b.node("paragraph", b.text("aaaa", "bold"), b.text("bbbb", "code")))

    assert active_marks(_state(doc, (1, 9))) == {
        "link": False,
        "bold": True,
        "italic": False,
        "strike": False,
        "code": False,
    }
