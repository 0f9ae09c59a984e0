"""
Property-based tests for the history store.

**Feature: line-editing-repl, Property 4: History stays deduplicated and navigable**
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from flagterm.cli.history import HistoryStore

# Strategy for submitted lines (may be blank, no newlines)
line_string = st.text(
    alphabet=st.characters(
        whitelist_categories=("L", "N", "P", "S", "Zs"),
        blacklist_characters="\n\r",
    ),
    min_size=0,
    max_size=40,
)

# Navigation steps: True walks back, False walks forward
navigation = st.lists(st.booleans(), min_size=0, max_size=30)


@given(lines=st.lists(line_string, min_size=0, max_size=30))
@settings(max_examples=100)
def test_submitted_history_is_trimmed_and_unique(lines: list[str]):
    """
    For any sequence of submissions, the history holds each non-empty
    trimmed line once, ordered by its most recent submission.
    """
    history = HistoryStore()
    for line in lines:
        history.submit(line)

    expected: list[str] = []
    for line in lines:
        trimmed = line.strip()
        if not trimmed:
            continue
        if trimmed in expected:
            expected.remove(trimmed)
        expected.append(trimmed)

    assert history.list() == expected
    assert history.entries[-1] == ""
    assert history.cursor == len(history.entries) - 1


@given(lines=st.lists(line_string, min_size=0, max_size=20), steps=navigation)
@settings(max_examples=100)
def test_navigation_cursor_stays_in_range(lines: list[str], steps: list[bool]):
    """
    For any history and any walk through it, the cursor stays within the
    entries and every recalled line is one of them.
    """
    history = HistoryStore(lines)
    current = ""
    for back in steps:
        current = history.previous(current) if back else history.next(current)
        assert 0 <= history.cursor < len(history.entries)
        assert current == history.entries[history.cursor]


@given(lines=st.lists(line_string.filter(lambda s: s.strip()), min_size=1, max_size=20))
@settings(max_examples=100)
def test_walking_back_then_forward_restores_draft(lines: list[str]):
    """
    Walking all the way back and all the way forward again without edits
    ends on the line that was being typed.
    """
    history = HistoryStore(lines)
    draft = "draft in progress"
    current = draft
    for _ in range(len(history.entries)):
        current = history.previous(current)
    for _ in range(len(history.entries)):
        current = history.next(current)
    assert current == draft


@given(lines=st.lists(line_string, min_size=0, max_size=30))
@settings(max_examples=100)
def test_preloaded_history_has_no_duplicates(lines: list[str]):
    """
    Preloading any list of lines yields unique, non-empty entries, each at
    the position of its last occurrence.
    """
    history = HistoryStore(lines)
    listed = history.list()
    assert len(listed) == len(set(listed))

    trimmed = [line.strip() for line in lines if line.strip()]
    assert listed == [line for i, line in enumerate(trimmed) if line not in trimmed[i + 1:]]
