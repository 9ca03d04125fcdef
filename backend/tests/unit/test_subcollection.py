"""Tests for the generic sub-collection operations.

Covers prepend ordering, identity-addressed lookup, removal by index, and
the duplicate-identity check. Property tests use Hypothesis over sequences
of comments.
"""

import uuid
from datetime import date

import pytest
from hypothesis import given
from hypothesis import strategies as st

from devconnector.core.errors import DuplicateIdentityError, IndexOutOfRangeError
from devconnector.services.document_types import Comment, Experience, Like
from devconnector.services.subcollection import (
    NOT_FOUND,
    ensure_unique_keys,
    find_by_actor,
    find_index,
    prepend,
    remove_at,
)

_AUTHOR = uuid.UUID("10000000-0000-0000-0000-000000000001")


def _comment(text: str = "hi") -> Comment:
    return Comment(text=text, author_ref=_AUTHOR)


comments = st.lists(
    st.text(max_size=20).map(_comment),
    max_size=15,
).map(tuple)


# =============================================================================
# prepend
# =============================================================================


class TestPrepend:
    """Test prepend()."""

    def test_prepend_to_empty(self) -> None:
        record = _comment()
        assert prepend((), record) == (record,)

    def test_new_record_goes_first(self) -> None:
        old = _comment("old")
        new = _comment("new")
        assert prepend((old,), new) == (new, old)

    def test_input_is_not_modified(self) -> None:
        original = (_comment("a"), _comment("b"))
        prepend(original, _comment("c"))
        assert len(original) == 2

    @given(sequence=comments, text=st.text(max_size=20))
    def test_head_is_record_and_tail_is_input(
        self, sequence: tuple[Comment, ...], text: str
    ) -> None:
        """prepend(S, R) == (R, *S) for any S."""
        record = _comment(text)
        result = prepend(sequence, record)
        assert result[0] is record
        assert result[1:] == sequence
        assert len(result) == len(sequence) + 1


# =============================================================================
# find_index / find_by_actor
# =============================================================================


class TestFindIndex:
    """Test find_index()."""

    def test_finds_by_uuid(self) -> None:
        first, second = _comment("1"), _comment("2")
        assert find_index((first, second), second.id) == 1

    def test_finds_by_string_identifier(self) -> None:
        record = _comment()
        assert find_index((record,), str(record.id)) == 0

    def test_missing_returns_not_found(self) -> None:
        assert find_index((_comment(),), uuid.uuid4()) == NOT_FOUND

    def test_empty_sequence_returns_not_found(self) -> None:
        assert find_index((), uuid.uuid4()) == NOT_FOUND

    def test_malformed_identifier_returns_not_found(self) -> None:
        assert find_index((_comment(),), "garbage") == NOT_FOUND

    def test_works_for_experience(self) -> None:
        entry = Experience(title="Dev", company="Acme", from_date=date(2020, 1, 1))
        assert find_index((entry,), entry.id) == 0

    def test_custom_key_function(self) -> None:
        record = _comment()
        assert find_index((record,), _AUTHOR, key_fn=lambda r: r.author_ref) == 0

    def test_returns_first_match_in_scan_order(self) -> None:
        """With duplicated keys the front-most record wins."""
        shared = uuid.uuid4()
        front = Comment(text="front", author_ref=_AUTHOR, id=shared)
        back = Comment(text="back", author_ref=_AUTHOR, id=shared)
        assert find_index((front, back), shared) == 0


class TestFindByActor:
    """Test find_by_actor()."""

    def test_finds_like_by_actor(self) -> None:
        actor = uuid.uuid4()
        likes = (Like(actor_ref=uuid.uuid4()), Like(actor_ref=actor))
        assert find_by_actor(likes, actor) == 1

    def test_missing_actor(self) -> None:
        assert find_by_actor((Like(actor_ref=uuid.uuid4()),), uuid.uuid4()) == NOT_FOUND


# =============================================================================
# remove_at
# =============================================================================


class TestRemoveAt:
    """Test remove_at()."""

    def test_removes_middle_element(self) -> None:
        a, b, c = _comment("a"), _comment("b"), _comment("c")
        assert remove_at((a, b, c), 1) == (a, c)

    def test_removes_only_element(self) -> None:
        assert remove_at((_comment(),), 0) == ()

    def test_index_past_end_raises(self) -> None:
        with pytest.raises(IndexOutOfRangeError):
            remove_at((_comment(),), 1)

    def test_negative_index_raises(self) -> None:
        """Negative offsets are not valid addresses."""
        with pytest.raises(IndexOutOfRangeError):
            remove_at((_comment(),), -1)

    def test_not_found_sentinel_raises(self) -> None:
        with pytest.raises(IndexOutOfRangeError):
            remove_at((_comment(),), NOT_FOUND)

    def test_error_is_an_index_error(self) -> None:
        with pytest.raises(IndexError):
            remove_at((), 0)

    @given(sequence=comments, data=st.data())
    def test_removes_exactly_one_preserving_order(
        self, sequence: tuple[Comment, ...], data: st.DataObject
    ) -> None:
        """remove_at(S, i) drops S[i] and keeps the rest in order."""
        if not sequence:
            return
        index = data.draw(st.integers(min_value=0, max_value=len(sequence) - 1))
        removed = sequence[index]
        result = remove_at(sequence, index)
        assert len(result) == len(sequence) - 1
        assert all(record is not removed for record in result)
        assert result == sequence[:index] + sequence[index + 1 :]


# =============================================================================
# ensure_unique_keys
# =============================================================================


class TestEnsureUniqueKeys:
    """Test ensure_unique_keys()."""

    def test_unique_sequence_passes(self) -> None:
        ensure_unique_keys((_comment(), _comment()), "comments")

    def test_empty_sequence_passes(self) -> None:
        ensure_unique_keys((), "likes")

    def test_duplicate_identifier_raises(self) -> None:
        shared = uuid.uuid4()
        records = (
            Comment(text="a", author_ref=_AUTHOR, id=shared),
            Comment(text="b", author_ref=_AUTHOR, id=shared),
        )
        with pytest.raises(DuplicateIdentityError) as exc_info:
            ensure_unique_keys(records, "comments")
        assert exc_info.value.collection == "comments"
        assert exc_info.value.code == "DUPLICATE_IDENTITY"

    def test_duplicate_like_actor_raises(self) -> None:
        actor = uuid.uuid4()
        with pytest.raises(DuplicateIdentityError):
            ensure_unique_keys((Like(actor_ref=actor), Like(actor_ref=actor)), "likes")
