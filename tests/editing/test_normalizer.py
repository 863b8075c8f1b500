"""Tests for edit normalization."""

import pytest

from block_editor.editing.normalizer import EditDescriptor, normalize_edits
from block_editor.errors import ValidationError


class TestScalarAndListInput:
    def test_single_edit_becomes_one_descriptor(self):
        descriptors = normalize_edits("old", "new", 3)

        assert descriptors == [
            EditDescriptor(
                search_block="old",
                replace_block="new",
                original_start_line=3,
                original_index=0,
            )
        ]

    def test_parallel_lists(self):
        descriptors = normalize_edits(["a", "b"], ["A", "B"], [1, 2])

        assert [d.search_block for d in descriptors] == ["a", "b"]
        assert [d.replace_block for d in descriptors] == ["A", "B"]
        assert [d.original_index for d in descriptors] == [0, 1]

    def test_empty_lists_give_no_descriptors(self):
        assert normalize_edits([], [], []) == []

    def test_scalar_mixed_with_longer_list_is_rejected(self):
        with pytest.raises(ValidationError, match="must match"):
            normalize_edits(["a", "b"], "A", [1, 2])

    def test_length_mismatch(self):
        with pytest.raises(ValidationError, match="must match"):
            normalize_edits(["a", "b"], ["A", "B"], [1])


class TestStartLineValidation:
    def test_zero_is_rejected(self):
        with pytest.raises(ValidationError, match="Invalid start_line: 0 at index 0"):
            normalize_edits("a", "b", 0)

    def test_negative_in_batch_names_index(self):
        with pytest.raises(ValidationError, match="at index 1"):
            normalize_edits(["a", "b"], ["A", "B"], [4, -2])

    def test_non_integer_is_rejected(self):
        with pytest.raises(ValidationError):
            normalize_edits("a", "b", "3")

    def test_bool_is_rejected(self):
        with pytest.raises(ValidationError):
            normalize_edits("a", "b", True)

    def test_non_string_block_is_rejected(self):
        with pytest.raises(ValidationError, match="must be strings"):
            normalize_edits(["a", None], ["A", "B"], [1, 2])


class TestOrdering:
    def test_sorted_by_start_line(self):
        descriptors = normalize_edits(["c", "a", "b"], ["C", "A", "B"], [9, 2, 5])

        assert [d.original_start_line for d in descriptors] == [2, 5, 9]
        # Index still refers to the caller's position
        assert [d.original_index for d in descriptors] == [1, 2, 0]

    def test_ties_keep_submission_order(self):
        descriptors = normalize_edits(["x", "y", "z"], ["X", "Y", "Z"], [4, 1, 4])

        assert [d.original_index for d in descriptors] == [1, 0, 2]


def test_descriptor_splits_blocks_on_newlines():
    d = EditDescriptor("a\nb\n", "c", 1, 0)
    assert d.search_lines == ["a", "b", ""]
    assert d.replace_lines == ["c"]
