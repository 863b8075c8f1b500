"""
Patch applier — replays edit descriptors against a line buffer while
tracking how earlier edits shift later line numbers.

Every function here is pure: buffers passed in are never mutated, so the
same code drives both the dry-run validation pass and the real commit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from ..errors import ContentMismatchError, EditError, OutOfRangeError
from .normalizer import EditDescriptor

logger = logging.getLogger(__name__)


@dataclass
class AppliedEdit:
    """Buffer and offset after one successful edit."""
    lines: list[str]
    offset: int
    effective_start_line: int
    search_line_count: int
    replace_line_count: int

    @property
    def line_delta(self) -> int:
        return self.replace_line_count - self.search_line_count


@dataclass
class EditFailure:
    """A descriptor that could not be applied, with the reason."""
    descriptor: EditDescriptor
    error: EditError


@dataclass
class SequenceOutcome:
    """Result of replaying a sorted sequence of descriptors."""
    lines: list[str]
    offset: int = 0
    applied: list[tuple[EditDescriptor, AppliedEdit]] = field(default_factory=list)
    failure: Optional[EditFailure] = None

    @property
    def success(self) -> bool:
        return self.failure is None


def format_with_line_numbers(content: str, start_line: int = 1) -> str:
    """Prefix every line of *content* with ``"<n> | "``."""
    return "\n".join(
        f"{start_line + i} | {line}"
        for i, line in enumerate(content.split("\n"))
    )


def _blocks_match(actual: list[str], expected: list[str], trim: bool) -> bool:
    if trim:
        actual = [line.strip() for line in actual]
        expected = [line.strip() for line in expected]
    return actual == expected


def apply_edit(
    lines: list[str],
    descriptor: EditDescriptor,
    offset: int = 0,
    trim: bool = False,
) -> AppliedEdit:
    """Apply one descriptor to *lines* at its offset-adjusted position.

    Parameters
    ----------
    lines:
        Current buffer; not modified.
    descriptor:
        The edit to apply. Its start line refers to the unedited file.
    offset:
        Net lines inserted (positive) or removed (negative) by edits
        already applied in this request.
    trim:
        Compare lines with leading/trailing whitespace stripped. The
        replacement is always inserted verbatim.

    Raises
    ------
    OutOfRangeError
        If the effective start or end line is beyond the buffer.
    ContentMismatchError
        If the block at the effective location differs from the search
        block.
    """
    original_start = descriptor.original_start_line
    start = original_start + offset

    # Earlier edits in the batch shrank the buffer past this edit's anchor
    if start < 1:
        raise OutOfRangeError(
            f"start_line ({original_start} -> {start}) overlaps an earlier "
            "edit in this batch",
            descriptor.original_index, original_start,
        )

    if start > len(lines):
        raise OutOfRangeError(
            f"start_line ({original_start} -> {start}) exceeds file length "
            f"({len(lines)} lines)",
            descriptor.original_index, original_start,
        )

    search_lines = descriptor.search_lines
    end = start + len(search_lines) - 1

    if end > len(lines):
        raise OutOfRangeError(
            "Search content extends beyond file length. "
            f"Start line: {original_start} (actual: {start}), "
            f"search lines: {len(search_lines)}, file lines: {len(lines)}",
            descriptor.original_index, original_start,
        )

    actual_lines = lines[start - 1:end]

    if not _blocks_match(actual_lines, search_lines, trim):
        # Diagnostics always show the untrimmed text on both sides
        expected = format_with_line_numbers(descriptor.search_block, start)
        actual = format_with_line_numbers("\n".join(actual_lines), start)
        raise ContentMismatchError(
            f"Content mismatch at line {original_start} (actual: {start}).\n\n"
            f"Expected content:\n{expected}\n\n"
            f"Actual content:\n{actual}\n\n"
            f"This is diff #{descriptor.original_index + 1} in the batch.",
            expected=expected,
            actual=actual,
            original_index=descriptor.original_index,
            original_start_line=original_start,
            effective_start_line=start,
        )

    replace_lines = descriptor.replace_lines
    new_lines = lines[:start - 1] + replace_lines + lines[end:]

    return AppliedEdit(
        lines=new_lines,
        offset=offset + len(replace_lines) - len(search_lines),
        effective_start_line=start,
        search_line_count=len(search_lines),
        replace_line_count=len(replace_lines),
    )


def apply_sequence(
    lines: list[str],
    descriptors: list[EditDescriptor],
    trim: bool = False,
) -> SequenceOutcome:
    """Apply sorted *descriptors* in order, stopping at the first failure.

    The returned outcome holds the buffer as it stood after the last
    successful edit, so a failed sequence leaves the caller's list intact
    and tells it exactly which descriptor broke.
    """
    outcome = SequenceOutcome(lines=list(lines))

    for descriptor in descriptors:
        try:
            applied = apply_edit(outcome.lines, descriptor, outcome.offset, trim)
        except EditError as exc:
            logger.debug(
                "[DiffEdit] Sequence stopped at diff #%d (line %d): %s",
                descriptor.original_index + 1,
                descriptor.original_start_line,
                type(exc).__name__,
            )
            outcome.failure = EditFailure(descriptor=descriptor, error=exc)
            return outcome

        outcome.lines = applied.lines
        outcome.offset = applied.offset
        outcome.applied.append((descriptor, applied))

    return outcome
