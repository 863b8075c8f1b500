"""
Edit normalizer — turns scalar-or-list request arguments into sorted
edit descriptors.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..errors import ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EditDescriptor:
    """One search/replace instruction for a single file."""
    search_block: str
    replace_block: str
    original_start_line: int   # 1-indexed, relative to the unedited file
    original_index: int        # position in the caller's request

    @property
    def search_lines(self) -> list[str]:
        return self.search_block.split("\n")

    @property
    def replace_lines(self) -> list[str]:
        return self.replace_block.split("\n")


def _as_list(value) -> list:
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def normalize_edits(search_content, replace_content, start_line) -> list[EditDescriptor]:
    """Build edit descriptors from a request, sorted in application order.

    Parameters
    ----------
    search_content, replace_content:
        A string or a list of strings.
    start_line:
        An int or a list of ints (1-indexed).

    Returns
    -------
    list[EditDescriptor]
        Sorted by ``original_start_line``; ties keep submission order.

    Raises
    ------
    ValidationError
        If the three lists differ in length, a block is not a string, or
        a start line is not a positive integer.
    """
    searches = _as_list(search_content)
    replaces = _as_list(replace_content)
    starts = _as_list(start_line)

    if not (len(searches) == len(replaces) == len(starts)):
        raise ValidationError(
            "Array lengths for search_content, replace_content, and "
            "start_line must match "
            f"(got {len(searches)}, {len(replaces)}, {len(starts)})"
        )

    for i, (search, replace) in enumerate(zip(searches, replaces)):
        if not isinstance(search, str) or not isinstance(replace, str):
            raise ValidationError(
                f"Invalid content at index {i}: search_content and "
                "replace_content must be strings"
            )

    for i, line in enumerate(starts):
        # bool is an int subclass; True would silently mean line 1
        if isinstance(line, bool) or not isinstance(line, int):
            raise ValidationError(
                f"Invalid start_line: {line!r} at index {i}. "
                "Line numbers must be integers."
            )
        if line < 1:
            raise ValidationError(
                f"Invalid start_line: {line} at index {i}. "
                "Line numbers start from 1."
            )

    descriptors = [
        EditDescriptor(
            search_block=search,
            replace_block=replace,
            original_start_line=line,
            original_index=i,
        )
        for i, (search, replace, line) in enumerate(zip(searches, replaces, starts))
    ]
    # sorted() is stable, so equal start lines stay in submission order
    descriptors = sorted(descriptors, key=lambda d: d.original_start_line)

    logger.debug(
        "[DiffEdit] Normalized %d edit(s), application order: %s",
        len(descriptors), [d.original_index for d in descriptors],
    )
    return descriptors
