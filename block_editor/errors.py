"""
Error taxonomy for block edits.

Fatal errors (``ValidationError``, ``NotFoundError``, ``WorkspaceError``,
``FileAccessError``) stop a request and leave the file untouched.
Per-edit errors derive from ``EditError`` and are captured into the
result list by the batch applier.
"""

from __future__ import annotations


class BlockEditError(Exception):
    """Base class for every error raised by block_editor."""


class ValidationError(BlockEditError):
    """Raised when an edit request is malformed."""


class NotFoundError(BlockEditError):
    """Raised when the target file does not exist."""


class WorkspaceError(BlockEditError):
    """Raised when a workspace root is invalid or a path escapes it."""


class FileAccessError(BlockEditError):
    """Raised when a workspace file cannot be decoded, read or written."""


class EditError(BlockEditError):
    """A single edit could not be applied at its computed location."""

    def __init__(
        self,
        message: str,
        original_index: int = 0,
        original_start_line: int = 0,
    ) -> None:
        super().__init__(message)
        self.original_index = original_index
        self.original_start_line = original_start_line


class OutOfRangeError(EditError):
    """The effective start or end line lies beyond the buffer."""


class ContentMismatchError(EditError):
    """The block at the effective location differs from the search block.

    ``expected`` and ``actual`` hold both blocks rendered as
    ``"<line> | <text>"`` using effective line numbers.
    """

    def __init__(
        self,
        message: str,
        expected: str,
        actual: str,
        original_index: int = 0,
        original_start_line: int = 0,
        effective_start_line: int = 0,
    ) -> None:
        super().__init__(message, original_index, original_start_line)
        self.expected = expected
        self.actual = actual
        self.effective_start_line = effective_start_line


class AtomicAbortError(BlockEditError):
    """An atomic batch failed validation; nothing was written."""

    def __init__(self, message: str, results: list) -> None:
        super().__init__(message)
        self.results = results


class SingleEditError(BlockEditError):
    """The only edit in a request failed; nothing was written."""

    def __init__(self, message: str, error: EditError, result=None) -> None:
        super().__init__(message)
        self.error = error
        self.result = result


class ReviewRejectedError(BlockEditError):
    """The reviewer declined the previewed change; nothing was written."""
