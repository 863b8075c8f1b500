"""
Workspace — scopes every file path to a root directory and owns raw
file I/O for the editor.
"""

from __future__ import annotations

import logging
import os
import shutil

from .errors import (
    FileAccessError, NotFoundError, ValidationError, WorkspaceError,
)

logger = logging.getLogger(__name__)

_TMP_SUFFIX = ".blockedit_tmp"


def _check_path_string(value, what: str) -> None:
    if not value or not isinstance(value, str):
        raise WorkspaceError(f"Invalid {what}: must be a non-empty string")
    if "\0" in value:
        raise WorkspaceError(f"Invalid {what}: contains null bytes")


class Workspace:
    """A root directory that all relative and absolute paths must stay in."""

    def __init__(self, root: str) -> None:
        _check_path_string(root, "workspace root")
        resolved = os.path.realpath(os.path.abspath(root))
        if not os.path.exists(resolved):
            raise WorkspaceError(f"Workspace directory does not exist: {root}")
        if not os.path.isdir(resolved):
            raise WorkspaceError(f"Workspace path is not a directory: {root}")
        self.root = resolved
        logger.debug("[Workspace] Root set to %s", self.root)

    def resolve(self, path: str) -> str:
        """Return the absolute path for *path*, refusing escapes from the root."""
        _check_path_string(path, "file path")
        target = path if os.path.isabs(path) else os.path.join(self.root, path)
        resolved = os.path.realpath(target)

        try:
            inside = os.path.commonpath([self.root, resolved]) == self.root
        except ValueError:
            # Different drives on Windows
            inside = False
        if not inside:
            raise WorkspaceError(
                f"Access denied: {path} is outside the workspace boundary"
            )
        return resolved

    def relative(self, path: str) -> str:
        """Workspace-relative form of *path*, for messages and metrics."""
        return os.path.relpath(self.resolve(path), self.root)

    def exists(self, path: str) -> bool:
        return os.path.isfile(self.resolve(path))

    def read_text(self, path: str) -> str:
        """Read a file as UTF-8 text without newline translation."""
        full_path = self.resolve(path)
        if not os.path.isfile(full_path):
            raise NotFoundError(f"File not found: {path}")
        try:
            with open(full_path, "r", encoding="utf-8", newline="") as f:
                return f.read()
        except UnicodeDecodeError as exc:
            raise FileAccessError(f"Cannot decode {path} as UTF-8: {exc}") from exc
        except OSError as exc:
            raise FileAccessError(f"Cannot read {path}: {exc}") from exc

    def write_text(self, path: str, content: str) -> None:
        """Write *content* atomically, creating parent directories."""
        full_path = self.resolve(path)
        tmp_path = full_path + _TMP_SUFFIX

        try:
            os.makedirs(os.path.dirname(full_path), exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8", newline="") as f:
                f.write(content)
            # os.rename refuses to overwrite on Windows
            if os.path.exists(full_path):
                shutil.move(tmp_path, full_path)
            else:
                os.rename(tmp_path, full_path)
        except OSError as exc:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise FileAccessError(f"Cannot write {path}: {exc}") from exc
        logger.debug("[Workspace] Wrote %d chars to %s", len(content), full_path)

    def read_lines(self, path: str, line_range: str | None = None) -> str:
        """Return a file (or a ``"start-end"`` slice of it) with line numbers."""
        content = self.read_text(path)
        lines = content.split("\n")
        if line_range is None:
            start, end = 1, len(lines)
        else:
            start, end = parse_line_range(line_range)
            if start > len(lines):
                raise ValidationError(
                    f"Line range {line_range} exceeds file length "
                    f"({len(lines)} lines)"
                )
        selected = lines[start - 1:end]
        return "\n".join(
            f"{start + i} | {line}" for i, line in enumerate(selected)
        )


def parse_line_range(line_range: str) -> tuple[int, int]:
    """Parse ``"start-end"`` into a validated 1-indexed inclusive pair."""
    if not line_range or "-" not in line_range:
        raise ValidationError(
            f"Invalid line range format: {line_range}. Expected format: 'start-end'"
        )
    start_text, _, end_text = line_range.partition("-")
    try:
        start, end = int(start_text), int(end_text)
    except ValueError:
        raise ValidationError(
            f"Invalid line range: {line_range}. Start and end must be valid numbers"
        ) from None
    if start < 1 or end < 1:
        raise ValidationError(
            f"Invalid line range: {line_range}. Line numbers must be positive"
        )
    if start > end:
        raise ValidationError(
            f"Invalid line range: {line_range}. Start line cannot be greater than end line"
        )
    return start, end
