"""
block_editor — line-anchored block edits for automated coding assistants.

Public API for library usage::

    from block_editor import Workspace, apply_diffs

    report = apply_diffs("app.py", "old line", "new line", 3,
                         workspace=Workspace("."))
"""

from .api import DiffReport, apply_diffs
from .workspace import Workspace

__all__ = ["apply_diffs", "DiffReport", "Workspace"]
