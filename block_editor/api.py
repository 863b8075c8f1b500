"""
Programmatic API for block edits — use as a library from Python code.

Example usage::

    from block_editor import Workspace, apply_diffs

    report = apply_diffs(
        "src/app.js",
        search_content=['    console.log("Hello World");', "    }"],
        replace_content=['    console.log("Hello Universe");', "    }\\n"],
        start_line=[2, 9],
        workspace=Workspace("/path/to/project"),
    )
    print(report.message)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from .diff_display import compute_diff
from .editing.batch import BatchApplier, EditResult, EditStatus
from .editing.metrics import log_edit_metric
from .editing.normalizer import normalize_edits
from .errors import (
    AtomicAbortError, NotFoundError, ReviewRejectedError, SingleEditError,
)
from .syntax import check_syntax
from .workspace import Workspace

logger = logging.getLogger(__name__)

# (path, unified diff or None) -> approve?
ApproveCallback = Callable[[str, Optional[str]], bool]


@dataclass
class DiffReport:
    """Structured result returned by :func:`apply_diffs`."""
    path: str
    atomic: bool
    results: list[EditResult] = field(default_factory=list)
    line_count: int = 0
    content: str = ""
    written: bool = False
    diff: Optional[str] = None
    syntax_warning: Optional[str] = None
    message: str = ""

    @property
    def applied_count(self) -> int:
        return sum(1 for r in self.results if r.status is EditStatus.SUCCESS)

    @property
    def failed_count(self) -> int:
        return len(self.results) - self.applied_count

    @property
    def success(self) -> bool:
        return self.failed_count == 0


def format_results(results: list[EditResult]) -> str:
    """Render the ``Detailed results:`` section, one block per edit."""
    text = "Detailed results:\n"
    for result in results:
        text += f"\nDiff {result.index + 1}:\n"
        text += f"  Status: {result.status.value}\n"
        text += f"  Start Line: {result.start_line}\n"
        text += f"  Message: {result.message}\n"
    return text


def _record(enabled: bool, project_root: str, metrics_dir: str | None,
            path: str, atomic: bool, trim: bool,
            results: list[EditResult], aborted: bool,
            rejected: bool = False) -> None:
    if not enabled:
        return
    log_edit_metric(
        {
            "file": path,
            "edits": len(results),
            "applied": sum(1 for r in results if r.status is EditStatus.SUCCESS),
            "failed": sum(1 for r in results if r.status is EditStatus.FAIL),
            "aborted": aborted,
            "rejected": rejected,
            "atomic": atomic,
            "trim": trim,
            "failure_kinds": [
                type(r.error).__name__ for r in results if r.error is not None
            ],
        },
        project_root=project_root,
        metrics_dir=metrics_dir,
    )


def apply_diffs(
    path: str,
    search_content,
    replace_content,
    start_line,
    atomic: bool = True,
    trim: bool = False,
    *,
    workspace: Workspace,
    dry_run: bool = False,
    syntax_check: bool = False,
    record_metrics: bool = False,
    metrics_dir: str | None = None,
    approve: ApproveCallback | None = None,
) -> DiffReport:
    """Apply one or more block edits to a single file.

    Args:
        path: File to edit, absolute or relative to the workspace root.
        search_content: Block(s) expected at the target location(s).
        replace_content: Replacement block(s), inserted verbatim.
        start_line: 1-indexed line(s) in the unedited file.
        atomic: With several edits, commit only if all of them apply.
        trim: Ignore leading/trailing whitespace per line when matching.
        workspace: Root that *path* must stay inside.
        dry_run: Compute the report and diff but never write.
        syntax_check: Parse the result with tree-sitter and attach a
            warning when it has syntax errors.
        record_metrics: Append a summary line to the metrics log.
        metrics_dir: Metrics directory relative to the workspace root.
        approve: Called with the path and preview diff before writing;
            returning False leaves the file untouched.

    Raises:
        WorkspaceError: *path* is outside the workspace.
        NotFoundError: the file does not exist.
        FileAccessError: the file is not UTF-8, or reading/writing it failed.
        ValidationError: malformed request (nothing attempted).
        SingleEditError: the only edit failed (nothing written).
        AtomicAbortError: an atomic batch failed validation (nothing written).
        ReviewRejectedError: *approve* declined the change.
    """
    if not workspace.exists(path):
        raise NotFoundError(f"File not found: {path}")

    descriptors = normalize_edits(search_content, replace_content, start_line)
    diff_count = len(descriptors)

    original = workspace.read_text(path)
    lines = original.split("\n")
    rel_path = workspace.relative(path)

    logger.info(
        "[DiffEdit] Applying %d diff(s) to %s (atomic=%s, trim=%s)",
        diff_count, rel_path, atomic, trim,
    )

    outcome = BatchApplier(atomic=atomic, trim=trim).run(lines, descriptors)
    results = outcome.results

    def record(rejected=False):
        _record(record_metrics, workspace.root, metrics_dir, rel_path,
                atomic, trim, results, outcome.aborted, rejected)

    if outcome.aborted:
        record()
        failed = sum(1 for r in results if r.status is EditStatus.FAIL)
        message = (
            f"Atomic operation failed: {failed}/{diff_count} diffs would fail. "
            "No changes applied.\n\n"
        )
        message += format_results(results)
        raise AtomicAbortError(message, results)

    if diff_count == 1 and results[0].status is EditStatus.FAIL:
        record()
        raise SingleEditError(
            f"Single diff failed:\n\n{results[0].message}",
            results[0].error,
            results[0],
        )

    new_content = "\n".join(outcome.lines)
    report = DiffReport(
        path=path,
        atomic=atomic,
        results=results,
        line_count=len(outcome.lines),
        content=new_content,
        diff=compute_diff(rel_path, original, new_content),
    )

    if syntax_check and report.diff is not None:
        report.syntax_warning = check_syntax(rel_path, new_content)

    if report.applied_count and not dry_run:
        if approve is not None and not approve(rel_path, report.diff):
            logger.info("[DiffEdit] Change to %s rejected at review", rel_path)
            record(rejected=True)
            raise ReviewRejectedError(f"Changes to {path} were rejected; file left unchanged")
        workspace.write_text(path, new_content)
        report.written = True

    record()
    report.message = _summarize(report, diff_count, dry_run)
    return report


def _summarize(report: DiffReport, diff_count: int, dry_run: bool) -> str:
    if diff_count == 0:
        message = (
            f"No diffs to apply to {report.path}. "
            f"File has {report.line_count} lines."
        )
    elif diff_count == 1:
        verb = "Would apply" if dry_run else "Successfully applied"
        message = (
            f"{verb} diff to {report.path}: {report.results[0].message}. "
            f"File now has {report.line_count} lines."
        )
    else:
        mode = "atomic" if report.atomic else "non-atomic"
        prefix = "[dry run] " if dry_run else ""
        message = (
            f"{prefix}Batch diff operation ({mode}) completed: "
            f"{report.applied_count}/{diff_count} diffs applied successfully "
            f"to {report.path}"
        )
        if report.failed_count:
            message += f" ({report.failed_count} failed)"
        message += f". File now has {report.line_count} lines.\n\n"
        message += format_results(report.results)

    if report.syntax_warning:
        message += f"\n\nWarning: {report.syntax_warning}"
    return message
