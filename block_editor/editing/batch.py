"""
Batch applier — decides between commit-as-you-go and
validate-then-commit for a request's edits.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..errors import EditError
from .normalizer import EditDescriptor
from .patch_applier import AppliedEdit, apply_edit, apply_sequence

logger = logging.getLogger(__name__)

ABORT_MESSAGE = "Operation aborted due to validation failures in atomic mode"


class EditStatus(str, Enum):
    SUCCESS = "success"
    FAIL = "fail"
    ABORTED = "aborted"


class BatchState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    COMMITTING = "committing"
    ABORTED = "aborted"
    DONE = "done"


@dataclass
class EditResult:
    """Outcome of one requested edit."""
    index: int
    start_line: int
    status: EditStatus
    message: str
    error: Optional[EditError] = None

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "start_line": self.start_line,
            "status": self.status.value,
            "message": self.message,
        }


@dataclass
class BatchOutcome:
    """Everything the caller needs after a batch has run."""
    lines: list[str]
    results: list[EditResult] = field(default_factory=list)
    state: BatchState = BatchState.IDLE
    aborted: bool = False

    @property
    def applied_count(self) -> int:
        return sum(1 for r in self.results if r.status is EditStatus.SUCCESS)

    @property
    def failed_count(self) -> int:
        return len(self.results) - self.applied_count


def describe_success(descriptor: EditDescriptor, applied: AppliedEdit) -> str:
    """Human summary of a successful edit, mentioning any size change."""
    message = (
        f"Replaced {applied.search_line_count} line(s) at line "
        f"{descriptor.original_start_line}"
    )
    delta = applied.line_delta
    if delta > 0:
        message += f" (added {delta} line(s))"
    elif delta < 0:
        message += f" (removed {-delta} line(s))"
    return message


class BatchApplier:
    """Apply a request's sorted edit descriptors to a line buffer.

    Parameters
    ----------
    atomic:
        With more than one edit, simulate the whole sequence first and
        commit only if every edit would succeed.
    trim:
        Ignore leading/trailing whitespace per line when matching.
    """

    def __init__(self, atomic: bool = True, trim: bool = False) -> None:
        self._atomic = atomic
        self._trim = trim
        self.state = BatchState.IDLE

    def run(self, lines: list[str], descriptors: list[EditDescriptor]) -> BatchOutcome:
        """Run the batch. *lines* itself is never modified.

        Results come back in submission order regardless of the order
        in which the edits were applied.
        """
        self.state = BatchState.IDLE

        if not descriptors:
            self.state = BatchState.DONE
            return BatchOutcome(lines=list(lines), state=self.state)

        if self._atomic and len(descriptors) > 1:
            outcome = self._run_atomic(lines, descriptors)
        else:
            outcome = self._run_each(lines, descriptors)

        outcome.results.sort(key=lambda r: r.index)
        return outcome

    # ------------------------------------------------------------------
    # Validate-then-commit
    # ------------------------------------------------------------------

    def _run_atomic(
        self,
        lines: list[str],
        descriptors: list[EditDescriptor],
    ) -> BatchOutcome:
        self.state = BatchState.VALIDATING
        simulation = apply_sequence(list(lines), descriptors, self._trim)

        if not simulation.success:
            failure = simulation.failure
            self.state = BatchState.ABORTED
            logger.warning(
                "[DiffEdit] Atomic validation failed at diff #%d (line %d), "
                "aborting %d edit(s)",
                failure.descriptor.original_index + 1,
                failure.descriptor.original_start_line,
                len(descriptors),
            )
            results = []
            for descriptor in descriptors:
                if descriptor is failure.descriptor:
                    results.append(EditResult(
                        index=descriptor.original_index,
                        start_line=descriptor.original_start_line,
                        status=EditStatus.FAIL,
                        message=str(failure.error),
                        error=failure.error,
                    ))
                else:
                    results.append(EditResult(
                        index=descriptor.original_index,
                        start_line=descriptor.original_start_line,
                        status=EditStatus.ABORTED,
                        message=ABORT_MESSAGE,
                    ))
            return BatchOutcome(
                lines=list(lines),
                results=results,
                state=self.state,
                aborted=True,
            )

        self.state = BatchState.COMMITTING
        committed = apply_sequence(list(lines), descriptors, self._trim)
        if not committed.success:
            # Same input, same pure function: the simulation guarantees this
            raise RuntimeError("commit pass diverged from validation pass")

        results = [
            EditResult(
                index=descriptor.original_index,
                start_line=descriptor.original_start_line,
                status=EditStatus.SUCCESS,
                message=describe_success(descriptor, applied),
            )
            for descriptor, applied in committed.applied
        ]
        self.state = BatchState.DONE
        logger.info(
            "[DiffEdit] Atomic batch committed %d edit(s), net offset %+d",
            len(results), committed.offset,
        )
        return BatchOutcome(lines=committed.lines, results=results, state=self.state)

    # ------------------------------------------------------------------
    # Commit each edit independently
    # ------------------------------------------------------------------

    def _run_each(
        self,
        lines: list[str],
        descriptors: list[EditDescriptor],
    ) -> BatchOutcome:
        self.state = BatchState.COMMITTING
        buffer = list(lines)
        offset = 0
        results: list[EditResult] = []

        for descriptor in descriptors:
            try:
                applied = apply_edit(buffer, descriptor, offset, self._trim)
            except EditError as exc:
                # Buffer and offset stay where the last successful edit left them
                logger.warning(
                    "[DiffEdit] Diff #%d at line %d failed: %s",
                    descriptor.original_index + 1,
                    descriptor.original_start_line,
                    type(exc).__name__,
                )
                results.append(EditResult(
                    index=descriptor.original_index,
                    start_line=descriptor.original_start_line,
                    status=EditStatus.FAIL,
                    message=str(exc),
                    error=exc,
                ))
                continue

            buffer = applied.lines
            offset = applied.offset
            results.append(EditResult(
                index=descriptor.original_index,
                start_line=descriptor.original_start_line,
                status=EditStatus.SUCCESS,
                message=describe_success(descriptor, applied),
            ))

        self.state = BatchState.DONE
        return BatchOutcome(lines=buffer, results=results, state=self.state)
