"""Block editing — offset-tracking search/replace of line blocks."""

from .normalizer import EditDescriptor, normalize_edits
from .patch_applier import (
    AppliedEdit, EditFailure, SequenceOutcome,
    apply_edit, apply_sequence, format_with_line_numbers,
)
from .batch import BatchApplier, BatchOutcome, BatchState, EditResult, EditStatus
from .metrics import log_edit_metric, read_edit_stats

__all__ = [
    "EditDescriptor", "normalize_edits",
    "AppliedEdit", "EditFailure", "SequenceOutcome",
    "apply_edit", "apply_sequence", "format_with_line_numbers",
    "BatchApplier", "BatchOutcome", "BatchState", "EditResult", "EditStatus",
    "log_edit_metric", "read_edit_stats",
]
