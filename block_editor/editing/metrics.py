"""
Edit metrics — records the outcome of every apply request in a JSONL log.
"""

from __future__ import annotations

import json
import logging
import os
from collections import Counter
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

_METRICS_DIR = ".blockedit"
_METRICS_FILE = "edit_metrics.jsonl"


def _metrics_path(project_root: str | None = None, metrics_dir: str | None = None) -> str:
    """Return the absolute path to the metrics file."""
    base = project_root or os.getcwd()
    return os.path.join(base, metrics_dir or _METRICS_DIR, _METRICS_FILE)


def log_edit_metric(
    data: dict,
    project_root: str | None = None,
    metrics_dir: str | None = None,
) -> None:
    """Append a single request entry to the JSONL log.

    Parameters
    ----------
    data:
        Fields to log (file, edits, applied, failed, aborted, atomic, ...).
    project_root:
        Optional project root directory. Defaults to CWD.
    metrics_dir:
        Directory under *project_root* holding the log.
    """
    path = _metrics_path(project_root, metrics_dir)

    entry = {"timestamp": datetime.now(timezone.utc).isoformat()}
    entry.update(data)

    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry) + "\n")
    except OSError as exc:
        logger.warning("[DiffEdit] Failed to write metrics: %s", exc)


def read_edit_stats(
    last_n: int = 50,
    project_root: str | None = None,
    metrics_dir: str | None = None,
) -> dict:
    """Compute rolling statistics from the metrics log.

    Parameters
    ----------
    last_n:
        Number of most-recent requests to include.
    project_root:
        Optional project root directory.

    Returns
    -------
    dict
        total_requests, total_edits, success_rate, abort_rate,
        avg_edits_per_request and failure_kinds (percent of failed
        edits per error class).
    """
    path = _metrics_path(project_root, metrics_dir)

    entries: list[dict] = []
    if os.path.isfile(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if line:
                        try:
                            entries.append(json.loads(line))
                        except json.JSONDecodeError:
                            continue
        except OSError as exc:
            logger.warning("[DiffEdit] Failed to read metrics: %s", exc)

    entries = entries[-last_n:]

    if not entries:
        return {
            "total_requests": 0,
            "total_edits": 0,
            "success_rate": 0.0,
            "abort_rate": 0.0,
            "avg_edits_per_request": 0.0,
            "failure_kinds": {},
        }

    total = len(entries)
    total_edits = sum(e.get("edits", 0) for e in entries)
    successes = sum(
        1 for e in entries
        if e.get("failed", 0) == 0
        and not e.get("aborted", False)
        and not e.get("rejected", False)
    )
    aborts = sum(1 for e in entries if e.get("aborted", False))

    kinds: Counter = Counter()
    for e in entries:
        kinds.update(e.get("failure_kinds", []))
    failed_edits = sum(kinds.values())

    return {
        "total_requests": total,
        "total_edits": total_edits,
        "success_rate": successes / total * 100,
        "abort_rate": aborts / total * 100,
        "avg_edits_per_request": total_edits / total,
        "failure_kinds": {
            kind: count / failed_edits * 100
            for kind, count in kinds.most_common()
        },
    }
