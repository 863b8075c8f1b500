import logging
import os
from datetime import datetime

from .editing.batch import EditResult, EditStatus


def setup_logger(log_dir: str = ".blockedit/logs") -> logging.Logger:
    """Creates a file logger. All verbose output goes here."""
    os.makedirs(log_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = os.path.join(log_dir, f"blockedit_{timestamp}.log")

    logger = logging.getLogger("block_editor")
    logger.setLevel(logging.DEBUG)

    # File handler — captures everything
    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(message)s", datefmt="%H:%M:%S"
    ))
    logger.addHandler(fh)

    return logger


_STATUS_COLORS = {
    EditStatus.SUCCESS: "\033[32m",  # green
    EditStatus.FAIL: "\033[31m",     # red
    EditStatus.ABORTED: "\033[33m",  # yellow
}


def format_status_table(results: list[EditResult], color: bool = True) -> str:
    """One line per edit: index, start line and colored status."""
    rows = []
    for r in results:
        status = r.status.value
        if color:
            status = f"{_STATUS_COLORS[r.status]}{status}\033[0m"
        rows.append(f"  #{r.index + 1:<3} line {r.start_line:<6} {status}")
    return "\n".join(rows)
