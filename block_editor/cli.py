"""
`blockedit` command-line interface.

Commands
--------
blockedit apply REQUEST            -- apply the edits described in a YAML/JSON file
blockedit apply - < request.json   -- read the request from stdin
blockedit apply REQUEST --dry-run  -- show the resulting diff, write nothing
blockedit apply REQUEST --review   -- approve the diff before it is written
blockedit read PATH [--range 3-10] -- print a file with line numbers
blockedit stats [--last-n 50]      -- rolling statistics from the metrics log

A request file holds ``path``, ``search_content``, ``replace_content`` and
``start_line`` (each block/line a scalar or a list), plus optional
``atomic`` and ``trim`` flags.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

import yaml

from .api import apply_diffs
from .cli_display import format_status_table, setup_logger
from .config import Config
from .diff_display import format_colored_diff, prompt_diff_approval
from .editing.metrics import read_edit_stats
from .errors import AtomicAbortError, BlockEditError, ValidationError
from .workspace import Workspace

logger = logging.getLogger(__name__)

_REQUIRED_KEYS = ("path", "search_content", "replace_content", "start_line")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def load_request(source: str) -> dict:
    """Load an edit request from a YAML/JSON file, or stdin for ``-``."""
    try:
        if source == "-":
            data = yaml.safe_load(sys.stdin)
        else:
            with open(source, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
    except OSError as exc:
        raise ValidationError(f"Cannot read request {source}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ValidationError(f"Malformed request {source}: {exc}") from exc

    if not isinstance(data, dict):
        raise ValidationError(f"Request {source} must be a mapping")
    missing = [k for k in _REQUIRED_KEYS if k not in data]
    if missing:
        raise ValidationError(
            f"Request {source} is missing: {', '.join(missing)}"
        )
    return data


def _pick(cli_value, request_value, default):
    """CLI flag > request file > config default."""
    if cli_value is not None:
        return cli_value
    if request_value is None:
        return default
    if isinstance(request_value, str):
        # Quoted flags in a request file read like env vars
        return request_value.strip().lower() == "true"
    return bool(request_value)


def _workspace(args: argparse.Namespace, cfg: Config) -> Workspace:
    return Workspace(args.workspace or cfg.WORKSPACE)


# ---------------------------------------------------------------------------
# Sub-command handlers
# ---------------------------------------------------------------------------

def _cmd_apply(args: argparse.Namespace, cfg: Config) -> None:
    """Apply a request and print the report."""
    try:
        request = load_request(args.request)
        workspace = _workspace(args, cfg)
        atomic = _pick(args.atomic, request.get("atomic"), cfg.ATOMIC)
        trim = _pick(args.trim, request.get("trim"), cfg.TRIM)
        review = args.review or cfg.REVIEW

        approve = prompt_diff_approval if review and not args.dry_run else None

        report = apply_diffs(
            request["path"],
            request["search_content"],
            request["replace_content"],
            request["start_line"],
            atomic=atomic,
            trim=trim,
            workspace=workspace,
            dry_run=args.dry_run,
            syntax_check=cfg.SYNTAX_CHECK,
            record_metrics=cfg.METRICS_ENABLED,
            metrics_dir=cfg.METRICS_DIR,
            approve=approve,
        )
    except AtomicAbortError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        print(format_status_table(exc.results, color=sys.stderr.isatty()),
              file=sys.stderr)
        sys.exit(1)
    except BlockEditError as exc:
        logger.warning("[DiffEdit] Request failed: %s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    print(report.message)
    if args.dry_run and report.diff:
        print()
        print(format_colored_diff(report.diff) if sys.stdout.isatty() else report.diff)


def _cmd_read(args: argparse.Namespace, cfg: Config) -> None:
    """Print a file, or a line range of it, with line numbers."""
    try:
        workspace = _workspace(args, cfg)
        print(workspace.read_lines(args.path, args.line_range))
    except BlockEditError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


def _cmd_stats(args: argparse.Namespace, cfg: Config) -> None:
    """Show rolling apply statistics."""
    project_root = args.workspace or cfg.WORKSPACE
    last_n = args.last_n
    stats = read_edit_stats(last_n=last_n, project_root=project_root,
                            metrics_dir=cfg.METRICS_DIR)

    if stats["total_requests"] == 0:
        print("No edit metrics found yet.")
        print("Metrics are recorded each time `blockedit apply` runs.")
        return

    print(f"\nEdit stats (last {last_n} requests)")
    print("-" * 40)
    print(f"  Requests:            {stats['total_requests']}")
    print(f"  Edits:               {stats['total_edits']}")
    print(f"  Avg edits/request:   {stats['avg_edits_per_request']:.1f}")
    print(f"  Clean success rate:  {stats['success_rate']:.0f}%")
    print(f"  Atomic abort rate:   {stats['abort_rate']:.0f}%")

    kinds = stats.get("failure_kinds", {})
    if kinds:
        print("  Failure kinds:")
        for kind, pct in kinds.items():
            print(f"    {kind:<22}{pct:.0f}%")
    print()


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    """Build and return the `blockedit` argument parser."""
    parser = argparse.ArgumentParser(
        prog="blockedit",
        description="Apply line-anchored block edits to files inside a workspace",
    )
    parser.add_argument("--config", default=None,
                        help="Path to .blockedit.yaml config file")
    parser.add_argument("--workspace", default=None,
                        help="Workspace root (default: from config, else CWD)")
    subparsers = parser.add_subparsers(dest="cmd", metavar="COMMAND")
    subparsers.required = True

    # --- apply ---
    apply_p = subparsers.add_parser("apply", help="Apply edits from a request file")
    apply_p.add_argument("request", help="YAML/JSON request file, or - for stdin")
    apply_p.add_argument("--atomic", dest="atomic", action="store_const",
                         const=True, default=None,
                         help="Commit only if every edit applies (default)")
    apply_p.add_argument("--no-atomic", dest="atomic", action="store_const",
                         const=False,
                         help="Commit each edit that applies, report the rest")
    apply_p.add_argument("--trim", dest="trim", action="store_const",
                         const=True, default=None,
                         help="Ignore leading/trailing whitespace when matching")
    apply_p.add_argument("--dry-run", action="store_true",
                         help="Show the result and diff without writing")
    apply_p.add_argument("--review", action="store_true",
                         help="Approve the diff interactively before writing")
    apply_p.set_defaults(func=_cmd_apply)

    # --- read ---
    read_p = subparsers.add_parser("read", help="Print a file with line numbers")
    read_p.add_argument("path")
    read_p.add_argument("--range", dest="line_range", default=None,
                        help="Line range as START-END")
    read_p.set_defaults(func=_cmd_read)

    # --- stats ---
    stats_p = subparsers.add_parser("stats", help="Show rolling edit statistics")
    stats_p.add_argument(
        "--last-n", dest="last_n", type=int, default=50,
        help="Number of recent requests to include (default: 50)",
    )
    stats_p.set_defaults(func=_cmd_stats)

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point for the `blockedit` console script."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    cfg = Config.load(args.config)
    setup_logger(cfg.LOG_DIR)

    args.func(args, cfg)


if __name__ == "__main__":
    main()
