"""
Diff display — preview an edit's effect as a colored unified diff and
optionally ask for approval before it is written.

The interactive viewer is a small Textual app; when it cannot start (no
terminal, headless CI) a console prompt takes over.
"""

from __future__ import annotations

import difflib
import logging

logger = logging.getLogger(__name__)


def compute_diff(filepath: str, old_content: str, new_content: str) -> str | None:
    """Return a unified diff string, or None if the content is unchanged."""
    if old_content == new_content:
        return None

    old_lines = old_content.splitlines(keepends=True)
    new_lines = new_content.splitlines(keepends=True)

    diff = difflib.unified_diff(
        old_lines, new_lines,
        fromfile=f"a/{filepath}",
        tofile=f"b/{filepath}",
        lineterm="",
    )
    diff_text = "\n".join(line.rstrip("\n") for line in diff)
    return diff_text if diff_text.strip() else None


def format_colored_diff(diff_text: str) -> str:
    """Add ANSI colors to a unified diff string.

    Green for additions (+), red for deletions (-), cyan for @@ hunks.
    """
    colored: list[str] = []
    for line in diff_text.splitlines():
        if line.startswith("+++") or line.startswith("---"):
            colored.append(f"\033[1m{line}\033[0m")  # bold
        elif line.startswith("@@"):
            colored.append(f"\033[36m{line}\033[0m")  # cyan
        elif line.startswith("+"):
            colored.append(f"\033[32m{line}\033[0m")  # green
        elif line.startswith("-"):
            colored.append(f"\033[31m{line}\033[0m")  # red
        else:
            colored.append(line)
    return "\n".join(colored)


def _format_rich_diff(diff_text: str) -> str:
    """Convert unified diff text to Rich markup for Textual display."""
    markup_lines: list[str] = []
    for line in diff_text.splitlines():
        escaped = line.replace("[", "\\[")
        if line.startswith("+++") or line.startswith("---"):
            markup_lines.append(f"[bold white]{escaped}[/bold white]")
        elif line.startswith("@@"):
            markup_lines.append(f"[cyan]{escaped}[/cyan]")
        elif line.startswith("+"):
            markup_lines.append(f"[green]{escaped}[/green]")
        elif line.startswith("-"):
            markup_lines.append(f"[red]{escaped}[/red]")
        else:
            markup_lines.append(escaped)
    return "\n".join(markup_lines)


def prompt_diff_approval(filepath: str, diff_text: str | None,
                         auto: bool = False) -> bool:
    """Show *diff_text* and wait for the user to approve or reject it.

    Returns ``True`` when there is nothing to review, in auto mode, or
    when the user approves.
    """
    if not diff_text:
        return True

    if auto:
        logger.info("[auto] Diff for %s:\n%s", filepath, diff_text)
        return True

    try:
        return _textual_diff_approval(filepath, diff_text)
    except Exception as e:
        logger.warning("Textual diff viewer failed: %s", e)

    return _console_diff_approval(diff_text)


def _textual_diff_approval(filepath: str, diff_text: str) -> bool:
    """Launch a Textual app to display the diff and get approval."""
    from textual.app import App, ComposeResult
    from textual.binding import Binding
    from textual.containers import Horizontal, VerticalScroll
    from textual.widgets import Button, Footer, Static

    class DiffApprovalApp(App):
        """Diff viewer with approve/reject."""

        CSS = """
        #title-bar {
            dock: top;
            height: 3;
            background: #1a1a2e;
            color: #e94560;
            text-align: center;
            padding: 1;
            text-style: bold;
        }
        #diff-scroll {
            height: 1fr;
            margin: 1 2;
            border: round #444;
            padding: 1;
        }
        #action-buttons {
            dock: bottom;
            height: 3;
            align: center middle;
        }
        #action-buttons Button {
            margin: 0 2;
            min-width: 20;
        }
        """

        BINDINGS = [
            Binding("a", "approve", "Approve"),
            Binding("escape", "reject", "Reject"),
            Binding("r", "reject", "Reject"),
        ]

        def __init__(self) -> None:
            super().__init__()
            self.approved = False

        def compose(self) -> ComposeResult:
            yield Static(f" Review edits to {filepath} ", id="title-bar")
            with VerticalScroll(id="diff-scroll"):
                yield Static(_format_rich_diff(diff_text))
            with Horizontal(id="action-buttons"):
                yield Button("Approve", id="approve-btn", variant="success")
                yield Button("Reject", id="reject-btn", variant="error")
            yield Footer()

        def on_button_pressed(self, event: Button.Pressed) -> None:
            self.approved = event.button.id == "approve-btn"
            self.exit()

        def action_approve(self) -> None:
            self.approved = True
            self.exit()

        def action_reject(self) -> None:
            self.approved = False
            self.exit()

    app = DiffApprovalApp()
    app.run()
    return app.approved


def _console_diff_approval(diff_text: str) -> bool:
    """Console approval used when the Textual viewer cannot run."""
    print(f"\n{'─' * 60}")
    print(format_colored_diff(diff_text))
    print(f"{'─' * 60}")
    print("  [A]pprove  |  [R]eject")

    while True:
        try:
            choice = input("  Your choice: ").strip().lower()
        except (EOFError, KeyboardInterrupt):
            return False
        if choice in ("a", "approve"):
            return True
        elif choice in ("r", "reject"):
            return False
        else:
            print("  Invalid choice. Use A or R.")
