"""
Help Screen

Key reference for the dashboard and chart view, plus the gateway the
dashboard is connected to.
"""

from __future__ import annotations

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Static

from fastertrack.config import DashboardConfig

# (section, [(keys, description), ...])
KEY_SECTIONS: list[tuple[str, list[tuple[str, str]]]] = [
    (
        "Global",
        [
            ("Ctrl+Q", "Quit"),
            ("F1", "Toggle this help"),
            ("Esc", "Close chart / help"),
        ],
    ),
    (
        "Dashboard",
        [
            ("Tab", "Next pane"),
            ("e / m / t", "Focus experiments / metrics / runs"),
            ("/", "Edit run query, Enter applies it"),
            ("Space", "Toggle the item under the cursor"),
            ("a", "All runs on or off"),
            ("Enter", "Open the focused chart"),
        ],
    ),
    (
        "Chart",
        [
            ("h / ←", "Pan left"),
            ("l / →", "Pan right"),
            ("+ / =", "Zoom in"),
            ("-", "Zoom out"),
            ("r", "Reset view"),
        ],
    ),
]

QUERY_HINT = (
    "Run queries are boolean expressions over run fields, e.g.\n"
    '[green]run.name.startswith("lr") and run.active[/]\n'
    "They narrow the runs of the selected experiments."
)

KEY_WIDTH = 12


def format_key_sections(sections: list[tuple[str, list[tuple[str, str]]]] = KEY_SECTIONS) -> str:
    """Render key sections as aligned markup lines."""
    blocks = []
    for title, keys in sections:
        lines = [f"[bold underline]{title}[/]"]
        lines.extend(f"  [cyan]{key.ljust(KEY_WIDTH)}[/]{description}" for key, description in keys)
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def describe_connection(config: DashboardConfig) -> str:
    """One-line summary of the gateway settings."""
    namespace = config.namespace or "default"
    paging = f"pages of {config.search_limit} runs" if config.search_limit else "no paging"
    return f"{config.base_url} · namespace {namespace} · {paging}"


class HelpScreen(ModalScreen[None]):
    """Modal key reference."""

    BINDINGS = [
        Binding("escape", "dismiss", "Close", show=True),
        Binding("f1", "dismiss", "Close", show=False),
    ]

    DEFAULT_CSS = """
    HelpScreen {
        align: center middle;
        background: $background 60%;
    }

    #help-panel {
        width: 72;
        height: auto;
        max-height: 85%;
        background: $surface;
        border: round $accent;
        border-title-align: center;
        border-subtitle-align: right;
    }

    #help-connection {
        padding: 0 2;
        background: $boost;
        color: $text-muted;
    }

    #help-body {
        height: auto;
        padding: 1 2;
    }

    #help-query {
        margin-top: 1;
        padding: 0 1;
        border-left: thick $accent;
    }
    """

    def __init__(self, config: DashboardConfig | None = None) -> None:
        super().__init__()
        self._config = config

    def compose(self) -> ComposeResult:
        with Vertical(id="help-panel"):
            if self._config is not None:
                yield Static(describe_connection(self._config), id="help-connection")
            with VerticalScroll(id="help-body"):
                yield Static(format_key_sections(), id="help-keys")
                yield Static(QUERY_HINT, id="help-query")

    def on_mount(self) -> None:
        panel = self.query_one("#help-panel", Vertical)
        panel.border_title = "FasterTrack keys"
        panel.border_subtitle = "Esc / F1 to close"

    async def action_dismiss(self, result: None = None) -> None:
        """Dismiss the help screen."""
        self.dismiss(result)
