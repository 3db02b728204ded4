"""
FasterTrack TUI Application

Main application class for the terminal-based dashboard.
"""

from __future__ import annotations

from textual.app import App
from textual.binding import Binding
from textual.theme import Theme

from fastertrack.cascade import CascadeController
from fastertrack.config import DashboardConfig, get_config
from fastertrack.gateway import GatewayClient, RunGateway

# Per-run line colors, a diverging "spectral" palette
RUN_COLORS: tuple[tuple[int, int, int], ...] = (
    (158, 1, 66),
    (213, 62, 79),
    (244, 109, 67),
    (253, 174, 97),
    (230, 245, 152),
    (171, 221, 164),
    (102, 194, 165),
    (50, 136, 189),
    (94, 79, 162),
)

FASTERTRACK_THEME = Theme(
    name="fastertrack",
    primary="#3A6EA5",
    secondary="#6C7A89",
    accent="#E07A5F",
    foreground="#1F2933",
    background="#F4F6F8",
    surface="#FFFFFF",
    panel="#E4E7EB",
    success="#3D9970",
    error="#C0392B",
    warning="#E6A23C",
)


def run_color(index: int) -> tuple[int, int, int]:
    """Get the line color of the index-th selected run."""
    return RUN_COLORS[index % len(RUN_COLORS)]


class FasterTrackApp(App[None]):
    """FasterTrack Terminal UI Application.

    A terminal-based dashboard for picking experiments, filtering runs and
    plotting metric histories.
    """

    TITLE = "FasterTrack"
    CSS_PATH = "styles/app.tcss"

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit", show=True, priority=True),
        Binding("f1", "help", "Help", show=True),
        Binding("escape", "back", "Back", show=False),
    ]

    def __init__(self, config: DashboardConfig | None = None, gateway: RunGateway | None = None) -> None:
        """Initialize the TUI application.

        Args:
            config: Dashboard configuration. Defaults to the environment configuration.
            gateway: Data source. Defaults to an HTTP client for config.base_url.
        """
        super().__init__()
        self._config = config or get_config()
        self._gateway = gateway
        self._controller: CascadeController | None = None

        # Register and apply FasterTrack theme
        self.register_theme(FASTERTRACK_THEME)
        self.theme = "fastertrack"

    @property
    def config(self) -> DashboardConfig:
        """Get the dashboard configuration."""
        return self._config

    @property
    def gateway(self) -> RunGateway:
        """Get or create the gateway instance."""
        if self._gateway is None:
            self._gateway = GatewayClient(self._config)
        return self._gateway

    @property
    def controller(self) -> CascadeController:
        """Get or create the cascade controller instance."""
        if self._controller is None:
            self._controller = CascadeController(
                self.gateway,
                default_experiment_id=self._config.default_experiment_id,
            )
        return self._controller

    def on_mount(self) -> None:
        """Handle mount event - push the dashboard screen."""
        from fastertrack.tui.screens import DashboardScreen

        self.push_screen(DashboardScreen())

    async def on_unmount(self) -> None:
        """Handle unmount event - release gateway connections."""
        if self._gateway is not None:
            await self._gateway.aclose()

    def action_help(self) -> None:
        """Show help screen."""
        from fastertrack.tui.screens import HelpScreen

        self.push_screen(HelpScreen(self._config))

    async def action_back(self) -> None:
        """Go back to previous screen."""
        if len(self.screen_stack) > 2:
            self.pop_screen()
