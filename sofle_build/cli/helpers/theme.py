"""Unified theme system for consistent Rich styling across CLI output."""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme


class Colors:
    """Standardized color palette for CLI output."""

    SUCCESS = "bold green"
    ERROR = "bold red"
    WARNING = "bold yellow"
    INFO = "bold blue"

    PRIMARY = "cyan"
    SECONDARY = "blue"
    MUTED = "dim"

    HEADER = "bold cyan"
    NORMAL = "white"


class Icons:
    """Standardized icons for different message types."""

    SUCCESS = "✅"
    ERROR = "❌"
    WARNING = "⚠️"
    INFO = "ℹ️"

    STATUS = "==>"
    BULLET = "•"

    DOCKER = "🐳"
    FIRMWARE = "🔧"
    FLASH = "⚡"

    _NERDFONT_ICONS = {
        "SUCCESS": "",  # nf-fa-check_circle
        "ERROR": "",  # nf-fa-times_circle
        "WARNING": "",  # nf-fa-warning
        "INFO": "",  # nf-fa-info_circle
        "STATUS": "",  # nf-fa-arrow_right
        "BULLET": "",  # nf-fa-circle
        "DOCKER": "",  # nf-linux-docker
        "FIRMWARE": "",  # nf-fa-microchip
        "FLASH": "",  # nf-fa-bolt
    }

    _TEXT_FALLBACKS = {
        "SUCCESS": "==>",
        "ERROR": "Error:",
        "WARNING": "Warning:",
        "INFO": "==>",
        "STATUS": "==>",
        "BULLET": "-",
        "DOCKER": "",
        "FIRMWARE": "",
        "FLASH": "",
    }

    @classmethod
    def get_icon(cls, icon_name: str, icon_mode: str = "emoji") -> str:
        """Get icon based on the icon mode.

        Args:
            icon_name: Name of the icon (e.g., "SUCCESS", "ERROR")
            icon_mode: Icon mode - "emoji", "nerdfont", or "text"
        """
        if icon_mode == "nerdfont":
            return cls._NERDFONT_ICONS.get(icon_name, "")
        elif icon_mode == "emoji":
            return str(getattr(cls, icon_name, ""))
        else:
            return cls._TEXT_FALLBACKS.get(icon_name, f"[{icon_name}]")

    @classmethod
    def format_with_icon(
        cls, icon_name: str, text: str, icon_mode: str = "emoji"
    ) -> str:
        icon = cls.get_icon(icon_name, icon_mode)
        if icon:
            return f"{icon} {text}"
        return text


SOFLE_THEME = Theme(
    {
        "success": Colors.SUCCESS,
        "error": Colors.ERROR,
        "warning": Colors.WARNING,
        "info": Colors.INFO,
        "status": Colors.SUCCESS,
        "primary": Colors.PRIMARY,
        "muted": Colors.MUTED,
    }
)


class ThemedConsole:
    """Console wrapper with the sofle-build theme applied."""

    def __init__(
        self, icon_mode: str = "emoji", console: Console | None = None
    ) -> None:
        self.console = console or Console(theme=SOFLE_THEME, highlight=False)
        self.icon_mode = icon_mode

    def _print(self, icon_name: str, message: str, style: str) -> None:
        self.console.print(
            Icons.format_with_icon(icon_name, message, self.icon_mode), style=style
        )

    def print_status(self, message: str) -> None:
        """Print a progress step, like ``==> Pulling image...``."""
        self._print("STATUS", message, "status")

    def print_success(self, message: str) -> None:
        self._print("SUCCESS", message, "success")

    def print_error(self, message: str) -> None:
        self._print("ERROR", message, "error")

    def print_warning(self, message: str) -> None:
        self._print("WARNING", message, "warning")

    def print_list_item(self, message: str, indent: int = 1) -> None:
        spacing = "  " * indent
        bullet = Icons.get_icon("BULLET", self.icon_mode)
        self.console.print(f"{spacing}{bullet} {message}", style="primary")


class TableStyles:
    """Predefined table styling templates."""

    @staticmethod
    def create_basic_table(
        title: str = "", icon: str = "", icon_mode: str = "emoji"
    ) -> Table:
        full_title = Icons.format_with_icon(icon, title, icon_mode) if icon else title
        return Table(
            title=full_title,
            show_header=True,
            header_style=Colors.HEADER,
            border_style=Colors.SECONDARY,
        )

    @staticmethod
    def create_artifact_table(icon_mode: str = "emoji") -> Table:
        """Create table for produced firmware files."""
        table = TableStyles.create_basic_table("Firmware files", "FIRMWARE", icon_mode)
        table.add_column("File", style=Colors.PRIMARY, no_wrap=True)
        table.add_column("Size", style=Colors.NORMAL, justify="right")
        table.add_column("Modified", style=Colors.MUTED)
        return table


class PanelStyles:
    """Predefined panel styling templates."""

    @staticmethod
    def create_info_panel(
        content: str, title: str = "", icon: str = "", icon_mode: str = "emoji"
    ) -> Panel:
        full_title = Icons.format_with_icon(icon, title, icon_mode) if icon else title
        return Panel(
            content,
            title=full_title or None,
            title_align="left",
            border_style=Colors.SECONDARY,
            expand=False,
        )


def get_themed_console(icon_mode: str = "emoji") -> ThemedConsole:
    """Get a themed console instance for the given icon mode."""
    return ThemedConsole(icon_mode=icon_mode)
