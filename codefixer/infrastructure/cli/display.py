import logging
from typing import Any, List, Optional

from rich.box import HEAVY, ROUNDED, SIMPLE
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from codefixer.domain.interfaces.user_interface import UserInterface
from codefixer.domain.models.analysis import AnalysisRecord, UpdateReport
from codefixer.domain.models.common import FilePath

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 80


class ConsoleDisplay(UserInterface):
    """Concrete implementation of UserInterface using the rich library for console output."""

    def __init__(self, console: Optional[Console] = None):
        """Initializes the rich Console."""
        self._console = console or Console()

    @property
    def console(self) -> Console:
        """Get the Rich console instance for direct operations."""
        return self._console

    def display_output(self, output: str, **kwargs: Any) -> None:
        """Displays output text, rendered as Markdown inside a panel.

        Args:
            output: The text to display.
            **kwargs: `title` for the panel (default: "Output").
        """
        title = kwargs.get("title", "Output")
        panel = Panel(
            Markdown(str(output)),
            title=f"[bold white]{title}[/bold white]",
            title_align="left",
            border_style="blue",
            box=ROUNDED,
            padding=(0, 1),
        )
        self.console.print(panel)

    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message in a distinct style."""
        panel = Panel(
            Text(error_message, style="white"),
            title="[bold red]Error[/bold red]",
            border_style="red",
            box=HEAVY,
            padding=(0, 1),
        )
        self.console.print(panel)

    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Displays an informational message."""
        self.console.print(Text(info_message, style="blue"))

    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        """Displays a warning message."""
        panel = Panel(
            Text(warning_message, style="white"),
            title="[bold yellow]Warning[/bold yellow]",
            border_style="yellow",
            box=SIMPLE,
            padding=(0, 1),
        )
        self.console.print(panel)

    def display_files(self, files: List[FilePath], **kwargs: Any) -> None:
        """Displays collected files as a numbered table."""
        table = Table(title=kwargs.get("title", "Collected files"), box=ROUNDED, border_style="cyan")
        table.add_column("#", style="cyan", justify="right")
        table.add_column("Path", style="white")
        for i, file_path in enumerate(files, 1):
            table.add_row(str(i), Text(str(file_path)))
        self.console.print(table)

    def display_records(self, records: List[AnalysisRecord], **kwargs: Any) -> None:
        """Displays one row per analysis record with a preview of the model reply."""
        table = Table(title=kwargs.get("title", "Analysis results"), box=ROUNDED, border_style="cyan")
        table.add_column("File", style="bold")
        table.add_column("Status")
        table.add_column("Output path", style="dim")
        table.add_column("Analysis", style="white")
        for record in records:
            status_style = "green" if record.corrected else "yellow"
            preview = " ".join(record.analyzed_result.split())
            if len(preview) > PREVIEW_LENGTH:
                preview = preview[: PREVIEW_LENGTH - 3] + "..."
            # Paths and model text are arbitrary; Text keeps rich from parsing them as markup.
            table.add_row(
                Text(record.file_name),
                Text(record.status.value, style=status_style),
                Text(str(record.file_path) if record.corrected else "-"),
                Text(preview),
            )
        self.console.print(table)

    def display_update_report(self, report: UpdateReport, **kwargs: Any) -> None:
        """Displays which originals were replaced and which could not be."""
        for path in report.updated:
            self.console.print(Text(f"Updated {path}", style="green"))
        for record in report.unmatched:
            self.display_warning(f"No original file matches {record.file_name}")
        for failure in report.failures:
            self.display_error(f"Could not update from {failure.record.file_path}: {failure.error}")
