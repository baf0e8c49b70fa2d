"""Interface for reporting progress and results to the user.

The services never print directly; they report through this sink so the CLI
can render with rich while tests capture messages in memory.
"""

import abc
from typing import Any, List

from ..models.analysis import AnalysisRecord, UpdateReport
from ..models.common import FilePath


class UserInterface(abc.ABC):
    """Abstract Base Class for user-facing output."""

    @abc.abstractmethod
    def display_output(self, output: str, **kwargs: Any) -> None:
        """Displays standard output to the user.

        Args:
            output: The text to display.
            **kwargs: Additional arguments for formatting (e.g. title).
        """
        pass

    @abc.abstractmethod
    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message to the user."""
        pass

    @abc.abstractmethod
    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        """Displays a warning message to the user."""
        pass

    @abc.abstractmethod
    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Displays an informational message to the user."""
        pass

    def display_files(self, files: List[FilePath], **kwargs: Any) -> None:
        """Displays a list of collected files."""
        for file_path in files:
            self.display_output(f"- {file_path}")

    def display_records(self, records: List[AnalysisRecord], **kwargs: Any) -> None:
        """Displays the analysis records of a correction run."""
        for record in records:
            self.display_output(f"{record.file_path} [{record.status.value}]")

    def display_update_report(self, report: UpdateReport, **kwargs: Any) -> None:
        """Displays the outcome of updating the original files."""
        for path in report.updated:
            self.display_info(f"Updated {path}")
        for failure in report.failures:
            self.display_error(f"Could not update from {failure.record.file_path}: {failure.error}")
