"""Command Handler: Orchestrates CLI command execution.

Receives commands from the main entry point (main.py) and delegates the work
to the collector, correction and updater services, reporting results through
the injected UserInterface.
"""

import logging
from typing import List, Optional, Sequence

from codefixer.core.services.collector_service import CollectorService
from codefixer.core.services.correction_service import CorrectionService
from codefixer.core.services.updater_service import UpdaterService
from codefixer.domain.errors import InferenceError
from codefixer.domain.interfaces.ai_model import InferenceModel
from codefixer.domain.interfaces.user_interface import UserInterface
from codefixer.domain.models.analysis import FixSummary
from codefixer.domain.models.common import FilePath, ModelName

logger = logging.getLogger(__name__)


class CommandHandler:
    """Handles incoming commands and delegates to the appropriate services."""

    def __init__(
        self,
        collector_service: CollectorService,
        correction_service: CorrectionService,
        updater_service: UpdaterService,
        ai_model: InferenceModel,
        ui: UserInterface,
    ):
        """Initializes the CommandHandler with the services it drives."""
        self.collector_service = collector_service
        self.correction_service = correction_service
        self.updater_service = updater_service
        self.ai_model = ai_model
        self.ui = ui

    async def handle_scan(
        self,
        root: str,
        extensions: Sequence[str],
        excluded_folders: Optional[Sequence[str]] = None,
    ) -> List[FilePath]:
        """Handles the 'scan' command: collect and list files, nothing else."""
        logger.info(f"Handling 'scan' command for {root} with extensions {list(extensions)}")
        files = await self.collector_service.collect(FilePath(root), extensions, excluded_folders)
        if not files:
            self.ui.display_info("No files found.")
        else:
            self.ui.display_files(files)
        return files

    async def handle_fix(
        self,
        root: str,
        output_directory: str,
        extensions: Sequence[str],
        excluded_folders: Optional[Sequence[str]] = None,
        apply: bool = False,
    ) -> FixSummary:
        """Handles the 'fix' command: collect, request corrections, optionally apply them.

        Raises:
            InvalidArgumentError: If `extensions` is empty.
        """
        logger.info(
            f"Handling 'fix' command for {root} -> {output_directory} "
            f"(model: {self.ai_model.model}, apply: {apply})"
        )
        summary = FixSummary()
        summary.files = await self.collector_service.collect(
            FilePath(root), extensions, excluded_folders
        )
        if not summary.files:
            self.ui.display_info("No files found.")
            return summary

        self.ui.display_info(f"Found {len(summary.files)} file(s) to analyze.")
        summary.correction = await self.correction_service.request_corrections(
            summary.files, FilePath(output_directory)
        )
        if summary.records:
            self.ui.display_records(summary.records)

        if apply:
            summary.update = await self.updater_service.update_originals(
                summary.files, summary.records
            )
            self.ui.display_update_report(summary.update)
        elif summary.correction.corrected_records:
            self.ui.display_info(
                f"{len(summary.correction.corrected_records)} correction(s) written to "
                f"{output_directory}. Re-run with --apply to overwrite the originals."
            )

        if summary.correction.failures:
            self.ui.display_warning(
                f"{len(summary.correction.failures)} file(s) could not be analyzed."
            )
        return summary

    async def handle_list_models(self) -> List[ModelName]:
        """Handles listing the models the inference endpoint serves."""
        logger.info("Handling 'list-models' command")
        try:
            models = await self.ai_model.list_available_models()
        except InferenceError as e:
            logger.error(f"Failed to list models: {e}")
            self.ui.display_error(f"Failed to list models: {e}")
            return []
        if not models:
            self.ui.display_info("No models available.")
        else:
            self.ui.display_output("\n".join(f"- {name}" for name in models), title="Models")
        return models
