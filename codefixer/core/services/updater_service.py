"""Core service for copying corrections back over the original files.

This is the destructive step of the pipeline: no backup of the original is
kept. Each replacement goes through a temporary file and a rename, so an
original is either fully replaced or left untouched.
"""

import logging
import os
from typing import Optional, Sequence

from codefixer.domain.interfaces.filesystem import FileSystem
from codefixer.domain.interfaces.user_interface import UserInterface
from codefixer.domain.models.analysis import AnalysisRecord, UpdateFailure, UpdateReport
from codefixer.domain.models.common import FilePath

logger = logging.getLogger(__name__)


def find_original(
    original_files: Sequence[FilePath], record: AnalysisRecord
) -> Optional[FilePath]:
    """Returns the first original whose base name equals the record's output name.

    The comparison is exact and case-sensitive. When several originals share
    the base name, the first in `original_files` (collector order) wins.
    """
    for original in original_files:
        if os.path.basename(original) == record.file_name:
            return original
    return None


class UpdaterService:
    """Applies corrected files to the source tree."""

    def __init__(self, file_system: FileSystem, ui: UserInterface):
        """Initializes the UpdaterService with its dependencies."""
        self.file_system = file_system
        self.ui = ui

    async def update_originals(
        self, original_files: Sequence[FilePath], records: Sequence[AnalysisRecord]
    ) -> UpdateReport:
        """Overwrites each matched original with its corrected content.

        Records without a correction are skipped. A failing record is added to
        the report and the remaining records are still processed.
        """
        report = UpdateReport()
        for record in records:
            if not record.corrected:
                logger.debug(f"No correction to apply for {record.file_name}")
                continue
            try:
                updated = await self._apply(original_files, record)
            except Exception as e:
                logger.error(f"Error while correcting {record.file_name}: {e}")
                self.ui.display_error(f"Could not update {record.file_name}: {e}")
                report.failures.append(UpdateFailure(record=record, error=str(e)))
                continue
            if updated:
                report.updated.append(updated)
            else:
                report.unmatched.append(record)

        logger.info(
            f"Updated {len(report.updated)} original file(s); "
            f"{len(report.unmatched)} unmatched, {len(report.failures)} failed"
        )
        return report

    async def _apply(
        self, original_files: Sequence[FilePath], record: AnalysisRecord
    ) -> Optional[FilePath]:
        original = find_original(original_files, record)
        if original is None or not await self.file_system.file_exists(original):
            logger.warning(f"No original file found for {record.file_name}")
            return None

        content = await self.file_system.read_file(record.file_path)
        await self.file_system.replace_file(original, content)
        logger.info(f"Replaced {original} with {record.file_path}")
        return original
