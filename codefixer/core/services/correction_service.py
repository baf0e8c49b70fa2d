"""Core service for requesting corrections from the inference endpoint.

For each file: read it, truncate it to the character budget, ask the model
for a corrected version, and write the first fenced block of the reply to
the output directory. Files are processed one at a time; a failure on one
file is logged and recorded, and the batch moves on.
"""

import logging
import os
import textwrap
from typing import Sequence

from codefixer.domain.errors import InvalidArgumentError
from codefixer.domain.interfaces.ai_model import InferenceModel
from codefixer.domain.interfaces.filesystem import FileSystem
from codefixer.domain.interfaces.user_interface import UserInterface
from codefixer.domain.models.analysis import (
    AnalysisRecord,
    CorrectionReport,
    CorrectionStatus,
    FileFailure,
)
from codefixer.domain.models.common import FileContent, FilePath, PromptText
from codefixer.utils.code_blocks import LanguageProfile, extract_code_block, language_for_file

logger = logging.getLogger(__name__)

DEFAULT_MAX_CHARS = 10000

PROMPT_TEMPLATE = textwrap.dedent(
    """\
    You are a {language} static analyzer. Your task is to analyze the provided {language} code from the file '{file_name}' and perform the following:

    - For errors, provide a corrected version of the entire code.
    Or,
    - For success, do not provide any code.

    Here is the original code to analyze:

    ```{fence_tag}
    {code}
    ```
    """
)


def truncate_content(content: str, max_chars: int) -> FileContent:
    """Cuts `content` to at most `max_chars` characters, without a marker."""
    if len(content) > max_chars:
        return FileContent(content[:max_chars])
    return FileContent(content)


def build_prompt(file_name: str, code: str, profile: LanguageProfile) -> PromptText:
    """Builds the review instruction for a single file."""
    # Substituted after dedent so the code keeps its own indentation.
    return PromptText(
        PROMPT_TEMPLATE.format(
            language=profile.name,
            file_name=file_name,
            fence_tag=profile.primary_tag,
            code=code,
        )
    )


class CorrectionService:
    """Orchestrates the per-file correction requests."""

    def __init__(
        self,
        ai_model: InferenceModel,
        file_system: FileSystem,
        ui: UserInterface,
        max_chars: int = DEFAULT_MAX_CHARS,
    ):
        """Initializes the CorrectionService with its dependencies.

        Args:
            ai_model: Client for the inference endpoint.
            file_system: Used to read sources and write corrections.
            ui: Sink for progress messages.
            max_chars: Character budget per file.
        """
        if max_chars <= 0:
            raise InvalidArgumentError(f"max_chars must be positive, got {max_chars}")
        self.ai_model = ai_model
        self.file_system = file_system
        self.ui = ui
        self.max_chars = max_chars
        logger.debug(
            f"CorrectionService initialized with model '{ai_model.model}', budget {max_chars} chars"
        )

    async def request_corrections(
        self, files: Sequence[FilePath], output_directory: FilePath
    ) -> CorrectionReport:
        """Requests a correction for each file, in order.

        Returns:
            A CorrectionReport. `records` holds one entry per file that got a
            non-null model reply, whether or not it contained a correction.
        """
        report = CorrectionReport()
        for file_path in files:
            file_name = os.path.basename(file_path)
            try:
                await self._process_file(file_path, output_directory, report)
            except Exception as e:
                logger.error(f"Error analyzing {file_name}: {e}")
                self.ui.display_error(f"Error analyzing {file_name}: {e}")
                report.failures.append(FileFailure(file_path=file_path, error=str(e)))

        logger.info(
            f"Correction run finished: {len(report.records)} analyzed, "
            f"{len(report.corrected_records)} corrected, {len(report.failures)} failed, "
            f"{len(report.skipped)} skipped"
        )
        return report

    async def _process_file(
        self, file_path: FilePath, output_directory: FilePath, report: CorrectionReport
    ) -> None:
        file_name = os.path.basename(file_path)

        code = await self.file_system.read_file(file_path)
        if not code.strip():
            logger.info(f"Skipping empty file: {file_name}")
            self.ui.display_info(f"Skipping empty file: {file_name}")
            report.skipped.append(file_path)
            return

        code = truncate_content(code, self.max_chars)
        profile = language_for_file(file_path)
        prompt = build_prompt(file_name, code, profile)

        self.ui.display_info(f"Analyzing {file_name}")
        result = await self.ai_model.generate(prompt)

        if result.response is None:
            logger.warning(f"No analysis returned from the API for {file_name}")
            self.ui.display_warning(f"No analysis returned for {file_name}")
            report.skipped.append(file_path)
            return

        analyzed_result = result.response.strip()
        output_file_path = FilePath(os.path.join(output_directory, file_name))
        corrected_code = extract_code_block(analyzed_result, profile)

        if corrected_code is not None:
            # Written before the record exists: a CORRECTED record always has its file.
            await self.file_system.write_file(output_file_path, corrected_code)
            status = CorrectionStatus.CORRECTED
            logger.info(f"Corrected code for {file_name} written to {output_file_path}")
            logger.debug(f"Corrected code:\n{corrected_code}")
        else:
            status = CorrectionStatus.NO_CORRECTION
            logger.info(f"No corrected code found for {file_name}")

        report.records.append(
            AnalysisRecord(
                file_path=output_file_path,
                analyzed_result=analyzed_result,
                source_path=file_path,
                status=status,
            )
        )
