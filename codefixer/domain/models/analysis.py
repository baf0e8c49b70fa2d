"""Domain models produced by the correction and update steps.

`AnalysisRecord` is the per-file result of the correction step. The report
objects collect records together with the per-file failures so callers get a
structured view of the run instead of having to scrape log output.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .common import FilePath


class CorrectionStatus(str, Enum):
    """Whether the model reply contained a correction that was written to disk."""

    CORRECTED = "corrected"
    NO_CORRECTION = "no_correction"


@dataclass(frozen=True)
class AnalysisRecord:
    """Represents the model's verdict on a single source file.

    Attributes:
        file_path: Destination path of the corrected file (output dir + base name).
            Only exists on disk when `status` is CORRECTED.
        analyzed_result: The raw model output, trimmed.
        source_path: The original file that was analyzed.
        status: Whether a fenced correction was found and written.
    """

    file_path: FilePath
    analyzed_result: str
    source_path: Optional[FilePath] = None
    status: CorrectionStatus = CorrectionStatus.NO_CORRECTION

    @property
    def file_name(self) -> str:
        return os.path.basename(self.file_path)

    @property
    def corrected(self) -> bool:
        return self.status is CorrectionStatus.CORRECTED


@dataclass
class ModelResponse:
    """Decoded reply of the inference endpoint.

    Only `response` matters to the pipeline; `model` and `done` are kept for
    logging. Any other field in the body is ignored.
    """

    response: Optional[str] = None
    model: Optional[str] = None
    done: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ModelResponse":
        return cls(
            response=data.get("response"),
            model=data.get("model"),
            done=data.get("done"),
        )


@dataclass(frozen=True)
class FileFailure:
    """A file whose correction attempt raised an error."""

    file_path: FilePath
    error: str


@dataclass
class CorrectionReport:
    """Result of a correction run over a list of files."""

    records: List[AnalysisRecord] = field(default_factory=list)
    failures: List[FileFailure] = field(default_factory=list)
    skipped: List[FilePath] = field(default_factory=list)

    @property
    def corrected_records(self) -> List[AnalysisRecord]:
        return [record for record in self.records if record.corrected]


@dataclass(frozen=True)
class UpdateFailure:
    """A record whose correction could not be copied over its original."""

    record: AnalysisRecord
    error: str


@dataclass
class UpdateReport:
    """Result of copying corrected files back over the originals."""

    updated: List[FilePath] = field(default_factory=list)
    unmatched: List[AnalysisRecord] = field(default_factory=list)
    failures: List[UpdateFailure] = field(default_factory=list)


@dataclass
class FixSummary:
    """Everything a full run (collect, correct, optionally update) produced."""

    files: List[FilePath] = field(default_factory=list)
    correction: CorrectionReport = field(default_factory=CorrectionReport)
    update: Optional[UpdateReport] = None

    @property
    def records(self) -> List[AnalysisRecord]:
        return self.correction.records

    @property
    def has_failures(self) -> bool:
        update_failed = bool(self.update and self.update.failures)
        return bool(self.correction.failures) or update_failed
