"""Processing job status vocabulary and API schemas.

The server records fine-grained pipeline stages; clients only ever see the
five ``JobStatus`` values. ``STAGE_TABLE`` is the single place where one is
mapped onto the other, together with the progress baseline of each stage.
"""

from enum import Enum
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field


class JobStatus(str, Enum):
    """Client-visible processing status."""

    PENDING = "pending"
    TRANSCRIBING = "transcribing"
    ANALYZING = "analyzing"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.ERROR)


class PipelineStage(str, Enum):
    """Raw pipeline stage recorded by the orchestrator."""

    PENDING = "pending"
    TRANSCRIBING = "transcribing"
    ANALYZING = "analyzing"
    CATEGORIZING = "categorizing"
    GENERATING_TITLE = "generating-title"
    COMPLETED = "completed"
    ERROR = "error"


class StageInfo(NamedTuple):
    status: JobStatus
    progress: int | None  # None: keep the progress already reached


STAGE_TABLE: dict[PipelineStage, StageInfo] = {
    PipelineStage.PENDING: StageInfo(JobStatus.PENDING, 0),
    PipelineStage.TRANSCRIBING: StageInfo(JobStatus.TRANSCRIBING, 30),
    PipelineStage.ANALYZING: StageInfo(JobStatus.ANALYZING, 70),
    PipelineStage.CATEGORIZING: StageInfo(JobStatus.ANALYZING, 80),
    PipelineStage.GENERATING_TITLE: StageInfo(JobStatus.ANALYZING, 90),
    PipelineStage.COMPLETED: StageInfo(JobStatus.COMPLETED, 100),
    PipelineStage.ERROR: StageInfo(JobStatus.ERROR, None),
}

# Labels older clients and servers used for the same states.
LEGACY_LABELS: dict[str, PipelineStage] = {
    "complete": PipelineStage.COMPLETED,
    "processing": PipelineStage.ANALYZING,
    "failed": PipelineStage.ERROR,
}


def status_for_label(label: str | None) -> JobStatus:
    """Map any raw stage or status label onto the client-visible status.

    Unknown or missing labels are reported as ``pending``.
    """
    if not label:
        return JobStatus.PENDING
    label = label.strip().lower()
    if label in LEGACY_LABELS:
        return STAGE_TABLE[LEGACY_LABELS[label]].status
    try:
        return STAGE_TABLE[PipelineStage(label)].status
    except ValueError:
        return JobStatus.PENDING


class JobCreatedResponse(BaseModel):
    id: int
    status: JobStatus
    progress: int


class JobStatusResponse(BaseModel):
    """Body of the status endpoint. ``id`` is the finished journal entry."""

    model_config = ConfigDict(populate_by_name=True)

    status: JobStatus
    progress: int = Field(ge=0, le=100)
    id: int | None = None
    error_message: str | None = Field(default=None, serialization_alias="errorMessage")
