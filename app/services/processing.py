"""Processing orchestrator for voice journal submissions.

Each accepted upload is turned into a journal entry by one sequential run::

    pending -> transcribing -> analyzing (categorizing, generating-title) -> completed

Any provider failure ends the run in ``error`` with a readable message
stored on the job. The run never raises: by the time it executes, the
upload request has already been answered.
"""

import logging
import os
from collections.abc import Callable
from datetime import datetime, timedelta
from pathlib import Path

from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import session_scope
from app.exceptions import ProviderError
from app.models.journal_entry import JournalEntry
from app.models.processing_job import ProcessingJob
from app.schemas.processing import STAGE_TABLE, JobStatus, PipelineStage
from app.services.analysis import AnalysisService, color_for, get_analysis_service
from app.services.transcription import TranscriptionService, get_transcription_service

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_MESSAGE = "Unexpected error while processing the recording"
TIMEOUT_ERROR_MESSAGE = "Processing timed out"
TERMINAL_STATUSES = (JobStatus.COMPLETED.value, JobStatus.ERROR.value)


def _is_terminal(job: ProcessingJob) -> bool:
    return JobStatus(job.status).is_terminal


class ProcessingOrchestrator:
    """Runs the transcription and analysis pipeline for one job at a time.

    Args:
        transcriber: Speech-to-text service (defaults to the shared singleton).
        analyzer: Text analysis service (defaults to the shared singleton).
        session_factory: Callable returning a new ``Session``; defaults to ``SessionLocal``.
    """

    def __init__(
        self,
        transcriber: TranscriptionService | None = None,
        analyzer: AnalysisService | None = None,
        session_factory: Callable[[], Session] | None = None,
    ) -> None:
        self._transcriber = transcriber or get_transcription_service()
        self._analyzer = analyzer or get_analysis_service()
        self._session_factory = session_factory

    def run(self, job_id: int) -> None:
        """Process one job to a terminal state."""
        with session_scope(self._session_factory) as db:
            job = db.get(ProcessingJob, job_id)
            if job is None:
                logger.warning("Processing job %s vanished before it could run", job_id)
                return
            if _is_terminal(job):
                logger.info("Processing job %s is already %s; skipping", job_id, job.status)
                return

            logger.info("Processing job %s started (user=%s)", job_id, job.user_id)
            try:
                self._process(db, job)
            except ProviderError as e:
                logger.warning("Processing job %s failed: %s", job_id, e.detail)
                self._fail(db, job, e.detail)
            except Exception:
                logger.exception("Processing job %s crashed", job_id)
                self._fail(db, job, UNEXPECTED_ERROR_MESSAGE)

    def _process(self, db: Session, job: ProcessingJob) -> None:
        if not self._advance(db, job, PipelineStage.TRANSCRIBING):
            return
        content = self._transcript_for(job)

        if not self._advance(db, job, PipelineStage.ANALYZING):
            return
        mood_analysis = self._analyzer.analyze_mood(content, job.mood)
        summary = self._analyzer.generate_summary(content)
        tags = self._analyzer.extract_tags(content)

        if not self._advance(db, job, PipelineStage.CATEGORIZING):
            return
        category = self._analyzer.suggest_category(content)

        if not self._advance(db, job, PipelineStage.GENERATING_TITLE):
            return
        title = self._analyzer.generate_title(content)

        entry = JournalEntry(
            user_id=job.user_id,
            title=title,
            content=content,
            mood=job.mood,
            category=category,
            summary=summary,
            tags=tags,
            color_hex=color_for(mood_analysis.dominant_emotions, job.mood),
            audio_url=job.audio_url,
            audio_duration=job.duration_seconds,
            emotional_tone=mood_analysis.emotional_tone,
            sentiment_score=mood_analysis.sentiment_score,
            dominant_emotions=mood_analysis.dominant_emotions,
            recommended_actions=mood_analysis.recommended_actions,
            mood_analysis=mood_analysis.detailed_analysis,
        )
        self._complete(db, job, entry)

    def _transcript_for(self, job: ProcessingJob) -> str:
        """Transcribe the stored audio; text-only submissions use the submitted text."""
        if not job.stored_filename:
            return job.submitted_text or ""

        settings = get_settings()
        audio_path = Path(settings.UPLOAD_DIR) / str(job.user_id) / job.stored_filename
        transcript = self._transcriber.transcribe(audio_path)
        if job.submitted_text:
            return f"{job.submitted_text}\n\n{transcript}"
        return transcript

    def _advance(self, db: Session, job: ProcessingJob, stage: PipelineStage) -> bool:
        """Move the job to ``stage``. Returns False if the job already reached a terminal state."""
        db.refresh(job)
        if _is_terminal(job):
            logger.info("Processing job %s became %s out of band; stopping", job.id, job.status)
            return False

        info = STAGE_TABLE[stage]
        job.stage = stage.value
        job.status = info.status.value
        job.progress = max(job.progress or 0, info.progress)
        db.commit()
        logger.debug("Processing job %s -> %s (%d%%)", job.id, stage.value, job.progress)
        return True

    def _complete(self, db: Session, job: ProcessingJob, entry: JournalEntry) -> None:
        db.refresh(job)
        if _is_terminal(job):
            logger.info("Processing job %s became %s out of band; discarding result", job.id, job.status)
            return

        db.add(entry)
        db.flush()
        job.result_entry_id = entry.id
        job.error_message = None
        job.stage = PipelineStage.COMPLETED.value
        job.status = JobStatus.COMPLETED.value
        job.progress = STAGE_TABLE[PipelineStage.COMPLETED].progress
        job.finished_at = datetime.utcnow()
        db.commit()
        logger.info("Processing job %s completed -> journal entry %s", job.id, entry.id)

    def _fail(self, db: Session, job: ProcessingJob, message: str) -> None:
        db.rollback()
        db.refresh(job)
        if _is_terminal(job):
            return

        job.stage = PipelineStage.ERROR.value
        job.status = JobStatus.ERROR.value
        job.error_message = message or UNEXPECTED_ERROR_MESSAGE
        job.result_entry_id = None
        job.finished_at = datetime.utcnow()
        db.commit()


def expire_stale_jobs(db: Session, timeout_seconds: int, now: datetime | None = None) -> int:
    """Move jobs that stayed non-terminal longer than ``timeout_seconds`` to ``error``."""
    now = now or datetime.utcnow()
    cutoff = now - timedelta(seconds=timeout_seconds)
    stale = (
        db.query(ProcessingJob)
        .filter(ProcessingJob.status.notin_(TERMINAL_STATUSES), ProcessingJob.created_at < cutoff)
        .all()
    )
    for job in stale:
        job.stage = PipelineStage.ERROR.value
        job.status = JobStatus.ERROR.value
        job.error_message = TIMEOUT_ERROR_MESSAGE
        job.finished_at = now
    db.commit()
    if stale:
        logger.warning("Expired %d stale processing job(s)", len(stale))
    return len(stale)


def purge_finished_jobs(db: Session, retention_hours: int, now: datetime | None = None) -> int:
    """Delete terminal jobs finished more than ``retention_hours`` ago.

    Journal entries are kept. Audio of failed jobs is removed with the job,
    since nothing else references it.
    """
    now = now or datetime.utcnow()
    cutoff = now - timedelta(hours=retention_hours)
    expired = (
        db.query(ProcessingJob)
        .filter(ProcessingJob.status.in_(TERMINAL_STATUSES), ProcessingJob.finished_at < cutoff)
        .all()
    )
    settings = get_settings()
    for job in expired:
        if job.stored_filename and job.result_entry_id is None:
            file_path = Path(settings.UPLOAD_DIR) / str(job.user_id) / job.stored_filename
            if file_path.exists():
                os.remove(file_path)
        db.delete(job)
    db.commit()
    if expired:
        logger.info("Purged %d finished processing job(s)", len(expired))
    return len(expired)


def sweep_jobs(session_factory: Callable[[], Session] | None = None) -> None:
    """Apply the timeout and retention policies."""
    settings = get_settings()
    with session_scope(session_factory) as db:
        expire_stale_jobs(db, settings.JOB_TIMEOUT_SECONDS)
        purge_finished_jobs(db, settings.JOB_RETENTION_HOURS)


_orchestrator: ProcessingOrchestrator | None = None


def get_processing_orchestrator() -> ProcessingOrchestrator:
    """Get singleton processing orchestrator instance."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = ProcessingOrchestrator()
    return _orchestrator
