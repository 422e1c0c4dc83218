"""Audio journal submission, processing status, and playback endpoints."""

import logging
import mimetypes

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from app.database import get_db
from app.exceptions import ValidationError
from app.rate_limit import limiter
from app.schemas.processing import JobCreatedResponse, JobStatus, JobStatusResponse
from app.services.processing import ProcessingOrchestrator, get_processing_orchestrator, sweep_jobs
from app.services.upload import get_upload_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["Audio Journal"])

# Overridden in tests so background runs share the test database session
_session_factory = None

AUDIO_MEDIA_TYPES = {
    ".webm": "audio/webm",
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".m4a": "audio/mp4",
    ".mp4": "audio/mp4",
    ".ogg": "audio/ogg",
    ".flac": "audio/flac",
}


def _run_job(orchestrator: ProcessingOrchestrator, job_id: int) -> None:
    orchestrator.run(job_id)
    sweep_jobs(_session_factory)


@router.post("/journal-entries/audio", response_model=JobCreatedResponse, status_code=201)
@limiter.limit("20/minute")
async def upload_journal_audio(
    request: Request,
    background_tasks: BackgroundTasks,
    user_id: int = Form(..., alias="userId"),
    duration: int | None = Form(None, ge=0),
    text: str | None = Form(None),
    mood: str | None = Form(None),
    audio: UploadFile | None = File(None),
    db: Session = Depends(get_db),
    orchestrator: ProcessingOrchestrator = Depends(get_processing_orchestrator),
) -> JobCreatedResponse:
    """Accept a voice journal recording (and/or text) and start processing it."""
    service = get_upload_service()

    stored_filename, size = None, 0
    if audio is not None:
        error = service.validate_upload_metadata(audio.filename or "", audio.content_type)
        if error:
            raise HTTPException(status_code=400, detail=error)
        try:
            stored_filename, size = await service.store_file(user_id, audio)
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=e.detail) from None

    try:
        service.validate_submission(has_audio=stored_filename is not None, text=text)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.detail) from None

    job = service.create_job(
        db=db,
        user_id=user_id,
        duration_seconds=duration,
        text=text,
        mood=mood,
        original_filename=audio.filename if stored_filename else None,
        stored_filename=stored_filename,
        file_size_bytes=size,
        mime_type=audio.content_type if stored_filename else None,
    )
    logger.info("Accepted submission as processing job %s (%d audio bytes)", job.id, size)

    background_tasks.add_task(_run_job, orchestrator, job.id)
    return JobCreatedResponse(id=job.id, status=JobStatus.PENDING, progress=0)


@router.get(
    "/processing-status/{job_id}",
    response_model=JobStatusResponse,
    response_model_exclude_none=True,
)
def get_processing_status(job_id: int, db: Session = Depends(get_db)) -> JobStatusResponse:
    """Report the latest known state of a processing job. Reading has no side effects."""
    job = get_upload_service().get_job(db, job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Processing job not found")
    return JobStatusResponse(
        status=JobStatus(job.status),
        progress=job.progress,
        id=job.result_entry_id,
        error_message=job.error_message,
    )


@router.get("/audio/{user_id}/{filename}")
def get_audio(user_id: int, filename: str) -> FileResponse:
    """Serve a stored recording with its audio MIME type."""
    service = get_upload_service()
    if "/" in filename or "\\" in filename or filename.startswith("."):
        raise HTTPException(status_code=404, detail="Audio file not found")
    file_path = service.audio_path(user_id, filename)
    if not file_path.is_file():
        raise HTTPException(status_code=404, detail="Audio file not found")

    ext = file_path.suffix.lower()
    media_type = AUDIO_MEDIA_TYPES.get(ext) or mimetypes.guess_type(filename)[0] or "audio/mpeg"
    return FileResponse(
        file_path,
        media_type=media_type,
        headers={
            "Content-Disposition": f'inline; filename="{filename}"',
            "Cache-Control": "public, max-age=86400",
        },
    )
