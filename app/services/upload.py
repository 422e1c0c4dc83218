"""Upload service for submission validation, audio storage, and job creation."""

import os
import uuid
from pathlib import Path

from fastapi import UploadFile
from sqlalchemy.orm import Session

from app.config import get_settings
from app.exceptions import ValidationError
from app.models.processing_job import ProcessingJob

DEFAULT_MOOD = "neutro"

ALLOWED_EXTENSIONS = {".mp3", ".m4a", ".mp4", ".wav", ".webm", ".ogg", ".flac"}
ALLOWED_MIME_TYPES = {
    "audio/mpeg",
    "audio/mp3",
    "audio/mp4",
    "audio/m4a",
    "audio/x-m4a",
    "audio/wav",
    "audio/x-wav",
    "audio/webm",
    "audio/ogg",
    "audio/flac",
    "audio/x-flac",
    "video/mp4",  # iOS recordings
    "video/webm",  # MediaRecorder in some browsers
}
EXTENSION_BY_MIME = {
    "audio/wav": ".wav",
    "audio/x-wav": ".wav",
    "audio/mpeg": ".mp3",
    "audio/mp3": ".mp3",
    "audio/ogg": ".ogg",
    "audio/mp4": ".m4a",
    "audio/m4a": ".m4a",
    "audio/x-m4a": ".m4a",
    "audio/flac": ".flac",
    "audio/x-flac": ".flac",
    "video/mp4": ".mp4",
}


class UploadService:
    """Handles submission validation, audio storage, and processing job creation."""

    def validate_submission(self, has_audio: bool, text: str | None) -> None:
        """Reject a submission carrying neither audio nor text."""
        if not has_audio and not (text and text.strip()):
            raise ValidationError("Nothing to process: send an audio recording or some text")

    def validate_upload_metadata(self, filename: str, content_type: str | None) -> str | None:
        """Validate upload file metadata (extension + MIME). Returns error message or None if valid."""
        ext = self.resolve_extension(filename, content_type)
        if ext not in ALLOWED_EXTENSIONS:
            return f"Unsupported file type '{ext}'. Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}"

        # Relaxed: some browsers/apps send generic or video types for audio
        base_type = (content_type or "").split(";")[0].strip()
        if (
            base_type
            and base_type not in ALLOWED_MIME_TYPES
            and not base_type.startswith("audio/")
            and base_type != "application/octet-stream"
        ):
            return f"Invalid content type '{content_type}'. Must be an audio file."

        return None

    def resolve_extension(self, filename: str, content_type: str | None) -> str:
        """Pick the stored file extension from the filename, then the MIME type, defaulting to .webm."""
        ext = Path(filename).suffix.lower()
        if ext:
            return ext
        base_type = (content_type or "").split(";")[0].strip()
        if base_type in EXTENSION_BY_MIME:
            return EXTENSION_BY_MIME[base_type]
        return ".webm"

    async def store_file(self, user_id: int, upload: UploadFile) -> tuple[str | None, int]:
        """Stream uploaded audio to disk with size limit. Returns (stored_filename, file_size_bytes).

        An empty upload is not kept and yields (None, 0).
        Raises ValidationError if the file exceeds the max upload size.
        """
        settings = get_settings()
        max_bytes = settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024
        ext = self.resolve_extension(upload.filename or "", upload.content_type)
        stored_filename = f"{uuid.uuid4()}{ext}"
        user_dir = Path(settings.UPLOAD_DIR) / str(user_id)
        user_dir.mkdir(parents=True, exist_ok=True)

        file_path = user_dir / stored_filename
        file_size = 0
        chunk_size = 1024 * 64  # 64KB chunks

        try:
            with open(file_path, "wb") as f:
                while True:
                    chunk = await upload.read(chunk_size)
                    if not chunk:
                        break
                    file_size += len(chunk)
                    if file_size > max_bytes:
                        raise ValidationError(
                            f"File too large ({file_size // (1024 * 1024)}MB). Maximum: {settings.MAX_UPLOAD_SIZE_MB}MB"
                        )
                    f.write(chunk)
        except ValidationError:
            if file_path.exists():
                os.remove(file_path)
            raise

        if file_size == 0:
            os.remove(file_path)
            return None, 0
        return stored_filename, file_size

    def create_job(
        self,
        db: Session,
        user_id: int,
        duration_seconds: float | None,
        text: str | None,
        mood: str | None,
        original_filename: str | None = None,
        stored_filename: str | None = None,
        file_size_bytes: int = 0,
        mime_type: str | None = None,
    ) -> ProcessingJob:
        """Create a pending processing job for an accepted submission."""
        job = ProcessingJob(
            user_id=user_id,
            original_filename=original_filename,
            stored_filename=stored_filename,
            file_size_bytes=file_size_bytes,
            mime_type=mime_type,
            duration_seconds=duration_seconds,
            submitted_text=text.strip() if text and text.strip() else None,
            mood=(mood or "").strip() or DEFAULT_MOOD,
            status="pending",
            stage="pending",
            progress=0,
        )
        db.add(job)
        db.commit()
        db.refresh(job)
        return job

    def get_job(self, db: Session, job_id: int) -> ProcessingJob | None:
        """Get a processing job by ID."""
        return db.query(ProcessingJob).filter(ProcessingJob.id == job_id).first()

    def audio_path(self, user_id: int, stored_filename: str) -> Path:
        """Filesystem location of a stored recording."""
        return Path(get_settings().UPLOAD_DIR) / str(user_id) / stored_filename


_upload_service: UploadService | None = None


def get_upload_service() -> UploadService:
    """Get singleton upload service instance."""
    global _upload_service
    if _upload_service is None:
        _upload_service = UploadService()
    return _upload_service
