"""Processing job model."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text

from app.database import Base


class ProcessingJob(Base):
    """One audio (or text) submission moving through the processing pipeline."""

    __tablename__ = "processing_job"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, index=True)
    original_filename = Column(String(512), nullable=True)
    stored_filename = Column(String(512), nullable=True, unique=True)
    mime_type = Column(String(128), nullable=True)
    file_size_bytes = Column(Integer, nullable=False, default=0)
    duration_seconds = Column(Float, nullable=True)
    submitted_text = Column(Text, nullable=True)
    mood = Column(String(64), nullable=False, default="neutro")
    status = Column(String(32), nullable=False, default="pending")  # pending, transcribing, analyzing, completed, error
    stage = Column(String(32), nullable=False, default="pending")
    progress = Column(Integer, nullable=False, default=0)
    result_entry_id = Column(Integer, ForeignKey("journal_entry.id", ondelete="SET NULL"), nullable=True)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
    finished_at = Column(DateTime, nullable=True)

    @property
    def audio_url(self) -> str | None:
        """Playback URL of the stored audio, if any."""
        if not self.stored_filename:
            return None
        return f"/api/v1/audio/{self.user_id}/{self.stored_filename}"
