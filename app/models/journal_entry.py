"""Journal entry model."""

from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, Float, Integer, String, Text

from app.database import Base


class JournalEntry(Base):
    """Finished voice journal entry produced by a processing job."""

    __tablename__ = "journal_entry"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, index=True)
    title = Column(String(256), nullable=True)
    content = Column(Text, nullable=False)
    mood = Column(String(64), nullable=False)
    category = Column(String(128), nullable=True)
    summary = Column(Text, nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    color_hex = Column(String(16), nullable=True)
    audio_url = Column(String(1024), nullable=True)
    audio_duration = Column(Float, nullable=True)
    emotional_tone = Column(String(128), nullable=True)
    sentiment_score = Column(Integer, nullable=True)
    dominant_emotions = Column(JSON, nullable=False, default=list)
    recommended_actions = Column(JSON, nullable=False, default=list)
    mood_analysis = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
