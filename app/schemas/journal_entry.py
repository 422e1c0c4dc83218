"""Pydantic schemas for journal entry endpoints."""

from datetime import datetime

from pydantic import BaseModel


class JournalEntryResponse(BaseModel):
    id: int
    title: str | None
    content: str
    mood: str
    category: str | None
    summary: str | None
    tags: list[str]
    color_hex: str | None
    audio_url: str | None
    audio_duration: float | None
    emotional_tone: str | None
    sentiment_score: int | None
    dominant_emotions: list[str]
    recommended_actions: list[str]
    mood_analysis: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class JournalEntryListResponse(BaseModel):
    items: list[JournalEntryResponse]
    total: int
