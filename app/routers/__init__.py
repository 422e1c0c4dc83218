"""API routers."""

from app.routers.journal_audio import router as journal_audio_router
from app.routers.journal_entries import router as journal_entries_router

__all__ = ["journal_audio_router", "journal_entries_router"]
