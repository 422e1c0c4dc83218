"""Journal entry retrieval."""

from sqlalchemy.orm import Session

from app.models.journal_entry import JournalEntry


class JournalService:
    """Read access to finished journal entries."""

    def get_user_entries(
        self, db: Session, user_id: int, search: str | None = None, limit: int = 50, offset: int = 0
    ) -> tuple[list[JournalEntry], int]:
        """Get entries for a user, newest first, with optional text search. Returns (items, total_count)."""
        query = db.query(JournalEntry).filter(JournalEntry.user_id == user_id)
        if search:
            query = query.filter(JournalEntry.content.ilike(f"%{search}%"))

        total = query.count()
        items = query.order_by(JournalEntry.created_at.desc(), JournalEntry.id.desc()).offset(offset).limit(limit).all()
        return items, total

    def get_entry(self, db: Session, entry_id: int, user_id: int) -> JournalEntry | None:
        """Get a single entry by ID, scoped to user."""
        return db.query(JournalEntry).filter(JournalEntry.id == entry_id, JournalEntry.user_id == user_id).first()


_journal_service: JournalService | None = None


def get_journal_service() -> JournalService:
    """Get singleton journal service instance."""
    global _journal_service
    if _journal_service is None:
        _journal_service = JournalService()
    return _journal_service
