"""Journal entry API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.journal_entry import JournalEntryListResponse, JournalEntryResponse
from app.services.journal import get_journal_service

router = APIRouter(prefix="/api/v1/journal-entries", tags=["Journal Entries"])


@router.get("/", response_model=JournalEntryListResponse)
def list_journal_entries(
    user_id: int = Query(..., alias="userId"),
    search: str | None = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
) -> JournalEntryListResponse:
    """List a user's journal entries with optional search."""
    service = get_journal_service()
    items, total = service.get_user_entries(db, user_id, search=search, limit=limit, offset=offset)
    return JournalEntryListResponse(
        items=[JournalEntryResponse.model_validate(entry) for entry in items],
        total=total,
    )


@router.get("/{entry_id}", response_model=JournalEntryResponse)
def get_journal_entry(
    entry_id: int,
    user_id: int = Query(..., alias="userId"),
    db: Session = Depends(get_db),
) -> JournalEntryResponse:
    """Get a single journal entry."""
    entry = get_journal_service().get_entry(db, entry_id, user_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Journal entry not found")
    return JournalEntryResponse.model_validate(entry)
