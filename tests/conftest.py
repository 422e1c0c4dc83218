"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import get_settings
from app.database import Base, get_db
from app.models.journal_entry import JournalEntry  # noqa: F401
from app.models.processing_job import ProcessingJob  # noqa: F401
from app.services.analysis import MoodAnalysis
from app.services.processing import ProcessingOrchestrator, get_processing_orchestrator


class FakeTranscriber:
    """Stands in for TranscriptionService. ``hook`` runs inside every call."""

    def __init__(self, text: str = "Hoje eu me senti calmo depois da caminhada") -> None:
        self.text = text
        self.error: Exception | None = None
        self.hook = None
        self.calls = []

    def transcribe(self, audio_path):
        self.calls.append(audio_path)
        if self.hook is not None:
            self.hook()
        if self.error is not None:
            raise self.error
        return self.text


class FakeAnalyzer:
    """Stands in for AnalysisService. ``hooks`` maps method name to a callable run inside it."""

    def __init__(self) -> None:
        self.hooks = {}
        self.errors = {}
        self.contents = []

    def _call(self, name: str, content: str) -> None:
        self.contents.append((name, content))
        if name in self.hooks:
            self.hooks[name]()
        if name in self.errors:
            raise self.errors[name]

    def analyze_mood(self, content, declared_mood):
        self._call("analyze_mood", content)
        return MoodAnalysis(
            detailed_analysis="Um dia equilibrado.",
            emotional_tone="Sereno",
            sentiment_score=40,
            dominant_emotions=["calma", "gratidão"],
            recommended_actions=["Manter as caminhadas"],
        )

    def generate_summary(self, content):
        self._call("generate_summary", content)
        return "Dia tranquilo após caminhada."

    def extract_tags(self, content):
        self._call("extract_tags", content)
        return ["caminhada", "calma"]

    def suggest_category(self, content):
        self._call("suggest_category", content)
        return "Saúde"

    def generate_title(self, content):
        self._call("generate_title", content)
        return "Caminhada Serena"


@pytest.fixture(name="db_session")
def db_session_fixture():
    """Create an in-memory SQLite database for tests."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    testing_session_local = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="upload_dir")
def upload_dir_fixture(tmp_path, monkeypatch):
    """Store uploaded audio under a temporary directory."""
    upload_dir = tmp_path / "audio"
    monkeypatch.setattr(get_settings(), "UPLOAD_DIR", str(upload_dir))
    return upload_dir


@pytest.fixture(name="transcriber")
def transcriber_fixture():
    return FakeTranscriber()


@pytest.fixture(name="analyzer")
def analyzer_fixture():
    return FakeAnalyzer()


@pytest.fixture(name="orchestrator")
def orchestrator_fixture(db_session: Session, transcriber: FakeTranscriber, analyzer: FakeAnalyzer):
    return ProcessingOrchestrator(transcriber=transcriber, analyzer=analyzer, session_factory=lambda: db_session)


@pytest.fixture(name="client")
def client_fixture(db_session: Session, orchestrator: ProcessingOrchestrator, upload_dir):
    """Create a test client with overridden DB dependency, fake providers and disabled rate limiting."""
    from app.rate_limit import limiter
    from app.routers import journal_audio
    from main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    # Point background processing and job sweeps at the test DB session
    journal_audio._session_factory = lambda: db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_processing_orchestrator] = lambda: orchestrator
    limiter.enabled = False
    with TestClient(app) as c:
        yield c
    limiter.enabled = True
    app.dependency_overrides.clear()
    journal_audio._session_factory = None
