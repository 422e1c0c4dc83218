"""Tests for audio journal submission."""

import io

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.models.processing_job import ProcessingJob

UPLOAD_URL = "/api/v1/journal-entries/audio"


class TestAudioUpload:
    """Tests for the upload endpoint."""

    def test_upload_valid_file(self, client: TestClient, db_session: Session, upload_dir):
        """A recording is accepted as a pending job and stored under the user's directory."""
        audio_content = b"\x01" * 2048
        response = client.post(
            UPLOAD_URL,
            data={"userId": "1", "duration": "5"},
            files={"audio": ("recording.wav", io.BytesIO(audio_content), "audio/wav")},
        )
        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending"
        assert data["progress"] == 0

        job = db_session.get(ProcessingJob, data["id"])
        assert job.user_id == 1
        assert job.duration_seconds == 5
        assert job.file_size_bytes == 2048
        assert job.original_filename == "recording.wav"
        assert job.stored_filename.endswith(".wav")
        assert (upload_dir / "1" / job.stored_filename).read_bytes() == audio_content

    def test_upload_without_filename_extension_uses_mime(self, client: TestClient, db_session: Session):
        """The stored extension falls back to the MIME type."""
        response = client.post(
            UPLOAD_URL,
            data={"userId": "1"},
            files={"audio": ("blob", io.BytesIO(b"\x01" * 64), "audio/ogg")},
        )
        assert response.status_code == 201
        job = db_session.get(ProcessingJob, response.json()["id"])
        assert job.stored_filename.endswith(".ogg")

    def test_upload_invalid_extension(self, client: TestClient, db_session: Session):
        """Reject non-audio file extensions."""
        response = client.post(
            UPLOAD_URL,
            data={"userId": "1"},
            files={"audio": ("notes.exe", io.BytesIO(b"\x00" * 100), "application/octet-stream")},
        )
        assert response.status_code == 400
        assert "Unsupported file type" in response.json()["message"]
        assert db_session.query(ProcessingJob).count() == 0

    def test_upload_invalid_content_type(self, client: TestClient):
        """Reject a non-audio MIME type even with an audio extension."""
        response = client.post(
            UPLOAD_URL,
            data={"userId": "1"},
            files={"audio": ("voice.mp3", io.BytesIO(b"\x00" * 100), "text/html")},
        )
        assert response.status_code == 400
        assert "Invalid content type" in response.json()["message"]

    def test_empty_audio_and_no_text_rejected(self, client: TestClient, db_session: Session, upload_dir):
        """Nothing to process: no job is created and nothing stays on disk."""
        response = client.post(
            UPLOAD_URL,
            data={"userId": "1", "duration": "0"},
            files={"audio": ("recording.wav", io.BytesIO(b""), "audio/wav")},
        )
        assert response.status_code == 400
        assert "Nothing to process" in response.json()["message"]
        assert db_session.query(ProcessingJob).count() == 0
        assert list((upload_dir / "1").iterdir()) == []

    def test_blank_text_only_rejected(self, client: TestClient, db_session: Session):
        response = client.post(UPLOAD_URL, data={"userId": "1", "text": "   "})
        assert response.status_code == 400
        assert db_session.query(ProcessingJob).count() == 0

    def test_text_only_submission(self, client: TestClient, db_session: Session, transcriber):
        """Text without audio is accepted and never reaches the transcriber."""
        response = client.post(UPLOAD_URL, data={"userId": "7", "text": "  Escrevi sobre o meu dia  "})
        assert response.status_code == 201

        job = db_session.get(ProcessingJob, response.json()["id"])
        assert job.stored_filename is None
        assert job.submitted_text == "Escrevi sobre o meu dia"
        assert job.status == "completed"
        assert transcriber.calls == []

    def test_empty_audio_with_text_is_text_only(self, client: TestClient, db_session: Session):
        response = client.post(
            UPLOAD_URL,
            data={"userId": "1", "text": "Só texto"},
            files={"audio": ("recording.wav", io.BytesIO(b""), "audio/wav")},
        )
        assert response.status_code == 201
        job = db_session.get(ProcessingJob, response.json()["id"])
        assert job.stored_filename is None
        assert job.file_size_bytes == 0

    def test_mood_defaults_to_neutral(self, client: TestClient, db_session: Session):
        response = client.post(UPLOAD_URL, data={"userId": "1", "text": "Um dia comum"})
        job = db_session.get(ProcessingJob, response.json()["id"])
        assert job.mood == "neutro"

    def test_declared_mood_is_kept(self, client: TestClient, db_session: Session):
        response = client.post(UPLOAD_URL, data={"userId": "1", "text": "Um dia ótimo", "mood": "feliz"})
        job = db_session.get(ProcessingJob, response.json()["id"])
        assert job.mood == "feliz"

    def test_missing_user_id(self, client: TestClient):
        """A malformed request gets a message body, not FastAPI's default detail list."""
        response = client.post(
            UPLOAD_URL,
            files={"audio": ("recording.wav", io.BytesIO(b"\x01" * 10), "audio/wav")},
        )
        assert response.status_code == 422
        assert "userId" in response.json()["message"]

    def test_negative_duration_rejected(self, client: TestClient):
        response = client.post(UPLOAD_URL, data={"userId": "1", "duration": "-3", "text": "oi"})
        assert response.status_code == 422

    def test_upload_too_large(self, client: TestClient, db_session: Session, monkeypatch):
        """Files over the size limit are rejected before a job exists."""
        from app.config import get_settings

        monkeypatch.setattr(get_settings(), "MAX_UPLOAD_SIZE_MB", 0)
        response = client.post(
            UPLOAD_URL,
            data={"userId": "1"},
            files={"audio": ("recording.wav", io.BytesIO(b"\x01" * 1024), "audio/wav")},
        )
        # The size middleware allows MAX + 1MB, so the streaming check is what rejects it
        assert response.status_code == 400
        assert "File too large" in response.json()["message"]
        assert db_session.query(ProcessingJob).count() == 0

    def test_each_upload_creates_its_own_job(self, client: TestClient):
        ids = {
            client.post(UPLOAD_URL, data={"userId": "1", "text": f"Entrada {i}"}).json()["id"] for i in range(3)
        }
        assert len(ids) == 3


class TestHealth:
    def test_health(self, client: TestClient):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
