"""Speech-to-text using faster-whisper locally or the OpenAI Whisper API."""

import logging
import time
from pathlib import Path

from app.config import get_settings
from app.exceptions import ProviderError

logger = logging.getLogger(__name__)

OPENAI_TRANSCRIPTION_MODEL = "whisper-1"
OPENAI_TRANSCRIPTION_PROMPT = "Esta é uma gravação de um diário de saúde mental em português brasileiro."


class TranscriptionService:
    """Turns a stored audio file into transcript text."""

    def __init__(self) -> None:
        self._model = None
        self._client = None

    def _get_model(self):
        """Lazy-load the whisper model."""
        if self._model is None:
            from faster_whisper import WhisperModel

            settings = get_settings()
            self._model = WhisperModel(settings.WHISPER_MODEL_SIZE, device="cpu", compute_type="int8")
        return self._model

    def _get_client(self):
        """Lazy-create the OpenAI client."""
        if self._client is None:
            from openai import OpenAI

            settings = get_settings()
            self._client = OpenAI(api_key=settings.OPENAI_API_KEY, timeout=settings.OPENAI_TIMEOUT_SECONDS)
        return self._client

    def transcribe(self, audio_path: Path) -> str:
        """Transcribe an audio file. Raises ProviderError on failure or empty transcript."""
        settings = get_settings()
        if not audio_path.exists():
            raise ProviderError(f"Audio file not found: {audio_path.name}")
        if audio_path.stat().st_size == 0:
            raise ProviderError("Audio file is empty")

        start_time = time.time()
        try:
            if settings.TRANSCRIPTION_PROVIDER == "openai":
                text = self._transcribe_openai(audio_path, settings.TRANSCRIPTION_LANGUAGE)
            else:
                text = self._transcribe_local(audio_path, settings.TRANSCRIPTION_LANGUAGE)
        except ProviderError:
            raise
        except Exception as e:
            raise ProviderError(f"Transcription failed: {e}") from e

        text = text.strip()
        if not text:
            raise ProviderError("Transcription returned no text")

        logger.info(
            "Transcribed %s (%d chars) in %.2fs",
            audio_path.name,
            len(text),
            time.time() - start_time,
        )
        return text

    def _transcribe_local(self, audio_path: Path, language: str) -> str:
        model = self._get_model()
        segments_iter, _info = model.transcribe(str(audio_path), beam_size=5, language=language or None)
        return " ".join(seg.text.strip() for seg in segments_iter)

    def _transcribe_openai(self, audio_path: Path, language: str) -> str:
        client = self._get_client()
        with open(audio_path, "rb") as audio_file:
            response = client.audio.transcriptions.create(
                file=audio_file,
                model=OPENAI_TRANSCRIPTION_MODEL,
                language=language,
                response_format="json",
                temperature=0.2,
                prompt=OPENAI_TRANSCRIPTION_PROMPT,
            )
        if isinstance(response, str):
            return response
        return getattr(response, "text", "") or ""


_transcription_service: TranscriptionService | None = None


def get_transcription_service() -> TranscriptionService:
    """Get singleton transcription service instance."""
    global _transcription_service
    if _transcription_service is None:
        _transcription_service = TranscriptionService()
    return _transcription_service
