"""Upload of finished recordings to the processing backend."""

import logging
from dataclasses import dataclass

from app.client.api import APIClient
from app.exceptions import ValidationError

logger = logging.getLogger(__name__)


@dataclass
class UploadMetadata:
    """What travels with the audio blob."""

    user_id: int
    duration_seconds: int = 0
    text: str | None = None
    mood: str | None = None
    filename: str = "recording.wav"
    mime_type: str = "audio/wav"


@dataclass
class JobHandle:
    """Server acknowledgement of a submission, used to poll its status."""

    id: int
    status: str = "pending"
    progress: int = 0


class Uploader:
    """Sends a recording and its metadata as one multipart request.

    Errors are raised to the caller; there is no retry here.
    """

    def __init__(self, api: APIClient) -> None:
        self._api = api

    def upload(self, blob: bytes | None, metadata: UploadMetadata) -> JobHandle:
        """Upload ``blob`` and return the handle of the processing job.

        Raises:
            ValidationError: blob and text are both empty; nothing was sent.
            NetworkError: the request did not reach the server.
            UploadRejectedError: the server answered with an error status.
        """
        has_text = bool(metadata.text and metadata.text.strip())
        if not blob and not has_text:
            raise ValidationError("Nothing to upload: the recording and the text are both empty")

        data = {
            "userId": str(metadata.user_id),
            "duration": str(int(metadata.duration_seconds)),
        }
        if has_text:
            data["text"] = metadata.text
        if metadata.mood:
            data["mood"] = metadata.mood

        if blob:
            files = {"audio": (metadata.filename, blob, metadata.mime_type)}
        else:
            # Filename-less parts keep a text-only body multipart
            files = {name: (None, value) for name, value in data.items()}
            data = None
        body = self._api.upload_audio(data=data, files=files)
        handle = JobHandle(
            id=body["id"],
            status=body.get("status", "pending"),
            progress=int(body.get("progress", 0)),
        )
        logger.info("Uploaded %d bytes as processing job %s", len(blob or b""), handle.id)
        return handle
