"""
Synchronous HTTP client for the MindWell Voice backend.

Wraps ``httpx.Client`` and turns transport failures into ``NetworkError``
and 4xx/5xx answers into ``UploadRejectedError``.
"""

import logging

import httpx

from app.config import get_settings
from app.exceptions import NetworkError, UploadRejectedError

logger = logging.getLogger(__name__)

UPLOAD_PATH = "/api/v1/journal-entries/audio"
STATUS_PATH = "/api/v1/processing-status/{job_id}"


class APIClient:
    """Thin wrapper around httpx for calling the backend.

    Args:
        base_url: Backend root URL (defaults to ``API_BASE_URL``).
        http_client: Pre-built ``httpx.Client`` to use instead of creating one
            (e.g. a client with a mock transport).
        timeout: Request timeout in seconds for a client created here.
    """

    def __init__(
        self,
        base_url: str | None = None,
        http_client: httpx.Client | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._base_url = (base_url or get_settings().API_BASE_URL).rstrip("/")
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(base_url=self._base_url, timeout=timeout)

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Execute a request; raise NetworkError or UploadRejectedError on failure."""
        try:
            resp = self._client.request(method, path, **kwargs)
            resp.raise_for_status()
            return resp
        except httpx.TimeoutException:
            raise NetworkError("Request timed out") from None
        except httpx.HTTPStatusError as exc:
            raise UploadRejectedError(_error_message(exc.response), exc.response.status_code) from None
        except httpx.HTTPError as exc:
            raise NetworkError(f"Network error: {exc}") from None

    def upload_audio(self, data: dict | None, files: dict) -> dict:
        """POST a multipart submission. Returns the created job body."""
        return self._request("POST", UPLOAD_PATH, data=data, files=files).json()

    def get_processing_status(self, job_id: int | str) -> dict:
        """GET the current status body of a processing job."""
        return self._request("GET", STATUS_PATH.format(job_id=job_id)).json()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "APIClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        return str(body.get("message") or body.get("detail") or f"HTTP {response.status_code}")
    return str(body)
