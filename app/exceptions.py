"""
MindWell Voice exception hierarchy.

Everything raised on purpose by the recorder, the client library and the
processing services derives from MindWellError.
"""


class MindWellError(Exception):
    """Base exception for all MindWell Voice errors."""

    def __init__(
        self,
        detail: str = "An unexpected error occurred",
        code: str = "MINDWELL_ERROR",
        status_code: int = 500,
    ) -> None:
        self.detail = detail
        self.code = code
        self.status_code = status_code
        super().__init__(detail)


class MicrophonePermissionError(MindWellError, PermissionError):
    """Raised when microphone access is denied or no input device exists."""

    def __init__(self, detail: str = "Microphone access denied") -> None:
        super().__init__(detail=detail, code="MICROPHONE_PERMISSION", status_code=403)


class NetworkError(MindWellError):
    """Raised when a request to the backend could not be completed."""

    def __init__(self, detail: str = "Network error") -> None:
        super().__init__(detail=detail, code="NETWORK_ERROR", status_code=503)


class UploadRejectedError(MindWellError):
    """Raised when the backend answers a request with a 4xx/5xx status."""

    def __init__(self, detail: str, status_code: int) -> None:
        super().__init__(detail=detail, code="REQUEST_REJECTED", status_code=status_code)


class ProviderError(MindWellError):
    """Raised when the speech-to-text or analysis provider fails."""

    def __init__(self, detail: str = "Provider failed") -> None:
        super().__init__(detail=detail, code="PROVIDER_ERROR", status_code=502)


class ValidationError(MindWellError):
    """Raised when a submission is rejected before any job is created."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail=detail, code="VALIDATION_ERROR", status_code=400)

