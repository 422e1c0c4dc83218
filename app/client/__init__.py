"""Client side of the voice journal flow: record, upload, and follow processing."""

from app.client.api import APIClient
from app.client.poller import CancelToken, PollerState, PollResult, StatusPoller
from app.client.recorder import AudioCapture, RecorderState, RecordingSession
from app.client.uploader import JobHandle, UploadMetadata, Uploader

__all__ = [
    "APIClient",
    "AudioCapture",
    "CancelToken",
    "JobHandle",
    "PollResult",
    "PollerState",
    "RecorderState",
    "RecordingSession",
    "StatusPoller",
    "UploadMetadata",
    "Uploader",
]
