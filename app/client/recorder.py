"""Microphone capture for voice journal entries.

A ``RecordingSession`` owns everything a recording needs: the input stream
handle, the buffered audio chunks and the one-second duration ticker.
``dispose()`` (or leaving the ``with`` block) releases all of it whatever
state the session is in.
"""

import base64
import io
import logging
import threading
import wave
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from app.exceptions import MicrophonePermissionError

logger = logging.getLogger(__name__)

SAMPLE_RATE = 16000
CHANNELS = 1
SAMPLE_WIDTH = 2  # int16


class RecorderState(str, Enum):
    IDLE = "idle"
    RECORDING = "recording"
    STOPPED = "stopped"


@dataclass
class AudioCapture:
    """A finished recording."""

    blob: bytes
    duration_seconds: int
    mime_type: str = "audio/wav"
    filename: str = "recording.wav"

    @property
    def object_url(self) -> str:
        """Playable ``data:`` URL of the blob."""
        return f"data:{self.mime_type};base64,{base64.b64encode(self.blob).decode('ascii')}"


class IntervalTicker:
    """Calls ``callback`` every ``interval`` seconds on a daemon thread until stopped."""

    def __init__(self, interval: float, callback: Callable[[], None]) -> None:
        self._interval = interval
        self._callback = callback
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def active(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stop_event.is_set()

    def start(self) -> None:
        self._thread = threading.Thread(target=self._run, name="recording-ticker", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while not self._stop_event.wait(self._interval):
            self._callback()

    def stop(self) -> None:
        self._stop_event.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=self._interval)
        self._thread = None


def open_microphone(sample_rate: int, channels: int, callback: Callable) -> object:
    """Open the default input device as a raw int16 stream.

    Raises MicrophonePermissionError when there is no usable input device.
    """
    try:
        import sounddevice as sd
    except OSError as e:  # PortAudio library missing
        raise MicrophonePermissionError(f"No audio input backend available: {e}") from e

    try:
        return sd.RawInputStream(samplerate=sample_rate, channels=channels, dtype="int16", callback=callback)
    except (sd.PortAudioError, ValueError) as e:
        raise MicrophonePermissionError(f"Could not open microphone: {e}") from e


class RecordingSession:
    """One microphone recording, from ``start()`` to ``stop()`` or ``cancel()``.

    Args:
        stream_factory: ``(sample_rate, channels, callback) -> stream`` where the
            stream has ``start()``, ``stop()`` and ``close()``.
        ticker_factory: ``(interval, callback) -> ticker`` with ``start()``/``stop()``.
        on_audio_ready: Receives the playable URL of each finished recording.
    """

    def __init__(
        self,
        sample_rate: int = SAMPLE_RATE,
        channels: int = CHANNELS,
        stream_factory: Callable = open_microphone,
        ticker_factory: Callable = IntervalTicker,
        on_audio_ready: Callable[[str], None] | None = None,
    ) -> None:
        self._sample_rate = sample_rate
        self._channels = channels
        self._stream_factory = stream_factory
        self._ticker_factory = ticker_factory
        self._on_audio_ready = on_audio_ready
        self._lock = threading.Lock()
        self._chunks: list[bytes] = []
        self._stream = None
        self._ticker = None
        self.state = RecorderState.IDLE
        self.duration_seconds = 0
        self.capture: AudioCapture | None = None

    def start(self) -> None:
        """Open the microphone and begin capturing. Raises MicrophonePermissionError."""
        if self.state == RecorderState.RECORDING:
            return

        with self._lock:
            self._chunks = []
            self.duration_seconds = 0
        self.capture = None

        stream = self._stream_factory(self._sample_rate, self._channels, self._on_audio)
        try:
            stream.start()
        except Exception as e:
            stream.close()
            raise MicrophonePermissionError(f"Could not start microphone: {e}") from e
        self._stream = stream

        self.state = RecorderState.RECORDING
        self._ticker = self._ticker_factory(1.0, self._tick)
        self._ticker.start()
        logger.debug("Recording started")

    def stop(self) -> AudioCapture | None:
        """Finish the recording. Returns the capture, or None when not recording."""
        if self.state != RecorderState.RECORDING:
            return None

        self._release()
        with self._lock:
            capture = AudioCapture(blob=self._encode_wav(), duration_seconds=self.duration_seconds)
        self.capture = capture
        self.state = RecorderState.STOPPED
        logger.debug("Recording stopped after %ds (%d bytes)", capture.duration_seconds, len(capture.blob))

        if self._on_audio_ready is not None:
            self._on_audio_ready(capture.object_url)
        return capture

    def cancel(self) -> None:
        """Abandon the recording: nothing is kept and the duration goes back to 0."""
        self._release()
        with self._lock:
            self._chunks = []
            self.duration_seconds = 0
        self.capture = None
        self.state = RecorderState.IDLE

    def dispose(self) -> None:
        """Release the stream and ticker. Safe to call more than once."""
        self._release()
        with self._lock:
            self._chunks = []
        if self.state == RecorderState.RECORDING:
            self.state = RecorderState.IDLE

    def __enter__(self) -> "RecordingSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.dispose()

    def _tick(self) -> None:
        with self._lock:
            if self.state == RecorderState.RECORDING:
                self.duration_seconds += 1

    def _on_audio(self, indata, frames, time_info, status) -> None:
        if status:
            logger.debug("Input stream status: %s", status)
        with self._lock:
            self._chunks.append(bytes(indata))

    def _release(self) -> None:
        ticker, self._ticker = self._ticker, None
        stream, self._stream = self._stream, None
        try:
            if ticker is not None:
                ticker.stop()
        finally:
            if stream is not None:
                try:
                    stream.stop()
                finally:
                    stream.close()

    def _encode_wav(self) -> bytes:
        if not self._chunks:
            return b""
        buffer = io.BytesIO()
        with wave.open(buffer, "wb") as wf:
            wf.setnchannels(self._channels)
            wf.setsampwidth(SAMPLE_WIDTH)
            wf.setframerate(self._sample_rate)
            wf.writeframes(b"".join(self._chunks))
        return buffer.getvalue()
