"""On-demand microphone recording into a drainable sample buffer."""

import logging
import threading
from enum import Enum
from typing import Optional

import numpy as np
import sounddevice as sd

from ..config import AudioConfig

logger = logging.getLogger(__name__)

# Longest time the producer waits for the buffer before dropping a block
APPEND_LOCK_TIMEOUT = 0.1


class DeviceError(RuntimeError):
    """Input device is unavailable or rejected the stream configuration."""


class SampleFormat(Enum):
    """Sample formats a capture source may deliver."""
    FLOAT32 = "float32"
    INT16 = "int16"
    INT32 = "int32"

    @classmethod
    def from_dtype(cls, dtype) -> "SampleFormat":
        """Map a numpy dtype to a sample format."""
        if np.dtype(dtype).kind == "f":
            return cls.FLOAT32
        try:
            return cls(np.dtype(dtype).name)
        except ValueError:
            raise ValueError(f"Unsupported sample format: {np.dtype(dtype).name}") from None


def to_float32(frames: np.ndarray, fmt: Optional[SampleFormat] = None) -> np.ndarray:
    """
    Convert a block of captured frames to flat float32 samples.

    Args:
        frames: Samples as delivered by the capture source
        fmt: Format of ``frames``; inferred from the array dtype if omitted

    Returns:
        1-D float32 array. Integer PCM is scaled by the format's max magnitude,
        a ``(frames, channels)`` block is averaged down to mono.
    """
    frames = np.asarray(frames)
    if fmt is None:
        fmt = SampleFormat.from_dtype(frames.dtype)

    if fmt is SampleFormat.FLOAT32:
        samples = frames.astype(np.float32)
    else:
        max_value = np.iinfo(np.dtype(fmt.value)).max
        samples = (frames.astype(np.float64) / max_value).astype(np.float32)

    if samples.ndim == 2 and samples.shape[1] > 1:
        samples = samples.mean(axis=1, dtype=np.float32)
    return samples.flatten()


class AudioRecorder:
    """Push-to-talk recorder: start, let the stream fill the buffer, stop to drain."""

    def __init__(self, config: AudioConfig):
        self.config = config
        self.sample_rate = config.sample_rate
        self.channels = config.channels
        self.blocksize = config.blocksize
        self.sample_format = SampleFormat(config.dtype)

        self._buffer: list[np.ndarray] = []
        self._lock = threading.Lock()
        self._stream: Optional[sd.InputStream] = None

    def _resolve_device(self):
        """Translate the configured device into a sounddevice identifier."""
        if self.config.device == "default":
            return None
        try:
            return int(self.config.device)
        except ValueError:
            return self.config.device

    def _audio_callback(
        self,
        indata: np.ndarray,
        frames: int,
        time_info: dict,
        status: sd.CallbackFlags,
    ) -> None:
        """Callback for sounddevice stream."""
        if status:
            logger.warning(f"Audio callback status: {status}")

        self.append(indata, self.sample_format)

    def append(self, frames: np.ndarray, fmt: Optional[SampleFormat] = None) -> None:
        """Append a block of frames to the current recording."""
        samples = to_float32(frames, fmt)

        if not self._lock.acquire(timeout=APPEND_LOCK_TIMEOUT):
            logger.warning(f"Audio buffer busy, dropped {len(samples)} samples")
            return
        try:
            self._buffer.append(samples)
        finally:
            self._lock.release()

    def start(self) -> None:
        """Start recording from the input device."""
        if self._stream is not None:
            logger.warning("Audio recording already running")
            return

        device = self._resolve_device()
        logger.info(f"Starting audio recording: {self.sample_rate}Hz, {self.channels}ch")

        with self._lock:
            self._buffer = []

        try:
            sd.query_devices(device, kind="input")
            stream = sd.InputStream(
                device=device,
                samplerate=self.sample_rate,
                channels=self.channels,
                dtype=self.sample_format.value,
                blocksize=self.blocksize,
                callback=self._audio_callback,
            )
        except (sd.PortAudioError, ValueError) as e:
            logger.error(f"Failed to open input device {device!r}: {e}")
            raise DeviceError(f"Cannot open input device {device!r}: {e}") from e

        try:
            stream.start()
        except sd.PortAudioError as e:
            stream.close()
            logger.error(f"Failed to start input stream on {device!r}: {e}")
            raise DeviceError(f"Cannot start input stream on {device!r}: {e}") from e

        self._stream = stream
        logger.info("Audio recording started")

    def stop(self) -> np.ndarray:
        """
        Stop recording and drain the buffer.

        Returns:
            Everything captured since ``start()`` as one float32 array.
            Empty if nothing was recorded or the buffer was already drained.
        """
        if self._stream is not None:
            logger.info("Stopping audio recording")
            try:
                self._stream.stop()
                self._stream.close()
            finally:
                self._stream = None

        with self._lock:
            blocks, self._buffer = self._buffer, []

        if not blocks:
            return np.zeros(0, dtype=np.float32)

        audio = np.concatenate(blocks)
        logger.info(f"Recorded {len(audio) / self.sample_rate:.2f}s of audio")
        return audio

    def is_running(self) -> bool:
        """Check if recording is running."""
        return self._stream is not None

    @staticmethod
    def list_devices() -> list[dict]:
        """List available audio input devices."""
        devices = []
        for i, device in enumerate(sd.query_devices()):
            if device["max_input_channels"] > 0:
                devices.append({
                    "id": i,
                    "name": device["name"],
                    "channels": device["max_input_channels"],
                    "sample_rate": device["default_samplerate"],
                })
        return devices
