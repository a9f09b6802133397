"""Audio pipeline components for on-demand recording and transcription."""

from .capture import AudioRecorder, DeviceError
from .orchestrator import ChunkTranscriber
from .processor import AudioProcessor
from .transcriber import TranscriptionError, WhisperEngine

__all__ = [
    "AudioRecorder",
    "AudioProcessor",
    "ChunkTranscriber",
    "DeviceError",
    "TranscriptionError",
    "WhisperEngine",
]
