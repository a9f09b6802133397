"""Audio preparation for Whisper: silence trimming, normalization and chunking."""

import logging
from typing import Optional

import numpy as np

from ..config import ProcessingConfig

logger = logging.getLogger(__name__)

# Peak level after normalization, leaves headroom against clipping
TARGET_PEAK = 0.95

# Below this peak the signal is treated as silence and left unscaled
MIN_PEAK = 1e-6

# dB value reported for an RMS of zero
SILENCE_FLOOR_DB = -100.0


def calculate_rms(samples: np.ndarray) -> float:
    """Root-mean-square energy of an audio segment."""
    if len(samples) == 0:
        return 0.0
    samples = samples.astype(np.float64)
    return float(np.sqrt(np.mean(samples ** 2)))


def rms_to_db(rms: float) -> float:
    """Convert an RMS level to dB, clamping silence to a finite floor."""
    if rms <= 0.0:
        return SILENCE_FLOOR_DB
    return float(20.0 * np.log10(rms))


def db_to_linear(db: float) -> float:
    """Convert a dB threshold to linear amplitude."""
    return float(10.0 ** (db / 20.0))


class AudioProcessor:
    """Trim -> normalize -> chunk pipeline for a recorded utterance."""

    def __init__(self, config: Optional[ProcessingConfig] = None):
        self.config = config or ProcessingConfig()
        self.sample_rate = self.config.sample_rate
        self.frame_size = self.sample_rate // 100  # 10ms analysis frames

        self.chunk_samples = int(self.config.chunk_duration_secs * self.sample_rate)
        self.overlap_samples = int(self.config.overlap_secs * self.sample_rate)
        self.min_chunk_samples = int(self.config.min_chunk_secs * self.sample_rate)

    def _frame_rms(self, audio: np.ndarray) -> np.ndarray:
        """RMS of every analysis frame; the last frame may be shorter."""
        starts = np.arange(0, len(audio), self.frame_size)
        return np.array([
            calculate_rms(audio[start:start + self.frame_size]) for start in starts
        ])

    def trim_silence(self, audio: np.ndarray) -> np.ndarray:
        """
        Trim leading and trailing silence.

        Args:
            audio: Mono float32 samples

        Returns:
            Samples from the start of the first frame above the threshold to
            the end of the last one. Empty if no frame is above the threshold.
        """
        if len(audio) < self.frame_size:
            return np.zeros(0, dtype=np.float32)

        threshold = db_to_linear(self.config.silence_threshold_db)
        loud = np.flatnonzero(self._frame_rms(audio) > threshold)

        if len(loud) == 0:
            return np.zeros(0, dtype=np.float32)

        start = int(loud[0]) * self.frame_size
        end = min((int(loud[-1]) + 1) * self.frame_size, len(audio))

        if start >= end:
            return np.zeros(0, dtype=np.float32)

        return audio[start:end]

    def normalize(self, audio: np.ndarray) -> np.ndarray:
        """Scale audio so its loudest sample reaches TARGET_PEAK."""
        if len(audio) == 0:
            return np.zeros(0, dtype=np.float32)

        peak = float(np.max(np.abs(audio)))
        if peak < MIN_PEAK:
            return audio.copy()

        scale = TARGET_PEAK / peak
        return (audio * scale).astype(np.float32)

    def chunk_with_overlap(self, audio: np.ndarray) -> list[np.ndarray]:
        """
        Split audio into overlapping chunks.

        A tail shorter than the minimum chunk length that remains after the
        last full step is dropped once at least one chunk has been emitted.
        """
        if len(audio) <= self.chunk_samples:
            if len(audio) >= self.min_chunk_samples:
                return [audio.copy()]
            return []

        step = max(self.chunk_samples - self.overlap_samples, 1)
        chunks = []
        pos = 0

        while pos < len(audio):
            chunk = audio[pos:pos + self.chunk_samples]
            if len(chunk) >= self.min_chunk_samples:
                chunks.append(chunk.copy())

            pos += step

            if len(audio) - pos < self.min_chunk_samples and chunks:
                break

        return chunks

    def process(self, audio: np.ndarray) -> list[np.ndarray]:
        """Main processing pipeline: trim -> normalize -> chunk."""
        audio = np.asarray(audio, dtype=np.float32).flatten()

        trimmed = self.trim_silence(audio)
        if len(trimmed) == 0:
            logger.debug("No audio above silence threshold")
            return []

        normalized = self.normalize(trimmed)
        chunks = self.chunk_with_overlap(normalized)

        logger.debug(
            f"Processed {len(audio)} samples: trimmed to {len(trimmed)}, "
            f"{len(chunks)} chunk(s)"
        )
        return chunks
