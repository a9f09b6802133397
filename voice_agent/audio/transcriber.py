"""Speech-to-text engine adapter using faster-whisper."""

import logging
from typing import Optional

import numpy as np
from faster_whisper import WhisperModel

from ..config import WhisperConfig

logger = logging.getLogger(__name__)


class TranscriptionError(RuntimeError):
    """The transcription engine failed on a chunk of audio."""

    def __init__(self, message: str, chunk_index: Optional[int] = None):
        super().__init__(message)
        self.chunk_index = chunk_index


class WhisperEngine:
    """Single-call transcription with greedy, deterministic decoding."""

    def __init__(self, config: WhisperConfig):
        self.config = config
        self.model_name = config.model
        self.device = config.device
        self.compute_type = config.compute_type

        self._model: Optional[WhisperModel] = None

        # faster-whisper reports progress through its own logger
        logging.getLogger("faster_whisper").setLevel(logging.WARNING)

    def _load_model(self) -> None:
        """Load the Whisper model."""
        logger.info(f"Loading Whisper model: {self.model_name} on {self.device}")
        try:
            self._model = WhisperModel(
                self.model_name,
                device=self.device,
                compute_type=self.compute_type,
            )
            logger.info("Whisper model loaded")
        except Exception as e:
            logger.error(f"Failed to load Whisper model: {e}")
            raise TranscriptionError(f"Failed to load model: {e}") from e

    def load(self) -> None:
        """Load the model now instead of on first transcription."""
        if self._model is None:
            self._load_model()

    def transcribe(
        self,
        audio: np.ndarray,
        language: str,
        prompt: Optional[str] = None,
    ) -> list[str]:
        """
        Transcribe one chunk of audio.

        Args:
            audio: Mono float32 samples at 16kHz
            language: Target language code
            prompt: Optional priming prompt

        Returns:
            Segment texts in order, as produced by the model
        """
        self.load()

        try:
            segments, _info = self._model.transcribe(
                audio,
                language=language,
                initial_prompt=prompt or None,
                beam_size=1,
                best_of=1,
                temperature=0.0,
                condition_on_previous_text=False,
                vad_filter=False,
            )
            # Segments are generated lazily; decoding happens here
            texts = [seg.text for seg in segments]
        except Exception as e:
            logger.error(f"Transcription error: {e}")
            raise TranscriptionError(f"Failed to run model: {e}") from e

        logger.debug(f"Transcribed {len(audio)} samples into {len(texts)} segment(s)")
        return texts

    def is_loaded(self) -> bool:
        """Check if the model is loaded."""
        return self._model is not None
