"""Multi-chunk transcription with context carried between chunks."""

import logging
from collections import deque
from typing import Optional, Protocol, Sequence

import numpy as np

from .transcriber import TranscriptionError

logger = logging.getLogger(__name__)

# Characters of already transcribed text fed back as context
CONTEXT_CHARS = 100

# Longest calibration prompt passed to the engine
MAX_PROMPT_CHARS = 300


class TranscriptionEngine(Protocol):
    """Anything that turns one chunk of audio into segment texts."""

    def transcribe(
        self,
        audio: np.ndarray,
        language: str,
        prompt: Optional[str] = None,
    ) -> list[str]:
        ...


def truncate_prompt(prompt: Optional[str], limit: int = MAX_PROMPT_CHARS) -> str:
    """Keep only the trailing ``limit`` characters of a prompt."""
    if not prompt:
        return ""
    return prompt[-limit:]


class ContextWindow:
    """Rolling window over the tail of the text transcribed so far."""

    def __init__(self, size: int = CONTEXT_CHARS):
        self._chars: deque[str] = deque(maxlen=size)

    def extend(self, text: str) -> None:
        self._chars.extend(text)

    @property
    def text(self) -> str:
        return "".join(self._chars)


class ChunkTranscriber:
    """Transcribe a sequence of chunks, priming each with the previous text."""

    def __init__(
        self,
        engine: TranscriptionEngine,
        language: str = "ru",
        context_chars: int = CONTEXT_CHARS,
    ):
        self.engine = engine
        self.language = language
        self.context_chars = context_chars

    @staticmethod
    def build_prompt(calibration_prompt: str, context: str) -> str:
        """Join calibration prompt and context with a single space."""
        return " ".join(part for part in (calibration_prompt, context) if part)

    def _transcribe_chunk(self, index: int, chunk: np.ndarray, prompt: str) -> str:
        """Run the engine on one chunk and join its segments."""
        try:
            segments = self.engine.transcribe(chunk, self.language, prompt or None)
        except TranscriptionError as e:
            e.chunk_index = index
            raise
        except Exception as e:
            raise TranscriptionError(f"Chunk {index} failed: {e}", chunk_index=index) from e
        return "".join(segments)

    def transcribe_all(
        self,
        chunks: Sequence[np.ndarray],
        calibration_prompt: Optional[str] = None,
    ) -> str:
        """
        Transcribe chunks in order and concatenate their text.

        Args:
            chunks: Audio chunks as produced by ``AudioProcessor.process``
            calibration_prompt: Optional speaker calibration prompt

        Returns:
            Concatenated text of all chunks. Raises ``TranscriptionError`` on
            the first failing chunk; no partial text is returned.
        """
        if len(chunks) == 0:
            return ""

        calibration = truncate_prompt(calibration_prompt)

        if len(chunks) == 1:
            return self._transcribe_chunk(0, chunks[0], calibration)

        logger.info(f"Transcribing {len(chunks)} chunks")
        context = ContextWindow(self.context_chars)
        parts = []

        for index, chunk in enumerate(chunks):
            prompt = self.build_prompt(calibration, context.text)
            text = self._transcribe_chunk(index, chunk, prompt)
            parts.append(text)
            context.extend(text)
            logger.debug(f"Chunk {index + 1}/{len(chunks)}: {text[:50]!r}")

        return "".join(parts)
