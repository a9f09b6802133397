"""Interactive voice calibration.

The user reads a set of reference phrases; their transcriptions become the
calibration prompt that primes every later transcription.
"""

import logging
from typing import Callable, Optional, Sequence

from ..audio.capture import AudioRecorder
from ..audio.orchestrator import MAX_PROMPT_CHARS, ChunkTranscriber, truncate_prompt
from ..audio.processor import AudioProcessor
from ..audio.transcriber import TranscriptionError
from .profile import ProfileIOError, ProfileStore, VoiceProfile

logger = logging.getLogger(__name__)

# Reference phrases covering common sounds and vocabulary
CALIBRATION_PHRASES = (
    "Раз два три четыре пять. Шесть семь восемь девять десять.",
    "Всем привет папа здесь. Сегодня отличная погода.",
    "Где купить лопаты два миллиона рублей. Удалить прикрепить стереть.",
    "Мы купим горячие котлеты. Не пойдёт в принципе неплохо.",
    "Говорю чётко и медленно на русском языке.",
    "Кошка мяукает собака лает. Компьютер работает быстро.",
)

# Transcriptions this short are treated as failed recordings
MIN_PHRASE_CHARS = 5


class CalibrationSession:
    """Records reference phrases and builds a voice profile from them."""

    def __init__(
        self,
        recorder: AudioRecorder,
        processor: AudioProcessor,
        transcriber: ChunkTranscriber,
        store: ProfileStore,
        input_fn: Callable[[str], str] = input,
    ):
        self.recorder = recorder
        self.processor = processor
        self.transcriber = transcriber
        self.store = store
        self._input = input_fn

    def _record_phrase(self, index: int, total: int, phrase: str) -> Optional[str]:
        """Record and transcribe one phrase. Returns None if it was not usable."""
        print(f'\nPhrase {index}/{total}: "{phrase}"')
        answer = self._input("  [ENTER] start recording, [s] skip: ").strip().lower()
        if answer == "s":
            print("  Skipped")
            return None

        self.recorder.start()
        try:
            self._input("  Recording... [ENTER] stop: ")
        finally:
            audio = self.recorder.stop()

        if len(audio) == 0:
            print("  No audio recorded")
            return None

        chunks = self.processor.process(audio)
        if not chunks:
            print("  No speech detected")
            return None

        try:
            text = self.transcriber.transcribe_all(chunks).strip()
        except TranscriptionError as e:
            logger.error(f"Calibration phrase {index} failed: {e}")
            print(f"  Error: {e}")
            return None

        if len(text) <= MIN_PHRASE_CHARS:
            print("  Too short, skipped")
            return None

        print(f'  Recorded: "{text}"')
        return text

    @staticmethod
    def build_prompt(texts: Sequence[str]) -> str:
        """Join phrase transcriptions and keep the trailing characters."""
        collected = " ".join(texts)
        return truncate_prompt(collected, MAX_PROMPT_CHARS).strip()

    def run(self, phrases: Sequence[str] = CALIBRATION_PHRASES) -> VoiceProfile:
        """
        Run the calibration and save the resulting profile.

        The profile is returned even if saving it fails, so the prompt can
        still be used for the current session.
        """
        print("=" * 60)
        print("  VOICE CALIBRATION")
        print("=" * 60)
        print("\n  Read each phrase clearly, 15-20 cm from the microphone.")

        texts = []
        for i, phrase in enumerate(phrases, start=1):
            text = self._record_phrase(i, len(phrases), phrase)
            if text:
                texts.append(text)

        profile = VoiceProfile(prompt=self.build_prompt(texts))
        logger.info(f"Calibration complete: {len(texts)}/{len(phrases)} phrases used")

        try:
            self.store.save(profile)
        except ProfileIOError as e:
            logger.error(f"Voice profile not saved: {e}")
            print("\nCalibration complete, but the profile could not be saved.")
            return profile

        print(f"\nCalibration complete! Profile saved to {self.store.path}")
        return profile
