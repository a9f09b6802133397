"""Main entry point for Voice Agent - push-to-talk speech transcription."""

import argparse
import logging
import sys
from typing import Callable

from .audio.capture import AudioRecorder, DeviceError
from .audio.orchestrator import ChunkTranscriber
from .audio.processor import AudioProcessor
from .audio.transcriber import TranscriptionError, WhisperEngine
from .calibration.profile import ProfileStore
from .calibration.session import CalibrationSession
from .config import Config, load_config

logger = logging.getLogger(__name__)


class VoiceAgent:
    """Application wiring: recorder -> processor -> chunk transcriber."""

    def __init__(self, config: Config, input_fn: Callable[[str], str] = input):
        self.config = config
        self._input = input_fn

        self.recorder = AudioRecorder(config.audio)
        self.processor = AudioProcessor(config.processing)
        self.engine = WhisperEngine(config.whisper)
        self.transcriber = ChunkTranscriber(self.engine, language=config.whisper.language)
        self.profile_store = ProfileStore(config.profile.path)

        self.calibration_prompt = ""

    def load_profile(self) -> bool:
        """Load the calibration prompt from the saved voice profile."""
        self.calibration_prompt = self.profile_store.load_prompt()
        if self.calibration_prompt:
            logger.info("Voice profile loaded")
            return True
        return False

    def calibrate(self) -> None:
        """Run calibration and use the resulting prompt from now on."""
        session = CalibrationSession(
            self.recorder,
            self.processor,
            self.transcriber,
            self.profile_store,
            input_fn=self._input,
        )
        profile = session.run()
        self.calibration_prompt = profile.prompt

    def start_recording(self) -> None:
        """Start one push-to-talk recording."""
        self.recorder.start()

    def stop_and_transcribe(self) -> str:
        """Stop recording and transcribe what was captured."""
        audio = self.recorder.stop()
        if len(audio) == 0:
            logger.warning("No audio recorded")
            return ""

        chunks = self.processor.process(audio)
        if not chunks:
            logger.warning("No speech detected")
            return ""

        logger.info(f"Transcribing {len(chunks)} chunk(s)...")
        text = self.transcriber.transcribe_all(chunks, self.calibration_prompt)
        return text.strip()

    def run(self) -> None:
        """Line-based push-to-talk loop until the user quits."""
        print("\n=== Voice Agent ===")
        print("[ENTER] start / stop recording, [q] quit\n")

        while True:
            try:
                command = self._input("Ready > ").strip().lower()
            except EOFError:
                break
            if command == "q":
                break

            try:
                self.start_recording()
            except DeviceError as e:
                logger.error(f"Cannot start recording: {e}")
                continue

            try:
                self._input("Recording... [ENTER] stop ")
            except EOFError:
                self.recorder.stop()
                break

            try:
                text = self.stop_and_transcribe()
            except TranscriptionError as e:
                logger.error(f"Transcription failed: {e}")
                continue

            if text:
                print(f"RESULT: {text}")

        print("Goodbye.")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Voice Agent - push-to-talk transcription")
    parser.add_argument(
        "-c", "--config",
        default=None,
        help="Path to configuration file",
    )
    parser.add_argument(
        "--calibrate",
        action="store_true",
        help="Run voice calibration even if a profile exists",
    )
    parser.add_argument(
        "--list-devices",
        action="store_true",
        help="List available audio input devices",
    )
    args = parser.parse_args()

    if args.list_devices:
        print("Available audio devices:")
        for dev in AudioRecorder.list_devices():
            print(f"  [{dev['id']}] {dev['name']} ({dev['channels']}ch)")
        return

    config = load_config(args.config)
    config.setup_logging()

    app = VoiceAgent(config)

    try:
        app.engine.load()
    except TranscriptionError as e:
        logger.error(str(e))
        sys.exit(1)

    try:
        try:
            if args.calibrate or not app.profile_store.exists():
                if not args.calibrate:
                    logger.info("No voice profile found, starting calibration")
                app.calibrate()
            else:
                app.load_profile()
        except DeviceError as e:
            logger.error(f"Calibration failed: {e}")

        app.run()
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
    finally:
        if app.recorder.is_running():
            app.recorder.stop()


if __name__ == "__main__":
    main()
