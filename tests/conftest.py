"""Pytest configuration and shared fixtures."""

import tempfile
from pathlib import Path
from unittest.mock import MagicMock

import numpy as np
import pytest

SAMPLE_RATE = 16000


# ==================== Path Fixtures ====================

@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_config_file(temp_dir):
    """Create a temporary config file."""
    config_path = temp_dir / "settings.yaml"
    config_content = """
audio:
  device: "default"
  sample_rate: 16000
  channels: 1
  blocksize: 1600
  dtype: "int16"

processing:
  chunk_duration_secs: 10.0
  overlap_secs: 1.0
  silence_threshold_db: -40.0
  min_chunk_secs: 0.5

whisper:
  model: "tiny"
  device: "cpu"
  compute_type: "int8"
  language: "en"

profile:
  path: "{profile_path}"

logging:
  level: "DEBUG"
  file: null
""".format(profile_path=str(temp_dir / "profile.json"))

    config_path.write_text(config_content)
    return config_path


# ==================== Audio Fixtures ====================

@pytest.fixture
def silence_audio():
    """One second of digital silence."""
    return np.zeros(SAMPLE_RATE, dtype=np.float32)


@pytest.fixture
def padded_tone_audio():
    """100ms silence + 1s at amplitude 0.5 + 100ms silence."""
    return np.concatenate([
        np.zeros(1600, dtype=np.float32),
        np.full(16000, 0.5, dtype=np.float32),
        np.zeros(1600, dtype=np.float32),
    ])


@pytest.fixture
def speech_like_audio():
    """Three seconds of noise with speech-like level."""
    rng = np.random.default_rng(42)
    return (rng.standard_normal(3 * SAMPLE_RATE) * 0.1).astype(np.float32)


# ==================== Mock Fixtures ====================

@pytest.fixture
def mock_whisper_model():
    """Create a mock Whisper model."""
    mock_model = MagicMock()
    mock_segment = MagicMock()
    mock_segment.text = " Test transcription"
    mock_model.transcribe.return_value = (iter([mock_segment]), MagicMock())
    return mock_model


@pytest.fixture
def scripted_engine():
    """Engine stub that returns queued texts and records its prompts."""

    class ScriptedEngine:
        def __init__(self):
            self.responses = []
            self.calls = []

        def transcribe(self, audio, language, prompt=None):
            self.calls.append({"audio": audio, "language": language, "prompt": prompt})
            response = self.responses.pop(0) if self.responses else ["text"]
            if isinstance(response, Exception):
                raise response
            return response

    return ScriptedEngine()
