"""Configuration management for Voice Agent."""

import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)


@dataclass
class AudioConfig:
    """Microphone capture configuration."""
    device: str = "default"
    sample_rate: int = 16000
    channels: int = 1
    blocksize: int = 1600  # 100ms at 16kHz
    dtype: str = "float32"


@dataclass(frozen=True)
class ProcessingConfig:
    """Silence trimming, normalization and chunking parameters."""
    chunk_duration_secs: float = 25.0
    overlap_secs: float = 2.0
    silence_threshold_db: float = -30.0
    min_chunk_secs: float = 1.0
    sample_rate: int = 16000

    def __post_init__(self) -> None:
        if self.chunk_duration_secs <= 0:
            raise ValueError("chunk_duration_secs must be positive")
        if self.overlap_secs <= 0:
            raise ValueError("overlap_secs must be positive")
        if self.min_chunk_secs <= 0:
            raise ValueError("min_chunk_secs must be positive")
        if self.overlap_secs >= self.chunk_duration_secs:
            raise ValueError("overlap_secs must be shorter than chunk_duration_secs")
        if self.sample_rate <= 0:
            raise ValueError("sample_rate must be positive")


@dataclass
class WhisperConfig:
    """Transcription engine configuration."""
    model: str = "base"
    device: str = "cpu"
    compute_type: str = "int8"
    language: str = "ru"


@dataclass
class ProfileConfig:
    """Voice profile storage configuration."""
    path: Optional[str] = None  # None -> user config dir


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    file: Optional[str] = None
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class Config:
    """Main configuration container."""
    audio: AudioConfig = field(default_factory=AudioConfig)
    processing: ProcessingConfig = field(default_factory=ProcessingConfig)
    whisper: WhisperConfig = field(default_factory=WhisperConfig)
    profile: ProfileConfig = field(default_factory=ProfileConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Config":
        """Load configuration from a YAML file."""
        path = Path(path)
        if not path.exists():
            logger.warning(f"Config file not found: {path}, using defaults")
            return cls()

        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        return cls(
            audio=AudioConfig(**data.get("audio", {})),
            processing=ProcessingConfig(**data.get("processing", {})),
            whisper=WhisperConfig(**data.get("whisper", {})),
            profile=ProfileConfig(**data.get("profile", {})),
            logging=LoggingConfig(**data.get("logging", {})),
        )

    def to_yaml(self, path: str | Path) -> None:
        """Save configuration to a YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "audio": asdict(self.audio),
            "processing": asdict(self.processing),
            "whisper": asdict(self.whisper),
            "profile": asdict(self.profile),
            "logging": asdict(self.logging),
        }

        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)

    def setup_logging(self) -> None:
        """Configure logging based on settings."""
        log_level = getattr(logging, self.logging.level.upper(), logging.INFO)

        handlers = [logging.StreamHandler()]

        if self.logging.file:
            log_path = Path(self.logging.file)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(log_path))

        logging.basicConfig(
            level=log_level,
            format=self.logging.format,
            handlers=handlers,
        )


def load_config(path: Optional[str] = None) -> Config:
    """Load configuration from file or environment."""
    if path is None:
        path = os.environ.get("VOICE_AGENT_CONFIG", "config/settings.yaml")
    return Config.from_yaml(path)
