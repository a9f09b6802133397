"""Voice profile persistence."""

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..audio.orchestrator import MAX_PROMPT_CHARS, truncate_prompt

logger = logging.getLogger(__name__)

PROFILE_FILENAME = "profile.json"


class ProfileIOError(OSError):
    """The voice profile could not be read or written."""


@dataclass
class VoiceProfile:
    """Calibration data for one speaker."""
    prompt: str = ""
    created_at: str = field(default_factory=lambda: datetime.now().isoformat(timespec="seconds"))


def default_profile_path() -> Path:
    """Profile location inside the user config directory."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    base = Path(config_home) if config_home else Path.home() / ".config"
    return base / "voice-agent" / PROFILE_FILENAME


class ProfileStore:
    """Loads and saves the voice profile as a JSON file."""

    def __init__(self, path: Optional[str | Path] = None):
        self.path = Path(path) if path else default_profile_path()

    def exists(self) -> bool:
        """Check if a profile has been saved."""
        return self.path.is_file()

    def load(self) -> Optional[VoiceProfile]:
        """
        Load the profile from disk.

        Returns:
            The stored profile, or None if no profile file exists
        """
        if not self.exists():
            return None

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return VoiceProfile(
                prompt=str(data.get("prompt", "")),
                created_at=str(data.get("created_at", "")),
            )
        except (OSError, ValueError, AttributeError) as e:
            raise ProfileIOError(f"Cannot read voice profile {self.path}: {e}") from e

    def save(self, profile: VoiceProfile) -> None:
        """Write the profile to disk, keeping the trailing prompt characters."""
        data = asdict(profile)
        data["prompt"] = truncate_prompt(profile.prompt, MAX_PROMPT_CHARS)

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise ProfileIOError(f"Cannot write voice profile {self.path}: {e}") from e

        logger.info(f"Saved voice profile: {self.path}")

    def load_prompt(self) -> str:
        """Calibration prompt to use for transcription, empty if unavailable."""
        try:
            profile = self.load()
        except ProfileIOError as e:
            logger.warning(f"Ignoring unreadable voice profile: {e}")
            return ""

        if profile is None:
            return ""
        return truncate_prompt(profile.prompt, MAX_PROMPT_CHARS)
