"""Speaker calibration and voice profile storage."""

from .profile import ProfileIOError, ProfileStore, VoiceProfile
from .session import CalibrationSession

__all__ = ["CalibrationSession", "ProfileIOError", "ProfileStore", "VoiceProfile"]
