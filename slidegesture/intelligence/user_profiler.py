"""
Persistence for calibration profiles, one JSON file per user.
"""

import os
import json
import logging
from typing import Optional

from slidegesture.core.errors import ProfileError
from slidegesture.core.types import CalibrationProfile
from slidegesture.utils.logger import log_timing

logger = logging.getLogger(__name__)


class ProfileStore:
    """Saves and restores frozen CalibrationProfiles."""

    def __init__(self, config: dict = None):
        config = config or {}
        self._storage_path = config.get("storage_dir", "data/profiles")
        self._default_user = config.get("default_user", "default")
        os.makedirs(self._storage_path, exist_ok=True)

    def _path(self, user_id: str) -> str:
        safe = "".join(c for c in user_id if c.isalnum() or c in "-_") or self._default_user
        return os.path.join(self._storage_path, f"{safe}.json")

    @log_timing
    def save(self, profile: CalibrationProfile) -> str:
        """Write a frozen profile to disk and return its path."""
        if not profile.frozen:
            raise ProfileError("only finished calibration profiles can be saved")
        path = self._path(profile.user_id)
        with open(path, "w") as f:
            json.dump(profile.to_dict(), f, indent=2)
        logger.info("Profile saved: %s", path)
        return path

    @log_timing
    def load(self, user_id: Optional[str] = None) -> Optional[CalibrationProfile]:
        """Load a saved profile, or None if missing or unreadable."""
        path = self._path(user_id or self._default_user)
        try:
            with open(path, "r") as f:
                data = json.load(f)
            profile = CalibrationProfile.from_dict(data)
            logger.info("Profile loaded: %s", path)
            return profile
        except FileNotFoundError:
            logger.info("No profile found for '%s'", user_id or self._default_user)
            return None
        except (ValueError, ProfileError) as e:
            logger.error("Failed to load profile %s: %s", path, e)
            return None

    def delete(self, user_id: str) -> bool:
        path = self._path(user_id)
        try:
            os.remove(path)
            logger.info("Profile deleted: %s", path)
            return True
        except FileNotFoundError:
            return False

    def list_profiles(self) -> list:
        """List available user profiles."""
        try:
            return sorted(f[:-len(".json")] for f in os.listdir(self._storage_path)
                          if f.endswith(".json"))
        except FileNotFoundError:
            return []

    @property
    def storage_path(self) -> str:
        return self._storage_path
