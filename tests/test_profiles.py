"""
Tests for Calibration Profile Storage
======================================
"""

import json

import pytest

from slidegesture.core.errors import ProfileError
from slidegesture.core.types import CALIBRATION_SEQUENCE, CalibrationGesture, CalibrationProfile
from slidegesture.intelligence.user_profiler import ProfileStore


def sample_profile(user_id="alice", frozen=True):
    profile = CalibrationProfile(user_id)
    for step in CALIBRATION_SEQUENCE:
        profile.add_sample(step, {"index_extension": 0.2, "thumb_extension": 0.25})
    return profile.freeze() if frozen else profile


class TestProfileStore:
    """Test suite for ProfileStore."""

    @pytest.fixture
    def store(self, tmp_path):
        return ProfileStore({"storage_dir": str(tmp_path / "profiles")})

    def test_save_and_load(self, store):
        profile = sample_profile()
        store.save(profile)
        loaded = store.load("alice")

        assert loaded.frozen
        assert loaded.user_id == "alice"
        assert loaded.sample_count(CalibrationGesture.THUMB_UP) == 1
        assert loaded.mean(CalibrationGesture.THUMB_UP, "thumb_extension") \
            == pytest.approx(profile.mean(CalibrationGesture.THUMB_UP, "thumb_extension"))

    def test_unfrozen_profile_rejected(self, store):
        with pytest.raises(ProfileError):
            store.save(sample_profile(frozen=False))

    def test_missing_profile(self, store):
        assert store.load("nobody") is None

    def test_corrupt_profile(self, store):
        path = store.save(sample_profile("bob"))
        with open(path, "w") as f:
            f.write("{not json")
        assert store.load("bob") is None

    def test_unknown_step_rejected(self, store):
        path = store.save(sample_profile("carol"))
        with open(path, "w") as f:
            json.dump({"user_id": "carol", "steps": {"wave": {"means": {}}}}, f)
        assert store.load("carol") is None

    def test_user_id_sanitized(self, store):
        path = store.save(sample_profile("../../etc/passwd"))
        assert path.startswith(store.storage_path)

    def test_list_and_delete(self, store):
        store.save(sample_profile("alice"))
        store.save(sample_profile("bob"))

        assert store.list_profiles() == ["alice", "bob"]
        assert store.delete("alice")
        assert not store.delete("alice")
        assert store.list_profiles() == ["bob"]
