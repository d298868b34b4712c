"""Tests for configuration validation."""

import pytest

from memoss.config import Config


def test_validate_creates_database_directory(monkeypatch, tmp_path):
    """Test validation prepares the database directory."""
    db_path = tmp_path / "nested" / "memoss.db"
    monkeypatch.setattr(Config, "DATABASE_PATH", db_path)
    monkeypatch.setattr(Config, "TIMEZONE", "Europe/Berlin")

    Config.validate()

    assert db_path.parent.is_dir()


def test_validate_rejects_unknown_timezone(monkeypatch, tmp_path):
    """Test an unknown calendar timezone is a configuration error."""
    monkeypatch.setattr(Config, "DATABASE_PATH", tmp_path / "memoss.db")
    monkeypatch.setattr(Config, "TIMEZONE", "Mars/Olympus_Mons")

    with pytest.raises(ValueError):
        Config.validate()


def test_validate_rejects_non_positive_intervals(monkeypatch, tmp_path):
    """Test heartbeat and snooze intervals must be positive."""
    monkeypatch.setattr(Config, "DATABASE_PATH", tmp_path / "memoss.db")
    monkeypatch.setattr(Config, "TIMEZONE", "UTC")
    monkeypatch.setattr(Config, "HEARTBEAT_INTERVAL", 0)

    with pytest.raises(ValueError):
        Config.validate()
