"""Tests for kerf.config module."""

import pytest
from pydantic import ValidationError

from kerf.config import Settings


class TestSettings:
    """Tests for the Settings class."""

    def test_default_values(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that default values are set correctly."""
        for var in (
            "LOG_LEVEL",
            "LOG_FORMAT",
            "VALIDATION_TOLERANCE",
            "STABILITY_FACTOR",
            "DRIFT_TOLERANCE",
            "ELLIPSE_LENGTH_SEGMENTS",
        ):
            monkeypatch.delenv(var, raising=False)

        settings = Settings(
            _env_file=None,  # type: ignore[call-arg]
        )

        assert settings.LOG_LEVEL == "INFO"
        assert settings.LOG_FORMAT == "console"
        assert settings.VALIDATION_TOLERANCE == 1e-9
        assert settings.STABILITY_FACTOR == 10.0
        assert settings.DRIFT_TOLERANCE == 0.001
        assert settings.ELLIPSE_LENGTH_SEGMENTS == 256

    def test_env_var_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that environment variables override defaults."""
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("VALIDATION_TOLERANCE", "1e-6")
        monkeypatch.setenv("ELLIPSE_LENGTH_SEGMENTS", "512")

        settings = Settings(
            _env_file=None,  # type: ignore[call-arg]
        )

        assert settings.LOG_LEVEL == "DEBUG"
        assert settings.VALIDATION_TOLERANCE == 1e-6
        assert settings.ELLIPSE_LENGTH_SEGMENTS == 512

    def test_env_file_is_read(self, tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that values are loaded from a .env file."""
        monkeypatch.delenv("DRIFT_TOLERANCE", raising=False)
        env_file = tmp_path / ".env"
        env_file.write_text("DRIFT_TOLERANCE=0.01\n")

        settings = Settings(
            _env_file=env_file,  # type: ignore[call-arg]
        )

        assert settings.DRIFT_TOLERANCE == 0.01

    def test_env_vars_are_case_sensitive(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that lowercase variable names are ignored."""
        monkeypatch.delenv("STABILITY_FACTOR", raising=False)
        monkeypatch.setenv("stability_factor", "99")

        settings = Settings(
            _env_file=None,  # type: ignore[call-arg]
        )

        assert settings.STABILITY_FACTOR == 10.0

    def test_log_format_options(self) -> None:
        """Test that LOG_FORMAT accepts valid options."""
        settings = Settings(
            LOG_FORMAT="json",
            _env_file=None,  # type: ignore[call-arg]
        )
        assert settings.LOG_FORMAT == "json"

    def test_rejects_non_numeric_tolerance(self) -> None:
        """Test that a malformed tolerance fails validation."""
        with pytest.raises(ValidationError):
            Settings(
                VALIDATION_TOLERANCE="tight",  # type: ignore[arg-type]
                _env_file=None,  # type: ignore[call-arg]
            )

    def test_fixture_settings(self, test_settings: Settings) -> None:
        """Test that settings can be created with custom values."""
        assert test_settings.LOG_LEVEL == "DEBUG"
        assert test_settings.LOG_FORMAT == "console"
