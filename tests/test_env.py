"""
Tests for configuration loading.
"""

from pathlib import Path

from jobly.env import DEFAULT_DATABASE_URL, Settings, load_env


class TestSettings:
    """Test Settings.from_env."""

    def test_defaults(self, monkeypatch):
        for var in ("DATABASE_URL", "JOBLY_ENV", "JOBLY_LOG_LEVEL", "JOBLY_LOG_DIR"):
            monkeypatch.delenv(var, raising=False)

        settings = Settings.from_env()

        assert settings.database_url == DEFAULT_DATABASE_URL
        assert settings.log_level == "INFO"
        assert settings.log_dir == Path("logs")

    def test_from_environment(self, monkeypatch):
        monkeypatch.delenv("JOBLY_ENV", raising=False)
        monkeypatch.setenv("DATABASE_URL", "postgresql://localhost/jobly")
        monkeypatch.setenv("JOBLY_LOG_LEVEL", "debug")
        monkeypatch.setenv("JOBLY_LOG_DIR", "/tmp/jobly-logs")

        settings = Settings.from_env()

        assert settings.database_url == "postgresql://localhost/jobly"
        assert settings.log_level == "DEBUG"
        assert settings.log_dir == Path("/tmp/jobly-logs")

    def test_test_environment_uses_test_database(self, monkeypatch):
        monkeypatch.setenv("JOBLY_ENV", "test")
        monkeypatch.setenv("DATABASE_URL", "postgresql://localhost/jobly")
        monkeypatch.setenv("TEST_DATABASE_URL", "postgresql://localhost/jobly_test")

        assert Settings.from_env().database_url == "postgresql://localhost/jobly_test"


class TestLoadEnv:
    """Test .env loading."""

    def test_loads_file(self, tmp_path, monkeypatch):
        # registered with monkeypatch so the value from .env is undone afterwards
        monkeypatch.setenv("JOBLY_LOG_DIR", "unset")
        monkeypatch.delenv("JOBLY_LOG_DIR")
        env_file = tmp_path / ".env"
        env_file.write_text("JOBLY_LOG_DIR=from-dotenv\n")

        load_env(env_file)

        assert Settings.from_env().log_dir == Path("from-dotenv")

    def test_existing_variables_win(self, tmp_path, monkeypatch):
        monkeypatch.setenv("JOBLY_LOG_LEVEL", "ERROR")
        env_file = tmp_path / ".env"
        env_file.write_text("JOBLY_LOG_LEVEL=DEBUG\n")

        load_env(env_file)

        assert Settings.from_env().log_level == "ERROR"

    def test_missing_file_is_ignored(self, tmp_path):
        load_env(tmp_path / "missing.env")
