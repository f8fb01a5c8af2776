"""Tests for config.py -- defaults, env var overrides."""

from pathlib import Path

import pytest

from audiobook_converter.config import ConverterConfig

# Env vars that pydantic-settings reads -- must be cleaned for default tests
_CONFIG_ENV_VARS = [
    "FFMPEG_PATH", "FFPROBE_PATH", "TARGET_EXTENSION", "CODEC", "BITRATE",
    "TAG_TIMEOUT", "LOG_LEVEL", "LOG_DIR", "VERBOSE",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Remove converter env vars so defaults tests see actual defaults."""
    for var in _CONFIG_ENV_VARS:
        monkeypatch.delenv(var, raising=False)


class TestDefaults:
    def test_default_values(self):
        config = ConverterConfig(_env_file=None)
        assert config.ffmpeg_path is None
        assert config.ffprobe_path is None
        assert config.target_extension == ".mp3"
        assert config.codec == "auto"
        assert config.bitrate == 128
        assert config.tag_timeout == 120
        assert config.log_level == "INFO"
        assert config.log_dir is None
        assert config.verbose is False


class TestExtension:
    def test_adds_missing_dot(self):
        assert ConverterConfig(_env_file=None, target_extension="ogg").extension == ".ogg"

    def test_keeps_dot(self):
        assert ConverterConfig(_env_file=None).extension == ".mp3"


class TestOverrides:
    def test_constructor_override(self):
        config = ConverterConfig(_env_file=None, bitrate=64, codec="libshine")
        assert config.bitrate == 64
        assert config.codec == "libshine"

    def test_env_var_override(self, monkeypatch):
        monkeypatch.setenv("BITRATE", "96")
        monkeypatch.setenv("VERBOSE", "true")
        config = ConverterConfig(_env_file=None)
        assert config.bitrate == 96
        assert config.verbose is True

    def test_path_from_env(self, monkeypatch):
        monkeypatch.setenv("FFMPEG_PATH", "/opt/ffmpeg/bin/ffmpeg")
        config = ConverterConfig(_env_file=None)
        assert config.ffmpeg_path == Path("/opt/ffmpeg/bin/ffmpeg")

    def test_env_file(self, tmp_path):
        env_file = tmp_path / "converter.env"
        env_file.write_text("BITRATE=192\nTARGET_EXTENSION=.ogg\n")
        config = ConverterConfig(_env_file=env_file)
        assert config.bitrate == 192
        assert config.extension == ".ogg"
