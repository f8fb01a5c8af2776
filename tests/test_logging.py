"""Tests for loguru-based converter logging."""

from loguru import logger

from audiobook_converter.config import ConverterConfig


class TestSetupLogging:
    def setup_method(self):
        logger.remove()

    def teardown_method(self):
        logger.remove()

    def test_setup_creates_log_dir(self, tmp_path, monkeypatch):
        monkeypatch.delenv("LOG_DIR", raising=False)
        log_dir = tmp_path / "logs"
        config = ConverterConfig(_env_file=None, log_dir=log_dir)
        config.setup_logging()
        assert log_dir.exists()

    def test_no_log_dir_no_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("LOG_DIR", raising=False)
        monkeypatch.chdir(tmp_path)
        config = ConverterConfig(_env_file=None)
        config.setup_logging()
        logger.info("stderr only")
        assert list(tmp_path.iterdir()) == []

    def test_setup_adds_file_sink(self, tmp_path):
        log_dir = tmp_path / "logs"
        config = ConverterConfig(_env_file=None, log_dir=log_dir)
        config.setup_logging()
        logger.bind(stage="test").info("hello from test")
        content = (log_dir / "converter.log").read_text()
        assert "hello from test" in content

    def test_stage_context_in_output(self, tmp_path):
        log_dir = tmp_path / "logs"
        config = ConverterConfig(_env_file=None, log_dir=log_dir)
        config.setup_logging()
        logger.bind(stage="converter").info("converting")
        content = (log_dir / "converter.log").read_text()
        assert "converter" in content

    def test_default_stage_empty(self, tmp_path):
        log_dir = tmp_path / "logs"
        config = ConverterConfig(_env_file=None, log_dir=log_dir)
        config.setup_logging()
        logger.info("no stage bound")
        content = (log_dir / "converter.log").read_text()
        assert "no stage bound" in content
