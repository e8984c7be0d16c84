# tests/test_config.py
"""Tests for llminbox configuration."""

from pathlib import Path
from unittest.mock import patch

from llminbox.config import Settings


class TestSettings:
    def test_default_settings(self):
        s = Settings()
        assert s.host == "127.0.0.1"
        assert s.data_dir == Path.home() / ".llminbox"
        assert s.wait_timeout == 10.0
        assert s.poll_interval == 0.1
        assert s.caption_window == 20.0
        assert s.page_text_limit == 5000

    def test_db_path_derived(self):
        s = Settings()
        assert s.db_path == s.data_dir / "llminbox.db"

    def test_ensure_dirs_creates(self, tmp_path):
        s = Settings(data_dir=tmp_path / "testdata")
        s.ensure_dirs()
        assert s.data_dir.exists()

    def test_env_override(self):
        with patch.dict("os.environ", {"LLMINBOX_WAIT_TIMEOUT": "2.5", "LLMINBOX_PORT": "1234"}):
            s = Settings()
            assert s.wait_timeout == 2.5
            assert s.port == 1234
