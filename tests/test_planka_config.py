"""Tests for configuration loading and logging setup."""

import logging
import sys

import pytest

import planka_config
from planka_config import Settings, load_config, setup_logging
from planka_errors import PlankaConfigError


class TestLoadConfig:
    def test_static_token(self):
        settings = load_config({"PLANKA_URL": "https://planka.example.com", "PLANKA_TOKEN": "tok"})

        assert settings == Settings(base_url="https://planka.example.com", token="tok")
        assert settings.uses_static_token

    def test_credentials(self):
        settings = load_config({
            "PLANKA_URL": "http://localhost:3000",
            "PLANKA_EMAIL": "me@example.com",
            "PLANKA_PASSWORD": "pw",
        })

        assert settings.email == "me@example.com"
        assert settings.password == "pw"
        assert not settings.uses_static_token

    def test_token_wins_over_credentials(self):
        settings = load_config({
            "PLANKA_URL": "http://localhost:3000",
            "PLANKA_TOKEN": "tok",
            "PLANKA_EMAIL": "me@example.com",
            "PLANKA_PASSWORD": "pw",
        })

        assert settings.token == "tok"
        assert settings.email is None

    @pytest.mark.parametrize("env, message", [
        ({}, "PLANKA_URL not set"),
        ({"PLANKA_URL": "   ", "PLANKA_TOKEN": "tok"}, "PLANKA_URL not set"),
        ({"PLANKA_URL": "planka.example.com", "PLANKA_TOKEN": "tok"}, "Invalid PLANKA_URL"),
        ({"PLANKA_URL": "ftp://planka.example.com", "PLANKA_TOKEN": "tok"}, "Invalid PLANKA_URL"),
        ({"PLANKA_URL": "http://localhost"}, "PLANKA_TOKEN or PLANKA_EMAIL must be set"),
        ({"PLANKA_URL": "http://localhost", "PLANKA_EMAIL": "me@example.com"},
         "PLANKA_PASSWORD must be set when using PLANKA_EMAIL"),
    ])
    def test_invalid_configuration(self, env, message):
        with pytest.raises(PlankaConfigError, match=message):
            load_config(env)

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setattr(planka_config, "load_dotenv", lambda path: False)
        monkeypatch.setenv("PLANKA_URL", "https://planka.example.com")
        monkeypatch.setenv("PLANKA_TOKEN", "from-env")

        assert load_config().token == "from-env"


class TestSetupLogging:
    @pytest.fixture(autouse=True)
    def _restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        for handler in root.handlers:
            if handler not in handlers:
                handler.close()
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_defaults_to_info_on_stderr(self):
        setup_logging({})

        root = logging.getLogger()
        assert root.level == logging.INFO
        assert all(getattr(h, "stream", None) is not sys.stdout for h in root.handlers)

    def test_level_and_file(self, tmp_path):
        log_file = tmp_path / "planka-mcp.log"

        setup_logging({"PLANKA_MCP_LOG_LEVEL": "debug", "PLANKA_MCP_LOG_FILE": str(log_file)})
        logging.getLogger("planka_tools").debug("hello from the test")

        assert logging.getLogger().level == logging.DEBUG
        assert "hello from the test" in log_file.read_text()

    def test_unknown_level_falls_back_to_info(self):
        setup_logging({"PLANKA_MCP_LOG_LEVEL": "chatty"})

        assert logging.getLogger().level == logging.INFO
