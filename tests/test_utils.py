"""Tests for logging, environment lookup and configuration."""

import io

import orjson
import pytest

from hotspring.core.application import Application
from hotspring.core.config import Config
from hotspring.utils.env import Env
from hotspring.utils.logger import (
    JsonFormatter,
    LogLevel,
    Logger,
    StreamHandler,
    TextFormatter,
    configure_logging,
)


class TestLogger:

    def test_child_shares_handlers(self, logger, log_handler):
        child = logger.child("email", plugin="email")
        child.info("sent", to="a@b")

        record = log_handler.records[-1]
        assert record.logger_name == "test.email"
        assert record.context == {"scope": "email", "plugin": "email", "to": "a@b"}

    def test_nested_child(self, logger):
        grandchild = logger.child("email").child("smtp")

        assert grandchild.name == "test.email.smtp"
        assert grandchild.context["scope"] == "smtp"

    def test_level_filtering(self, log_handler):
        logger = Logger("quiet", level=LogLevel.WARNING, handlers=[log_handler])

        logger.info("hidden")
        logger.warning("shown")

        assert log_handler.messages() == ["shown"]

    def test_with_context(self, logger, log_handler):
        logger.with_context(request_id="r1").error("failed", exception=ValueError("bad"))

        record = log_handler.records[-1]
        assert record.context == {"request_id": "r1"}
        assert isinstance(record.exception, ValueError)

    def test_json_output(self):
        stream = io.StringIO()
        logger = Logger("json", handlers=[StreamHandler(stream, JsonFormatter())])

        logger.child("billing").warning("late", invoice=7)

        data = orjson.loads(stream.getvalue())
        assert data["level"] == "WARNING"
        assert data["logger"] == "json.billing"
        assert data["message"] == "late"
        assert data["context"] == {"scope": "billing", "invoice": 7}

    def test_text_output(self):
        stream = io.StringIO()
        formatter = TextFormatter("[{level}] {logger}: {message}", colors=False)
        logger = Logger("text", handlers=[StreamHandler(stream, formatter)])

        logger.info("ready", plugins=2)

        assert stream.getvalue() == "[INFO] text: ready plugins=2\n"

    def test_configure_logging(self):
        stream = io.StringIO()
        logger = configure_logging(LogLevel.ERROR, format="json", stream=stream)

        logger.info("dropped")
        logger.error("kept")

        lines = stream.getvalue().splitlines()
        assert len(lines) == 1
        assert orjson.loads(lines[0])["message"] == "kept"


class TestEnv:

    def test_get_with_fallback(self):
        env = Env(environ={"HOST": "h", "BLANK": ""})

        assert env.get("HOST") == "h"
        assert env.get("BLANK", "x") == "x"
        assert env.get("NOPE", "x") == "x"
        assert "HOST" in env
        assert "NOPE" not in env

    def test_required(self):
        with pytest.raises(KeyError):
            Env(environ={}).get("TOKEN", required=True)

    def test_typed_lookups(self):
        env = Env(environ={"PORT": "8080", "DEBUG": "yes", "HOSTS": "a, b,,c"})

        assert env.int("PORT") == 8080
        assert env.bool("DEBUG") is True
        assert env.bool("MISSING", fallback=False) is False
        assert env.list("HOSTS") == ["a", "b", "c"]

    def test_invalid_typed_values(self):
        env = Env(environ={"PORT": "http", "DEBUG": "maybe"})

        with pytest.raises(ValueError):
            env.int("PORT")
        with pytest.raises(ValueError):
            env.bool("DEBUG")

    def test_load_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text(
            "# comment\n"
            "export SMTP_HOST=mail.local\n"
            'SMTP_URL="smtp://${SMTP_HOST}:25"\n'
            "HOST=from-file\n"
        )

        env = Env(environ={"HOST": "from-process"}).load(env_file)

        assert env.get("SMTP_HOST") == "mail.local"
        assert env.get("SMTP_URL") == "smtp://mail.local:25"
        assert env.get("HOST") == "from-process"

    def test_override(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("HOST=from-file\n")

        env = Env(environ={"HOST": "from-process"}, override=True).load(env_file)

        assert env.get("HOST") == "from-file"

    def test_with_prefix(self):
        env = Env(environ={"APP_NAME": "shop", "APP_PORT": "1", "OTHER": "x"})

        assert env.with_prefix("APP_") == {"name": "shop", "port": "1"}


class TestConfig:

    def test_dot_notation(self):
        config = Config({"plugins": {"email": {"provider": "smtp"}}})

        assert config.get("plugins.email.provider") == "smtp"
        assert config.get("plugins.sms.provider", "none") == "none"
        assert config["plugins.email.provider"] == "smtp"
        assert "plugins.email" in config

    def test_section_is_a_copy(self):
        config = Config({"plugins": {"email": {"port": 25}}})

        section = config.section("plugins.email")
        section["port"] = 587

        assert config.get("plugins.email.port") == 25
        assert config.section("plugins.missing") == {}

    def test_env_overrides(self):
        config = Config({"app": {"debug": False, "name": "shop"}})
        config.load_env({
            "HOTSPRING_APP_DEBUG": "true",
            "HOTSPRING_APP_WORKERS": "4",
            "HOTSPRING_APP_HOSTS": '["a", "b"]',
            "UNRELATED": "x",
        })

        assert config.get_bool("app.debug") is True
        assert config.get_int("app.workers") == 4
        assert config.get("app.hosts") == ["a", "b"]
        assert config.get("app.name") == "shop"

    def test_runtime_set_wins(self):
        config = Config({"app": {"name": "shop"}})
        config.load_env({"HOTSPRING_APP_NAME": "env"})

        config.set("app.name", "runtime")

        assert config.get("app.name") == "runtime"

    def test_defaults_not_mutated_by_merge(self):
        defaults = {"plugins": {"email": {"port": 25}}}
        config = Config(defaults)
        config.set("plugins.email.port", 587)

        assert config.get("plugins.email.port") == 587
        assert defaults["plugins"]["email"]["port"] == 25

    def test_load_file(self, tmp_path):
        path = tmp_path / "settings.py"
        path.write_text('config = {"plugins": {"email": {"provider": "ses"}}}\n')

        config = Config({"plugins": {"email": {"provider": "smtp", "port": 25}}})
        config.load_file(path)
        config.load_file(tmp_path / "missing.py")

        assert config.section("plugins.email") == {"provider": "ses", "port": 25}

    def test_missing_key(self):
        with pytest.raises(KeyError):
            Config()["nope"]

    def test_env_scalar_and_nested_keys_coexist(self):
        config = Config()
        config.load_env({"HOTSPRING_APP": "1", "HOTSPRING_APP_DEBUG": "true"})

        assert config.get("app.debug") is True

    def test_application_tolerates_conflicting_env(self, monkeypatch, logger):
        monkeypatch.setenv("HOTSPRING_APP", "1")
        monkeypatch.setenv("HOTSPRING_APP_DEBUG", "true")

        app = Application("x", logger=logger)

        assert app.state.is_debug

    def test_set_below_scalar(self):
        config = Config({"cache": "redis"})

        config.set("cache.ttl", 60)

        assert config.get("cache.ttl") == 60
