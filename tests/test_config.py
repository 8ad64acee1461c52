"""Tests for configuration, logging setup and the CLI."""

import json
import os
from pathlib import Path

import pytest
import structlog

from qnatree.__main__ import main
from qnatree.config import BotConfig, configure_logging
from qnatree.exceptions import ConfigError
from qnatree.storage import SQLiteQuestionStore


ENV_VARS = ["QNATREE_DOCUMENT", "QNATREE_DB", "QNATREE_LOG_LEVEL", "QNATREE_LOG_JSON"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield
    # load_dotenv writes straight to os.environ
    for name in ENV_VARS:
        os.environ.pop(name, None)
    structlog.reset_defaults()


class TestBotConfig:
    """Tests for BotConfig loading and validation."""

    def test_defaults(self):
        config = BotConfig()

        assert config.document_path == Path("db.json")
        assert config.questions_db_path == Path("questions.db")
        assert config.log_level == "info"
        assert config.log_json is False

    def test_from_env(self, monkeypatch, temp_dir):
        monkeypatch.setenv("QNATREE_DOCUMENT", str(temp_dir / "qa.json"))
        monkeypatch.setenv("QNATREE_DB", str(temp_dir / "q.db"))
        monkeypatch.setenv("QNATREE_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("QNATREE_LOG_JSON", "true")

        config = BotConfig.from_env(temp_dir / "no.env")

        assert config.document_path == temp_dir / "qa.json"
        assert config.questions_db_path == temp_dir / "q.db"
        assert config.log_level == "debug"
        assert config.log_json is True

    def test_from_env_file(self, temp_dir):
        env_file = temp_dir / ".env"
        env_file.write_text("QNATREE_DOCUMENT=from_dotenv.json\n")

        config = BotConfig.from_env(env_file)

        assert config.document_path == Path("from_dotenv.json")

    def test_environment_wins_over_env_file(self, monkeypatch, temp_dir):
        env_file = temp_dir / ".env"
        env_file.write_text("QNATREE_DOCUMENT=from_dotenv.json\n")
        monkeypatch.setenv("QNATREE_DOCUMENT", "from_env.json")

        config = BotConfig.from_env(env_file)

        assert config.document_path == Path("from_env.json")

    def test_from_json(self, temp_dir):
        path = temp_dir / "config.json"
        path.write_text(json.dumps({
            "document_path": "qa.json",
            "questions_db_path": "data/q.db",
            "log_level": "WARNING",
        }))

        config = BotConfig.from_json(path)

        assert config.document_path == Path("qa.json")
        assert config.questions_db_path == Path("data/q.db")
        assert config.log_level == "warning"

    def test_from_json_invalid(self, temp_dir):
        path = temp_dir / "config.json"
        path.write_text("[1, 2]")

        with pytest.raises(ConfigError):
            BotConfig.from_json(path)

    def test_from_json_missing(self, temp_dir):
        with pytest.raises(ConfigError):
            BotConfig.from_json(temp_dir / "missing.json")

    def test_validate(self, sample_document_file):
        config = BotConfig(document_path=sample_document_file)

        assert config.validate() is config

    def test_validate_missing_document(self, temp_dir):
        with pytest.raises(ConfigError):
            BotConfig(document_path=temp_dir / "missing.json").validate()

    def test_validate_log_level(self, sample_document_file):
        with pytest.raises(ConfigError):
            BotConfig(document_path=sample_document_file, log_level="loud").validate()


class TestConfigureLogging:
    """Tests for structlog setup."""

    def test_filters_below_level(self, capsys):
        configure_logging("warning")
        logger = structlog.get_logger("test")

        logger.info("hidden_event")
        logger.warning("shown_event")

        out = capsys.readouterr().out
        assert "hidden_event" not in out
        assert "shown_event" in out

    def test_json_output(self, capsys):
        configure_logging("info", json_logs=True)
        structlog.get_logger("test").info("json_event", answer=42)

        line = capsys.readouterr().out.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["event"] == "json_event"
        assert record["answer"] == 42
        assert record["level"] == "info"

    def test_unknown_level(self):
        with pytest.raises(ConfigError):
            configure_logging("loud")


class TestCLI:
    """Tests for python -m qnatree."""

    def test_check(self, sample_document_file, capsys):
        tree = main(["check", str(sample_document_file)])

        assert tree.total_nodes == 14
        assert "Total nodes: 14" in capsys.readouterr().out

    def test_check_invalid_document(self, temp_dir):
        path = temp_dir / "bad.json"
        path.write_text('{"Root": {"Question": 1}}')

        with pytest.raises(SystemExit) as exc_info:
            main(["check", str(path)])

        assert exc_info.value.code == 1

    def test_tree(self, sample_document_file, capsys):
        main(["tree", str(sample_document_file)])

        out = capsys.readouterr().out
        assert "Refunds" in out
        assert "Write to support within 14 days." in out

    def test_questions(self, temp_dir, capsys):
        db_path = temp_dir / "q.db"
        store = SQLiteQuestionStore(db_path)
        store.add("Can I pay in gold?", 5)

        questions = main(["questions", "--db", str(db_path)])

        assert [q.question for q in questions] == ["Can I pay in gold?"]

    def test_questions_empty(self, temp_dir, capsys):
        questions = main(["questions", "--db", str(temp_dir / "empty.db")])

        assert questions == []
        assert "No saved questions." in capsys.readouterr().out

    def test_no_command_prints_help(self, capsys):
        assert main([]) is None
        assert "usage" in capsys.readouterr().out.lower()

    def test_questions_negative_limit(self, temp_dir):
        with pytest.raises(SystemExit) as exc_info:
            main(["questions", "--db", str(temp_dir / "q.db"), "--limit", "-1"])

        assert exc_info.value.code == 2

    def test_check_deeply_nested_document(self, temp_dir):
        path = temp_dir / "deep.json"
        path.write_text('{"k": ' * 5000 + '"answer"' + "}" * 5000)

        with pytest.raises(SystemExit) as exc_info:
            main(["check", str(path)])

        assert exc_info.value.code == 1
