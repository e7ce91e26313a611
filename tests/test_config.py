"""Tests for configuration loading."""

import logging
from pathlib import Path

from traincal.config import DEFAULT_TIMEZONE, Config, load_config


def write_conf(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "traincal.conf"
    path.write_text(text)
    return path


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(tmp_path / "nope.conf")
        assert config == Config()
        assert config.timezone == DEFAULT_TIMEZONE

    def test_parses_keys(self, tmp_path):
        path = write_conf(
            tmp_path,
            "# traincal settings\n"
            "TIMEZONE=America/Toronto\n"
            'PROGRAM_FILE="/tmp/plan.json" # quoted\n'
            "prod_id='-//Gym//EN'\n"
            "DEFAULT_START_TIME=07:00  # morning\n"
            "DEFAULT_END_TIME = 08:15\n"
            "not a setting\n",
        )
        config = load_config(path)
        assert config.timezone == "America/Toronto"
        assert config.program_file == Path("/tmp/plan.json")
        assert config.prod_id == "-//Gym//EN"
        assert config.default_start_time == "07:00"
        assert config.default_end_time == "08:15"

    def test_invalid_timezone_keeps_default(self, tmp_path, caplog):
        path = write_conf(tmp_path, "TIMEZONE=Mars/Olympus\n")
        with caplog.at_level(logging.WARNING, logger="traincal.config"):
            config = load_config(path)
        assert config.timezone == DEFAULT_TIMEZONE
        assert "Mars/Olympus" in caplog.text

    def test_program_file_expands_user(self, tmp_path):
        path = write_conf(tmp_path, "PROGRAM_FILE=~/plans/program.json\n")
        config = load_config(path)
        assert config.program_file == Path.home() / "plans" / "program.json"
