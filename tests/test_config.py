"""Tests for YAML configuration loading."""

from pathlib import Path

import pytest

from user_dictionary.config import DEFAULT_DB_PATH, Settings, load_config
from user_dictionary.exceptions import ConfigError


class TestLoadConfig:

    def test_defaults(self):
        settings = load_config()
        assert settings == Settings()
        assert settings.database == DEFAULT_DB_PATH
        assert settings.speller_limit == 3
        assert settings.match == "prefix"

    def test_from_yaml_string(self):
        settings = load_config(
            "locale: se\n"
            "log_level: debug\n"
            "suggestions:\n"
            "  speller_limit: 5\n"
            "  match: substring\n"
            "  limit: 8\n"
            "speller:\n"
            "  wordnet: oewn:2024\n"
        )
        assert settings.locale == "se"
        assert settings.log_level == "DEBUG"
        assert settings.speller_limit == 5
        assert settings.match == "substring"
        assert settings.limit == 8
        assert settings.wordnet == "oewn:2024"

    def test_from_dict(self):
        settings = load_config({"database": "/tmp/words.sqlite3"})
        assert settings.database == Path("/tmp/words.sqlite3")

    def test_from_file(self, tmp_path):
        path = tmp_path / "userdict.yaml"
        path.write_text("locale: fi\nspeller:\n  wordlist: ~/fi.txt\n", encoding="utf-8")
        settings = load_config(path)
        assert settings.locale == "fi"
        assert settings.wordlist == Path("~/fi.txt").expanduser()
        assert settings.source_file == path

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path).locale == "en"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")


class TestInvalidConfig:

    def test_invalid_yaml_reports_line(self):
        with pytest.raises(ConfigError) as exc_info:
            load_config("locale: en\nsuggestions: [unclosed\n")
        assert exc_info.value.line is not None

    def test_root_must_be_mapping(self):
        with pytest.raises(ConfigError, match="mapping"):
            load_config("- a\n- b\n")

    def test_unknown_key(self):
        with pytest.raises(ConfigError, match="Unknown key"):
            load_config({"colour": "blue"})

    def test_unknown_section_key(self):
        with pytest.raises(ConfigError, match="suggestions"):
            load_config({"suggestions": {"fuzzy": True}})

    @pytest.mark.parametrize("value", [-1, "3", True, 2.5])
    def test_bad_speller_limit(self, value):
        with pytest.raises(ConfigError, match="speller_limit"):
            load_config({"suggestions": {"speller_limit": value}})

    def test_bad_match_mode(self):
        with pytest.raises(ConfigError, match="match"):
            load_config({"suggestions": {"match": "fuzzy"}})

    def test_bad_log_level(self):
        with pytest.raises(ConfigError, match="log level"):
            load_config({"log_level": "loud"})

    def test_empty_locale(self):
        with pytest.raises(ConfigError, match="locale"):
            load_config({"locale": ""})
