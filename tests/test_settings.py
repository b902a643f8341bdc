import json
import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from apex_academy.config_loader import load_settings, read_settings_file
from apex_academy.settings import Settings, configure_logging, get_settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (
        "APEX_CONTENT_ROOT",
        "APEX_WORDS_PER_MINUTE",
        "APEX_RELATED_LIMIT",
        "APEX_LOAD_WORKERS",
        "APEX_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults():
    settings = Settings()

    assert settings.content_root == Path("content")
    assert settings.words_per_minute == 200
    assert settings.related_limit == 3
    assert settings.load_workers == 1
    assert settings.log_level == "INFO"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("APEX_CONTENT_ROOT", "/srv/content")
    monkeypatch.setenv("APEX_WORDS_PER_MINUTE", "250")
    monkeypatch.setenv("APEX_LOAD_WORKERS", "4")
    monkeypatch.setenv("APEX_LOG_LEVEL", "debug")

    settings = Settings()

    assert settings.content_root == Path("/srv/content")
    assert settings.words_per_minute == 250
    assert settings.load_workers == 4
    assert settings.log_level == "DEBUG"


def test_non_positive_values_are_rejected(monkeypatch):
    with pytest.raises(ValidationError):
        Settings(words_per_minute=0)

    monkeypatch.setenv("APEX_RELATED_LIMIT", "-1")
    with pytest.raises(ValidationError):
        Settings()


def test_unknown_log_level_is_rejected():
    with pytest.raises(ValidationError):
        Settings(log_level="LOUD")


def test_settings_are_frozen():
    settings = Settings()
    with pytest.raises(ValidationError):
        settings.related_limit = 10


def test_get_settings_is_cached(monkeypatch):
    first = get_settings()
    monkeypatch.setenv("APEX_RELATED_LIMIT", "7")

    assert get_settings() is first
    get_settings.cache_clear()
    assert get_settings().related_limit == 7


def test_load_settings_from_yaml_resolves_relative_root(tmp_path):
    path = tmp_path / "site.yaml"
    path.write_text("content_root: docs\nrelated_limit: 5\n", encoding="utf-8")

    settings = load_settings(path)

    assert settings.content_root == (tmp_path / "docs").resolve()
    assert settings.related_limit == 5
    assert settings.words_per_minute == 200


def test_load_settings_from_toml_and_json(tmp_path):
    toml_path = tmp_path / "site.toml"
    toml_path.write_text('content_root = "/abs/content"\nwords_per_minute = 180\n', encoding="utf-8")
    json_path = tmp_path / "site.json"
    json_path.write_text(json.dumps({"load_workers": 3}), encoding="utf-8")

    from_toml = load_settings(toml_path)
    from_json = load_settings(json_path)

    assert from_toml.content_root == Path("/abs/content")
    assert from_toml.words_per_minute == 180
    assert from_json.load_workers == 3
    assert from_json.content_root == Path("content")


def test_load_settings_rejects_bad_files(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "missing.yaml")

    unsupported = tmp_path / "site.ini"
    unsupported.write_text("[x]\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_settings(unsupported)

    listing = tmp_path / "site.yml"
    listing.write_text("- one\n- two\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_settings(listing)

    invalid = tmp_path / "bad.json"
    invalid.write_text(json.dumps({"related_limit": 0}), encoding="utf-8")
    with pytest.raises(ValidationError):
        load_settings(invalid)


def test_configure_logging_sets_package_level():
    configure_logging("WARNING")
    assert logging.getLogger("apex_academy").level == logging.WARNING

    configure_logging(logging.DEBUG)
    assert logging.getLogger("apex_academy").level == logging.DEBUG


def test_read_settings_file_accepts_empty_files_and_names_supported_formats(tmp_path):
    empty = tmp_path / "empty.yaml"
    empty.write_text("", encoding="utf-8")
    unsupported = tmp_path / "site.cfg"
    unsupported.write_text("x=1\n", encoding="utf-8")

    assert read_settings_file(empty) == {}
    assert load_settings(empty).related_limit == 3
    with pytest.raises(ValueError, match=r"\.toml"):
        read_settings_file(unsupported)
