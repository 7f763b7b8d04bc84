"""Tests for loading and saving the application configuration."""

import json

from tracksheet.core.annotations import AnnotationManager
from tracksheet.core.page import Position
from tracksheet.utils.config import AppConfig, load_config, save_config


def test_missing_file_gives_defaults(tmp_path):
    config = load_config(tmp_path / "missing.json", environ={})

    assert config == AppConfig()
    assert not config.uses_remote_storage


def test_file_values_are_converted(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"default_font_size": "14", "default_zoom": 2, "owner_id": "alice"}))

    config = load_config(path, environ={})

    assert config.default_font_size == 14
    assert config.default_zoom == 2.0
    assert config.owner_id == "alice"


def test_unknown_and_invalid_keys_are_ignored(tmp_path, caplog):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"colour": "blue", "request_timeout": "soon"}))

    config = load_config(path, environ={})

    assert config.request_timeout == 30.0
    assert "colour" in caplog.text


def test_malformed_file_gives_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{oops")

    assert load_config(path, environ={}) == AppConfig()


def test_environment_overrides_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"storage_url": "https://file.example.com"}))

    config = load_config(path, environ={
        "TRACKSHEET_STORAGE_URL": "https://env.example.com",
        "TRACKSHEET_LOG_LEVEL": "DEBUG",
    })

    assert config.storage_url == "https://env.example.com"
    assert config.log_level == "DEBUG"
    assert config.uses_remote_storage


def test_save_and_reload(tmp_path):
    path = tmp_path / "nested" / "config.json"
    config = AppConfig(owner_id="bob", default_font_family="Courier")

    save_config(config, path)

    assert load_config(path, environ={}) == config


def test_clamp_zoom():
    config = AppConfig(min_zoom=0.5, max_zoom=3.0)

    assert config.clamp_zoom(10) == 3.0
    assert config.clamp_zoom(0.1) == 0.5
    assert config.clamp_zoom(1.25) == 1.25


def test_resolved_data_dir_is_created(tmp_path):
    config = AppConfig(data_dir=str(tmp_path / "data"))

    assert config.resolved_data_dir().is_dir()


def test_unusable_font_defaults_fall_back(tmp_path, caplog):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"default_font_family": "Wingdings", "default_font_color": "red"}))

    config = load_config(path, environ={})

    assert config.default_font_family == "Helvetica"
    assert config.default_font_color == "#000000"
    assert "default_font_family" in caplog.text
    assert "default_font_color" in caplog.text


def test_font_defaults_give_a_placeable_draft(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"default_font_family": "Georgia", "default_font_color": "#1A2B3C"}))
    config = load_config(path, environ={})
    manager = AnnotationManager(config.default_font_size, config.default_font_family,
                                config.default_font_color)

    draft = manager.begin_placement(Position(0, 0.5, 0.5))

    assert draft.font_family == "Georgia"
    assert draft.font_color == "#1A2B3C"
