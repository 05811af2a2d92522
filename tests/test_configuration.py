from __future__ import annotations

import logging

from pathlib import Path

import pytest

from promptcraft.configuration import PromptSettings, build_prompt_settings


def test_build_prompt_settings_resolves_paths(tmp_path: Path) -> None:
    config = {
        "prompting": {
            "template_format": "jinja2",
            "validate_template": True,
            "template_dirs": ["prompts", "/abs/prompts"],
            "plugins": {"modules": ["my_prompts"], "paths": "plugins"},
            "logging": {"level": "debug", "log_file": "logs/run.log"},
        }
    }
    settings = build_prompt_settings(config, config_root=tmp_path)
    assert settings.template_format == "jinja2"
    assert settings.validate_template is True
    assert settings.template_dirs == (
        (tmp_path / "prompts").resolve(),
        Path("/abs/prompts"),
    )
    assert settings.plugins.modules == ("my_prompts",)
    assert settings.plugins.paths == ((tmp_path / "plugins").resolve(),)
    assert settings.logging.level == logging.DEBUG
    assert settings.logging.log_file == (tmp_path / "logs/run.log").resolve()
    assert settings.to_dict()["logging"]["level"] == "DEBUG"


def test_defaults_when_section_missing(tmp_path: Path) -> None:
    settings = build_prompt_settings({}, config_root=tmp_path)
    assert settings == PromptSettings()
    assert build_prompt_settings(None, config_root=tmp_path) == settings


def test_invalid_values_raise(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="Unsupported template format"):
        build_prompt_settings(
            {"prompting": {"template_format": "mustache"}},
            config_root=tmp_path,
        )
    with pytest.raises(ValueError, match="logging level"):
        build_prompt_settings(
            {"prompting": {"logging": {"level": "chatty"}}},
            config_root=tmp_path,
        )
