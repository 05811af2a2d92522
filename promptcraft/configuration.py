"""Typed helpers for parsing promptcraft configuration dictionaries."""

from __future__ import annotations

import logging

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from promptcraft.exceptions import InvalidTemplateError
from promptcraft.formatting import (
    DEFAULT_TEMPLATE_FORMAT,
    ensure_template_format,
)

DEFAULT_CONFIG_NAME = "promptcraft.yaml"


def _resolve_path(
    value: Union[str, Path],
    *,
    config_root: Path,
) -> Path:
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = (config_root / path).resolve()
    return path


def _as_list(value: Any) -> list:
    if not value:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _coerce_level(value: Any) -> int:
    if isinstance(value, int):
        return value
    level = logging.getLevelName(str(value).upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown logging level '{value}'")
    return level


@dataclass(frozen=True)
class PluginSettings:
    modules: Tuple[str, ...] = field(default_factory=tuple)
    paths: Tuple[Path, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class LoggingSettings:
    level: int = logging.INFO
    log_file: Optional[Path] = None


@dataclass(frozen=True)
class PromptSettings:
    """Resolved settings for template lookup and formatting."""

    template_format: str = DEFAULT_TEMPLATE_FORMAT
    validate_template: bool = False
    template_dirs: Tuple[Path, ...] = field(default_factory=tuple)
    plugins: PluginSettings = field(default_factory=PluginSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "template_format": self.template_format,
            "validate_template": self.validate_template,
            "template_dirs": [str(path) for path in self.template_dirs],
            "plugins": {
                "modules": list(self.plugins.modules),
                "paths": [str(path) for path in self.plugins.paths],
            },
            "logging": {
                "level": logging.getLevelName(self.logging.level),
                "log_file": (
                    str(self.logging.log_file)
                    if self.logging.log_file
                    else None
                ),
            },
        }


def build_prompt_settings(
    config: Optional[Dict[str, Any]], *, config_root: Path
) -> PromptSettings:
    """Parse the ``prompting`` section of a config mapping."""

    prompt_cfg = dict((config or {}).get("prompting") or {})

    template_format = str(
        prompt_cfg.get("template_format", DEFAULT_TEMPLATE_FORMAT)
    )
    try:
        ensure_template_format(template_format)
    except InvalidTemplateError as exc:
        raise ValueError(str(exc)) from exc

    template_dirs = tuple(
        _resolve_path(item, config_root=config_root)
        for item in _as_list(prompt_cfg.get("template_dirs"))
    )

    plugin_cfg = dict(prompt_cfg.get("plugins") or {})
    plugins = PluginSettings(
        modules=tuple(str(mod) for mod in _as_list(plugin_cfg.get("modules"))),
        paths=tuple(
            _resolve_path(item, config_root=config_root)
            for item in _as_list(plugin_cfg.get("paths"))
        ),
    )

    logging_cfg = dict(prompt_cfg.get("logging") or {})
    log_file_value = logging_cfg.get("log_file")
    logging_settings = LoggingSettings(
        level=_coerce_level(logging_cfg.get("level", "INFO")),
        log_file=(
            _resolve_path(log_file_value, config_root=config_root)
            if log_file_value
            else None
        ),
    )

    return PromptSettings(
        template_format=template_format,
        validate_template=bool(prompt_cfg.get("validate_template", False)),
        template_dirs=template_dirs,
        plugins=plugins,
        logging=logging_settings,
    )


__all__ = [
    "LoggingSettings",
    "PluginSettings",
    "PromptSettings",
    "build_prompt_settings",
]
