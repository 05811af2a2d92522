"""Load and save prompt templates as YAML or JSON documents."""

from __future__ import annotations

import json
import logging

from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from promptcraft.exceptions import PromptError, PromptLoadError
from promptcraft.formatting import DEFAULT_TEMPLATE_FORMAT
from promptcraft.templates.base import BasePromptTemplate
from promptcraft.templates.chat import ChatPromptTemplate
from promptcraft.templates.image import ImagePromptTemplate
from promptcraft.templates.string import PromptTemplate

YAML_SUFFIXES = {".yaml", ".yml"}
JSON_SUFFIXES = {".json"}
DOCUMENT_SUFFIXES = YAML_SUFFIXES | JSON_SUFFIXES

_LOGGER = logging.getLogger(__name__)


def _resolve(path_value: str, base_dir: Optional[Path]) -> Path:
    path = Path(path_value)
    if not path.is_absolute() and base_dir is not None:
        path = (base_dir / path).resolve()
    return path


def _partial_variables(config: Mapping[str, Any]) -> Dict[str, Any]:
    partials = config.get("partial_variables")
    if partials is None:
        return {}
    if not isinstance(partials, Mapping):
        raise PromptLoadError(
            "'partial_variables' must be a mapping, got "
            f"{type(partials).__name__}"
        )
    return dict(partials)


def _load_string_prompt(
    config: Mapping[str, Any], base_dir: Optional[Path]
) -> PromptTemplate:
    template = config.get("template")
    template_path = config.get("template_path")
    if template is not None and template_path is not None:
        raise PromptLoadError(
            "Specify either 'template' or 'template_path', not both"
        )
    if template_path is not None:
        path = _resolve(template_path, base_dir)
        if not path.exists():
            raise PromptLoadError(f"Template file not found: {path}")
        template = path.read_text(encoding="utf-8")
    if not isinstance(template, str):
        raise PromptLoadError("Prompt documents require a 'template' string")
    return PromptTemplate(
        template,
        config.get("input_variables"),
        template_format=config.get("template_format", DEFAULT_TEMPLATE_FORMAT),
        partial_variables=_partial_variables(config),
        validate_template=bool(config.get("validate_template", False)),
    )


def _load_chat_prompt(config: Mapping[str, Any]) -> ChatPromptTemplate:
    messages = config.get("messages")
    if not isinstance(messages, list) or not messages:
        raise PromptLoadError(
            "Chat documents require a non-empty 'messages' list"
        )
    normalized = [
        tuple(entry) if isinstance(entry, list) else entry
        for entry in messages
    ]
    return ChatPromptTemplate.from_messages(
        normalized,
        template_format=config.get("template_format", DEFAULT_TEMPLATE_FORMAT),
        partial_variables=_partial_variables(config),
    )


def _load_image_prompt(config: Mapping[str, Any]) -> ImagePromptTemplate:
    template = config.get("template")
    if not isinstance(template, Mapping):
        raise PromptLoadError("Image documents require a 'template' mapping")
    return ImagePromptTemplate(
        template,
        template_format=config.get("template_format", DEFAULT_TEMPLATE_FORMAT),
        partial_variables=_partial_variables(config),
    )


def load_prompt_from_config(
    config: Mapping[str, Any], base_dir: Optional[Path] = None
) -> BasePromptTemplate:
    """Build a prompt template from a parsed document."""

    if not isinstance(config, Mapping):
        raise PromptLoadError(
            f"Prompt document must be a mapping, got {type(config).__name__}"
        )
    kind = config.get("_type", "prompt")
    try:
        if kind == "prompt":
            return _load_string_prompt(config, base_dir)
        if kind == "chat":
            return _load_chat_prompt(config)
        if kind == "image":
            return _load_image_prompt(config)
    except PromptLoadError:
        raise
    except PromptError as exc:
        raise PromptLoadError(
            f"Invalid {kind} prompt document: {exc}"
        ) from exc
    raise PromptLoadError(
        f"Unknown prompt type '{kind}'; expected prompt, chat or image"
    )


def parse_prompt_document(text: str, suffix: str) -> Dict[str, Any]:
    """Parse a YAML or JSON prompt document from ``text``."""

    suffix = suffix.lower()
    try:
        if suffix in YAML_SUFFIXES:
            data = yaml.safe_load(text)
        elif suffix in JSON_SUFFIXES:
            data = json.loads(text)
        else:
            raise PromptLoadError(
                f"Unsupported prompt document type '{suffix}'"
            )
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise PromptLoadError(
            f"Could not parse prompt document: {exc}"
        ) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise PromptLoadError(
            f"Prompt document must be a mapping, got {type(data).__name__}"
        )
    return data


def load_prompt(
    path: str | Path, *, validate_template: Optional[bool] = None
) -> BasePromptTemplate:
    """Load a prompt template from a YAML or JSON file.

    ``validate_template`` is the default for documents that do not set it.
    """

    prompt_path = Path(path)
    if not prompt_path.exists():
        raise PromptLoadError(f"Prompt file '{prompt_path}' not found.")
    config = parse_prompt_document(
        prompt_path.read_text(encoding="utf-8"), prompt_path.suffix
    )
    if validate_template is not None:
        config.setdefault("validate_template", validate_template)
    _LOGGER.debug("Loading prompt from %s", prompt_path)
    return load_prompt_from_config(config, base_dir=prompt_path.parent)


def _has_callable_partials(config: Mapping[str, Any]) -> bool:
    scopes = [config, *config.get("messages", [])]
    return any(
        callable(value)
        for scope in scopes
        for value in scope.get("partial_variables", {}).values()
    )


def save_prompt(prompt: BasePromptTemplate, path: str | Path) -> Path:
    """Write ``prompt.to_config()`` as YAML or JSON based on the suffix."""

    target = Path(path)
    config = prompt.to_config()
    if _has_callable_partials(config):
        raise PromptLoadError("Cannot save prompts with callable partials")
    suffix = target.suffix.lower()
    if suffix in YAML_SUFFIXES:
        text = yaml.safe_dump(config, sort_keys=False, allow_unicode=True)
    elif suffix in JSON_SUFFIXES:
        text = json.dumps(config, indent=2, ensure_ascii=False)
    else:
        raise PromptLoadError(
            f"Unsupported prompt document type '{suffix}'; "
            "use .yaml, .yml or .json"
        )
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(text, encoding="utf-8")
    return target
