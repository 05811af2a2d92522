"""Registry for named prompt template factories."""

from __future__ import annotations

from typing import Callable, Dict, Optional

from promptcraft.templates.base import BasePromptTemplate

PromptFactory = Callable[[], BasePromptTemplate]

_PROMPTS: Dict[str, PromptFactory] = {}


def register_prompt(name: str, factory: PromptFactory) -> None:
    """Register a prompt factory under ``name``."""

    _PROMPTS[name] = factory


def unregister_prompt(name: str) -> None:
    """Remove the prompt factory for ``name`` if it exists."""

    _PROMPTS.pop(name, None)


def get_prompt(name: str) -> Optional[BasePromptTemplate]:
    """Return a fresh prompt instance for ``name`` if registered."""

    factory = _PROMPTS.get(name)
    return factory() if factory else None


def list_prompts() -> list[str]:
    return sorted(_PROMPTS)


def clear_prompt_registry() -> None:
    """Remove all registered prompt factories."""

    _PROMPTS.clear()
