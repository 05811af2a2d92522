from __future__ import annotations

from promptcraft import PromptTemplate
from promptcraft.registry import (
    clear_prompt_registry,
    get_prompt,
    list_prompts,
    register_prompt,
    unregister_prompt,
)


def test_registry_returns_fresh_instances() -> None:
    register_prompt("joke", lambda: PromptTemplate.from_template("{topic}"))
    first = get_prompt("joke")
    second = get_prompt("joke")
    assert first is not None and second is not None
    assert first is not second
    assert first == second
    assert list_prompts() == ["joke"]


def test_unregister_and_clear() -> None:
    register_prompt("a", lambda: PromptTemplate.from_template("a"))
    register_prompt("b", lambda: PromptTemplate.from_template("b"))
    unregister_prompt("a")
    unregister_prompt("missing")
    assert list_prompts() == ["b"]
    clear_prompt_registry()
    assert get_prompt("b") is None
