"""Expose the project root on sys.path for pytest runs."""

from __future__ import annotations

import base64
import sys

from pathlib import Path

import pytest

from promptcraft.registry import clear_prompt_registry

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# 1x1 transparent PNG
PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)


@pytest.fixture(autouse=True)
def _clean_registry():
    clear_prompt_registry()
    yield
    clear_prompt_registry()


@pytest.fixture()
def png_file(tmp_path: Path) -> Path:
    """Write a tiny PNG image and return its path."""

    path = tmp_path / "pixel.png"
    path.write_bytes(PNG_BYTES)
    return path


@pytest.fixture()
def prompt_dir(tmp_path: Path) -> Path:
    """Return a template directory with one file of each supported kind."""

    root = tmp_path / "prompts"
    root.mkdir()
    (root / "joke.txt").write_text(
        "Tell me a {adjective} joke about {content}.", encoding="utf-8"
    )
    (root / "greeting.j2").write_text(
        "{% include 'header.j2' %}Hello {{ name }}!", encoding="utf-8"
    )
    (root / "header.j2").write_text("[{{ team }}] ", encoding="utf-8")
    (root / "assistant.yaml").write_text(
        "_type: chat\n"
        "messages:\n"
        "  - [system, 'You are a helpful AI bot. Your name is {name}.']\n"
        "  - role: placeholder\n"
        "    content: '{history}'\n"
        "  - [human, '{user_input}']\n",
        encoding="utf-8",
    )
    return root
