"""Quickstart prompts; importing registers them by name."""

from examples.quickstart import prompts  # noqa: F401
