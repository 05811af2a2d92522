"""Custom exceptions for prompt templating."""

from __future__ import annotations

from typing import Iterable


class PromptError(ValueError):
    """Base exception for prompt construction and formatting failures."""


class InvalidTemplateError(PromptError):
    """Raised when a template string cannot be parsed or validated."""


class MissingVariablesError(PromptError, KeyError):
    """Raised when formatting a template without all required variables."""

    def __init__(self, missing: Iterable[str]) -> None:
        self.missing = sorted(set(missing))
        super().__init__(
            f"Missing values for input variables: {self.missing}"
        )

    def __str__(self) -> str:
        return str(self.args[0])


class PromptLoadError(PromptError):
    """Raised when a prompt document cannot be loaded or saved."""


class ImageLoadError(PromptError):
    """Raised when a local image cannot be encoded for a prompt."""
