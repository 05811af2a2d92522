"""String prompt templates built from format strings."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

from promptcraft.exceptions import PromptError
from promptcraft.formatting import (
    DEFAULT_TEMPLATE_FORMAT,
    check_valid_template,
    ensure_template_format,
    get_template_variables,
    render_template,
)
from promptcraft.templates.base import BasePromptTemplate, PartialValue
from promptcraft.values import StringPromptValue


class PromptTemplate(BasePromptTemplate):
    """Reusable text pattern with named placeholders.

    Example::

        prompt = PromptTemplate.from_template(
            "Tell me a {adjective} joke about {content}."
        )
        prompt.input_variables  # ['adjective', 'content']
        prompt.format(adjective="funny", content="chickens")
    """

    def __init__(
        self,
        template: str,
        input_variables: Optional[Iterable[str]] = None,
        *,
        template_format: str = DEFAULT_TEMPLATE_FORMAT,
        partial_variables: Optional[Mapping[str, PartialValue]] = None,
        validate_template: bool = False,
    ) -> None:
        self.template = template
        self.template_format = ensure_template_format(template_format)
        inferred = get_template_variables(template, self.template_format)
        if input_variables is None:
            input_variables = inferred
        elif validate_template:
            check_valid_template(
                template,
                self.template_format,
                set(input_variables) | set(partial_variables or {}),
            )
        super().__init__(
            input_variables, partial_variables=partial_variables
        )

    @classmethod
    def from_template(
        cls,
        template: str,
        *,
        template_format: str = DEFAULT_TEMPLATE_FORMAT,
        partial_variables: Optional[Mapping[str, PartialValue]] = None,
    ) -> "PromptTemplate":
        """Build a template, inferring input variables from ``template``."""

        return cls(
            template,
            template_format=template_format,
            partial_variables=partial_variables,
        )

    @classmethod
    def from_file(
        cls,
        template_file: str | Path,
        *,
        encoding: str = "utf-8",
        template_format: str = DEFAULT_TEMPLATE_FORMAT,
        partial_variables: Optional[Mapping[str, PartialValue]] = None,
    ) -> "PromptTemplate":
        text = Path(template_file).read_text(encoding=encoding)
        return cls.from_template(
            text,
            template_format=template_format,
            partial_variables=partial_variables,
        )

    def format(self, **kwargs: Any) -> str:
        values = self._prepare_values(**kwargs)
        text = render_template(self.template, self.template_format, values)
        self._log_render(text)
        return text

    def format_prompt(self, **kwargs: Any) -> StringPromptValue:
        return StringPromptValue(self.format(**kwargs))

    def to_config(self) -> dict[str, Any]:
        config: dict[str, Any] = {
            "_type": "prompt",
            "template": self.template,
            "template_format": self.template_format,
            "input_variables": list(self.input_variables),
        }
        if self.partial_variables:
            config["partial_variables"] = dict(self.partial_variables)
        return config

    def __add__(self, other: Any) -> "PromptTemplate":
        if isinstance(other, str):
            other = PromptTemplate.from_template(
                other, template_format=self.template_format
            )
        if not isinstance(other, PromptTemplate):
            return NotImplemented
        if other.template_format != self.template_format:
            raise PromptError(
                "Cannot concatenate templates with different formats "
                f"({self.template_format} + {other.template_format})"
            )
        for name in set(self.partial_variables) & set(other.partial_variables):
            if self.partial_variables[name] != other.partial_variables[name]:
                raise PromptError(
                    f"Conflicting partial values for variable '{name}'"
                )
        return PromptTemplate(
            self.template + other.template,
            set(self.input_variables) | set(other.input_variables),
            template_format=self.template_format,
            partial_variables={
                **self.partial_variables,
                **other.partial_variables,
            },
        )

    def __repr__(self) -> str:
        return (
            f"PromptTemplate(input_variables={self.input_variables!r}, "
            f"template={self.template!r}, "
            f"template_format={self.template_format!r})"
        )

    def pretty_repr(self) -> str:
        return self.template
