"""Image templates for multi-modal chat messages."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from promptcraft.exceptions import PromptError
from promptcraft.formatting import (
    DEFAULT_TEMPLATE_FORMAT,
    ensure_template_format,
    get_template_variables,
    render_template,
)
from promptcraft.images import image_to_data_url
from promptcraft.messages import HumanMessage
from promptcraft.templates.base import BasePromptTemplate, PartialValue
from promptcraft.values import ChatPromptValue

_IMAGE_KEYS = ("url", "path", "detail")


class ImagePromptTemplate(BasePromptTemplate):
    """Formats an ``image_url`` payload (``url`` or local ``path``)."""

    def __init__(
        self,
        template: Mapping[str, str],
        *,
        template_format: str = DEFAULT_TEMPLATE_FORMAT,
        partial_variables: Optional[Mapping[str, PartialValue]] = None,
    ) -> None:
        unknown = set(template) - set(_IMAGE_KEYS)
        if unknown:
            raise PromptError(
                f"Unsupported image template keys {sorted(unknown)}; "
                f"expected a subset of {list(_IMAGE_KEYS)}"
            )
        self.template = dict(template)
        self.template_format = ensure_template_format(template_format)
        variables: set[str] = set()
        for value in self.template.values():
            if isinstance(value, str):
                variables.update(
                    get_template_variables(value, self.template_format)
                )
        super().__init__(variables, partial_variables=partial_variables)

    @classmethod
    def from_url(
        cls,
        url: str,
        *,
        detail: Optional[str] = None,
        template_format: str = DEFAULT_TEMPLATE_FORMAT,
    ) -> "ImagePromptTemplate":
        template = {"url": url}
        if detail:
            template["detail"] = detail
        return cls(template, template_format=template_format)

    def format(self, **kwargs: Any) -> dict[str, str]:
        values = self._prepare_values(**kwargs)
        rendered = {
            key: render_template(value, self.template_format, values)
            if isinstance(value, str)
            else value
            for key, value in self.template.items()
        }
        path = rendered.pop("path", None)
        if path and not rendered.get("url"):
            rendered["url"] = image_to_data_url(path)
        if not rendered.get("url"):
            raise PromptError("Image template must produce a 'url' or 'path'")
        if not rendered.get("detail"):
            rendered.pop("detail", None)
        self._log_render(rendered["url"])
        return rendered

    def format_prompt(self, **kwargs: Any) -> ChatPromptValue:
        image = self.format(**kwargs)
        return ChatPromptValue(
            [HumanMessage([{"type": "image_url", "image_url": image}])]
        )

    def to_config(self) -> dict[str, Any]:
        config: dict[str, Any] = {
            "_type": "image",
            "template": dict(self.template),
            "template_format": self.template_format,
        }
        if self.partial_variables:
            config["partial_variables"] = dict(self.partial_variables)
        return config

    def __repr__(self) -> str:
        return f"ImagePromptTemplate(template={self.template!r})"
