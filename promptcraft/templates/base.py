"""Shared behavior for every prompt template."""

from __future__ import annotations

import logging

from abc import ABC, abstractmethod
from copy import copy
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Union

from promptcraft.exceptions import MissingVariablesError
from promptcraft.logging import redact
from promptcraft.values import PromptValue

PartialValue = Union[Any, Callable[[], Any]]

_LOGGER = logging.getLogger(__name__)


class BasePromptTemplate(ABC):
    """Template with named inputs that formats into a prompt value.

    ``partial_variables`` are bound ahead of time; callables are invoked
    each time the template is formatted, so values such as the current date
    stay fresh.
    """

    def __init__(
        self,
        input_variables: Iterable[str] = (),
        *,
        optional_variables: Iterable[str] = (),
        partial_variables: Optional[Mapping[str, PartialValue]] = None,
    ) -> None:
        self.partial_variables: Dict[str, PartialValue] = dict(
            partial_variables or {}
        )
        self.optional_variables = sorted(set(optional_variables))
        self.input_variables = sorted(
            set(input_variables)
            - set(self.partial_variables)
            - set(self.optional_variables)
        )

    @abstractmethod
    def format(self, **kwargs: Any) -> Any:
        """Fill the template with ``kwargs``."""

    @abstractmethod
    def format_prompt(self, **kwargs: Any) -> PromptValue:
        """Fill the template and wrap the result in a prompt value."""

    @abstractmethod
    def to_config(self) -> dict[str, Any]:
        """Return a serializable description of the template."""

    async def aformat(self, **kwargs: Any) -> Any:
        return self.format(**kwargs)

    async def aformat_prompt(self, **kwargs: Any) -> PromptValue:
        return self.format_prompt(**kwargs)

    def invoke(self, values: Mapping[str, Any]) -> PromptValue:
        """Format from a mapping of variable values."""

        return self.format_prompt(**self._coerce_input(values))

    async def ainvoke(self, values: Mapping[str, Any]) -> PromptValue:
        return await self.aformat_prompt(**self._coerce_input(values))

    def partial(self, **kwargs: PartialValue) -> "BasePromptTemplate":
        """Return a copy with ``kwargs`` bound as partial variables."""

        clone = copy(self)
        clone.partial_variables = {**self.partial_variables, **kwargs}
        clone.input_variables = [
            name for name in self.input_variables if name not in kwargs
        ]
        return clone

    def _merge_partial_and_user_variables(
        self, **kwargs: Any
    ) -> Dict[str, Any]:
        resolved = {
            name: value() if callable(value) else value
            for name, value in self.partial_variables.items()
        }
        return {**resolved, **kwargs}

    def _prepare_values(self, **kwargs: Any) -> Dict[str, Any]:
        values = self._merge_partial_and_user_variables(**kwargs)
        missing = [name for name in self.input_variables if name not in values]
        if missing:
            raise MissingVariablesError(missing)
        return values

    def _coerce_input(self, values: Mapping[str, Any]) -> Dict[str, Any]:
        if not isinstance(values, Mapping):
            raise TypeError(
                f"{type(self).__name__} expects a mapping of input "
                f"variables, got {type(values).__name__}"
            )
        return dict(values)

    def _log_render(self, text: str) -> None:
        if _LOGGER.isEnabledFor(logging.DEBUG):
            _LOGGER.debug(
                "Rendered %s: %s", type(self).__name__, redact(text)[:500]
            )

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.to_config() == other.to_config()

    __hash__ = None  # type: ignore[assignment]
