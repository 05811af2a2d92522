"""Formatted prompt values handed to a model."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from promptcraft.messages import BaseMessage, HumanMessage, get_buffer_string


class PromptValue:
    """Common interface for the output of ``format_prompt``."""

    __slots__ = ()

    def to_string(self) -> str:
        raise NotImplementedError

    def to_messages(self) -> list[BaseMessage]:
        raise NotImplementedError

    def to_dicts(self) -> list[dict[str, Any]]:
        return [message.to_dict() for message in self.to_messages()]


@dataclass(slots=True)
class StringPromptValue(PromptValue):
    text: str

    def to_string(self) -> str:
        return self.text

    def to_messages(self) -> list[BaseMessage]:
        return [HumanMessage(self.text)]


@dataclass(slots=True)
class ChatPromptValue(PromptValue):
    messages: list[BaseMessage] = field(default_factory=list)

    def to_string(self) -> str:
        return get_buffer_string(self.messages)

    def to_messages(self) -> list[BaseMessage]:
        return list(self.messages)
