"""Role-tagged chat messages exchanged with a conversational model."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Iterable, Mapping, Optional, Sequence, Union

from promptcraft.exceptions import PromptError

ContentBlock = Mapping[str, Any]
Content = Union[str, list]

ROLE_ALIASES = {
    "system": "system",
    "human": "human",
    "user": "human",
    "ai": "ai",
    "assistant": "ai",
}

_PROVIDER_ROLES = {
    "system": "system",
    "human": "user",
    "ai": "assistant",
}


@dataclass(slots=True)
class BaseMessage:
    """Single chat message; ``content`` is text or a list of content blocks."""

    type: ClassVar[str] = "base"

    content: Content
    name: Optional[str] = field(default=None, kw_only=True)
    metadata: dict[str, Any] = field(default_factory=dict, kw_only=True)

    @property
    def role(self) -> str:
        return _PROVIDER_ROLES.get(self.type, self.type)

    @property
    def text(self) -> str:
        """Concatenated text of the message, ignoring non-text blocks."""

        if isinstance(self.content, str):
            return self.content
        parts = []
        for block in self.content:
            if isinstance(block, str):
                parts.append(block)
            elif block.get("type") == "text":
                parts.append(str(block.get("text", "")))
        return "".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Return a provider-ready ``{"role", "content"}`` mapping."""

        if isinstance(self.content, str):
            content: Content = self.content
        else:
            content = [_copy_block(block) for block in self.content]
        payload: dict[str, Any] = {"role": self.role, "content": content}
        if self.name:
            payload["name"] = self.name
        return payload

    def pretty_repr(self) -> str:
        title = f" {self.type.title()} Message "
        header = title.center(80, "=")
        if self.name:
            header += f"\nName: {self.name}"
        body = self.content if isinstance(self.content, str) else _describe(
            self.content
        )
        return f"{header}\n\n{body}"


@dataclass(slots=True)
class SystemMessage(BaseMessage):
    type: ClassVar[str] = "system"


@dataclass(slots=True)
class HumanMessage(BaseMessage):
    type: ClassVar[str] = "human"


@dataclass(slots=True)
class AIMessage(BaseMessage):
    type: ClassVar[str] = "ai"


@dataclass(slots=True)
class ChatMessage(BaseMessage):
    """Message with an arbitrary role (e.g. ``"critic"``)."""

    type: ClassVar[str] = "chat"

    role: str = field(kw_only=True)  # type: ignore[assignment]


_CLASSES = {
    "system": SystemMessage,
    "human": HumanMessage,
    "ai": AIMessage,
}


def _copy_block(block: Any) -> Any:
    if isinstance(block, Mapping):
        return {
            key: dict(value) if isinstance(value, Mapping) else value
            for key, value in block.items()
        }
    return block


def _describe(blocks: Sequence[Any]) -> str:
    lines = []
    for block in blocks:
        if isinstance(block, str):
            lines.append(block)
        elif block.get("type") == "text":
            lines.append(str(block.get("text", "")))
        elif block.get("type") == "image_url":
            image = block.get("image_url") or {}
            url = image.get("url", "") if isinstance(image, Mapping) else image
            if url.startswith("data:"):
                url = url.split(",", 1)[0] + ",..."
            lines.append(f"[image: {url}]")
        else:
            lines.append(f"[{block.get('type', 'unknown')}]")
    return "\n".join(lines)


def message_from_role(
    role: str, content: Content, **kwargs: Any
) -> BaseMessage:
    """Build the message class matching ``role`` (aliases included)."""

    key = ROLE_ALIASES.get(role.lower())
    if key is None:
        return ChatMessage(content, role=role, **kwargs)
    return _CLASSES[key](content, **kwargs)


def convert_to_messages(values: Iterable[Any]) -> list[BaseMessage]:
    """Coerce messages, ``(role, content)`` pairs, dicts and strings."""

    if isinstance(values, (str, BaseMessage, Mapping)):
        values = [values]
    messages: list[BaseMessage] = []
    for value in values:
        if isinstance(value, BaseMessage):
            messages.append(value)
        elif isinstance(value, str):
            messages.append(HumanMessage(value))
        elif isinstance(value, Mapping):
            if "role" not in value or "content" not in value:
                raise PromptError(
                    "Message dicts require 'role' and 'content' keys, "
                    f"got {sorted(value)}"
                )
            extra = {}
            if value.get("name"):
                extra["name"] = value["name"]
            messages.append(
                message_from_role(value["role"], value["content"], **extra)
            )
        elif isinstance(value, (tuple, list)) and len(value) == 2:
            role, content = value
            messages.append(message_from_role(str(role), content))
        else:
            raise PromptError(
                f"Cannot convert {type(value).__name__} to a chat message"
            )
    return messages


def get_buffer_string(
    messages: Sequence[BaseMessage],
    human_prefix: str = "Human",
    ai_prefix: str = "AI",
) -> str:
    """Render messages as a plain ``"Role: text"`` transcript."""

    lines = []
    for message in messages:
        if isinstance(message, HumanMessage):
            prefix = human_prefix
        elif isinstance(message, AIMessage):
            prefix = ai_prefix
        elif isinstance(message, SystemMessage):
            prefix = "System"
        elif isinstance(message, ChatMessage):
            prefix = message.role
        else:
            prefix = message.type
        lines.append(f"{prefix}: {message.text}")
    return "\n".join(lines)
