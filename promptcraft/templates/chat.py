"""Chat prompt templates: role-tagged message templates and placeholders."""

from __future__ import annotations

import logging

from abc import ABC, abstractmethod
from pathlib import Path
from typing import (
    Any,
    ClassVar,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Type,
    Union,
)

from promptcraft.exceptions import MissingVariablesError, PromptError
from promptcraft.formatting import (
    DEFAULT_TEMPLATE_FORMAT,
    ensure_template_format,
    get_template_variables,
)
from promptcraft.messages import (
    ROLE_ALIASES,
    AIMessage,
    BaseMessage,
    ChatMessage,
    HumanMessage,
    SystemMessage,
    convert_to_messages,
    message_from_role,
)
from promptcraft.templates.base import BasePromptTemplate, PartialValue
from promptcraft.templates.image import ImagePromptTemplate
from promptcraft.templates.string import PromptTemplate
from promptcraft.values import ChatPromptValue

_LOGGER = logging.getLogger(__name__)

BlockTemplate = Union[PromptTemplate, ImagePromptTemplate]


class BaseMessagePromptTemplate(ABC):
    """Produces zero or more messages when a chat prompt is formatted."""

    @property
    @abstractmethod
    def input_variables(self) -> List[str]:
        """Variables required to format this template."""

    @property
    def optional_variables(self) -> List[str]:
        return []

    @abstractmethod
    def format_messages(self, **kwargs: Any) -> List[BaseMessage]:
        """Format into a list of messages."""

    async def aformat_messages(self, **kwargs: Any) -> List[BaseMessage]:
        return self.format_messages(**kwargs)

    @abstractmethod
    def to_config(self) -> dict[str, Any]:
        """Serializable description used by ``ChatPromptTemplate``."""

    @abstractmethod
    def pretty_repr(self) -> str:
        """Human readable rendering of the template."""

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.to_config() == other.to_config()

    __hash__ = None  # type: ignore[assignment]


class MessagesPlaceholder(BaseMessagePromptTemplate):
    """Splices a list of messages (e.g. chat history) into the prompt."""

    def __init__(
        self,
        variable_name: str,
        *,
        optional: bool = False,
        n_messages: Optional[int] = None,
    ) -> None:
        if n_messages is not None and n_messages < 1:
            raise PromptError("n_messages must be a positive integer")
        self.variable_name = variable_name
        self.optional = optional
        self.n_messages = n_messages

    @property
    def input_variables(self) -> List[str]:
        return [] if self.optional else [self.variable_name]

    @property
    def optional_variables(self) -> List[str]:
        return [self.variable_name] if self.optional else []

    def format_messages(self, **kwargs: Any) -> List[BaseMessage]:
        if self.variable_name not in kwargs:
            if self.optional:
                return []
            raise MissingVariablesError([self.variable_name])
        value = kwargs[self.variable_name]
        if value is None and self.optional:
            return []
        if not isinstance(value, (list, tuple)):
            raise PromptError(
                f"Variable '{self.variable_name}' must be a list of "
                f"messages, got {type(value).__name__}"
            )
        messages = convert_to_messages(value)
        if self.n_messages:
            messages = messages[-self.n_messages :]
        return messages

    def to_config(self) -> dict[str, Any]:
        config: dict[str, Any] = {
            "role": "placeholder",
            "variable_name": self.variable_name,
            "optional": self.optional,
        }
        if self.n_messages:
            config["n_messages"] = self.n_messages
        return config

    def pretty_repr(self) -> str:
        title = " Messages Placeholder ".center(80, "=")
        return f"{title}\n\n{{{self.variable_name}}}"

    def __repr__(self) -> str:
        return (
            f"MessagesPlaceholder(variable_name={self.variable_name!r}, "
            f"optional={self.optional!r}, "
            f"n_messages={self.n_messages!r})"
        )


def _block_templates(
    template: Sequence[Any],
    template_format: str,
    partial_variables: Optional[Mapping[str, PartialValue]],
) -> List[BlockTemplate]:
    blocks: List[BlockTemplate] = []
    for item in template:
        if isinstance(item, str):
            blocks.append(
                PromptTemplate.from_template(
                    item,
                    template_format=template_format,
                    partial_variables=partial_variables,
                )
            )
            continue
        if not isinstance(item, Mapping):
            raise PromptError(
                f"Unsupported content block {type(item).__name__}"
            )
        kind = item.get("type")
        if kind == "text" or (kind is None and "text" in item):
            blocks.append(
                PromptTemplate.from_template(
                    item["text"],
                    template_format=template_format,
                    partial_variables=partial_variables,
                )
            )
        elif kind == "image_url" or (kind is None and "image_url" in item):
            image = item["image_url"]
            if isinstance(image, str):
                image = {"url": image}
            blocks.append(
                ImagePromptTemplate(
                    image,
                    template_format=template_format,
                    partial_variables=partial_variables,
                )
            )
        else:
            raise PromptError(f"Unsupported content block type '{kind}'")
    return blocks


class MessagePromptTemplate(BaseMessagePromptTemplate):
    """Template for a single message of a fixed role.

    ``prompt`` is either one string template (text content) or a list of
    block templates (multi-modal content).
    """

    message_class: ClassVar[Type[BaseMessage]] = HumanMessage
    role: ClassVar[str] = "human"

    def __init__(
        self,
        prompt: Union[PromptTemplate, Sequence[BlockTemplate]],
        *,
        name: Optional[str] = None,
    ) -> None:
        self.prompt: Union[PromptTemplate, List[BlockTemplate]] = (
            prompt if isinstance(prompt, PromptTemplate) else list(prompt)
        )
        self.name = name

    @classmethod
    def from_template(
        cls,
        template: Union[str, Sequence[Any]],
        *,
        template_format: str = DEFAULT_TEMPLATE_FORMAT,
        partial_variables: Optional[Mapping[str, PartialValue]] = None,
        **kwargs: Any,
    ) -> "MessagePromptTemplate":
        if isinstance(template, str):
            prompt: Union[PromptTemplate, List[BlockTemplate]] = (
                PromptTemplate.from_template(
                    template,
                    template_format=template_format,
                    partial_variables=partial_variables,
                )
            )
        elif isinstance(template, (list, tuple)):
            prompt = _block_templates(
                template, template_format, partial_variables
            )
        else:
            raise PromptError(
                f"Message template must be a string or a list of content "
                f"blocks, got {type(template).__name__}"
            )
        return cls(prompt, **kwargs)

    @classmethod
    def from_template_file(
        cls,
        template_file: str | Path,
        *,
        template_format: str = DEFAULT_TEMPLATE_FORMAT,
        **kwargs: Any,
    ) -> "MessagePromptTemplate":
        prompt = PromptTemplate.from_file(
            template_file, template_format=template_format
        )
        return cls(prompt, **kwargs)

    @property
    def is_multimodal(self) -> bool:
        return not isinstance(self.prompt, PromptTemplate)

    @property
    def input_variables(self) -> List[str]:
        if isinstance(self.prompt, PromptTemplate):
            return list(self.prompt.input_variables)
        names: set[str] = set()
        for block in self.prompt:
            names.update(block.input_variables)
        return sorted(names)

    def _build_message(self, content: Any) -> BaseMessage:
        return self.message_class(content, name=self.name)

    def format(self, **kwargs: Any) -> BaseMessage:
        if isinstance(self.prompt, PromptTemplate):
            return self._build_message(self.prompt.format(**kwargs))
        content = []
        for block in self.prompt:
            if isinstance(block, ImagePromptTemplate):
                content.append(
                    {"type": "image_url", "image_url": block.format(**kwargs)}
                )
            else:
                text = block.format(**kwargs)
                content.append({"type": "text", "text": text})
        return self._build_message(content)

    async def aformat(self, **kwargs: Any) -> BaseMessage:
        if isinstance(self.prompt, PromptTemplate):
            return self._build_message(await self.prompt.aformat(**kwargs))
        content = []
        for block in self.prompt:
            value = await block.aformat(**kwargs)
            if isinstance(block, ImagePromptTemplate):
                content.append({"type": "image_url", "image_url": value})
            else:
                content.append({"type": "text", "text": value})
        return self._build_message(content)

    def format_messages(self, **kwargs: Any) -> List[BaseMessage]:
        return [self.format(**kwargs)]

    async def aformat_messages(self, **kwargs: Any) -> List[BaseMessage]:
        return [await self.aformat(**kwargs)]

    def _content_config(self) -> Any:
        if isinstance(self.prompt, PromptTemplate):
            return self.prompt.template
        blocks = []
        for block in self.prompt:
            if isinstance(block, ImagePromptTemplate):
                blocks.append(
                    {"type": "image_url", "image_url": dict(block.template)}
                )
            else:
                blocks.append({"type": "text", "text": block.template})
        return blocks

    def _partial_config(self) -> dict[str, PartialValue]:
        blocks = (
            [self.prompt]
            if isinstance(self.prompt, PromptTemplate)
            else self.prompt
        )
        partials: dict[str, PartialValue] = {}
        for block in blocks:
            partials.update(block.partial_variables)
        return partials

    def to_config(self) -> dict[str, Any]:
        config: dict[str, Any] = {
            "role": self.role,
            "content": self._content_config(),
        }
        if self.name:
            config["name"] = self.name
        partials = self._partial_config()
        if partials:
            config["partial_variables"] = partials
        return config

    def pretty_repr(self) -> str:
        title = f" {self.message_class.type.title()} Message ".center(80, "=")
        content = self._content_config()
        if isinstance(content, list):
            lines = []
            for block in content:
                if block["type"] == "text":
                    lines.append(block["text"])
                else:
                    image = block["image_url"]
                    lines.append(
                        f"[image: {image.get('url') or image.get('path')}]"
                    )
            content = "\n".join(lines)
        return f"{title}\n\n{content}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(prompt={self.prompt!r})"


class SystemMessagePromptTemplate(MessagePromptTemplate):
    message_class = SystemMessage
    role = "system"


class HumanMessagePromptTemplate(MessagePromptTemplate):
    message_class = HumanMessage
    role = "human"


class AIMessagePromptTemplate(MessagePromptTemplate):
    message_class = AIMessage
    role = "ai"


class ChatMessagePromptTemplate(MessagePromptTemplate):
    """Message template for an arbitrary role name."""

    message_class = ChatMessage

    def __init__(
        self,
        prompt: Union[PromptTemplate, Sequence[BlockTemplate]],
        *,
        role: str,
        name: Optional[str] = None,
    ) -> None:
        super().__init__(prompt, name=name)
        self.role = role  # type: ignore[misc]

    def _build_message(self, content: Any) -> BaseMessage:
        return ChatMessage(content, role=self.role, name=self.name)


_ROLE_TEMPLATES: dict[str, Type[MessagePromptTemplate]] = {
    "system": SystemMessagePromptTemplate,
    "human": HumanMessagePromptTemplate,
    "ai": AIMessagePromptTemplate,
}

MessageLike = Union[
    BaseMessagePromptTemplate,
    BaseMessage,
    "ChatPromptTemplate",
    tuple,
    Mapping[str, Any],
    str,
]


def _placeholder_from_template(
    template: Any, template_format: str
) -> MessagesPlaceholder:
    if not isinstance(template, str):
        raise PromptError(
            "Placeholder messages take a single variable such as "
            "'{history}'"
        )
    names = get_template_variables(template, template_format)
    if len(names) != 1:
        raise PromptError(
            f"Placeholder template {template!r} must reference exactly one "
            f"variable, found {names}"
        )
    return MessagesPlaceholder(names[0], optional=True)


def _template_from_role(
    role: str,
    template: Any,
    template_format: str,
    name: Optional[str] = None,
    partial_variables: Optional[Mapping[str, PartialValue]] = None,
) -> BaseMessagePromptTemplate:
    if role == "placeholder":
        return _placeholder_from_template(template, template_format)
    extra: dict[str, Any] = {"name": name} if name else {}
    if partial_variables:
        extra["partial_variables"] = partial_variables
    key = ROLE_ALIASES.get(role.lower())
    if key is None:
        return ChatMessagePromptTemplate.from_template(
            template, template_format=template_format, role=role, **extra
        )
    return _ROLE_TEMPLATES[key].from_template(
        template, template_format=template_format, **extra
    )


def _convert_message(
    message: Any, template_format: str
) -> Union[BaseMessagePromptTemplate, BaseMessage]:
    if isinstance(message, (BaseMessagePromptTemplate, BaseMessage)):
        return message
    if isinstance(message, str):
        return HumanMessagePromptTemplate.from_template(
            message, template_format=template_format
        )
    if isinstance(message, Mapping):
        role = message.get("role")
        if role == "placeholder" and "variable_name" in message:
            return MessagesPlaceholder(
                message["variable_name"],
                optional=bool(message.get("optional", True)),
                n_messages=message.get("n_messages"),
            )
        if not role or "content" not in message:
            raise PromptError(
                "Message mappings require 'role' and 'content' keys, got "
                f"{sorted(message)}"
            )
        if message.get("literal"):
            extra = {"name": message["name"]} if message.get("name") else {}
            return message_from_role(role, message["content"], **extra)
        partials = message.get("partial_variables")
        if partials is not None and not isinstance(partials, Mapping):
            raise PromptError(
                "Message 'partial_variables' must be a mapping, got "
                f"{type(partials).__name__}"
            )
        return _template_from_role(
            str(role),
            message["content"],
            template_format,
            message.get("name"),
            partials,
        )
    if isinstance(message, (tuple, list)) and len(message) == 2:
        role, template = message
        return _template_from_role(str(role), template, template_format)
    raise PromptError(
        f"Unsupported message type {type(message).__name__}: {message!r}"
    )


class ChatPromptTemplate(BasePromptTemplate):
    """Sequence of message templates that formats into chat messages.

    Example::

        prompt = ChatPromptTemplate.from_messages([
            ("system", "You are a helpful AI bot. Your name is {name}."),
            ("human", "Hello, how are you doing?"),
            ("ai", "I'm doing well, thanks!"),
            ("human", "{user_input}"),
        ])
        prompt.format_messages(name="Bob", user_input="What is your name?")
    """

    def __init__(
        self,
        messages: Iterable[MessageLike],
        *,
        template_format: str = DEFAULT_TEMPLATE_FORMAT,
        partial_variables: Optional[Mapping[str, PartialValue]] = None,
    ) -> None:
        self.template_format = ensure_template_format(template_format)
        partials = dict(partial_variables or {})
        self.messages: List[Union[BaseMessagePromptTemplate, BaseMessage]] = []
        for message in messages:
            if isinstance(message, ChatPromptTemplate):
                self.messages.extend(message.messages)
                partials = {**message.partial_variables, **partials}
            else:
                self.messages.append(
                    _convert_message(message, self.template_format)
                )
        super().__init__(partial_variables=partials)
        self._refresh_variables()

    @classmethod
    def from_messages(
        cls,
        messages: Iterable[MessageLike],
        *,
        template_format: str = DEFAULT_TEMPLATE_FORMAT,
        partial_variables: Optional[Mapping[str, PartialValue]] = None,
    ) -> "ChatPromptTemplate":
        """Build a chat prompt from role/template tuples and templates."""

        return cls(
            messages,
            template_format=template_format,
            partial_variables=partial_variables,
        )

    @classmethod
    def from_template(
        cls,
        template: str,
        *,
        template_format: str = DEFAULT_TEMPLATE_FORMAT,
        partial_variables: Optional[Mapping[str, PartialValue]] = None,
    ) -> "ChatPromptTemplate":
        """Build a chat prompt holding a single human message template."""

        return cls.from_messages(
            [("human", template)],
            template_format=template_format,
            partial_variables=partial_variables,
        )

    def _refresh_variables(self) -> None:
        required: set[str] = set()
        optional: set[str] = set()
        for message in self.messages:
            if isinstance(message, BaseMessagePromptTemplate):
                required.update(message.input_variables)
                optional.update(message.optional_variables)
        self.optional_variables = sorted(optional - required)
        self.input_variables = sorted(required - set(self.partial_variables))

    def format_messages(self, **kwargs: Any) -> List[BaseMessage]:
        """Format every message template, in declaration order."""

        values = self._prepare_values(**kwargs)
        result: List[BaseMessage] = []
        for message in self.messages:
            if isinstance(message, BaseMessage):
                result.append(message)
            else:
                result.extend(message.format_messages(**values))
        _LOGGER.debug("Formatted chat prompt into %d messages", len(result))
        return result

    async def aformat_messages(self, **kwargs: Any) -> List[BaseMessage]:
        values = self._prepare_values(**kwargs)
        result: List[BaseMessage] = []
        for message in self.messages:
            if isinstance(message, BaseMessage):
                result.append(message)
            else:
                result.extend(await message.aformat_messages(**values))
        return result

    def format_prompt(self, **kwargs: Any) -> ChatPromptValue:
        return ChatPromptValue(self.format_messages(**kwargs))

    async def aformat_prompt(self, **kwargs: Any) -> ChatPromptValue:
        return ChatPromptValue(await self.aformat_messages(**kwargs))

    def format(self, **kwargs: Any) -> str:
        return self.format_prompt(**kwargs).to_string()

    async def aformat(self, **kwargs: Any) -> str:
        return (await self.aformat_prompt(**kwargs)).to_string()

    def partial(self, **kwargs: PartialValue) -> "ChatPromptTemplate":
        return ChatPromptTemplate(
            self.messages,
            template_format=self.template_format,
            partial_variables={**self.partial_variables, **kwargs},
        )

    def append(self, message: MessageLike) -> None:
        self.extend([message])

    def extend(self, messages: Iterable[MessageLike]) -> None:
        for message in messages:
            if isinstance(message, ChatPromptTemplate):
                self.messages.extend(message.messages)
                self.partial_variables = {
                    **message.partial_variables,
                    **self.partial_variables,
                }
            else:
                self.messages.append(
                    _convert_message(message, self.template_format)
                )
        self._refresh_variables()

    def __add__(self, other: Any) -> "ChatPromptTemplate":
        partials = dict(self.partial_variables)
        if isinstance(other, ChatPromptTemplate):
            partials.update(other.partial_variables)
            extra: list[Any] = list(other.messages)
        elif isinstance(other, list):
            extra = list(other)
        elif isinstance(
            other,
            (BaseMessagePromptTemplate, BaseMessage, tuple, str, Mapping),
        ):
            extra = [other]
        else:
            return NotImplemented
        return ChatPromptTemplate(
            [*self.messages, *extra],
            template_format=self.template_format,
            partial_variables=partials,
        )

    def __getitem__(
        self, index: Union[int, slice]
    ) -> Union["ChatPromptTemplate", BaseMessagePromptTemplate, BaseMessage]:
        if isinstance(index, slice):
            return ChatPromptTemplate(
                self.messages[index],
                template_format=self.template_format,
                partial_variables=self.partial_variables,
            )
        return self.messages[index]

    def __len__(self) -> int:
        return len(self.messages)

    def to_config(self) -> dict[str, Any]:
        messages = []
        for message in self.messages:
            if isinstance(message, BaseMessage):
                entry = {
                    "role": message.role,
                    "content": message.to_dict()["content"],
                    "literal": True,
                }
                if message.name:
                    entry["name"] = message.name
                messages.append(entry)
            else:
                messages.append(message.to_config())
        config: dict[str, Any] = {
            "_type": "chat",
            "template_format": self.template_format,
            "messages": messages,
        }
        if self.partial_variables:
            config["partial_variables"] = dict(self.partial_variables)
        return config

    def pretty_repr(self) -> str:
        return "\n\n".join(message.pretty_repr() for message in self.messages)

    def pretty_print(self) -> None:
        print(self.pretty_repr())

    def __repr__(self) -> str:
        return (
            f"ChatPromptTemplate(input_variables={self.input_variables!r}, "
            f"messages={self.messages!r})"
        )
