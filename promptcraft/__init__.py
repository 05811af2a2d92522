"""promptcraft package entry point."""

from .exceptions import (
    ImageLoadError,
    InvalidTemplateError,
    MissingVariablesError,
    PromptError,
    PromptLoadError,
)
from .formatting import get_template_variables
from .loading import load_prompt, save_prompt
from .manager import PromptManager
from .messages import (
    AIMessage,
    BaseMessage,
    ChatMessage,
    HumanMessage,
    SystemMessage,
    convert_to_messages,
    get_buffer_string,
)
from .templates import (
    AIMessagePromptTemplate,
    ChatMessagePromptTemplate,
    ChatPromptTemplate,
    HumanMessagePromptTemplate,
    ImagePromptTemplate,
    MessagesPlaceholder,
    PromptTemplate,
    SystemMessagePromptTemplate,
)
from .values import ChatPromptValue, PromptValue, StringPromptValue

__all__ = [
    "AIMessage",
    "AIMessagePromptTemplate",
    "BaseMessage",
    "ChatMessage",
    "ChatMessagePromptTemplate",
    "ChatPromptTemplate",
    "ChatPromptValue",
    "HumanMessage",
    "HumanMessagePromptTemplate",
    "ImageLoadError",
    "ImagePromptTemplate",
    "InvalidTemplateError",
    "MessagesPlaceholder",
    "MissingVariablesError",
    "PromptError",
    "PromptLoadError",
    "PromptManager",
    "PromptTemplate",
    "PromptValue",
    "StringPromptValue",
    "SystemMessage",
    "SystemMessagePromptTemplate",
    "convert_to_messages",
    "get_buffer_string",
    "get_template_variables",
    "load_prompt",
    "save_prompt",
]
