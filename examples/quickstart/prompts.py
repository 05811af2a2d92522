"""Named prompts used by the quickstart walkthrough."""

from __future__ import annotations

from promptcraft import (
    ChatPromptTemplate,
    MessagesPlaceholder,
    PromptTemplate,
)
from promptcraft.registry import register_prompt


def joke_prompt() -> PromptTemplate:
    return PromptTemplate.from_template(
        "Tell me a {adjective} joke about {content}."
    )


def bot_prompt() -> ChatPromptTemplate:
    return ChatPromptTemplate.from_messages(
        [
            ("system", "You are a helpful AI bot. Your name is {name}."),
            ("human", "Hello, how are you doing?"),
            ("ai", "I'm doing well, thanks!"),
            MessagesPlaceholder("history", optional=True),
            ("human", "{user_input}"),
        ]
    )


def image_prompt() -> ChatPromptTemplate:
    return ChatPromptTemplate.from_messages(
        [
            ("system", "Describe the image provided"),
            (
                "user",
                [
                    {"type": "text", "text": "{question}"},
                    {"type": "image_url", "image_url": "{image_url}"},
                ],
            ),
        ]
    )


register_prompt("quickstart.joke", joke_prompt)
register_prompt("quickstart.bot", bot_prompt)
register_prompt("quickstart.image", image_prompt)
