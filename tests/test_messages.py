from __future__ import annotations

import pytest

from promptcraft.exceptions import PromptError
from promptcraft.messages import (
    AIMessage,
    ChatMessage,
    HumanMessage,
    SystemMessage,
    convert_to_messages,
    get_buffer_string,
    message_from_role,
)


def test_message_roles_and_types() -> None:
    assert SystemMessage("s").type == "system"
    assert HumanMessage("h").role == "user"
    assert AIMessage("a").role == "assistant"
    critic = ChatMessage("c", role="critic")
    assert critic.type == "chat"
    assert critic.role == "critic"


def test_chat_message_requires_role() -> None:
    with pytest.raises(TypeError):
        ChatMessage("hi")  # type: ignore[call-arg]
    message = ChatMessage("hi", role="critic")
    assert message.to_dict() == {"role": "critic", "content": "hi"}
    assert get_buffer_string([message]) == "critic: hi"


def test_to_dict_includes_name_when_set() -> None:
    message = HumanMessage("hi", name="ada")
    assert message.to_dict() == {"role": "user", "content": "hi", "name": "ada"}
    assert AIMessage("yo").to_dict() == {"role": "assistant", "content": "yo"}


def test_multimodal_text_and_dict_copy() -> None:
    blocks = [
        {"type": "text", "text": "describe "},
        {"type": "image_url", "image_url": {"url": "https://x/cat.png"}},
        {"type": "text", "text": "this"},
    ]
    message = HumanMessage(blocks)
    assert message.text == "describe this"
    payload = message.to_dict()
    payload["content"][1]["image_url"]["url"] = "changed"
    assert blocks[1]["image_url"]["url"] == "https://x/cat.png"


def test_message_from_role_aliases() -> None:
    assert isinstance(message_from_role("user", "x"), HumanMessage)
    assert isinstance(message_from_role("Human", "x"), HumanMessage)
    assert isinstance(message_from_role("assistant", "x"), AIMessage)
    assert isinstance(message_from_role("system", "x"), SystemMessage)
    other = message_from_role("narrator", "x")
    assert isinstance(other, ChatMessage)
    assert other.role == "narrator"


def test_convert_to_messages_accepts_mixed_inputs() -> None:
    messages = convert_to_messages(
        [
            ("ai", "hello"),
            {"role": "user", "content": "hi", "name": "ada"},
            "plain",
            SystemMessage("sys"),
        ]
    )
    assert messages == [
        AIMessage("hello"),
        HumanMessage("hi", name="ada"),
        HumanMessage("plain"),
        SystemMessage("sys"),
    ]


def test_convert_to_messages_rejects_unknown_values() -> None:
    with pytest.raises(PromptError):
        convert_to_messages([42])
    with pytest.raises(PromptError):
        convert_to_messages([{"content": "no role"}])


def test_get_buffer_string() -> None:
    transcript = get_buffer_string(
        [
            SystemMessage("be nice"),
            HumanMessage("hi"),
            AIMessage("hello"),
            ChatMessage("note", role="critic"),
        ]
    )
    assert transcript == (
        "System: be nice\nHuman: hi\nAI: hello\ncritic: note"
    )


def test_pretty_repr_hides_image_payload() -> None:
    message = HumanMessage(
        [{"type": "image_url", "image_url": {"url": "data:image/png;base64,AAAA"}}]
    )
    rendered = message.pretty_repr()
    assert "Human Message" in rendered
    assert "AAAA" not in rendered
