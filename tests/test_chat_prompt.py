from __future__ import annotations

import asyncio

import pytest

from promptcraft import (
    AIMessage,
    AIMessagePromptTemplate,
    ChatMessage,
    ChatMessagePromptTemplate,
    ChatPromptTemplate,
    ChatPromptValue,
    HumanMessage,
    HumanMessagePromptTemplate,
    MessagesPlaceholder,
    MissingVariablesError,
    PromptError,
    SystemMessage,
    SystemMessagePromptTemplate,
)


def _bot_prompt() -> ChatPromptTemplate:
    return ChatPromptTemplate.from_messages(
        [
            ("system", "You are a helpful AI bot. Your name is {name}."),
            ("human", "Hello, how are you doing?"),
            ("ai", "I'm doing well, thanks!"),
            ("human", "{user_input}"),
        ]
    )


def test_from_messages_formats_role_tagged_messages() -> None:
    prompt = _bot_prompt()
    assert prompt.input_variables == ["name", "user_input"]
    messages = prompt.format_messages(
        name="Bob", user_input="What is your name?"
    )
    assert messages == [
        SystemMessage("You are a helpful AI bot. Your name is Bob."),
        HumanMessage("Hello, how are you doing?"),
        AIMessage("I'm doing well, thanks!"),
        HumanMessage("What is your name?"),
    ]


def test_async_format_messages_matches_sync() -> None:
    prompt = _bot_prompt()
    kwargs = {"name": "Bob", "user_input": "What is your name?"}
    assert asyncio.run(prompt.aformat_messages(**kwargs)) == (
        prompt.format_messages(**kwargs)
    )
    assert asyncio.run(prompt.aformat(**kwargs)) == prompt.format(**kwargs)


def test_role_aliases_and_custom_roles() -> None:
    prompt = ChatPromptTemplate.from_messages(
        [
            ("user", "{q}"),
            ("assistant", "ok"),
            ("critic", "Rate {q}"),
            {"role": "system", "content": "Be {tone}"},
            "bare {q}",
        ]
    )
    messages = prompt.format_messages(q="x", tone="brief")
    assert messages == [
        HumanMessage("x"),
        AIMessage("ok"),
        ChatMessage("Rate x", role="critic"),
        SystemMessage("Be brief"),
        HumanMessage("bare x"),
    ]


def test_message_templates_and_literal_messages() -> None:
    prompt = ChatPromptTemplate.from_messages(
        [
            SystemMessage("You translate text."),
            SystemMessagePromptTemplate.from_template("Target: {language}"),
            HumanMessagePromptTemplate.from_template("{text}", name="ada"),
            AIMessagePromptTemplate.from_template("Sure"),
            ChatMessagePromptTemplate.from_template("{text}", role="echo"),
        ]
    )
    messages = prompt.format_messages(language="French", text="hi")
    assert messages[0] is prompt.messages[0]
    assert messages[1] == SystemMessage("Target: French")
    assert messages[2] == HumanMessage("hi", name="ada")
    assert messages[3] == AIMessage("Sure")
    assert messages[4] == ChatMessage("hi", role="echo")


def test_missing_variables_are_reported_before_formatting() -> None:
    with pytest.raises(MissingVariablesError) as excinfo:
        _bot_prompt().format_messages(name="Bob")
    assert excinfo.value.missing == ["user_input"]


def test_format_returns_transcript_and_prompt_value() -> None:
    prompt = _bot_prompt()
    text = prompt.format(name="Bob", user_input="Hi")
    assert text.splitlines()[0] == "System: You are a helpful AI bot. Your name is Bob."
    assert text.splitlines()[-1] == "Human: Hi"
    value = prompt.invoke({"name": "Bob", "user_input": "Hi"})
    assert isinstance(value, ChatPromptValue)
    assert value.to_dicts()[2] == {
        "role": "assistant",
        "content": "I'm doing well, thanks!",
    }


def test_messages_placeholder_required_and_optional() -> None:
    prompt = ChatPromptTemplate.from_messages(
        [
            ("system", "You are helpful."),
            MessagesPlaceholder("history"),
            ("human", "{question}"),
        ]
    )
    assert prompt.input_variables == ["history", "question"]
    messages = prompt.format_messages(
        history=[("human", "hi"), ("ai", "hello")], question="next?"
    )
    assert [m.type for m in messages] == ["system", "human", "ai", "human"]

    optional = ChatPromptTemplate.from_messages(
        [("placeholder", "{history}"), ("human", "{question}")]
    )
    assert optional.input_variables == ["question"]
    assert optional.optional_variables == ["history"]
    assert optional.format_messages(question="q") == [HumanMessage("q")]


def test_messages_placeholder_n_messages_and_type_checks() -> None:
    placeholder = MessagesPlaceholder("history", n_messages=1)
    messages = placeholder.format_messages(history=["a", "b"])
    assert messages == [HumanMessage("b")]
    with pytest.raises(PromptError):
        placeholder.format_messages(history="not a list")
    with pytest.raises(MissingVariablesError):
        placeholder.format_messages()
    with pytest.raises(PromptError):
        MessagesPlaceholder("history", n_messages=0)
    assert "n_messages=1" in repr(placeholder)
    assert repr(placeholder) != repr(MessagesPlaceholder("history"))


def test_placeholder_tuple_requires_single_variable() -> None:
    with pytest.raises(PromptError):
        ChatPromptTemplate.from_messages([("placeholder", "{a} {b}")])


def test_unsupported_message_raises() -> None:
    with pytest.raises(PromptError):
        ChatPromptTemplate.from_messages([42])


def test_partial_and_callable_partials() -> None:
    prompt = _bot_prompt().partial(name=lambda: "Bot")
    assert prompt.input_variables == ["user_input"]
    messages = prompt.format_messages(user_input="hey")
    assert messages[0].content.endswith("Your name is Bot.")


def test_append_extend_and_add() -> None:
    prompt = ChatPromptTemplate.from_messages([("system", "sys {a}")])
    prompt.append(("human", "{b}"))
    prompt.extend([("ai", "{c}")])
    assert prompt.input_variables == ["a", "b", "c"]
    assert len(prompt) == 3

    combined = prompt + ("human", "{d}") + "tail"
    assert combined.input_variables == ["a", "b", "c", "d"]
    assert len(combined) == 5
    assert len(prompt) == 3

    other = ChatPromptTemplate.from_messages([("human", "{e}")])
    merged = prompt + other
    assert merged.input_variables == ["a", "b", "c", "e"]


def test_append_and_extend_keep_chat_prompt_partials() -> None:
    greeting = ChatPromptTemplate.from_messages(
        [("human", "Hi {who}")], partial_variables={"who": "Ada"}
    )
    extended = ChatPromptTemplate.from_messages([("system", "{name}")])
    extended.extend([greeting])
    appended = ChatPromptTemplate.from_messages([("system", "{name}")])
    appended.append(greeting)

    for prompt in (extended, appended):
        assert prompt.input_variables == ["name"]
        assert prompt.partial_variables == {"who": "Ada"}
        messages = prompt.format_messages(name="Bob")
        assert messages[1] == HumanMessage("Hi Ada")

    own = ChatPromptTemplate.from_messages(
        [("system", "{who}")], partial_variables={"who": "Eve"}
    )
    own.extend([greeting])
    assert own.partial_variables == {"who": "Eve"}


def test_message_level_partials_affect_equality() -> None:
    bound = ChatPromptTemplate.from_messages(
        [
            HumanMessagePromptTemplate.from_template(
                "{greeting} {name}", partial_variables={"greeting": "Hello"}
            )
        ]
    )
    unbound = ChatPromptTemplate.from_messages(
        [("human", "{greeting} {name}")]
    )
    assert bound.input_variables == ["name"]
    assert bound != unbound
    assert bound.messages[0].to_config()["partial_variables"] == {
        "greeting": "Hello"
    }


def test_nested_chat_prompts_are_spliced() -> None:
    base = ChatPromptTemplate.from_messages([("system", "{rules}")])
    prompt = ChatPromptTemplate.from_messages([base, ("human", "{q}")])
    assert len(prompt) == 2
    assert prompt.input_variables == ["q", "rules"]


def test_indexing_and_slicing() -> None:
    prompt = _bot_prompt()
    assert isinstance(prompt[0], SystemMessagePromptTemplate)
    head = prompt[:1]
    assert isinstance(head, ChatPromptTemplate)
    assert head.input_variables == ["name"]


def test_from_template_builds_single_human_message() -> None:
    prompt = ChatPromptTemplate.from_template("Tell me about {topic}")
    assert prompt.format_messages(topic="owls") == [
        HumanMessage("Tell me about owls")
    ]


def test_jinja2_chat_prompt() -> None:
    prompt = ChatPromptTemplate.from_messages(
        [("system", "Hi {{ name }}"), ("placeholder", "{{ history }}")],
        template_format="jinja2",
    )
    assert prompt.input_variables == ["name"]
    assert prompt.format_messages(name="Ada") == [SystemMessage("Hi Ada")]


def test_pretty_repr_lists_each_message() -> None:
    rendered = _bot_prompt().pretty_repr()
    assert "System Message" in rendered
    assert "{user_input}" in rendered
