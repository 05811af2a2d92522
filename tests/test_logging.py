from __future__ import annotations

import logging

from logging.handlers import RotatingFileHandler
from pathlib import Path

from promptcraft import HumanMessagePromptTemplate
from promptcraft.logging import redact, setup_file_logger


def test_redact_scrubs_keys_and_image_payloads() -> None:
    text = "OPENAI_API_KEY leaked; image data:image/png;base64,iVBORw0KGgo="
    cleaned = redact(text)
    assert "OPENAI_API_KEY" not in cleaned
    assert "<REDACTED_KEY>" in cleaned
    assert cleaned.endswith("data:image/png;base64,<...>")
    assert redact("") == ""


def test_setup_file_logger_is_idempotent(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "promptcraft.log"
    logger = setup_file_logger(log_file, name="promptcraft.test")
    setup_file_logger(log_file, name="promptcraft.test")
    handlers = [
        handler
        for handler in logger.handlers
        if isinstance(handler, RotatingFileHandler)
    ]
    assert len(handlers) == 1
    logger.info("hello")
    handlers[0].flush()
    assert "hello" in log_file.read_text(encoding="utf-8")

    setup_file_logger(tmp_path / "other.log", name="promptcraft.test")
    handlers = [
        handler
        for handler in logger.handlers
        if isinstance(handler, RotatingFileHandler)
    ]
    assert len(handlers) == 2
    for handler in handlers:
        logger.removeHandler(handler)
        handler.close()


def test_debug_render_logs_are_redacted(png_file: Path, caplog) -> None:
    template = HumanMessagePromptTemplate.from_template(
        [{"type": "image_url", "image_url": {"path": "{p}"}}]
    )
    with caplog.at_level(logging.DEBUG, logger="promptcraft"):
        message = template.format(p=str(png_file))
    payload = message.content[0]["image_url"]["url"].split(",", 1)[1]
    assert "ImagePromptTemplate" in caplog.text
    assert payload not in caplog.text
