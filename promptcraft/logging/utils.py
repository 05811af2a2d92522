# Copyright (c) Meta Platforms, Inc. and affiliates.
# Modifications copyright (c) 2025 Logan Martel.
# Adapted from https://github.com/meta-pytorch/KernelAgent (Apache-2.0).

"""Logging helpers (redaction, rotating logs)."""

from __future__ import annotations

import logging
import os
import re

from logging.handlers import RotatingFileHandler
from pathlib import Path

_REDACT_KEYS = {
    "OPENAI_API_KEY",
    "AZURE_OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
}

_DATA_URL = re.compile(r"data:([\w.+-]+/[\w.+-]+);base64,[A-Za-z0-9+/=]+")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def redact(text: str) -> str:
    """Scrub key names and inline image payloads from logged prompt text."""

    if not text:
        return ""
    cleaned = text
    for key in _REDACT_KEYS:
        if key in cleaned:
            cleaned = cleaned.replace(key, "<REDACTED_KEY>")
    return _DATA_URL.sub(r"data:\1;base64,<...>", cleaned)


def setup_file_logger(
    log_file: Path,
    name: str = "promptcraft",
    level: int = logging.INFO,
) -> logging.Logger:
    """Configure a rotating file logger (idempotent per file)."""

    log_file = Path(log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger = logging.getLogger(name)
    logger.setLevel(level)
    target = os.path.abspath(log_file)
    if not any(
        isinstance(handler, RotatingFileHandler)
        and handler.baseFilename == target
        for handler in logger.handlers
    ):
        handler = RotatingFileHandler(
            log_file, maxBytes=2_000_000, backupCount=3
        )
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger
