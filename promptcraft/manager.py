# Copyright (c) Meta Platforms, Inc. and affiliates.
# Modifications copyright (c) 2025 Logan Martel.
# Adapted from https://github.com/meta-pytorch/KernelAgent (Apache-2.0).

"""Prompt manager backed by Jinja2 template directories."""

from __future__ import annotations

import logging

from pathlib import Path, PurePosixPath
from typing import Any, Optional, Sequence

from jinja2 import ChoiceLoader, FileSystemLoader, Template, TemplateNotFound
from jinja2.sandbox import SandboxedEnvironment

from promptcraft import registry
from promptcraft.formatting import (
    DEFAULT_TEMPLATE_FORMAT,
    ensure_template_format,
)
from promptcraft.loading import (
    DOCUMENT_SUFFIXES,
    load_prompt_from_config,
    parse_prompt_document,
)
from promptcraft.templates.base import BasePromptTemplate
from promptcraft.templates.string import PromptTemplate

JINJA_SUFFIXES = {".j2", ".jinja", ".jinja2"}

_LOGGER = logging.getLogger(__name__)


class PromptManager:
    """Loads named prompts from one or more template directories.

    Override directories are searched before the base directory, so a file
    with the same name shadows the default one.
    """

    def __init__(
        self,
        templates_dir: Optional[Path] = None,
        *,
        extra_dirs: Optional[Sequence[Path]] = None,
        search_paths: Optional[Sequence[Path]] = None,
        template_format: str = DEFAULT_TEMPLATE_FORMAT,
        validate_template: bool = False,
    ) -> None:
        if search_paths:
            paths = [Path(path) for path in search_paths]
            for path in paths:
                if not path.exists():
                    raise FileNotFoundError(
                        f"Templates directory not found: {path}"
                    )
            base_dir = paths[-1]
        else:
            if templates_dir is None:
                raise ValueError(
                    "templates_dir or search_paths must be provided"
                )
            base_dir = Path(templates_dir)
            if not base_dir.exists():
                raise FileNotFoundError(
                    f"Templates directory not found: {base_dir}"
                )
            paths = []
            for override in extra_dirs or ():
                override_path = Path(override)
                if not override_path.exists():
                    raise FileNotFoundError(
                        f"Prompt override directory not found: {override_path}"
                    )
                paths.append(override_path)
            paths.append(base_dir)

        self._base_dir = base_dir
        self._search_paths = tuple(paths)
        self._template_format = ensure_template_format(template_format)
        self._validate_template = validate_template
        loaders = [FileSystemLoader(str(path)) for path in self._search_paths]
        self._env = SandboxedEnvironment(
            loader=ChoiceLoader(loaders),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

    def render(self, template_name: str, **context: Any) -> str:
        """Render a template file with Jinja2 (includes are resolved)."""

        template = self._get_template(template_name)
        return template.render(**context)

    def list_templates(self) -> list[str]:
        """Return the list of known template filenames."""
        return sorted(set(self._env.list_templates()))

    def get_prompt(self, name: str) -> BasePromptTemplate:
        """Return a prompt template by registry name or file name."""

        registered = registry.get_prompt(name)
        if registered is not None:
            return registered
        source = self._get_source(name)
        suffix = PurePosixPath(name).suffix.lower()
        if suffix in DOCUMENT_SUFFIXES:
            config = parse_prompt_document(source, suffix)
            config.setdefault("validate_template", self._validate_template)
            return load_prompt_from_config(
                config, base_dir=self._locate_dir(name)
            )
        template_format = (
            "jinja2" if suffix in JINJA_SUFFIXES else self._template_format
        )
        _LOGGER.debug("Loaded %s as %s template", name, template_format)
        return PromptTemplate.from_template(
            source, template_format=template_format
        )

    @property
    def templates_dir(self) -> Path:
        return self._base_dir

    @property
    def search_paths(self) -> tuple[Path, ...]:
        return self._search_paths

    @property
    def template_format(self) -> str:
        return self._template_format

    def _locate_dir(self, name: str) -> Optional[Path]:
        for path in self._search_paths:
            candidate = path / name
            if candidate.exists():
                return candidate.parent
        return None

    def _get_source(self, template_name: str) -> str:
        try:
            loader = self._env.loader
            assert loader is not None
            source, _, _ = loader.get_source(self._env, template_name)
        except TemplateNotFound as exc:
            raise FileNotFoundError(
                f"Template '{template_name}' not found in "
                f"{[str(path) for path in self._search_paths]}"
            ) from exc
        return source

    def _get_template(self, template_name: str) -> Template:
        try:
            return self._env.get_template(template_name)
        except TemplateNotFound as exc:
            raise FileNotFoundError(
                f"Template '{template_name}' not found in {self.templates_dir}"
            ) from exc
