"""CLI entrypoint for rendering prompt templates."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from importlib import import_module
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from dotenv import load_dotenv

from promptcraft import registry
from promptcraft.configuration import (
    DEFAULT_CONFIG_NAME,
    PromptSettings,
    build_prompt_settings,
)
from promptcraft.exceptions import PromptError
from promptcraft.loading import DOCUMENT_SUFFIXES, load_prompt
from promptcraft.logging import setup_file_logger
from promptcraft.manager import JINJA_SUFFIXES, PromptManager
from promptcraft.templates.base import BasePromptTemplate
from promptcraft.templates.string import PromptTemplate
from promptcraft.values import ChatPromptValue

_LOGGER = logging.getLogger("promptcraft.cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="promptcraft",
        description="Render prompt templates into text or chat messages.",
        allow_abbrev=False,
    )
    parser.add_argument(
        "prompt",
        nargs="?",
        type=str,
        help=(
            "Prompt file (.yaml/.json/.txt/.j2) or a name resolvable in the "
            "template directories or prompt registry."
        ),
    )
    parser.add_argument(
        "--var",
        action="append",
        dest="variables",
        default=[],
        metavar="NAME=VALUE",
        help="Set an input variable (repeatable).",
    )
    parser.add_argument(
        "--vars-file",
        type=str,
        help="YAML or JSON mapping of input variables.",
    )
    parser.add_argument(
        "--config",
        type=str,
        help=(
            "Path to a YAML config. If omitted, uses "
            f"./{DEFAULT_CONFIG_NAME} when present."
        ),
    )
    parser.add_argument(
        "--template-dir",
        action="append",
        dest="template_dirs",
        default=[],
        help="Directory searched for named templates (repeatable).",
    )
    parser.add_argument(
        "--output",
        choices=["text", "json"],
        default="text",
        help="Print a transcript (text) or provider-ready messages (json).",
    )
    parser.add_argument(
        "--variables",
        action="store_true",
        dest="show_variables",
        help="Print the prompt's input variables and exit.",
    )
    parser.add_argument(
        "--list-templates",
        action="store_true",
        help="List templates in the configured directories and exit.",
    )
    parser.add_argument(
        "--plugin-module",
        action="append",
        dest="plugin_modules",
        default=[],
        help="Import the given module first (registers named prompts).",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        help="Write logs to a rotating file.",
    )
    return parser


def _load_config(config_path: Optional[Path]) -> dict:
    if config_path is None:
        return {}
    if not config_path.exists():
        raise FileNotFoundError(f"Config file '{config_path}' not found.")
    return yaml.safe_load(config_path.read_text()) or {}


def _import_plugin_modules(
    settings: PromptSettings, extra_modules: list[str]
) -> None:
    for path in settings.plugins.paths:
        if not path.exists():
            print(f"Plugin path '{path}' does not exist", file=sys.stderr)
            continue
        if str(path) not in sys.path:
            sys.path.insert(0, str(path))
    for mod_name in [*settings.plugins.modules, *extra_modules]:
        if not mod_name:
            continue
        try:
            import_module(mod_name)
        except ImportError as exc:
            print(
                f"Failed to import plugin module '{mod_name}': {exc}",
                file=sys.stderr,
            )


def _collect_variables(args: argparse.Namespace) -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    if args.vars_file:
        vars_path = Path(args.vars_file)
        if not vars_path.exists():
            raise FileNotFoundError(f"Variables file '{vars_path}' not found.")
        data = yaml.safe_load(vars_path.read_text(encoding="utf-8")) or {}
        if not isinstance(data, dict):
            raise PromptError(
                f"Variables file '{vars_path}' must contain a mapping"
            )
        values.update(data)
    for item in args.variables:
        name, sep, value = item.partition("=")
        if not sep or not name:
            raise PromptError(f"Expected NAME=VALUE for --var, got '{item}'")
        values[name.strip()] = value
    return values


def _resolve_prompt(
    name: str,
    manager: Optional[PromptManager],
    settings: PromptSettings,
) -> BasePromptTemplate:
    registered = registry.get_prompt(name)
    if registered is not None:
        return registered
    path = Path(name).expanduser()
    if path.is_file():
        suffix = path.suffix.lower()
        if suffix in DOCUMENT_SUFFIXES:
            return load_prompt(
                path, validate_template=settings.validate_template
            )
        template_format = (
            "jinja2" if suffix in JINJA_SUFFIXES else settings.template_format
        )
        return PromptTemplate.from_file(path, template_format=template_format)
    if manager is None:
        raise FileNotFoundError(
            f"Prompt '{name}' is not a file and no template directories "
            "are configured."
        )
    return manager.get_prompt(name)


def _print_result(value: Any, output: str) -> None:
    if output == "json":
        if isinstance(value, ChatPromptValue):
            payload: Any = value.to_dicts()
        else:
            payload = {"text": value.to_string()}
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        print(value.to_string())


def main(argv: Optional[list[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    load_dotenv()

    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=logging.WARNING,
            format="%(levelname)s %(name)s: %(message)s",
        )

    if args.config:
        config_path: Optional[Path] = Path(args.config)
    elif Path(DEFAULT_CONFIG_NAME).exists():
        config_path = Path(DEFAULT_CONFIG_NAME)
    else:
        config_path = None

    try:
        config_data = _load_config(config_path)
        config_root = (
            config_path.resolve().parent if config_path else Path.cwd()
        )
        settings = build_prompt_settings(config_data, config_root=config_root)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    log_file = (
        Path(args.log_file) if args.log_file else settings.logging.log_file
    )
    if log_file is not None:
        setup_file_logger(log_file, level=settings.logging.level)

    _import_plugin_modules(settings, args.plugin_modules)

    template_dirs = [Path(item) for item in args.template_dirs]
    template_dirs.extend(settings.template_dirs)

    try:
        manager = None
        if template_dirs:
            manager = PromptManager(
                search_paths=template_dirs,
                template_format=settings.template_format,
                validate_template=settings.validate_template,
            )

        if args.list_templates:
            names = registry.list_prompts()
            if manager is not None:
                names.extend(manager.list_templates())
            for template_name in names:
                print(template_name)
            return 0

        if not args.prompt:
            parser.error("a prompt is required unless --list-templates is set")

        prompt = _resolve_prompt(args.prompt, manager, settings)
        if args.show_variables:
            print(
                json.dumps(
                    {
                        "input_variables": prompt.input_variables,
                        "optional_variables": prompt.optional_variables,
                        "partial_variables": sorted(prompt.partial_variables),
                    },
                    indent=2,
                )
            )
            return 0

        values = _collect_variables(args)
        _LOGGER.info(
            "Rendering %s with variables %s", args.prompt, sorted(values)
        )
        _print_result(prompt.invoke(values), args.output)
    except (PromptError, FileNotFoundError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
