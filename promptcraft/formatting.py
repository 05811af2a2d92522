"""Template formats: variable inference, validation and rendering."""

from __future__ import annotations

from string import Formatter
from typing import Any, Callable, Dict, Iterable, Literal, Mapping

from jinja2 import TemplateSyntaxError, meta
from jinja2.sandbox import SandboxedEnvironment

from promptcraft.exceptions import InvalidTemplateError, MissingVariablesError

TemplateFormat = Literal["f-string", "jinja2"]

DEFAULT_TEMPLATE_FORMAT: TemplateFormat = "f-string"

_FORMATTER = Formatter()
_JINJA_ENV = SandboxedEnvironment(keep_trailing_newline=True)


def _fstring_variables(template: str) -> set[str]:
    names: set[str] = set()
    try:
        parsed = list(_FORMATTER.parse(template))
    except ValueError as exc:
        raise InvalidTemplateError(
            f"Invalid f-string template {template!r}: {exc}"
        ) from exc
    for _, field_name, format_spec, _ in parsed:
        if field_name is None:
            continue
        if field_name == "" or field_name.isdigit():
            raise InvalidTemplateError(
                "Positional placeholders are not supported in f-string "
                f"templates; name every field in {template!r}."
            )
        if "." in field_name or "[" in field_name:
            raise InvalidTemplateError(
                f"Attribute or index access is not allowed in f-string "
                f"templates (found '{{{field_name}}}')."
            )
        names.add(field_name)
        if format_spec:
            names.update(_fstring_variables(format_spec))
    return names


def _jinja2_variables(template: str) -> set[str]:
    try:
        ast = _JINJA_ENV.parse(template)
    except TemplateSyntaxError as exc:
        raise InvalidTemplateError(
            f"Invalid jinja2 template: {exc.message}"
        ) from exc
    return set(meta.find_undeclared_variables(ast))


def _render_fstring(template: str, values: Mapping[str, Any]) -> str:
    try:
        return _FORMATTER.vformat(template, (), dict(values))
    except KeyError as exc:
        raise MissingVariablesError([str(exc.args[0])]) from exc


def _render_jinja2(template: str, values: Mapping[str, Any]) -> str:
    try:
        compiled = _JINJA_ENV.from_string(template)
    except TemplateSyntaxError as exc:
        raise InvalidTemplateError(
            f"Invalid jinja2 template: {exc.message}"
        ) from exc
    return compiled.render(**values)


_VARIABLE_FINDERS: Dict[str, Callable[[str], set[str]]] = {
    "f-string": _fstring_variables,
    "jinja2": _jinja2_variables,
}

_RENDERERS: Dict[str, Callable[[str, Mapping[str, Any]], str]] = {
    "f-string": _render_fstring,
    "jinja2": _render_jinja2,
}


def supported_formats() -> list[str]:
    return sorted(_RENDERERS)


def ensure_template_format(template_format: str) -> TemplateFormat:
    """Return ``template_format`` if supported, otherwise raise."""

    if template_format not in _RENDERERS:
        raise InvalidTemplateError(
            f"Unsupported template format '{template_format}'. "
            f"Supported formats: {supported_formats()}"
        )
    return template_format  # type: ignore[return-value]


def get_template_variables(
    template: str, template_format: str = DEFAULT_TEMPLATE_FORMAT
) -> list[str]:
    """Return the sorted placeholder names used by ``template``."""

    finder = _VARIABLE_FINDERS[ensure_template_format(template_format)]
    return sorted(finder(template))


def render_template(
    template: str,
    template_format: str,
    values: Mapping[str, Any],
) -> str:
    """Fill ``template`` with ``values`` using the given format."""

    renderer = _RENDERERS[ensure_template_format(template_format)]
    return renderer(template, values)


def check_valid_template(
    template: str,
    template_format: str,
    input_variables: Iterable[str],
) -> None:
    """Raise when ``input_variables`` disagree with the template's fields."""

    declared = set(input_variables)
    inferred = set(get_template_variables(template, template_format))
    missing = inferred - declared
    extra = declared - inferred
    if missing or extra:
        details = []
        if missing:
            details.append(f"undeclared placeholders {sorted(missing)}")
        if extra:
            details.append(f"unused input variables {sorted(extra)}")
        raise InvalidTemplateError(
            "Template does not match its input variables: "
            + "; ".join(details)
        )
