"""Templating utilities for rendering one shell command per CSV row.

This module owns the Jinja2 environment used by csvargs. Its responsibility
is compiling the user template once, listing the row fields a template
reads, and rendering a template against a single row. The row is bound
under the fixed name ``row`` (see ``csvargs.config.ROW_VARIABLE_NAME``).

Boundaries
----------
- No I/O and no process execution; deterministic given inputs.
- Compile failures raise :class:`csvargs.exceptions.TemplateError` and are
  meant to abort the run before any file is opened.
- Render failures raise :class:`csvargs.exceptions.RenderError` and only
  concern the row being rendered.

Examples
--------
>>> from csvargs.pipeline.rows import bind
>>> template = compile_template("echo {{ row.name }}")
>>> render_command(template, bind(["Alice"], ["name"]))
'echo Alice'
"""

from __future__ import annotations

import jinja2
from jinja2 import nodes

from csvargs.config import ROW_VARIABLE_NAME
from csvargs.exceptions import RenderError, TemplateError

from .rows import Row, RowBinding


class _RowUndefined(jinja2.StrictUndefined):
    """Strict undefined that names the missing row field in its message."""

    __slots__ = ()

    @property
    def _undefined_message(self) -> str:
        if isinstance(self._undefined_obj, RowBinding):
            return f"field {self._undefined_name!r} not found in row"
        return super()._undefined_message


_ENVIRONMENT = jinja2.Environment(
    autoescape=False,
    keep_trailing_newline=True,
    undefined=_RowUndefined,
)


def compile_template(text: str) -> jinja2.Template:
    """Compile the user template.

    Parameters
    ----------
    text : str
        Template source as given on the command line.

    Returns
    -------
    jinja2.Template
        Immutable compiled template, shared by every row of the run.

    Raises
    ------
    TemplateError
        If the source is not a valid template.

    Examples
    --------
    >>> compile_template("echo {{ row.name")
    Traceback (most recent call last):
    ...
    csvargs.exceptions.TemplateError: TEMPLATE_ERROR: Failed to parse template: ...
    """
    try:
        return _ENVIRONMENT.from_string(text)
    except jinja2.TemplateSyntaxError as exc:
        raise TemplateError(
            f"Failed to parse template: {exc.message} (line {exc.lineno})",
            context={"line": exc.lineno},
        ) from exc


def extract_row_references(text: str) -> list[str]:
    """Return a sorted list of unique row keys the template reads statically.

    Only constant accesses are found: ``row.name``, ``row['name']`` and
    ``row[0]``. Keys computed at render time are invisible here.

    Raises
    ------
    TemplateError
        If the source is not a valid template.
    """
    try:
        tree = _ENVIRONMENT.parse(text)
    except jinja2.TemplateSyntaxError as exc:
        raise TemplateError(
            f"Failed to parse template: {exc.message} (line {exc.lineno})",
            context={"line": exc.lineno},
        ) from exc

    def is_row(node: nodes.Node) -> bool:
        return isinstance(node, nodes.Name) and node.name == ROW_VARIABLE_NAME

    found: set[str] = set()
    for node in tree.find_all(nodes.Getattr):
        if is_row(node.node):
            found.add(node.attr)
    for node in tree.find_all(nodes.Getitem):
        if is_row(node.node) and isinstance(node.arg, nodes.Const):
            value = node.arg.value
            if isinstance(value, (str, int)) and not isinstance(value, bool):
                found.add(str(value))
    return sorted(found)


def render_command(template: jinja2.Template, row: Row) -> str:
    """Render ``template`` for a single row.

    Parameters
    ----------
    template : jinja2.Template
        Template returned by :func:`compile_template`.
    row : Row
        Row bound under the name ``row``.

    Returns
    -------
    str
        The command text for this row.

    Raises
    ------
    RenderError
        If the template references a missing field or any expression in it
        raises.
    """
    try:
        return template.render({ROW_VARIABLE_NAME: RowBinding(row)})
    except jinja2.UndefinedError as exc:
        raise RenderError(
            f"Failed to render template: {exc.message}",
            context={"reason": "undefined"},
        ) from exc
    except Exception as exc:  # template expressions may raise anything
        raise RenderError(
            f"Failed to render template: {exc}", context={"reason": type(exc).__name__}
        ) from exc
