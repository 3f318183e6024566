"""Public API — JSON commit lists in, layout JSON or rendered graphs out."""

from __future__ import annotations

import json
from typing import Any

from pydantic import TypeAdapter

from gitgraph_layout.config import GraphConfig
from gitgraph_layout.layout import full_layout
from gitgraph_layout.renderers.ascii import AsciiRenderer
from gitgraph_layout.renderers.base import Renderer
from gitgraph_layout.renderers.svg import SvgRenderer
from gitgraph_layout.types import CommitRecord, LayoutResult

_RECORDS = TypeAdapter(list[CommitRecord])


def load_commits(src: str | bytes | list[Any] | dict[str, Any]) -> tuple[list[CommitRecord], str | None]:
    """Parse a commit list.

    Accepts either a bare JSON array of commit records or an object of the
    form ``{"commits": [...], "head": "<hash>"}``.

    Returns:
        (records, head) where head is None when not supplied.

    Raises:
        ValueError: the top-level value has neither accepted shape.
        pydantic.ValidationError: a record is malformed.
    """
    data = json.loads(src) if isinstance(src, (str, bytes)) else src
    head: str | None = None
    if isinstance(data, dict):
        if "commits" not in data:
            raise ValueError('expected a JSON array of commits or an object with a "commits" key')
        head = data.get("head")
        data = data["commits"]
    if not isinstance(data, list):
        raise ValueError(f"expected a list of commits, got {type(data).__name__}")
    return _RECORDS.validate_python(data), head


def layout_commits(
    src: str | bytes | list[Any] | dict[str, Any],
    config: GraphConfig | None = None,
    head: str | None = None,
) -> LayoutResult:
    """Lay out a commit list; an explicit ``head`` overrides the one in ``src``."""
    records, src_head = load_commits(src)
    return full_layout(records, config, head if head is not None else src_head)


def layout_json(
    src: str | bytes | list[Any] | dict[str, Any],
    config: GraphConfig | None = None,
    head: str | None = None,
) -> str:
    """Lay out a commit list and serialize the result as indented JSON."""
    return json.dumps(layout_commits(src, config, head).to_dict(), indent=2)


def _render(
    renderer: Renderer,
    src: str | bytes | list[Any] | dict[str, Any],
    config: GraphConfig | None,
    head: str | None,
) -> str:
    return renderer.render(layout_commits(src, config, head))


def render_svg(
    src: str | bytes | list[Any] | dict[str, Any],
    config: GraphConfig | None = None,
    head: str | None = None,
) -> str:
    """Lay out a commit list and render it to an SVG string."""
    config = config or GraphConfig()
    return _render(SvgRenderer(config), src, config, head)


def render_ascii(
    src: str | bytes | list[Any] | dict[str, Any],
    config: GraphConfig | None = None,
    head: str | None = None,
) -> str:
    """Lay out a commit list and render it as terminal text."""
    return _render(AsciiRenderer(), src, config, head)
