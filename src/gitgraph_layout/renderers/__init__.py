"""Renderers that turn a LayoutResult into text output."""

from gitgraph_layout.renderers.ascii import AsciiRenderer
from gitgraph_layout.renderers.base import Renderer
from gitgraph_layout.renderers.svg import SvgRenderer

__all__ = ["AsciiRenderer", "Renderer", "SvgRenderer"]
