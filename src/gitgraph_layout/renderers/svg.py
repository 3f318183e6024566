"""SVG renderer — renders a commit graph LayoutResult to an SVG string."""

from __future__ import annotations

from gitgraph_layout.config import UNCOMMITTED_COLOUR, GraphConfig, GraphStyle
from gitgraph_layout.types import CommitLayout, CurveTiming, LayoutResult, LineSegment

# ─── Constants ──────────────────────────────────────────────────────────────

VERTEX_RADIUS = 4
LINE_WIDTH = 2
SHADOW_WIDTH = 4
MUTED_OPACITY = 0.5

_ROUNDED_FACTOR = 0.8
_ANGULAR_FACTOR = 0.38


def _fmt(x: float, y: float) -> str:
    return f"{x:.0f},{y:.1f}"


# ─── Public Renderer ────────────────────────────────────────────────────────


class SvgRenderer:
    """SVG renderer — converts grid units to pixels and curve timings to paths."""

    def __init__(self, config: GraphConfig | None = None) -> None:
        self.config = config or GraphConfig()
        factor = _ANGULAR_FACTOR if self.config.style == GraphStyle.Angular else _ROUNDED_FACTOR
        self._d = self.config.grid.y * factor

    # ─── Coordinate Helpers ─────────────────────────────────────────────────

    def _px(self, x: int) -> float:
        return x * self.config.grid.x + self.config.grid.offset_x

    def _py(self, y: int) -> float:
        return y * self.config.grid.y + self.config.grid.offset_y

    # ─── Edge Rendering ─────────────────────────────────────────────────────

    def _transition(self, x1: float, y1: float, x2: float, y2: float, locked_first: bool) -> str:
        """Path commands that move from (x1, y1) across to (x2, y2)."""
        if self.config.style == GraphStyle.Angular:
            bend = _fmt(x2, y2 - self._d) if locked_first else _fmt(x1, y1 + self._d)
            return f"L{bend}L{_fmt(x2, y2)}"
        return f"C{_fmt(x1, y1 + self._d)} {_fmt(x2, y2 - self._d)} {_fmt(x2, y2)}"

    def segment_path(self, segment: LineSegment) -> str:
        """Path data for one segment, without the leading move-to.

        A segment spanning several rows changes channel in its first row gap
        (CurveFirst) or its last one (CurveLast) and runs straight elsewhere.
        """
        x1, y1 = self._px(segment.p1.x), self._py(segment.p1.y)
        x2, y2 = self._px(segment.p2.x), self._py(segment.p2.y)
        if segment.curve == CurveTiming.NoCurve or x1 == x2:
            return f"L{_fmt(x2, y2)}"
        step = self.config.grid.y
        if segment.curve == CurveTiming.CurveFirst:
            path = self._transition(x1, y1, x2, y1 + step, True)
            if y2 > y1 + step:
                path += f"L{_fmt(x2, y2)}"
            return path
        path = ""
        if y2 - step > y1:
            path += f"L{_fmt(x1, y2 - step)}"
        return path + self._transition(x1, max(y1, y2 - step), x2, y2, False)

    def _segment_colour(self, segment: LineSegment) -> str:
        if not segment.is_committed:
            return UNCOMMITTED_COLOUR
        return self.config.colour(segment.colour_index)

    def _render_paths(self, lines: tuple[LineSegment, ...]) -> list[str]:
        """Chain consecutive segments sharing a colour into single paths."""
        parts: list[str] = []
        path, colour, last = "", "", None
        for segment in lines:
            seg_colour = self._segment_colour(segment)
            if path and (seg_colour != colour or last != segment.p1):
                parts.extend(self._draw_path(path, colour))
                path = ""
            if not path:
                path = f"M{_fmt(self._px(segment.p1.x), self._py(segment.p1.y))}"
                colour = seg_colour
            path += self.segment_path(segment)
            last = segment.p2
        if path:
            parts.extend(self._draw_path(path, colour))
        return parts

    def _draw_path(self, path: str, colour: str) -> list[str]:
        return [
            f'<path class="shadow" d="{path}" fill="none" stroke="white" stroke-width="{SHADOW_WIDTH}" stroke-opacity="0.75"/>',
            f'<path class="line" d="{path}" fill="none" stroke="{colour}" stroke-width="{LINE_WIDTH}"/>',
        ]

    # ─── Vertex Rendering ───────────────────────────────────────────────────

    def _render_vertex(self, commit: CommitLayout) -> str:
        if commit.branch_id is None:
            return ""
        colour = self.config.colour(commit.colour_index) if commit.is_committed else UNCOMMITTED_COLOUR
        attrs = f'cx="{self._px(commit.column):.0f}" cy="{self._py(commit.row):.0f}" r="{VERTEX_RADIUS}"'
        if commit.muted:
            attrs += f' opacity="{MUTED_OPACITY}"'
        if commit.is_current:
            return f'<circle class="current" {attrs} fill="white" stroke="{colour}" stroke-width="2"/>'
        return f'<circle {attrs} fill="{colour}"/>'

    def render(self, result: LayoutResult) -> str:
        if not result.commits:
            return ""

        grid = self.config.grid
        svg_w = result.content_width(grid) + grid.offset_x
        svg_h = len(result.commits) * grid.y

        parts = [
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{svg_w}" height="{svg_h}" viewBox="0 0 {svg_w} {svg_h}">',
            "<g>",
        ]

        # Lines (behind vertices)
        for branch in result.branches:
            parts.extend(self._render_paths(branch.lines))

        for commit in result.commits:
            vertex = self._render_vertex(commit)
            if vertex:
                parts.append(vertex)

        parts.append("</g>")
        parts.append("</svg>")
        return "\n".join(parts)
