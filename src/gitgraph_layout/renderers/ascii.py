"""ASCII renderer — draws a commit graph LayoutResult as terminal text.

Commit row ``r`` is text line ``2r``; the connector between rows ``r`` and
``r + 1`` is line ``2r + 1``. Channel ``c`` sits at character ``2c``.
"""

from __future__ import annotations

from gitgraph_layout.types import CurveTiming, LayoutResult, LineSegment

VERTEX = "*"
UNCOMMITTED_VERTEX = "o"
SHORT_HASH = 7


class Canvas:
    """Character grid that only writes into blank cells."""

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.grid: list[list[str]] = [[" "] * width for _ in range(height)]

    def put(self, col: int, row: int, ch: str) -> None:
        if 0 <= row < self.height and 0 <= col < self.width and self.grid[row][col] == " ":
            self.grid[row][col] = ch

    def vline(self, col: int, row_start: int, row_end: int) -> None:
        for row in range(row_start, row_end + 1):
            self.put(col, row, "|")

    def lines(self) -> list[str]:
        return ["".join(row).rstrip() for row in self.grid]


def _draw_segment(canvas: Canvas, segment: LineSegment) -> None:
    x1, y1 = segment.p1.x * 2, segment.p1.y * 2
    x2, y2 = segment.p2.x * 2, segment.p2.y * 2
    if segment.curve == CurveTiming.NoCurve or x1 == x2:
        canvas.vline(x1, y1 + 1, y2 - 1)
        return

    gap = y1 + 1 if segment.curve == CurveTiming.CurveFirst else y2 - 1
    canvas.vline(x1, y1 + 1, gap - 1)
    canvas.vline(x2, gap + 1, y2 - 1)
    if x2 > x1:
        canvas.put(x1 + 1, gap, "\\")
        for col in range(x1 + 2, x2):
            canvas.put(col, gap, "_")
    else:
        canvas.put(x1 - 1, gap, "/")
        for col in range(x2 + 1, x1 - 1):
            canvas.put(col, gap, "_")


class AsciiRenderer:
    """ASCII renderer — one text line per commit plus connector lines."""

    def render(self, result: LayoutResult) -> str:
        if not result.commits:
            return ""

        graph_width = (result.max_column() + 1) * 2
        canvas = Canvas(graph_width, len(result.commits) * 2 - 1)

        # Vertices first so lines never overwrite them
        for commit in result.commits:
            if commit.branch_id is None:
                continue
            canvas.put(commit.column * 2, commit.row * 2, VERTEX if commit.is_committed else UNCOMMITTED_VERTEX)

        for segment in result.segments():
            _draw_segment(canvas, segment)

        labels: dict[int, list[str]] = {}
        for branch in result.branches:
            if branch.name:
                labels.setdefault(branch.tip, []).append(branch.name)

        out = canvas.lines()
        for commit in result.commits:
            text = "uncommitted" if not commit.is_committed else commit.hash[:SHORT_HASH]
            names = labels.get(commit.row)
            if names:
                text += f" ({', '.join(names)})"
            line = out[commit.row * 2]
            out[commit.row * 2] = line.ljust(graph_width) + text
        return "\n".join(out)
