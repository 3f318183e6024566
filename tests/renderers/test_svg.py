"""Tests for the SVG renderer — pixel mapping and curve-timing paths."""

from __future__ import annotations

from gitgraph_layout.config import GraphConfig, GraphStyle
from gitgraph_layout.layout import full_layout
from gitgraph_layout.renderers.svg import SvgRenderer
from gitgraph_layout.types import UNCOMMITTED, CommitRecord, CurveTiming, LineSegment, Point

# ─── Helpers ──────────────────────────────────────────────────────────────────


def seg(x1: int, y1: int, x2: int, y2: int, curve: CurveTiming, committed: bool = True) -> LineSegment:
    return LineSegment(p1=Point(x1, y1), p2=Point(x2, y2), curve=curve, is_committed=committed, colour_index=0)


def merge_records() -> list[CommitRecord]:
    return [
        CommitRecord(hash="m", parent_hashes=["a", "f"], heads=["main"]),
        CommitRecord(hash="f", parent_hashes=["a"], heads=["feature"]),
        CommitRecord(hash="a"),
    ]


# ─── Segment Path Tests ───────────────────────────────────────────────────────


class TestSegmentPath:
    def test_straight(self):
        assert SvgRenderer().segment_path(seg(0, 0, 0, 3, CurveTiming.NoCurve)) == "L16,84.0"

    def test_curve_first_rounded(self):
        """Default grid (16 x 24, offset 16/12): the bend spans the first row gap."""
        path = SvgRenderer().segment_path(seg(0, 0, 1, 1, CurveTiming.CurveFirst))
        assert path == "C16,31.2 32,16.8 32,36.0"

    def test_curve_first_multi_row_continues_straight(self):
        path = SvgRenderer().segment_path(seg(0, 0, 1, 2, CurveTiming.CurveFirst))
        assert path == "C16,31.2 32,16.8 32,36.0L32,60.0"

    def test_curve_last_rounded(self):
        """Straight down the child's channel, then the bend in the last row gap."""
        path = SvgRenderer().segment_path(seg(1, 0, 0, 2, CurveTiming.CurveLast))
        assert path == "L32,36.0C32,55.2 16,40.8 16,60.0"

    def test_angular(self):
        renderer = SvgRenderer(GraphConfig(style=GraphStyle.Angular))
        assert renderer.segment_path(seg(0, 0, 1, 1, CurveTiming.CurveFirst)) == "L32,26.9L32,36.0"
        assert renderer.segment_path(seg(1, 0, 0, 1, CurveTiming.CurveLast)) == "L32,21.1L16,36.0"


# ─── Full Render Tests ────────────────────────────────────────────────────────


class TestSvgRenderer:
    def test_empty(self):
        assert SvgRenderer().render(full_layout([])) == ""

    def test_one_vertex_per_commit(self):
        svg = SvgRenderer().render(full_layout(merge_records()))
        assert svg.startswith("<svg")
        assert svg.endswith("</svg>")
        assert svg.count("<circle") == 3

    def test_palette_by_column(self):
        config = GraphConfig(colours=["#111111", "#222222"], priority_branches=["main"])
        svg = SvgRenderer(config).render(full_layout(merge_records(), config))
        assert 'stroke="#222222"' in svg
        assert 'fill="#111111"' in svg

    def test_uncommitted_is_grey_and_current(self):
        records = [
            CommitRecord(hash=UNCOMMITTED, parent_hashes=["a"]),
            CommitRecord(hash="a", heads=["main"]),
        ]
        svg = SvgRenderer().render(full_layout(records))
        assert '<circle class="current"' in svg
        assert 'stroke="#808080"' in svg

    def test_canvas_size(self):
        svg = SvgRenderer().render(full_layout(merge_records()))
        assert 'width="48" height="72"' in svg
