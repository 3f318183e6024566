"""gitgraph_layout — branch and channel layout for commit history graphs."""

from gitgraph_layout.api import layout_commits, layout_json, load_commits, render_ascii, render_svg
from gitgraph_layout.config import GraphConfig, GraphStyle, GridConfig, MuteConfig
from gitgraph_layout.layout import full_layout
from gitgraph_layout.types import (
    UNCOMMITTED,
    BranchLayout,
    CommitLayout,
    CommitRecord,
    CurveTiming,
    LayoutResult,
    LineSegment,
    Point,
    RemoteRef,
    StashInfo,
)

__all__ = [
    "UNCOMMITTED",
    "BranchLayout",
    "CommitLayout",
    "CommitRecord",
    "CurveTiming",
    "GraphConfig",
    "GraphStyle",
    "GridConfig",
    "LayoutResult",
    "LineSegment",
    "MuteConfig",
    "Point",
    "RemoteRef",
    "StashInfo",
    "full_layout",
    "layout_commits",
    "layout_json",
    "load_commits",
    "render_ascii",
    "render_svg",
]
