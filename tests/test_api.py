"""Tests for api.py — JSON loading and the render entry points."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from gitgraph_layout.api import layout_commits, layout_json, load_commits, render_ascii, render_svg
from gitgraph_layout.config import GraphConfig

COMMITS = [
    {"hash": "b", "parentHashes": ["a"], "heads": ["main"], "author": "ignored"},
    {"hash": "a", "parentHashes": [], "remotes": [{"name": "origin/main", "remoteName": "origin"}]},
]


class TestLoadCommits:
    def test_array(self):
        records, head = load_commits(json.dumps(COMMITS))
        assert [r.hash for r in records] == ["b", "a"]
        assert records[1].remotes[0].remote_name == "origin"
        assert head is None

    def test_object_with_head(self):
        records, head = load_commits({"commits": COMMITS, "head": "b"})
        assert len(records) == 2
        assert head == "b"

    def test_bad_shape(self):
        with pytest.raises(ValueError):
            load_commits('{"rows": []}')
        with pytest.raises(ValueError):
            load_commits("3")

    def test_bad_record(self):
        with pytest.raises(ValidationError):
            load_commits([{"parentHashes": []}])


class TestEntryPoints:
    def test_layout_uses_head_from_input(self):
        result = layout_commits({"commits": COMMITS, "head": "b"})
        assert result.commit("b").is_current
        assert result.commit("b").droppable

    def test_explicit_head_wins(self):
        result = layout_commits({"commits": COMMITS, "head": "b"}, head="a")
        assert result.commit("a").is_current

    def test_layout_json(self):
        data = json.loads(layout_json(COMMITS, GraphConfig(priority_branches=["main"])))
        assert [c["column"] for c in data["commits"]] == [0, 0]
        assert data["branches"][1]["follows"] == 0

    def test_render_svg(self):
        assert render_svg(COMMITS).startswith("<svg")

    def test_render_ascii(self):
        assert render_ascii(COMMITS).splitlines()[0] == "* b (main)"
