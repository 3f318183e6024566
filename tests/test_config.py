"""Tests for config.py — validation, aliases and file loading."""

from __future__ import annotations

import json
import logging

import pytest
from pydantic import ValidationError

from gitgraph_layout.config import DEFAULT_COLOURS, GraphConfig, GraphStyle, GridConfig


class TestGraphConfig:
    def test_defaults(self):
        config = GraphConfig()
        assert config.colours == list(DEFAULT_COLOURS)
        assert config.style == GraphStyle.Rounded
        assert config.grid == GridConfig(x=16, y=24, offset_x=16, offset_y=12)
        assert config.mute.merge_commits
        assert not config.mute.commits_not_ancestors_of_head

    def test_invalid_colours_dropped(self, caplog):
        with caplog.at_level(logging.WARNING, logger="gitgraph_layout.config"):
            config = GraphConfig(colours=["#abcdef", "red", "rgba(1, 2, 3)", "#12345678"])
        assert config.colours == ["#abcdef", "rgba(1, 2, 3)", "#12345678"]
        assert "red" in caplog.text

    def test_no_valid_colours_falls_back(self):
        assert GraphConfig(colours=["nope"]).colours == list(DEFAULT_COLOURS)

    def test_colour_cycles(self):
        config = GraphConfig(colours=["#000000", "#ffffff"])
        assert config.colour(3) == "#ffffff"

    def test_duplicate_priorities_dropped(self, caplog):
        with caplog.at_level(logging.WARNING, logger="gitgraph_layout.config"):
            config = GraphConfig(priority_branches=["main", "dev", "main"])
        assert config.priority_branches == ["main", "dev"]
        assert config.priority_index("dev") == 1
        assert config.priority_index("other") is None
        assert "Duplicate" in caplog.text

    def test_camel_case_aliases(self):
        config = GraphConfig.model_validate(
            {
                "priorityBranches": ["main"],
                "onlyFollowFirstParent": True,
                "grid": {"offsetX": 4},
                "mute": {"commitsNotAncestorsOfHead": True},
                "style": "angular",
            }
        )
        assert config.priority_branches == ["main"]
        assert config.only_follow_first_parent
        assert config.grid.offset_x == 4
        assert config.mute.commits_not_ancestors_of_head
        assert config.style == GraphStyle.Angular

    def test_grid_must_be_positive(self):
        with pytest.raises(ValidationError):
            GridConfig(x=0)

    def test_from_file(self, tmp_path):
        path = tmp_path / "graph.json"
        path.write_text(json.dumps({"priorityBranches": ["main", "develop"]}))
        assert GraphConfig.from_file(path).priority_branches == ["main", "develop"]
