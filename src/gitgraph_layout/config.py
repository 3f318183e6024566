"""Graph configuration — palette, grid geometry, style, branch priority, muting."""

from __future__ import annotations

import logging
import re
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

DEFAULT_COLOURS: tuple[str, ...] = (
    "#0085d9",
    "#d9008f",
    "#00d90a",
    "#d98500",
    "#a300d9",
    "#ff0000",
    "#00d9cc",
    "#e138e8",
    "#85d900",
    "#dc5b23",
    "#6f24d6",
    "#ffcc00",
)

UNCOMMITTED_COLOUR = "#808080"

_COLOUR_RE = re.compile(
    r"^\s*(#[0-9a-fA-F]{6}|#[0-9a-fA-F]{8}|rgb[a]?\s*\(\s*\d{1,3}\s*,\s*\d{1,3}\s*,\s*\d{1,3}\s*\))\s*$"
)


class GraphStyle(str, Enum):
    """How renderers draw the transition between two channels."""

    Rounded = "rounded"
    Angular = "angular"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GridConfig(_CamelModel):
    """Pixel geometry of one grid cell and the drawing origin."""

    x: int = Field(default=16, gt=0)
    y: int = Field(default=24, gt=0)
    offset_x: int = Field(default=16, ge=0)
    offset_y: int = Field(default=12, ge=0)


class MuteConfig(_CamelModel):
    merge_commits: bool = True
    commits_not_ancestors_of_head: bool = False


class GraphConfig(_CamelModel):
    """Everything the layout engine and renderers read.

    Attributes:
        grid: Cell size and origin used by the renderers.
        colours: Palette, reused cyclically by column.
        style: Rounded or angular channel transitions.
        priority_branches: Branch names pinned, in order, to the leftmost columns.
        only_follow_first_parent: Link only the first parent of each commit.
        mute: Which commits are reported as muted.
    """

    grid: GridConfig = Field(default_factory=GridConfig)
    colours: list[str] = Field(default_factory=lambda: list(DEFAULT_COLOURS))
    style: GraphStyle = GraphStyle.Rounded
    priority_branches: list[str] = Field(default_factory=list)
    only_follow_first_parent: bool = False
    mute: MuteConfig = Field(default_factory=MuteConfig)

    @field_validator("colours")
    @classmethod
    def _valid_colours(cls, value: list[str]) -> list[str]:
        kept = [colour for colour in value if _COLOUR_RE.match(colour)]
        for colour in value:
            if colour not in kept:
                logger.warning(f"Ignoring invalid graph colour {colour!r}")
        if not kept:
            return list(DEFAULT_COLOURS)
        return kept

    @field_validator("priority_branches")
    @classmethod
    def _unique_priorities(cls, value: list[str]) -> list[str]:
        unique: list[str] = []
        for name in value:
            if name in unique:
                logger.warning(f"Duplicate priority branch {name!r} ignored")
                continue
            unique.append(name)
        return unique

    @property
    def palette_size(self) -> int:
        return len(self.colours)

    def colour(self, index: int) -> str:
        return self.colours[index % len(self.colours)]

    def priority_index(self, name: str) -> int | None:
        try:
            return self.priority_branches.index(name)
        except ValueError:
            return None

    @classmethod
    def from_file(cls, path: str | Path) -> GraphConfig:
        """Load a JSON settings file (camelCase or snake_case keys)."""
        return cls.model_validate_json(Path(path).read_text())
