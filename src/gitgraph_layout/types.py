"""Shared types — input records, mutable engine state, immutable layout output."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Iterator

import networkx as nx
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

if TYPE_CHECKING:
    from gitgraph_layout.config import GridConfig

UNCOMMITTED = "*"  # hash of the uncommitted-changes pseudo-commit

# ─── Input Records ────────────────────────────────────────────────────────────


class _Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class RemoteRef(_Record):
    name: str
    remote_name: str | None = None


class StashInfo(_Record):
    selector: str
    base_hash: str
    untracked_files_hash: str | None = None


class CommitRecord(_Record):
    """One row of `git log` output, newest first.

    Only the fields the layout engine reads are modelled; extra keys such as
    author or message are ignored.
    """

    hash: str
    parent_hashes: list[str] = Field(default_factory=list)
    heads: list[str] = Field(default_factory=list)
    remotes: list[RemoteRef] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    stash: StashInfo | None = None


# ─── Engine State ─────────────────────────────────────────────────────────────


@dataclass
class Commit:
    """Per-row working state. ``parents``/``children`` hold row indices."""

    row: int
    hash: str
    parent_hashes: list[str]
    parents: list[int] = field(default_factory=list)
    children: list[int] = field(default_factory=list)
    defined_heads: list[int] = field(default_factory=list)  # sorted branch ids
    inferred_heads: list[int] = field(default_factory=list)  # sorted branch ids
    branch: int | None = None
    is_stash: bool = False
    stash_base: str | None = None
    is_current: bool = False
    droppable: bool = False

    @property
    def is_uncommitted(self) -> bool:
        return self.hash == UNCOMMITTED

    @property
    def is_merge(self) -> bool:
        return len(self.parent_hashes) > 1

    @property
    def has_heads(self) -> bool:
        return bool(self.defined_heads or self.inferred_heads)


@dataclass
class Branch:
    """A named (or synthetic, ``name == ""``) lineage occupying one channel.

    ``follows`` is the id of the branch whose channel this one shares; it is
    resolved like a union-find parent pointer by ``BranchArena.root``.
    """

    id: int
    name: str
    tip: int
    column: int = -1
    follows: int | None = None
    is_priority: bool = False
    lines: list[LineSegment] = field(default_factory=list)

    @property
    def short_name(self) -> str:
        return self.name.rsplit("/", 1)[-1]

    @property
    def is_synthetic(self) -> bool:
        return self.name == ""


class BranchArena:
    """Owns every branch; branches refer to each other by integer id."""

    def __init__(self) -> None:
        self.branches: list[Branch] = []

    def add(self, name: str, tip: int) -> Branch:
        branch = Branch(id=len(self.branches), name=name, tip=tip)
        self.branches.append(branch)
        return branch

    def __getitem__(self, branch_id: int) -> Branch:
        return self.branches[branch_id]

    def __iter__(self) -> Iterator[Branch]:
        return iter(self.branches)

    def __len__(self) -> int:
        return len(self.branches)

    def root(self, branch_id: int) -> int:
        """Follow ``follows`` to the channel owner, compressing the path."""
        root = branch_id
        while self.branches[root].follows is not None:
            root = self.branches[root].follows
        while branch_id != root:
            nxt = self.branches[branch_id].follows
            self.branches[branch_id].follows = root
            branch_id = nxt
        return root

    def effective_column(self, branch_id: int | None) -> int:
        if branch_id is None:
            return -1
        return self.branches[self.root(branch_id)].column


@dataclass
class Topology:
    """Linked commits plus the DAG (edges run child row → parent row)."""

    commits: list[Commit]
    lookup: dict[str, int]
    graph: nx.DiGraph
    arena: BranchArena


# ─── Layout Output ────────────────────────────────────────────────────────────


class CurveTiming(str, Enum):
    """Where a segment changes channel between its two endpoints."""

    NoCurve = "none"
    CurveFirst = "first"  # leave the child's channel immediately
    CurveLast = "last"  # stay in the child's channel until just above the parent


@dataclass(frozen=True)
class Point:
    x: int
    y: int


@dataclass(frozen=True)
class LineSegment:
    p1: Point  # child end
    p2: Point  # parent end
    curve: CurveTiming
    is_committed: bool
    colour_index: int


@dataclass(frozen=True)
class CommitLayout:
    hash: str
    row: int
    column: int
    colour_index: int
    branch_id: int | None
    branch: str | None
    parents: tuple[int, ...]
    children: tuple[int, ...]
    is_committed: bool
    is_current: bool
    is_stash: bool
    droppable: bool
    muted: bool


@dataclass(frozen=True)
class BranchLayout:
    id: int
    name: str
    column: int  # effective column
    follows: int | None
    is_priority: bool
    tip: int
    lines: tuple[LineSegment, ...]


@dataclass
class LayoutResult:
    """Immutable-by-convention result of ``full_layout`` plus read-only queries."""

    commits: list[CommitLayout] = field(default_factory=list)
    branches: list[BranchLayout] = field(default_factory=list)
    lookup: dict[str, int] = field(default_factory=dict)

    def commit(self, commit_hash: str) -> CommitLayout | None:
        row = self.lookup.get(commit_hash)
        return None if row is None else self.commits[row]

    def commits_between(self, row_a: int, row_b: int) -> list[CommitLayout]:
        """Commits whose rows lie in the inclusive range spanned by the two rows."""
        lo, hi = sorted((row_a, row_b))
        return self.commits[max(lo, 0) : hi + 1]

    def nearest_parent_row(self, row: int) -> int | None:
        if not 0 <= row < len(self.commits) or not self.commits[row].parents:
            return None
        return min(self.commits[row].parents)

    def nearest_child_row(self, row: int) -> int | None:
        if not 0 <= row < len(self.commits) or not self.commits[row].children:
            return None
        return max(self.commits[row].children)

    def max_column(self) -> int:
        return max((c.column for c in self.commits), default=-1)

    def content_width(self, grid: GridConfig) -> int:
        return (self.max_column() + 1) * grid.x

    def segments(self) -> Iterator[LineSegment]:
        for branch in self.branches:
            yield from branch.lines

    def to_dict(self) -> dict:
        return {
            "commits": [asdict(c) for c in self.commits],
            "branches": [asdict(b) for b in self.branches],
        }
