"""Layout module — commit graph channel assignment pipeline.

Phases:
  1. Topology        (link rows, register refs, propagate heads down first parents)
  2. Channels        (Pass A: branch discovery, follows aliasing, priority slots,
                      orphan synthesis; Pass B: dense renumbering)
  3. Collapse-left   (slide non-priority branches into free lower channels)
  4. Lines           (walk each branch from its tip emitting segments)
  5. Finalize        (immutable per-commit and per-branch output records)

Mute and droppable analysis are read-only passes over the same topology.
Every walk is iterative; rows are the only node identifiers.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

import networkx as nx

from gitgraph_layout.config import GraphConfig
from gitgraph_layout.types import (
    Branch,
    BranchArena,
    BranchLayout,
    Commit,
    CommitLayout,
    CommitRecord,
    CurveTiming,
    LayoutResult,
    LineSegment,
    Point,
    Topology,
)

logger = logging.getLogger(__name__)

# ─── Topology ─────────────────────────────────────────────────────────────────


def _ref_names(record: CommitRecord) -> list[str]:
    """Branch-creating ref names on a commit: heads, remotes, then the stash selector."""
    names: list[str] = []
    candidates = list(record.heads)
    candidates.extend(r.name for r in record.remotes if not r.name.endswith("/HEAD"))
    if record.stash is not None:
        candidates.append(record.stash.selector)
    for name in candidates:
        if name and name not in names:
            names.append(name)
    return names


def _merge_ids(current: list[int], extra: list[int]) -> list[int]:
    if not extra:
        return current
    return sorted(set(current).union(extra))


def preferred_branch(candidates: list[int], arena: BranchArena, config: GraphConfig) -> int | None:
    """Pick the candidate named earliest in the priority list, else the first one."""
    if not candidates:
        return None
    best: int | None = None
    best_rank: int | None = None
    for branch_id in candidates:
        rank = config.priority_index(arena[branch_id].name)
        if rank is not None and (best_rank is None or rank < best_rank):
            best, best_rank = branch_id, rank
    return best if best is not None else candidates[0]


def build_topology(
    records: Sequence[CommitRecord],
    config: GraphConfig,
    head: str | None = None,
) -> Topology:
    """Link commits to parents/children, register refs, and propagate heads.

    Args:
        records: Commits in display order, newest first.
        config: Supplies ``only_follow_first_parent`` and the priority list.
        head: Hash of the checked-out commit, if known.

    Returns:
        A Topology whose commits carry parent/child rows, defined heads and
        inferred heads. Parents outside the loaded window are left unlinked.
    """
    lookup: dict[str, int] = {}
    for row, record in enumerate(records):
        lookup.setdefault(record.hash, row)

    commits = [
        Commit(
            row=row,
            hash=record.hash,
            parent_hashes=list(record.parent_hashes),
            is_stash=record.stash is not None,
            stash_base=record.stash.base_hash if record.stash is not None else None,
        )
        for row, record in enumerate(records)
    ]
    graph: nx.DiGraph = nx.DiGraph()
    graph.add_nodes_from(range(len(commits)))

    outside = 0
    for commit in commits:
        hashes = commit.parent_hashes[:1] if config.only_follow_first_parent else commit.parent_hashes
        for parent_hash in hashes:
            parent_row = lookup.get(parent_hash)
            if parent_row is None:
                outside += 1
                continue
            if parent_row == commit.row or parent_row in commit.parents:
                continue
            commit.parents.append(parent_row)
            commits[parent_row].children.append(commit.row)
            graph.add_edge(commit.row, parent_row)
    logger.debug(f"Linked {len(commits)} commits, {graph.number_of_edges()} edges, {outside} parents outside the window")

    arena = BranchArena()
    for commit, record in zip(commits, records):
        for name in _ref_names(record):
            commit.defined_heads.append(arena.add(name, commit.row).id)

    # Rows are newest first, so one forward pass carries heads to every ancestor.
    for commit in commits:
        if not commit.parents or commit.is_uncommitted:
            continue
        parent = commits[commit.parents[0]]
        if parent.defined_heads:
            continue
        parent.inferred_heads = _merge_ids(parent.inferred_heads, commit.defined_heads + commit.inferred_heads)

    if commits and commits[0].is_uncommitted and len(commits[0].parents) == 1:
        base = commits[commits[0].parents[0]]
        commits[0].inferred_heads = list(base.defined_heads or base.inferred_heads)
        stolen = preferred_branch(base.defined_heads, arena, config)
        if stolen is not None:
            arena[stolen].tip = 0

    if commits and commits[0].is_uncommitted:
        commits[0].is_current = True
    elif head is not None and head in lookup:
        commits[lookup[head]].is_current = True

    return Topology(commits=commits, lookup=lookup, graph=graph, arena=arena)


def _bfs_rows(graph: nx.DiGraph, start: int) -> Iterator[int]:
    yield start
    for _, row in nx.bfs_edges(graph, start):
        yield row


def is_direct_ancestor(topology: Topology, ancestor: int, descendant: int) -> bool:
    """Whether branch ``ancestor``'s tip is reached from ``descendant``'s tip
    before any commit that only inherited ``ancestor`` (i.e. before a merge).

    Breadth-first over linked parents; an approximation, not a true
    reachability test.
    """
    for row in _bfs_rows(topology.graph, topology.arena[descendant].tip):
        commit = topology.commits[row]
        if ancestor in commit.defined_heads:
            return True
        if not commit.is_uncommitted and ancestor in commit.inferred_heads:
            return False
    return False


# ─── Channel Assignment (Pass A / Pass B) ─────────────────────────────────────


@dataclass
class ChannelAssignment:
    """Branch ids grouped by how Pass A placed them."""

    priority: list[int] = field(default_factory=list)
    non_priority: list[int] = field(default_factory=list)
    orphans: list[int] = field(default_factory=list)
    slots: dict[int, int] = field(default_factory=dict)  # priority branch id -> column

    def promote(self, branch: Branch, slot: int) -> None:
        """Move a branch into the priority group at ``slot``."""
        if branch.id in self.non_priority:
            self.non_priority.remove(branch.id)
        branch.is_priority = True
        self.priority.append(branch.id)
        self.slots[branch.id] = slot


def _discover_branches(topology: Topology, config: GraphConfig) -> ChannelAssignment:
    arena = topology.arena
    placed = ChannelAssignment()
    registered: dict[str, list[int]] = {}
    consumed: set[str] = set()

    for commit in topology.commits:
        for branch_id in commit.defined_heads:
            branch = arena[branch_id]
            for existing in registered.get(branch.short_name, []):
                if is_direct_ancestor(topology, branch_id, existing):
                    branch.follows = arena.root(existing)
                    logger.debug(f"Branch {branch.name!r} follows {arena[branch.follows].name!r}")
                    break
            registered.setdefault(branch.short_name, []).append(branch_id)
            slot = config.priority_index(branch.name)
            claimable = slot is not None and branch.name not in consumed
            if branch.follows is not None:
                # The shared lineage keeps the slot of a priority follower
                root = arena[branch.follows]
                if claimable and not root.is_priority:
                    consumed.add(branch.name)
                    placed.promote(root, slot)
                    logger.debug(f"Branch {root.name!r} takes priority slot {slot} from {branch.name!r}")
                continue
            if claimable:
                consumed.add(branch.name)
                placed.promote(branch, slot)
            else:
                placed.non_priority.append(branch_id)
    return placed


def _synthesize_orphans(topology: Topology, placed: ChannelAssignment) -> None:
    commits = topology.commits
    unheaded = nx.subgraph_view(topology.graph, filter_node=lambda row: not commits[row].has_heads)
    for commit in commits:
        if commit.has_heads:
            continue
        branch = topology.arena.add("", commit.row)
        placed.orphans.append(branch.id)
        members = list(nx.dfs_preorder_nodes(unheaded, commit.row))
        for row in members:
            commits[row].inferred_heads = [branch.id]


def _alias_empty_branches(topology: Topology, placed: ChannelAssignment) -> None:
    """Point branches that own no commit at the owner of their tip commit."""
    arena, commits = topology.arena, topology.commits
    used = {arena.root(c.branch) for c in commits if c.branch is not None}
    for branch in arena:
        if branch.follows is not None or branch.id in used:
            continue
        target = commits[branch.tip].branch
        if target is None or arena.root(target) == branch.id:
            continue
        branch.follows = arena.root(target)
        branch.is_priority = False
        logger.debug(f"Branch {branch.name!r} owns no commit, aliased to {arena[branch.follows].name!r}")
    for group in (placed.priority, placed.non_priority, placed.orphans):
        group[:] = [b for b in group if arena[b].follows is None]


def compact_columns(arena: BranchArena) -> int:
    """Renumber channel owners so the columns in use are exactly 0..k-1.

    Followers carry no column of their own and are skipped. Relative order
    is preserved, as is sharing between branches already on one column.

    Returns:
        k, the number of distinct columns.
    """
    roots = [b for b in arena if b.follows is None and b.column >= 0]
    used = sorted({b.column for b in roots})
    rank = {column: index for index, column in enumerate(used)}
    for branch in roots:
        branch.column = rank[branch.column]
    return len(used)


def assign_channels(topology: Topology, config: GraphConfig) -> ChannelAssignment:
    """Pass A then Pass B: every commit gets a branch, every owner a column.

    Priority branches take their index in the priority list, other named
    branches follow in discovery order, synthetic orphan branches come last.
    """
    arena = topology.arena
    placed = _discover_branches(topology, config)
    _synthesize_orphans(topology, placed)

    for commit in topology.commits:
        commit.branch = preferred_branch(commit.defined_heads or commit.inferred_heads, arena, config)

    _alias_empty_branches(topology, placed)

    for branch_id in placed.priority:
        arena[branch_id].column = placed.slots[branch_id]
    offset = len(config.priority_branches)
    for index, branch_id in enumerate(placed.non_priority + placed.orphans):
        arena[branch_id].column = offset + index

    columns = compact_columns(arena)
    logger.debug(
        f"Assigned {columns} columns: {len(placed.priority)} priority, "
        f"{len(placed.non_priority)} named, {len(placed.orphans)} synthetic branches"
    )
    return placed


# ─── Collapse-Left ────────────────────────────────────────────────────────────


def branch_spans(topology: Topology) -> dict[int, tuple[int, int]]:
    """Inclusive row range each channel owner (with its followers) is active in.

    A commit contributes its own row, its youngest child's row and all of its
    parents' rows, so every segment touching the branch lies inside the span.
    """
    arena = topology.arena
    spans: dict[int, tuple[int, int]] = {}
    for commit in topology.commits:
        if commit.branch is None:
            continue
        rows = [commit.row, *commit.parents]
        if commit.children:
            rows.append(commit.children[0])
        root = arena.root(commit.branch)
        top, bottom = min(rows), max(rows)
        if root in spans:
            top, bottom = min(top, spans[root][0]), max(bottom, spans[root][1])
        spans[root] = (top, bottom)
    return spans


def collapse_left(topology: Topology) -> None:
    """Move each non-priority channel owner to the lowest non-priority column
    no other owner occupies within its active row span, then recompact.

    Whole spans are compared, so this can collapse less than a test of only
    the vertices between each commit and its youngest child would.
    """
    arena = topology.arena
    spans = branch_spans(topology)
    movable = sorted((b for b in spans if not arena[b].is_priority), key=lambda b: (arena[b].column, b))
    for branch_id in movable:
        top, bottom = spans[branch_id]
        available = {arena[b].column for b in movable}
        for other, (other_top, other_bottom) in spans.items():
            if other != branch_id and other_top <= bottom and top <= other_bottom:
                available.discard(arena[other].column)
        if not available:
            continue
        target = min(available)
        if target < arena[branch_id].column:
            logger.debug(f"Collapsed branch {arena[branch_id].name!r} from column {arena[branch_id].column} to {target}")
            arena[branch_id].column = target
    compact_columns(arena)


# ─── Line Building ────────────────────────────────────────────────────────────


def _segment(topology: Topology, child: Commit, parent: Commit, palette_size: int) -> LineSegment:
    x1 = topology.arena.effective_column(child.branch)
    x2 = topology.arena.effective_column(parent.branch)
    if x1 == x2:
        curve = CurveTiming.NoCurve
    elif x2 > x1:
        curve = CurveTiming.CurveFirst
    else:
        curve = CurveTiming.CurveLast
    return LineSegment(
        p1=Point(x1, child.row),
        p2=Point(x2, parent.row),
        curve=curve,
        is_committed=not (child.is_uncommitted or parent.is_uncommitted),
        colour_index=max(x1, x2) % palette_size,
    )


def build_lines(topology: Topology, config: GraphConfig) -> None:
    """Emit exactly one segment per linked (commit, parent) pair.

    Each branch is walked from its tip through parents on the same branch.
    Rows no tip walk reached start a walk of their own branch.
    """
    commits, arena = topology.commits, topology.arena
    visited: set[int] = set()

    def walk(branch_id: int, start: int) -> None:
        stack = [start]
        while stack:
            row = stack.pop()
            if row in visited:
                continue
            visited.add(row)
            commit = commits[row]
            same_branch: list[int] = []
            for parent_row in topology.graph.successors(row):
                parent = commits[parent_row]
                arena[branch_id].lines.append(_segment(topology, commit, parent, config.palette_size))
                if parent.branch == branch_id and parent_row not in visited:
                    same_branch.append(parent_row)
            stack.extend(reversed(same_branch))

    for branch in arena:
        if 0 <= branch.tip < len(commits) and commits[branch.tip].branch == branch.id:
            walk(branch.id, branch.tip)
    for commit in commits:
        if commit.row not in visited and commit.branch is not None:
            walk(commit.branch, commit.row)


# ─── Mute Analysis ────────────────────────────────────────────────────────────


def mute_commits(topology: Topology, reference_hash: str | None, config: GraphConfig) -> list[bool]:
    """Per-row muted flags.

    Merge commits (stashes excepted) are muted when ``mute.merge_commits`` is
    set. With ``mute.commits_not_ancestors_of_head`` and a loaded reference
    commit, everything outside the reference's ancestry is muted; a stash
    counts as inside when its base commit is.
    """
    commits = topology.commits
    muted = [config.mute.merge_commits and c.is_merge and not c.is_stash for c in commits]
    if not config.mute.commits_not_ancestors_of_head or reference_hash not in topology.lookup:
        return muted

    expected = {reference_hash}
    for commit in commits:
        if commit.is_uncommitted:
            continue
        if commit.hash in expected or (commit.stash_base is not None and commit.stash_base in expected):
            expected.discard(commit.hash)
            expected.update(commit.parent_hashes)
        else:
            muted[commit.row] = True
    return muted


# ─── Droppable Determination ──────────────────────────────────────────────────


def mark_droppable(topology: Topology, head: str | None) -> None:
    """Mark every row from HEAD down to the first merge as droppable.

    Scanning rows top-down, the first merge seen (stashes aside) ends marking,
    including one above HEAD. Stash and uncommitted rows are never droppable.
    """
    head_row = topology.lookup.get(head) if head is not None else None
    if head_row is None:
        return
    for commit in topology.commits:
        if commit.is_merge and not commit.is_stash:
            return
        if commit.row < head_row or commit.is_uncommitted or commit.is_stash:
            continue
        commit.droppable = True


# ─── Full Layout Pipeline ─────────────────────────────────────────────────────


def finalize(topology: Topology, muted: list[bool], config: GraphConfig) -> LayoutResult:
    """Freeze the engine state into output records."""
    arena = topology.arena
    commits = []
    for commit in topology.commits:
        column = arena.effective_column(commit.branch)
        commits.append(
            CommitLayout(
                hash=commit.hash,
                row=commit.row,
                column=column,
                colour_index=max(column, 0) % config.palette_size,
                branch_id=commit.branch,
                branch=arena[commit.branch].name if commit.branch is not None else None,
                parents=tuple(commit.parents),
                children=tuple(commit.children),
                is_committed=not commit.is_uncommitted,
                is_current=commit.is_current,
                is_stash=commit.is_stash,
                droppable=commit.droppable,
                muted=muted[commit.row],
            )
        )
    branches = [
        BranchLayout(
            id=branch.id,
            name=branch.name,
            column=arena.effective_column(branch.id),
            follows=branch.follows,
            is_priority=branch.is_priority,
            tip=branch.tip,
            lines=tuple(branch.lines),
        )
        for branch in arena
    ]
    return LayoutResult(commits=commits, branches=branches, lookup=dict(topology.lookup))


def full_layout(
    records: Sequence[CommitRecord],
    config: GraphConfig | None = None,
    head: str | None = None,
) -> LayoutResult:
    """Run the complete pipeline: topology → channels → collapse → lines → finalize.

    Args:
        records: Commits newest first; the uncommitted pseudo-commit, if any, at row 0.
        config: Layout configuration; defaults apply when omitted.
        head: Hash of the checked-out commit, used for current/muted/droppable.

    Returns:
        A LayoutResult. The same input always yields an equal result.
    """
    config = config or GraphConfig()
    topology = build_topology(records, config, head)
    assign_channels(topology, config)
    collapse_left(topology)
    build_lines(topology, config)
    mark_droppable(topology, head)
    muted = mute_commits(topology, head, config)
    return finalize(topology, muted, config)
