"""Lane assignment for commit graph rendering.

Commits are grouped into vertical chains by greedily following the parent
with the longest chain, then chains are packed into columns first-fit so
that no two chains sharing a column span overlapping rows. The result is
overlap-free but not guaranteed to use the minimum number of columns.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Protocol, Sequence, Set, Tuple


class GraphNode(Protocol):
    hash: str
    parents: List[str]


@dataclass(frozen=True)
class ChainRange:
    """Inclusive range of traversal positions spanned by a chain."""

    start: int
    end: int

    def overlaps(self, other: "ChainRange") -> bool:
        return not (other.end < self.start or self.end < other.start)


@dataclass(frozen=True)
class _ChainLink:
    node: GraphNode
    parent: Optional["_ChainLink"]
    size: int


@dataclass(frozen=True)
class Chain:
    """A maximal vertical run of commits rendered in one lane."""

    hashes: Tuple[str, ...]
    range: ChainRange


@dataclass
class ColumnAssignment:
    """Column index per commit hash, in traversal order."""

    columns: Dict[str, int]
    chains: List[Chain]

    @property
    def column_count(self) -> int:
        return max(self.columns.values(), default=-1) + 1

    def column_of(self, commit_hash: str) -> int:
        return self.columns[commit_hash]

    def __iter__(self) -> Iterator[Tuple[str, int]]:
        return iter(self.columns.items())

    def __len__(self) -> int:
        return len(self.columns)


def assign_columns(nodes: Sequence[GraphNode]) -> ColumnAssignment:
    """Assign every node a column; deterministic for a fixed node order."""
    order = {node.hash: index for index, node in enumerate(nodes)}
    chains = form_chains(nodes)

    placed: List[List[ChainRange]] = []
    chain_columns: List[int] = []
    for chain in chains:
        for column, ranges in enumerate(placed):
            if all(not chain.range.overlaps(existing) for existing in ranges):
                ranges.append(chain.range)
                chain_columns.append(column)
                break
        else:
            chain_columns.append(len(placed))
            placed.append([chain.range])

    assigned: Dict[str, int] = {}
    for chain, column in zip(chains, chain_columns):
        for commit_hash in chain.hashes:
            assigned[commit_hash] = column
    ordered = sorted(assigned, key=order.__getitem__)
    columns = {commit_hash: assigned[commit_hash] for commit_hash in ordered}
    return ColumnAssignment(columns=columns, chains=chains)


def form_chains(nodes: Sequence[GraphNode]) -> List[Chain]:
    """Partition nodes into chains in discovery order.

    Each unvisited node in traversal order starts a chain that extends
    through the not-yet-visited parent offering the longest chain; on equal
    length the first parent listed wins.
    """
    by_hash = {node.hash: node for node in nodes}
    order = {node.hash: index for index, node in enumerate(nodes)}
    visited: Set[str] = set()
    memo: Dict[str, _ChainLink] = {}
    chains: List[Chain] = []

    for node in nodes:
        if node.hash in visited:
            continue
        link: Optional[_ChainLink] = _longest_chain(node, by_hash, visited, memo)
        hashes: List[str] = []
        start = end = order[node.hash]
        while link is not None:
            commit_hash = link.node.hash
            position = order[commit_hash]
            start = min(start, position)
            end = max(end, position)
            hashes.append(commit_hash)
            visited.add(commit_hash)
            link = link.parent
        chains.append(Chain(hashes=tuple(hashes), range=ChainRange(start, end)))
        # Memoized links are only valid for the visited set they were built against.
        memo.clear()
    return chains


def _longest_chain(
    root: GraphNode,
    by_hash: Dict[str, GraphNode],
    visited: Set[str],
    memo: Dict[str, _ChainLink],
) -> _ChainLink:
    """Depth-first post-order walk computing the longest chain ending at `root`."""
    stack: List[Tuple[GraphNode, bool]] = [(root, False)]
    while stack:
        node, expanded = stack.pop()
        if node.hash in memo:
            continue
        candidates = [
            by_hash[parent]
            for parent in node.parents
            if parent not in visited and parent in by_hash
        ]
        if not expanded:
            stack.append((node, True))
            for parent in reversed(candidates):
                if parent.hash not in memo:
                    stack.append((parent, False))
            continue
        best: Optional[_ChainLink] = None
        for parent in candidates:
            chain = memo[parent.hash]
            if chain.size > (best.size if best is not None else 0):
                best = chain
        size = (best.size if best is not None else 0) + 1
        memo[node.hash] = _ChainLink(node=node, parent=best, size=size)
    return memo[root.hash]


__all__ = ["Chain", "ChainRange", "ColumnAssignment", "assign_columns", "form_chains"]
