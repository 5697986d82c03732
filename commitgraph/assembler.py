"""Commit graph assembly: log, refs and stashes merged into one node list."""

from __future__ import annotations

import time
from typing import Callable, Dict, List, Optional, Sequence, Union

from .logging import get_logger
from .models import (
    UNCOMMITTED,
    CommitNode,
    CommitRemote,
    CommitStash,
    CommitTag,
    GraphData,
    LogEntry,
    RefData,
    StashEntry,
)

UNCOMMITTED_AUTHOR = "*"

logger = get_logger("assembler")


class GraphError(RuntimeError):
    """Raised when the commit graph cannot be assembled from the queried data."""


def resolve_ref_data(refs: Union[RefData, BaseException], has_commits: bool) -> RefData:
    """Return usable ref data, or raise if the ref listing failed with commits present.

    An empty repository makes `git show-ref` fail, so a failure without any
    commits simply means there are no refs.
    """
    if not isinstance(refs, BaseException):
        return refs
    if has_commits:
        raise GraphError(f"Unable to load repository refs: {refs}") from refs
    logger.debug("Ref listing failed in a repository without commits: %s", refs)
    return RefData()


def assemble(
    log_entries: Sequence[LogEntry],
    refs: Union[RefData, BaseException],
    stashes: Sequence[StashEntry] = (),
    remotes: Sequence[str] = (),
    *,
    max_commits: Optional[int] = None,
    count_uncommitted: Optional[Callable[[], int]] = None,
    current_branch: Optional[str] = None,
) -> GraphData:
    """Merge log entries, refs and stashes into an ordered list of commit nodes.

    `log_entries` must be in traversal order. When `max_commits` is given the
    log is expected to have been requested with one extra entry; receiving
    that extra entry sets `more_commits_available` and the entry is dropped.
    `count_uncommitted` is only called when HEAD is among the fetched commits.
    """
    entries = list(log_entries)
    more_commits_available = max_commits is not None and len(entries) == max_commits + 1
    if more_commits_available:
        entries.pop()

    ref_data = resolve_ref_data(refs, has_commits=bool(entries))
    if not entries:
        return GraphData(
            commits=[],
            head=ref_data.head,
            tags=_unique_tags(ref_data),
            more_commits_available=False,
        )

    fetched = {entry.hash for entry in entries}
    uncommitted = None
    if ref_data.head is not None and ref_data.head in fetched and count_uncommitted is not None:
        changes = count_uncommitted()
        if changes > 0:
            uncommitted = _uncommitted_node(ref_data.head, changes)

    nodes = _splice_stashes(entries, stashes, ref_data.head, uncommitted)
    lookup: Dict[str, CommitNode] = {node.hash: node for node in nodes}

    for ref in ref_data.heads:
        node = lookup.get(ref.hash)
        if node is not None:
            node.heads.append(ref.name)
    if current_branch is not None:
        for node in nodes:
            if current_branch in node.heads and node.heads[0] != current_branch:
                node.heads.remove(current_branch)
                node.heads.insert(0, current_branch)

    for tag in ref_data.tags:
        node = lookup.get(tag.hash)
        if node is not None:
            node.tags.append(CommitTag(name=tag.name, annotated=tag.annotated))

    for ref in ref_data.remotes:
        node = lookup.get(ref.hash)
        if node is not None:
            node.remotes.append(CommitRemote(name=ref.name, remote=resolve_remote(ref.name, remotes)))

    logger.debug(
        "Assembled %d nodes from %d log entries and %d stashes",
        len(nodes),
        len(entries),
        len(stashes),
    )
    return GraphData(
        commits=nodes,
        head=ref_data.head,
        tags=_unique_tags(ref_data),
        more_commits_available=more_commits_available,
    )


def resolve_remote(ref_name: str, remotes: Sequence[str]) -> Optional[str]:
    """Return the first configured remote whose name prefixes `ref_name`, if any."""
    for remote in remotes:
        if ref_name.startswith(f"{remote}/"):
            return remote
    return None


def _splice_stashes(
    entries: Sequence[LogEntry],
    stashes: Sequence[StashEntry],
    head: Optional[str],
    uncommitted: Optional[CommitNode],
) -> List[CommitNode]:
    """Build the node list with the uncommitted node and stash nodes interleaved.

    The uncommitted node goes directly before HEAD. A stash whose own hash was
    fetched is attached to that node; otherwise it is placed directly after
    its base commit, newest first. Stashes with an unknown base are dropped.
    """
    fetched = {entry.hash for entry in entries}
    attached: Dict[str, CommitStash] = {}
    after_base: Dict[str, List[StashEntry]] = {}
    for stash in stashes:
        if stash.hash in fetched:
            attached[stash.hash] = _stash_info(stash)
        elif stash.base_hash in fetched:
            after_base.setdefault(stash.base_hash, []).append(stash)
        else:
            logger.debug("Stash %s base %s is outside the fetched commits", stash.selector, stash.base_hash)

    nodes: List[CommitNode] = []
    for entry in entries:
        if uncommitted is not None and entry.hash == head:
            nodes.append(uncommitted)
        nodes.append(
            CommitNode(
                hash=entry.hash,
                parents=list(entry.parents),
                author=entry.author,
                email=entry.email,
                date=entry.date,
                message=entry.message,
                stash=attached.get(entry.hash),
            )
        )
        queued = after_base.get(entry.hash)
        if queued:
            for stash in sorted(queued, key=lambda item: item.date, reverse=True):
                nodes.append(_stash_node(stash))
    return nodes


def _stash_info(stash: StashEntry) -> CommitStash:
    return CommitStash(
        selector=stash.selector,
        base_hash=stash.base_hash,
        untracked_files_hash=stash.untracked_files_hash,
    )


def _stash_node(stash: StashEntry) -> CommitNode:
    return CommitNode(
        hash=stash.hash,
        parents=[stash.base_hash],
        author=stash.author,
        email=stash.email,
        date=stash.date,
        message=stash.message,
        stash=_stash_info(stash),
    )


def _uncommitted_node(head: str, changes: int) -> CommitNode:
    return CommitNode(
        hash=UNCOMMITTED,
        parents=[head],
        author=UNCOMMITTED_AUTHOR,
        email="",
        date=int(round(time.time())),
        message=f"Uncommitted Changes ({changes})",
    )


def _unique_tags(ref_data: RefData) -> List[str]:
    return list(dict.fromkeys(tag.name for tag in ref_data.tags))


__all__ = ["GraphError", "assemble", "resolve_ref_data", "resolve_remote"]
