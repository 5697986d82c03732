"""Tests for commit graph assembly."""

from __future__ import annotations

import pytest

from commitgraph.assembler import GraphError, assemble, resolve_remote
from commitgraph.git.source import GitCommandError
from commitgraph.models import (
    UNCOMMITTED,
    CommitRemote,
    CommitStash,
    CommitTag,
    RefData,
    RefEntry,
    StashEntry,
    TagRefEntry,
)


def _stash(hash_: str, base: str, date: int = 100, selector: str = "refs/stash@{0}") -> StashEntry:
    return StashEntry(hash_, base, None, selector, "Ada", "ada@example.com", date, f"WIP {hash_}")


def test_stash_is_spliced_directly_after_its_base(make_entry) -> None:
    entries = [make_entry("c3", "c2"), make_entry("c2", "c1", "s1"), make_entry("c1")]

    graph = assemble(entries, RefData(head="c3"), [_stash("s1", "c1")])

    assert [node.hash for node in graph.commits] == ["c3", "c2", "c1", "s1"]
    stash_node = graph.commits[3]
    assert stash_node.parents == ["c1"]
    assert stash_node.stash == CommitStash("refs/stash@{0}", "c1", None)
    assert stash_node.message == "WIP s1"


def test_stashes_sharing_a_base_are_ordered_newest_first(make_entry) -> None:
    entries = [make_entry("c2", "c1"), make_entry("c1")]
    stashes = [
        _stash("old", "c1", date=100, selector="refs/stash@{1}"),
        _stash("new", "c1", date=300, selector="refs/stash@{0}"),
        _stash("mid", "c2", date=200),
    ]

    graph = assemble(entries, RefData(), stashes)

    assert [node.hash for node in graph.commits] == ["c2", "mid", "c1", "new", "old"]


def test_stash_matching_a_fetched_commit_is_attached(make_entry) -> None:
    entries = [make_entry("s1", "c1"), make_entry("c1")]

    graph = assemble(entries, RefData(), [_stash("s1", "c1")])

    assert [node.hash for node in graph.commits] == ["s1", "c1"]
    assert graph.commits[0].stash is not None
    assert graph.commits[0].stash.base_hash == "c1"


def test_stash_with_unknown_base_is_dropped(make_entry) -> None:
    graph = assemble([make_entry("c1")], RefData(), [_stash("s1", "elsewhere")])

    assert [node.hash for node in graph.commits] == ["c1"]


def test_removing_synthetic_nodes_preserves_log_order(make_entry) -> None:
    entries = [make_entry("c4", "c3"), make_entry("c3", "c2"), make_entry("c2", "c1"), make_entry("c1")]
    stashes = [_stash("s1", "c1"), _stash("s2", "c3")]

    graph = assemble(entries, RefData(head="c3"), stashes, count_uncommitted=lambda: 2)

    real = [node.hash for node in graph.commits if node.stash is None and node.hash != UNCOMMITTED]
    assert real == ["c4", "c3", "c2", "c1"]


def test_uncommitted_node_is_inserted_before_head(make_entry) -> None:
    entries = [make_entry("c3", "c2"), make_entry("c2", "c1"), make_entry("c1")]

    graph = assemble(entries, RefData(head="c2"), count_uncommitted=lambda: 4)

    assert [node.hash for node in graph.commits] == ["c3", UNCOMMITTED, "c2", "c1"]
    uncommitted = graph.commits[1]
    assert uncommitted.parents == ["c2"]
    assert uncommitted.author == "*"
    assert uncommitted.message == "Uncommitted Changes (4)"


def test_clean_working_tree_has_no_uncommitted_node(make_entry) -> None:
    graph = assemble([make_entry("c1")], RefData(head="c1"), count_uncommitted=lambda: 0)

    assert [node.hash for node in graph.commits] == ["c1"]


def test_uncommitted_count_is_not_queried_when_head_is_outside_window(make_entry) -> None:
    def fail() -> int:
        raise AssertionError("status should not be queried")

    graph = assemble([make_entry("c1")], RefData(head="other"), count_uncommitted=fail)

    assert [node.hash for node in graph.commits] == ["c1"]


def test_more_commits_flag_drops_sentinel_entry(make_entry) -> None:
    entries = [make_entry("c3", "c2"), make_entry("c2", "c1"), make_entry("c1")]

    graph = assemble(entries, RefData(), max_commits=2)

    assert graph.more_commits_available is True
    assert [node.hash for node in graph.commits] == ["c3", "c2"]


def test_fewer_entries_than_limit_means_no_more_commits(make_entry) -> None:
    graph = assemble([make_entry("c1")], RefData(), max_commits=2)

    assert graph.more_commits_available is False
    assert len(graph.commits) == 1


def test_refs_are_annotated_onto_nodes(make_entry) -> None:
    entries = [make_entry("c2", "c1"), make_entry("c1")]
    refs = RefData(
        head="c2",
        heads=[RefEntry("c2", "dev"), RefEntry("c2", "main"), RefEntry("gone", "stale")],
        tags=[TagRefEntry("c1", "v1", False), TagRefEntry("c2", "v2", True), TagRefEntry("gone", "v0", False)],
        remotes=[RefEntry("c1", "origin/main"), RefEntry("c1", "mirror/main")],
    )

    graph = assemble(entries, refs, remotes=["origin"], current_branch="main")

    c2, c1 = graph.commits
    assert c2.heads == ["main", "dev"]
    assert c2.tags == [CommitTag("v2", True)]
    assert c1.tags == [CommitTag("v1", False)]
    assert c1.remotes == [CommitRemote("origin/main", "origin"), CommitRemote("mirror/main", None)]
    assert graph.head == "c2"
    assert graph.tags == ["v1", "v2", "v0"]


def test_tag_names_are_deduplicated(make_entry) -> None:
    refs = RefData(tags=[TagRefEntry("t", "v1", False), TagRefEntry("c1", "v1", True)])

    graph = assemble([make_entry("c1")], refs)

    assert graph.tags == ["v1"]


def test_resolve_remote_uses_first_matching_prefix() -> None:
    assert resolve_remote("origin/main", ["origin", "origin-backup"]) == "origin"
    assert resolve_remote("origin-backup/main", ["origin", "origin-backup"]) == "origin-backup"
    assert resolve_remote("upstream/main", ["origin"]) is None


def test_empty_repository_yields_empty_graph() -> None:
    error = GitCommandError(["git", "show-ref"], "", 1)

    graph = assemble([], error, [_stash("s1", "c1")], count_uncommitted=lambda: 3)

    assert graph.commits == []
    assert graph.head is None
    assert graph.tags == []
    assert graph.more_commits_available is False


def test_ref_failure_with_commits_is_an_error(make_entry) -> None:
    error = GitCommandError(["git", "show-ref"], "fatal: broken", 128)

    with pytest.raises(GraphError, match="fatal: broken"):
        assemble([make_entry("c1")], error)
