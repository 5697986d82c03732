"""Tests for graph rendering helpers."""

from __future__ import annotations

import json

from commitgraph.assembler import assemble
from commitgraph.layout import assign_columns
from commitgraph.models import FileChange, FileStatus, RefData, RefEntry, TagRefEntry
from commitgraph.render import graph_to_dict, render_file_changes, render_text


def _sample_graph(make_entry):
    entries = [
        make_entry("m3", "m2", "f2"),
        make_entry("f2", "m1"),
        make_entry("m2", "m1"),
        make_entry("m1"),
    ]
    refs = RefData(
        head="m3",
        heads=[RefEntry("m3", "main"), RefEntry("f2", "feature")],
        tags=[TagRefEntry("m1", "v1.0", True)],
    )
    return assemble(entries, refs, current_branch="main")


def test_render_text_draws_one_lane_per_chain(make_entry) -> None:
    graph = _sample_graph(make_entry)
    assignment = assign_columns(graph.commits)

    assert render_text(graph.commits, assignment) == "\n".join(
        [
            'o   [main] "commit m3"',
            '  o [feature] "commit f2"',
            'o   [] "commit m2"',
            'o   [] "commit m1"',
        ]
    )


def test_graph_to_dict_is_json_serialisable(make_entry) -> None:
    graph = _sample_graph(make_entry)
    assignment = assign_columns(graph.commits)

    payload = json.loads(json.dumps(graph_to_dict(graph, assignment)))

    assert payload["head"] == "m3"
    assert payload["tags"] == ["v1.0"]
    assert payload["more_commits_available"] is False
    assert payload["column_count"] == 2
    first = payload["commits"][0]
    assert first["hash"] == "m3"
    assert first["column"] == 0
    assert first["heads"] == ["main"]
    assert first["stash"] is None
    assert payload["commits"][-1]["tags"] == [{"name": "v1.0", "annotated": True}]


def test_render_file_changes() -> None:
    changes = [
        FileChange("a.txt", "a.txt", FileStatus.MODIFIED, 2, 1),
        FileChange("old.md", "new.md", FileStatus.RENAMED, 0, 0),
        FileChange("fresh.txt", "fresh.txt", FileStatus.UNTRACKED),
    ]

    assert render_file_changes(changes) == "\n".join(
        ["M a.txt (+2 -1)", "R old.md -> new.md (+0 -0)", "U fresh.txt"]
    )


def test_unresolved_remote_is_serialised_as_null(make_entry) -> None:
    refs = RefData(head="c1", remotes=[RefEntry("c1", "origin/main"), RefEntry("c1", "mirror/main")])
    graph = assemble([make_entry("c1")], refs, remotes=["origin"])

    payload = graph_to_dict(graph, assign_columns(graph.commits))

    assert payload["commits"][0]["remotes"] == [
        {"name": "origin/main", "remote": "origin"},
        {"name": "mirror/main", "remote": None},
    ]
