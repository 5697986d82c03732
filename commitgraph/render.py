"""Output helpers: JSON-ready graph payloads and a plain-text lane view."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Sequence

from .layout import ColumnAssignment
from .models import CommitNode, FileChange, FileStatus, GraphData


def graph_to_dict(graph: GraphData, assignment: ColumnAssignment) -> Dict[str, Any]:
    """Return the output contract as plain data, with each commit's column added."""
    commits: List[Dict[str, Any]] = []
    for node in graph.commits:
        payload = asdict(node)
        payload["column"] = assignment.column_of(node.hash)
        commits.append(payload)
    return {
        "commits": commits,
        "head": graph.head,
        "tags": list(graph.tags),
        "more_commits_available": graph.more_commits_available,
        "column_count": assignment.column_count,
    }


def file_changes_to_list(changes: Sequence[FileChange]) -> List[Dict[str, Any]]:
    return [
        {
            "old_file_path": change.old_file_path,
            "new_file_path": change.new_file_path,
            "type": change.type.value,
            "additions": change.additions,
            "deletions": change.deletions,
        }
        for change in changes
    ]


def render_text(nodes: Sequence[CommitNode], assignment: ColumnAssignment) -> str:
    """Render one line per node: the lane row, its heads and its message.

    `o   [main] "message"` marks a node in column 0 of a two-column graph.
    """
    width = assignment.column_count
    lines = []
    for node in nodes:
        column = assignment.column_of(node.hash)
        lanes = " ".join("o" if index == column else " " for index in range(width))
        lines.append(f'{lanes} [{" ".join(node.heads)}] "{node.message}"')
    return "\n".join(lines)


def render_file_changes(changes: Sequence[FileChange]) -> str:
    lines = []
    for change in changes:
        if change.type is FileStatus.RENAMED:
            path = f"{change.old_file_path} -> {change.new_file_path}"
        else:
            path = change.new_file_path
        if change.additions is None:
            delta = ""
        else:
            delta = f" (+{change.additions} -{change.deletions})"
        lines.append(f"{change.type.value} {path}{delta}")
    return "\n".join(lines)


__all__ = ["file_changes_to_list", "graph_to_dict", "render_file_changes", "render_text"]
