"""Merge name-status, numstat and status records into file changes."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from .git.parsers import normalize_path
from .models import FileChange, FileStatus, NameStatusRecord, NumStatRecord, StatusFiles


def reconcile(
    name_status: Sequence[NameStatusRecord],
    numstat: Sequence[NumStatRecord],
    status: Optional[StatusFiles] = None,
) -> List[FileChange]:
    """Return one file change per changed path.

    Name-status records are authoritative for rename detection and seed the
    result. Working-tree status (uncommitted views only) upgrades or adds
    deleted paths and always appends untracked paths. Numstat counts are
    overlaid by new path; unmatched records keep None counts.
    """
    changes: List[FileChange] = []
    lookup: Dict[str, int] = {}

    for record in name_status:
        lookup[record.new_file_path] = len(changes)
        changes.append(
            FileChange(
                old_file_path=record.old_file_path,
                new_file_path=record.new_file_path,
                type=record.type,
            )
        )

    if status is not None:
        for raw_path in status.deleted:
            path = normalize_path(raw_path)
            index = lookup.get(path)
            if index is not None:
                changes[index].type = FileStatus.DELETED
            else:
                changes.append(FileChange(old_file_path=path, new_file_path=path, type=FileStatus.DELETED))
        # git diff never reports untracked files, so these are never deduplicated.
        for raw_path in status.untracked:
            path = normalize_path(raw_path)
            changes.append(FileChange(old_file_path=path, new_file_path=path, type=FileStatus.UNTRACKED))

    for record in numstat:
        index = lookup.get(record.file_path)
        if index is None:
            continue
        changes[index].additions = record.additions
        changes[index].deletions = record.deletions

    return changes


def reconcile_stash(
    name_status: Sequence[NameStatusRecord],
    numstat: Sequence[NumStatRecord],
    untracked_name_status: Sequence[NameStatusRecord] = (),
    untracked_numstat: Sequence[NumStatRecord] = (),
) -> List[FileChange]:
    """Reconcile a stash diff plus the tree of its untracked-files commit.

    Files added by the untracked-files commit are reported as untracked.
    """
    changes = reconcile(name_status, numstat)
    for change in reconcile(untracked_name_status, untracked_numstat):
        if change.type == FileStatus.ADDED:
            change.type = FileStatus.UNTRACKED
            changes.append(change)
    return changes


__all__ = ["reconcile", "reconcile_stash"]
