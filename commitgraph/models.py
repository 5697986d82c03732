"""Core data models shared across commitgraph components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

# Hash used by the synthetic node that stands for the live working tree.
UNCOMMITTED = "*"


class FileStatus(str, Enum):
    """Kind of change recorded for a single file."""

    ADDED = "A"
    MODIFIED = "M"
    DELETED = "D"
    RENAMED = "R"
    UNTRACKED = "U"


@dataclass(frozen=True)
class LogEntry:
    """One commit as returned by the log query, in traversal order."""

    hash: str
    parents: List[str]
    author: str
    email: str
    date: int
    message: str


@dataclass
class CommitDetails:
    """Full metadata of a single commit for the detail view."""

    hash: str
    parents: List[str]
    author: str
    author_email: str
    author_date: int
    committer: str
    committer_email: str
    committer_date: int
    body: str
    file_changes: List["FileChange"] = field(default_factory=list)


@dataclass(frozen=True)
class RefEntry:
    """A branch head or remote-tracking branch pointing at a commit."""

    hash: str
    name: str


@dataclass(frozen=True)
class TagRefEntry:
    """A tag pointing at a commit; annotated tags are recorded dereferenced."""

    hash: str
    name: str
    annotated: bool


@dataclass
class RefData:
    """Decoded ref listing: resolved HEAD plus heads, tags and remotes."""

    head: Optional[str] = None
    heads: List[RefEntry] = field(default_factory=list)
    tags: List[TagRefEntry] = field(default_factory=list)
    remotes: List[RefEntry] = field(default_factory=list)


@dataclass(frozen=True)
class BranchData:
    """Branch names known to the repository, checked-out branch first."""

    branches: List[str]
    head: Optional[str]


@dataclass(frozen=True)
class StashEntry:
    """A stash reflog entry; never part of the primary log traversal."""

    hash: str
    base_hash: str
    untracked_files_hash: Optional[str]
    selector: str
    author: str
    email: str
    date: int
    message: str


@dataclass(frozen=True)
class CommitTag:
    """A tag on a commit node; `annotated` is set for tag objects."""

    name: str
    annotated: bool


@dataclass(frozen=True)
class CommitRemote:
    """A remote-tracking branch; `remote` is None when no configured remote matched."""

    name: str
    remote: Optional[str]


@dataclass(frozen=True)
class CommitStash:
    """Stash metadata attached to a commit node."""

    selector: str
    base_hash: str
    untracked_files_hash: Optional[str]


@dataclass
class CommitNode:
    """Render-ready commit (or stash) annotated with the refs pointing at it."""

    hash: str
    parents: List[str]
    author: str
    email: str
    date: int
    message: str
    heads: List[str] = field(default_factory=list)
    tags: List[CommitTag] = field(default_factory=list)
    remotes: List[CommitRemote] = field(default_factory=list)
    stash: Optional[CommitStash] = None


@dataclass
class GraphData:
    """Output of graph assembly."""

    commits: List[CommitNode]
    head: Optional[str]
    tags: List[str]
    more_commits_available: bool


@dataclass(frozen=True)
class NameStatusRecord:
    """One `--name-status` diff record."""

    type: FileStatus
    old_file_path: str
    new_file_path: str


@dataclass(frozen=True)
class NumStatRecord:
    """One `--numstat` diff record; counts are None for binary files."""

    file_path: str
    additions: Optional[int]
    deletions: Optional[int]


@dataclass(frozen=True)
class StatusFiles:
    """Deleted and untracked working-tree paths from porcelain status."""

    deleted: List[str] = field(default_factory=list)
    untracked: List[str] = field(default_factory=list)


@dataclass
class FileChange:
    """Reconciled change of a single file between two revisions."""

    old_file_path: str
    new_file_path: str
    type: FileStatus
    additions: Optional[int] = None
    deletions: Optional[int] = None
