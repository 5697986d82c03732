"""Decoders for the raw text produced by the fixed set of git queries.

Every parser is lenient: malformed records end the stream early and the
records decoded so far are returned. The output formats are owned by git
and may grow fields this module does not understand yet, so nothing here
raises on unexpected input.
"""

from __future__ import annotations

import re
from typing import List, Optional, Sequence

from ..logging import get_logger
from ..models import (
    BranchData,
    CommitDetails,
    FileStatus,
    LogEntry,
    NameStatusRecord,
    NumStatRecord,
    RefData,
    RefEntry,
    StashEntry,
    StatusFiles,
    TagRefEntry,
)

SEPARATOR = "XX7Nal-YARtTpjCikii9nJxER19D6diSyk-AWkPb"

LOG_FORMAT = SEPARATOR.join(["%H", "%P", "%an", "%ae", "%ct", "%s"])
COMMIT_DETAILS_FORMAT = SEPARATOR.join(
    ["%H", "%P", "%an", "%ae", "%at", "%cn", "%ce", "%ct", "%B"]
)
STASH_FORMAT = SEPARATOR.join(["%H", "%P", "%gD", "%an", "%ae", "%ct", "%s"])

_LOG_FIELDS = 6
_STASH_FIELDS = 7
_DETAILS_HEADER_FIELDS = 8

_EOL_RE = re.compile(r"\r\n|\r|\n")
_INVALID_BRANCH_RE = re.compile(r"^\(.* .*\)$")
_REMOTE_HEAD_BRANCH_RE = re.compile(r"^remotes/.*/HEAD$")

_HEADS_PREFIX = "refs/heads/"
_TAGS_PREFIX = "refs/tags/"
_REMOTES_PREFIX = "refs/remotes/"
_HEAD_REF = "HEAD"
_DEREF_SUFFIX = "^{}"

logger = get_logger("git.parsers")


def normalize_path(path: str) -> str:
    return path.replace("\\", "/")


def split_lines(text: str) -> List[str]:
    """Split output into lines, dropping the empty element after the final newline."""
    lines = _EOL_RE.split(text)
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def split_null_fields(text: str) -> List[str]:
    """Split `-z` output on NUL, dropping the empty element after the final NUL."""
    fields = text.split("\0")
    if fields and fields[-1] == "":
        fields.pop()
    return fields


def _parse_int(value: str) -> Optional[int]:
    try:
        return int(value)
    except ValueError:
        return None


def _split_parents(value: str) -> List[str]:
    return value.split(" ") if value != "" else []


def parse_log(text: str) -> List[LogEntry]:
    """Decode `git log --format=LOG_FORMAT` output."""
    entries: List[LogEntry] = []
    for line in split_lines(text):
        fields = line.split(SEPARATOR)
        if len(fields) != _LOG_FIELDS:
            logger.debug("Log stream ended at malformed line after %d entries", len(entries))
            break
        date = _parse_int(fields[4])
        if date is None:
            logger.debug("Log stream ended at non-numeric timestamp %r", fields[4])
            break
        entries.append(
            LogEntry(
                hash=fields[0],
                parents=_split_parents(fields[1]),
                author=fields[2],
                email=fields[3],
                date=date,
                message=fields[5],
            )
        )
    return entries


def parse_commit_details(text: str) -> Optional[CommitDetails]:
    """Decode `git show --quiet --format=COMMIT_DETAILS_FORMAT` output.

    The body is free text and may span lines or even contain the separator,
    so everything after the eighth separator is re-joined. Returns None when
    the header fields are incomplete.
    """
    fields = text.split(SEPARATOR)
    if len(fields) <= _DETAILS_HEADER_FIELDS:
        return None
    author_date = _parse_int(fields[4])
    committer_date = _parse_int(fields[7])
    if author_date is None or committer_date is None:
        return None
    body_lines = _EOL_RE.split(SEPARATOR.join(fields[_DETAILS_HEADER_FIELDS:]))
    while body_lines and body_lines[-1] == "":
        body_lines.pop()
    return CommitDetails(
        hash=fields[0].strip(),
        parents=_split_parents(fields[1]),
        author=fields[2],
        author_email=fields[3],
        author_date=author_date,
        committer=fields[5],
        committer_email=fields[6],
        committer_date=committer_date,
        body="\n".join(body_lines),
    )


def parse_refs(text: str, hide_remotes: Sequence[str] = ()) -> RefData:
    """Decode `git show-ref -d --head` output into heads, tags and remotes."""
    hidden_prefixes = tuple(f"{_REMOTES_PREFIX}{remote}/" for remote in hide_remotes)
    ref_data = RefData()
    for line in split_lines(text):
        if not line:
            continue
        parts = line.split(" ")
        if len(parts) < 2:
            logger.warning("Ref listing line without a ref name: %r; ignoring the rest", line)
            break
        hash_ = parts[0]
        ref = " ".join(parts[1:])

        if ref.startswith(_HEADS_PREFIX):
            ref_data.heads.append(RefEntry(hash=hash_, name=ref[len(_HEADS_PREFIX):]))
        elif ref.startswith(_TAGS_PREFIX):
            annotated = ref.endswith(_DEREF_SUFFIX)
            name = ref[len(_TAGS_PREFIX):]
            if annotated:
                name = name[: -len(_DEREF_SUFFIX)]
            ref_data.tags.append(TagRefEntry(hash=hash_, name=name, annotated=annotated))
        elif ref.startswith(_REMOTES_PREFIX):
            if ref.endswith("/HEAD") or ref.startswith(hidden_prefixes):
                continue
            ref_data.remotes.append(RefEntry(hash=hash_, name=ref[len(_REMOTES_PREFIX):]))
        elif ref == _HEAD_REF:
            ref_data.head = hash_
    return ref_data


def parse_stashes(text: str) -> List[StashEntry]:
    """Decode `git reflog --format=STASH_FORMAT refs/stash` output."""
    stashes: List[StashEntry] = []
    for line in split_lines(text):
        fields = line.split(SEPARATOR)
        if len(fields) != _STASH_FIELDS or fields[1] == "":
            continue
        date = _parse_int(fields[5])
        if date is None:
            continue
        parents = fields[1].split(" ")
        stashes.append(
            StashEntry(
                hash=fields[0],
                base_hash=parents[0],
                untracked_files_hash=parents[2] if len(parents) == 3 else None,
                selector=fields[2],
                author=fields[3],
                email=fields[4],
                date=date,
                message=fields[6],
            )
        )
    return stashes


def parse_branches(text: str, hide_remotes: Sequence[str] = ()) -> BranchData:
    """Decode `git branch -a --no-color` output; the checked-out branch comes first."""
    hidden_prefixes = tuple(f"remotes/{remote}/" for remote in hide_remotes)
    branches: List[str] = []
    head: Optional[str] = None
    for line in split_lines(text):
        name = line[2:].split(" -> ")[0]
        if (
            not name
            or _INVALID_BRANCH_RE.match(name)
            or name.startswith(hidden_prefixes)
            or _REMOTE_HEAD_BRANCH_RE.match(name)
        ):
            continue
        if line.startswith("*"):
            head = name
            branches.insert(0, name)
        else:
            branches.append(name)
    return BranchData(branches=branches, head=head)


def parse_remotes(text: str) -> List[str]:
    return [line for line in split_lines(text) if line]


def parse_diff_name_status(text: str) -> List[NameStatusRecord]:
    """Decode `git diff --name-status -z` output.

    Add, modify and delete records are two NUL-separated items (status, path);
    renames are three (status, old path, new path). Any other status letter
    ends the stream.
    """
    output = split_null_fields(text)
    records: List[NameStatusRecord] = []
    i = 0
    while i < len(output) and output[i] != "":
        letter = output[i][0]
        if letter in (FileStatus.ADDED.value, FileStatus.MODIFIED.value, FileStatus.DELETED.value):
            if i + 1 >= len(output):
                break
            path = normalize_path(output[i + 1])
            records.append(NameStatusRecord(type=FileStatus(letter), old_file_path=path, new_file_path=path))
            i += 2
        elif letter == FileStatus.RENAMED.value:
            if i + 2 >= len(output):
                break
            records.append(
                NameStatusRecord(
                    type=FileStatus.RENAMED,
                    old_file_path=normalize_path(output[i + 1]),
                    new_file_path=normalize_path(output[i + 2]),
                )
            )
            i += 3
        else:
            logger.debug("Name-status stream ended at unknown status %r", output[i])
            break
    return records


def parse_diff_numstat(text: str) -> List[NumStatRecord]:
    """Decode `git diff --numstat -z` output.

    Each record is `additions<TAB>deletions<TAB>path`. For renames the path
    field is empty and the old and new paths follow as two extra items; the
    record is keyed by the new path. Binary files report `-` counts, which
    decode to None.
    """
    output = split_null_fields(text)
    records: List[NumStatRecord] = []
    i = 0
    while i < len(output) and output[i] != "":
        fields = output[i].split("\t")
        if len(fields) != 3:
            break
        additions = _parse_int(fields[0])
        deletions = _parse_int(fields[1])
        if additions is None or deletions is None:
            additions = deletions = None
        if fields[2] != "":
            records.append(NumStatRecord(normalize_path(fields[2]), additions, deletions))
            i += 1
        else:
            if i + 2 >= len(output):
                break
            records.append(NumStatRecord(normalize_path(output[i + 2]), additions, deletions))
            i += 3
    return records


def parse_status(text: str) -> StatusFiles:
    """Decode `git status --porcelain -z` output into deleted and untracked paths.

    Either status column may carry the meaningful letter. Renames and copies
    are followed by their origin path, which is skipped.
    """
    output = text.split("\0")
    deleted: List[str] = []
    untracked: List[str] = []
    i = 0
    while i < len(output) and output[i] != "":
        entry = output[i]
        if len(entry) < 4:
            logger.warning("Status entry too short: %r; ignoring the rest", entry)
            break
        codes = entry[:2]
        path = normalize_path(entry[3:])
        if "D" in codes:
            deleted.append(path)
        elif "?" in codes:
            untracked.append(path)

        if "R" in codes or "C" in codes:
            i += 2
        else:
            i += 1
    return StatusFiles(deleted=deleted, untracked=untracked)


def count_status_lines(text: str) -> int:
    """Count changed or untracked paths in `git status --porcelain` output."""
    return sum(1 for line in split_lines(text) if line)
