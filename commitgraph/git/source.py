"""Git query construction on top of an injectable process runner."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

from ..logging import get_logger
from ..models import (
    UNCOMMITTED,
    BranchData,
    CommitDetails,
    LogEntry,
    NameStatusRecord,
    NumStatRecord,
    RefData,
    StashEntry,
    StatusFiles,
)
from . import parsers

DEFAULT_DIFF_FILTER = "AMDR"


class GitCommandError(RuntimeError):
    """Raised when a git process exits with a non-zero status."""

    def __init__(self, args: Sequence[str], stderr: str = "", returncode: int | None = None) -> None:
        self.command = list(args)
        self.stderr = stderr.strip()
        self.returncode = returncode
        detail = self.stderr or f"exit status {returncode}"
        super().__init__(f"`{' '.join(self.command)}` failed: {detail}")


class GitDataSource:
    """Runs the fixed set of git queries for one repository and decodes their output."""

    def __init__(self, repo_path: str | Path, runner: Callable[..., str] | None = None) -> None:
        self.repo = Path(repo_path)
        self._runner = runner or self._default_runner
        self.logger = get_logger("git.source")

    # ------------------------------------------------------------------
    # Repository info

    def get_remotes(self) -> List[str]:
        return parsers.parse_remotes(self._git(["remote"]))

    def get_branches(self, hide_remotes: Sequence[str] = ()) -> BranchData:
        output = self._git(["branch", "-a", "--no-color"])
        return parsers.parse_branches(output, hide_remotes)

    def get_stashes(self) -> List[StashEntry]:
        """Return all stashes; a failing stash query yields an empty list."""
        try:
            output = self._git(
                ["reflog", f"--format={parsers.STASH_FORMAT}", "refs/stash", "--"]
            )
        except GitCommandError as exc:
            self.logger.debug("Stash listing unavailable: %s", exc)
            return []
        return parsers.parse_stashes(output)

    def get_refs(self, hide_remotes: Sequence[str] = ()) -> RefData:
        return parsers.parse_refs(self._git(["show-ref", "-d", "--head"]), hide_remotes)

    # ------------------------------------------------------------------
    # Log

    def get_log(
        self,
        branches: Optional[Sequence[str]],
        max_count: int,
        remotes: Sequence[str] = (),
        hide_remotes: Sequence[str] = (),
        stashes: Sequence[StashEntry] = (),
    ) -> List[LogEntry]:
        """Return up to `max_count` commits in author-date order.

        With no branch filter every branch, tag and visible remote is shown,
        together with HEAD and the base commits of all stashes so that stashes
        can be attached to a fetched commit.
        """
        args = [
            "-c",
            "log.showSignature=false",
            "log",
            f"--max-count={max_count}",
            f"--format={parsers.LOG_FORMAT}",
            "--author-date-order",
        ]
        if branches is not None:
            args.extend(branches)
        else:
            args.extend(["--branches", "--tags"])
            if not hide_remotes:
                args.append("--remotes")
            else:
                for remote in remotes:
                    if remote not in hide_remotes:
                        args.append(f"--glob=refs/remotes/{remote}")
            args.extend(dict.fromkeys(stash.base_hash for stash in stashes))
            args.append("HEAD")
        args.append("--")
        return parsers.parse_log(self._git(args))

    def count_uncommitted_changes(self) -> int:
        output = self._git(["status", "--untracked-files=all", "--porcelain"])
        return parsers.count_status_lines(output)

    # ------------------------------------------------------------------
    # Detail views

    def get_commit_details_base(self, commit_hash: str) -> CommitDetails:
        output = self._git(
            [
                "-c",
                "log.showSignature=false",
                "show",
                "--quiet",
                commit_hash,
                f"--format={parsers.COMMIT_DETAILS_FORMAT}",
            ]
        )
        details = parsers.parse_commit_details(output)
        if details is None:
            raise GitCommandError(["show", commit_hash], "unexpected commit details output")
        return details

    def get_status(self) -> StatusFiles:
        output = self._git(["status", "-s", "--untracked-files=all", "--porcelain", "-z"])
        return parsers.parse_status(output)

    def get_diff_name_status(
        self, from_hash: str, to_hash: str, diff_filter: str = DEFAULT_DIFF_FILTER
    ) -> List[NameStatusRecord]:
        output = self._diff(from_hash, to_hash, "--name-status", diff_filter)
        return parsers.parse_diff_name_status(output)

    def get_diff_numstat(
        self, from_hash: str, to_hash: str, diff_filter: str = DEFAULT_DIFF_FILTER
    ) -> List[NumStatRecord]:
        output = self._diff(from_hash, to_hash, "--numstat", diff_filter)
        return parsers.parse_diff_numstat(output)

    # ------------------------------------------------------------------
    # Internals

    def _diff(self, from_hash: str, to_hash: str, arg: str, diff_filter: str) -> str:
        """Diff two revisions; an empty `to_hash` means the working tree.

        Equal revisions diff the commit against its parent (or the empty tree
        for root commits) with `diff-tree`, whose output starts with the commit
        hash.
        """
        if to_hash == UNCOMMITTED:
            to_hash = ""
        if from_hash == to_hash:
            args = [
                "diff-tree",
                arg,
                "-r",
                "--root",
                "--find-renames",
                f"--diff-filter={diff_filter}",
                "-z",
                from_hash,
            ]
            output = self._git(args)
            _, _, remainder = output.partition("\0")
            return remainder
        args = ["diff", arg, "--find-renames", f"--diff-filter={diff_filter}", "-z", from_hash]
        if to_hash:
            args.append(to_hash)
        return self._git(args)

    def _git(self, args: Iterable[str]) -> str:
        command = ["git", *args]
        self.logger.debug("Running %s", " ".join(command))
        return self._runner(command, cwd=self.repo, capture_output=True)

    @staticmethod
    def _default_runner(
        args: Iterable[str],
        *,
        cwd: Path,
        capture_output: bool = False,
    ) -> str:
        command = list(args)
        try:
            completed = subprocess.run(
                command,
                cwd=str(cwd),
                check=True,
                encoding="utf-8",
                errors="replace",
                capture_output=capture_output,
            )
        except subprocess.CalledProcessError as exc:
            raise GitCommandError(command, exc.stderr or "", exc.returncode) from exc
        except OSError as exc:
            raise GitCommandError(command, str(exc)) from exc
        return completed.stdout if capture_output else ""


__all__ = ["DEFAULT_DIFF_FILTER", "GitCommandError", "GitDataSource"]
