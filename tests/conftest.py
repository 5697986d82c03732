from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

import pytest

from commitgraph.git.parsers import SEPARATOR
from commitgraph.models import LogEntry


class FakeGit:
    """Runner double that answers git commands by subcommand prefix."""

    def __init__(self) -> None:
        self.calls: List[List[str]] = []
        self._responses: List[Tuple[Tuple[str, ...], str, Optional[Exception]]] = []

    def respond(
        self, prefix: Sequence[str], output: str = "", *, error: Exception | None = None
    ) -> None:
        self._responses.append((tuple(prefix), output, error))

    def __call__(self, args: Iterable[str], cwd: Path, capture_output: bool = False) -> str:
        command = list(args)
        self.calls.append(command)
        stripped = _strip_config_options(command[1:])
        for prefix, output, error in self._responses:
            if tuple(stripped[: len(prefix)]) == prefix:
                if error is not None:
                    raise error
                return output
        return ""

    def commands(self, subcommand: str) -> List[List[str]]:
        return [call for call in self.calls if _strip_config_options(call[1:])[:1] == [subcommand]]


def _strip_config_options(args: List[str]) -> List[str]:
    while len(args) >= 2 and args[0] == "-c":
        args = args[2:]
    return args


@pytest.fixture
def fake_git() -> FakeGit:
    return FakeGit()


@pytest.fixture
def make_entry() -> Callable[..., LogEntry]:
    """Build a LogEntry from a hash and its parent hashes."""

    def build(hash_: str, *parents: str, date: int = 1700000000) -> LogEntry:
        return LogEntry(
            hash=hash_,
            parents=list(parents),
            author="Ada",
            email="ada@example.com",
            date=date,
            message=f"commit {hash_}",
        )

    return build


@pytest.fixture
def log_line() -> Callable[..., str]:
    """Format one line of `git log --format=LOG_FORMAT` output."""

    def build(hash_: str, parents: str = "", date: int = 1700000000, subject: str = "") -> str:
        fields = [hash_, parents, "Ada", "ada@example.com", str(date), subject or f"commit {hash_}"]
        return SEPARATOR.join(fields)

    return build


@pytest.fixture
def stash_line() -> Callable[..., str]:
    """Format one line of `git reflog --format=STASH_FORMAT` output."""

    def build(hash_: str, parents: str, selector: str, date: int, subject: str = "WIP") -> str:
        fields = [hash_, parents, selector, "Ada", "ada@example.com", str(date), subject]
        return SEPARATOR.join(fields)

    return build
