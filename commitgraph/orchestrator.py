"""Pipeline orchestration: git queries, graph assembly, layout and detail views."""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Union

from .assembler import GraphError, assemble
from .config import GraphConfig, load_config
from .git.source import GitCommandError, GitDataSource
from .layout import ColumnAssignment, assign_columns
from .logging import get_logger
from .models import UNCOMMITTED, CommitDetails, CommitStash, FileChange, GraphData, RefData
from .reconciler import reconcile, reconcile_stash


@dataclass
class GraphView:
    """Assembled graph together with its column layout."""

    graph: GraphData
    assignment: ColumnAssignment


class Orchestrator:
    """Coordinates the git queries feeding graph assembly and the detail views."""

    def __init__(
        self,
        source_factory: Callable[[Path], GitDataSource] | None = None,
        *,
        max_workers: int = 3,
    ) -> None:
        self._source_factory = source_factory or GitDataSource
        self._max_workers = max_workers
        self.logger = get_logger("orchestrator")

    def load_graph(
        self,
        path: str,
        *,
        max_commits: Optional[int] = None,
        config: Optional[GraphConfig] = None,
    ) -> GraphView:
        """Query the repository at `path` and return its laid-out commit graph."""
        repo_path = Path(path).expanduser().resolve()
        config = config or load_config(repo_path)
        limit = max_commits if max_commits is not None else config.max_commits
        source = self._source_factory(repo_path)
        self.logger.info("Loading commit graph for %s (max %d commits)", repo_path, limit)

        with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
            remotes_future = pool.submit(source.get_remotes)
            branches_future = pool.submit(source.get_branches, config.hide_remotes)
            stashes_future = pool.submit(source.get_stashes) if config.show_stashes else None
            remotes = remotes_future.result()
            branch_data = branches_future.result()
            stashes = stashes_future.result() if stashes_future is not None else []

            log_future = pool.submit(
                source.get_log,
                config.branches,
                limit + 1,
                remotes,
                config.hide_remotes,
                stashes,
            )
            refs_future = pool.submit(source.get_refs, config.hide_remotes)
            refs = _result_or_error(refs_future)
            try:
                log_entries = log_future.result()
            except GitCommandError as exc:
                if not isinstance(refs, GitCommandError):
                    raise
                # Neither log nor refs resolve in a repository without commits.
                self.logger.debug("No commits found in %s: %s", repo_path, exc)
                log_entries = []

        graph = assemble(
            log_entries,
            refs,
            stashes,
            remotes,
            max_commits=limit,
            count_uncommitted=(
                source.count_uncommitted_changes if config.show_uncommitted_changes else None
            ),
            current_branch=branch_data.head,
        )
        assignment = assign_columns(graph.commits)
        self.logger.info(
            "Loaded %d commits in %d columns%s",
            len(graph.commits),
            assignment.column_count,
            " (more available)" if graph.more_commits_available else "",
        )
        return GraphView(graph=graph, assignment=assignment)

    def details(self, path: str, commit_hash: str) -> CommitDetails:
        """Return metadata and file changes of a commit, a stash or uncommitted changes."""
        if commit_hash == UNCOMMITTED:
            return self.uncommitted_details(path)
        for stash in self._source(path).get_stashes():
            if stash.hash == commit_hash:
                info = CommitStash(stash.selector, stash.base_hash, stash.untracked_files_hash)
                return self.stash_details(path, commit_hash, info)
        return self.commit_details(path, commit_hash)

    def commit_details(self, path: str, commit_hash: str) -> CommitDetails:
        source = self._source(path)
        details = source.get_commit_details_base(commit_hash)
        from_hash = f"{commit_hash}^" if details.parents else commit_hash
        details.file_changes = reconcile(
            source.get_diff_name_status(from_hash, commit_hash),
            source.get_diff_numstat(from_hash, commit_hash),
        )
        return details

    def stash_details(self, path: str, commit_hash: str, stash: CommitStash) -> CommitDetails:
        source = self._source(path)
        details = source.get_commit_details_base(commit_hash)
        untracked = stash.untracked_files_hash
        details.file_changes = reconcile_stash(
            source.get_diff_name_status(stash.base_hash, commit_hash),
            source.get_diff_numstat(stash.base_hash, commit_hash),
            source.get_diff_name_status(untracked, untracked) if untracked else [],
            source.get_diff_numstat(untracked, untracked) if untracked else [],
        )
        return details

    def uncommitted_details(self, path: str) -> CommitDetails:
        source = self._source(path)
        return CommitDetails(
            hash=UNCOMMITTED,
            parents=[],
            author="",
            author_email="",
            author_date=0,
            committer="",
            committer_email="",
            committer_date=0,
            body="",
            file_changes=reconcile(
                source.get_diff_name_status("HEAD", ""),
                source.get_diff_numstat("HEAD", ""),
                source.get_status(),
            ),
        )

    def compare(self, path: str, from_hash: str, to_hash: str) -> List[FileChange]:
        """Return the file changes between two revisions; `*` targets the working tree."""
        source = self._source(path)
        target = "" if to_hash == UNCOMMITTED else to_hash
        return reconcile(
            source.get_diff_name_status(from_hash, target),
            source.get_diff_numstat(from_hash, target),
            source.get_status() if to_hash == UNCOMMITTED else None,
        )

    def _source(self, path: str) -> GitDataSource:
        return self._source_factory(Path(path).expanduser().resolve())


def _result_or_error(future: "Future[RefData]") -> Union[RefData, GitCommandError]:
    try:
        return future.result()
    except GitCommandError as exc:
        return exc


__all__ = ["GraphError", "GraphView", "Orchestrator"]
