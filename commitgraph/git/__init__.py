"""Git query construction and output decoding."""

from .source import GitCommandError, GitDataSource

__all__ = ["GitCommandError", "GitDataSource"]
