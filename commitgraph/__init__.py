"""Commit graph assembly and lane layout from raw git output."""

from .assembler import GraphError, assemble
from .layout import ColumnAssignment, assign_columns
from .models import UNCOMMITTED, CommitNode, FileChange, FileStatus, GraphData
from .reconciler import reconcile

__all__ = [
    "UNCOMMITTED",
    "ColumnAssignment",
    "CommitNode",
    "FileChange",
    "FileStatus",
    "GraphData",
    "GraphError",
    "assemble",
    "assign_columns",
    "reconcile",
]
