"""CLI entrypoints for commitgraph commands."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict

from .assembler import GraphError
from .config import ConfigError
from .git.source import GitCommandError
from .logging import configure_logging
from .orchestrator import Orchestrator
from .render import (
    file_changes_to_list,
    graph_to_dict,
    render_file_changes,
    render_text,
)


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_json_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print machine-readable JSON instead of text.",
    )


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the repository root (defaults to current directory).",
    )


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return number


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="commitgraph",
        description="Assemble and lay out the commit graph of a git repository.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    log_parser = subparsers.add_parser(
        "log",
        help="Print the commit graph with one lane column per chain.",
    )
    _add_verbose_option(log_parser, suppress_default=True)
    _add_json_option(log_parser)
    _add_path_argument(log_parser)
    log_parser.add_argument(
        "--max-commits",
        type=_positive_int,
        default=None,
        help="Maximum number of commits to load (overrides .commitgraph.yml).",
    )

    show_parser = subparsers.add_parser(
        "show",
        help="Print the file changes of a commit, a stash or `*` (uncommitted changes).",
    )
    _add_verbose_option(show_parser, suppress_default=True)
    _add_json_option(show_parser)
    show_parser.add_argument("commit", help="Commit hash, stash hash or `*`.")
    _add_path_argument(show_parser)

    compare_parser = subparsers.add_parser(
        "compare",
        help="Print the file changes between two revisions.",
    )
    _add_verbose_option(compare_parser, suppress_default=True)
    _add_json_option(compare_parser)
    compare_parser.add_argument("from_rev", help="Revision the comparison is from.")
    compare_parser.add_argument("to_rev", help="Revision the comparison is to (`*` for the working tree).")
    _add_path_argument(compare_parser)

    return parser


def main(argv: list[str] | None = None, orchestrator: Orchestrator | None = None) -> None:
    """CLI entrypoint for commitgraph commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    orchestrator = orchestrator or Orchestrator()
    as_json = bool(getattr(args, "json", False))

    try:
        if args.command == "log":
            view = orchestrator.load_graph(args.path, max_commits=args.max_commits)
            if as_json:
                print(json.dumps(graph_to_dict(view.graph, view.assignment), indent=2))
            else:
                if view.graph.commits:
                    print(render_text(view.graph.commits, view.assignment))
                else:
                    print("No commits")
                if view.graph.more_commits_available:
                    print("... more commits available")
        elif args.command == "show":
            details = orchestrator.details(args.path, args.commit)
            if as_json:
                payload = asdict(details)
                payload["file_changes"] = file_changes_to_list(details.file_changes)
                print(json.dumps(payload, indent=2))
            else:
                print(render_file_changes(details.file_changes))
        elif args.command == "compare":
            changes = orchestrator.compare(args.path, args.from_rev, args.to_rev)
            if as_json:
                print(json.dumps(file_changes_to_list(changes), indent=2))
            else:
                print(render_file_changes(changes))
        else:  # pragma: no cover - argparse enforces choices
            parser.exit(1, "Unknown command\n")
    except (GitCommandError, GraphError, ConfigError) as exc:
        parser.exit(1, f"commitgraph {args.command} failed: {exc}\nRun with --verbose for more details.\n")


if __name__ == "__main__":
    main(sys.argv[1:])
