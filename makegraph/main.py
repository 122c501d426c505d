"""Main CLI entry point for makegraph.

Provides commands: nodes, deps, scan, cycles
"""

import argparse
import logging
import sys
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler

logger = logging.getLogger("makegraph.cli")

# Trigger include scanner registration by importing parsers package
import makegraph.parsers

from makegraph.cli.cycles import cycles_command
from makegraph.cli.scan import deps_command, nodes_command, scan_command
from makegraph.parsers.registry import ScannerRegistry


def setup_logging(verbose: bool = False, console: Optional[Console] = None) -> None:
    """Setup logging configuration with Rich integration.

    Args:
        verbose: Enable verbose logging.
        console: Rich Console instance for coordinated output (optional).
    """
    if verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
        log_time_format="[%H:%M:%S]",
    )

    logging.basicConfig(
        level=level,
        format="[%(name)s] [%(levelname)s] %(message)s",
        handlers=[handler],
        force=True,
    )


def _add_workspace_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "workspace",
        nargs="?",
        default=".",
        help="Workspace root containing the Makefiles (default: current directory)",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="makegraph",
        description="makegraph - Makefile workspaces as project/task graphs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "-c",
        "--config",
        help=(
            "Optional configuration. Can be a path to a TOML/JSON file or an "
            "inline TOML/JSON string. When omitted, makegraph.toml or "
            "makegraph.json at the workspace root is used if present."
        ),
    )
    parser.add_argument(
        "--compiler",
        choices=ScannerRegistry.get_instance().list_modes(),
        help="Include resolution strategy (overrides dependencyCompiler)",
    )
    parser.add_argument(
        "--max-files",
        type=int,
        help="Maximum source files scanned per project",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    nodes_parser = subparsers.add_parser(
        "nodes",
        help="Build project nodes and their targets",
    )
    _add_workspace_argument(nodes_parser)
    nodes_parser.add_argument("-o", "--output", help="Output JSON file (default: stdout)")

    deps_parser = subparsers.add_parser(
        "deps",
        help="Infer cross-project dependency edges",
    )
    _add_workspace_argument(deps_parser)
    deps_parser.add_argument("-o", "--output", help="Output JSON file (default: stdout)")
    deps_parser.add_argument(
        "--changed",
        nargs="+",
        metavar="PROJECT",
        help="Only analyze these projects (incremental mode)",
    )

    scan_parser = subparsers.add_parser(
        "scan",
        help="Build the full project graph",
    )
    _add_workspace_argument(scan_parser)
    scan_parser.add_argument(
        "-o",
        "--output",
        help="Output graph file (node-link JSON). Prints a summary table when omitted.",
    )

    cycles_parser = subparsers.add_parser(
        "cycles",
        help="Report dependency cycles between projects",
    )
    _add_workspace_argument(cycles_parser)
    cycles_parser.add_argument(
        "--limit",
        type=int,
        default=20,
        help=(
            "Maximum number of cycles to report (default: 20). "
            "Use <=0 for no limit (may be expensive on large graphs)."
        ),
    )
    cycles_parser.add_argument(
        "--fail-on-cycle",
        action="store_true",
        help="Exit with non-zero status when dependency cycles are found.",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point.

    Returns:
        int: Exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)
    logger.debug(
        "Include scanners: %s", ", ".join(ScannerRegistry.get_instance().list_modes())
    )

    if args.command == "nodes":
        return nodes_command(args)
    elif args.command == "deps":
        return deps_command(args)
    elif args.command == "scan":
        return scan_command(args)
    elif args.command == "cycles":
        return cycles_command(args)
    else:
        parser.print_help()
        return 1


def cli() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    sys.exit(main())
