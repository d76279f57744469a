"""Command line entry point: init, run and add."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from checkct.elf import ElfError
from checkct.manifest import CheckctError
from checkct.runner import run_binsec
from checkct.workspace import WORKSPACE_DIR_NAME, add_driver, init_workspace

DEFAULT_DRIVER_NAME = "driver"
DEFAULT_TIMEOUT = 600


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with its three subcommands."""
    parser = argparse.ArgumentParser(
        prog="checkct",
        description="Set up and run constant-time verification of a library.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    init = commands.add_parser("init", help="create a checkct workspace")
    init.add_argument(
        "-d", "--dir", type=Path, metavar="PATH",
        help="directory in which to place the checkct workspace (default: working directory)",
    )
    init.add_argument(
        "-n", "--name", default=DEFAULT_DRIVER_NAME, metavar="NAME",
        help='name of the first verification driver (default: "driver")',
    )

    run = commands.add_parser("run", help="build the drivers and analyse them")
    run.add_argument(
        "-d", "--dir", type=Path, metavar="PATH",
        help="directory containing the checkct workspace (default: working directory)",
    )
    run.add_argument(
        "-t", "--timeout", type=int, default=DEFAULT_TIMEOUT, metavar="SECONDS",
        help="timeout in seconds (default: 600)",
    )

    add = commands.add_parser("add", help="add a driver to the checkct workspace")
    add.add_argument(
        "-d", "--dir", type=Path, metavar="PATH",
        help="directory containing the checkct workspace (default: working directory)",
    )
    add.add_argument(
        "-n", "--name", required=True, metavar="NAME",
        help="name of the verification driver to create",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the command line; returns the process exit code."""
    args = build_parser().parse_args(argv)
    directory = args.dir if args.dir is not None else Path.cwd()
    try:
        if args.command == "init":
            init_workspace(directory, args.name)
        elif args.command == "run":
            status = run_binsec(directory / WORKSPACE_DIR_NAME, args.timeout)
            print(status.value)
        else:
            add_driver(directory, args.name)
    except (CheckctError, ElfError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())