"""Command-line front door for p4chimari.

Parses the two display/logging options, configures logging, and hands the
terminal over to the interactive menu session.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from .app import App
from .config import BaselineStore, PreferenceStore
from .console import Console
from .p4 import P4Client
from .ui_theme import resolve_theme

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="p4chimari",
        description="Interactive Perforce workspace helper: find real changes and hijacked files.",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable ANSI colors in menus and diffs.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log p4 invocations to stderr.")
    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Parse arguments, run the menu session, and exit with its status."""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    console = Console()
    no_color = args.no_color or not console.is_interactive()
    console.theme = resolve_theme(no_color)
    app = App(
        client=P4Client(),
        console=console,
        preferences=PreferenceStore.load(),
        baselines=BaselineStore(),
        no_color=no_color,
    )
    try:
        status = app.run()
    except KeyboardInterrupt:
        console.write("\nInterrupted.")
        raise SystemExit(130)
    raise SystemExit(status)


if __name__ == "__main__":
    main()
