"""Entry point for the metalfetch command line tool."""

from __future__ import annotations

import logging
import os
import sys
from typing import NoReturn, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

from .config import ConfigStore
from .errors import MetalfetchError
from .formatting import print_lines, render
from .system_state import gather_snapshot

LOG_LEVEL_ENV = "METALFETCH_LOG_LEVEL"


def main(console: Optional[Console] = None, err_console: Optional[Console] = None) -> None:
    console = console or Console(highlight=False)
    err_console = err_console or Console(stderr=True, highlight=False)
    _configure_logging(err_console)

    try:
        config = ConfigStore(console=console).load()
    except MetalfetchError as exc:
        _fail(err_console, "Error loading config", exc)

    try:
        snapshot = gather_snapshot()
    except MetalfetchError as exc:
        _fail(err_console, "Error getting distro info", exc)

    print_lines(render(snapshot, config), console)


def _configure_logging(err_console: Console) -> None:
    level = logging.getLevelName(os.environ.get(LOG_LEVEL_ENV, "WARNING").upper())
    logging.basicConfig(
        level=level if isinstance(level, int) else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


def _fail(err_console: Console, context: str, exc: Exception) -> NoReturn:
    err_console.print(Text.assemble(("❌", "red"), f" {context}: {exc}"), soft_wrap=True)
    sys.exit(1)


if __name__ == "__main__":
    main()
