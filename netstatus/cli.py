"""CLI entry point: query the status of network links."""

from __future__ import annotations

import argparse
import pydoc
import sys

from loguru import logger

from netstatus import __version__
from netstatus.config import NetStatusSettings
from netstatus.exceptions import NetStatusError
from netstatus.formatters import JsonFormatter, TerminalFormatter
from netstatus.oui import load_hwdb
from netstatus.rtnl import RtnlSocket
from netstatus.status import StatusAggregator

COMMANDS = ("list", "status", "lldp")


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Build argparse parser for netstatus."""
    parser = argparse.ArgumentParser(
        prog="netstatus",
        description="Query the status of network links.",
        epilog="Commands:\n"
        "  list               List links\n"
        "  status [LINK...]   Show link status\n"
        "  lldp               Show LLDP neighbors",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "command",
        nargs="?",
        choices=COMMANDS,
        default="list",
        help="Command to run (default: list)",
    )
    parser.add_argument(
        "links",
        nargs="*",
        metavar="LINK",
        help="Interface names or indices (status only)",
    )
    parser.add_argument(
        "-a",
        "--all",
        action="store_true",
        help="Show status for all links",
    )
    parser.add_argument(
        "--no-legend",
        dest="legend",
        action="store_false",
        help="Do not show the headers and footers",
    )
    parser.add_argument(
        "--no-pager",
        dest="pager",
        action="store_false",
        help="Do not pipe output into a pager",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print JSON instead of text",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose logging",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parsed = parser.parse_intermixed_args(args)
    if parsed.links and parsed.command != "status":
        parser.error(f"command '{parsed.command}' takes no arguments")
    return parsed


def build_settings(parsed: argparse.Namespace, settings: NetStatusSettings | None = None) -> NetStatusSettings:
    """Overlay command line flags on the environment-derived settings."""
    settings = settings or NetStatusSettings()
    update: dict[str, object] = {}
    if not parsed.legend:
        update["legend"] = False
    if not parsed.pager or parsed.json:
        update["pager"] = False
    if parsed.all:
        update["all_links"] = True
    return settings.model_copy(update=update)


def emit(text: str, settings: NetStatusSettings) -> None:
    if not text:
        return
    if settings.pager and sys.stdout.isatty():
        pydoc.pager(text)
    else:
        print(text)


def run(parsed: argparse.Namespace, settings: NetStatusSettings) -> str:
    """Execute ``parsed.command`` and return the formatted output."""
    formatter: TerminalFormatter | JsonFormatter = JsonFormatter() if parsed.json else TerminalFormatter(settings)

    with RtnlSocket() as rtnl:
        if parsed.command == "list":
            return formatter.format_list(StatusAggregator(rtnl, settings).list_links())

        if parsed.command == "lldp":
            return formatter.format_lldp(list(StatusAggregator(rtnl, settings).lldp_neighbors()))

        aggregator = StatusAggregator(rtnl, settings, hwdb=load_hwdb(settings))
        return formatter.format_status(aggregator.status(parsed.links, settings.all_links))


def main(args: list[str] | None = None) -> None:
    """Main entry point for netstatus CLI."""
    parsed = parse_args(args)

    logger.enable("netstatus")
    if not parsed.verbose:
        logger.remove()
        logger.add(sys.stderr, level="INFO")

    settings = build_settings(parsed)
    logger.debug(f"settings: {settings.model_dump()}")

    try:
        output = run(parsed, settings)
    except NetStatusError as e:
        logger.error(str(e))
        sys.exit(1)

    emit(output, settings)
