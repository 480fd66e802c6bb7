"""Entry point for ``python -m netstatus`` and the ``netstatus`` console script.

Examples:
  netstatus list
  netstatus status eth0 wlan0
  netstatus status --all --no-pager
  netstatus lldp --json
"""

from __future__ import annotations

import sys

from netstatus import configure_logging


def main() -> None:
    """Main entry point: configure logging, then run the CLI."""
    configure_logging()

    from netstatus.cli import main as cli_main

    cli_main(sys.argv[1:])


if __name__ == "__main__":
    main()
