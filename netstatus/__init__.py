"""Network link status queries.

Reads the kernel link, address, route and neighbor tables over rtnetlink,
combines them with networkd's runtime state and LLDP neighbor logs, and
renders the result as terminal tables or JSON.
"""

__version__ = "0.1.0"

import os
import sys
from typing import Any, Callable, Dict

from loguru import logger as glogger

glogger.disable(__name__)


def _loguru_skiplog_filter(record: dict) -> bool:  # type: ignore[type-arg]
    """Filter function to hide records with ``extra['skiplog']`` set."""
    return not record.get("extra", {}).get("skiplog", False)


def configure_logging(
    loguru_filter: Callable[[Dict[str, Any]], bool] = _loguru_skiplog_filter,
) -> None:
    """Install a ``loguru`` stderr sink with the package format and filter."""
    os.environ["LOGURU_LEVEL"] = os.getenv("LOGURU_LEVEL", "DEBUG")
    glogger.remove()
    logger_fmt: str = (
        "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{module}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
    )
    glogger.add(sys.stderr, level=os.getenv("LOGURU_LEVEL"), format=logger_fmt, filter=loguru_filter)  # type: ignore[arg-type]
    glogger.configure(extra={"skiplog": False})


from netstatus.config import NetStatusSettings  # noqa: E402
from netstatus.exceptions import (  # noqa: E402
    InterfaceNotFoundError,
    LldpDecodeError,
    NetStatusError,
    ProtocolDecodeError,
    TransportError,
)
from netstatus.models import (  # noqa: E402
    DiscoveryNeighbor,
    InterfaceReport,
    LinkListEntry,
    LinkRecord,
    LldpEntry,
    SystemReport,
    VendorLookup,
)
from netstatus.rtnl import RtnlSocket  # noqa: E402
from netstatus.status import StatusAggregator  # noqa: E402

__all__ = [
    "glogger",
    "configure_logging",
    "NetStatusSettings",
    "RtnlSocket",
    "StatusAggregator",
    "LinkRecord",
    "LinkListEntry",
    "InterfaceReport",
    "SystemReport",
    "LldpEntry",
    "DiscoveryNeighbor",
    "VendorLookup",
    "NetStatusError",
    "TransportError",
    "ProtocolDecodeError",
    "LldpDecodeError",
    "InterfaceNotFoundError",
]
