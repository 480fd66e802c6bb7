"""Shared helpers for address formatting and interface-name handling."""

from __future__ import annotations

import ipaddress
import re

from netstatus.rtnl.constants import AF_INET, AF_INET6


def format_mac(mac: bytes) -> str:
    """Render a hardware address as lower-case colon-separated hex."""
    return ":".join(f"{b:02x}" for b in mac)


def parse_mac(mac: str) -> bytes:
    """Parse ``aa:bb:cc:dd:ee:ff`` (or ``-`` separated) back into bytes."""
    return bytes.fromhex(mac.replace(":", "").replace("-", ""))


def address_to_string(family: int, address: bytes) -> str:
    if family == AF_INET:
        return str(ipaddress.IPv4Address(address))
    if family == AF_INET6:
        return str(ipaddress.IPv6Address(address))
    return address.hex()


def parse_ifindex(value: str) -> int | None:
    """Return ``value`` as an interface index if it is a positive decimal number."""
    if not re.fullmatch(r"[0-9]+", value):
        return None
    ifindex = int(value)
    return ifindex if ifindex > 0 else None


def _validate_interface_name(name: str) -> bool:
    """Validate interface name before it is used in a filesystem path."""
    return bool(re.match(r"^[a-zA-Z0-9._@:-]+$", name)) and name not in (".", "..")
