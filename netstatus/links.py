"""Link table decoding: RTM_NEWLINK message streams into index-ordered LinkRecords."""

from __future__ import annotations

import os
from operator import attrgetter
from typing import Iterable

from netstatus._util import format_mac, parse_ifindex
from netstatus.exceptions import InterfaceNotFoundError, ProtocolDecodeError, TransportError
from netstatus.models import LinkRecord
from netstatus.rtnl.constants import (
    ARPHRD_ETHER,
    ARPHRD_NAMES,
    IFLA_ADDRESS,
    IFLA_IFNAME,
    IFLA_MTU,
    NLMSG_ERROR,
    RTM_NEWLINK,
)
from netstatus.rtnl.messages import IfInfoMessage, NetlinkMessage, read_ether_addr, read_string, read_u32

# udev DEVTYPE values that get their own type string on Ethernet-typed links
_ETHER_DEVTYPES = ("wlan", "wwan")


def decode_link(msg: NetlinkMessage) -> LinkRecord:
    """Decode one RTM_NEWLINK message; a missing interface name is a decode error."""
    info = IfInfoMessage.decode(msg)
    name = read_string(info.attrs, IFLA_IFNAME)
    if name is None:
        raise ProtocolDecodeError(f"link {info.index}: missing IFLA_IFNAME")

    hw_address = read_ether_addr(info.attrs, IFLA_ADDRESS)
    if hw_address is not None and not any(hw_address):
        hw_address = None

    return LinkRecord(
        name=name,
        index=info.index,
        iftype=info.iftype,
        hw_address=format_mac(hw_address) if hw_address else None,
        mtu=read_u32(info.attrs, IFLA_MTU),
    )


def decode_and_sort_links(messages: Iterable[NetlinkMessage]) -> list[LinkRecord]:
    """Decode every RTM_NEWLINK message of a dump and order the links by index.

    Other message types are skipped. Indices are unique, so the order is total
    and repeated decoding of the same stream gives the same list.
    """
    links: list[LinkRecord] = []
    for msg in messages:
        if msg.type == NLMSG_ERROR:
            if msg.error:
                raise TransportError(f"Failed to enumerate links: {os.strerror(-msg.error)}", errno=-msg.error)
            continue
        if msg.type != RTM_NEWLINK:
            continue
        links.append(decode_link(msg))

    return sorted(links, key=attrgetter("index"))


def resolve_link(links: list[LinkRecord], name: str) -> LinkRecord:
    """Find a link by numeric index or by the first exact name match."""
    ifindex = parse_ifindex(name)
    for link in links:
        if ifindex is not None and link.index == ifindex:
            return link
        if ifindex is None and link.name == name:
            return link
    raise InterfaceNotFoundError(f"Failed to query link {name}: no such device")


def link_name_by_index(links: list[LinkRecord], ifindex: int) -> str:
    """Return the interface name for ``ifindex``, or ``%<ifindex>`` if it vanished."""
    for link in links:
        if link.index == ifindex:
            return link.name
    return f"%{ifindex}"


def link_type_string(iftype: int, devtype: str | None = None) -> str | None:
    """Render an ARPHRD type as a lower-case name.

    WLAN and WWAN devices report ARPHRD_ETHER, so the udev DEVTYPE is consulted
    for those to get a more useful string.
    """
    if iftype == ARPHRD_ETHER and devtype in _ETHER_DEVTYPES:
        return devtype
    name = ARPHRD_NAMES.get(iftype)
    return name.lower() if name else None
