"""Local address and default-gateway enumeration over rtnetlink."""

from __future__ import annotations

import os
from typing import Iterable, Iterator

from netstatus.exceptions import TransportError
from netstatus.models import LocalAddress
from netstatus.rtnl.constants import (
    AF_INET,
    AF_INET6,
    AF_UNSPEC,
    IFA_ADDRESS,
    IFA_F_DEPRECATED,
    IFA_FLAGS,
    IFA_LOCAL,
    NLMSG_ERROR,
    RT_SCOPE_HOST,
    RT_SCOPE_NOWHERE,
    RT_TABLE_MAIN,
    RTA_GATEWAY,
    RTA_OIF,
    RTA_PRIORITY,
    RTA_TABLE,
    RTM_NEWADDR,
    RTM_NEWROUTE,
    RTN_UNICAST,
)
from netstatus.rtnl.messages import IfAddrMessage, NetlinkMessage, RtMessage, read_in_addr, read_u32
from netstatus.rtnl.transport import RtnlSocket


def _replies(messages: Iterable[NetlinkMessage], wanted: int, what: str) -> Iterator[NetlinkMessage]:
    for msg in messages:
        if msg.type == NLMSG_ERROR:
            if msg.error:
                raise TransportError(f"Failed to enumerate {what}: {os.strerror(-msg.error)}", errno=-msg.error)
            continue
        if msg.type == wanted:
            yield msg


def _sort_key(addr: LocalAddress) -> tuple[int, int, int, int, bytes]:
    # Wider scopes first, then IPv4 before IPv6, then metric, interface, address
    return (addr.scope, addr.family != AF_INET, addr.metric, addr.ifindex, addr.address)


def sort_addresses(addresses: Iterable[LocalAddress]) -> list[LocalAddress]:
    return sorted(addresses, key=_sort_key)


def local_addresses(rtnl: RtnlSocket, ifindex: int = 0, family: int = AF_UNSPEC) -> list[LocalAddress]:
    """Addresses assigned to ``ifindex`` (all interfaces when 0).

    Deprecated addresses and host/nowhere scoped ones (loopback) are skipped.
    """
    addresses: list[LocalAddress] = []
    for msg in _replies(rtnl.dump_addresses(family), RTM_NEWADDR, "addresses"):
        ifa = IfAddrMessage.decode(msg)
        if ifindex > 0 and ifa.index != ifindex:
            continue
        if family != AF_UNSPEC and ifa.family != family:
            continue

        flags = read_u32(ifa.attrs, IFA_FLAGS)
        if (ifa.flags if flags is None else flags) & IFA_F_DEPRECATED:
            continue
        if ifa.scope in (RT_SCOPE_HOST, RT_SCOPE_NOWHERE):
            continue

        if ifa.family == AF_INET:
            address = read_in_addr(ifa.attrs, IFA_LOCAL, AF_INET) or read_in_addr(ifa.attrs, IFA_ADDRESS, AF_INET)
        elif ifa.family == AF_INET6:
            address = read_in_addr(ifa.attrs, IFA_ADDRESS, AF_INET6) or read_in_addr(ifa.attrs, IFA_LOCAL, AF_INET6)
        else:
            continue
        if address is None:
            continue

        addresses.append(LocalAddress(ifindex=ifa.index, family=ifa.family, address=address, scope=ifa.scope))

    return sort_addresses(addresses)


def local_gateways(rtnl: RtnlSocket, ifindex: int = 0, family: int = AF_UNSPEC) -> list[LocalAddress]:
    """Gateways of the default unicast routes in the main table."""
    gateways: list[LocalAddress] = []
    for msg in _replies(rtnl.dump_routes(family), RTM_NEWROUTE, "routes"):
        rtm = RtMessage.decode(msg)
        if family != AF_UNSPEC and rtm.family != family:
            continue
        if rtm.dst_len != 0 or rtm.type != RTN_UNICAST:
            continue

        table = read_u32(rtm.attrs, RTA_TABLE)
        if (rtm.table if table is None else table) != RT_TABLE_MAIN:
            continue

        oif = read_u32(rtm.attrs, RTA_OIF)
        if oif is None:
            continue
        if ifindex > 0 and oif != ifindex:
            continue

        gateway = read_in_addr(rtm.attrs, RTA_GATEWAY, rtm.family)
        if gateway is None:
            continue

        metric = read_u32(rtm.attrs, RTA_PRIORITY) or 0
        gateways.append(LocalAddress(ifindex=oif, family=rtm.family, address=gateway, metric=metric))

    return sort_addresses(gateways)
