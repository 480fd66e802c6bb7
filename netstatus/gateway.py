"""Gateway vendor resolution: neighbor table lookup of a gateway's MAC, then OUI."""

from __future__ import annotations

import os
from typing import Iterable, Iterator

from loguru import logger

from netstatus.exceptions import ProtocolDecodeError
from netstatus.models import NeighborEntry, VendorLookup
from netstatus.oui import HwdbDatabase, ieee_oui
from netstatus.rtnl.constants import NDA_DST, NDA_LLADDR, NLMSG_ERROR, RTM_NEWNEIGH
from netstatus.rtnl.messages import NdMessage, NetlinkMessage, read_ether_addr, read_in_addr
from netstatus.rtnl.transport import RtnlSocket


def iter_neighbors(messages: Iterable[NetlinkMessage]) -> Iterator[NeighborEntry]:
    """Decode a neighbor dump lazily, skipping error replies and foreign message types."""
    for msg in messages:
        if msg.type == NLMSG_ERROR:
            if msg.error:
                logger.error(f"got error: {os.strerror(-msg.error)}")
            continue
        if msg.type != RTM_NEWNEIGH:
            logger.debug(f"type {msg.type} is not RTM_NEWNEIGH, skipping")
            continue
        try:
            nd = NdMessage.decode(msg)
        except ProtocolDecodeError as e:
            logger.error(f"could not decode neighbor: {e}")
            continue

        yield NeighborEntry(
            ifindex=nd.ifindex,
            family=nd.family,
            destination=read_in_addr(nd.attrs, NDA_DST, nd.family),
            lladdr=read_ether_addr(nd.attrs, NDA_LLADDR),
        )


def _matches(entry: NeighborEntry, ifindex: int, family: int, gateway: bytes) -> bool:
    if entry.family != family:
        return False
    if ifindex > 0 and entry.ifindex != ifindex:
        return False
    if entry.destination is None or entry.destination != gateway:
        return False
    return entry.lladdr is not None


def find_gateway_lladdr(
    entries: Iterable[NeighborEntry], ifindex: int, family: int, gateway: bytes
) -> bytes | None:
    """Link-layer address of the first entry matching every predicate, in table order."""
    match = next((e for e in entries if _matches(e, ifindex, family, gateway)), None)
    return match.lladdr if match else None


def get_gateway_description(
    rtnl: RtnlSocket,
    hwdb: HwdbDatabase | None,
    ifindex: int,
    family: int,
    gateway: bytes,
) -> VendorLookup:
    """Resolve the vendor of ``gateway`` via the kernel neighbor table.

    Transport errors propagate; an exhausted table yields ``no-data``.
    """
    entries = iter_neighbors(rtnl.dump_neighbors(family, ifindex))
    lladdr = find_gateway_lladdr(entries, ifindex, family, gateway)
    if lladdr is None:
        return VendorLookup.no_data()
    return ieee_oui(hwdb, lladdr)
