"""Shared fixtures for the netstatus test suite."""

from __future__ import annotations

import ipaddress
import struct
from pathlib import Path

import pytest
from loguru import logger

from netstatus._util import parse_mac
from netstatus.config import NetStatusSettings
from netstatus.rtnl.constants import (
    AF_INET,
    ARPHRD_ETHER,
    IFA_ADDRESS,
    IFA_LOCAL,
    IFLA_ADDRESS,
    IFLA_IFNAME,
    IFLA_MTU,
    NDA_DST,
    NDA_LLADDR,
    NLM_F_MULTI,
    NLMSG_ERROR,
    RT_TABLE_MAIN,
    RTA_GATEWAY,
    RTA_OIF,
    RTA_PRIORITY,
    RTA_TABLE,
    RTM_NEWADDR,
    RTM_NEWLINK,
    RTM_NEWNEIGH,
    RTM_NEWROUTE,
    RTN_UNICAST,
)
from netstatus.rtnl.messages import IfAddrMessage, IfInfoMessage, NdMessage, NetlinkMessage, RtMessage

# ── message builders ──────────────────────────────────────────────────


def _u32(value: int) -> bytes:
    return struct.pack("=I", value)


def ip_bytes(text: str) -> bytes:
    return ipaddress.ip_address(text).packed


def link_msg(index: int, name: str, iftype: int = ARPHRD_ETHER, mac: str | None = None, mtu: int | None = None):
    attrs = {IFLA_IFNAME: name.encode() + b"\0"}
    if mac is not None:
        attrs[IFLA_ADDRESS] = parse_mac(mac)
    if mtu is not None:
        attrs[IFLA_MTU] = _u32(mtu)
    payload = IfInfoMessage(iftype=iftype, index=index, attrs=attrs).encode()
    return NetlinkMessage(RTM_NEWLINK, NLM_F_MULTI, payload=payload)


def addr_msg(index: int, address: str, family: int = AF_INET, scope: int = 0, flags: int = 0, prefixlen: int = 24):
    packed = ip_bytes(address)
    attrs = {IFA_ADDRESS: packed}
    if family == AF_INET:
        attrs[IFA_LOCAL] = packed
    payload = IfAddrMessage(family=family, prefixlen=prefixlen, flags=flags, scope=scope, index=index, attrs=attrs)
    return NetlinkMessage(RTM_NEWADDR, NLM_F_MULTI, payload=payload.encode())


def route_msg(
    oif: int | None,
    gateway: str | None,
    family: int = AF_INET,
    table: int = RT_TABLE_MAIN,
    priority: int | None = None,
    dst_len: int = 0,
    rtype: int = RTN_UNICAST,
):
    attrs: dict[int, bytes] = {RTA_TABLE: _u32(table)}
    if oif is not None:
        attrs[RTA_OIF] = _u32(oif)
    if gateway is not None:
        attrs[RTA_GATEWAY] = ip_bytes(gateway)
    if priority is not None:
        attrs[RTA_PRIORITY] = _u32(priority)
    payload = RtMessage(family=family, dst_len=dst_len, table=min(table, 255), type=rtype, attrs=attrs)
    return NetlinkMessage(RTM_NEWROUTE, NLM_F_MULTI, payload=payload.encode())


def neigh_msg(ifindex: int, dst: str, lladdr: str | None = None, family: int = AF_INET):
    attrs = {NDA_DST: ip_bytes(dst)}
    if lladdr is not None:
        attrs[NDA_LLADDR] = parse_mac(lladdr)
    payload = NdMessage(family=family, ifindex=ifindex, attrs=attrs).encode()
    return NetlinkMessage(RTM_NEWNEIGH, NLM_F_MULTI, payload=payload)


def error_msg(errno: int):
    return NetlinkMessage(NLMSG_ERROR, 0, payload=struct.pack("=i", -errno) + b"\0" * 16)


# ── fake rtnl socket ──────────────────────────────────────────────────


class FakeRtnl:
    """Stands in for RtnlSocket: serves canned dump replies and records requests."""

    def __init__(self, links=(), addresses=(), routes=(), neighbors=()):
        self.links = list(links)
        self.addresses = list(addresses)
        self.routes = list(routes)
        self.neighbors = list(neighbors)
        self.calls: list[tuple] = []
        self.consumed_neighbors = 0

    def dump_links(self):
        self.calls.append(("links",))
        return iter(self.links)

    def dump_addresses(self, family=0):
        self.calls.append(("addresses", family))
        return iter(self.addresses)

    def dump_routes(self, family=0):
        self.calls.append(("routes", family))
        return iter(self.routes)

    def dump_neighbors(self, family=0, ifindex=0):
        self.calls.append(("neighbors", family, ifindex))
        return self._neighbors()

    def _neighbors(self):
        for msg in self.neighbors:
            self.consumed_neighbors += 1
            yield msg


@pytest.fixture()
def fake_rtnl():
    """Factory fixture returning a FakeRtnl with the given canned replies."""

    def _make(**kwargs):
        return FakeRtnl(**kwargs)

    return _make


# ── settings and state trees ──────────────────────────────────────────


@pytest.fixture()
def settings(tmp_path: Path) -> NetStatusSettings:
    """Settings pointing every directory into an empty tmp tree."""
    s = NetStatusSettings(
        run_dir=tmp_path / "run",
        udev_data_dir=tmp_path / "udev",
        sysfs_net_dir=tmp_path / "sys",
        hwdb_source=tmp_path / "20-OUI.hwdb",
        oui_cache_path=tmp_path / "oui.txt",
        pager=False,
        color=False,
    )
    for d in (s.lldp_dir, s.links_state_dir, s.udev_data_dir, s.sysfs_net_dir):
        d.mkdir(parents=True)
    return s


@pytest.fixture()
def log_messages():
    """Collect netstatus log messages (DEBUG and up) into a list."""
    messages: list[str] = []
    logger.enable("netstatus")
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)
    logger.disable("netstatus")
