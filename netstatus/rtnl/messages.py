"""rtnetlink wire codec: message framing, fixed payload headers and attributes."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Iterator

from netstatus.exceptions import ProtocolDecodeError
from netstatus.rtnl.constants import AF_INET, AF_INET6, AF_UNSPEC, NLA_TYPE_MASK, NLMSG_ERROR

NLMSGHDR = struct.Struct("=IHHII")
RTATTR = struct.Struct("=HH")
NLMSGERR = struct.Struct("=i")

IFINFOMSG = struct.Struct("=BxHiII")
IFADDRMSG = struct.Struct("=BBBBI")
NDMSG = struct.Struct("=BxxxiHBB")
RTMSG = struct.Struct("=BBBBBBBBI")

_IN_ADDR_SIZES = {AF_INET: 4, AF_INET6: 16}


def nl_align(length: int) -> int:
    """Round ``length`` up to the 4-byte netlink alignment."""
    return (length + 3) & ~3


@dataclass
class NetlinkMessage:
    """One netlink message: header fields plus the raw payload."""

    type: int
    flags: int = 0
    seq: int = 0
    pid: int = 0
    payload: bytes = b""

    @property
    def error(self) -> int:
        """Negative errno of an ``NLMSG_ERROR`` message; 0 for ACKs and other types."""
        if self.type != NLMSG_ERROR:
            return 0
        if len(self.payload) < NLMSGERR.size:
            raise ProtocolDecodeError("truncated NLMSG_ERROR payload")
        return NLMSGERR.unpack_from(self.payload)[0]


def pack_message(msg_type: int, flags: int, seq: int, payload: bytes, pid: int = 0) -> bytes:
    """Frame ``payload`` with an nlmsghdr, padded to alignment."""
    length = NLMSGHDR.size + len(payload)
    return NLMSGHDR.pack(length, msg_type, flags, seq, pid) + payload + b"\0" * (nl_align(length) - length)


def parse_messages(buffer: bytes) -> Iterator[NetlinkMessage]:
    """Split a received datagram into netlink messages.

    A header announcing a length shorter than the header itself, or running
    past the end of the buffer, makes the whole transfer undecodable.
    """
    offset = 0
    while offset + NLMSGHDR.size <= len(buffer):
        length, msg_type, flags, seq, pid = NLMSGHDR.unpack_from(buffer, offset)
        if length < NLMSGHDR.size or offset + length > len(buffer):
            raise ProtocolDecodeError(f"invalid netlink message length {length} at offset {offset}")
        yield NetlinkMessage(msg_type, flags, seq, pid, bytes(buffer[offset + NLMSGHDR.size : offset + length]))
        offset += nl_align(length)
    if offset < len(buffer):
        raise ProtocolDecodeError(f"{len(buffer) - offset} trailing bytes after last netlink message")


def pack_attr(attr_type: int, data: bytes) -> bytes:
    length = RTATTR.size + len(data)
    return RTATTR.pack(length, attr_type) + data + b"\0" * (nl_align(length) - length)


def pack_attrs(attrs: dict[int, bytes]) -> bytes:
    return b"".join(pack_attr(t, v) for t, v in attrs.items())


def parse_attributes(data: bytes) -> dict[int, bytes]:
    """Decode a run of rtattrs into ``{type: payload}``; the first occurrence wins."""
    attrs: dict[int, bytes] = {}
    offset = 0
    while offset + RTATTR.size <= len(data):
        length, attr_type = RTATTR.unpack_from(data, offset)
        if length < RTATTR.size or offset + length > len(data):
            raise ProtocolDecodeError(f"invalid attribute length {length} at offset {offset}")
        attrs.setdefault(attr_type & NLA_TYPE_MASK, bytes(data[offset + RTATTR.size : offset + length]))
        offset += nl_align(length)
    return attrs


# ── attribute readers ─────────────────────────────────────────────────


def read_string(attrs: dict[int, bytes], attr_type: int) -> str | None:
    data = attrs.get(attr_type)
    if data is None:
        return None
    return data.split(b"\0", 1)[0].decode("utf-8", errors="replace")


def read_u32(attrs: dict[int, bytes], attr_type: int) -> int | None:
    data = attrs.get(attr_type)
    if data is None:
        return None
    if len(data) != 4:
        raise ProtocolDecodeError(f"attribute {attr_type}: expected 4 bytes, got {len(data)}")
    return struct.unpack("=I", data)[0]


def read_ether_addr(attrs: dict[int, bytes], attr_type: int) -> bytes | None:
    """Return a 6-byte hardware address, or None when absent or not Ethernet-sized."""
    data = attrs.get(attr_type)
    if data is None or len(data) != 6:
        return None
    return data


def read_in_addr(attrs: dict[int, bytes], attr_type: int, family: int) -> bytes | None:
    """Return a 4-byte (IPv4) or 16-byte (IPv6) address, or None when absent or mis-sized."""
    size = _IN_ADDR_SIZES.get(family)
    data = attrs.get(attr_type)
    if size is None or data is None or len(data) != size:
        return None
    return data


# ── fixed payload headers ─────────────────────────────────────────────


def _require(msg: NetlinkMessage, header: struct.Struct, what: str) -> None:
    if len(msg.payload) < header.size:
        raise ProtocolDecodeError(f"{what} too short ({len(msg.payload)} bytes, need {header.size})")


@dataclass
class IfInfoMessage:
    """``struct ifinfomsg`` plus IFLA_* attributes."""

    family: int = AF_UNSPEC
    iftype: int = 0
    index: int = 0
    flags: int = 0
    change: int = 0
    attrs: dict[int, bytes] = field(default_factory=dict)

    @classmethod
    def decode(cls, msg: NetlinkMessage) -> IfInfoMessage:
        _require(msg, IFINFOMSG, "ifinfomsg")
        family, iftype, index, flags, change = IFINFOMSG.unpack_from(msg.payload)
        return cls(family, iftype, index, flags, change, parse_attributes(msg.payload[IFINFOMSG.size :]))

    def encode(self) -> bytes:
        return IFINFOMSG.pack(self.family, self.iftype, self.index, self.flags, self.change) + pack_attrs(self.attrs)


@dataclass
class IfAddrMessage:
    """``struct ifaddrmsg`` plus IFA_* attributes."""

    family: int = AF_UNSPEC
    prefixlen: int = 0
    flags: int = 0
    scope: int = 0
    index: int = 0
    attrs: dict[int, bytes] = field(default_factory=dict)

    @classmethod
    def decode(cls, msg: NetlinkMessage) -> IfAddrMessage:
        _require(msg, IFADDRMSG, "ifaddrmsg")
        family, prefixlen, flags, scope, index = IFADDRMSG.unpack_from(msg.payload)
        return cls(family, prefixlen, flags, scope, index, parse_attributes(msg.payload[IFADDRMSG.size :]))

    def encode(self) -> bytes:
        return IFADDRMSG.pack(self.family, self.prefixlen, self.flags, self.scope, self.index) + pack_attrs(self.attrs)


@dataclass
class NdMessage:
    """``struct ndmsg`` plus NDA_* attributes."""

    family: int = AF_UNSPEC
    ifindex: int = 0
    state: int = 0
    flags: int = 0
    type: int = 0
    attrs: dict[int, bytes] = field(default_factory=dict)

    @classmethod
    def decode(cls, msg: NetlinkMessage) -> NdMessage:
        _require(msg, NDMSG, "ndmsg")
        family, ifindex, state, flags, nd_type = NDMSG.unpack_from(msg.payload)
        return cls(family, ifindex, state, flags, nd_type, parse_attributes(msg.payload[NDMSG.size :]))

    def encode(self) -> bytes:
        return NDMSG.pack(self.family, self.ifindex, self.state, self.flags, self.type) + pack_attrs(self.attrs)


@dataclass
class RtMessage:
    """``struct rtmsg`` plus RTA_* attributes."""

    family: int = AF_UNSPEC
    dst_len: int = 0
    src_len: int = 0
    tos: int = 0
    table: int = 0
    protocol: int = 0
    scope: int = 0
    type: int = 0
    flags: int = 0
    attrs: dict[int, bytes] = field(default_factory=dict)

    @classmethod
    def decode(cls, msg: NetlinkMessage) -> RtMessage:
        _require(msg, RTMSG, "rtmsg")
        fields = RTMSG.unpack_from(msg.payload)
        return cls(*fields, attrs=parse_attributes(msg.payload[RTMSG.size :]))

    def encode(self) -> bytes:
        header = RTMSG.pack(
            self.family,
            self.dst_len,
            self.src_len,
            self.tos,
            self.table,
            self.protocol,
            self.scope,
            self.type,
            self.flags,
        )
        return header + pack_attrs(self.attrs)
