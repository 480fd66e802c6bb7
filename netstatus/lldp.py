"""LLDP neighbor logs: length-framed capture files and LLDPDU decoding.

networkd appends every received LLDP frame for an interface to
``<run_dir>/netif/lldp/<ifindex>`` as an 8-byte little-endian length followed
by the raw Ethernet frame. The writer does not coordinate with readers, so a
file may end in a partially written record; decoding stops there and keeps
everything read so far.
"""

from __future__ import annotations

import ipaddress
import struct
from enum import IntEnum
from pathlib import Path
from typing import BinaryIO, Iterator

from loguru import logger

from netstatus._util import format_mac
from netstatus.exceptions import LldpDecodeError
from netstatus.models import DiscoveryNeighbor

LENGTH_PREFIX = struct.Struct("<Q")
ETHERNET_HEADER = struct.Struct("!6s6sH")
TLV_HEADER = struct.Struct("!H")

READ_CHUNK = 64 * 1024

ETHERTYPE_LLDP = 0x88CC
ETHERTYPE_VLAN = (0x8100, 0x88A8)
LLDP_MULTICAST_ADDR = bytes([0x01, 0x80, 0xC2, 0x00, 0x00, 0x0E])

# Bit position -> character; order is the LLDP system capabilities bit layout.
CAPABILITY_CHARACTERS: tuple[tuple[int, str], ...] = (
    (0, "o"),
    (1, "p"),
    (2, "b"),
    (3, "w"),
    (4, "r"),
    (5, "t"),
    (6, "d"),
    (7, "a"),
    (8, "c"),
    (9, "s"),
    (10, "m"),
)

CAPABILITY_LEGEND = (
    "Capabilities:\n"
    "o - Other; p - Repeater;  b - Bridge; w - WLAN Access Point; r - Router;\n"
    "t - Telephone; d - DOCSIS cable device; a - Station; c - Customer VLAN;\n"
    "s - Service VLAN, m - Two-port MAC Relay (TPMR)"
)


class LldpTlvType(IntEnum):
    END = 0
    CHASSIS_ID = 1
    PORT_ID = 2
    TTL = 3
    PORT_DESCRIPTION = 4
    SYSTEM_NAME = 5
    SYSTEM_DESCRIPTION = 6
    SYSTEM_CAPABILITIES = 7
    MANAGEMENT_ADDRESS = 8
    ORGANIZATION_SPECIFIC = 127


class ChassisIdSubtype(IntEnum):
    CHASSIS_COMPONENT = 1
    INTERFACE_ALIAS = 2
    PORT_COMPONENT = 3
    MAC_ADDRESS = 4
    NETWORK_ADDRESS = 5
    INTERFACE_NAME = 6
    LOCALLY_ASSIGNED = 7


class PortIdSubtype(IntEnum):
    INTERFACE_ALIAS = 1
    PORT_COMPONENT = 2
    MAC_ADDRESS = 3
    NETWORK_ADDRESS = 4
    INTERFACE_NAME = 5
    AGENT_CIRCUIT_ID = 6
    LOCALLY_ASSIGNED = 7


_CHASSIS_STRING_SUBTYPES = {
    ChassisIdSubtype.CHASSIS_COMPONENT,
    ChassisIdSubtype.INTERFACE_ALIAS,
    ChassisIdSubtype.PORT_COMPONENT,
    ChassisIdSubtype.INTERFACE_NAME,
    ChassisIdSubtype.LOCALLY_ASSIGNED,
}
_PORT_STRING_SUBTYPES = {
    PortIdSubtype.INTERFACE_ALIAS,
    PortIdSubtype.PORT_COMPONENT,
    PortIdSubtype.INTERFACE_NAME,
    PortIdSubtype.LOCALLY_ASSIGNED,
}

# IANA address family numbers used in network-address IDs
_IANA_IPV4 = 1
_IANA_IPV6 = 2


def capabilities_to_string(capabilities: int) -> str:
    """Render an enabled-capabilities bit set, e.g. ``0b101`` -> ``o.b........``."""
    return "".join(ch if capabilities & (1 << bit) else "." for bit, ch in CAPABILITY_CHARACTERS)


# ── frame decoding ────────────────────────────────────────────────────


def _printable(data: bytes) -> str | None:
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        return None
    if not text or not text.isprintable():
        return None
    return text


def _network_address(data: bytes) -> str | None:
    if len(data) == 5 and data[0] == _IANA_IPV4:
        return str(ipaddress.IPv4Address(data[1:]))
    if len(data) == 17 and data[0] == _IANA_IPV6:
        return str(ipaddress.IPv6Address(data[1:]))
    return None


def _id_to_string(subtype: int, data: bytes, string_subtypes: set[int], mac_subtype: int, net_subtype: int) -> str:
    if subtype in string_subtypes:
        text = _printable(data)
        if text is not None:
            return text
    elif subtype == mac_subtype and len(data) == 6:
        return format_mac(data)
    elif subtype == net_subtype:
        text = _network_address(data)
        if text is not None:
            return text
    return data.hex()


def chassis_id_to_string(value: bytes) -> str:
    """Render a chassis ID TLV value (subtype byte plus ID) as text."""
    return _id_to_string(
        value[0],
        value[1:],
        _CHASSIS_STRING_SUBTYPES,
        ChassisIdSubtype.MAC_ADDRESS,
        ChassisIdSubtype.NETWORK_ADDRESS,
    )


def port_id_to_string(value: bytes) -> str:
    """Render a port ID TLV value (subtype byte plus ID) as text."""
    return _id_to_string(
        value[0],
        value[1:],
        _PORT_STRING_SUBTYPES,
        PortIdSubtype.MAC_ADDRESS,
        PortIdSubtype.NETWORK_ADDRESS,
    )


def _strip_ethernet_header(frame: bytes) -> bytes:
    if len(frame) < ETHERNET_HEADER.size:
        raise LldpDecodeError(f"frame too short for an Ethernet header ({len(frame)} bytes)")
    _dst, _src, ethertype = ETHERNET_HEADER.unpack_from(frame)
    offset = ETHERNET_HEADER.size
    while ethertype in ETHERTYPE_VLAN:
        if offset + 4 > len(frame):
            raise LldpDecodeError("truncated VLAN tag")
        (ethertype,) = struct.unpack_from("!H", frame, offset + 2)
        offset += 4
    if ethertype != ETHERTYPE_LLDP:
        raise LldpDecodeError(f"unexpected ethertype 0x{ethertype:04x}")
    return frame[offset:]


def iter_tlvs(lldpdu: bytes) -> Iterator[tuple[int, bytes]]:
    """Yield ``(type, value)`` pairs up to the End TLV or the end of the data."""
    offset = 0
    while offset < len(lldpdu):
        if offset + TLV_HEADER.size > len(lldpdu):
            raise LldpDecodeError("TLV lacks header")
        (header,) = TLV_HEADER.unpack_from(lldpdu, offset)
        tlv_type, length = header >> 9, header & 0x1FF
        offset += TLV_HEADER.size
        if offset + length > len(lldpdu):
            raise LldpDecodeError(f"TLV {tlv_type} overruns frame ({length} bytes)")
        if tlv_type == LldpTlvType.END:
            if length != 0:
                raise LldpDecodeError("End TLV with non-zero length")
            return
        yield tlv_type, lldpdu[offset : offset + length]
        offset += length


def parse_lldp_frame(frame: bytes) -> DiscoveryNeighbor:
    """Decode one captured LLDP Ethernet frame.

    The chassis ID, port ID and TTL TLVs must come first, in that order;
    anything else making the frame unparsable raises :class:`LldpDecodeError`.
    Optional TLVs that are malformed are ignored.
    """
    tlvs = list(iter_tlvs(_strip_ethernet_header(frame)))

    mandatory = [t for t, _ in tlvs[:3]]
    if mandatory != [LldpTlvType.CHASSIS_ID, LldpTlvType.PORT_ID, LldpTlvType.TTL]:
        raise LldpDecodeError("LLDPDU does not start with chassis ID, port ID and TTL")
    chassis, port, ttl = (value for _, value in tlvs[:3])
    if not 2 <= len(chassis) <= 256:
        raise LldpDecodeError(f"invalid chassis ID length {len(chassis)}")
    if not 2 <= len(port) <= 256:
        raise LldpDecodeError(f"invalid port ID length {len(port)}")
    if len(ttl) != 2:
        raise LldpDecodeError(f"invalid TTL length {len(ttl)}")

    neighbor = DiscoveryNeighbor(chassis_id=chassis_id_to_string(chassis), port_id=port_id_to_string(port))
    for tlv_type, value in tlvs[3:]:
        if tlv_type in (LldpTlvType.CHASSIS_ID, LldpTlvType.PORT_ID, LldpTlvType.TTL):
            raise LldpDecodeError(f"duplicate mandatory TLV {tlv_type}")
        if tlv_type == LldpTlvType.SYSTEM_NAME:
            neighbor.system_name = value.decode("utf-8", errors="replace").rstrip("\x00") or None
        elif tlv_type == LldpTlvType.PORT_DESCRIPTION:
            neighbor.port_description = value.decode("utf-8", errors="replace").rstrip("\x00") or None
        elif tlv_type == LldpTlvType.SYSTEM_CAPABILITIES and len(value) == 4:
            _system, enabled = struct.unpack("!HH", value)
            neighbor.enabled_capabilities = enabled

    return neighbor


# ── log files ─────────────────────────────────────────────────────────


def _read_payload(stream: BinaryIO, length: int) -> bytes | None:
    # at most READ_CHUNK bytes per read; None on early EOF
    chunks: list[bytes] = []
    remaining = length
    while remaining > 0:
        chunk = stream.read(min(remaining, READ_CHUNK))
        if not chunk:
            return None
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def read_lldp_log(stream: BinaryIO, source: str = "<stream>") -> Iterator[DiscoveryNeighbor]:
    """Lazily decode the records of one LLDP log.

    A clean end of file ends the sequence. A short length prefix, a short
    payload or an unparsable frame is logged and also ends it; records already
    yielded stay valid.
    """
    while True:
        prefix = stream.read(LENGTH_PREFIX.size)
        if not prefix:
            return
        if len(prefix) != LENGTH_PREFIX.size:
            logger.warning(f"{source}: Premature end of file, ignoring.")
            return

        (length,) = LENGTH_PREFIX.unpack(prefix)
        raw = _read_payload(stream, length)
        if raw is None:
            logger.warning(f"{source}: Premature end of file, ignoring.")
            return

        try:
            neighbor = parse_lldp_frame(raw)
        except LldpDecodeError as e:
            logger.warning(f"{source}: Failed to parse LLDP data, ignoring: {e}")
            return

        yield neighbor


def lldp_log_path(lldp_dir: Path, ifindex: int) -> Path:
    return lldp_dir / str(ifindex)


def read_lldp_file(path: Path) -> Iterator[DiscoveryNeighbor]:
    """Decode the LLDP log at ``path``; a missing file simply has no records."""
    try:
        f = open(path, "rb")
    except FileNotFoundError:
        return
    except OSError as e:
        logger.warning(f"Failed to open {path}, ignoring: {e}")
        return

    with f:
        yield from read_lldp_log(f, source=str(path))


# ── encoding ──────────────────────────────────────────────────────────


def encode_tlv(tlv_type: int, value: bytes) -> bytes:
    if len(value) > 0x1FF:
        raise ValueError(f"TLV value too long ({len(value)} bytes)")
    return TLV_HEADER.pack((tlv_type << 9) | len(value)) + value


def build_lldp_frame(
    chassis_id: bytes,
    port_id: bytes,
    *,
    chassis_subtype: int = ChassisIdSubtype.MAC_ADDRESS,
    port_subtype: int = PortIdSubtype.INTERFACE_NAME,
    ttl: int = 120,
    system_name: str | None = None,
    port_description: str | None = None,
    capabilities: tuple[int, int] | None = None,
    source: bytes = b"\x02\x00\x00\x00\x00\x01",
) -> bytes:
    """Assemble an LLDP Ethernet frame from field values.

    ``capabilities`` is ``(system, enabled)``.
    """
    tlvs = [
        encode_tlv(LldpTlvType.CHASSIS_ID, bytes([chassis_subtype]) + chassis_id),
        encode_tlv(LldpTlvType.PORT_ID, bytes([port_subtype]) + port_id),
        encode_tlv(LldpTlvType.TTL, struct.pack("!H", ttl)),
    ]
    if port_description is not None:
        tlvs.append(encode_tlv(LldpTlvType.PORT_DESCRIPTION, port_description.encode()))
    if system_name is not None:
        tlvs.append(encode_tlv(LldpTlvType.SYSTEM_NAME, system_name.encode()))
    if capabilities is not None:
        tlvs.append(encode_tlv(LldpTlvType.SYSTEM_CAPABILITIES, struct.pack("!HH", *capabilities)))
    tlvs.append(encode_tlv(LldpTlvType.END, b""))

    return ETHERNET_HEADER.pack(LLDP_MULTICAST_ADDR, source, ETHERTYPE_LLDP) + b"".join(tlvs)


def encode_log_record(frame: bytes) -> bytes:
    """Frame one captured LLDP frame the way networkd writes it to the log."""
    return LENGTH_PREFIX.pack(len(frame)) + frame
