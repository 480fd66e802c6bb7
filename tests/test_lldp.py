"""Tests for netstatus/lldp.py"""

import io
import struct

import pytest

from netstatus.exceptions import LldpDecodeError
from netstatus.lldp import (
    ChassisIdSubtype,
    LldpTlvType,
    PortIdSubtype,
    build_lldp_frame,
    capabilities_to_string,
    encode_log_record,
    encode_tlv,
    lldp_log_path,
    parse_lldp_frame,
    read_lldp_file,
    read_lldp_log,
)

SWITCH_MAC = bytes.fromhex("a4bb6d000001")


def _frame(**kwargs):
    defaults = {"chassis_id": SWITCH_MAC, "port_id": b"gi0/1"}
    defaults.update(kwargs)
    return build_lldp_frame(**defaults)


class TestCapabilities:
    """Tests for capabilities_to_string function."""

    def test_other_and_bridge(self):
        """Test bits 0 and 2 render as o and b."""
        assert capabilities_to_string(0b101) == "o.b........"

    def test_none(self):
        """Test no capabilities render as dots only."""
        assert capabilities_to_string(0) == "..........."

    def test_all(self):
        """Test every defined bit has its own letter."""
        assert capabilities_to_string(0x7FF) == "opbwrtdacsm"

    def test_router_and_station(self):
        """Test non-adjacent bits land in the right columns."""
        assert capabilities_to_string((1 << 4) | (1 << 7)) == "....r..a..."


class TestParseLldpFrame:
    """Tests for parse_lldp_frame function."""

    def test_full_frame(self):
        """Test all supported TLVs are decoded."""
        neighbor = parse_lldp_frame(
            _frame(system_name="core-sw1", port_description="uplink", capabilities=(0x14, 0x04))
        )
        assert neighbor.chassis_id == "a4:bb:6d:00:00:01"
        assert neighbor.port_id == "gi0/1"
        assert neighbor.system_name == "core-sw1"
        assert neighbor.port_description == "uplink"
        assert neighbor.enabled_capabilities == 0x04

    def test_optional_tlvs_absent(self):
        """Test a frame with only mandatory TLVs leaves optional fields unset."""
        neighbor = parse_lldp_frame(_frame())
        assert neighbor.system_name is None
        assert neighbor.enabled_capabilities is None

    def test_port_mac_subtype(self):
        """Test a MAC port ID is rendered as a hardware address."""
        neighbor = parse_lldp_frame(_frame(port_id=bytes.fromhex("525400aabbcc"), port_subtype=PortIdSubtype.MAC_ADDRESS))
        assert neighbor.port_id == "52:54:00:aa:bb:cc"

    def test_network_address_subtype(self):
        """Test an IPv4 network-address chassis ID is rendered as IP text."""
        neighbor = parse_lldp_frame(
            _frame(chassis_id=b"\x01" + bytes([192, 0, 2, 7]), chassis_subtype=ChassisIdSubtype.NETWORK_ADDRESS)
        )
        assert neighbor.chassis_id == "192.0.2.7"

    def test_unprintable_id_is_hex(self):
        """Test non-printable string IDs fall back to hex."""
        neighbor = parse_lldp_frame(_frame(port_id=b"\x00\x01\xff", port_subtype=PortIdSubtype.LOCALLY_ASSIGNED))
        assert neighbor.port_id == "0001ff"

    def test_vlan_tagged_frame(self):
        """Test an 802.1Q tag before the LLDP ethertype is skipped."""
        frame = _frame(system_name="tagged")
        tagged = frame[:12] + struct.pack("!HH", 0x8100, 10) + frame[12:]
        assert parse_lldp_frame(tagged).system_name == "tagged"

    def test_wrong_ethertype_raises(self):
        """Test a non-LLDP frame is rejected."""
        frame = _frame()
        with pytest.raises(LldpDecodeError):
            parse_lldp_frame(frame[:12] + b"\x08\x00" + frame[14:])

    def test_short_frame_raises(self):
        """Test a frame without room for an Ethernet header is rejected."""
        with pytest.raises(LldpDecodeError):
            parse_lldp_frame(b"\x01\x80\xc2")

    def test_tlv_overrun_raises(self):
        """Test a TLV claiming more bytes than the frame holds is rejected."""
        with pytest.raises(LldpDecodeError):
            parse_lldp_frame(_frame(system_name="core-sw1")[:-6])

    def test_wrong_tlv_order_raises(self):
        """Test the first three TLVs must be chassis ID, port ID and TTL."""
        frame = _frame()
        header = frame[:14]
        body = (
            encode_tlv(LldpTlvType.PORT_ID, b"\x05gi0/1")
            + encode_tlv(LldpTlvType.CHASSIS_ID, b"\x04" + SWITCH_MAC)
            + encode_tlv(LldpTlvType.TTL, b"\x00\x78")
            + encode_tlv(LldpTlvType.END, b"")
        )
        with pytest.raises(LldpDecodeError):
            parse_lldp_frame(header + body)

    def test_malformed_capabilities_are_ignored(self):
        """Test a system capabilities TLV of the wrong size is skipped."""
        frame = _frame()
        body = frame[14:-2] + encode_tlv(LldpTlvType.SYSTEM_CAPABILITIES, b"\x00\x04") + encode_tlv(LldpTlvType.END, b"")
        neighbor = parse_lldp_frame(frame[:14] + body)
        assert neighbor.enabled_capabilities is None


class TestReadLldpLog:
    """Tests for read_lldp_log framing."""

    def test_round_trip(self):
        """Test records written in log format decode back to their fields."""
        names = ["sw1", "sw2", "sw3"]
        data = b"".join(encode_log_record(_frame(system_name=n, capabilities=(4, 4))) for n in names)
        neighbors = list(read_lldp_log(io.BytesIO(data)))
        assert [n.system_name for n in neighbors] == names
        assert all(n.enabled_capabilities == 4 for n in neighbors)

    def test_empty_stream(self):
        """Test an empty log yields nothing and logs nothing."""
        assert list(read_lldp_log(io.BytesIO(b""))) == []

    def test_truncated_length_prefix(self, log_messages):
        """Test a 5-byte trailing fragment keeps prior records and warns."""
        data = encode_log_record(_frame(system_name="a")) + encode_log_record(_frame(system_name="b")) + b"\x10" * 5
        neighbors = list(read_lldp_log(io.BytesIO(data)))
        assert [n.system_name for n in neighbors] == ["a", "b"]
        assert any("Premature end of file, ignoring." in m for m in log_messages)

    def test_truncated_payload(self, log_messages):
        """Test a payload shorter than its announced length stops decoding."""
        data = encode_log_record(_frame(system_name="a")) + encode_log_record(_frame(system_name="b"))[:-3]
        neighbors = list(read_lldp_log(io.BytesIO(data)))
        assert [n.system_name for n in neighbors] == ["a"]
        assert any("Premature end of file" in m for m in log_messages)

    @pytest.mark.parametrize("length", [2**64 - 1, 2**62])
    def test_oversized_length_prefix(self, length, log_messages):
        """Test a garbage length prefix larger than the file is a truncation, not a crash."""
        data = encode_log_record(_frame(system_name="a")) + struct.pack("<Q", length) + b"junk"
        neighbors = list(read_lldp_log(io.BytesIO(data)))
        assert [n.system_name for n in neighbors] == ["a"]
        assert any("Premature end of file, ignoring." in m for m in log_messages)

    def test_payload_larger_than_one_read(self, monkeypatch):
        """Test a record spanning several read chunks is decoded whole."""
        monkeypatch.setattr("netstatus.lldp.READ_CHUNK", 7)
        data = encode_log_record(_frame(system_name="a", port_description="uplink")) * 2
        neighbors = list(read_lldp_log(io.BytesIO(data)))
        assert [(n.system_name, n.port_description) for n in neighbors] == [("a", "uplink")] * 2

    def test_invalid_record_stops_decoding(self, log_messages):
        """Test an unparsable record ends the file, keeping earlier records."""
        data = (
            encode_log_record(_frame(system_name="a"))
            + encode_log_record(b"\x00" * 20)
            + encode_log_record(_frame(system_name="c"))
        )
        neighbors = list(read_lldp_log(io.BytesIO(data)))
        assert [n.system_name for n in neighbors] == ["a"]
        assert any("Failed to parse LLDP data, ignoring" in m for m in log_messages)


class TestReadLldpFile:
    """Tests for read_lldp_file and lldp_log_path."""

    def test_missing_file_yields_nothing(self, tmp_path, log_messages):
        """Test a link without a log file has no neighbors and no warning."""
        assert list(read_lldp_file(lldp_log_path(tmp_path, 7))) == []
        assert log_messages == []

    def test_reads_file(self, tmp_path):
        """Test records are decoded from the per-link file."""
        path = lldp_log_path(tmp_path, 2)
        path.write_bytes(encode_log_record(_frame(system_name="core-sw1")))
        assert path.name == "2"
        assert [n.system_name for n in read_lldp_file(path)] == ["core-sw1"]

    def test_unreadable_path_warns(self, tmp_path, log_messages):
        """Test an open failure other than ENOENT is logged and skipped."""
        path = lldp_log_path(tmp_path, 3)
        path.mkdir()
        assert list(read_lldp_file(path)) == []
        assert any("Failed to open" in m for m in log_messages)

    def test_corrupt_length_in_file(self, tmp_path, log_messages):
        """Test a huge length prefix in a log file keeps the earlier records."""
        path = lldp_log_path(tmp_path, 4)
        path.write_bytes(encode_log_record(_frame(system_name="a")) + struct.pack("<Q", 2**62))
        assert [n.system_name for n in read_lldp_file(path)] == ["a"]
        assert any("Premature end of file" in m for m in log_messages)
