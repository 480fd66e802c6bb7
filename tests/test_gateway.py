"""Tests for netstatus/gateway.py"""

import errno

from conftest import error_msg, ip_bytes, link_msg, neigh_msg
from netstatus.gateway import find_gateway_lladdr, get_gateway_description, iter_neighbors
from netstatus.models import LookupStatus, NeighborEntry
from netstatus.oui import HwdbDatabase
from netstatus.rtnl.constants import AF_INET, AF_INET6

HWDB = HwdbDatabase(
    {
        "OUI:525400": {"ID_OUI_FROM_DATABASE": "QEMU virtual NIC"},
        "OUI:A4BB6D": {"ID_OUI_FROM_DATABASE": "Dell Inc."},
    }
)


class TestIterNeighbors:
    """Tests for iter_neighbors decoding."""

    def test_decodes_entries(self):
        """Test destination and link-layer address are extracted."""
        entries = list(iter_neighbors([neigh_msg(2, "10.0.0.1", "52:54:00:12:34:56")]))
        assert entries == [
            NeighborEntry(
                ifindex=2,
                family=AF_INET,
                destination=ip_bytes("10.0.0.1"),
                lladdr=bytes.fromhex("525400123456"),
            )
        ]

    def test_skips_errors_and_other_types(self, log_messages):
        """Test error replies are logged and foreign messages skipped."""
        messages = [error_msg(errno.EINVAL), link_msg(1, "lo"), neigh_msg(2, "10.0.0.1")]
        entries = list(iter_neighbors(messages))
        assert len(entries) == 1
        assert entries[0].lladdr is None
        assert any("got error" in m for m in log_messages)


class TestFindGatewayLladdr:
    """Tests for the neighbor match predicates."""

    gw = ip_bytes("10.0.0.1")

    def test_family_must_match(self):
        """Test entries of another family are ignored."""
        entries = [NeighborEntry(2, AF_INET6, self.gw, b"\x01" * 6)]
        assert find_gateway_lladdr(entries, 2, AF_INET, self.gw) is None

    def test_ifindex_filter(self):
        """Test the interface filter applies only when positive."""
        entries = [NeighborEntry(3, AF_INET, self.gw, b"\x01" * 6)]
        assert find_gateway_lladdr(entries, 2, AF_INET, self.gw) is None
        assert find_gateway_lladdr(entries, 0, AF_INET, self.gw) == b"\x01" * 6

    def test_first_match_wins_without_filter(self):
        """Test the first qualifying entry in table order is used."""
        entries = [
            NeighborEntry(3, AF_INET, self.gw, b"\x01" * 6),
            NeighborEntry(2, AF_INET, self.gw, b"\x02" * 6),
        ]
        assert find_gateway_lladdr(entries, 0, AF_INET, self.gw) == b"\x01" * 6


class TestGetGatewayDescription:
    """Tests for get_gateway_description function."""

    def test_second_entry_wins_when_first_lacks_lladdr(self, fake_rtnl):
        """Test an unresolved entry is skipped in favour of the next match."""
        rtnl = fake_rtnl(
            neighbors=[
                neigh_msg(2, "10.0.0.1", None),
                neigh_msg(2, "10.0.0.1", "52:54:00:aa:bb:cc"),
            ]
        )
        result = get_gateway_description(rtnl, HWDB, 2, AF_INET, ip_bytes("10.0.0.1"))
        assert result.status == LookupStatus.FOUND
        assert result.text == "QEMU virtual NIC"

    def test_scan_stops_at_first_match(self, fake_rtnl):
        """Test the neighbor dump is not consumed past the match."""
        rtnl = fake_rtnl(
            neighbors=[
                neigh_msg(2, "10.0.0.1", "a4:bb:6d:00:00:01"),
                neigh_msg(2, "10.0.0.1", "52:54:00:aa:bb:cc"),
                neigh_msg(2, "10.0.0.9", "52:54:00:aa:bb:cd"),
            ]
        )
        result = get_gateway_description(rtnl, HWDB, 2, AF_INET, ip_bytes("10.0.0.1"))
        assert result.text == "Dell Inc."
        assert rtnl.consumed_neighbors == 1

    def test_requests_dump_for_family_and_interface(self, fake_rtnl):
        """Test the dump is requested with the gateway family and interface."""
        rtnl = fake_rtnl()
        get_gateway_description(rtnl, HWDB, 4, AF_INET6, ip_bytes("fe80::1"))
        assert rtnl.calls == [("neighbors", AF_INET6, 4)]

    def test_exhausted_table_is_no_data(self, fake_rtnl):
        """Test no matching entry yields no-data."""
        rtnl = fake_rtnl(neighbors=[neigh_msg(2, "10.0.0.2", "52:54:00:aa:bb:cc")])
        result = get_gateway_description(rtnl, HWDB, 2, AF_INET, ip_bytes("10.0.0.1"))
        assert result.status == LookupStatus.NO_DATA

    def test_ipv6_exact_comparison(self, fake_rtnl):
        """Test 16-byte destinations are compared exactly."""
        rtnl = fake_rtnl(
            neighbors=[
                neigh_msg(2, "fe80::2", "a4:bb:6d:00:00:01", family=AF_INET6),
                neigh_msg(2, "fe80::1", "52:54:00:aa:bb:cc", family=AF_INET6),
            ]
        )
        result = get_gateway_description(rtnl, HWDB, 2, AF_INET6, ip_bytes("fe80::1"))
        assert result.text == "QEMU virtual NIC"
