"""Status aggregation: links, addresses, gateways, state files and LLDP logs into reports."""

from __future__ import annotations

from typing import Iterator

from loguru import logger

from netstatus._util import parse_mac
from netstatus.addresses import local_addresses, local_gateways
from netstatus.config import NetStatusSettings
from netstatus.device import load_device_info
from netstatus.exceptions import NetStatusError
from netstatus.gateway import get_gateway_description
from netstatus.links import decode_and_sort_links, link_name_by_index, link_type_string, resolve_link
from netstatus.lldp import capabilities_to_string, lldp_log_path, read_lldp_file
from netstatus.models import (
    AddressReport,
    GatewayReport,
    InterfaceReport,
    LinkListEntry,
    LinkRecord,
    LldpEntry,
    LocalAddress,
    SystemReport,
    VendorDescription,
)
from netstatus.oui import HwdbDatabase, ieee_oui
from netstatus.rtnl.transport import RtnlSocket
from netstatus.state import NetworkState


class StatusAggregator:
    """Builds the report models from one open rtnetlink socket.

    Every public method re-reads the kernel link table, so each call works on a
    single consistent snapshot of interface indices and names.
    """

    def __init__(
        self,
        rtnl: RtnlSocket,
        settings: NetStatusSettings,
        hwdb: HwdbDatabase | None = None,
        state: NetworkState | None = None,
    ):
        self.rtnl = rtnl
        self.settings = settings
        self.hwdb = hwdb
        self.state = state or NetworkState(settings)

    def links(self) -> list[LinkRecord]:
        return decode_and_sort_links(self.rtnl.dump_links())

    # ── list ──────────────────────────────────────────────────────────

    def list_links(self) -> list[LinkListEntry]:
        entries: list[LinkListEntry] = []
        for link in self.links():
            link_state = self.state.link_state(link.index)
            device = load_device_info(self.settings, link.index, link.name)
            entries.append(
                LinkListEntry(
                    index=link.index,
                    name=link.name,
                    type=link_type_string(link.iftype, device.devtype),
                    operational_state=link_state.operational_state,
                    setup_state=link_state.setup_state,
                )
            )
        return entries

    # ── addresses and gateways ────────────────────────────────────────

    def _address_reports(self, ifindex: int, links: list[LinkRecord]) -> list[AddressReport]:
        return [
            AddressReport(
                address=addr.text,
                family=addr.family,
                ifindex=addr.ifindex,
                ifname=link_name_by_index(links, addr.ifindex) if ifindex == 0 else None,
            )
            for addr in local_addresses(self.rtnl, ifindex)
        ]

    def _gateway_vendor(self, gateway: LocalAddress) -> VendorDescription | None:
        try:
            lookup = get_gateway_description(self.rtnl, self.hwdb, gateway.ifindex, gateway.family, gateway.address)
        except NetStatusError as e:
            logger.debug(f"Could not get description of gateway {gateway.text}: {e}")
            return None
        return lookup.description

    def _gateway_reports(self, ifindex: int, links: list[LinkRecord]) -> list[GatewayReport]:
        return [
            GatewayReport(
                address=gw.text,
                family=gw.family,
                ifindex=gw.ifindex,
                ifname=link_name_by_index(links, gw.ifindex) if ifindex == 0 else None,
                vendor=self._gateway_vendor(gw),
            )
            for gw in local_gateways(self.rtnl, ifindex)
        ]

    # ── status ────────────────────────────────────────────────────────

    def system_status(self) -> SystemReport:
        links = self.links()
        system = self.state.system_state()
        return SystemReport(
            operational_state=system.operational_state,
            addresses=self._address_reports(0, links),
            gateways=self._gateway_reports(0, links),
            dns=system.dns,
            search_domains=system.search_domains,
            route_domains=system.route_domains,
            ntp=system.ntp,
        )

    def link_status(self, link: LinkRecord, links: list[LinkRecord]) -> InterfaceReport:
        link_state = self.state.link_state(link.index)
        device = load_device_info(self.settings, link.index, link.name)

        hw_vendor = None
        if link.hw_address:
            hw_vendor = ieee_oui(self.hwdb, parse_mac(link.hw_address)).description

        return InterfaceReport(
            link=link,
            type=link_type_string(link.iftype, device.devtype),
            operational_state=link_state.operational_state,
            setup_state=link_state.setup_state,
            link_file=device.link_file,
            network_file=link_state.network_file,
            path=device.path,
            driver=device.driver,
            vendor=device.vendor,
            model=device.model,
            hw_vendor=hw_vendor,
            addresses=self._address_reports(link.index, links),
            gateways=self._gateway_reports(link.index, links),
            lldp_neighbors=list(read_lldp_file(lldp_log_path(self.settings.lldp_dir, link.index))),
            dns=link_state.dns,
            search_domains=link_state.search_domains,
            route_domains=link_state.route_domains,
            ntp=link_state.ntp,
            carrier_bound_to=link_state.carrier_bound_to,
            carrier_bound_by=link_state.carrier_bound_by,
            timezone=link_state.timezone,
        )

    def iter_status(self, names: list[str] | None = None, all_links: bool = False) -> Iterator[InterfaceReport]:
        """Yield one report per requested interface.

        With ``all_links`` every link is reported in index order, otherwise the
        named ones in argument order. Interfaces that cannot be resolved or
        queried are logged and skipped.
        """
        links = self.links()
        if all_links:
            selected = list(links)
        else:
            selected = []
            for name in names or []:
                try:
                    selected.append(resolve_link(links, name))
                except NetStatusError as e:
                    logger.error(str(e))

        for link in selected:
            try:
                yield self.link_status(link, links)
            except NetStatusError as e:
                logger.error(f"Failed to query status of {link.name}: {e}")

    def status(self, names: list[str] | None = None, all_links: bool = False) -> SystemReport | list[InterfaceReport]:
        if not names and not all_links:
            return self.system_status()
        return list(self.iter_status(names, all_links))

    # ── lldp ──────────────────────────────────────────────────────────

    def lldp_neighbors(self) -> Iterator[LldpEntry]:
        """Concatenate the decoded LLDP logs of all links, in link order."""
        for link in self.links():
            for neighbor in read_lldp_file(lldp_log_path(self.settings.lldp_dir, link.index)):
                caps = neighbor.enabled_capabilities
                yield LldpEntry(
                    ifname=link.name,
                    ifindex=link.index,
                    neighbor=neighbor,
                    capabilities=capabilities_to_string(caps) if caps is not None else None,
                )