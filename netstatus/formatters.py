"""Terminal and JSON formatters for link lists, status reports and LLDP neighbors."""

from __future__ import annotations

import json
import sys
from typing import Iterable, Sequence

from pydantic import BaseModel
from tabulate import tabulate

from netstatus.config import NetStatusSettings
from netstatus.lldp import CAPABILITY_LEGEND
from netstatus.models import (
    AddressReport,
    DiscoveryNeighbor,
    GatewayReport,
    InterfaceReport,
    LinkListEntry,
    LldpEntry,
    OperationalState,
    SetupState,
    SystemReport,
)

BLACK_CIRCLE = "●"

ANSI_GREEN = "\x1b[0;1;32m"
ANSI_YELLOW = "\x1b[0;1;33m"
ANSI_RED = "\x1b[0;1;31m"
ANSI_NORMAL = "\x1b[0m"

_OPERATIONAL_COLORS = {
    OperationalState.ROUTABLE: ANSI_GREEN,
    OperationalState.DEGRADED: ANSI_YELLOW,
}
_SETUP_COLORS = {
    SetupState.CONFIGURED: ANSI_GREEN,
    SetupState.CONFIGURING: ANSI_YELLOW,
    SetupState.FAILED: ANSI_RED,
    SetupState.LINGER: ANSI_RED,
}

LIST_HEADERS = ["IDX", "LINK", "TYPE", "OPERATIONAL", "SETUP"]
LLDP_HEADERS = ["LINK", "CHASSIS ID", "SYSTEM NAME", "CAPS", "PORT ID", "PORT DESCRIPTION"]


def strna(value: str | None) -> str:
    return value if value is not None else "n/a"


class TerminalFormatter:
    """Format report models as plain-text terminal output."""

    def __init__(self, settings: NetStatusSettings, color: bool | None = None) -> None:
        self.settings = settings
        if color is None:
            color = settings.color if settings.color is not None else sys.stdout.isatty()
        self.color = color

    # ── highlighting ──────────────────────────────────────────────────

    def _paint(self, text: str, ansi: str | None) -> str:
        if not self.color or ansi is None:
            return text
        return f"{ansi}{text}{ANSI_NORMAL}"

    def operational(self, state: str | None, text: str | None = None) -> str:
        ansi = _OPERATIONAL_COLORS.get(OperationalState.classify(state))
        return self._paint(strna(state) if text is None else text, ansi)

    def setup(self, state: str | None) -> str:
        return self._paint(strna(state), _SETUP_COLORS.get(SetupState.classify(state)))

    # ── list ──────────────────────────────────────────────────────────

    def format_list(self, entries: Sequence[LinkListEntry]) -> str:
        rows = [
            [e.index, e.name, strna(e.type), self.operational(e.operational_state), self.setup(e.setup_state)]
            for e in entries
        ]
        headers = LIST_HEADERS if self.settings.legend else ()
        lines: list[str] = []
        if rows or self.settings.legend:
            lines.append(tabulate(rows, headers=headers, tablefmt="plain", colalign=("right",)))
        if self.settings.legend:
            lines.append(f"\n{len(entries)} links listed.")
        return "\n".join(lines)

    # ── status ────────────────────────────────────────────────────────

    @staticmethod
    def _field(label: str, values: Iterable[str], width: int) -> list[str]:
        """Render ``label: value`` with continuation lines aligned under the first value."""
        prefix = f"{label}: ".rjust(width + 2)
        return [f"{prefix if i == 0 else ' ' * len(prefix)}{value}" for i, value in enumerate(values)]

    @staticmethod
    def _address_text(addr: AddressReport) -> str:
        text = addr.address
        if isinstance(addr, GatewayReport) and addr.vendor is not None:
            text += f" ({addr.vendor.text})"
        if addr.ifname is not None:
            text += f" on {addr.ifname}"
        return text

    @staticmethod
    def _neighbor_text(neighbor: DiscoveryNeighbor) -> str:
        text = f"{strna(neighbor.system_name or neighbor.chassis_id)} on port {strna(neighbor.port_id)}"
        if neighbor.port_description:
            text += f" ({neighbor.port_description})"
        return text

    def format_interface(self, report: InterfaceReport) -> str:
        width = 16
        link = report.link
        lines = [f"{self.operational(report.operational_state, BLACK_CIRCLE)} {link.index}: {link.name}"]
        lines += self._field("Link File", [strna(report.link_file)], width)
        lines += self._field("Network File", [strna(report.network_file)], width)
        lines += self._field("Type", [strna(report.type)], width)
        state = f"{self.operational(report.operational_state)} ({self.setup(report.setup_state)})"
        lines += self._field("State", [state], width)

        for label, value in (
            ("Path", report.path),
            ("Driver", report.driver),
            ("Vendor", report.vendor),
            ("Model", report.model),
        ):
            if value:
                lines += self._field(label, [value], width)

        if link.hw_address:
            hw = link.hw_address
            if report.hw_vendor is not None:
                hw += f" ({report.hw_vendor.text})"
            lines += self._field("HW Address", [hw], width)
        if link.mtu:
            lines += self._field("MTU", [str(link.mtu)], width)

        lines += self._field("Address", [self._address_text(a) for a in report.addresses], width)
        lines += self._field("Gateway", [self._address_text(g) for g in report.gateways], width)
        lines += self._field("Connected To", [self._neighbor_text(n) for n in report.lldp_neighbors], width)
        lines += self._field("DNS", report.dns, width)
        lines += self._field("Search Domains", report.search_domains, width)
        lines += self._field("Route Domains", report.route_domains, width)
        lines += self._field("NTP", report.ntp, width)
        lines += self._field("Carrier Bound To", report.carrier_bound_to, width)
        lines += self._field("Carrier Bound By", report.carrier_bound_by, width)
        if report.timezone:
            lines += self._field("Time Zone", [report.timezone], width)
        return "\n".join(lines)

    def format_system(self, report: SystemReport) -> str:
        width = 14
        # the circle takes the first column of the label
        circle = self.operational(report.operational_state, BLACK_CIRCLE)
        lines = [f"{circle}{'State: '.rjust(width + 1)}{self.operational(report.operational_state)}"]
        lines += self._field("Address", [self._address_text(a) for a in report.addresses], width)
        lines += self._field("Gateway", [self._address_text(g) for g in report.gateways], width)
        lines += self._field("DNS", report.dns, width)
        lines += self._field("Search Domains", report.search_domains, width)
        lines += self._field("Route Domains", report.route_domains, width)
        lines += self._field("NTP", report.ntp, width)
        return "\n".join(lines)

    def format_status(self, result: SystemReport | Sequence[InterfaceReport]) -> str:
        if isinstance(result, SystemReport):
            return self.format_system(result)
        return "\n\n".join(self.format_interface(r) for r in result)

    # ── lldp ──────────────────────────────────────────────────────────

    def format_lldp(self, entries: Iterable[LldpEntry]) -> str:
        rows = [
            [
                e.ifname,
                strna(e.neighbor.chassis_id),
                strna(e.neighbor.system_name),
                strna(e.capabilities),
                strna(e.neighbor.port_id),
                strna(e.neighbor.port_description),
            ]
            for e in entries
        ]
        headers = LLDP_HEADERS if self.settings.legend else ()
        lines: list[str] = []
        if rows or self.settings.legend:
            lines.append(tabulate(rows, headers=headers, tablefmt="plain"))
        if self.settings.legend:
            lines.append(f"\n{CAPABILITY_LEGEND}\n")
            lines.append(f"Total entries displayed: {len(rows)}")
        return "\n".join(lines)


class JsonFormatter:
    """Format report models as indented JSON documents."""

    def __init__(self, indent: int = 2) -> None:
        self.indent = indent

    def _dump(self, models: BaseModel | Iterable[BaseModel]) -> str:
        if isinstance(models, BaseModel):
            data: object = models.model_dump(mode="json")
        else:
            data = [m.model_dump(mode="json") for m in models]
        return json.dumps(data, indent=self.indent)

    def format_list(self, entries: Sequence[LinkListEntry]) -> str:
        return self._dump(entries)

    def format_status(self, result: SystemReport | Sequence[InterfaceReport]) -> str:
        return self._dump(result)

    def format_lldp(self, entries: Iterable[LldpEntry]) -> str:
        return self._dump(entries)
