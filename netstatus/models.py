"""Pydantic models and enums for link, address, discovery and status reports."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from netstatus._util import address_to_string


class OperationalState(str, Enum):
    ROUTABLE = "routable"
    DEGRADED = "degraded"
    OTHER = "other"

    @classmethod
    def classify(cls, state: str | None) -> OperationalState:
        for member in (cls.ROUTABLE, cls.DEGRADED):
            if state == member.value:
                return member
        return cls.OTHER


class SetupState(str, Enum):
    CONFIGURED = "configured"
    CONFIGURING = "configuring"
    FAILED = "failed"
    LINGER = "linger"
    OTHER = "other"

    @classmethod
    def classify(cls, state: str | None) -> SetupState:
        for member in (cls.CONFIGURED, cls.CONFIGURING, cls.FAILED, cls.LINGER):
            if state == member.value:
                return member
        return cls.OTHER


class LookupStatus(str, Enum):
    FOUND = "found"
    NO_DATA = "no-data"
    NOT_APPLICABLE = "not-applicable"


# ── wire-level records (transient) ────────────────────────────────────


@dataclass(frozen=True)
class LocalAddress:
    """An assigned address or a default-route gateway of one interface."""

    ifindex: int
    family: int
    address: bytes
    scope: int = 0
    metric: int = 0

    @property
    def text(self) -> str:
        return address_to_string(self.family, self.address)


@dataclass(frozen=True)
class NeighborEntry:
    """One neighbor table row; ``lladdr`` is None until the kernel resolved it."""

    ifindex: int
    family: int
    destination: bytes | None = None
    lladdr: bytes | None = None


# ── report models ─────────────────────────────────────────────────────


class LinkRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    index: int
    iftype: int
    hw_address: Optional[str] = None
    mtu: Optional[int] = None


class VendorDescription(BaseModel):
    text: str


class VendorLookup(BaseModel):
    """Result of an OUI lookup.

    ``NO_DATA`` is a database miss, ``NOT_APPLICABLE`` means the lookup was
    never attempted (no database, no address, reserved prefix). Neither is an
    error; callers simply omit the vendor.
    """

    status: LookupStatus
    description: Optional[VendorDescription] = None

    @classmethod
    def found(cls, text: str) -> VendorLookup:
        return cls(status=LookupStatus.FOUND, description=VendorDescription(text=text))

    @classmethod
    def no_data(cls) -> VendorLookup:
        return cls(status=LookupStatus.NO_DATA)

    @classmethod
    def not_applicable(cls) -> VendorLookup:
        return cls(status=LookupStatus.NOT_APPLICABLE)

    @property
    def text(self) -> str | None:
        return self.description.text if self.description else None


class DiscoveryNeighbor(BaseModel):
    chassis_id: Optional[str] = None
    port_id: Optional[str] = None
    system_name: Optional[str] = None
    port_description: Optional[str] = None
    enabled_capabilities: Optional[int] = None


class AddressReport(BaseModel):
    address: str
    family: int
    ifindex: int
    ifname: Optional[str] = None  # only set when no interface filter is in effect


class GatewayReport(AddressReport):
    vendor: Optional[VendorDescription] = None


class InterfaceReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    link: LinkRecord
    type: Optional[str] = None
    operational_state: Optional[str] = None
    setup_state: Optional[str] = None
    link_file: Optional[str] = None
    network_file: Optional[str] = None
    path: Optional[str] = None
    driver: Optional[str] = None
    vendor: Optional[str] = None
    model: Optional[str] = None
    hw_vendor: Optional[VendorDescription] = None
    addresses: list[AddressReport] = Field(default_factory=list)
    gateways: list[GatewayReport] = Field(default_factory=list)
    lldp_neighbors: list[DiscoveryNeighbor] = Field(default_factory=list)
    dns: list[str] = Field(default_factory=list)
    search_domains: list[str] = Field(default_factory=list)
    route_domains: list[str] = Field(default_factory=list)
    ntp: list[str] = Field(default_factory=list)
    carrier_bound_to: list[str] = Field(default_factory=list)
    carrier_bound_by: list[str] = Field(default_factory=list)
    timezone: Optional[str] = None

    @property
    def index(self) -> int:
        return self.link.index


class SystemReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    operational_state: Optional[str] = None
    addresses: list[AddressReport] = Field(default_factory=list)
    gateways: list[GatewayReport] = Field(default_factory=list)
    dns: list[str] = Field(default_factory=list)
    search_domains: list[str] = Field(default_factory=list)
    route_domains: list[str] = Field(default_factory=list)
    ntp: list[str] = Field(default_factory=list)


class LinkListEntry(BaseModel):
    index: int
    name: str
    type: Optional[str] = None
    operational_state: Optional[str] = None
    setup_state: Optional[str] = None


class LldpEntry(BaseModel):
    ifname: str
    ifindex: int
    neighbor: DiscoveryNeighbor
    capabilities: Optional[str] = None
