"""Read-only access to the state files networkd keeps under ``/run/systemd/netif``."""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from netstatus.config import NetStatusSettings


def read_env_file(path: Path) -> dict[str, str]:
    """Parse a ``KEY=value`` state file.

    Blank lines and ``#``/``;`` comments are skipped, values may be quoted.
    A missing file yields an empty mapping.
    """
    values: dict[str, str] = {}
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError:
        return values

    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line[0] in "#;":
            continue
        if "=" not in line:
            logger.debug(f"{path}:{lineno}: ignoring line without assignment")
            continue

        key, value = line.split("=", 1)
        value = value.strip()
        if value[:1] in ("'", '"'):
            try:
                value = " ".join(shlex.split(value))
            except ValueError:
                logger.debug(f"{path}:{lineno}: unbalanced quotes, using raw value")
        values[key.strip()] = value

    return values


def _words(value: str | None) -> list[str]:
    return value.split() if value else []


@dataclass
class LinkState:
    """Per-link runtime state as written by networkd."""

    operational_state: str | None = None
    setup_state: str | None = None
    network_file: str | None = None
    dns: list[str] = field(default_factory=list)
    ntp: list[str] = field(default_factory=list)
    search_domains: list[str] = field(default_factory=list)
    route_domains: list[str] = field(default_factory=list)
    carrier_bound_to: list[str] = field(default_factory=list)
    carrier_bound_by: list[str] = field(default_factory=list)
    timezone: str | None = None

    @classmethod
    def from_values(cls, values: dict[str, str]) -> LinkState:
        return cls(
            operational_state=values.get("OPER_STATE"),
            setup_state=values.get("ADMIN_STATE"),
            network_file=values.get("NETWORK_FILE"),
            dns=_words(values.get("DNS")),
            ntp=_words(values.get("NTP")),
            search_domains=_words(values.get("DOMAINS")),
            route_domains=_words(values.get("ROUTE_DOMAINS")),
            carrier_bound_to=_words(values.get("CARRIER_BOUND_TO")),
            carrier_bound_by=_words(values.get("CARRIER_BOUND_BY")),
            timezone=values.get("TIMEZONE"),
        )


@dataclass
class SystemState:
    operational_state: str | None = None
    dns: list[str] = field(default_factory=list)
    ntp: list[str] = field(default_factory=list)
    search_domains: list[str] = field(default_factory=list)
    route_domains: list[str] = field(default_factory=list)

    @classmethod
    def from_values(cls, values: dict[str, str]) -> SystemState:
        return cls(
            operational_state=values.get("OPER_STATE"),
            dns=_words(values.get("DNS")),
            ntp=_words(values.get("NTP")),
            search_domains=_words(values.get("DOMAINS")),
            route_domains=_words(values.get("ROUTE_DOMAINS")),
        )


class NetworkState:
    """Reader for networkd's global and per-link state files."""

    def __init__(self, settings: NetStatusSettings):
        self.settings = settings

    def link_state(self, ifindex: int) -> LinkState:
        path = self.settings.links_state_dir / str(ifindex)
        try:
            return LinkState.from_values(read_env_file(path))
        except OSError as e:
            logger.debug(f"Failed to read link state {path}: {e}")
            return LinkState()

    def system_state(self) -> SystemState:
        path = self.settings.state_file
        try:
            return SystemState.from_values(read_env_file(path))
        except OSError as e:
            logger.debug(f"Failed to read system state {path}: {e}")
            return SystemState()
