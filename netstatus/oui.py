"""OUI (Organizationally Unique Identifier) database loading and vendor lookup."""

from __future__ import annotations

from pathlib import Path

import requests
from loguru import logger

from netstatus.config import NetStatusSettings
from netstatus.models import VendorLookup

OUI_PROPERTY = "ID_OUI_FROM_DATABASE"
OUI_PREFIX = "OUI:"


class HwdbDatabase:
    """In-memory hardware database: match key -> {property: value}.

    Keys are stored without the trailing ``*`` of the hwdb match pattern, so an
    ``OUI:XXYYZZ*`` block is found under ``OUI:XXYYZZ``.
    """

    def __init__(self, entries: dict[str, dict[str, str]] | None = None):
        self.entries = entries or {}

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, modalias: str, key: str) -> str | None:
        """Return property ``key`` of ``modalias``, or None when either is unknown."""
        properties = self.entries.get(modalias)
        if properties is None:
            return None
        return properties.get(key)

    @classmethod
    def from_hwdb_source(cls, path: Path) -> HwdbDatabase:
        """Parse a systemd hwdb source file.

        Blocks are one or more match lines followed by indented ``KEY=value``
        property lines; blank lines end a block, ``#`` lines are comments.
        """
        entries: dict[str, dict[str, str]] = {}
        matches: list[str] = []
        in_properties = False

        with open(path, encoding="utf-8", errors="replace") as f:
            for raw in f:
                line = raw.rstrip("\n")
                if line.startswith("#"):
                    continue
                if not line.strip():
                    matches, in_properties = [], False
                    continue

                if line[0] in " \t":
                    prop = line.strip()
                    if "=" not in prop or not matches:
                        continue
                    key, value = prop.split("=", 1)
                    for match in matches:
                        entries.setdefault(match, {})[key] = value
                    in_properties = True
                    continue

                if in_properties:
                    matches, in_properties = [], False
                matches.append(line.strip().rstrip("*"))

        return cls(entries)

    @classmethod
    def from_ieee_oui(cls, path: Path) -> HwdbDatabase:
        """Parse the IEEE ``oui.txt`` registry (``AA-BB-CC   (hex)\\tVendor`` lines)."""
        entries: dict[str, dict[str, str]] = {}
        with open(path, encoding="utf-8", errors="replace") as f:
            for line in f:
                if "(hex)" in line:
                    parts = line.split("(hex)")
                    if len(parts) == 2:
                        prefix = parts[0].strip().replace("-", "").upper()
                        vendor = parts[1].strip()
                        if len(prefix) == 6 and vendor:
                            entries[OUI_PREFIX + prefix] = {OUI_PROPERTY: vendor}
        return cls(entries)


def download_oui_db(url: str, dest: Path, timeout: int = 30) -> bool:
    """Fetch the IEEE registry into ``dest``; returns False on any failure."""
    logger.info("Downloading OUI database...")
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.warning(f"Failed to download OUI database: {e}")
        return False

    try:
        dest.write_bytes(response.content)
    except OSError as e:
        logger.warning(f"Could not write OUI database to {dest}: {e}")
        return False
    return True


def load_hwdb(settings: NetStatusSettings) -> HwdbDatabase | None:
    """Load the vendor database from the first available source.

    Order: systemd hwdb source, cached IEEE registry, IEEE download (only when
    ``download_oui`` is enabled). Returns None when nothing could be loaded.
    """
    if settings.hwdb_source.exists():
        try:
            return HwdbDatabase.from_hwdb_source(settings.hwdb_source)
        except OSError as e:
            logger.debug(f"Failed to read hardware database {settings.hwdb_source}: {e}")

    oui_path = settings.oui_cache_path
    if not oui_path.exists() and settings.download_oui:
        download_oui_db(settings.oui_url, oui_path, timeout=settings.download_timeout)

    if oui_path.exists():
        try:
            return HwdbDatabase.from_ieee_oui(oui_path)
        except OSError as e:
            logger.debug(f"Failed to read OUI database {oui_path}: {e}")

    logger.debug("Failed to open hardware database: no OUI source available")
    return None


def oui_modalias(mac: bytes) -> str:
    """Lookup key for the manufacturer prefix of ``mac``: ``OUI:XXYYZZ``."""
    return OUI_PREFIX + mac[:3].hex().upper()


def ieee_oui(hwdb: HwdbDatabase | None, mac: bytes | None) -> VendorLookup:
    """Look up the vendor of a hardware address.

    The 00:00:00 (Xerox) prefix is commonly misused as a placeholder and is
    never looked up.
    """
    if hwdb is None or mac is None or len(mac) != 6:
        return VendorLookup.not_applicable()
    if mac[:3] == b"\0\0\0":
        return VendorLookup.not_applicable()

    description = hwdb.get(oui_modalias(mac), OUI_PROPERTY)
    if description is None:
        return VendorLookup.no_data()
    return VendorLookup.found(description)
