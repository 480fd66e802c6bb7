"""udev and sysfs lookups for the hardware details of a network interface."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from netstatus._util import _validate_interface_name
from netstatus.config import NetStatusSettings


@dataclass
class DeviceInfo:
    """udev properties of one network device."""

    properties: dict[str, str] = field(default_factory=dict)
    devtype: str | None = None

    @property
    def link_file(self) -> str | None:
        return self.properties.get("ID_NET_LINK_FILE")

    @property
    def driver(self) -> str | None:
        return self.properties.get("ID_NET_DRIVER")

    @property
    def path(self) -> str | None:
        return self.properties.get("ID_PATH")

    @property
    def vendor(self) -> str | None:
        return self.properties.get("ID_VENDOR_FROM_DATABASE") or self.properties.get("ID_VENDOR")

    @property
    def model(self) -> str | None:
        return self.properties.get("ID_MODEL_FROM_DATABASE") or self.properties.get("ID_MODEL")


def read_udev_properties(path: Path) -> dict[str, str]:
    """Read the ``E:KEY=value`` lines of a udev database record."""
    properties: dict[str, str] = {}
    with open(path, encoding="utf-8", errors="replace") as f:
        for line in f:
            if not line.startswith("E:"):
                continue
            key, sep, value = line[2:].rstrip("\n").partition("=")
            if sep:
                properties[key] = value
    return properties


def read_devtype(uevent: Path) -> str | None:
    with open(uevent, encoding="utf-8", errors="replace") as f:
        for line in f:
            key, sep, value = line.strip().partition("=")
            if sep and key == "DEVTYPE":
                return value
    return None


def load_device_info(settings: NetStatusSettings, ifindex: int, name: str) -> DeviceInfo:
    """Collect udev properties and the device type; missing data leaves fields empty."""
    info = DeviceInfo()

    record = settings.udev_data_dir / f"n{ifindex}"
    try:
        info.properties = read_udev_properties(record)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.debug(f"Failed to read udev record {record}: {e}")

    if not _validate_interface_name(name):
        logger.debug(f"Refusing to look up sysfs entry for suspicious interface name {name!r}")
        return info

    uevent = settings.sysfs_net_dir / name / "uevent"
    try:
        info.devtype = read_devtype(uevent)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.debug(f"Failed to read {uevent}: {e}")

    return info
