"""Runtime settings: state directories, database locations and output flags."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

OUI_URL = "https://standards-oui.ieee.org/oui/oui.txt"


class NetStatusSettings(BaseSettings):
    """Settings passed explicitly to the aggregator and the formatters.

    Every field can be overridden from the environment with a ``NETSTATUS_``
    prefix, e.g. ``NETSTATUS_RUN_DIR=/tmp/run``.
    """

    model_config = SettingsConfigDict(env_prefix="NETSTATUS_")

    # networkd runtime state
    run_dir: Path = Path("/run/systemd")
    udev_data_dir: Path = Path("/run/udev/data")
    sysfs_net_dir: Path = Path("/sys/class/net")

    # OUI vendor database
    hwdb_source: Path = Path("/usr/lib/udev/hwdb.d/20-OUI.hwdb")
    oui_cache_path: Path = Path("/tmp/oui.txt")
    oui_url: str = OUI_URL
    download_oui: bool = False
    download_timeout: int = 30

    # output
    legend: bool = True
    pager: bool = True
    color: Optional[bool] = None
    all_links: bool = False

    @property
    def netif_dir(self) -> Path:
        return self.run_dir / "netif"

    @property
    def lldp_dir(self) -> Path:
        return self.netif_dir / "lldp"

    @property
    def links_state_dir(self) -> Path:
        return self.netif_dir / "links"

    @property
    def state_file(self) -> Path:
        return self.netif_dir / "state"
