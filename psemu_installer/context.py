from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

from .config import InstallerConfig
from .lib.brew import Homebrew
from .lib.download import Downloader
from .lib.emulators import EmulatorSpec, emulators_from_manifest
from .lib.firmware import FirmwareRole, roles_from_manifest
from .lib.host import HostInfo


@dataclass(frozen=True)
class InstallContext:
    """Explicit inputs shared by every step."""

    cfg: InstallerConfig
    host: HostInfo
    brew: Homebrew
    downloader: Downloader
    manifest: Dict[str, Any]
    dry_run: bool = False

    @property
    def emulators(self) -> List[EmulatorSpec]:
        return emulators_from_manifest(self.manifest)

    def emulator(self, console: str) -> EmulatorSpec:
        for spec in self.emulators:
            if spec.console == console:
                return spec
        raise KeyError(console)

    @property
    def firmware_roles(self) -> List[FirmwareRole]:
        return roles_from_manifest(self.manifest)

    def location(self, key: str) -> Path:
        locations = {
            "bios": self.cfg.bios_dir,
            "config": self.cfg.config_dir,
            "rpcs3_firmware": self.cfg.rpcs3_firmware_dir,
        }
        if key not in locations:
            raise ValueError(f"Unknown firmware location {key!r}")
        return locations[key]

    def firmware_search_dir(self, role: FirmwareRole) -> Path:
        return self.location(role.search_dir)

    def firmware_guide_path(self, role: FirmwareRole) -> Path:
        if not role.guide:
            raise ValueError(f"Firmware role {role.key} has no guide")
        return self.location(role.guide_dir) / role.guide
