from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional

from .lib.download import RetryPolicy

DIRECTORY_ROLES = ("base", "roms_ps1", "roms_ps2", "roms_ps3", "bios", "saves", "config")

_ROLE_SUBDIRS = {
    "base": "",
    "roms_ps1": "PS1",
    "roms_ps2": "PS2",
    "roms_ps3": "PS3",
    "bios": "BIOS",
    "saves": "Saves",
    "config": "Config",
}


@dataclass(frozen=True)
class InstallerConfig:
    """Everything a run needs to know about the user's machine layout.

    Built once by load_config(); steps never read os.environ themselves.
    """

    home: Path
    shell: str = ""
    applications_dir: Path = Path("/Applications")
    base_dirname: str = "Emulators"
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    install_timeout_s: float = 1800.0
    query_timeout_s: float = 60.0

    @property
    def base_dir(self) -> Path:
        return self.home / self.base_dirname

    @property
    def directories(self) -> Dict[str, Path]:
        return {role: self.base_dir / sub if sub else self.base_dir for role, sub in _ROLE_SUBDIRS.items()}

    @property
    def bios_dir(self) -> Path:
        return self.directories["bios"]

    @property
    def config_dir(self) -> Path:
        return self.directories["config"]

    @property
    def saves_dir(self) -> Path:
        return self.directories["saves"]

    @property
    def rpcs3_firmware_dir(self) -> Path:
        return self.home / "Library" / "Application Support" / "rpcs3" / "firmware"

    @property
    def install_log(self) -> Path:
        return self.home / ".sony_emulators_install.log"

    @property
    def error_log(self) -> Path:
        return self.home / ".sony_emulators_errors.log"

    @property
    def bios_log(self) -> Path:
        return self.home / ".sony_emulators_bios.log"


def load_config(
    *,
    home: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
    **overrides,
) -> InstallerConfig:
    """Build the config, reading HOME and SHELL exactly once."""

    env = os.environ if environ is None else environ
    home_path = Path(home or env.get("HOME") or Path.home()).expanduser()
    return InstallerConfig(home=home_path, shell=env.get("SHELL", ""), **overrides)
