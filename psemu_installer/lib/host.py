from __future__ import annotations

import logging
import platform
from dataclasses import dataclass
from typing import Optional

from ..errors import UnsupportedPlatformError
from .command import run_cmd

logger = logging.getLogger(__name__)

HOMEBREW_PREFIX_BY_ARCH = {
    "arm64": "/opt/homebrew",
    "x86_64": "/usr/local",
}


@dataclass(frozen=True)
class HostInfo:
    arch: str
    os_version: str
    cpu_brand: str

    @property
    def is_apple_silicon(self) -> bool:
        return self.arch == "arm64"

    @property
    def homebrew_prefix(self) -> str:
        return HOMEBREW_PREFIX_BY_ARCH[self.arch]


def normalize_arch(machine: str) -> str:
    m = machine.lower()
    return {
        "x86_64": "x86_64",
        "amd64": "x86_64",
        "aarch64": "arm64",
        "arm64": "arm64",
    }.get(m, m)


def _cpu_brand() -> str:
    r = run_cmd(["sysctl", "-n", "machdep.cpu.brand_string"], check=False, timeout=10)
    return (r.stdout or "").strip() or "Unknown"


def probe_host(
    *,
    machine: Optional[str] = None,
    system: Optional[str] = None,
    os_version: Optional[str] = None,
    cpu_brand: Optional[str] = None,
) -> HostInfo:
    """Read architecture and OS version once.

    Raises UnsupportedPlatformError for anything other than macOS on
    arm64/x86_64. Arguments override the live values (used by tests and
    --dry-run planning on other hosts).
    """

    system = system if system is not None else platform.system()
    if system != "Darwin":
        raise UnsupportedPlatformError(f"Unsupported operating system: {system} (macOS required)")

    raw_machine = machine if machine is not None else platform.machine()
    arch = normalize_arch(raw_machine)
    if arch not in HOMEBREW_PREFIX_BY_ARCH:
        raise UnsupportedPlatformError(f"Unsupported architecture: {raw_machine}")

    if os_version is None:
        os_version = platform.mac_ver()[0] or "unknown"
    if cpu_brand is None:
        cpu_brand = _cpu_brand()

    host = HostInfo(arch=arch, os_version=os_version, cpu_brand=cpu_brand)

    label = "Apple Silicon (ARM64)" if host.is_apple_silicon else "Intel (x86_64)"
    logger.info("✓ Architecture: %s", label)
    logger.info("CPU: %s", host.cpu_brand)
    logger.info("macOS version: %s", host.os_version)
    return host
