from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Optional

from .command import CmdResult, run_cmd

logger = logging.getLogger(__name__)

HOMEBREW_INSTALL_URL = "https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh"

# Installs and bootstraps can be slow (qt@6, ffmpeg); queries are quick.
INSTALL_TIMEOUT_S = 1800.0
QUERY_TIMEOUT_S = 60.0


class Homebrew:
    """Thin wrapper over the `brew` CLI.

    Every call goes through run_cmd with an explicit timeout. Query methods
    never raise; they report absence instead.
    """

    def __init__(
        self,
        prefix: str,
        *,
        install_timeout: float = INSTALL_TIMEOUT_S,
        query_timeout: float = QUERY_TIMEOUT_S,
        dry_run: bool = False,
    ) -> None:
        self.prefix = prefix
        self.install_timeout = install_timeout
        self.query_timeout = query_timeout
        self.dry_run = dry_run

    @property
    def executable(self) -> Optional[str]:
        found = shutil.which("brew")
        if found:
            return found
        candidate = Path(self.prefix) / "bin" / "brew"
        if candidate.exists():
            return str(candidate)
        return None

    def available(self) -> bool:
        return self.executable is not None

    def _brew(self, args: list[str], *, timeout: float, mutating: bool = False) -> CmdResult:
        exe = self.executable or "brew"
        # Queries still run during a dry run so the plan reflects reality.
        return run_cmd(
            [exe, *args],
            check=False,
            timeout=timeout,
            dry_run=self.dry_run and mutating,
        )

    def is_installed(self, package: str, *, cask: bool = False) -> bool:
        if not self.available():
            return False
        args = ["list", "--cask", package] if cask else ["list", package]
        return self._brew(args, timeout=self.query_timeout).ok

    def install(self, package: str, *, cask: bool = False) -> bool:
        args = ["install", "--cask", package] if cask else ["install", package]
        r = self._brew(args, timeout=self.install_timeout, mutating=True)
        if not r.ok:
            logger.debug("brew install %s failed: %s", package, r.stderr.strip())
        return r.ok

    def update(self) -> bool:
        return self._brew(["update"], timeout=self.install_timeout, mutating=True).ok

    def package_prefix(self, package: str) -> Optional[str]:
        if not self.available():
            return None
        r = self._brew(["--prefix", package], timeout=self.query_timeout)
        out = (r.stdout or "").strip()
        return out if r.ok and out else None

    def version(self, package: str) -> Optional[str]:
        """Installed version from `brew list --versions` (last column)."""
        if not self.available():
            return None
        r = self._brew(["list", "--versions", package], timeout=self.query_timeout)
        parts = (r.stdout or "").split()
        if not r.ok or len(parts) < 2:
            return None
        return parts[-1]

    def doctor_reports_errors(self) -> bool:
        r = self._brew(["doctor"], timeout=self.install_timeout)
        return "Error" in (r.stdout or "") + (r.stderr or "")

    def cleanup(self) -> None:
        self._brew(["cleanup", "-s"], timeout=self.install_timeout, mutating=True)

    def link_overwrite(self, package: str) -> None:
        self._brew(["link", "--overwrite", package], timeout=self.query_timeout, mutating=True)

    def bootstrap(self, install_script: Path) -> bool:
        """Run the official installer script non-interactively."""

        r = run_cmd(
            ["/bin/bash", str(install_script)],
            check=False,
            env={"NONINTERACTIVE": "1"},
            timeout=self.install_timeout,
            dry_run=self.dry_run,
        )
        if not r.ok:
            logger.debug("Homebrew installer output: %s", r.stderr.strip())
        return r.ok and (self.dry_run or self.available())
