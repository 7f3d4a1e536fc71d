from __future__ import annotations

import shutil
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

import pytest
from pytest import MonkeyPatch

from psemu_installer.config import load_config
from psemu_installer.context import InstallContext
from psemu_installer.errors import DownloadError
from psemu_installer.lib.command import CmdResult
from psemu_installer.lib.download import DownloadRecord
from psemu_installer.lib.host import HostInfo
from psemu_installer.lib.manifests import load_targets_manifest


class FakeHomebrew:
    """In-memory stand-in for lib.brew.Homebrew."""

    def __init__(
        self,
        *,
        available: bool = True,
        installed: Optional[Set[str]] = None,
        casks: Optional[Set[str]] = None,
        failing: Optional[Set[str]] = None,
        bootstrap_ok: bool = True,
        doctor_errors: bool = False,
    ) -> None:
        self._available = available
        self.installed: Set[str] = set(installed or ())
        self.casks: Set[str] = set(casks or ())
        self.failing: Set[str] = set(failing or ())
        self.bootstrap_ok = bootstrap_ok
        self.doctor_errors = doctor_errors
        self.installs: List[Tuple[str, bool]] = []
        self.bootstraps: List[Path] = []
        self.updates = 0
        self.fix_calls: List[str] = []

    @property
    def executable(self) -> Optional[str]:
        return "/opt/homebrew/bin/brew" if self._available else None

    def available(self) -> bool:
        return self._available

    def is_installed(self, package: str, *, cask: bool = False) -> bool:
        if not self._available:
            return False
        return package in (self.casks if cask else self.installed)

    def install(self, package: str, *, cask: bool = False) -> bool:
        self.installs.append((package, cask))
        if package in self.failing:
            return False
        (self.casks if cask else self.installed).add(package)
        return True

    def update(self) -> bool:
        self.updates += 1
        return True

    def package_prefix(self, package: str) -> Optional[str]:
        return f"/opt/homebrew/opt/{package}" if package in self.installed else None

    def version(self, package: str) -> Optional[str]:
        return "1.0" if package in self.installed else None

    def doctor_reports_errors(self) -> bool:
        return self.doctor_errors

    def cleanup(self) -> None:
        self.fix_calls.append("cleanup")

    def link_overwrite(self, package: str) -> None:
        self.fix_calls.append(f"link {package}")

    def bootstrap(self, install_script: Path) -> bool:
        self.bootstraps.append(install_script)
        if not install_script.is_file():
            return False
        self._available = self.bootstrap_ok
        return self.bootstrap_ok


class FakeDownloader:
    """Writes a fixed body to dest, or fails every URL listed in `failing`."""

    def __init__(self, *, failing: Optional[Set[str]] = None, body: str = "BIOS documentation\n") -> None:
        self.failing: Set[str] = set(failing or ())
        self.body = body
        self.fetched: List[str] = []

    def fetch(self, url: str, dest) -> DownloadRecord:
        dest = Path(dest)
        self.fetched.append(url)
        if url in self.failing:
            record = DownloadRecord(url=url, dest=dest, attempts=5, ok=False)
            raise DownloadError(f"Failed to download after 5 attempts: {url}", record)
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_text(self.body, encoding="utf-8")
        return DownloadRecord(url=url, dest=dest, attempts=1, ok=True)


def arm64_host() -> HostInfo:
    return HostInfo(arch="arm64", os_version="14.4", cpu_brand="Apple M2")


@pytest.fixture(autouse=True)
def _isolated_system(monkeypatch: MonkeyPatch) -> Dict[str, List]:
    """Nothing on PATH, Rosetta present, emulator verification fails quietly."""

    calls: Dict[str, List] = {"verify": []}

    def fake_verify(argv, **kwargs):
        calls["verify"].append(list(argv))
        return CmdResult(argv=list(argv), returncode=127, stdout="", stderr="not found")

    monkeypatch.setattr(shutil, "which", lambda *a, **k: None)
    monkeypatch.setattr("psemu_installer.lib.emulators.run_cmd", fake_verify)
    monkeypatch.setattr("psemu_installer.steps.step_10_rosetta.rosetta_present", lambda: True)
    return calls


@pytest.fixture()
def home(tmp_path: Path) -> Path:
    h = tmp_path / "home"
    h.mkdir()
    return h


@pytest.fixture()
def fake_brew() -> FakeHomebrew:
    return FakeHomebrew()


@pytest.fixture()
def fake_downloader() -> FakeDownloader:
    return FakeDownloader()


@pytest.fixture()
def ctx(home: Path, fake_brew: FakeHomebrew, fake_downloader: FakeDownloader) -> InstallContext:
    cfg = load_config(
        home=str(home),
        environ={"SHELL": "/bin/zsh"},
        applications_dir=home / "Applications",
    )
    return InstallContext(
        cfg=cfg,
        host=arm64_host(),
        brew=fake_brew,
        downloader=fake_downloader,
        manifest=load_targets_manifest(),
    )


@pytest.fixture()
def state():
    from psemu_installer.state_store import ensure_defaults

    return ensure_defaults({})
