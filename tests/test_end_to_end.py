from __future__ import annotations

import json
from pathlib import Path
from typing import List

from pytest import MonkeyPatch

from conftest import FakeDownloader, FakeHomebrew, arm64_host
from psemu_installer.lib.brew import HOMEBREW_INSTALL_URL
from psemu_installer.lib.manifests import dependency_packages, load_targets_manifest
from psemu_installer.main import run

PS2_DOC_URL = "https://github.com/PCSX2/pcsx2/raw/master/bin/docs/BIOS.txt"


def _run(home: Path, brew: FakeHomebrew, downloader: FakeDownloader, state_path: Path) -> int:
    return run(
        home=str(home),
        host=arm64_host(),
        brew=brew,
        downloader=downloader,
        state_path=str(state_path),
        console=False,
        applications_dir=str(home / "Applications"),
    )


def test_fresh_arm64_host_then_rerun_is_a_no_op(home: Path, tmp_path: Path, monkeypatch: MonkeyPatch, capsys) -> None:
    rosetta_calls: List[bool] = []

    def install_rosetta(*, dry_run: bool = False) -> bool:
        rosetta_calls.append(dry_run)
        return True

    monkeypatch.setattr("psemu_installer.steps.step_10_rosetta.rosetta_present", lambda: False)
    monkeypatch.setattr("psemu_installer.steps.step_10_rosetta.install_rosetta", install_rosetta)

    brew = FakeHomebrew(available=False)
    downloader = FakeDownloader()
    state_path = tmp_path / "run.json"

    assert _run(home, brew, downloader, state_path) == 0

    # Rosetta, then the Homebrew bootstrap, then groups in declaration order.
    assert rosetta_calls == [False]
    assert downloader.fetched == [HOMEBREW_INSTALL_URL, PS2_DOC_URL]
    assert len(brew.bootstraps) == 1
    packages = dependency_packages(load_targets_manifest())
    assert [p for p, _ in brew.installs] == [*packages, "pcsx", "pcsx2", "rpcs3"]

    base = home / "Emulators"
    for sub in ("", "PS1", "PS2", "PS3", "BIOS", "Saves", "Config"):
        assert (base / sub / ".installed").exists()
    guide = base / "BIOS" / "PS2_BIOS_INSTALLATION_GUIDE.txt"
    assert str(base / "BIOS") in guide.read_text(encoding="utf-8")
    assert (base / "Config" / "PS3_FIRMWARE_INSTALLATION_GUIDE.txt").exists()
    assert (base / "Config" / "mednafen.conf").exists()
    assert (base / "Config" / "PCSX2").is_dir()

    out = capsys.readouterr().out
    assert "✓ INSTALLATION COMPLETED SUCCESSFULLY" in out
    assert "PS2 Emulator: ✓ PCSX2 INSTALLED" in out

    first = json.loads(state_path.read_text(encoding="utf-8"))["execution"]
    assert first["errors"] == []
    assert first["outcomes"]["system"] == {"rosetta": "newly-installed", "homebrew": "newly-installed"}
    assert set(first["outcomes"]["dependencies"].values()) == {"newly-installed"}
    assert "PS2 BIOS: guide-written" in (home / ".sony_emulators_bios.log").read_text(encoding="utf-8")
    assert (home / ".sony_emulators_errors.log").read_text(encoding="utf-8") == ""

    # Second run against the same home and package manager.
    installs_before = list(brew.installs)
    guide_mtime = guide.stat().st_mtime_ns

    assert _run(home, brew, downloader, state_path) == 0

    assert brew.installs == installs_before
    assert downloader.fetched == [HOMEBREW_INSTALL_URL, PS2_DOC_URL]
    assert guide.stat().st_mtime_ns == guide_mtime
    assert (home / ".zshrc").read_text(encoding="utf-8").count("export EMULATOR_HOME=") == 1

    second = json.loads(state_path.read_text(encoding="utf-8"))["execution"]
    assert set(second["outcomes"]["directories"].values()) == {"already-present"}
    assert set(second["outcomes"]["dependencies"].values()) == {"already-present"}
    assert set(second["outcomes"]["emulators"].values()) == {"already-present"}
    assert second["summary"]["failed_steps"] == []


def test_failures_are_reported_but_exit_zero(home: Path, tmp_path: Path, capsys) -> None:
    brew = FakeHomebrew(failing={"qt@6", "rpcs3"})
    downloader = FakeDownloader(failing={PS2_DOC_URL})
    state_path = tmp_path / "run.yaml"

    assert _run(home, brew, downloader, state_path) == 0

    out = capsys.readouterr().out
    assert "⚠ INSTALLATION COMPLETED WITH WARNINGS" in out
    assert "qt@6: install command failed" in out
    errors_log = (home / ".sony_emulators_errors.log").read_text(encoding="utf-8")
    assert "Failed to install qt@6" in errors_log
    assert "ps2-documentation: Failed to download after 5 attempts" in out
    assert "PS3 Emulator: ✗ NOT INSTALLED" in out


def test_stop_after_runs_a_slice(home: Path, tmp_path: Path) -> None:
    brew = FakeHomebrew()

    code = run(
        home=str(home),
        host=arm64_host(),
        brew=brew,
        downloader=FakeDownloader(),
        start_at="40_directories",
        stop_after="40_directories",
        console=False,
        applications_dir=str(home / "Applications"),
    )

    assert code == 0
    assert brew.installs == []
    assert (home / "Emulators" / "BIOS" / ".installed").exists()
    assert not (home / ".zshrc").exists()
