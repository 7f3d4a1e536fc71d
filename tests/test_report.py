from __future__ import annotations

import dataclasses

from conftest import FakeHomebrew
from psemu_installer.lib.manifests import dependency_packages
from psemu_installer.report import Report, collect_report, render_report
from psemu_installer.steps import InstallDependenciesStep
from psemu_installer.state_store import get_outcome, record_error, record_warning


def test_report_rechecks_the_system(ctx, state, fake_brew: FakeHomebrew) -> None:
    fake_brew.installed.update({"mednafen", "pcsx2", "sdl2", "ffmpeg"})
    ctx.cfg.bios_dir.mkdir(parents=True)
    (ctx.cfg.bios_dir / "scph39001.bin").write_bytes(b"\0")
    state["execution"]["shell_config"] = str(ctx.cfg.home / ".zshrc")

    report = collect_report(ctx, state)

    assert report.emulators == [("PS1", "Mednafen"), ("PS2", "PCSX2"), ("PS3", None)]
    assert dict(report.firmware) == {"PS1 BIOS": "missing", "PS2 BIOS": "found", "PS3 Firmware": "skipped"}
    packages = {pkg: (installed, version) for pkg, installed, version in report.packages}
    assert list(packages) == dependency_packages(ctx.manifest)
    assert packages["sdl2"] == (True, "1.0")
    assert packages["qt@6"] == (False, None)
    assert packages["cmake"] == (False, None)
    assert report.missing == []
    assert ("PS1", "mednafen -system psx [rom_file]") in report.launch
    assert report.ok


def test_render_success_banner(ctx, state) -> None:
    text = render_report(collect_report(ctx, state))

    for section in (
        "EMULATOR INSTALLATION STATUS",
        "BIOS/FIRMWARE STATUS",
        "DEPENDENCIES STATUS",
        "WORKING DIRECTORIES",
        "POST-INSTALLATION INSTRUCTIONS",
    ):
        assert section in text
    assert "✓ INSTALLATION COMPLETED SUCCESSFULLY" in text
    assert "WITH WARNINGS" not in text
    assert f"PS2: Copy .iso files to {ctx.cfg.home / 'Emulators' / 'PS2'}" in text


def test_render_warning_banner_lists_errors(state) -> None:
    state["execution"]["current_step"] = "30_dependencies"
    record_error(state, target="qt@6", error="install command failed")

    report = Report(errors=state["execution"]["errors"])
    text = render_report(report)

    assert "⚠ INSTALLATION COMPLETED WITH WARNINGS" in text
    assert "[30_dependencies] qt@6: install command failed" in text
    assert "SUCCESSFULLY" not in text


def test_guide_locations_are_listed(ctx, state) -> None:
    ctx.cfg.bios_dir.mkdir(parents=True)
    (ctx.cfg.bios_dir / "PS2_BIOS_INSTALLATION_GUIDE.txt").write_text("guide", encoding="utf-8")

    text = render_report(collect_report(ctx, state))

    assert f"⚠ PS2 BIOS: See {ctx.cfg.bios_dir / 'PS2_BIOS_INSTALLATION_GUIDE.txt'}" in text


class _ClaimsCmake(FakeHomebrew):
    """Reports success for cmake without installing it."""

    def install(self, package: str, *, cask: bool = False) -> bool:
        if package == "cmake":
            self.installs.append((package, cask))
            return True
        return super().install(package, cask=cask)


def test_recorded_install_that_is_absent_is_flagged(ctx, state) -> None:
    ctx = dataclasses.replace(ctx, brew=_ClaimsCmake())
    state = InstallDependenciesStep().run(ctx, state)
    assert get_outcome(state, "dependencies", "cmake") == "newly-installed"

    report = collect_report(ctx, state)
    text = render_report(report)

    assert report.missing == [("dependencies", "cmake")]
    assert not report.ok
    assert "✗ cmake\n" in text
    assert "✓ git\n" in text
    assert "✓ sdl2 (1.0)" in text
    assert "⚠ INSTALLATION COMPLETED WITH WARNINGS" in text
    assert "   ✗ cmake: recorded as installed but not found (dependencies)" in text


def test_recorded_warnings_are_listed(ctx, state) -> None:
    record_warning(state, target="rosetta", reason="not detected after softwareupdate")
    record_warning(state, target="PS3", reason="manual download: https://rpcs3.net/download")

    text = render_report(collect_report(ctx, state))

    assert "⚠ INSTALLATION COMPLETED WITH WARNINGS" in text
    assert "   ⚠ rosetta: not detected after softwareupdate" in text
    assert "   ⚠ PS3: manual download: https://rpcs3.net/download" in text
