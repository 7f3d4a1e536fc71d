from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .context import InstallContext
from .lib.emulators import app_path, installed_variant
from .lib.ensure import InstallOutcome
from .lib.firmware import FirmwareOutcome, firmware_present
from .lib.manifests import dependency_packages
from .state_store import errors, get_outcome

logger = logging.getLogger(__name__)

RULE = "═" * 59

_DIRECTORY_LABELS = {
    "base": "Base",
    "roms_ps1": "PS1 ROM",
    "roms_ps2": "PS2 ROM",
    "roms_ps3": "PS3 ROM",
    "bios": "BIOS",
    "saves": "Saves",
    "config": "Config",
}


@dataclass
class Report:
    emulators: List[Tuple[str, Optional[str]]] = field(default_factory=list)
    firmware: List[Tuple[str, str]] = field(default_factory=list)
    packages: List[Tuple[str, bool, Optional[str]]] = field(default_factory=list)
    directories: List[Tuple[str, Path]] = field(default_factory=list)
    shell_config: Optional[str] = None
    roms: List[Tuple[str, str, Path]] = field(default_factory=list)
    guides: List[Tuple[str, Path]] = field(default_factory=list)
    launch: List[Tuple[str, str]] = field(default_factory=list)
    errors: List[Dict[str, Any]] = field(default_factory=list)
    warnings: List[Dict[str, Any]] = field(default_factory=list)
    # Targets the run recorded as installed that are gone on re-check.
    missing: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not (self.errors or self.warnings or self.missing)


_INSTALLED = {InstallOutcome.ALREADY_PRESENT.value, InstallOutcome.NEWLY_INSTALLED.value}


def _recorded_installed(state: Dict[str, Any], section: str, name: str) -> bool:
    return get_outcome(state, section, name) in _INSTALLED


def _firmware_status(ctx: InstallContext, key: str) -> Tuple[str, Optional[Path]]:
    """(status, guide path if one applies). Reads the filesystem only."""

    role = next(r for r in ctx.firmware_roles if r.key == key)
    if role.requires_emulator:
        spec = ctx.emulator(role.requires_emulator)
        if installed_variant(spec, brew=ctx.brew, applications_dir=ctx.cfg.applications_dir) is None:
            return FirmwareOutcome.SKIPPED.value, None
    if firmware_present(role, ctx.firmware_search_dir(role)) is not None:
        return FirmwareOutcome.FOUND.value, None
    if role.hle_template:
        if ctx.firmware_guide_path(role).exists():
            return FirmwareOutcome.HLE_CONFIGURED.value, None
        return "missing", None
    guide = ctx.firmware_guide_path(role)
    if guide.exists():
        return FirmwareOutcome.GUIDE_WRITTEN.value, guide
    return "missing", guide


def collect_report(ctx: InstallContext, state: Dict[str, Any]) -> Report:
    """Check everything again with the same probes the steps use."""

    report = Report()
    dirs = ctx.cfg.directories

    for spec in ctx.emulators:
        variant = installed_variant(spec, brew=ctx.brew, applications_dir=ctx.cfg.applications_dir)
        report.emulators.append((spec.console, variant.name if variant else None))
        if variant is None and _recorded_installed(state, "emulators", spec.console):
            report.missing.append(("emulators", spec.console))
        if spec.roms:
            report.roms.append((spec.console, spec.roms, dirs[f"roms_{spec.console.lower()}"]))
        if variant is None:
            continue
        if any(shutil.which(c) for c in variant.commands) and variant.launch:
            report.launch.append((spec.console, variant.launch))
        else:
            app = app_path(variant, ctx.cfg.applications_dir)
            if app is not None and app.is_dir():
                report.launch.append((spec.console, f"open {app}"))
            elif variant.launch:
                report.launch.append((spec.console, variant.launch))

    for role in ctx.firmware_roles:
        status, guide = _firmware_status(ctx, role.key)
        report.firmware.append((role.title, status))
        if guide is not None and status == FirmwareOutcome.GUIDE_WRITTEN.value:
            report.guides.append((role.title, guide))

    versioned = [str(p) for p in ctx.manifest.get("report_packages") or []]
    for pkg in dependency_packages(ctx.manifest):
        installed = ctx.brew.is_installed(pkg)
        version = (ctx.brew.version(pkg) or "unknown") if installed and pkg in versioned else None
        report.packages.append((pkg, installed, version))
        if not installed and _recorded_installed(state, "dependencies", pkg):
            report.missing.append(("dependencies", pkg))

    report.directories = [(_DIRECTORY_LABELS.get(role, role), path) for role, path in dirs.items()]
    report.shell_config = (state.get("execution") or {}).get("shell_config")
    report.errors = errors(state)
    report.warnings = list((state.get("execution") or {}).get("warnings") or [])
    return report


def _section(title: str) -> List[str]:
    return ["", RULE, title, RULE, ""]


def render_report(report: Report) -> str:
    lines: List[str] = []

    lines += _section("EMULATOR INSTALLATION STATUS")
    for console, name in report.emulators:
        status = f"✓ {name} INSTALLED" if name else "✗ NOT INSTALLED"
        lines.append(f"{console} Emulator: {status}")

    lines += _section("BIOS/FIRMWARE STATUS")
    labels = {
        FirmwareOutcome.FOUND.value: "✓ FOUND",
        FirmwareOutcome.HLE_CONFIGURED.value: "✓ HLE Mode Configured",
        FirmwareOutcome.GUIDE_WRITTEN.value: "⚠ Installation guide created",
        FirmwareOutcome.SKIPPED.value: "⚠ Skipped (emulator not installed)",
    }
    for title, status in report.firmware:
        lines.append(f"{title}: {labels.get(status, '⚠ Requires manual placement')}")

    lines += _section("DEPENDENCIES STATUS")
    for pkg, installed, version in report.packages:
        if not installed:
            lines.append(f"✗ {pkg}")
        else:
            lines.append(f"✓ {pkg} ({version})" if version else f"✓ {pkg}")

    lines += _section("WORKING DIRECTORIES")
    width = max((len(label) for label, _ in report.directories), default=0) + 1
    for label, path in report.directories:
        lines.append(f"{(label + ':').ljust(width)}  {path}")

    lines += _section("POST-INSTALLATION INSTRUCTIONS")
    lines.append("1. LOAD ENVIRONMENT VARIABLES:")
    lines.append(f"   source {report.shell_config or '~/.zshrc'}")
    lines.append("")
    lines.append("2. PLACE YOUR GAME ROMS:")
    for console, exts, path in report.roms:
        lines.append(f"   {console}: Copy {exts} files to {path}")
    lines.append("")
    lines.append("3. BIOS/FIRMWARE INSTALLATION:")
    if report.guides:
        for title, guide in report.guides:
            lines.append(f"   ⚠ {title}: See {guide}")
    else:
        lines.append("   Nothing to do")
    lines.append("")
    lines.append("4. LAUNCH EMULATORS:")
    for console, cmd in report.launch:
        lines.append(f"   • {console}: {cmd}")
    lines.append("")

    lines.append(RULE)
    if not report.ok:
        lines.append("⚠ INSTALLATION COMPLETED WITH WARNINGS")
        lines.append(RULE)
        lines.append("")
        lines.append("Warnings/Errors recorded:")
        for e in report.errors:
            lines.append(f"   [{e.get('step') or '-'}] {e.get('target')}: {e.get('error')}")
        for section, name in report.missing:
            lines.append(f"   ✗ {name}: recorded as installed but not found ({section})")
        for w in report.warnings:
            lines.append(f"   ⚠ {w.get('target')}: {w.get('reason')}")
    else:
        lines.append("✓ INSTALLATION COMPLETED SUCCESSFULLY")
        lines.append(RULE)
    return "\n".join(lines) + "\n"
