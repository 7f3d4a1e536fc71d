"""BIOS/firmware detection and guide generation.

Firmware images are copyrighted and are never downloaded or copied by this
package. The advisor only detects them; when they are missing it writes a
plain-text guide telling the user where to put them.
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .files import write_if_changed, write_text
from .manifests import load_template

logger = logging.getLogger(__name__)

_PS2_BIOS_NAME = re.compile(r"^scph\d{5}\.bin$", re.IGNORECASE)


class FirmwareOutcome(str, enum.Enum):
    FOUND = "found"
    GUIDE_WRITTEN = "guide-written"
    HLE_CONFIGURED = "hle-configured"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class FirmwareRole:
    key: str
    title: str
    candidates: Tuple[str, ...] = ()
    guide: Optional[str] = None
    guide_template: Optional[str] = None
    placeholder: Optional[str] = None
    documentation_url: Optional[str] = None
    hle_template: Optional[str] = None
    requires_emulator: Optional[str] = None
    search_dir: str = "bios"
    guide_dir: str = "bios"

    @classmethod
    def from_manifest(cls, key: str, raw: Dict[str, Any]) -> "FirmwareRole":
        return cls(
            key=key,
            title=str(raw.get("title") or key.upper()),
            candidates=tuple(str(c) for c in raw.get("candidates") or []),
            guide=raw.get("guide"),
            guide_template=raw.get("guide_template"),
            placeholder=raw.get("placeholder"),
            documentation_url=raw.get("documentation_url"),
            hle_template=raw.get("hle_template"),
            requires_emulator=raw.get("requires_emulator"),
            search_dir=str(raw.get("search_dir") or "bios"),
            guide_dir=str(raw.get("guide_dir") or "bios"),
        )


def roles_from_manifest(manifest: Dict[str, Any]) -> List[FirmwareRole]:
    return [FirmwareRole.from_manifest(k, v or {}) for k, v in (manifest.get("firmware") or {}).items()]


def find_firmware(search_dir: Path, candidates: Iterable[str]) -> Optional[Path]:
    """First file under search_dir whose name matches a candidate, ignoring case."""

    wanted = {c.lower() for c in candidates}
    if not wanted or not search_dir.is_dir():
        return None
    for p in sorted(search_dir.rglob("*")):
        if p.is_file() and p.name.lower() in wanted:
            return p
    return None


def firmware_present(role: FirmwareRole, search_dir: Path) -> Optional[Path]:
    """Roles without candidate names count as present when the directory is non-empty."""

    if role.candidates:
        return find_firmware(search_dir, role.candidates)
    if search_dir.is_dir():
        return next(iter(sorted(search_dir.iterdir())), None)
    return None


def render_guide(template: str, placeholder: str, target_dir: Path) -> str:
    return template.replace(placeholder, str(target_dir))


def ensure_firmware(
    role: FirmwareRole,
    search_dir: Path,
    guide_path: Path,
    *,
    dry_run: bool = False,
) -> Tuple[FirmwareOutcome, bool]:
    """Return (outcome, guide_changed).

    FOUND writes nothing. Roles with an HLE template get that configuration
    written to guide_path once; an existing file is left alone so user edits
    survive. Otherwise the role's guide is rendered with the search
    directory substituted for its placeholder and written to guide_path;
    guide_changed is False when an identical guide was already there.
    """

    hit = firmware_present(role, search_dir)
    if hit is not None:
        logger.info("✓ %s already present: %s", role.title, hit.name)
        return FirmwareOutcome.FOUND, False

    if role.hle_template:
        changed = not guide_path.exists()
        if changed:
            write_text(guide_path, load_template(role.hle_template), dry_run=dry_run)
            logger.info("✓ Created HLE configuration: %s", guide_path)
        logger.warning("⚠ %s will use HLE emulation. For an original BIOS:", role.title)
        logger.info("Place BIOS files in: %s", search_dir)
        logger.info("Files: %s", ", ".join(role.candidates))
        return FirmwareOutcome.HLE_CONFIGURED, changed

    if not role.guide_template or not role.placeholder:
        raise ValueError(f"Firmware role {role.key} has no guide template")

    text = render_guide(load_template(role.guide_template), role.placeholder, search_dir)
    changed = write_if_changed(guide_path, text, dry_run=dry_run)
    if changed:
        logger.info("✓ Created %s installation guide: %s", role.title, guide_path)
    else:
        logger.info("✓ %s installation guide up to date: %s", role.title, guide_path)
    return FirmwareOutcome.GUIDE_WRITTEN, changed


def find_bundled_ps2_bios(pcsx2_executable: Path, home: Path) -> List[Path]:
    """BIOS images shipped next to a PCSX2 install. Reported, never copied."""

    bindir = pcsx2_executable.resolve().parent
    out: List[Path] = []
    for d in (bindir.parent / "share" / "pcsx2" / "bios", bindir / "bios", home / ".pcsx2" / "bios"):
        if not d.is_dir():
            continue
        out.extend(sorted(p for p in d.iterdir() if p.is_file() and _PS2_BIOS_NAME.match(p.name)))
    return out
