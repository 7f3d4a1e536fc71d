from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict

from ..context import InstallContext
from ..errors import DownloadError
from ..lib.emulators import app_path, installed_variant
from ..lib.firmware import FirmwareOutcome, FirmwareRole, ensure_firmware, find_bundled_ps2_bios
from ..logging_utils import BIOS_LOGGER
from ..state_store import record_error, record_outcome

logger = logging.getLogger(__name__)
bios_log = logging.getLogger(BIOS_LOGGER)

FAILED = "failed"


class FirmwareStep:
    step_id = "60_firmware"
    title = "SECTION 6: BIOS/Firmware Setup"

    def _bundled_hints(self, ctx: InstallContext) -> None:
        exe = shutil.which("pcsx2")
        if not exe:
            return
        for image in find_bundled_ps2_bios(Path(exe), ctx.cfg.home):
            logger.info("PCSX2 ships a BIOS image at %s; copy it to %s if you own it", image, ctx.cfg.bios_dir)

    def _fetch_documentation(self, ctx: InstallContext, role: FirmwareRole, state: Dict[str, Any]) -> None:
        with tempfile.TemporaryDirectory(prefix="psemu-bios-") as tmp:
            dest = Path(tmp) / "BIOS.txt"
            try:
                ctx.downloader.fetch(str(role.documentation_url), dest)
            except DownloadError as e:
                logger.warning("⚠ %s documentation unavailable; the guide still applies", role.title)
                record_error(state, target=f"{role.key}-documentation", error=str(e))
                return
            if dest.is_file() and "bios" in dest.read_text(encoding="utf-8", errors="ignore").lower():
                logger.info("✓ BIOS documentation retrieved. Manual BIOS installation required.")

    def _setup(self, ctx: InstallContext, role: FirmwareRole, state: Dict[str, Any]) -> FirmwareOutcome:
        search_dir = ctx.firmware_search_dir(role)
        if role.key == "ps2":
            self._bundled_hints(ctx)

        if not role.candidates and not ctx.dry_run:
            search_dir.mkdir(parents=True, exist_ok=True)

        outcome, changed = ensure_firmware(role, search_dir, ctx.firmware_guide_path(role), dry_run=ctx.dry_run)
        if changed and role.documentation_url:
            self._fetch_documentation(ctx, role, state)
        return outcome

    def run(self, ctx: InstallContext, state: Dict[str, Any]) -> Dict[str, Any]:
        for role in ctx.firmware_roles:
            if role.requires_emulator:
                spec = ctx.emulator(role.requires_emulator)
                if installed_variant(spec, brew=ctx.brew, applications_dir=ctx.cfg.applications_dir) is None:
                    logger.warning("⚠ %s not installed. Skipping %s setup.", spec.name, role.title)
                    record_outcome(state, "firmware", role.key, FirmwareOutcome.SKIPPED.value)
                    bios_log.info("%s: %s", role.title, FirmwareOutcome.SKIPPED.value)
                    continue

            try:
                outcome = self._setup(ctx, role, state)
            except OSError as e:
                logger.error("✗ %s setup failed: %s", role.title, e)
                record_error(state, target=role.key, error=str(e))
                record_outcome(state, "firmware", role.key, FAILED)
                bios_log.info("%s: %s", role.title, FAILED)
                continue

            record_outcome(state, "firmware", role.key, outcome.value)
            bios_log.info("%s: %s", role.title, outcome.value)

            if role.requires_emulator and outcome is FirmwareOutcome.GUIDE_WRITTEN:
                app = app_path(ctx.emulator(role.requires_emulator), ctx.cfg.applications_dir)
                if app is not None and app.is_dir():
                    logger.info("Run: open %s to complete firmware installation", app)
        return state
