from __future__ import annotations

import logging
import os
from typing import Any, Dict

from ..context import InstallContext
from ..lib.ensure import InstallOutcome
from ..state_store import record_error, record_outcome

logger = logging.getLogger(__name__)

INSTALLED_MARKER = ".installed"
ROM_ROLES = ("roms_ps1", "roms_ps2", "roms_ps3")


class CreateDirectoriesStep:
    step_id = "40_directories"
    title = "SECTION 4: Creating Directory Structure"

    def run(self, ctx: InstallContext, state: Dict[str, Any]) -> Dict[str, Any]:
        for role, path in ctx.cfg.directories.items():
            if ctx.dry_run:
                logger.info("Would create directory: %s", path)
                continue

            try:
                path.mkdir(parents=True, exist_ok=True)
                os.chmod(path, 0o755)
            except OSError as e:
                logger.error("✗ Failed to create directory %s: %s", path, e)
                record_outcome(state, "directories", role, InstallOutcome.FAILED.value)
                record_error(state, target=str(path), error=str(e))
                continue

            if not os.access(path, os.W_OK):
                logger.error("✗ Directory not writable: %s", path)
                record_outcome(state, "directories", role, InstallOutcome.FAILED.value)
                record_error(state, target=str(path), error="directory not writable")
                continue

            marker = path / INSTALLED_MARKER
            if marker.exists():
                logger.info("✓ Directory available: %s", path)
                record_outcome(state, "directories", role, InstallOutcome.ALREADY_PRESENT.value)
            else:
                marker.touch()
                logger.info("✓ Created directory: %s", path)
                record_outcome(state, "directories", role, InstallOutcome.NEWLY_INSTALLED.value)

            if role in ROM_ROLES:
                (path / ".gitkeep").touch(exist_ok=True)
        return state
