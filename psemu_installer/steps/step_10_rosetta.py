from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import InstallContext
from ..lib.ensure import InstallOutcome
from ..lib.rosetta import install_rosetta, rosetta_present
from ..state_store import record_outcome, record_warning

logger = logging.getLogger(__name__)


class CheckRosettaStep:
    step_id = "10_rosetta"
    title = "SECTION 1: Rosetta 2"

    def run(self, ctx: InstallContext, state: Dict[str, Any]) -> Dict[str, Any]:
        if not ctx.host.is_apple_silicon:
            logger.info("Intel host; Rosetta 2 not needed")
            return state

        logger.info("Checking Rosetta2...")
        if rosetta_present():
            logger.info("✓ Rosetta2 detected")
            record_outcome(state, "system", "rosetta", InstallOutcome.ALREADY_PRESENT.value)
            return state

        # A missing Rosetta only degrades Intel-only binaries; it is a warning.
        logger.warning("⚠ Rosetta2 not detected. Installing...")
        if install_rosetta(dry_run=ctx.dry_run):
            logger.info("✓ Rosetta2 installed")
            record_outcome(state, "system", "rosetta", InstallOutcome.NEWLY_INSTALLED.value)
        else:
            logger.warning("⚠ Rosetta2 may not be fully installed (continuing anyway)")
            record_outcome(state, "system", "rosetta", InstallOutcome.FAILED.value)
            record_warning(state, target="rosetta", reason="not detected after softwareupdate")
        return state
