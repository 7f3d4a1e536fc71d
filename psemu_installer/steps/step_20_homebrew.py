from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import Any, Dict

from ..context import InstallContext
from ..lib.brew import HOMEBREW_INSTALL_URL
from ..lib.ensure import InstallOutcome, ensure

logger = logging.getLogger(__name__)


class EnsureHomebrewStep:
    step_id = "20_homebrew"
    title = "SECTION 2: Homebrew Management"

    def _bootstrap(self, ctx: InstallContext) -> bool:
        with tempfile.TemporaryDirectory(prefix="psemu-brew-") as tmp:
            script = Path(tmp) / "install.sh"
            ctx.downloader.fetch(HOMEBREW_INSTALL_URL, script)
            return ctx.brew.bootstrap(script)

    def run(self, ctx: InstallContext, state: Dict[str, Any]) -> Dict[str, Any]:
        outcome = ensure(
            "homebrew",
            is_present=ctx.brew.available,
            install=lambda: self._bootstrap(ctx),
            state=state,
            section="system",
            label="Homebrew",
        )

        if outcome is InstallOutcome.ALREADY_PRESENT:
            logger.info("Updating Homebrew...")
            if ctx.brew.update():
                logger.info("✓ Homebrew updated")
            else:
                logger.warning("⚠ Homebrew update failed (continuing anyway)")
        elif outcome is InstallOutcome.FAILED:
            logger.error("✗ Homebrew unavailable; package installs will be recorded as failed")

        logger.info("Homebrew path: %s", ctx.brew.executable or "not found")
        return state
