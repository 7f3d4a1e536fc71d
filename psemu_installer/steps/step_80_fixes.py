from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import InstallContext
from ..errors import CommandError
from ..lib.command import run_cmd
from ..lib.files import chmod_tree
from ..state_store import record_warning

logger = logging.getLogger(__name__)


class AutomaticFixesStep:
    """Best-effort fixups; every failure here is a warning only."""

    step_id = "80_fixes"
    title = "SECTION 8: Automatic Fixes for Common Issues"

    def _fix_permissions(self, ctx: InstallContext) -> None:
        logger.info("Fixing directory permissions...")
        base = ctx.cfg.base_dir
        if ctx.dry_run or not base.is_dir():
            return
        try:
            chmod_tree(base, 0o755)
        except OSError as e:
            logger.warning("⚠ Could not fix permissions under %s: %s", base, e)
            return
        logger.info("✓ Permissions fixed")

    def _disable_app_nap(self, ctx: InstallContext, state: Dict[str, Any]) -> None:
        logger.info("Disabling App Nap for emulators...")
        for name in ctx.manifest.get("app_nap_apps") or []:
            app = ctx.cfg.applications_dir / f"{name}.app"
            if not app.is_dir():
                continue
            try:
                run_cmd(
                    ["defaults", "write", str(app / "Contents" / "Info"), "NSAppSleepDisabled", "-bool", "true"],
                    check=True,
                    timeout=30,
                    dry_run=ctx.dry_run,
                )
            except CommandError as e:
                logger.warning("⚠ Could not disable App Nap for %s", name)
                record_warning(state, target=name, reason=f"App Nap still enabled (exit {e.returncode})")
                continue
            logger.info("✓ App Nap disabled for %s", name)

    def _check_homebrew(self, ctx: InstallContext) -> None:
        if not ctx.brew.available():
            return
        logger.info("Verifying Homebrew links...")
        if ctx.brew.doctor_reports_errors():
            logger.warning("⚠ Homebrew has issues. Attempting fix...")
            ctx.brew.cleanup()
            ctx.brew.link_overwrite("sdl2")
            logger.info("Homebrew fix attempted")

    def run(self, ctx: InstallContext, state: Dict[str, Any]) -> Dict[str, Any]:
        self._fix_permissions(ctx)
        self._disable_app_nap(ctx, state)
        self._check_homebrew(ctx)
        return state
