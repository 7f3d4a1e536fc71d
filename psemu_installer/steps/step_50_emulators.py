from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import InstallContext
from ..lib.emulators import EmulatorSpec, install_actions, installed_variant, verify_variant
from ..lib.ensure import InstallOutcome, ensure
from ..state_store import record_error, record_outcome, record_warning

logger = logging.getLogger(__name__)


class InstallEmulatorsStep:
    step_id = "50_emulators"
    title = "SECTION 5: Emulator Installation"

    def _present(self, ctx: InstallContext, spec: EmulatorSpec) -> bool:
        return installed_variant(spec, brew=ctx.brew, applications_dir=ctx.cfg.applications_dir) is not None

    def _post_install(self, ctx: InstallContext, spec: EmulatorSpec) -> None:
        variant = installed_variant(spec, brew=ctx.brew, applications_dir=ctx.cfg.applications_dir) or spec
        if variant is not spec:
            logger.info("✓ %s in use for %s (alternative to %s)", variant.name, spec.console, spec.name)

        subdir = variant.config_subdir or spec.config_subdir
        if subdir and not ctx.dry_run:
            (ctx.cfg.config_dir / subdir).mkdir(parents=True, exist_ok=True)
            logger.info("✓ %s configuration directory: %s", variant.name, ctx.cfg.config_dir / subdir)

        if variant.verify and not ctx.dry_run:
            if verify_variant(variant):
                logger.info("✓ %s verified", variant.name)
            else:
                logger.warning("⚠ %s installed but verification failed", variant.name)

    def run(self, ctx: InstallContext, state: Dict[str, Any]) -> Dict[str, Any]:
        for spec in ctx.emulators:
            outcome = ensure(
                spec.console,
                is_present=lambda s=spec: self._present(ctx, s),
                install=install_actions(spec, ctx.brew),
                state=state,
                section="emulators",
                label=f"{spec.name} ({spec.console})",
            )
            if outcome is InstallOutcome.FAILED:
                if spec.manual_url:
                    logger.error("✗ Install %s manually from: %s", spec.name, spec.manual_url)
                    record_warning(state, target=spec.console, reason=f"manual download: {spec.manual_url}")
                continue
            try:
                self._post_install(ctx, spec)
            except OSError as e:
                logger.error("✗ %s post-install setup failed: %s", spec.name, e)
                record_error(state, target=spec.console, error=str(e))
                record_outcome(state, "emulators", spec.console, InstallOutcome.FAILED.value)
        return state
