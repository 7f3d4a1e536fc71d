from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import InstallContext
from ..lib.shellrc import EnvBlock, append_env_block, has_env_block, select_shell_config
from ..state_store import record_outcome

logger = logging.getLogger(__name__)


class ShellEnvironmentStep:
    step_id = "70_shell_env"
    title = "SECTION 7: Environment Configuration"

    def run(self, ctx: InstallContext, state: Dict[str, Any]) -> Dict[str, Any]:
        rc, kind = select_shell_config(ctx.cfg.home, ctx.cfg.shell)
        if not rc.exists():
            logger.warning("⚠ Shell configuration file not found. Creating %s...", rc)
            if not ctx.dry_run:
                rc.touch()
        logger.info("Shell configuration: %s (%s)", rc, kind)
        state.setdefault("execution", {})["shell_config"] = str(rc)

        if has_env_block(rc):
            logger.info("✓ Environment variables already present")
            record_outcome(state, "environment", "shell_rc", "already-present")
            return state

        block = EnvBlock(
            emulator_home=ctx.cfg.base_dir,
            bios_dir=ctx.cfg.bios_dir,
            saves_dir=ctx.cfg.saves_dir,
            config_dir=ctx.cfg.config_dir,
            sdl2_prefix=ctx.brew.package_prefix("sdl2"),
            homebrew_prefix=ctx.host.homebrew_prefix if ctx.host.is_apple_silicon else None,
        )
        append_env_block(rc, block, dry_run=ctx.dry_run)
        record_outcome(state, "environment", "shell_rc", "newly-installed")
        return state
