from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import InstallContext
from ..lib.ensure import ensure

logger = logging.getLogger(__name__)


class InstallDependenciesStep:
    step_id = "30_dependencies"
    title = "SECTION 3: Dependencies Installation"

    def _install(self, ctx: InstallContext, package: str) -> bool:
        if not ctx.brew.available():
            raise RuntimeError("package manager unavailable")
        return ctx.brew.install(package)

    def run(self, ctx: InstallContext, state: Dict[str, Any]) -> Dict[str, Any]:
        for group in ctx.manifest.get("dependency_groups") or []:
            logger.info("--- %s ---", group.get("title") or group.get("name"))
            for raw in group.get("packages") or []:
                package = str(raw).strip()
                if not package:
                    continue
                ensure(
                    package,
                    is_present=lambda p=package: ctx.brew.is_installed(p),
                    install=lambda p=package: self._install(ctx, p),
                    state=state,
                    section="dependencies",
                )
        return state
