from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from .config import load_config
from .context import InstallContext
from .errors import UnsupportedPlatformError
from .lib.brew import Homebrew
from .lib.download import Downloader
from .lib.host import HostInfo, probe_host
from .lib.manifests import load_targets_manifest
from .logging_utils import configure_logging
from .pipeline import run_pipeline
from .report import collect_report, render_report
from .state_store import ensure_defaults, save_state
from .steps import (
    AutomaticFixesStep,
    CheckRosettaStep,
    CreateDirectoriesStep,
    EnsureHomebrewStep,
    FirmwareStep,
    InstallDependenciesStep,
    InstallEmulatorsStep,
    ShellEnvironmentStep,
)

logger = logging.getLogger(__name__)


def build_steps():
    return [
        CheckRosettaStep(),
        EnsureHomebrewStep(),
        InstallDependenciesStep(),
        CreateDirectoriesStep(),
        InstallEmulatorsStep(),
        FirmwareStep(),
        ShellEnvironmentStep(),
        AutomaticFixesStep(),
    ]


def run(
    *,
    home: Optional[str] = None,
    dry_run: bool = False,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    state_path: Optional[str] = None,
    host: Optional[HostInfo] = None,
    brew: Optional[Homebrew] = None,
    downloader: Optional[Downloader] = None,
    console: bool = True,
    applications_dir: Optional[str] = None,
) -> int:
    """Run the provisioning pipeline and print the final report.

    Returns the process exit code: 1 for an unsupported host, otherwise 0
    (recorded failures are reported, not fatal).
    """

    overrides: Dict[str, Any] = {}
    if applications_dir:
        overrides["applications_dir"] = Path(applications_dir)
    cfg = load_config(home=home, **overrides)
    configure_logging(
        install_log=str(cfg.install_log),
        error_log=str(cfg.error_log),
        bios_log=str(cfg.bios_log),
        also_console=console,
    )
    if dry_run:
        logger.info("Dry run: commands are logged, nothing is installed or written")

    try:
        host = host or probe_host()
    except UnsupportedPlatformError as e:
        logger.error("✗ %s", e)
        return 1

    brew = brew or Homebrew(
        host.homebrew_prefix,
        install_timeout=cfg.install_timeout_s,
        query_timeout=cfg.query_timeout_s,
        dry_run=dry_run,
    )
    downloader = downloader or Downloader(cfg.retry, dry_run=dry_run)
    ctx = InstallContext(
        cfg=cfg,
        host=host,
        brew=brew,
        downloader=downloader,
        manifest=load_targets_manifest(),
        dry_run=dry_run,
    )

    state: Dict[str, Any] = ensure_defaults({})
    try:
        result = run_pipeline(ctx=ctx, state=state, steps=build_steps(), start_at=start_at, stop_after=stop_after)
    except UnsupportedPlatformError as e:
        logger.error("✗ %s", e)
        return 1

    state = result.state
    summary = state.setdefault("execution", {}).setdefault("summary", {})
    summary["ran_steps"] = result.ran_steps
    summary["failed_steps"] = result.failed_steps

    report = collect_report(ctx, state)
    print(render_report(report), end="")

    logger.info("✓ Full installation log: %s", cfg.install_log)
    logger.info("✓ BIOS installation log: %s", cfg.bios_log)
    if state_path:
        save_state(state_path, state)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="psemu-installer")
    p.add_argument("--dry-run", action="store_true", help="Log commands without running them")
    p.add_argument("--start-at", default=None, help="Start at step_id (e.g. 50_emulators)")
    p.add_argument("--stop-after", default=None, help="Stop after step_id")
    p.add_argument("--home", default=None, help="Home directory to provision (default: $HOME)")
    p.add_argument("--state", default=None, help="Also write the run summary here (json|yaml)")

    args = p.parse_args(argv)

    return run(
        home=args.home,
        dry_run=args.dry_run,
        start_at=args.start_at,
        stop_after=args.stop_after,
        state_path=args.state,
    )


if __name__ == "__main__":
    raise SystemExit(main())
