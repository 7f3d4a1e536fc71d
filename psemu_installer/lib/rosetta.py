from __future__ import annotations

import logging
from pathlib import Path

from .command import run_cmd

logger = logging.getLogger(__name__)

ROSETTA_DAEMON = Path("/Library/Apple/usr/share/rosetta/rosettad")


def rosetta_present() -> bool:
    """Rosetta 2 counts as present if oahd runs or rosettad is on disk."""
    if run_cmd(["pgrep", "oahd"], check=False, timeout=10).ok:
        return True
    return ROSETTA_DAEMON.exists()


def install_rosetta(*, dry_run: bool = False) -> bool:
    run_cmd(
        ["softwareupdate", "-i", "-a", "--install-rosetta", "--agree-to-license"],
        check=False,
        timeout=900,
        dry_run=dry_run,
    )
    # softwareupdate's exit status is unreliable for Rosetta; check again instead.
    return dry_run or rosetta_present()
