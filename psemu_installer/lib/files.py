from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


def write_text(path: Path, contents: str, *, dry_run: bool = False) -> None:
    if dry_run:
        logger.info("Would write %s", str(path))
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(contents, encoding="utf-8")


def write_if_changed(path: Path, contents: str, *, dry_run: bool = False) -> bool:
    """Write contents unless the file already holds exactly that text.

    Returns True when a write happened (or would have, in dry-run).
    """
    try:
        if path.read_text(encoding="utf-8") == contents:
            return False
    except (FileNotFoundError, UnicodeDecodeError):
        pass
    write_text(path, contents, dry_run=dry_run)
    return True


def chmod_tree(root: Path, mode: int = 0o755) -> None:
    """Recursive chmod, like `chmod -R 755`."""
    os.chmod(root, mode)
    for item in root.rglob("*"):
        if not item.is_symlink():
            os.chmod(item, mode)
