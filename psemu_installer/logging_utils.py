from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

BIOS_LOGGER = "psemu_installer.bios"

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _open_file_handler(path: str, fallback_name: str) -> tuple[logging.Handler, str]:
    """Truncating file handler; falls back to the working directory if path is not writable."""
    try:
        Path(os.path.dirname(path) or ".").mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(path, mode="w", encoding="utf-8"), path
    except OSError:
        fallback = str(Path.cwd() / fallback_name)
        return logging.FileHandler(fallback, mode="w", encoding="utf-8"), fallback


def configure_logging(
    *,
    install_log: str,
    error_log: str,
    bios_log: str,
    level: int = logging.INFO,
    also_console: bool = True,
) -> Dict[str, str]:
    """Configure the three run logs.

    - install_log: everything at `level` and above
    - error_log: ERROR and above only
    - bios_log: records from the psemu_installer.bios logger

    All three are truncated at startup. Calling this again replaces the
    handlers from the previous call, so a second run in the same process
    starts with fresh files.

    Returns the actual file paths in use, keyed like the arguments.
    """

    root = logging.getLogger()
    root.setLevel(level)

    previous: List[logging.Handler] = getattr(root, "_psemu_handlers", [])
    for h in previous:
        root.removeHandler(h)
        h.close()
    bios_logger = logging.getLogger(BIOS_LOGGER)
    for h in getattr(bios_logger, "_psemu_handlers", []):
        bios_logger.removeHandler(h)
        h.close()

    fmt = logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT)
    handlers: List[logging.Handler] = []
    actual: Dict[str, str] = {}

    main_handler, actual["install_log"] = _open_file_handler(install_log, ".sony_emulators_install.log")
    handlers.append(main_handler)

    err_handler, actual["error_log"] = _open_file_handler(error_log, ".sony_emulators_errors.log")
    err_handler.setLevel(logging.ERROR)
    handlers.append(err_handler)

    console: Optional[logging.Handler] = None
    if also_console:
        console = logging.StreamHandler()
        handlers.append(console)

    for h in handlers:
        h.setFormatter(fmt)
        root.addHandler(h)
    setattr(root, "_psemu_handlers", handlers)

    # BIOS records still propagate to the root handlers as well.
    bios_handler, actual["bios_log"] = _open_file_handler(bios_log, ".sony_emulators_bios.log")
    bios_handler.setFormatter(fmt)
    bios_logger.addHandler(bios_handler)
    setattr(bios_logger, "_psemu_handlers", [bios_handler])

    logging.getLogger(__name__).info(
        "Logging initialized (install=%s, errors=%s, bios=%s)",
        actual["install_log"],
        actual["error_log"],
        actual["bios_log"],
    )
    return actual
