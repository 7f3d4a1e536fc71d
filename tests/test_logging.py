from __future__ import annotations

import logging
from pathlib import Path

from psemu_installer.logging_utils import BIOS_LOGGER, configure_logging


def _paths(tmp_path: Path):
    return {
        "install_log": str(tmp_path / "install.log"),
        "error_log": str(tmp_path / "errors.log"),
        "bios_log": str(tmp_path / "bios.log"),
    }


def test_three_logs_split_by_level_and_logger(tmp_path: Path) -> None:
    paths = _paths(tmp_path)
    actual = configure_logging(also_console=False, **paths)

    logging.getLogger("psemu_installer.steps.test").info("✓ cmake already installed")
    logging.getLogger("psemu_installer.lib.ensure").error("✗ Failed to install lz4")
    logging.getLogger(BIOS_LOGGER).info("PS2 BIOS: guide-written")

    assert actual == paths
    install = Path(paths["install_log"]).read_text(encoding="utf-8")
    errors = Path(paths["error_log"]).read_text(encoding="utf-8")
    bios = Path(paths["bios_log"]).read_text(encoding="utf-8")

    assert "cmake already installed" in install
    assert "Failed to install lz4" in install
    assert "Failed to install lz4" in errors
    assert "cmake" not in errors
    assert bios.strip().endswith("PS2 BIOS: guide-written")
    assert "cmake" not in bios
    assert " ERROR psemu_installer.lib.ensure: " in errors


def test_reconfigure_truncates_and_does_not_duplicate(tmp_path: Path) -> None:
    paths = _paths(tmp_path)
    configure_logging(also_console=False, **paths)
    logging.getLogger("psemu_installer.x").error("first run")

    configure_logging(also_console=False, **paths)
    logging.getLogger("psemu_installer.x").error("second run")

    errors = Path(paths["error_log"]).read_text(encoding="utf-8")
    assert "first run" not in errors
    assert errors.count("second run") == 1
    assert len(logging.getLogger(BIOS_LOGGER).handlers) == 1
