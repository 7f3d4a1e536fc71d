from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

ENV_MARKER = "EMULATOR_HOME"
BLOCK_HEADER = "# Sony Emulators Configuration (added by installer)"


@dataclass(frozen=True)
class EnvBlock:
    emulator_home: Path
    bios_dir: Path
    saves_dir: Path
    config_dir: Path
    sdl2_prefix: Optional[str] = None
    homebrew_prefix: Optional[str] = None

    def render(self) -> str:
        lines = [
            "",
            BLOCK_HEADER,
            f'export {ENV_MARKER}="{self.emulator_home}"',
            f'export EMULATOR_BIOS="{self.bios_dir}"',
            f'export EMULATOR_SAVES="{self.saves_dir}"',
            f'export EMULATOR_CONFIG="{self.config_dir}"',
        ]
        if self.sdl2_prefix:
            lines.append(f'export SDL2_PATH="{self.sdl2_prefix}"')
            lines.append(f'export PKG_CONFIG_PATH="{self.sdl2_prefix}/lib/pkgconfig:$PKG_CONFIG_PATH"')
        if self.homebrew_prefix:
            lines.append(f'export HOMEBREW_PREFIX="{self.homebrew_prefix}"')
        return "\n".join(lines) + "\n"


def select_shell_config(home: Path, shell: str = "") -> Tuple[Path, str]:
    """Pick the startup file: zsh first, then bash_profile, then bashrc.

    Falls back to ~/.zshrc (zsh is the macOS default) when none exists.
    """

    zshrc = home / ".zshrc"
    if shell.endswith("zsh") or zshrc.exists():
        return zshrc, "zsh"
    for name in (".bash_profile", ".bashrc"):
        p = home / name
        if p.exists():
            return p, "bash"
    return zshrc, "zsh"


def has_env_block(path: Path) -> bool:
    try:
        return ENV_MARKER in path.read_text(encoding="utf-8", errors="ignore")
    except FileNotFoundError:
        return False


def append_env_block(path: Path, block: EnvBlock, *, dry_run: bool = False) -> bool:
    """Append the block once. Returns True if it was added."""

    if has_env_block(path):
        logger.info("✓ Environment variables already present in %s", path)
        return False
    if dry_run:
        logger.info("Would append environment block to %s", path)
        return True
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as f:
        f.write(block.render())
    logger.info("✓ Environment variables added to %s", path)
    return True
