from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from .brew import Homebrew
from .command import run_cmd

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmulatorSpec:
    console: str
    name: str
    formula: Optional[str] = None
    cask: Optional[str] = None
    app: Optional[str] = None
    commands: Tuple[str, ...] = ()
    verify: Tuple[str, ...] = ()
    launch: Optional[str] = None
    roms: Optional[str] = None
    config_subdir: Optional[str] = None
    manual_url: Optional[str] = None
    fallbacks: Tuple["EmulatorSpec", ...] = ()

    @classmethod
    def from_manifest(cls, raw: Dict[str, Any], *, console: Optional[str] = None) -> "EmulatorSpec":
        console = str(raw.get("console") or console or "")
        return cls(
            console=console,
            name=str(raw["name"]),
            formula=raw.get("formula"),
            cask=raw.get("cask"),
            app=raw.get("app"),
            commands=tuple(raw.get("commands") or ()),
            verify=tuple(str(a) for a in raw.get("verify") or ()),
            launch=raw.get("launch"),
            roms=raw.get("roms"),
            config_subdir=raw.get("config_subdir"),
            manual_url=raw.get("manual_url"),
            fallbacks=tuple(cls.from_manifest(f, console=console) for f in raw.get("fallbacks") or ()),
        )

    @property
    def variants(self) -> Tuple["EmulatorSpec", ...]:
        return (self, *self.fallbacks)


def emulators_from_manifest(manifest: Dict[str, Any]) -> List[EmulatorSpec]:
    return [EmulatorSpec.from_manifest(e) for e in manifest.get("emulators") or []]


def app_path(spec: EmulatorSpec, applications_dir: Path) -> Optional[Path]:
    return applications_dir / spec.app if spec.app else None


def variant_present(spec: EmulatorSpec, *, brew: Homebrew, applications_dir: Path) -> bool:
    """Single-variant presence: command on PATH, app bundle, or brew formula/cask."""

    if any(shutil.which(c) for c in spec.commands):
        return True
    app = app_path(spec, applications_dir)
    if app is not None and app.is_dir():
        return True
    if spec.formula and brew.is_installed(spec.formula):
        return True
    if spec.cask and brew.is_installed(spec.cask, cask=True):
        return True
    return False


def installed_variant(spec: EmulatorSpec, *, brew: Homebrew, applications_dir: Path) -> Optional[EmulatorSpec]:
    """The first variant (primary, then fallbacks) that is present."""
    for variant in spec.variants:
        if variant_present(variant, brew=brew, applications_dir=applications_dir):
            return variant
    return None


def install_actions(spec: EmulatorSpec, brew: Homebrew) -> List[Callable[[], bool]]:
    """Formula, then cask, for the primary and each fallback, in order."""

    actions: List[Callable[[], bool]] = []
    for variant in spec.variants:
        if variant.formula:
            actions.append(lambda f=variant.formula: brew.install(f))
        if variant.cask:
            actions.append(lambda c=variant.cask: brew.install(c, cask=True))
    return actions


def verify_variant(spec: EmulatorSpec) -> bool:
    if not spec.verify:
        return False
    return run_cmd(list(spec.verify), check=False, timeout=30).ok
