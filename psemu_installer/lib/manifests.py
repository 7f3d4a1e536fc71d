from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

import yaml

_PACKAGE_ROOT = Path(__file__).resolve().parents[1]


def load_yaml_rel(rel_path: str) -> Dict[str, Any]:
    """Load a YAML file shipped inside the package (manifests/...)."""

    p = _PACKAGE_ROOT / rel_path.lstrip("/")
    data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Manifest must be a mapping/dict: {p}")
    return data


def load_targets_manifest() -> Dict[str, Any]:
    manifest = load_yaml_rel("manifests/targets.yaml")
    groups = manifest.get("dependency_groups")
    if not isinstance(groups, list):
        raise ValueError("manifests/targets.yaml: dependency_groups must be a list")
    for group in groups:
        if not isinstance(group.get("packages"), list):
            raise ValueError(f"Dependency group {group.get('name')!r} packages must be a list")
    if not isinstance(manifest.get("emulators"), list):
        raise ValueError("manifests/targets.yaml: emulators must be a list")
    if not isinstance(manifest.get("firmware"), dict):
        raise ValueError("manifests/targets.yaml: firmware must be a mapping")
    return manifest


def dependency_packages(manifest: Dict[str, Any]) -> List[str]:
    """All dependency package names in declaration order."""
    out: List[str] = []
    for group in manifest.get("dependency_groups") or []:
        for p in group.get("packages") or []:
            name = str(p).strip()
            if name and name not in out:
                out.append(name)
    return out


def load_template(name: str) -> str:
    return (_PACKAGE_ROOT / "templates" / name).read_text(encoding="utf-8")
