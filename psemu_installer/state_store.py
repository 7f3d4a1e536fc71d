from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)


def _detect_format(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    if ext in {"json", "yaml", "yml"}:
        return ext
    # Default to JSON for unknown extensions.
    return "json"


def save_state(path: str, state: Dict[str, Any]) -> None:
    """Write the run summary as JSON or YAML depending on the extension."""

    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    if _detect_format(p) in {"yaml", "yml"}:
        p.write_text(yaml.safe_dump(state, sort_keys=False), encoding="utf-8")
    else:
        p.write_text(json.dumps(state, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    logger.info("Run summary written to %s", p)


def ensure_defaults(state: Dict[str, Any]) -> Dict[str, Any]:
    """Fill required keys with defaults (without overriding existing values)."""

    exe = state.setdefault("execution", {})
    exe.setdefault("current_step", None)
    exe.setdefault("outcomes", {})
    exe.setdefault("errors", [])
    exe.setdefault("warnings", [])
    return state


def record_outcome(state: Dict[str, Any], section: str, name: str, outcome: str) -> None:
    outcomes = state.setdefault("execution", {}).setdefault("outcomes", {})
    outcomes.setdefault(section, {})[name] = outcome


def get_outcome(state: Dict[str, Any], section: str, name: str) -> Optional[str]:
    outcomes = (state.get("execution") or {}).get("outcomes") or {}
    return (outcomes.get(section) or {}).get(name)


def record_error(state: Dict[str, Any], *, target: str, error: str) -> None:
    exe = state.setdefault("execution", {})
    exe.setdefault("errors", []).append(
        {
            "step": exe.get("current_step"),
            "target": target,
            "error": error,
        }
    )


def record_warning(state: Dict[str, Any], *, target: str, reason: str) -> None:
    state.setdefault("execution", {}).setdefault("warnings", []).append({"target": target, "reason": reason})


def errors(state: Dict[str, Any]) -> List[Dict[str, Any]]:
    return list((state.get("execution") or {}).get("errors") or [])
