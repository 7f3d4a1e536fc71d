from __future__ import annotations

import enum
import logging
from typing import Any, Callable, Dict, Sequence

from ..state_store import record_error, record_outcome

logger = logging.getLogger(__name__)

Probe = Callable[[], bool]
Action = Callable[[], bool]


class InstallOutcome(str, enum.Enum):
    ALREADY_PRESENT = "already-present"
    NEWLY_INSTALLED = "newly-installed"
    FAILED = "failed"


def ensure(
    name: str,
    *,
    is_present: Probe,
    install: Action | Sequence[Action],
    state: Dict[str, Any],
    section: str,
    label: str | None = None,
) -> InstallOutcome:
    """Idempotently make sure `name` is present.

    A present target is left alone. Otherwise each install action is tried in
    order until one returns True. An action that raises counts as a failed
    action. When none succeed the failure goes to the error log and to
    state["execution"]["errors"]; it is never raised.
    """

    label = label or name
    actions = [install] if callable(install) else list(install)

    if is_present():
        logger.info("✓ %s already installed", label)
        record_outcome(state, section, name, InstallOutcome.ALREADY_PRESENT.value)
        return InstallOutcome.ALREADY_PRESENT

    logger.warning("⚠ Installing %s...", label)
    last_error = "install command failed"
    for action in actions:
        try:
            if action():
                logger.info("✓ %s installed", label)
                record_outcome(state, section, name, InstallOutcome.NEWLY_INSTALLED.value)
                return InstallOutcome.NEWLY_INSTALLED
        except Exception as e:
            logger.warning("⚠ Install action for %s raised: %s", label, e)
            last_error = str(e)

    logger.error("✗ Failed to install %s", label)
    record_outcome(state, section, name, InstallOutcome.FAILED.value)
    record_error(state, target=name, error=last_error)
    return InstallOutcome.FAILED
