from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence

from .context import InstallContext
from .errors import UnsupportedPlatformError
from .state_store import record_error

logger = logging.getLogger(__name__)


class Step(Protocol):
    """A single idempotent step."""

    step_id: str
    title: str

    def run(self, ctx: InstallContext, state: Dict[str, Any]) -> Dict[str, Any]:
        ...


@dataclass(frozen=True)
class PipelineResult:
    state: Dict[str, Any]
    ran_steps: List[str]
    failed_steps: List[str]


def run_pipeline(
    *,
    ctx: InstallContext,
    state: Dict[str, Any],
    steps: Sequence[Step],
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
) -> PipelineResult:
    """Run steps in order.

    Steps are idempotent, so there is no "already completed" bookkeeping:
    every step checks the real system. A step that raises is recorded as an
    error and the pipeline moves on; only UnsupportedPlatformError escapes.
    """

    ran: List[str] = []
    failed: List[str] = []

    started = start_at is None

    for step in steps:
        if not started:
            if step.step_id == start_at:
                started = True
            else:
                continue

        state.setdefault("execution", {})["current_step"] = step.step_id
        logger.info("=== %s ===", step.title)

        try:
            state = step.run(ctx, state)
        except UnsupportedPlatformError:
            raise
        except Exception as e:
            logger.exception("✗ Step %s failed", step.step_id)
            record_error(state, target=step.step_id, error=str(e))
            failed.append(step.step_id)
        else:
            ran.append(step.step_id)

        if stop_after is not None and step.step_id == stop_after:
            logger.info("Stopping after %s", stop_after)
            break

    state.setdefault("execution", {})["current_step"] = None
    return PipelineResult(state=state, ran_steps=ran, failed_steps=failed)
