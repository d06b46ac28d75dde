from __future__ import annotations

from typing import Any, List

from modpacker.core.logger import setup_logger

from .types import PlanStep

logger = setup_logger("modpacker.pipeline")


def record_step(steps: List[PlanStep], name: str, **details: Any) -> None:
    steps.append(PlanStep(name=name, details=details))


def format_step(step: PlanStep) -> str:
    """``copy_raw_files(count=3)``; steps without details are just their name."""
    if not step.details:
        return step.name
    details = ", ".join(f"{key}={value}" for key, value in step.details.items())
    return f"{step.name}({details})"


def log_plan_steps(label: str, steps: List[PlanStep]) -> None:
    if not steps:
        return
    summary = " -> ".join(format_step(step) for step in steps)
    logger.debug("Plan for %s: %s", label, summary)
