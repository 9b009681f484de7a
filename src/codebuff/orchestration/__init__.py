"""Readiness orchestration for startup subsystems."""

from .readiness import ReadinessHandle, ReadinessOrchestrator, TaskOutcome, degraded_tasks
from .tasks import build_readiness_tasks

__all__ = [
    "ReadinessHandle",
    "ReadinessOrchestrator",
    "TaskOutcome",
    "build_readiness_tasks",
    "degraded_tasks",
]
