"""Saga runner for multi-step operations spanning independent systems.

A saga is an ordered list of (action, compensation) steps. When a step
fails, the compensations of the already-completed steps run in reverse
order before the failure is surfaced, approximating atomicity without a
distributed transaction.
"""

from shared_kernel.saga.observability import DefaultSagaProbe, SagaProbe
from shared_kernel.saga.runner import Saga, SagaState, SagaStep, StepTimeoutError

__all__ = [
    "DefaultSagaProbe",
    "Saga",
    "SagaProbe",
    "SagaState",
    "SagaStep",
    "StepTimeoutError",
]
