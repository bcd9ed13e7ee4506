"""Domain probe for saga execution.

Compensation outcomes are the audit trail for partial failures, so they
are logged at warning/error level regardless of environment.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class SagaProbe(Protocol):
    """Domain probe for saga runner events."""

    def saga_started(self, saga: str, steps: int) -> None: ...

    def step_started(self, saga: str, step: str) -> None: ...

    def step_completed(self, saga: str, step: str) -> None: ...

    def step_failed(self, saga: str, step: str, error: Exception) -> None: ...

    def best_effort_step_failed(
        self, saga: str, step: str, error: Exception
    ) -> None: ...

    def step_compensated(self, saga: str, step: str) -> None: ...

    def compensation_failed(self, saga: str, step: str, error: Exception) -> None: ...

    def saga_completed(self, saga: str) -> None: ...

    def saga_failed(
        self, saga: str, failed_step: str, compensated: list[str]
    ) -> None: ...

    def with_context(self, context: ObservationContext) -> SagaProbe: ...


class DefaultSagaProbe:
    """Default implementation of SagaProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultSagaProbe:
        return DefaultSagaProbe(logger=self._logger, context=context)

    def saga_started(self, saga: str, steps: int) -> None:
        self._logger.debug(
            "saga_started", saga=saga, steps=steps, **self._get_context_kwargs()
        )

    def step_started(self, saga: str, step: str) -> None:
        self._logger.debug(
            "saga_step_started", saga=saga, step=step, **self._get_context_kwargs()
        )

    def step_completed(self, saga: str, step: str) -> None:
        self._logger.debug(
            "saga_step_completed", saga=saga, step=step, **self._get_context_kwargs()
        )

    def step_failed(self, saga: str, step: str, error: Exception) -> None:
        self._logger.warning(
            "saga_step_failed",
            saga=saga,
            step=step,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def best_effort_step_failed(self, saga: str, step: str, error: Exception) -> None:
        self._logger.warning(
            "saga_best_effort_step_failed",
            saga=saga,
            step=step,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def step_compensated(self, saga: str, step: str) -> None:
        self._logger.info(
            "saga_step_compensated", saga=saga, step=step, **self._get_context_kwargs()
        )

    def compensation_failed(self, saga: str, step: str, error: Exception) -> None:
        self._logger.error(
            "saga_compensation_failed",
            saga=saga,
            step=step,
            error=str(error),
            error_type=type(error).__name__,
            message="Manual cleanup may be required",
            **self._get_context_kwargs(),
        )

    def saga_completed(self, saga: str) -> None:
        self._logger.info("saga_completed", saga=saga, **self._get_context_kwargs())

    def saga_failed(self, saga: str, failed_step: str, compensated: list[str]) -> None:
        self._logger.warning(
            "saga_failed",
            saga=saga,
            failed_step=failed_step,
            compensated=compensated,
            **self._get_context_kwargs(),
        )
