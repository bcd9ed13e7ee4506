"""Generic saga runner.

Steps run strictly in order; later steps read identifiers produced by
earlier ones from the shared ``SagaState``. On failure at step k the
runner compensates the completed steps k-1..1 (those that declared a
compensation) in reverse order, then re-raises the original error.
A step that times out first runs its own ``on_timeout`` cleanup.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from shared_kernel.saga.observability import DefaultSagaProbe, SagaProbe

StepAction = Callable[["SagaState"], Awaitable[Any]]
StepCompensation = Callable[["SagaState"], Awaitable[None]]


class StepTimeoutError(TimeoutError):
    """Raised when a saga step exceeds its timeout."""

    def __init__(self, step: str, timeout: float):
        super().__init__(f"Step '{step}' timed out after {timeout}s")
        self.step = step
        self.timeout = timeout


@dataclass(frozen=True)
class SagaStep:
    """One step of a saga.

    Attributes:
        name: Step name; the action's return value is stored under it
        action: Coroutine function performing the step
        compensation: Undo for a completed step, or None when there is
            nothing to undo
        best_effort: Failure (including timeout) is logged and the saga
            continues; such steps are never compensated
        timeout: Seconds the action (and its compensation) may take
        on_timeout: Cleanup run when the action times out, since the
            action may have taken effect even though no result came back
    """

    name: str
    action: StepAction
    compensation: StepCompensation | None = None
    best_effort: bool = False
    timeout: float | None = None
    on_timeout: StepCompensation | None = None


@dataclass
class SagaState:
    """Mutable state shared by the steps of one saga execution."""

    results: dict[str, Any] = field(default_factory=dict)
    completed: list[str] = field(default_factory=list)
    compensated: list[str] = field(default_factory=list)

    def __getitem__(self, step_name: str) -> Any:
        return self.results[step_name]

    def get(self, step_name: str, default: Any = None) -> Any:
        return self.results.get(step_name, default)


class Saga:
    """Executes an ordered list of SagaSteps with reverse-order compensation."""

    def __init__(
        self,
        name: str,
        steps: Sequence[SagaStep],
        probe: SagaProbe | None = None,
    ):
        names = [step.name for step in steps]
        if len(names) != len(set(names)):
            raise ValueError(f"Saga '{name}' has duplicate step names: {names}")

        self._name = name
        self._steps = tuple(steps)
        self._probe = probe or DefaultSagaProbe()

    @property
    def name(self) -> str:
        return self._name

    @property
    def steps(self) -> tuple[SagaStep, ...]:
        return self._steps

    async def run(self, state: SagaState | None = None) -> SagaState:
        """Run every step in order.

        Args:
            state: Optional pre-populated state (e.g. request inputs)

        Returns:
            The SagaState holding each step's result

        Raises:
            Exception: The first non-best-effort step failure, after the
                completed steps have been compensated
        """
        state = state if state is not None else SagaState()
        compensable: list[SagaStep] = []

        self._probe.saga_started(saga=self._name, steps=len(self._steps))

        for step in self._steps:
            self._probe.step_started(saga=self._name, step=step.name)
            try:
                result = await self._call(step, step.action, state)
            except Exception as error:
                if step.best_effort:
                    self._probe.best_effort_step_failed(
                        saga=self._name, step=step.name, error=error
                    )
                    continue

                self._probe.step_failed(saga=self._name, step=step.name, error=error)
                if isinstance(error, StepTimeoutError) and step.on_timeout is not None:
                    await self._undo(step, step.on_timeout, state)
                await self._compensate(compensable, state)
                self._probe.saga_failed(
                    saga=self._name,
                    failed_step=step.name,
                    compensated=list(state.compensated),
                )
                raise

            state.results[step.name] = result
            state.completed.append(step.name)
            if step.compensation is not None and not step.best_effort:
                compensable.append(step)
            self._probe.step_completed(saga=self._name, step=step.name)

        self._probe.saga_completed(saga=self._name)
        return state

    async def _compensate(self, completed: list[SagaStep], state: SagaState) -> None:
        for step in reversed(completed):
            assert step.compensation is not None
            await self._undo(step, step.compensation, state)

    async def _undo(
        self, step: SagaStep, undo: StepCompensation, state: SagaState
    ) -> None:
        try:
            await self._call(step, undo, state)
        except Exception as error:
            # Keep unwinding: one failed undo must not strand the others
            self._probe.compensation_failed(saga=self._name, step=step.name, error=error)
            return
        state.compensated.append(step.name)
        self._probe.step_compensated(saga=self._name, step=step.name)

    @staticmethod
    async def _call(
        step: SagaStep,
        func: Callable[[SagaState], Awaitable[Any]],
        state: SagaState,
    ) -> Any:
        if step.timeout is None:
            return await func(state)
        try:
            async with asyncio.timeout(step.timeout):
                return await func(state)
        except TimeoutError as e:
            raise StepTimeoutError(step.name, step.timeout) from e
