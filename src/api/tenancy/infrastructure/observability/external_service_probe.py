"""Domain probe for calls to external services (identity provider, mail API)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class ExternalServiceProbe(Protocol):
    def request_succeeded(self, service: str, operation: str, status_code: int) -> None:
        """Record a successful call."""
        ...

    def request_failed(
        self,
        service: str,
        operation: str,
        reason: str,
        status_code: int | None = None,
        code: str | None = None,
    ) -> None:
        """Record a failed call, by HTTP status or transport error."""
        ...

    def with_context(self, context: ObservationContext) -> ExternalServiceProbe: ...


class DefaultExternalServiceProbe:
    """Default implementation of ExternalServiceProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultExternalServiceProbe:
        return DefaultExternalServiceProbe(logger=self._logger, context=context)

    def request_succeeded(self, service: str, operation: str, status_code: int) -> None:
        self._logger.debug(
            "external_request_succeeded",
            service=service,
            operation=operation,
            status_code=status_code,
            **self._get_context_kwargs(),
        )

    def request_failed(
        self,
        service: str,
        operation: str,
        reason: str,
        status_code: int | None = None,
        code: str | None = None,
    ) -> None:
        self._logger.warning(
            "external_request_failed",
            service=service,
            operation=operation,
            reason=reason,
            status_code=status_code,
            code=code,
            **self._get_context_kwargs(),
        )
