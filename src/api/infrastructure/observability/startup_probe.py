"""Domain probe for application startup and lifecycle events."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class StartupProbe(Protocol):
    """Domain probe for application startup operations."""

    def application_starting(self, version: str, storage_backend: str) -> None:
        """Record that the application is starting."""
        ...

    def admin_routes_unprotected(self) -> None:
        """Record that no platform admin token is configured."""
        ...

    def application_stopped(self, pending_notifications: int) -> None:
        """Record that the application shut down."""
        ...

    def with_context(self, context: ObservationContext) -> StartupProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultStartupProbe:
    """Default implementation of StartupProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultStartupProbe:
        """Create a new probe with observation context bound."""
        return DefaultStartupProbe(logger=self._logger, context=context)

    def application_starting(self, version: str, storage_backend: str) -> None:
        self._logger.info(
            "application_starting",
            version=version,
            storage_backend=storage_backend,
            **self._get_context_kwargs(),
        )

    def admin_routes_unprotected(self) -> None:
        """Record that no platform admin token is configured.

        Admin routes reject every request in this state.
        """
        self._logger.warning(
            "platform_admin_token_missing",
            **self._get_context_kwargs(),
        )

    def application_stopped(self, pending_notifications: int) -> None:
        self._logger.info(
            "application_stopped",
            pending_notifications=pending_notifications,
            **self._get_context_kwargs(),
        )
