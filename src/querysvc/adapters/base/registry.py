"""Adapter Registry — Tracks the adapters built for a running service.

The registry owns adapter lifecycles: it initializes them in registration
order at startup and shuts them down in reverse order at shutdown.
"""

from __future__ import annotations

import logging

from querysvc.adapters.base.adapter import Adapter

logger = logging.getLogger(__name__)


class AdapterNotFoundError(Exception):
    """Raised when a requested role has no adapter."""


class AdapterRegistry:
    """Registry of adapters keyed by role.

    Example:
        >>> registry = AdapterRegistry()
        >>> registry.add("resource_searcher", MockResourceSearcher())
        >>> await registry.initialize_all()
        >>> searcher = registry.get("resource_searcher")
    """

    def __init__(self) -> None:
        self._adapters: dict[str, Adapter] = {}
        self._initialized: list[str] = []

    def add(self, role: str, adapter: Adapter) -> None:
        """Register ``adapter`` under ``role``."""
        if role in self._adapters:
            logger.warning("Overwriting existing adapter for role: %s", role)
        self._adapters[role] = adapter
        logger.info("Registered %s adapter for role: %s", adapter.name, role)

    def get(self, role: str) -> Adapter:
        """Get the adapter registered under ``role``.

        Raises:
            AdapterNotFoundError: If nothing is registered under this role.
        """
        if role not in self._adapters:
            raise AdapterNotFoundError(
                f"No adapter registered for role '{role}'. Available roles: {list(self._adapters.keys())}"
            )
        return self._adapters[role]

    async def initialize_all(self) -> None:
        """Initialize every adapter; stops at the first failure."""
        for role, adapter in self._adapters.items():
            await adapter.initialize()
            self._initialized.append(role)
            logger.info("Initialized %s adapter for role: %s", adapter.name, role)

    async def shutdown_all(self) -> None:
        """Shut down initialized adapters in reverse order."""
        for role in reversed(self._initialized):
            adapter = self._adapters[role]
            try:
                await adapter.shutdown()
                logger.info("Shut down adapter: %s", role)
            except Exception:
                logger.warning("Error shutting down adapter: %s", role, exc_info=True)
        self._initialized.clear()

    @property
    def roles(self) -> list[str]:
        return list(self._adapters.keys())
