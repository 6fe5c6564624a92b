"""Adapter wiring — Builds the configured adapters and the query service.

Each port has a ``source`` setting naming its backend. Adapter classes are
imported lazily so optional dependencies (opensearch-py, nats-py) are only
needed when their backend is selected.
"""

from __future__ import annotations

import importlib
import logging
from typing import Any

from querysvc.adapters.base.adapter import Adapter
from querysvc.adapters.base.exceptions import ConfigurationError
from querysvc.adapters.base.registry import AdapterRegistry
from querysvc.config.settings import Settings
from querysvc.core.service import QueryService
from querysvc.paging.codec import PageTokenSecret

logger = logging.getLogger(__name__)

# Maps (role, source) to (module_path, class_name) for lazy import
_ADAPTER_MAP: dict[tuple[str, str], tuple[str, str]] = {
    ("resource_searcher", "opensearch"): ("querysvc.adapters.opensearch.adapter", "OpenSearchResourceSearcher"),
    ("resource_searcher", "mock"): ("querysvc.adapters.mock.resources", "MockResourceSearcher"),
    ("access_checker", "nats"): ("querysvc.adapters.nats.adapter", "NatsAccessChecker"),
    ("access_checker", "mock"): ("querysvc.adapters.mock.access", "MockAccessChecker"),
    ("organization_searcher", "clearbit"): ("querysvc.adapters.clearbit.adapter", "ClearbitOrganizationSearcher"),
    ("organization_searcher", "mock"): ("querysvc.adapters.mock.organizations", "MockOrganizationSearcher"),
    ("authenticator", "jwt"): ("querysvc.adapters.jwt.adapter", "JwtAuthenticator"),
    ("authenticator", "mock"): ("querysvc.adapters.mock.auth", "MockAuthenticator"),
}


def _load(role: str, source: str) -> type[Adapter]:
    entry = _ADAPTER_MAP.get((role, source))
    if entry is None:
        raise ConfigurationError(f"Unknown {role} source '{source}'")
    module_path, class_name = entry
    module = importlib.import_module(module_path)
    return getattr(module, class_name)


def _adapter_kwargs(role: str, source: str, settings: Settings, secret: PageTokenSecret) -> dict[str, Any]:
    """Build constructor kwargs for one adapter from settings."""
    if role == "resource_searcher":
        if source == "opensearch":
            return {"url": settings.search.url, "index": settings.search.index, "secret": secret}
        return {"secret": secret}

    if role == "access_checker":
        if source == "nats":
            cfg = settings.access_control
            return {
                "url": cfg.url,
                "timeout": cfg.timeout,
                "max_reconnect": cfg.max_reconnect,
                "reconnect_wait": cfg.reconnect_wait,
            }
        return {}

    if role == "organization_searcher":
        if source == "clearbit":
            from querysvc.adapters.clearbit.client import ClearbitClient

            cfg = settings.organizations
            client = ClearbitClient(
                api_key=cfg.api_key,
                base_url=cfg.base_url,
                autocomplete_url=cfg.autocomplete_url,
                timeout=cfg.timeout,
                max_retries=cfg.max_retries,
                retry_delay=cfg.retry_delay,
            )
            return {"client": client}
        return {}

    if role == "authenticator":
        if source == "jwt":
            return {"jwks_url": settings.auth.jwks_url, "audience": settings.auth.audience}
        return {"principal": settings.auth.mock_local_principal}

    raise ConfigurationError(f"Unknown adapter role '{role}'")


def build_adapters(settings: Settings, secret: PageTokenSecret) -> AdapterRegistry:
    """Create (but do not initialize) every adapter named in ``settings``.

    Raises:
        ConfigurationError: If a source is unknown or an adapter rejects its
            configuration.
    """
    auth_source = "jwt"
    if settings.auth.mock_local_principal:
        logger.warning(
            "JWT validation is DISABLED; every request runs as principal '%s'",
            settings.auth.mock_local_principal,
        )
        auth_source = "mock"

    sources = {
        "resource_searcher": settings.search.source,
        "access_checker": settings.access_control.source,
        "organization_searcher": settings.organizations.source,
        "authenticator": auth_source,
    }

    registry = AdapterRegistry()
    for role, source in sources.items():
        adapter_class = _load(role, source)
        registry.add(role, adapter_class(**_adapter_kwargs(role, source, settings, secret)))
    return registry


def build_service(settings: Settings) -> tuple[QueryService, AdapterRegistry]:
    """Build the query service and the registry owning its adapters.

    Raises:
        ConfigurationError: If the page token secret is missing or an adapter
            cannot be configured.
    """
    try:
        secret = settings.paging.secret()
    except ValueError as e:
        raise ConfigurationError(str(e)) from e

    registry = build_adapters(settings, secret)
    service = QueryService(
        resource_searcher=registry.get("resource_searcher"),  # type: ignore[arg-type]
        access_checker=registry.get("access_checker"),  # type: ignore[arg-type]
        organization_searcher=registry.get("organization_searcher"),  # type: ignore[arg-type]
        authenticator=registry.get("authenticator"),  # type: ignore[arg-type]
        secret=secret,
    )
    return service, registry
