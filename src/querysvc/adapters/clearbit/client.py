"""Clearbit HTTP client — Company lookup and autocomplete with retries.

Endpoints used:
  GET {base_url}/v1/domains/find?name=<name>             (Name-to-Domain)
  GET {base_url}/v2/companies/find?domain=<domain>       (Company enrichment)
  GET {autocomplete_url}/v1/companies/suggest?query=<q>  (Autocomplete)

Server errors (5xx), 429 and transport failures are retried with
exponential backoff: ``retry_delay * 2 ** (attempt - 1)``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx
from pydantic import ValidationError

from querysvc import errors
from querysvc.adapters.base.exceptions import ConfigurationError
from querysvc.adapters.clearbit.models import ClearbitCompany, ClearbitCompanySuggestion

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://company.clearbit.com"
DEFAULT_AUTOCOMPLETE_URL = "https://autocomplete.clearbit.com"


def _is_retryable(err: Exception) -> bool:
    if isinstance(err, httpx.HTTPStatusError):
        status = err.response.status_code
        return status >= 500 or status == 429
    return isinstance(err, httpx.TransportError)


class ClearbitClient:
    """Thin async client over the Clearbit APIs.

    Args:
        api_key: Clearbit secret key, sent as a bearer token.
        base_url: Company API base URL.
        autocomplete_url: Autocomplete API base URL.
        timeout: HTTP request timeout in seconds.
        max_retries: Retries after the first attempt.
        retry_delay: Base delay between retries in seconds.
        transport: Optional httpx transport (used by tests).
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        autocomplete_url: str = DEFAULT_AUTOCOMPLETE_URL,
        timeout: float = 10.0,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_key:
            raise ConfigurationError("API key is required for Clearbit configuration")
        if not base_url:
            raise ConfigurationError("base URL is required for Clearbit configuration")
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._autocomplete_url = autocomplete_url.rstrip("/")
        self._timeout = timeout
        self._max_retries = max_retries if max_retries >= 0 else 3
        self._retry_delay = retry_delay
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def open(self) -> None:
        self._client = httpx.AsyncClient(
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Accept": "application/json",
            },
            timeout=self._timeout,
            transport=self._transport,
        )

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    # ── Endpoints ────────────────────────────────────────────────────────

    async def find_company_by_name(self, name: str) -> ClearbitCompany:
        data = await self._get(f"{self._base_url}/v1/domains/find", {"name": name})
        return self._parse(ClearbitCompany, data)

    async def find_company_by_domain(self, domain: str) -> ClearbitCompany:
        data = await self._get(f"{self._base_url}/v2/companies/find", {"domain": domain})
        return self._parse(ClearbitCompany, data)

    async def suggest_companies(self, query: str) -> list[ClearbitCompanySuggestion]:
        data = await self._get(f"{self._autocomplete_url}/v1/companies/suggest", {"query": query})
        if not isinstance(data, list):
            raise errors.unexpected("failed to decode response: expected a list of suggestions")
        return [self._parse(ClearbitCompanySuggestion, item) for item in data]

    # ── Transport ────────────────────────────────────────────────────────

    async def _get(self, url: str, params: dict[str, str]) -> Any:
        if not self._client:
            raise errors.service_unavailable("Clearbit client not initialized.")

        last_error: Exception | None = None
        for attempt in range(self._max_retries + 1):
            if attempt > 0:
                delay = self._retry_delay * (2 ** (attempt - 1))
                logger.debug("retrying Clearbit request in %.1fs (attempt %d): %s", delay, attempt + 1, url)
                await asyncio.sleep(delay)
            try:
                response = await self._client.get(url, params=params)
                response.raise_for_status()
                return response.json()
            except (httpx.HTTPStatusError, httpx.TransportError) as e:
                last_error = e
                if not _is_retryable(e):
                    break
            except ValueError as e:
                raise errors.unexpected("failed to decode response", e) from e

        logger.debug("Clearbit request failed: %s (%s)", url, last_error)
        if isinstance(last_error, httpx.HTTPStatusError):
            if last_error.response.status_code == 404:
                raise errors.not_found("company not found") from last_error
            raise errors.unexpected("unexpected error", last_error) from last_error
        raise errors.service_unavailable("request failed", last_error) from last_error

    @staticmethod
    def _parse(model: type[Any], data: Any) -> Any:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise errors.unexpected("failed to decode response", e) from e
