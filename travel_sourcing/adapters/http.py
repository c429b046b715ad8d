"""Generic JSON-over-HTTP provider adapter."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

import httpx

from travel_sourcing.adapters.base import ProviderAdapter
from travel_sourcing.exceptions import (
    ProviderAuthError,
    ProviderError,
    ProviderQuotaError,
    ProviderRateLimitError,
)
from travel_sourcing.models import OfferKind, ProviderQuery, RawProviderRecord
from travel_sourcing.utils.security import redact_secrets_from_text

logger = logging.getLogger(__name__)


def _dig(data: Any, path: str) -> Any:
    """Follow a dotted path ("data.results") through nested dicts."""
    if not path:
        return data
    current = data
    for part in path.split("."):
        if not isinstance(current, dict):
            return None
        current = current.get(part)
    return current


def _parse_retry_after(value: Optional[str]) -> Optional[int]:
    if not value:
        return None
    try:
        return int(float(value))
    except ValueError:
        return None


class HttpJsonAdapter(ProviderAdapter):
    """
    Queries a JSON endpoint with the ProviderQuery as GET parameters.

    ``records_path`` is a dotted path to the list of records in the response
    body; ``param_map`` renames ProviderQuery fields to the provider's
    parameter names and ``static_params`` are sent with every request.
    """

    def __init__(
        self,
        provider_id: str,
        url: str,
        kinds: Sequence[OfferKind],
        *,
        records_path: str = "",
        api_key: Optional[str] = None,
        api_key_param: Optional[str] = None,
        param_map: Optional[Mapping[str, str]] = None,
        static_params: Optional[Mapping[str, str]] = None,
        timeout_seconds: float = 8.0,
    ):
        self.provider_id = provider_id
        self.url = url
        self.kinds = tuple(kinds)
        self.records_path = records_path
        self.api_key = api_key
        self.api_key_param = api_key_param
        self.param_map = dict(param_map or {})
        self.static_params = dict(static_params or {})
        self.timeout_seconds = timeout_seconds

    @classmethod
    def from_spec(cls, spec: Mapping[str, Any], api_key: Optional[str] = None) -> "HttpJsonAdapter":
        """Build an adapter from a SOURCING_HTTP_PROVIDERS entry."""
        return cls(
            provider_id=str(spec["id"]),
            url=str(spec["url"]),
            kinds=tuple(spec.get("kinds") or ()),
            records_path=str(spec.get("records_path", "")),
            api_key=api_key,
            api_key_param=spec.get("api_key_param"),
            param_map=spec.get("param_map"),
            static_params=spec.get("static_params"),
            timeout_seconds=float(spec.get("timeout_seconds", 8.0)),
        )

    def _build_params(self, query: ProviderQuery) -> Dict[str, str]:
        params = dict(self.static_params)
        for key, value in query.to_params().items():
            params[self.param_map.get(key, key)] = value
        if self.api_key and self.api_key_param:
            params[self.api_key_param] = self.api_key
        return params

    def _build_headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key and not self.api_key_param:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def search(self, query: ProviderQuery) -> List[RawProviderRecord]:
        params = self._build_params(query)
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.get(self.url, params=params, headers=self._build_headers())
                if response.status_code == 404:
                    # Some providers answer "nothing for this route" with a 404.
                    return []
                self._raise_for_provider_status(response)
                data = response.json()
        except ProviderError:
            raise
        except httpx.HTTPStatusError as e:
            status = getattr(e.response, "status_code", None)
            raise ProviderError(
                f"HTTP {status}: {redact_secrets_from_text(str(e))}", provider=self.provider_id
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(
                f"{type(e).__name__}: {redact_secrets_from_text(str(e))}", provider=self.provider_id
            ) from e
        except ValueError as e:
            raise ProviderError(f"Invalid JSON body: {e}", provider=self.provider_id) from e

        if data is None:
            return []
        items = _dig(data, self.records_path)
        if items is None:
            logger.info(f"[{self.provider_id}] No records at {self.records_path!r}")
            return []
        if isinstance(items, dict):
            items = [items]
        if not isinstance(items, list):
            raise ProviderError(
                f"Expected a list at {self.records_path!r}, got {type(items).__name__}",
                provider=self.provider_id,
            )
        return self.wrap(items, query.kind)

    def _raise_for_provider_status(self, response: httpx.Response) -> None:
        status = response.status_code
        if status in (401, 403):
            raise ProviderAuthError(f"HTTP {status}: credentials rejected", provider=self.provider_id)
        if status == 402:
            raise ProviderQuotaError("HTTP 402: API quota exhausted", provider=self.provider_id)
        if status == 429:
            retry_after = _parse_retry_after(response.headers.get("Retry-After"))
            raise ProviderRateLimitError(
                "HTTP 429: rate limit exceeded", provider=self.provider_id, retry_after=retry_after
            )
        response.raise_for_status()
