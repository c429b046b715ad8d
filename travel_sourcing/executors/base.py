"""Adapter executor with status instrumentation."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import List, Optional, Tuple

from travel_sourcing.adapters.base import ProviderAdapter
from travel_sourcing.exceptions import ProviderError
from travel_sourcing.metrics import log_provider_result
from travel_sourcing.models import ProviderQuery, ProviderStatusSnapshot, RawProviderRecord
from travel_sourcing.utils.security import redact_secrets_from_text

logger = logging.getLogger(__name__)


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


async def run_adapter_with_status(
    adapter: ProviderAdapter,
    query: ProviderQuery,
    *,
    timeout_seconds: Optional[float] = 8.0,
) -> Tuple[List[RawProviderRecord], ProviderStatusSnapshot]:
    """
    Run one adapter call and turn its outcome into data.

    Never raises for adapter failures: timeouts, ProviderErrors and unexpected
    exceptions all come back as ``([], status)``. Cancellation propagates.
    """
    provider_id = adapter.provider_id
    started = time.monotonic()
    try:
        if timeout_seconds:
            records = await asyncio.wait_for(adapter.search(query), timeout=timeout_seconds)
        else:
            records = await adapter.search(query)
        records = list(records or [])
        status = ProviderStatusSnapshot(
            provider_id=provider_id,
            kind=query.kind,
            status="ok" if records else "empty",
            result_count=len(records),
            latency_ms=_elapsed_ms(started),
        )
    except asyncio.TimeoutError:
        logger.warning(f"[{provider_id}] {query.kind} search timed out after {timeout_seconds}s")
        records = []
        status = ProviderStatusSnapshot(
            provider_id=provider_id,
            kind=query.kind,
            status="timeout",
            latency_ms=_elapsed_ms(started),
            message="Search timed out",
        )
    except ProviderError as e:
        safe_msg = redact_secrets_from_text(e.message)
        logger.warning(f"[{provider_id}] {query.kind} search failed ({e.status}): {safe_msg}")
        records = []
        status = ProviderStatusSnapshot(
            provider_id=provider_id,
            kind=query.kind,
            status=e.status,
            latency_ms=_elapsed_ms(started),
            message=f"Search failed: {safe_msg[:100]}",
        )
    except Exception as e:
        safe_msg = redact_secrets_from_text(str(e))
        logger.exception(f"[{provider_id}] Unexpected adapter error: {type(e).__name__}: {safe_msg}")
        records = []
        status = ProviderStatusSnapshot(
            provider_id=provider_id,
            kind=query.kind,
            status="error",
            latency_ms=_elapsed_ms(started),
            message=f"Search failed: {safe_msg[:100]}",
        )

    log_provider_result(provider_id, status.status, status.result_count, status.latency_ms or 0)
    return records, status
