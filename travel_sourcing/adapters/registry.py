"""Provider registry: ordered adapters per offer kind."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from travel_sourcing.adapters.base import ProviderAdapter
from travel_sourcing.models import OFFER_KINDS, OfferKind

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """
    Holds the adapters the aggregator fans out to, grouped by offer kind.

    Registration order is preserved per kind. Re-registering an adapter with
    an id that is already present replaces it in place.
    """

    def __init__(self, adapters: Optional[Iterable[ProviderAdapter]] = None):
        self._by_kind: Dict[str, List[ProviderAdapter]] = {kind: [] for kind in OFFER_KINDS}
        for adapter in adapters or []:
            self.register(adapter)

    def register(self, adapter: ProviderAdapter, kinds: Optional[Iterable[OfferKind]] = None) -> None:
        selected = list(kinds) if kinds is not None else list(adapter.kinds)
        if not selected:
            raise ValueError(f"Adapter {adapter.provider_id!r} declares no offer kinds")
        for kind in selected:
            if kind not in self._by_kind:
                raise ValueError(f"Unknown offer kind {kind!r} for adapter {adapter.provider_id!r}")
            bucket = self._by_kind[kind]
            for index, existing in enumerate(bucket):
                if existing.provider_id == adapter.provider_id:
                    bucket[index] = adapter
                    break
            else:
                bucket.append(adapter)
        logger.info(f"[ProviderRegistry] Registered {adapter.provider_id} for {selected}")

    def unregister(self, provider_id: str) -> bool:
        removed = False
        for kind, bucket in self._by_kind.items():
            kept = [a for a in bucket if a.provider_id != provider_id]
            if len(kept) != len(bucket):
                removed = True
                self._by_kind[kind] = kept
        return removed

    def adapters_for(self, kind: OfferKind) -> List[ProviderAdapter]:
        return list(self._by_kind.get(kind, []))

    def kinds(self) -> List[str]:
        return [kind for kind, bucket in self._by_kind.items() if bucket]

    def provider_ids(self) -> List[str]:
        seen: Dict[str, None] = {}
        for bucket in self._by_kind.values():
            for adapter in bucket:
                seen.setdefault(adapter.provider_id, None)
        return list(seen)

    def __len__(self) -> int:
        return len(self.provider_ids())

    def __bool__(self) -> bool:
        return any(self._by_kind.values())
