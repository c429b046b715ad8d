"""
AI-backed simulated provider.

When every structured provider comes back empty, the aggregator can fall back
to this adapter. It asks Gemini for best-effort offers shaped like ordinary
provider records; downstream they are normalized like any other source.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Optional

import httpx

from travel_sourcing.adapters.base import ProviderAdapter
from travel_sourcing.exceptions import ProviderError
from travel_sourcing.models import ProviderQuery, RawProviderRecord
from travel_sourcing.utils.security import redact_secrets_from_text

logger = logging.getLogger(__name__)

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

_FIELDS_BY_KIND: Dict[str, str] = {
    "flight": '"id", "price", "currency", "url", "totalDuration", "segments" '
    '(list of {"fromCode", "toCode", "carrier", "flightNumber", "departure", "arrival", "duration"})',
    "lodging": '"name", "address", "city", "country", "price" (per night), "currency", '
    '"rating" (0-5), "reviewCount", "amenities", "specialDeals", "url"',
    "transport": '"type" (bus|train|ferry), "from", "to", "operator", "departure", "arrival", '
    '"duration", "price", "currency", "url"',
    "experience": '"name", "location", "date", "category", "duration", "price", "currency", "url"',
}


def _extract_json_array(text: str) -> list:
    """Extract JSON array from LLM response."""
    cleaned = re.sub(r"```(?:json)?\s*\n?", "", text)
    cleaned = re.sub(r"\n?```", "", cleaned)
    first_bracket = cleaned.find("[")
    last_bracket = cleaned.rfind("]")
    if first_bracket != -1 and last_bracket > first_bracket:
        cleaned = cleaned[first_bracket : last_bracket + 1]
    return json.loads(cleaned)


class SimulatedOfferAdapter(ProviderAdapter):
    provider_id = "ai_simulated"
    kinds = ("flight", "lodging", "transport", "experience")

    def __init__(
        self,
        api_key: Optional[str],
        *,
        model: str = "gemini-2.0-flash",
        max_offers: int = 5,
        timeout_seconds: float = 30.0,
    ):
        self.api_key = api_key
        self.model = model
        self.max_offers = max_offers
        self.timeout_seconds = timeout_seconds

    def build_prompt(self, query: ProviderQuery) -> str:
        route = f"from {query.origin} to {query.destination}" if query.origin else f"in {query.destination}"
        when = f" on {query.date_out.isoformat()}" if query.date_out else ""
        if query.date_return:
            when += f" returning {query.date_return.isoformat()}"
        budget = ""
        if query.max_price is not None:
            budget = f" Keep prices under {query.max_price} {query.currency}."
        return (
            f"You are a travel pricing assistant. Estimate up to {self.max_offers} realistic "
            f"{query.kind} offers {route}{when} for {query.party_size} traveller(s).{budget}\n"
            f"Prices in {query.currency}. Reply with ONLY a JSON array; each element has the keys "
            f"{_FIELDS_BY_KIND[query.kind]}."
        )

    async def _call_gemini(self, prompt: str) -> str:
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": 0.2, "maxOutputTokens": 4096},
        }
        async with httpx.AsyncClient() as client:
            resp = await client.post(
                GEMINI_URL.format(model=self.model),
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout_seconds,
            )
            resp.raise_for_status()
            data = resp.json()

        candidates = data.get("candidates", [])
        if not candidates:
            return ""
        parts = candidates[0].get("content", {}).get("parts", [])
        if not parts:
            return ""
        return parts[0].get("text", "")

    async def search(self, query: ProviderQuery) -> List[RawProviderRecord]:
        if not self.api_key:
            logger.info("[SimulatedOfferAdapter] No Gemini API key configured, skipping")
            return []

        try:
            text = await self._call_gemini(self.build_prompt(query))
        except httpx.HTTPError as e:
            raise ProviderError(
                f"Gemini call failed: {redact_secrets_from_text(str(e))}", provider=self.provider_id
            ) from e

        if not text.strip():
            return []
        try:
            items = _extract_json_array(text)
        except json.JSONDecodeError as e:
            raise ProviderError(f"Unparsable Gemini reply: {e}", provider=self.provider_id) from e
        if not isinstance(items, list):
            raise ProviderError("Gemini reply was not a JSON array", provider=self.provider_id)

        payloads: List[Dict[str, Any]] = []
        for item in items[: self.max_offers]:
            if isinstance(item, dict):
                item["simulated"] = True
                payloads.append(item)
        logger.info(f"[SimulatedOfferAdapter] {len(payloads)} simulated {query.kind} offers")
        return self.wrap(payloads, query.kind)
