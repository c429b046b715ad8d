"""Tests for the Gemini-backed simulated provider."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from travel_sourcing.adapters import SimulatedOfferAdapter
from travel_sourcing.exceptions import ProviderError
from travel_sourcing.models import ProviderQuery


def _gemini_body(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def _patched_client(mock_client_class, body=None, side_effect=None):
    response = MagicMock()
    response.status_code = 200
    response.json.return_value = body
    response.raise_for_status = MagicMock()

    mock_client = AsyncMock()
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    mock_client.post = AsyncMock(return_value=response, side_effect=side_effect)
    mock_client_class.return_value = mock_client
    return mock_client


@pytest.fixture
def query():
    return ProviderQuery(
        kind="lodging", destination="Luang Prabang", date_out="2026-03-01", currency="EUR", max_price=90
    )


def test_prompt_describes_the_query(query):
    prompt = SimulatedOfferAdapter("key", max_offers=3).build_prompt(query)
    assert "up to 3 realistic lodging offers in Luang Prabang on 2026-03-01" in prompt
    assert "under 90 EUR" in prompt
    assert '"reviewCount"' in prompt


@pytest.mark.asyncio
async def test_no_api_key_returns_empty(query):
    with patch("httpx.AsyncClient") as mock_client_class:
        assert await SimulatedOfferAdapter(None).search(query) == []
    mock_client_class.assert_not_called()


@pytest.mark.asyncio
async def test_parses_fenced_json_and_marks_simulated(query):
    offers = [{"name": "Mekong Riverside", "price": 60}, {"name": "Villa Santi", "price": 85}, "junk"]
    text = "Here you go:\n```json\n" + json.dumps(offers) + "\n```"

    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = _patched_client(mock_client_class, _gemini_body(text))
        records = await SimulatedOfferAdapter("secret-key", model="gemini-test").search(query)

    assert [r.payload["name"] for r in records] == ["Mekong Riverside", "Villa Santi"]
    assert all(r.payload["simulated"] is True for r in records)
    assert all(r.source == "ai_simulated" and r.kind == "lodging" for r in records)

    args, kwargs = mock_client.post.call_args
    assert "gemini-test:generateContent" in args[0]
    assert kwargs["params"] == {"key": "secret-key"}


@pytest.mark.asyncio
async def test_caps_offer_count(query):
    offers = [{"name": f"Hotel {i}", "price": 50 + i} for i in range(10)]
    with patch("httpx.AsyncClient") as mock_client_class:
        _patched_client(mock_client_class, _gemini_body(json.dumps(offers)))
        records = await SimulatedOfferAdapter("k", max_offers=4).search(query)
    assert len(records) == 4


@pytest.mark.asyncio
async def test_empty_candidates(query):
    with patch("httpx.AsyncClient") as mock_client_class:
        _patched_client(mock_client_class, {"candidates": []})
        assert await SimulatedOfferAdapter("k").search(query) == []


@pytest.mark.asyncio
async def test_unparsable_reply_raises(query):
    with patch("httpx.AsyncClient") as mock_client_class:
        _patched_client(mock_client_class, _gemini_body("Sorry, I cannot help with that."))
        with pytest.raises(ProviderError, match="Unparsable"):
            await SimulatedOfferAdapter("k").search(query)


@pytest.mark.asyncio
async def test_http_failure_raises_redacted(query):
    error = httpx.ConnectError("failed for https://x.googleapis.com/?key=secret-key")
    with patch("httpx.AsyncClient") as mock_client_class:
        _patched_client(mock_client_class, side_effect=error)
        with pytest.raises(ProviderError) as exc_info:
            await SimulatedOfferAdapter("secret-key").search(query)
    assert "secret-key" not in exc_info.value.message
    assert exc_info.value.provider == "ai_simulated"
