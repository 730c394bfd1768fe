"""
Unit tests for JupiterAdapter.

Tests:
- Simulated quotes and prices off mainnet (no requests made)
- Quote request parameters and response parsing
- Error mapping: HTTP status, connection errors, timeouts, bad bodies
"""

import asyncio
import json

import aiohttp
import pytest

from principia.config.settings import SOL_MINT, USDC_MINT
from principia.core.exceptions import NetworkError, ParseError
from principia.integrations.dex.jupiter_adapter import JupiterAdapter

from tests.fakes import FakeSession


QUOTE_RESPONSE = {
    'inputMint': USDC_MINT,
    'inAmount': '1000000',
    'outputMint': SOL_MINT,
    'outAmount': '6843210',
    'otherAmountThreshold': '6809000',
    'swapMode': 'ExactIn',
    'slippageBps': 50,
    'priceImpactPct': '0.0012',
    'contextSlot': 251234567,
    'timeTaken': 0.021,
}


# ============================================================================
# Simulated network
# ============================================================================

@pytest.mark.asyncio
async def test_devnet_quote_is_simulated():
    session = FakeSession()
    adapter = JupiterAdapter(network="devnet", session=session)

    quote = await adapter.get_quote(SOL_MINT, USDC_MINT, 1_000_000, slippage_bps=50)

    assert quote.simulated is True
    assert quote.in_amount == 1_000_000
    assert quote.out_amount == 995_000
    assert quote.other_amount_threshold == 990_025
    assert quote.price_impact_pct == pytest.approx(0.1)
    assert quote.swap_mode == "ExactIn"
    assert quote.context_slot == 0
    assert quote.time_taken == 0.1
    assert session.requests == []


@pytest.mark.asyncio
async def test_simulated_quote_uses_slippage():
    adapter = JupiterAdapter(network="testnet", session=FakeSession())

    quote = await adapter.get_quote(SOL_MINT, USDC_MINT, 10_000, slippage_bps=100)

    assert quote.out_amount == 9_900
    assert quote.price_impact_pct == pytest.approx(0.2)
    assert quote.slippage_bps == 100


@pytest.mark.asyncio
async def test_devnet_price_is_simulated():
    session = FakeSession()
    adapter = JupiterAdapter(network="devnet", session=session)

    price = await adapter.fetch_price(SOL_MINT)

    assert 100.0 <= price < 110.0
    assert session.requests == []


# ============================================================================
# Mainnet
# ============================================================================

@pytest.mark.asyncio
async def test_mainnet_quote_request_and_parse():
    session = FakeSession(payload=QUOTE_RESPONSE)
    adapter = JupiterAdapter(session=session, timeout_seconds=3.0)

    quote = await adapter.get_quote(USDC_MINT, SOL_MINT, 1_000_000, slippage_bps=50)

    request = session.requests[0]
    assert request['url'] == "https://quote-api.jup.ag/v6/quote"
    assert request['params'] == {
        'inputMint': USDC_MINT,
        'outputMint': SOL_MINT,
        'amount': '1000000',
        'slippageBps': '50',
    }
    assert request['timeout'].total == 3.0

    assert quote.simulated is False
    assert quote.in_amount == 1_000_000
    assert quote.out_amount == 6_843_210
    assert quote.other_amount_threshold == 6_809_000
    assert quote.price_impact_pct == pytest.approx(0.0012)
    assert quote.context_slot == 251234567
    assert quote.raw_data == QUOTE_RESPONSE


@pytest.mark.asyncio
async def test_mainnet_price():
    session = FakeSession(payload={'data': {SOL_MINT: {'id': SOL_MINT, 'price': 142.5}}})
    adapter = JupiterAdapter(session=session)

    price = await adapter.fetch_price(SOL_MINT)

    assert price == 142.5
    assert session.requests[0]['url'] == "https://price.jup.ag/v4/price"
    assert session.requests[0]['params'] == {'ids': SOL_MINT}


# ============================================================================
# Failures
# ============================================================================

@pytest.mark.asyncio
async def test_non_200_is_network_error():
    adapter = JupiterAdapter(session=FakeSession(status=429, body="Too Many Requests"))

    with pytest.raises(NetworkError) as exc_info:
        await adapter.get_quote(USDC_MINT, SOL_MINT, 1_000_000)

    assert exc_info.value.status == 429


@pytest.mark.asyncio
async def test_connection_error_is_network_error():
    adapter = JupiterAdapter(session=FakeSession(error=aiohttp.ClientConnectionError("refused")))

    with pytest.raises(NetworkError):
        await adapter.get_quote(USDC_MINT, SOL_MINT, 1_000_000)


@pytest.mark.asyncio
async def test_timeout_is_network_error():
    adapter = JupiterAdapter(session=FakeSession(error=asyncio.TimeoutError()))

    with pytest.raises(NetworkError) as exc_info:
        await adapter.fetch_price(SOL_MINT)

    assert "timed out" in str(exc_info.value)


@pytest.mark.asyncio
async def test_invalid_json_is_parse_error():
    adapter = JupiterAdapter(session=FakeSession(body="<html>oops</html>"))

    with pytest.raises(ParseError):
        await adapter.get_quote(USDC_MINT, SOL_MINT, 1_000_000)


@pytest.mark.asyncio
async def test_quote_missing_amounts_is_parse_error():
    payload = {k: v for k, v in QUOTE_RESPONSE.items() if k != 'outAmount'}
    adapter = JupiterAdapter(session=FakeSession(body=json.dumps(payload)))

    with pytest.raises(ParseError):
        await adapter.get_quote(USDC_MINT, SOL_MINT, 1_000_000)


@pytest.mark.asyncio
async def test_price_missing_token_is_parse_error():
    adapter = JupiterAdapter(session=FakeSession(payload={'data': {}}))

    with pytest.raises(ParseError):
        await adapter.fetch_price(SOL_MINT)


@pytest.mark.asyncio
async def test_close_leaves_injected_session_open():
    session = FakeSession()
    adapter = JupiterAdapter(session=session)

    await adapter.close()

    assert session.closed is False
    assert adapter.session is None
