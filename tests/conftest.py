"""
Shared fixtures.
"""

import pytest

from principia.config.settings import AppConfig, TokenConfig, TokenInfo
from principia.execution.gate import ExecutionGate

from tests.fakes import BONK_MINT, FakeQuoteProvider


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def tokens():
    """SOL/USDC defaults plus BONK."""
    config = TokenConfig()
    config.tokens["BONK"] = TokenInfo(mint=BONK_MINT, decimals=5)
    return config


@pytest.fixture
def quote_provider():
    return FakeQuoteProvider()


@pytest.fixture
def gate(quote_provider, tokens):
    """Dry-run gate over the fake quote provider."""
    return ExecutionGate(quote_provider, tokens, dry_run=True, min_trade_size=0.01)


@pytest.fixture
def app_config():
    """Single-pair configuration with a fast tick."""
    return AppConfig.model_validate({
        'trading': {
            'pairs': ['SOL-USDC'],
            'updateInterval': 0.01,
            'portfolioValue': 10000.0,
        },
    })
