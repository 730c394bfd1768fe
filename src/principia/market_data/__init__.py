"""Market data: price feeds and the indicator pipeline."""

from principia.market_data.pipeline import IndicatorPipeline
from principia.market_data.price_feed import JupiterPriceFeed, PriceFeed, SimulatedPriceFeed

__all__ = ['IndicatorPipeline', 'PriceFeed', 'SimulatedPriceFeed', 'JupiterPriceFeed']
