"""Price sources: headless browser scraping and the exchange trade summary."""

from .base import PriceFetcher, parse_price

__all__ = ["PriceFetcher", "parse_price"]
