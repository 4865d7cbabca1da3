"""Market specification exports."""

from trade_journal.markets.catalog import (
    extract_base_symbol,
    get_market_specification,
    list_market_specifications,
)
from trade_journal.markets.pricing import format_price, is_valid_price_increment, round_to_tick

__all__ = [
    "extract_base_symbol",
    "format_price",
    "get_market_specification",
    "is_valid_price_increment",
    "list_market_specifications",
    "round_to_tick",
]
