"""
Currency Conversion and Rounding

DESIGN DECISION: Money is carried as float and re-rounded to cents after
every addition or multiplication. Rounding once at the end lets binary
drift (10.10 + 20.20 = 30.300000000000004) compound across hundreds of
payments; rounding every step keeps every intermediate total exact to the
cent.

Conversion goes through a common base: amount * rate[from] / rate[to].
"""

import math
import sys
from typing import Any, Mapping, Optional

from freelance_finance.models.records import Currency, EngineConfig

EPSILON = sys.float_info.epsilon

CURRENCY_SYMBOLS: dict[Currency, str] = {
    Currency.BRL: "R$",
    Currency.USD: "$",
    Currency.EUR: "€",
    Currency.GBP: "£",
}


def safe_float(value: Any) -> float:
    """
    Round to two decimals, half up, nudged by epsilon.

    Non-numeric, NaN and infinite values (including results that overflow
    when scaled) come back as 0.0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    scaled = (number + EPSILON) * 100
    if not math.isfinite(scaled):
        return 0.0
    return math.floor(scaled + 0.5) / 100


def round_half_up(value: float) -> int:
    """Integer rounding with .5 going up, like the dashboard always did."""
    if not math.isfinite(value):
        return 0
    return math.floor(value + 0.5)


def convert_currency(
    amount: Any,
    from_currency: Currency,
    to_currency: Currency,
    rates: Mapping[Currency, float],
) -> float:
    """
    Convert an amount between two currencies.

    A currency missing from the rate table converts at 1. A target rate of
    exactly 0 is a degenerate configuration and yields 0 rather than an
    error.
    """
    if from_currency == to_currency:
        return safe_float(amount)
    try:
        number = float(amount)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number):
        return 0.0

    rate_from = rates.get(from_currency, 1.0)
    rate_to = rates.get(to_currency, 1.0)
    if rate_to == 0:
        return 0.0

    in_base = number * rate_from
    return safe_float(in_base / rate_to)


class CurrencyConverter:
    """
    A converter bound to one configuration.

    The target currency defaults to the configured main currency.
    """

    def __init__(self, config: EngineConfig):
        self._config = config

    def __call__(
        self,
        amount: Any,
        from_currency: Currency,
        to_currency: Optional[Currency] = None,
    ) -> float:
        return convert_currency(
            amount,
            from_currency,
            to_currency or self._config.main_currency,
            self._config.exchange_rates,
        )


def create_currency_converter(config: EngineConfig) -> CurrencyConverter:
    return CurrencyConverter(config)


def format_currency(amount: Any, currency: Currency) -> str:
    """
    Format an amount as the app displays it, e.g. "R$ 1.234,56".

    Uses pt-BR grouping (dot for thousands, comma for decimals); the sign
    goes before the symbol.
    """
    value = safe_float(amount)
    grouped = f"{abs(value):,.2f}"
    localized = grouped.replace(",", "_").replace(".", ",").replace("_", ".")
    sign = "-" if value < 0 else ""
    return f"{sign}{CURRENCY_SYMBOLS[currency]} {localized}"
