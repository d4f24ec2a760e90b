"""
Commission amount calculation.

amount = sale_price * rate / 100, rounded half-up to cents.

Gross profit follows the brokerage's split:
    gross_profit = actual - (communicated - broker)
where each term is the commission amount at that rate.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from byit.errors import InvalidInput
from byit.services.rates import RateField, RateValue, ResolvedRates, to_decimal, validate_rate

CENTS = Decimal("0.01")
HUNDRED = Decimal("100")

# Gross profit as a share of the sale price
HIGH_PROFIT_THRESHOLD = Decimal("2")    # >= 2% is HIGH
MEDIUM_PROFIT_THRESHOLD = Decimal("1")  # >= 1% is MEDIUM


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def validate_sale_price(sale_price: RateValue) -> Decimal:
    """Raise InvalidInput unless the sale price is a positive number.

    Returns the price rounded to whole cents, as stored on the deal.
    """
    price = round_money(to_decimal(sale_price))
    if price <= 0:
        raise InvalidInput(f"Sale price must be positive, got {sale_price}")
    return price


def calculate_commission(sale_price: RateValue, effective_rate: RateValue) -> Decimal:
    """Calculate the commission amount for a sale.

    Args:
        sale_price: Deal value, must be > 0
        effective_rate: Resolved rate in percent (e.g. 2.5 = 2.5%)

    Returns:
        Amount rounded half-up to 2 decimal places

    Raises:
        InvalidInput: non-positive sale price or rate outside [0, 100]
    """
    price = validate_sale_price(sale_price)
    if effective_rate is None:
        raise InvalidInput("Effective rate is required")
    rate = validate_rate(effective_rate)
    return round_money(price * rate / HUNDRED)


class Profitability(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    LOSS = "LOSS"


@dataclass(frozen=True)
class GrossProfit:
    """Platform economics of one sale."""

    sale_price: Decimal
    actual_commission: Decimal
    communicated_commission: Decimal
    broker_commission: Decimal
    gross_profit: Decimal
    gross_profit_percentage: Decimal
    platform_margin: Decimal
    profitability: Profitability


def classify_profitability(gross_profit: Decimal, percentage: Decimal) -> Profitability:
    if gross_profit < 0:
        return Profitability.LOSS
    if percentage >= HIGH_PROFIT_THRESHOLD:
        return Profitability.HIGH
    if percentage >= MEDIUM_PROFIT_THRESHOLD:
        return Profitability.MEDIUM
    return Profitability.LOW


def calculate_gross_profit(sale_price: RateValue, rates: ResolvedRates) -> GrossProfit:
    """Break a sale down into developer, broker and platform amounts."""
    price = validate_sale_price(sale_price)

    actual = calculate_commission(price, rates.get(RateField.ACTUAL).rate)
    communicated = calculate_commission(price, rates.get(RateField.COMMUNICATED).rate)
    broker = calculate_commission(price, rates.get(RateField.BROKER).rate)

    gross_profit = actual - (communicated - broker)
    percentage = round_money(gross_profit / price * HUNDRED)

    return GrossProfit(
        sale_price=price,
        actual_commission=actual,
        communicated_commission=communicated,
        broker_commission=broker,
        gross_profit=gross_profit,
        gross_profit_percentage=percentage,
        platform_margin=actual - broker,
        profitability=classify_profitability(gross_profit, percentage),
    )
