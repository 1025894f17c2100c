"""
Foreign exchange service for currency conversion.
"""
from decimal import Decimal, ROUND_HALF_UP
import httpx
import logging
from app.core.config import settings

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def fetch_exchange_rate(from_currency: str, to_currency: str) -> Decimal:
    """
    Fetch the latest rate from the open ExchangeRate-API.
    Returns rate such that 1 unit of from_currency = rate to_currency.

    Endpoint: {FX_API_URL}/{FROM}; response contains {"result": "success",
    "rates": {"EUR": 0.92, ...}} quoted against the requested currency.

    Raises:
        ValueError: when the API fails or has no rate for to_currency
    """
    from_upper = from_currency.upper()
    to_upper = to_currency.upper()

    if from_upper == to_upper:
        return Decimal(1)

    api_url = f"{settings.FX_API_URL}/{from_upper}"
    logger.info(f"Fetching latest exchange rate for {from_upper} -> {to_upper}")

    try:
        response = httpx.get(api_url, timeout=settings.FX_TIMEOUT)
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPStatusError as e:
        logger.error(f"HTTP error with ExchangeRate-API: {e.response.status_code}")
        raise ValueError(f"Exchange rate API error: {e.response.status_code}")
    except httpx.HTTPError as e:
        logger.error(f"Network error with ExchangeRate-API: {e}")
        raise ValueError(f"Exchange rate API network error: {str(e)}")

    if settings.DEBUG:
        logger.debug(f"ExchangeRate-API response: {data}")

    if data.get("result") != "success":
        error_msg = data.get("error-type", "unknown")
        logger.error(f"ExchangeRate-API returned error: {error_msg}")
        raise ValueError(f"Exchange rate API error: {error_msg}")

    rate = (data.get("rates") or {}).get(to_upper)
    if not isinstance(rate, (int, float)) or isinstance(rate, bool):
        logger.error(f"{to_upper} not found in rates for {from_upper}")
        raise ValueError(f"No rate found for {from_upper} -> {to_upper}")

    rate = Decimal(str(rate))
    if rate <= 0:
        raise ValueError(f"Invalid exchange rate: {rate}")

    logger.info(f"Fetched rate: 1 {from_upper} = {rate} {to_upper}")
    return rate


def convert_amount(amount: Decimal, rate: Decimal) -> Decimal:
    """Apply a rate and round to cents."""
    return (amount * rate).quantize(CENT, rounding=ROUND_HALF_UP)


def convert(amount: Decimal, from_currency: str, to_currency: str) -> Decimal:
    """
    Convert an amount using the latest rate.
    Returns the amount unchanged when the currencies match.
    """
    if from_currency.upper() == to_currency.upper():
        return amount
    rate = fetch_exchange_rate(from_currency, to_currency)
    return convert_amount(amount, rate)
