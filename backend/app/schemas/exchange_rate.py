"""
Pydantic schemas for exchange rate previews.
"""
from pydantic import BaseModel
from typing import Optional
from decimal import Decimal


class ExchangeRatePreview(BaseModel):
    """Rate between two currencies with an optional converted amount."""
    from_currency: str
    to_currency: str
    rate: Decimal
    amount: Optional[Decimal] = None
    converted_amount: Optional[Decimal] = None
