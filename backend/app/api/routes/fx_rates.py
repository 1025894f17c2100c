"""
Exchange rate routes.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import Optional
from decimal import Decimal
from app.models.user import User
from app.schemas.exchange_rate import ExchangeRatePreview
from app.api.dependencies import get_current_user
from app.services.fx_service import fetch_exchange_rate, convert_amount

router = APIRouter(prefix="/fx", tags=["fx"])


@router.get("/rate", response_model=ExchangeRatePreview)
async def get_rate_preview(
    from_currency: str = Query(..., min_length=3, max_length=3),
    to_currency: str = Query(..., min_length=3, max_length=3),
    amount: Optional[Decimal] = Query(None, gt=0),
    current_user: User = Depends(get_current_user)
):
    """Latest rate between two currencies, with a converted amount preview."""
    try:
        rate = fetch_exchange_rate(from_currency, to_currency)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(e)
        )
    
    return ExchangeRatePreview(
        from_currency=from_currency.upper(),
        to_currency=to_currency.upper(),
        rate=rate,
        amount=amount,
        converted_amount=convert_amount(amount, rate) if amount is not None else None
    )
