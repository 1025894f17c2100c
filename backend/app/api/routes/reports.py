"""
Monthly PDF report routes.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional
from app.core.config import settings
from app.db.session import get_db
from app.api.dependencies import bearer_scheme, resolve_user
from app.api.routes.groups import check_group_access
from app.services.budget_service import get_period_budgets, get_period_transactions
from app.services.report_service import ReportPeriod, build_monthly_report, report_filename

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["reports"])


def _parse_positive_int(value: Optional[str]) -> Optional[int]:
    try:
        number = int(value) if value is not None else 0
    except ValueError:
        return None
    return number if number > 0 else None


@router.get("/monthly")
def get_monthly_report(
    group_id: Optional[str] = None,
    month: Optional[str] = None,
    year: Optional[str] = None,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db)
):
    """
    Download a group's monthly report as PDF.
    Parameters are validated before the credential, and the group is
    resolved before anything is drawn.
    """
    group_number = _parse_positive_int(group_id)
    month_number = _parse_positive_int(month)
    year_number = _parse_positive_int(year)
    if not group_number or not month_number or not year_number or month_number > 12:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing group_id, month, or year"
        )
    
    current_user = resolve_user(credentials, db)
    group = check_group_access(group_number, current_user.id, db)
    
    period = ReportPeriod(
        group_id=group.id,
        group_name=group.name,
        month=month_number,
        year=year_number
    )
    
    try:
        budgets = get_period_budgets(group.id, month_number, year_number, db)
        transactions = get_period_transactions(group.id, month_number, year_number, db)
        pdf_bytes = build_monthly_report(period, budgets, transactions, product=settings.REPORT_PRODUCT_NAME)
    except Exception as e:
        logger.error(f"Failed to build report for group {group.id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate report"
        )
    
    file_name = report_filename(settings.REPORT_PRODUCT_NAME, group.name, month_number, year_number)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{file_name}"'}
    )
