"""
Main API router that includes all route modules.
"""
from fastapi import APIRouter
from app.api.routes import (
    auth, users, groups, transactions, budget, calendar, fx_rates, reports, chat
)

api_router = APIRouter()

# Include all route modules
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(groups.router)
api_router.include_router(transactions.router)
api_router.include_router(budget.router)
api_router.include_router(calendar.router)
api_router.include_router(fx_rates.router)
api_router.include_router(reports.router)
api_router.include_router(chat.router)
