"""
Chat assistant routes.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from app.core.config import settings
from app.db.session import get_db
from app.models.user import User
from app.schemas.chat import ChatRequest
from app.api.dependencies import get_current_user
from app.api.routes.groups import check_group_access
from app.services.chat_service import (
    build_chat_payload, build_system_prompt, get_current_budgets,
    get_recent_transactions, open_chat_stream
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("")
async def chat(
    request: ChatRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Answer a question about the caller's finances, streamed as plain text."""
    if not request.messages:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="messages is required"
        )
    
    if not settings.OPENAI_API_KEY:
        logger.warning("OpenAI API key not configured. Chat assistant unavailable.")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Chat assistant is not configured"
        )
    
    budgets = []
    if request.group_id is not None:
        check_group_access(request.group_id, current_user.id, db)
        budgets = get_current_budgets(request.group_id, db)
    
    transactions = get_recent_transactions(current_user.id, db, group_id=request.group_id)
    system_prompt = build_system_prompt(transactions, budgets)
    payload = build_chat_payload(system_prompt, request.messages)
    
    try:
        answer = await open_chat_stream(payload)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to process chat request"
        )
    
    return StreamingResponse(
        answer,
        media_type="text/plain; charset=utf-8",
        headers={"Cache-Control": "no-cache"}
    )
