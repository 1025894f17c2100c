"""
Pydantic schemas for the chat assistant.
"""
from pydantic import BaseModel
from typing import List, Literal, Optional


class ChatMessage(BaseModel):
    """One turn of the conversation."""
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    """Schema for a chat request."""
    messages: List[ChatMessage]
    group_id: Optional[int] = None
