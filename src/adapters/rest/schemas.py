"""Pydantic models for REST API request/response validation."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


# --- Chat ---

class ChatBody(BaseModel):
    user_id: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    document_ids: Optional[list[str]] = None
    conversation_id: Optional[str] = None
    variant: Optional[str] = None


class ChatOut(BaseModel):
    reply: str
    conversation_id: str


# --- Tools ---

class ToolOut(BaseModel):
    name: str
    description: str
    parameters: dict[str, Any]
