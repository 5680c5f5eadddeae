"""API request/response models."""
from typing import List, Optional

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """Request body for POST /chat."""
    message: str = Field(..., min_length=1, description="User message")
    session_id: Optional[str] = Field(None, description="Existing session ID")


class TourOut(BaseModel):
    """Tour recommendation returned to the client."""
    id: str
    title: str
    destination: str
    price: float
    duration_days: int
    difficulty_level: str
    category: str


class ChatResponse(BaseModel):
    """Response body for POST /chat."""
    reply: str
    suggestions: List[str]
    tour_recommendations: List[TourOut]
    session_id: str
    message_id: str
    intent: Optional[str] = None
    stage: str
    cached: bool = False


class FeedbackRequest(BaseModel):
    """Request body for POST /feedback."""
    session_id: str
    message_id: str
    helpful: bool


class FAQOut(BaseModel):
    """FAQ entry with its learned popularity."""
    id: str
    question: str
    answer: str
    category: str
    popularity: int = 0
