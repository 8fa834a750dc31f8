from pydantic import BaseModel, Field
from typing import Dict, List, Any, Optional
from datalens.constants.stat import GROQ_MODEL


class ConversationSettings(BaseModel):
    model: str = GROQ_MODEL
    temperature: float = Field(0.7, ge=0, le=2)
    max_tokens: int = Field(1000, ge=1, le=4000)
    system_prompt: str = "You are a helpful AI assistant."


class ConversationCreate(BaseModel):
    title: str = Field("New Conversation", max_length=100)
    settings: ConversationSettings = ConversationSettings()
    tags: List[str] = []


class ConversationUpdate(BaseModel):
    title: Optional[str] = Field(None, max_length=100)
    settings: Optional[ConversationSettings] = None
    tags: Optional[List[str]] = None
    is_active: Optional[bool] = None
    is_shared: Optional[bool] = None


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1)


class ChatResponse(BaseModel):
    reply: str
    conversation: Dict[str, Any]


class ConversationListResponse(BaseModel):
    conversations: List[Dict[str, Any]]
    page: int
    limit: int
    total: int
    pages: int
