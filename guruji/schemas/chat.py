"""Request and response schemas for the chat relay."""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    """Author of a chat message."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ErrorCode(str, Enum):
    """Stable error kinds returned to clients."""

    INVALID_REQUEST = "INVALID_REQUEST"
    INVALID_API_KEY = "INVALID_API_KEY"
    RATE_LIMITED = "RATE_LIMITED"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    API_ERROR = "API_ERROR"
    TIMEOUT = "TIMEOUT"
    NETWORK_ERROR = "NETWORK_ERROR"
    SERVER_ERROR = "SERVER_ERROR"
    NOT_FOUND = "NOT_FOUND"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"


class Message(BaseModel):
    """A single chat message. Immutable once created."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    role: Role = Field(..., description="Message author: system, user or assistant")
    content: str = Field(..., description="Message text")


class ChatRequest(BaseModel):
    """Request model for a chat completion."""

    model_config = ConfigDict(populate_by_name=True)

    messages: List[Message] = Field(
        ..., description="Recent conversation messages in chronological order"
    )
    temperature: float = Field(
        default=0.7, ge=0, le=2, description="Sampling temperature"
    )
    session_id: Optional[str] = Field(
        default=None,
        alias="sessionId",
        description="Opaque client-generated session identifier",
    )


class ChatSuccessResponse(BaseModel):
    """Successful completion relayed back to the client."""

    success: Literal[True] = True
    content: str = Field(..., description="Assistant reply")
    usage: Optional[Dict[str, Any]] = Field(
        default=None, description="Token usage reported by the completion API"
    )
    timestamp: str = Field(..., description="Response timestamp (ISO format)")


class ChatFailureResponse(BaseModel):
    """Failed completion, with an in-character fallback when available."""

    success: Literal[False] = False
    error: str = Field(..., description="Human-readable error message")
    code: ErrorCode = Field(..., description="Stable error kind")
    fallback: Optional[str] = Field(
        default=None, description="Renderable in-character fallback reply"
    )


class ConversationEndRequest(BaseModel):
    """Full session history reported when the client goes away."""

    model_config = ConfigDict(populate_by_name=True)

    messages: List[Any] = Field(
        default_factory=list, description="Full session history, logged only"
    )
    session_id: Optional[str] = Field(default=None, alias="sessionId")
    timestamp: Optional[str] = Field(default=None)


class ConversationEndResponse(BaseModel):
    success: Literal[True] = True


class HealthResponse(BaseModel):
    """Liveness report; never touches the completion API."""

    status: str = Field(default="healthy")
    timestamp: str
    service: str
    deepseek_api: Literal["configured", "missing"]
