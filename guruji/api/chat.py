"""Chat relay API endpoints."""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from guruji.core.logging import setup_logger
from guruji.dependencies import get_relay_service
from guruji.schemas.chat import (
    ChatFailureResponse,
    ChatRequest,
    ChatSuccessResponse,
    ConversationEndRequest,
    ConversationEndResponse,
)
from guruji.services.relay import RelayService

logger = setup_logger(__name__)

router = APIRouter(tags=["chat"], prefix="/api")


@router.post(
    "/chat",
    status_code=status.HTTP_200_OK,
    response_model=ChatSuccessResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ChatFailureResponse},
        status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ChatFailureResponse},
    },
    summary="Relay a conversation to the completion API",
)
async def chat(
    request: ChatRequest,
    relay_service: RelayService = Depends(get_relay_service),
) -> JSONResponse:
    """
    Relay a chat conversation to DeepSeek.

    This endpoint:
    1. Validates that `messages` is a list of `{role, content}` objects
    2. Prepends the Guruji persona prompt if no system message is present
    3. Calls the completion API with a fixed timeout
    4. Returns the reply, or a 503 with an error code and a fallback reply

    Args:
        request: ChatRequest with recent messages, temperature and session id

    Returns:
        JSONResponse: 200 with the reply, or 503 with `fallback`
    """
    result = await relay_service.chat(request)

    if isinstance(result, ChatSuccessResponse):
        return JSONResponse(content=result.model_dump(mode="json"))

    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=result.model_dump(mode="json"),
    )


@router.post(
    "/conversation/end",
    status_code=status.HTTP_200_OK,
    response_model=ConversationEndResponse,
    summary="Report the end of a conversation",
)
async def end_conversation(
    request: Request,
    relay_service: RelayService = Depends(get_relay_service),
) -> ConversationEndResponse:
    """
    Log the end of a conversation for analytics.

    Always succeeds: the client sends this while the page is closing and
    cannot act on an error.
    """
    try:
        payload = await request.json()
        end_request = ConversationEndRequest.model_validate(payload)
    except (ValueError, ValidationError) as e:
        logger.warning(f"Unreadable conversation end payload: {e}")
        end_request = ConversationEndRequest()

    return relay_service.end_conversation(end_request)
