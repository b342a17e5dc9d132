"""Chat completion client for the DeepSeek API."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import httpx

from guruji.core.config import Settings
from guruji.core.exceptions import UpstreamError
from guruji.core.logging import setup_logger
from guruji.schemas.chat import ErrorCode, Message

logger = setup_logger(__name__)

STATUS_ERRORS: Dict[int, tuple[ErrorCode, str]] = {
    401: (
        ErrorCode.INVALID_API_KEY,
        "Invalid API key. Please check your DeepSeek API key.",
    ),
    429: (ErrorCode.RATE_LIMITED, "Rate limit exceeded. Please try again later."),
    503: (
        ErrorCode.SERVICE_UNAVAILABLE,
        "DeepSeek service is temporarily unavailable.",
    ),
    504: (
        ErrorCode.SERVICE_UNAVAILABLE,
        "DeepSeek service is temporarily unavailable.",
    ),
}

TIMEOUT_MESSAGE = "Request timeout. The server took too long to respond."
NETWORK_MESSAGE = "Network error. Could not reach DeepSeek API."


def map_status_to_error(status_code: int) -> tuple[ErrorCode, str]:
    """Map an upstream HTTP status to an error code and message."""
    if status_code in STATUS_ERRORS:
        return STATUS_ERRORS[status_code]
    return ErrorCode.API_ERROR, f"API error: {status_code}"


@dataclass
class CompletionResult:
    success: bool
    content: Optional[str] = None
    usage: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    code: Optional[ErrorCode] = None


class CompletionService:
    """Service calling the upstream chat completion API."""

    def __init__(
        self, settings: Settings, client: Optional[httpx.AsyncClient] = None
    ) -> None:
        """
        Initialize the completion service.

        Args:
            settings: Application settings holding the API credentials
            client: Optional HTTP client. One is created (and owned) if omitted.
        """
        self._settings = settings
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=settings.UPSTREAM_TIMEOUT_SECONDS
        )

        if not settings.api_configured:
            logger.error("DEEPSEEK_API_KEY is missing, chat requests will fail")

    def build_payload(
        self, messages: Sequence[Message], temperature: float
    ) -> Dict[str, Any]:
        """Build the upstream request body."""
        return {
            "model": self._settings.DEEPSEEK_MODEL,
            "messages": [message.model_dump(mode="json") for message in messages],
            "temperature": temperature,
            "max_tokens": self._settings.MODEL_MAX_TOKENS,
            "top_p": self._settings.MODEL_TOP_P,
            "frequency_penalty": self._settings.MODEL_FREQUENCY_PENALTY,
            "presence_penalty": self._settings.MODEL_PRESENCE_PENALTY,
            "stream": False,
        }

    async def generate(
        self, messages: Sequence[Message], temperature: float = 0.7
    ) -> CompletionResult:
        """
        Generate a completion for the given conversation.

        Upstream failures never propagate; they are returned as a failed
        result carrying a stable error code.

        Args:
            messages: Conversation to complete, system message included
            temperature: Sampling temperature

        Returns:
            CompletionResult with content and usage, or error and code
        """
        try:
            data = await self._request(self.build_payload(messages, temperature))
            content = self._extract_content(data)
        except UpstreamError as e:
            logger.error(f"DeepSeek API error: {e.code.value}: {e.message} {e.details}")
            return CompletionResult(success=False, error=e.message, code=e.code)

        usage = data.get("usage")
        if not isinstance(usage, dict):
            usage = None
        return CompletionResult(success=True, content=content, usage=usage)

    async def _request(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        if not self._settings.api_configured:
            code, message = STATUS_ERRORS[401]
            raise UpstreamError(message, code=code, details={"reason": "missing key"})

        try:
            response = await self._client.post(
                self._settings.DEEPSEEK_API_URL,
                json=payload,
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {self._settings.DEEPSEEK_API_KEY}",
                },
                timeout=self._settings.UPSTREAM_TIMEOUT_SECONDS,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            code, message = map_status_to_error(e.response.status_code)
            raise UpstreamError(
                message, code=code, details={"body": e.response.text[:500]}
            ) from e
        except httpx.TimeoutException as e:
            raise UpstreamError(TIMEOUT_MESSAGE, code=ErrorCode.TIMEOUT) from e
        except httpx.RequestError as e:
            raise UpstreamError(
                NETWORK_MESSAGE, code=ErrorCode.NETWORK_ERROR, details={"error": str(e)}
            ) from e

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(
                "Invalid response structure from DeepSeek", code=ErrorCode.API_ERROR
            ) from e
        if not isinstance(data, dict):
            raise UpstreamError(
                "Invalid response structure from DeepSeek", code=ErrorCode.API_ERROR
            )
        return data

    def _extract_content(self, data: Dict[str, Any]) -> str:
        choices: List[Dict[str, Any]] = data.get("choices") or []
        try:
            content = choices[0]["message"]["content"]
        except (IndexError, KeyError, TypeError):
            content = None
        if not isinstance(content, str):
            raise UpstreamError(
                "Invalid response structure from DeepSeek", code=ErrorCode.API_ERROR
            )
        return content

    async def aclose(self) -> None:
        """Close the HTTP client if this service created it."""
        if self._owns_client:
            await self._client.aclose()
