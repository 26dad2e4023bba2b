"""
Async client for an OpenAI-compatible chat-completion endpoint.
"""
from typing import Any, AsyncIterator, Optional

import httpx

from support_desk.core.config import Settings
from support_desk.core.errors import ConfigurationError, UpstreamError
from support_desk.llm.sse import iter_sse_tokens
from support_desk.utils.logger import get_logger

logger = get_logger(__name__)

MISSING_KEY_MESSAGE = "Missing OPENAI_API_KEY"
UPSTREAM_ERROR_MESSAGE = "OpenAI error"


class ChatCompletionClient:
    """
    Thin wrapper around ``POST /chat/completions``.

    A fresh ``httpx.AsyncClient`` is opened per call so nothing is shared
    between requests. Pass ``transport`` to route calls elsewhere (tests use
    ``httpx.MockTransport``).
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "ChatCompletionClient":
        if not settings.OPENAI_API_KEY:
            raise ConfigurationError(MISSING_KEY_MESSAGE)
        return cls(
            api_key=settings.OPENAI_API_KEY,
            model=settings.OPENAI_MODEL,
            base_url=settings.OPENAI_BASE_URL,
            timeout=settings.UPSTREAM_TIMEOUT,
            transport=transport,
        )

    def _http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Authorization": f"Bearer {self.api_key}"},
            timeout=self.timeout,
            transport=self.transport,
        )

    def _payload(
        self,
        messages: list[dict[str, str]],
        temperature: float,
        **extra: Any,
    ) -> dict[str, Any]:
        payload = {"model": self.model, "temperature": temperature, "messages": messages}
        payload.update({k: v for k, v in extra.items() if v is not None})
        return payload

    async def complete(
        self,
        messages: list[dict[str, str]],
        temperature: float,
        response_format: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """Run one non-streaming completion and return the decoded body."""
        payload = self._payload(messages, temperature, response_format=response_format)
        logger.debug(f"Chat completion: model={self.model}, messages={len(messages)}")
        try:
            async with self._http() as http:
                response = await http.post("/chat/completions", json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Chat completion transport failure: {e}")
            raise UpstreamError(UPSTREAM_ERROR_MESSAGE, details=str(e)) from e

        if not response.is_success:
            logger.error(f"Chat completion failed with status {response.status_code}")
            raise UpstreamError(UPSTREAM_ERROR_MESSAGE, details=response.text)
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(UPSTREAM_ERROR_MESSAGE, details=response.text) from e

    async def open_stream(
        self,
        messages: list[dict[str, str]],
        temperature: float,
    ) -> AsyncIterator[str]:
        """
        Start a streaming completion.

        The upstream status is checked before anything is returned, so a
        failing upstream raises UpstreamError here instead of mid-stream.
        The returned generator owns the connection and closes it when it is
        exhausted or closed early.
        """
        payload = self._payload(messages, temperature, stream=True)
        http = self._http()
        try:
            request = http.build_request("POST", "/chat/completions", json=payload)
            response = await http.send(request, stream=True)
        except httpx.HTTPError as e:
            await http.aclose()
            logger.error(f"Chat stream transport failure: {e}")
            raise UpstreamError(UPSTREAM_ERROR_MESSAGE, details=str(e)) from e
        except BaseException:
            await http.aclose()
            raise

        if not response.is_success:
            body = await response.aread()
            await response.aclose()
            await http.aclose()
            logger.error(f"Chat stream failed with status {response.status_code}")
            raise UpstreamError(
                UPSTREAM_ERROR_MESSAGE, details=body.decode("utf-8", errors="replace")
            )

        return self._relay(http, response)

    async def _relay(
        self,
        http: httpx.AsyncClient,
        response: httpx.Response,
    ) -> AsyncIterator[str]:
        try:
            async for token in iter_sse_tokens(response.aiter_lines()):
                yield token
        except httpx.HTTPError as e:
            logger.error(f"Chat stream interrupted: {e}")
            raise UpstreamError(UPSTREAM_ERROR_MESSAGE, details=str(e)) from e
        finally:
            await response.aclose()
            await http.aclose()


def message_content(data: dict[str, Any]) -> Optional[str]:
    """``choices[0].message.content`` of a completion body, if present."""
    choices = data.get("choices") if isinstance(data, dict) else None
    if not isinstance(choices, list) or not choices:
        return None
    message = choices[0].get("message") if isinstance(choices[0], dict) else None
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    return content if isinstance(content, str) else None
