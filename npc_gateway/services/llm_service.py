"""Service encapsulating the single call to the language model.

Uses LangChain's ChatOpenAI integration to talk to an OpenAI-compatible
chat-completions endpoint.  Each inbound turn produces exactly one
upstream request: retries are disabled and the wait is bounded by the
configured timeout.
"""

from __future__ import annotations

from typing import Any, Sequence

import httpx
from langchain_core.messages import BaseMessage
from langchain_core.runnables import Runnable
from langchain_openai import ChatOpenAI
from loguru import logger
from openai import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    ContentFilterFinishReasonError,
    LengthFinishReasonError,
)

from ..config.llm_config import LlmConfig, get_llm_config
from ..utils.error_handler import ConfigurationError, UpstreamError

TEMPERATURE = 0.7
RESPONSE_FORMAT = {"type": "json_object"}
EMPTY_CONTENT = "{}"


class LLMService:
    """Service for sending an NPC prompt to the language model.

    The underlying :class:`~langchain_openai.ChatOpenAI` model is built
    from :class:`LlmConfig` when an API key is configured.  Tests (or an
    alternative provider) can pass any runnable with an ``ainvoke`` method
    as ``llm`` instead.
    """

    def __init__(
        self,
        llm_config: LlmConfig | None = None,
        llm: Runnable | None = None,
        http_async_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.llm_config = llm_config or get_llm_config()
        self._http_async_client = http_async_client
        self.llm = llm if llm is not None else self._build_llm()

    def _build_llm(self) -> Runnable | None:
        if not self.llm_config.has_api_key:
            logger.warning("OPENAI_API_KEY is not set; chat requests will be rejected")
            return None

        llm_kwargs: dict[str, object] = {
            "api_key": self.llm_config.api_key,
            "model": self.llm_config.model,
            "temperature": TEMPERATURE,
            "timeout": self.llm_config.timeout,
            "max_retries": 0,
        }
        if self.llm_config.base_url:
            llm_kwargs["base_url"] = self.llm_config.base_url
        if self._http_async_client is not None:
            llm_kwargs["http_async_client"] = self._http_async_client

        logger.debug("Initialising ChatOpenAI model={}", self.llm_config.model)
        return ChatOpenAI(**llm_kwargs).bind(response_format=RESPONSE_FORMAT)

    @property
    def is_configured(self) -> bool:
        return self.llm is not None

    async def complete(self, messages: Sequence[BaseMessage]) -> str:
        """Send the message exchange and return the first choice's content.

        Returns
        -------
        str
            The model's message content, or ``"{}"`` when it is empty.

        Raises
        ------
        ConfigurationError
            If no model is configured.
        UpstreamError
            If the provider returns a non-success status, cannot be reached
            or times out.
        """
        if self.llm is None:
            raise ConfigurationError()

        try:
            response = await self.llm.ainvoke(list(messages))
        except APIStatusError as exc:
            logger.error("LLM provider returned HTTP {}", exc.status_code)
            raise UpstreamError(detail=_status_detail(exc)) from exc
        except APITimeoutError as exc:
            logger.error("LLM provider timed out after {}s", self.llm_config.timeout)
            raise UpstreamError(detail="LLM provider timed out") from exc
        except APIConnectionError as exc:
            logger.error("Cannot connect to LLM provider: {}", exc)
            raise UpstreamError(detail="Cannot connect to LLM provider") from exc
        except LengthFinishReasonError as exc:
            logger.warning("LLM reply cut off at the token limit; normalising partial content")
            return _completion_text(exc) or EMPTY_CONTENT
        except ContentFilterFinishReasonError:
            logger.warning("LLM reply stopped by the provider's content filter")
            return EMPTY_CONTENT

        content = _message_text(getattr(response, "content", ""))
        logger.debug("LLM content received ({} characters)", len(content))
        return content or EMPTY_CONTENT


def _status_detail(exc: APIStatusError) -> str:
    """Best-effort diagnostic text from a failed provider response."""
    try:
        return exc.response.text
    except httpx.ResponseNotRead:
        return exc.message


def _completion_text(exc: LengthFinishReasonError) -> str:
    completion = getattr(exc, "completion", None)
    if completion is None or not completion.choices:
        return ""
    return completion.choices[0].message.content or ""


def _message_text(content: Any) -> str:
    # Content may arrive as a list of parts; keep only the text ones.
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(str(part.get("text", "")))
        return "".join(parts)
    return ""
