"""Request handling pipeline for NPC conversation turns.

The ChatService takes one inbound call through a fixed sequence: method
check, shared-secret check, body validation, configuration check, prompt
assembly, the upstream call and reply normalisation.  Every failure is
raised as a :class:`GatewayError` so controllers can stay thin; anything
unexpected is logged and reported as a generic internal error.
"""

from __future__ import annotations

import json
import secrets
from typing import Mapping

from loguru import logger
from pydantic import ValidationError
from starlette.requests import Request

from ..chains.prompt_builder import NpcPromptBuilder
from ..config.app_config import AppConfig, get_app_config
from ..config.llm_config import LlmConfig, get_llm_config
from ..models.chat_request import ConversationTurnRequest
from ..models.chat_response import HealthStatus, NpcReply
from ..utils.cors import API_KEY_HEADER
from ..utils.error_handler import (
    BadRequest,
    ConfigurationError,
    GatewayError,
    InternalError,
    MethodNotAllowed,
    Unauthorized,
)
from ..utils.structured_output import normalise_reply
from .llm_service import LLMService

SUBMIT_METHOD = "POST"


class ChatService:
    """Validates a conversation turn, asks the model, normalises the reply.

    Holds no per-request state.  Configuration objects are read only, so
    a single instance serves concurrent requests.
    """

    def __init__(
        self,
        llm_config: LlmConfig | None = None,
        app_config: AppConfig | None = None,
        llm_service: LLMService | None = None,
    ) -> None:
        self.llm_config = llm_config or get_llm_config()
        self.app_config = app_config or get_app_config()
        self.llm_service = llm_service or LLMService(llm_config=self.llm_config)
        self.prompt_builder = NpcPromptBuilder()

    async def handle(self, method: str, headers: Mapping[str, str], body: bytes) -> NpcReply:
        """Run one inbound call through the pipeline.

        Parameters
        ----------
        method: str
            HTTP method of the inbound request.
        headers: Mapping[str, str]
            Request headers; only the shared-secret header is read.
        body: bytes
            Raw request body, expected to be a JSON object.

        Returns
        -------
        NpcReply
            The normalised reply.

        Raises
        ------
        GatewayError
            One of its subclasses, carrying the status code and error
            body for the caller.
        """
        try:
            self.check_method(method)
            self.authorize(headers)
            turn = self.parse_turn(body)
            return await self.reply(turn)
        except GatewayError:
            raise
        except Exception as exc:
            logger.exception("Unhandled exception during chat processing")
            raise InternalError() from exc

    def check_method(self, method: str) -> None:
        if method.upper() != SUBMIT_METHOD:
            raise MethodNotAllowed()

    def authorize(self, headers: Mapping[str, str]) -> None:
        """Enforce the shared secret when one is configured."""
        if not self.app_config.auth_required:
            return
        supplied = _header(headers, API_KEY_HEADER)
        expected = self.app_config.shared_secret or ""
        if supplied is None or not secrets.compare_digest(
            supplied.encode("utf-8"), expected.encode("utf-8")
        ):
            raise Unauthorized()

    def parse_turn(self, body: bytes) -> ConversationTurnRequest:
        """Decode and validate the request body."""
        if not body:
            raise BadRequest()
        try:
            payload = json.loads(body)
        except ValueError as exc:
            raise BadRequest(detail="Request body is not valid JSON") from exc

        if not _has_required_fields(payload):
            raise BadRequest()

        try:
            return ConversationTurnRequest.model_validate(payload)
        except ValidationError as exc:
            raise BadRequest("Invalid request body", detail=_describe_errors(exc)) from exc

    async def reply(self, turn: ConversationTurnRequest) -> NpcReply:
        """Build the prompt, call the model once and normalise its answer."""
        if not self.llm_service.is_configured:
            raise ConfigurationError()

        logger.info(
            "NPC turn: npc={!r} type={} history={}",
            turn.npc.name,
            turn.message_type.value,
            len(turn.history),
        )
        messages = self.prompt_builder.build_messages(turn)
        logger.debug("System prompt: {!r}", messages[0].content)
        logger.debug("User prompt: {!r}", messages[1].content)

        content = await self.llm_service.complete(messages)
        reply = normalise_reply(content)
        logger.info("NPC reply ready: intent={} targets={}", reply.intent, reply.targets)
        return reply

    def health(self) -> HealthStatus:
        """Report which credentials are configured, never their values."""
        return HealthStatus(
            ok=True,
            has_key=self.llm_config.has_api_key,
            has_secret=self.app_config.auth_required,
        )


def _header(headers: Mapping[str, str], name: str) -> str | None:
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def _has_required_fields(payload: object) -> bool:
    if not isinstance(payload, dict):
        return False
    npc = payload.get("npc")
    return bool(payload.get("message")) and isinstance(npc, dict) and bool(npc.get("name"))


def _describe_errors(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    )


def get_chat_service(request: Request) -> ChatService:
    """Dependency injector for ChatService instances.

    ``create_app`` builds one ChatService from its configuration and
    stores it on ``app.state``; every request shares that instance.
    """
    return request.app.state.chat_service
