"""Utilities for turning raw model output into an :class:`NpcReply`.

The model is asked for a JSON object, but nothing guarantees it delivers
one.  Everything here degrades gracefully: malformed content is wrapped,
unknown intents collapse to ``none`` and stray target values are coerced
to strings.  Nothing in this module raises to the caller.
"""

from __future__ import annotations

import json
from typing import Any

from loguru import logger

from ..models.chat_response import NpcReply
from ..models.enums import Intent
from .error_handler import UpstreamContentError

MAX_FALLBACK_REPLY_CHARS = 600
DEFAULT_REPLY = "(nods in silence)"

_INTENT_VALUES = {intent.value for intent in Intent}


def parse_reply_payload(content: str) -> Any:
    """Decode the model's message content.

    Raises
    ------
    UpstreamContentError
        If the content is not valid JSON.
    """
    try:
        return json.loads(content)
    except ValueError as exc:
        raise UpstreamContentError(f"Model content is not valid JSON: {exc}") from exc


def fallback_reply(content: str) -> NpcReply:
    """Wrap unparseable model text as an in-character reply."""
    return NpcReply(
        reply=str(content)[:MAX_FALLBACK_REPLY_CHARS],
        intent=Intent.NONE.value,
        targets=[],
    )


def normalise_reply(content: str) -> NpcReply:
    """Build an :class:`NpcReply` from raw model content."""
    try:
        payload = parse_reply_payload(content)
    except UpstreamContentError as exc:
        logger.warning("{}; wrapping raw text ({} characters)", exc, len(content))
        return fallback_reply(content)

    if not isinstance(payload, dict):
        logger.warning("Model returned JSON {} instead of an object", type(payload).__name__)
        payload = {}

    return NpcReply(
        reply=_coerce_reply(payload.get("reply")),
        intent=_coerce_intent(payload.get("intent")),
        targets=_coerce_targets(payload.get("targets")),
    )


def _coerce_reply(value: Any) -> str:
    if isinstance(value, str):
        return value
    logger.debug("Reply missing or not a string ({!r}); using default", value)
    return DEFAULT_REPLY


def _coerce_intent(value: Any) -> str:
    if isinstance(value, str) and value in _INTENT_VALUES:
        return value
    if value is not None:
        logger.debug("Unknown intent {!r}; using none", value)
    return Intent.NONE.value


def _coerce_targets(value: Any) -> list[str]:
    if not isinstance(value, list):
        if value is not None:
            logger.debug("Targets not a list ({!r}); using []", value)
        return []
    return [_target_text(item) for item in value]


def _target_text(item: Any) -> str:
    # Non-string targets keep their JSON spelling (null, 3, true).
    if isinstance(item, str):
        return item
    return json.dumps(item, ensure_ascii=False)
