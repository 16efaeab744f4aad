"""LangChain prompt assembly for a single NPC conversation turn."""

from __future__ import annotations

import json
from typing import Any, Iterable

from langchain_core.messages import BaseMessage
from langchain_core.prompts import ChatPromptTemplate

from ..models.chat_request import ConversationTurnRequest, HistoryEntry
from ..models.enums import MessageType, Speaker
from ..prompts import EMPTY_TRANSCRIPT, NPC_SYSTEM_PROMPT_LINES, TURN_HUMAN_PROMPT

PLAYER_TAG = "PLAYER"
PLAYER_ACTION_TAG = "PLAYER_ACTION"
NPC_TAG = "NPC"


def transcript_tag(who: Speaker, message_type: MessageType) -> str:
    """Return the speaker tag used for a transcript line."""
    if who == Speaker.PLAYER:
        return PLAYER_ACTION_TAG if message_type == MessageType.ACTION else PLAYER_TAG
    return NPC_TAG


def render_transcript(history: Iterable[HistoryEntry]) -> str:
    """Render history oldest to newest, one ``TAG: text`` line per entry."""
    lines = [f"{transcript_tag(entry.who, entry.type)}: {entry.text}" for entry in history]
    return "\n".join(lines) if lines else EMPTY_TRANSCRIPT


def scene_snapshot(turn: ConversationTurnRequest) -> str:
    """Serialise the caller's scene and player objects for the prompt.

    Keys the caller never sent are left out rather than rendered as null.
    """
    snapshot: dict[str, Any] = {}
    for key in ("scene", "player"):
        if key in turn.model_fields_set:
            snapshot[key] = getattr(turn, key)
    return json.dumps(snapshot, indent=2, ensure_ascii=False)


class NpcPromptBuilder:
    """Builds the system/user message pair sent to the model."""

    def __init__(self) -> None:
        self._prompt_template = ChatPromptTemplate.from_messages(
            [
                ("system", "{system_prompt}"),
                ("human", "{user_prompt}"),
            ]
        )

    def build_system_prompt(self, turn: ConversationTurnRequest) -> str:
        """Caller override (if any) followed by the fixed persona instructions."""
        parts = [turn.system or "", *NPC_SYSTEM_PROMPT_LINES]
        return "\n".join(part for part in parts if part)

    def build_user_prompt(self, turn: ConversationTurnRequest) -> str:
        message_tag = (
            PLAYER_ACTION_TAG if turn.message_type == MessageType.ACTION else PLAYER_TAG
        )
        return TURN_HUMAN_PROMPT.format(
            persona=turn.npc.persona,
            transcript=render_transcript(turn.history),
            scene_json=scene_snapshot(turn),
            message_tag=message_tag,
            message=turn.message,
        )

    def build_messages(self, turn: ConversationTurnRequest) -> list[BaseMessage]:
        return self._prompt_template.format_messages(
            system_prompt=self.build_system_prompt(turn),
            user_prompt=self.build_user_prompt(turn),
        )
