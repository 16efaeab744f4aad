"""Request model for the NPC chat API."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import MessageType, Speaker


class NpcProfile(BaseModel):
    """The NPC the model is asked to voice.

    Only ``name`` and ``persona`` are read; any other fields the game
    client sends along are accepted and ignored.
    """

    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=1, description="Display name of the NPC.")
    persona: str = Field(default="", description="Free-text character description.")

    @field_validator("persona", mode="before")
    @classmethod
    def null_persona(cls, value: Any) -> Any:
        return "" if value is None else value


class HistoryEntry(BaseModel):
    """A single line of the transcript supplied by the caller."""

    model_config = ConfigDict(extra="ignore")

    who: Speaker
    type: MessageType = MessageType.SPEECH
    text: str = ""

    @field_validator("type", mode="before")
    @classmethod
    def null_type(cls, value: Any) -> Any:
        return MessageType.SPEECH if value is None else value

    @field_validator("text", mode="before")
    @classmethod
    def null_text(cls, value: Any) -> Any:
        return "" if value is None else value


class ConversationTurnRequest(BaseModel):
    """Represents one conversation turn sent by the game client.

    ``player`` and ``scene`` are opaque JSON values: they are serialised
    into the prompt as-is and never inspected.  ``history`` is ordered
    oldest to newest and is the only memory the NPC has; nothing is kept
    between calls.  Game clients often send unset optional fields as
    ``null``; those take their defaults.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    system: str | None = Field(
        default=None,
        description="Optional persona override prepended to the system prompt.",
    )
    npc: NpcProfile
    player: Any = None
    scene: Any = None
    message: str = Field(..., min_length=1, description="The player's input for this turn.")
    message_type: MessageType = Field(default=MessageType.SPEECH, alias="messageType")
    history: list[HistoryEntry] = Field(default_factory=list)

    @field_validator("message_type", mode="before")
    @classmethod
    def null_message_type(cls, value: Any) -> Any:
        return MessageType.SPEECH if value is None else value

    @field_validator("history", mode="before")
    @classmethod
    def null_history(cls, value: Any) -> Any:
        return [] if value is None else value
