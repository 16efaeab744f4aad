"""Response models for the NPC chat API."""

from pydantic import BaseModel, ConfigDict, Field

from .enums import Intent


class NpcReply(BaseModel):
    """Normalised NPC reply returned to the game client.

    ``intent`` is always one of the :class:`Intent` values and ``targets``
    is always a list of strings, whatever the model produced.
    """

    model_config = ConfigDict(use_enum_values=True)

    reply: str
    intent: Intent = Intent.NONE
    targets: list[str] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Structured error body."""

    error: str
    detail: str | None = None


class HealthStatus(BaseModel):
    """Health check payload; reports configuration presence, never values."""

    model_config = ConfigDict(populate_by_name=True)

    ok: bool = True
    has_key: bool = Field(..., alias="hasKey")
    has_secret: bool = Field(..., alias="hasSecret")
