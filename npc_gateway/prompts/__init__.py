"""Prompt text used to build the upstream chat exchange."""

from .system import NPC_SYSTEM_PROMPT_LINES  # noqa: F401
from .turn import EMPTY_TRANSCRIPT, TURN_HUMAN_PROMPT  # noqa: F401
