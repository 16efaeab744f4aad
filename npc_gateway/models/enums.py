"""Enumerations used across models."""

from enum import Enum


class Speaker(str, Enum):
    """Who produced a transcript line."""

    PLAYER = "player"
    NPC = "npc"


class MessageType(str, Enum):
    """Enum for the kind of player input.

    ``SPEECH`` is something said aloud, ``ACTION`` is something done in the
    scene (drawing a sword, handing over a coin) that the NPC should react
    to in character.
    """

    SPEECH = "speech"
    ACTION = "action"


class Intent(str, Enum):
    """Game-state effect implied by an NPC reply.

    The calling game engine maps these onto state changes, for example
    opening a gate when ``UNLOCK_GATE`` comes back.
    """

    UNLOCK_GATE = "unlock_gate"
    GIVE_ITEM = "give_item"
    ADVANCE_QUEST = "advance_quest"
    NONE = "none"
