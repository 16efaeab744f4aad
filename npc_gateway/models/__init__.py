"""Expose commonly used model classes at the package level.

Importing these classes here allows consumers to write concise imports like::

    from npc_gateway.models import ConversationTurnRequest, NpcReply

These names refer to the underlying Pydantic models defined in their
respective modules.
"""

from .chat_request import ConversationTurnRequest, HistoryEntry, NpcProfile  # noqa: F401
from .chat_response import ErrorResponse, HealthStatus, NpcReply  # noqa: F401
from .enums import Intent, MessageType, Speaker  # noqa: F401
