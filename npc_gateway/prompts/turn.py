"""Prompts describing the current conversation turn."""

EMPTY_TRANSCRIPT = "(none)"

TURN_HUMAN_PROMPT = (
    "NPC Persona:\n{persona}\n\n"
    "Recent Transcript (oldest->newest):\n{transcript}\n\n"
    "Current Scene (JSON):\n{scene_json}\n\n"
    "Incoming {message_tag}: {message}\n\n"
    "Respond as JSON ONLY with: "
    "{{ reply: string, intent: 'unlock_gate'|'give_item'|'advance_quest'|'none', targets?: string[] }}"
)
