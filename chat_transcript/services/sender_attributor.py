"""
Sender attribution: maps bubbles to ME / OTHER / SYSTEM / UNKNOWN messages.
"""
from typing import Iterable, List, Optional
import logging
import re

from chat_transcript.models.config import EngineConfig
from chat_transcript.models.data_models import Bubble, ME_LABEL, Message, Sender, Transcript
from chat_transcript.services.bubble_assembler import merge_messages


logger = logging.getLogger(__name__)

_PARTICIPANT_PATTERNS = (
    re.compile(r"([가-힣]{2,4})(?:님|씨|선생님)"),
    re.compile(r"([A-Za-z]{2,10})(?:님|씨|선생님)"),
    re.compile(r"@([가-힣a-zA-Z0-9_]+)"),
)


def extract_participants(text: str) -> List[str]:
    """Names addressed with an honorific suffix or an @mention, in order of appearance."""
    found = []
    for pattern in _PARTICIPANT_PATTERNS:
        for match in pattern.finditer(text):
            found.append((match.start(), match.group(1)))
    found.sort(key=lambda item: item[0])
    return _unique(name for _, name in found)


def _unique(items: Iterable[str]) -> List[str]:
    seen = set()
    result = []
    for item in items:
        if item and item not in seen:
            seen.add(item)
            result.append(item)
    return result


class SenderAttributor:
    """Resolves bubble speakers and conversation-level facts."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    def is_system_notice(self, text: str) -> bool:
        return any(keyword in text for keyword in self.config.system_notice_keywords)

    def resolve(self, bubble: Bubble) -> Message:
        """Map one bubble to a message; system vocabulary wins over position."""
        if self.is_system_notice(bubble.text):
            return Message(Sender.SYSTEM, bubble.text, None, bubble.y)
        if not bubble.is_left_side or bubble.sender_name == ME_LABEL:
            return Message(Sender.ME, bubble.text, None, bubble.y)
        if bubble.sender_name:
            return Message(Sender.OTHER, bubble.text, bubble.sender_name, bubble.y)
        return Message(Sender.UNKNOWN, bubble.text, None, bubble.y)

    def attribute(self, bubbles: Iterable[Bubble]) -> Transcript:
        resolved = [
            self.resolve(b) for b in bubbles
            if b.text.strip() and b.sender_name != b.text
        ]
        messages = merge_messages(resolved)

        other_names = _unique(m.sender_name for m in messages if m.sender is Sender.OTHER)
        other_person_name = other_names[0] if other_names else None

        body = "\n".join(m.text for m in messages)
        is_group_chat = len(other_names) >= 2 or any(ind in body for ind in self.config.group_chat_indicators)
        participants = _unique(other_names + extract_participants(body))

        counts = {s: sum(1 for m in messages if m.sender is s) for s in Sender}
        logger.info(
            f"Attributed {len(messages)} messages "
            f"(me={counts[Sender.ME]}, other={counts[Sender.OTHER]}, "
            f"system={counts[Sender.SYSTEM]}, unknown={counts[Sender.UNKNOWN]}), group={is_group_chat}"
        )
        return Transcript(
            messages=messages,
            other_person_name=other_person_name,
            is_group_chat=is_group_chat,
            participants=participants,
        )
