"""
Conversation-level analysis: focus sender, layout position, time and content hints.
"""
from typing import Iterable, List, Optional, Sequence
import logging
import re

from chat_transcript.models.config import EngineConfig
from chat_transcript.models.data_models import (
    ChatAnalysis,
    ChatMessageType,
    ChatPosition,
    ClassifiedBlock,
    ScreenGeometry,
    Sender,
    Transcript,
)


logger = logging.getLogger(__name__)

TIME_INFO_PATTERNS = (
    re.compile(r"(?:오전|오후)\s*\d{1,2}:\d{2}"),
    re.compile(r"\d{1,2}:\d{2}"),
    re.compile(r"\d{1,2}시\s*\d{1,2}분"),
    re.compile(r"\d{4}[-/]\d{1,2}[-/]\d{1,2}"),
)

_EMOJI = re.compile("[\U0001F600-\U0001F64F\U0001F300-\U0001F5FF\U0001F680-\U0001F6FF☀-➿]")

# Checked in order; the first group with a hit decides the type. None stands for any emoji.
MESSAGE_TYPE_KEYWORDS = (
    (ChatMessageType.IMAGE, ("사진", "이미지", "그림", "photo")),
    (ChatMessageType.FILE, ("파일", "첨부", "다운로드", "file")),
    (ChatMessageType.EMOJI, None),
    (ChatMessageType.STICKER, ("스티커", "sticker")),
    (ChatMessageType.SYSTEM, ("입장", "퇴장", "초대")),
    (ChatMessageType.NOTIFICATION, ("알림", "notification")),
)

_POSITION_MATCH = {
    Sender.ME: ChatPosition.RIGHT,
    Sender.OTHER: ChatPosition.LEFT,
    Sender.SYSTEM: ChatPosition.CENTER,
}

LONG_TEXT_CHARS = 50
SHORT_TEXT_CHARS = 10


def extract_time_info(text: str) -> Optional[str]:
    """First time or date expression in ``text``, trying the patterns in order."""
    for pattern in TIME_INFO_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group()
    return None


def analyze_message_type(text: str) -> ChatMessageType:
    lowered = text.lower()
    for message_type, keywords in MESSAGE_TYPE_KEYWORDS:
        hit = _EMOJI.search(text) if keywords is None else any(k in lowered for k in keywords)
        if hit:
            return message_type
    return ChatMessageType.TEXT


def analyze_position(blocks: Iterable[ClassifiedBlock], screen: ScreenGeometry, config: Optional[EngineConfig] = None) -> ChatPosition:
    """Majority vote of block centers over the left / center / right thirds."""
    cfg = config or EngineConfig()
    left_limit = screen.width * cfg.position_left_ratio
    right_limit = screen.width * cfg.position_right_ratio
    left = right = center = 0
    for cb in blocks:
        x = cb.box.center_x
        if x < left_limit:
            left += 1
        elif x > right_limit:
            right += 1
        else:
            center += 1

    if right > left and right > center:
        return ChatPosition.RIGHT
    if left > right and left > center:
        return ChatPosition.LEFT
    if center > left and center > right:
        return ChatPosition.CENTER
    return ChatPosition.UNKNOWN


def sender_confidence(sender: Sender, position: ChatPosition, text: str, time_info: Optional[str]) -> float:
    confidence = 0.5
    if _POSITION_MATCH.get(sender) is position:
        confidence += 0.3
    if len(text) > LONG_TEXT_CHARS:
        confidence += 0.1
    elif len(text) < SHORT_TEXT_CHARS:
        confidence -= 0.1
    if time_info is not None:
        confidence += 0.1
    return round(min(max(confidence, 0.0), 1.0), 4)


class ChatAnalyzer:
    """Builds a ChatAnalysis from a transcript and the classified blocks."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    def analyze(self, transcript: Transcript, blocks: Sequence[ClassifiedBlock], screen: ScreenGeometry) -> ChatAnalysis:
        focus = transcript.messages[-1] if transcript.messages else None
        sender = focus.sender if focus is not None else Sender.UNKNOWN
        focus_text = focus.text if focus is not None else ""

        content: List[ClassifiedBlock] = [b for b in blocks if not b.is_noise]
        position = analyze_position(content, screen, self.config)

        # timestamps are classified as noise, so search every block
        ordered_text = "\n".join(b.text for b in sorted(blocks, key=lambda b: (b.box.top, b.box.left)))
        time_info = extract_time_info(ordered_text)

        message_type = analyze_message_type(transcript.body_text())
        confidence = sender_confidence(sender, position, focus_text, time_info)

        logger.debug(f"Chat analysis: sender={sender.name}, position={position.name}, time={time_info}")
        return ChatAnalysis(
            sender=sender,
            confidence=confidence,
            position=position,
            time_info=time_info,
            message_type=message_type,
            is_group_chat=transcript.is_group_chat,
            participants=list(transcript.participants),
            other_person_name=transcript.other_person_name,
        )
