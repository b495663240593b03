"""
Core data models for the chat transcript engine.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class BlockRole(Enum):
    """Role assigned to an OCR block by the classifier."""
    NAME_CANDIDATE = "name_candidate"
    MESSAGE = "message"
    NOISE = "noise"


class Sender(Enum):
    """Speaker of a transcript message."""
    ME = "me"
    OTHER = "other"
    UNKNOWN = "unknown"
    SYSTEM = "system"


class TextType(Enum):
    """Coarse category of the recognized text."""
    QUESTION = "question"
    URL = "url"
    PHONE_NUMBER = "phone_number"
    EMAIL = "email"
    DATE_TIME = "date_time"
    NUMBER = "number"
    CODE = "code"
    MESSAGE = "message"
    GENERAL_TEXT = "general_text"


class EntityType(Enum):
    EMAIL = "email"
    PHONE = "phone"
    URL = "url"
    HASHTAG = "hashtag"
    MENTION = "mention"
    MONEY = "money"


class ChatPosition(Enum):
    """Dominant horizontal position of the captured blocks."""
    LEFT = "left"
    RIGHT = "right"
    CENTER = "center"
    UNKNOWN = "unknown"


class ChatMessageType(Enum):
    """Kind of chat content, guessed from keywords."""
    TEXT = "text"
    IMAGE = "image"
    FILE = "file"
    EMOJI = "emoji"
    STICKER = "sticker"
    SYSTEM = "system"
    NOTIFICATION = "notification"


def _require(data: Dict[str, Any], key: str, owner: str) -> Any:
    if not isinstance(data, dict):
        raise ValueError(f"{owner} must be a mapping, got {type(data).__name__}")
    if key not in data or data[key] is None:
        raise ValueError(f"{owner} is missing required field '{key}'")
    return data[key]


def _as_number(value: Any, key: str, owner: str) -> float:
    # bool is an int subclass but never a valid coordinate
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{owner}.{key} must be numeric, got {value!r}")
    return value


@dataclass(frozen=True)
class Rect:
    """Axis-aligned pixel rectangle in the cropped image's coordinate space."""
    left: int
    top: int
    right: int
    bottom: int

    @property
    def width(self) -> int:
        return self.right - self.left

    @property
    def height(self) -> int:
        return self.bottom - self.top

    @property
    def center_x(self) -> float:
        return (self.left + self.right) / 2

    @property
    def center_y(self) -> float:
        return (self.top + self.bottom) / 2

    @property
    def area(self) -> int:
        return max(self.width, 0) * max(self.height, 0)

    @property
    def is_degenerate(self) -> bool:
        return self.width <= 0 or self.height <= 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Rect":
        values = [int(_as_number(_require(data, k, "box"), k, "box")) for k in ("left", "top", "right", "bottom")]
        return cls(*values)


@dataclass(frozen=True)
class TextBlock:
    """One OCR-recognized unit of text with its bounding box and confidences."""
    text: str
    box: Rect
    avg_line_height: float = 0.0
    # None means the recognizer reported no confidence for that element
    element_confidences: Tuple[Optional[float], ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TextBlock":
        """Build a block from the OCR provider contract.

        Raises:
            ValueError: when a required field is missing or not numeric
        """
        text = _require(data, "text", "TextBlock")
        if not isinstance(text, str):
            raise ValueError(f"TextBlock.text must be a string, got {text!r}")
        box = Rect.from_dict(_require(data, "box", "TextBlock"))
        line_height = _as_number(data.get("avgLineHeight", 0.0), "avgLineHeight", "TextBlock")
        raw_conf = data.get("elementConfidences") or []
        if not isinstance(raw_conf, (list, tuple)):
            raise ValueError(f"TextBlock.elementConfidences must be a list, got {raw_conf!r}")
        confidences = tuple(
            None if c is None else float(_as_number(c, "elementConfidences", "TextBlock"))
            for c in raw_conf
        )
        return cls(text=text, box=box, avg_line_height=float(line_height), element_confidences=confidences)


@dataclass(frozen=True)
class ScreenGeometry:
    """Per-call screen dimensions supplied by the caller."""
    width: int
    height: int
    excluded_top_band_height: int = 0

    @property
    def center_x(self) -> float:
        return self.width / 2

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScreenGeometry":
        width = _as_number(_require(data, "screenWidth", "screen"), "screenWidth", "screen")
        height = _as_number(_require(data, "screenHeight", "screen"), "screenHeight", "screen")
        band = _as_number(data.get("excludedTopBandHeight", 0), "excludedTopBandHeight", "screen")
        return cls(width=int(width), height=int(height), excluded_top_band_height=int(band))


@dataclass(frozen=True)
class ClassifiedBlock:
    """A text block labelled with its role and layout flags."""
    block: TextBlock
    role: BlockRole
    is_left_side: bool
    is_small_font: bool
    noise_reason: Optional[str] = None
    # 1.0 for a surname-initial or 3+ char name, 0.6 otherwise, 0.0 for non-names
    name_confidence: float = 0.0

    @property
    def text(self) -> str:
        return self.block.text

    @property
    def box(self) -> Rect:
        return self.block.box

    @property
    def is_noise(self) -> bool:
        return self.role is BlockRole.NOISE


@dataclass(frozen=True)
class Bubble:
    """A provisional speech unit before sender resolution and merging."""
    text: str
    y: int
    sender_name: Optional[str]
    is_left_side: bool = True


@dataclass(frozen=True)
class Message:
    """A sender-attributed message after consecutive merging."""
    sender: Sender
    text: str
    sender_name: Optional[str] = None
    y: int = 0

    def speaker_key(self) -> Tuple[Sender, Optional[str]]:
        """Key used to decide whether two adjacent messages belong together."""
        return self.sender, self.sender_name


# Labels written in front of each message in the transcript string
ME_LABEL = "나"
OTHER_FALLBACK_LABEL = "상대방"
UNKNOWN_LABEL = "미분류"
SYSTEM_LABEL = "시스템"


@dataclass
class Transcript:
    """Ordered, merged and sender-attributed messages of one capture."""
    messages: List[Message] = field(default_factory=list)
    other_person_name: Optional[str] = None
    is_group_chat: bool = False
    participants: List[str] = field(default_factory=list)

    @staticmethod
    def label_for(message: Message) -> str:
        if message.sender is Sender.ME:
            return ME_LABEL
        if message.sender is Sender.SYSTEM:
            return SYSTEM_LABEL
        if message.sender is Sender.OTHER:
            return message.sender_name or OTHER_FALLBACK_LABEL
        return UNKNOWN_LABEL

    def to_text(self) -> str:
        """Render as ``[label]\\ntext`` blocks separated by blank lines."""
        return "\n\n".join(f"[{self.label_for(m)}]\n{m.text}" for m in self.messages)

    def body_text(self) -> str:
        """Message bodies only, without speaker labels."""
        return "\n".join(m.text for m in self.messages)

    @property
    def is_empty(self) -> bool:
        return not self.messages


@dataclass(frozen=True)
class TextEntity:
    """An entity found in the transcript; end_index is exclusive."""
    text: str
    type: EntityType
    start_index: int
    end_index: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "type": self.type.name,
            "startIndex": self.start_index,
            "endIndex": self.end_index,
        }


@dataclass
class ChatAnalysis:
    """Speaker, layout and context summary for the captured conversation."""
    sender: Sender = Sender.UNKNOWN
    confidence: float = 0.5
    position: ChatPosition = ChatPosition.UNKNOWN
    time_info: Optional[str] = None
    message_type: ChatMessageType = ChatMessageType.TEXT
    is_group_chat: bool = False
    participants: List[str] = field(default_factory=list)
    other_person_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sender": self.sender.name,
            "confidence": self.confidence,
            "position": self.position.name,
            "timeInfo": self.time_info,
            "messageType": self.message_type.name,
            "isGroupChat": self.is_group_chat,
            "participants": list(self.participants),
            "otherPersonName": self.other_person_name,
        }


@dataclass
class OcrAnalysis:
    """Final engine output handed to the presentation and network layers."""
    original_text: str
    text_type: TextType
    confidence: float
    language: str
    suggestions: List[str] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)
    entities: List[TextEntity] = field(default_factory=list)
    chat_analysis: Optional[ChatAnalysis] = None
    # Not part of the serialized record; kept for callers that render per-message views
    transcript: Optional[Transcript] = field(default=None, repr=False, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable record with camelCase keys."""
        return {
            "originalText": self.original_text,
            "textType": self.text_type.name,
            "confidence": self.confidence,
            "language": self.language,
            "suggestions": list(self.suggestions),
            "keywords": list(self.keywords),
            "entities": [e.to_dict() for e in self.entities],
            "chatAnalysis": self.chat_analysis.to_dict() if self.chat_analysis else None,
        }
