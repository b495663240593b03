"""
Configuration data models for the chat transcript engine.
"""
from dataclasses import dataclass, field, fields, replace
from typing import Dict, Any, Tuple
import math


DEFAULT_UI_SYMBOLS: Tuple[str, ...] = ("←", "→", "+", "×", "•", "⋮", "☰", "[]", "[", "]", "1")

DEFAULT_UI_LABELS: Tuple[str, ...] = (
    "메시지 입력", "검색", "전송", "답장", "채팅", "통화", "설정",
    "사진", "동영상", "파일", "음성", "위치", "연락처",
    "읽음", "안읽음", "안 읽음", "확인", "취소", "저장", "삭제",
)

# Words that look like 2-4 syllable names but are ordinary chat vocabulary
DEFAULT_COMMON_WORDS: Tuple[str, ...] = (
    # reactions
    "안녕", "좋아", "싫어", "그래", "응", "어", "네", "아니", "맞아", "틀려",
    "하하", "ㅋㅋ", "ㅎㅎ", "ㅠㅠ", "ㅜㅜ",
    # connectives and adverbs
    "그래서", "그런데", "근데", "그럼", "그치", "맞지", "아니지", "정말", "진짜",
    "완전", "너무", "엄청", "되게", "참", "좀", "약간", "조금",
    "오늘", "내일", "어제", "지금", "나중", "이따", "곧", "다음",
    "여기", "거기", "저기", "어디", "언제", "누구", "뭐", "왜", "어떻게",
    # frequent fragments
    "그래야", "여자", "여기서", "이제", "미혼", "이야", "이네", "얼마",
    "안남음", "다음주", "다음주네", "유부남", "사람들", "프로필", "죄다", "자식",
    "로서", "화가", "난다", "준비는", "되가나", "그룹채팅", "리마인드", "요번주", "일요일",
    # UI words
    "메시지", "입력", "검색", "전송", "답장", "채팅", "통화", "설정",
    "사진", "동영상", "파일", "음성", "알림", "확인", "취소", "저장",
    "나", "상대방",
)

DEFAULT_SURNAMES: Tuple[str, ...] = (
    "김", "이", "박", "최", "정", "강", "조", "윤", "장", "임",
    "한", "오", "서", "신", "권", "황", "안", "송", "전", "고",
    "문", "양", "손", "배", "백", "허", "유", "남", "심", "노",
    "하", "곽", "성", "차", "주", "우", "구", "원", "민", "진",
)

DEFAULT_SYSTEM_NOTICE_KEYWORDS: Tuple[str, ...] = ("입장", "퇴장", "초대", "나갔습니다")

DEFAULT_GROUP_CHAT_INDICATORS: Tuple[str, ...] = ("님", "단체", "여러분", "다들")

_BOOL_WORDS = {"true": True, "yes": True, "on": True, "1": True,
               "false": False, "no": False, "off": False, "0": False}


def coerce_setting(name: str, value: Any, default: Any) -> Any:
    """Convert a raw config value to the type of ``default``.

    Raises:
        ValueError: when ``value`` cannot be read as that type
    """
    if isinstance(default, tuple):
        if value is None:
            return ()
        if isinstance(value, str):
            return (value,)
        if not isinstance(value, (list, tuple)):
            raise ValueError(f"{name} must be a list of strings, got {value!r}")
        return tuple(str(v) for v in value)

    if isinstance(default, bool):
        if isinstance(value, bool):
            return value
        word = str(value).strip().lower()
        if word not in _BOOL_WORDS:
            raise ValueError(f"{name} must be true or false, got {value!r}")
        return _BOOL_WORDS[word]

    if isinstance(default, (int, float)):
        if isinstance(value, bool):
            raise ValueError(f"{name} must be a number, got {value!r}")
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise ValueError(f"{name} must be a number, got {value!r}") from None
        if not math.isfinite(number):
            raise ValueError(f"{name} must be finite, got {value!r}")
        if isinstance(default, int):
            if not number.is_integer():
                raise ValueError(f"{name} must be a whole number, got {value!r}")
            return int(number)
        return number

    if value is None:
        return ""
    return str(value)


@dataclass(frozen=True)
class EngineConfig:
    """Tunable thresholds and vocabularies used by every pipeline stage.

    The pixel thresholds were tuned against one messenger's layout at
    common phone densities; treat them as starting points.
    """
    # Blocks whose average line height is below this are considered small font
    small_font_threshold_px: float = 40.0
    # Maximum vertical distance between a name block and its message block
    name_pair_max_gap_px: int = 100
    # Pairing a name with the block below it requires the name to be small font
    name_pair_requires_small_font: bool = True
    # Used for every element whose recognizer confidence is missing
    default_element_confidence: float = 0.5
    # Icon-sized blocks are discarded by the preprocessor
    min_block_width: int = 20
    min_block_height: int = 10

    # Chat-room title search strip, relative to the screen
    title_strip_height_ratio: float = 0.08
    title_strip_left_ratio: float = 0.2
    title_strip_right_ratio: float = 0.8
    title_min_score: float = 120.0

    # Horizontal split ratios used for the dominant-position estimate
    position_left_ratio: float = 0.3
    position_right_ratio: float = 0.7

    max_keywords: int = 5
    max_suggestions: int = 5

    ui_symbols: Tuple[str, ...] = DEFAULT_UI_SYMBOLS
    ui_labels: Tuple[str, ...] = DEFAULT_UI_LABELS
    common_words: Tuple[str, ...] = DEFAULT_COMMON_WORDS
    surnames: Tuple[str, ...] = DEFAULT_SURNAMES
    system_notice_keywords: Tuple[str, ...] = DEFAULT_SYSTEM_NOTICE_KEYWORDS
    group_chat_indicators: Tuple[str, ...] = DEFAULT_GROUP_CHAT_INDICATORS

    def with_overrides(self, **overrides: Any) -> "EngineConfig":
        """Return a copy with known fields replaced.

        Values are coerced to the type of the field they replace, so
        ``"36"`` from a config file becomes ``36.0``; vocabulary lists
        become tuples. Unknown keys are ignored.

        Raises:
            ValueError: when a value cannot be read as its field's type
        """
        known = {f.name for f in fields(self)}
        clean = {}
        errors = []
        for key, value in overrides.items():
            if key not in known:
                continue
            try:
                clean[key] = coerce_setting(key, value, getattr(self, key))
            except ValueError as e:
                errors.append(str(e))
        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")
        return replace(self, **clean)

    def validate(self) -> list:
        errors = []
        if self.small_font_threshold_px <= 0:
            errors.append("small_font_threshold_px must be positive")
        if self.name_pair_max_gap_px <= 0:
            errors.append("name_pair_max_gap_px must be positive")
        if not 0.0 <= self.default_element_confidence <= 1.0:
            errors.append("default_element_confidence must be between 0.0 and 1.0")
        if self.min_block_width < 0 or self.min_block_height < 0:
            errors.append("min_block_width and min_block_height must not be negative")
        if not 0.0 < self.title_strip_height_ratio <= 1.0:
            errors.append("title_strip_height_ratio must be in (0.0, 1.0]")
        if not 0.0 <= self.title_strip_left_ratio < self.title_strip_right_ratio <= 1.0:
            errors.append("title strip ratios must satisfy 0 <= left < right <= 1")
        if not 0.0 <= self.position_left_ratio < self.position_right_ratio <= 1.0:
            errors.append("position ratios must satisfy 0 <= left < right <= 1")
        if self.max_keywords < 1 or self.max_suggestions < 1:
            errors.append("max_keywords and max_suggestions must be at least 1")
        return errors

    def to_dict(self) -> Dict[str, Any]:
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            result[f.name] = list(value) if isinstance(value, tuple) else value
        return result


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    # Empty file path disables the rotating file handler
    file: str = "./logs/chat_transcript.log"
    max_size: str = "10MB"
    console: bool = True


@dataclass
class AppConfig:
    """Main application configuration."""
    engine: EngineConfig = field(default_factory=EngineConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def validate(self) -> bool:
        """Validate configuration parameters."""
        errors = list(self.engine.validate())

        allowed_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if str(self.logging.level).upper() not in allowed_levels:
            errors.append("logging.level must be one of: DEBUG, INFO, WARNING, ERROR, CRITICAL")

        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")

        return True

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "engine": self.engine.to_dict(),
            "logging": {
                "level": self.logging.level,
                "file": self.logging.file,
                "max_size": self.logging.max_size,
                "console": self.logging.console,
            },
        }
