"""
Block classification: noise detection and name-candidate recognition.

Every preprocessed block gets exactly one role:

- NOISE: timestamps, dates, bare digits, lone jamo, UI glyphs and button
  labels, echoed speaker labels ("나", "상대방", "[나]" ...), and single
  characters that are not a complete Korean syllable;
- NAME_CANDIDATE: short Korean (2-4 syllables) or Latin (3-8 letters)
  names that are not ordinary chat vocabulary;
- MESSAGE: everything else.

Text that fails every rule falls through to MESSAGE, so classification
never blocks the pipeline.
"""
from typing import Iterable, List, Optional
import logging
import re

from chat_transcript.models.config import EngineConfig
from chat_transcript.models.data_models import BlockRole, ClassifiedBlock, ScreenGeometry, TextBlock


logger = logging.getLogger(__name__)

_TIME_PATTERNS = (
    re.compile(r"^(?:오전|오후)?\s*\d{1,2}:\d{2}$"),
    re.compile(r"^\d{1,2}시\s*\d{1,2}분$"),
)

_WEEKDAY = r"(?:\s*[월화수목금토일]요일)?"
_DATE_PATTERNS = (
    re.compile(r"^\d{4}\s*[년.\-/]\s*\d{1,2}\s*[월.\-/]\s*\d{1,2}\s*일?" + _WEEKDAY + r"\s*>?$"),
    re.compile(r"^\d{1,2}월\s*\d{1,2}일" + _WEEKDAY + r"$"),
)

_DIGITS_ONLY = re.compile(r"^[\d\s:]+$")
_LONE_JAMO = re.compile(r"^[ㄱ-ㅎㅏ-ㅣ]$")
_KOREAN_SYLLABLE = re.compile(r"^[가-힣]$")
# Any concatenation of the labels the app itself prints for the two speakers
_SENDER_ECHO = re.compile(r"^(?:나|상대방|\[나\]|\[상대방\]|\[\])+$")
_SENDER_ECHO_MAX_LEN = 10
_DIGITS_ONLY_MAX_LEN = 6

_KOREAN_NAME = re.compile(r"^[가-힣]{2,4}$")
_LATIN_NAME = re.compile(r"^[a-zA-Z]+\s?[a-zA-Z]*$")
_LATIN_NAME_MIN_LEN = 3
_LATIN_NAME_MAX_LEN = 8
_HAS_DIGIT = re.compile(r"\d")
_HAS_PUNCT = re.compile(r"[!@#$%^&*()_+=\[\]{}|;:'\",.<>?/~`\-]")
_TRAILING_PARTICLE = re.compile(r"(?:은|는|이|가|을|를|의|에게|에서|와|과|도|만|부터|까지|요)$")

NAME_CONFIDENCE_STRONG = 1.0
NAME_CONFIDENCE_WEAK = 0.6


class BlockClassifier:
    """Labels blocks as NOISE, NAME_CANDIDATE or MESSAGE."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self._ui_symbols = frozenset(self.config.ui_symbols)
        self._ui_labels = frozenset(self.config.ui_labels)
        self._common_words = frozenset(self.config.common_words)
        self._surnames = frozenset(self.config.surnames)

    def noise_reason(self, text: str) -> Optional[str]:
        """Return why ``text`` is noise, or None when it is content."""
        t = text.strip()
        if not t:
            return "empty"
        if any(p.match(t) for p in _TIME_PATTERNS):
            return "time"
        if any(p.match(t) for p in _DATE_PATTERNS):
            return "date"
        if len(t) <= _DIGITS_ONLY_MAX_LEN and _DIGITS_ONLY.match(t):
            return "digits"
        if _LONE_JAMO.match(t):
            return "jamo"
        if t in self._ui_symbols:
            return "ui_symbol"
        if t in self._ui_labels:
            return "ui_label"
        compact = re.sub(r"\s+", "", t)
        if len(compact) <= _SENDER_ECHO_MAX_LEN and _SENDER_ECHO.match(compact):
            return "sender_echo"
        if len(t) == 1 and not _KOREAN_SYLLABLE.match(t):
            return "single_char"
        return None

    def is_noise(self, text: str) -> bool:
        return self.noise_reason(text) is not None

    def name_confidence(self, text: str) -> float:
        """Score ``text`` as a speaker name; 0.0 means it is not a name.

        Korean names must be 2-4 syllables, Latin names 3-8 letters. A
        surname initial or a length of three or more raises the score but
        is not required.
        """
        t = text.strip()
        if _HAS_DIGIT.search(t) or _HAS_PUNCT.search(t):
            return 0.0
        if t in self._common_words:
            return 0.0

        if _KOREAN_NAME.match(t):
            if _TRAILING_PARTICLE.search(t):
                return 0.0
            if len(t) == 2 and t[0] == t[1]:
                return 0.0
            if t[0] in self._surnames or len(t) >= 3:
                return NAME_CONFIDENCE_STRONG
            return NAME_CONFIDENCE_WEAK

        if _LATIN_NAME.match(t) and _LATIN_NAME_MIN_LEN <= len(t) <= _LATIN_NAME_MAX_LEN:
            return NAME_CONFIDENCE_WEAK

        return 0.0

    def is_name_candidate(self, text: str) -> bool:
        return self.name_confidence(text) > 0.0

    def is_left_side(self, block: TextBlock, screen: ScreenGeometry) -> bool:
        return block.box.center_x < screen.center_x

    def is_small_font(self, block: TextBlock) -> bool:
        # a missing line height says nothing about font size
        return 0 < block.avg_line_height < self.config.small_font_threshold_px

    def classify(self, block: TextBlock, screen: ScreenGeometry) -> ClassifiedBlock:
        left = self.is_left_side(block, screen)
        small = self.is_small_font(block)

        reason = self.noise_reason(block.text)
        if reason is not None:
            logger.debug(f"NOISE ({reason}): {block.text[:20]!r}")
            return ClassifiedBlock(block, BlockRole.NOISE, left, small, noise_reason=reason)

        score = self.name_confidence(block.text)
        if score > 0.0:
            return ClassifiedBlock(block, BlockRole.NAME_CANDIDATE, left, small, name_confidence=score)

        return ClassifiedBlock(block, BlockRole.MESSAGE, left, small)

    def classify_all(self, blocks: Iterable[TextBlock], screen: ScreenGeometry) -> List[ClassifiedBlock]:
        classified = [self.classify(b, screen) for b in blocks]
        noise = sum(1 for c in classified if c.is_noise)
        names = sum(1 for c in classified if c.role is BlockRole.NAME_CANDIDATE)
        logger.info(f"Classified {len(classified)} blocks: {noise} noise, {names} name candidates")
        return classified
