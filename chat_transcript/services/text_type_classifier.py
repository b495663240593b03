"""
Coarse text-type classification and language detection.

Categories are checked in a fixed order and the first hit wins, so a
question that also contains a number is a QUESTION. The order is a
product decision rather than a guarantee of correctness for mixed text.
"""
from typing import Callable, Tuple
import re

from chat_transcript.models.data_models import TextType


QUESTION_KEYWORDS = ("?", "어떻게", "언제", "어디서", "왜", "무엇", "뭐", "어떤")
URL_MARKERS = ("http://", "https://", "www.", ".com", ".kr", ".net", ".org", ".io")
CODE_MARKERS = ("function", "class", "import", "def ", "public", "private")
CASUAL_MARKERS = ("안녕", "고마워", "미안", "ㅋ", "ㅎ", "ㅠ", "ㅜ")
DATE_TIME_WORDS = ("오전", "오후", "월", "일")

_PHONE = re.compile(r"\d{2,3}-?\d{3,4}-?\d{4}")
_EMAIL = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
_DATE_TIME = (
    re.compile(r"\d{4}[-/]\d{1,2}[-/]\d{1,2}"),
    re.compile(r"\d{1,2}시\s*\d{1,2}분"),
    re.compile(r"\d{1,2}:\d{2}"),
)
_DIGIT = re.compile(r"\d")

_KOREAN_CHAR = re.compile(r"[가-힣]")
_LATIN_CHAR = re.compile(r"[a-zA-Z]")


def _is_question(t: str) -> bool:
    return any(k in t for k in QUESTION_KEYWORDS)


def _is_url(t: str) -> bool:
    return any(m in t for m in URL_MARKERS)


def _is_phone(t: str) -> bool:
    return _PHONE.search(t) is not None


def _is_email(t: str) -> bool:
    return _EMAIL.search(t) is not None


def _is_date_time(t: str) -> bool:
    return any(p.search(t) for p in _DATE_TIME) or any(w in t for w in DATE_TIME_WORDS)


def _is_number(t: str) -> bool:
    return _DIGIT.search(t) is not None and "http" not in t


def _is_code(t: str) -> bool:
    return any(m in t for m in CODE_MARKERS) or ("{" in t and "}" in t)


def _is_casual(t: str) -> bool:
    return any(m in t for m in CASUAL_MARKERS)


PRECEDENCE: Tuple[Tuple[TextType, Callable[[str], bool]], ...] = (
    (TextType.QUESTION, _is_question),
    (TextType.URL, _is_url),
    (TextType.PHONE_NUMBER, _is_phone),
    (TextType.EMAIL, _is_email),
    (TextType.DATE_TIME, _is_date_time),
    (TextType.NUMBER, _is_number),
    (TextType.CODE, _is_code),
    (TextType.MESSAGE, _is_casual),
)


def classify_text_type(text: str) -> TextType:
    """Return the first matching category for ``text``, case-insensitively."""
    cleaned = text.strip().lower()
    if not cleaned:
        return TextType.GENERAL_TEXT
    for text_type, matches in PRECEDENCE:
        if matches(cleaned):
            return text_type
    return TextType.GENERAL_TEXT


def detect_language(text: str) -> str:
    """'ko', 'en', 'number' or 'mixed' by character majority."""
    korean = len(_KOREAN_CHAR.findall(text))
    latin = len(_LATIN_CHAR.findall(text))
    if korean > latin:
        return "ko"
    if latin > korean:
        return "en"
    if _DIGIT.search(text):
        return "number"
    return "mixed"
