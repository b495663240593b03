"""
Entity and keyword extraction over transcript text.
"""
from collections import Counter
from typing import List, Tuple
import logging
import re

from chat_transcript.models.data_models import EntityType, TextEntity


logger = logging.getLogger(__name__)

# Earlier entries win when two matches overlap (a URL hides its digit runs, an email its @mention)
ENTITY_PATTERNS: Tuple[Tuple[EntityType, "re.Pattern"], ...] = (
    (EntityType.URL, re.compile(r"https?://[^\s]+")),
    (EntityType.EMAIL, re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")),
    (EntityType.PHONE, re.compile(r"\d{2,3}-?\d{3,4}-?\d{4}")),
    (EntityType.HASHTAG, re.compile(r"#[\w가-힣]+")),
    (EntityType.MENTION, re.compile(r"@[\w가-힣]+")),
    (EntityType.MONEY, re.compile(r"\d+[원만억조]")),
)

KEYWORD_STOPWORDS = frozenset({
    "은", "는", "이", "가", "을", "를", "의", "에", "에서", "로", "으로", "와", "과",
    "도", "만", "부터", "까지", "한테", "에게", "께", "한테서", "에게서", "께서",
    "이랑", "랑", "이든", "든", "이든지", "든지", "이야", "야", "이에요", "에요",
    "입니다", "다", "어요", "아요", "지요", "죠", "네요", "어", "아", "지", "네",
    "고", "며", "면서", "으면서", "으니", "니", "으니까", "니까", "으므로", "므로",
    "어서", "아서", "으려고", "려고", "으려면", "려면", "으면", "면",
})

_KEYWORD_TOKEN = re.compile(r"^[가-힣a-zA-Z0-9]+$")
_EDGE_PUNCT = "\"'`.,!?;:()[]{}<>~…·-_*"


def extract_entities(text: str) -> List[TextEntity]:
    """Find non-overlapping entities with character offsets into ``text``."""
    accepted: List[TextEntity] = []
    for entity_type, pattern in ENTITY_PATTERNS:
        for match in pattern.finditer(text):
            start, end = match.span()
            if any(start < e.end_index and e.start_index < end for e in accepted):
                continue
            accepted.append(TextEntity(match.group(), entity_type, start, end))
    accepted.sort(key=lambda e: (e.start_index, e.end_index))
    logger.debug(f"Extracted {len(accepted)} entities")
    return accepted


def tokenize(text: str) -> List[str]:
    tokens = []
    for raw in text.split():
        token = raw.strip(_EDGE_PUNCT)
        if len(token) <= 1 or token in KEYWORD_STOPWORDS:
            continue
        if not _KEYWORD_TOKEN.match(token):
            continue
        tokens.append(token)
    return tokens


def extract_keywords(text: str, limit: int = 5) -> List[str]:
    """Most frequent content tokens; ties keep their first-appearance order."""
    if limit <= 0:
        return []
    counts = Counter(tokenize(text))
    return [token for token, _ in counts.most_common(limit)]
