"""
Template reply suggestions.

Suggestions are canned Korean replies selected by text type, the focus
sender and the group-chat flag, with light interpolation of the sender
prefix, the other person's name and the detected time.
"""
from typing import List, Optional
import logging

from chat_transcript.models.data_models import ChatAnalysis, Sender, TextType


logger = logging.getLogger(__name__)

URL_SUGGESTIONS = (
    "이 링크를 확인해보시겠어요?",
    "관련 정보를 더 찾아보시겠어요?",
    "이 사이트에 대해 더 알고 싶으시나요?",
    "링크를 공유해주셔서 감사해요!",
    "유용한 정보인 것 같네요!",
)

PHONE_SUGGESTIONS = (
    "이 번호로 연락드릴까요?",
    "전화번호를 저장하시겠어요?",
    "이 번호에 대해 더 알고 싶으시나요?",
    "연락처 정보를 정리해드릴까요?",
    "번호를 복사하시겠어요?",
)

EMAIL_SUGGESTIONS = (
    "이 이메일로 연락드릴까요?",
    "이메일 주소를 저장하시겠어요?",
    "메일을 보내시겠어요?",
    "이메일 주소를 복사하시겠어요?",
    "연락처에 추가하시겠어요?",
)

GENERAL_SUGGESTIONS = (
    "흥미로운 내용이네요!",
    "더 자세히 알고 싶어요",
    "이에 대해 더 이야기해볼까요?",
    "좋은 정보 감사해요!",
    "도움이 필요하시면 언제든 말씀해주세요",
)

# (keywords, templates) checked in order for questions; {prefix} is the sender prefix
QUESTION_TEMPLATES = (
    (("어떻게",), (
        "{prefix}좋은 질문이네요! 구체적으로 어떤 부분이 궁금하신가요?",
        "{prefix}자세히 설명해드릴게요. 어떤 관점에서 알고 싶으신가요?",
    )),
    (("언제",), (
        "{prefix}시간에 대한 질문이시군요. 구체적인 날짜나 기간을 알려주시면 더 정확한 답변을 드릴 수 있어요.",
    )),
    (("어디서", "어디"), (
        "{prefix}장소에 대한 질문이네요. 어떤 지역이나 위치를 말씀하시는 건가요?",
    )),
    (("왜",), (
        "{prefix}이유를 묻는 질문이군요. 어떤 상황에서 이런 질문을 하게 되셨나요?",
    )),
    (("뭐", "무엇"), (
        "{prefix}구체적으로 무엇에 대해 알고 싶으신가요?",
    )),
)
QUESTION_FALLBACK = (
    "{prefix}흥미로운 질문이네요! 더 자세히 설명해주시면 도움을 드릴 수 있을 것 같아요.",
    "{prefix}좋은 질문입니다. 어떤 관점에서 답변을 원하시나요?",
)

# Per-sender (keywords, templates) for casual messages; {name} is the other person's name
MESSAGE_TEMPLATES = {
    Sender.ME: (
        (("안녕",), ("인사 잘 드렸네요! 😊", "친근한 인사가 좋아요!")),
        (("고마워", "감사"), ("예의 바른 표현이에요! 👍", "감사 인사 잘 드렸네요!")),
        (("미안", "죄송"), ("사과 잘 드렸어요! 😊", "예의 바른 사과네요!")),
        (("ㅋ", "ㅎ"), ("유쾌한 메시지네요! 😄", "재미있게 대화하고 계시네요!")),
        (("ㅠ", "ㅜ"), ("힘든 상황을 공유하셨네요 😢", "마음을 나눠주셔서 고마워요")),
        ((), ("좋은 메시지를 보내셨네요!", "의미 있는 대화를 하고 계시네요!")),
    ),
    Sender.OTHER: (
        (("안녕",), ("{name}안녕하세요! 좋은 하루 보내세요 😊", "안녕! 반가워요!")),
        (("고마워", "감사"), ("천만에요! 도움이 되었다니 기뻐요 😊", "별 말씀을요! 언제든지 도와드릴게요")),
        (("미안", "죄송"), ("{name}괜찮아요! 걱정하지 마세요 😊", "전혀 문제없어요. 이해해요")),
        (("ㅋ", "ㅎ"), ("웃음이 나오는 상황이네요! 😄", "재미있는 이야기인 것 같아요!")),
        (("ㅠ", "ㅜ"), ("슬픈 일이 있으신가요? 😢", "힘든 일이 있으시면 언제든 말씀해주세요")),
        ((), ("좋은 이야기네요! 더 들려주세요", "흥미로운 내용이에요!")),
    ),
    Sender.SYSTEM: (
        ((), ("시스템 메시지가 왔네요", "알림을 확인해보세요")),
    ),
    Sender.UNKNOWN: (
        ((), ("메시지를 확인해보세요", "흥미로운 내용이에요!")),
    ),
}

GENERAL_BY_SENDER = {
    Sender.ME: ("제가 작성한 내용이네요!", "좋은 생각을 정리하셨네요!"),
    Sender.OTHER: ("{prefix}보낸 내용이네요!", "흥미로운 관점이에요!"),
    Sender.SYSTEM: ("시스템에서 생성된 내용이네요!", "알림이나 공지를 확인해보세요!"),
    Sender.UNKNOWN: ("텍스트를 분석해보세요!",),
}


def sender_prefix(analysis: Optional[ChatAnalysis]) -> str:
    if analysis is None:
        return ""
    if analysis.sender is Sender.ME:
        return "제가 "
    if analysis.sender is Sender.OTHER:
        if analysis.other_person_name:
            return f"{analysis.other_person_name}님이 "
        return "상대방이 "
    if analysis.sender is Sender.SYSTEM:
        return "시스템에서 "
    return ""


def _pick(text: str, table, fallback=()):
    for keywords, templates in table:
        if not keywords or any(k in text for k in keywords):
            return templates
    return fallback


def _question(text: str, analysis: Optional[ChatAnalysis], prefix: str) -> List[str]:
    result = [t.format(prefix=prefix) for t in _pick(text, QUESTION_TEMPLATES, QUESTION_FALLBACK)]
    if analysis is not None and analysis.is_group_chat:
        result.append("그룹 채팅에서 좋은 질문이네요! 다른 분들도 궁금해하실 것 같아요.")
    return result


def _message(text: str, analysis: Optional[ChatAnalysis]) -> List[str]:
    sender = analysis.sender if analysis is not None else Sender.UNKNOWN
    name = f"{analysis.other_person_name}님, " if analysis is not None and analysis.other_person_name else ""
    result = [t.format(name=name) for t in _pick(text, MESSAGE_TEMPLATES[sender])]
    if analysis is not None:
        if analysis.is_group_chat:
            result.append("그룹 채팅에서 좋은 대화네요!")
            if analysis.participants:
                result.append(f"{', '.join(analysis.participants)}님들과 대화하고 계시네요!")
        if analysis.time_info:
            result.append(f"{analysis.time_info}에 보낸 메시지네요")
    return result


def _general(analysis: Optional[ChatAnalysis], prefix: str) -> List[str]:
    result: List[str] = []
    if analysis is not None:
        result.extend(t.format(prefix=prefix) for t in GENERAL_BY_SENDER[analysis.sender])
        if analysis.is_group_chat:
            result.append("그룹 대화의 일부네요!")
        if analysis.time_info:
            result.append(f"{analysis.time_info}에 작성된 내용이네요!")
    result.extend(GENERAL_SUGGESTIONS)
    return result


def generate_suggestions(
    text: str,
    text_type: TextType,
    analysis: Optional[ChatAnalysis] = None,
    limit: int = 5,
) -> List[str]:
    """Return at most ``limit`` distinct suggestions, best first.

    Args:
        text: text the suggestions respond to; keyword branches look at it
        text_type: category from the text-type classifier
        analysis: chat analysis supplying sender, group flag, names and time
        limit: maximum number of suggestions

    Returns:
        Deterministic list of reply templates; empty when ``text`` is blank
    """
    if not text.strip() or limit <= 0:
        return []

    prefix = sender_prefix(analysis)
    if text_type is TextType.QUESTION:
        candidates = _question(text, analysis, prefix)
    elif text_type is TextType.MESSAGE:
        candidates = _message(text, analysis)
    elif text_type is TextType.URL:
        candidates = list(URL_SUGGESTIONS)
    elif text_type is TextType.PHONE_NUMBER:
        candidates = list(PHONE_SUGGESTIONS)
    elif text_type is TextType.EMAIL:
        candidates = list(EMAIL_SUGGESTIONS)
    else:
        candidates = _general(analysis, prefix)

    unique = list(dict.fromkeys(candidates))[:limit]
    logger.debug(f"Generated {len(unique)} suggestions for {text_type.name}")
    return unique
