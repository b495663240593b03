"""
End-to-end tests for the OCR analysis engine.
"""
import json
import random

import pytest

from chat_transcript.models.config import EngineConfig
from chat_transcript.models.data_models import EntityType, ScreenGeometry, Sender, TextType
from chat_transcript.services.ocr_pipeline import OcrAnalysisEngine, analyze_blocks
from conftest import left_block, make_block, right_block


def _name(text, top):
    return left_block(text, top, width=80, height=24, line_height=24)


def _conversation():
    return [
        make_block("9:41", 40, 10, width=80, height=30),
        _name("민지", 300),
        left_block("저녁 먹었어?", 330, height=40, confidences=(0.9, 0.8)),
        left_block("오후 6:02", 380, width=90),
        right_block("아직 안 먹었어", 450, confidences=(0.95, None)),
        right_block("너는?", 500),
        left_block("나는 먹었지 ㅋㅋ", 580),
        make_block("2025년 10월 22일 수요일", 350, 250, width=300),
        make_block("←", 10, 150, width=30, height=30),
    ]


class TestOcrAnalysisEngine:
    def setup_method(self):
        self.engine = OcrAnalysisEngine()
        self.screen = ScreenGeometry(width=1000, height=2000, excluded_top_band_height=60)

    def test_empty_input(self):
        analysis = self.engine.analyze([], self.screen)
        assert analysis.original_text == ""
        assert analysis.text_type == TextType.GENERAL_TEXT
        assert analysis.confidence == 0.5
        assert analysis.suggestions == []
        assert analysis.keywords == []
        assert analysis.entities == []

    def test_only_noise_input_is_empty(self):
        analysis = self.engine.analyze([left_block("오후 3:15", 300), left_block("←", 400)], self.screen)
        assert analysis.original_text == ""
        assert analysis.confidence == 0.5
        assert analysis.suggestions == []

    def test_full_conversation(self):
        analysis = self.engine.analyze(_conversation(), self.screen)
        assert analysis.original_text == (
            "[민지]\n저녁 먹었어?\n\n"
            "[나]\n아직 안 먹었어\n너는?\n\n"
            "[민지]\n나는 먹었지 ㅋㅋ"
        )
        assert analysis.text_type == TextType.QUESTION
        assert analysis.language == "ko"
        assert analysis.chat_analysis.other_person_name == "민지"
        assert analysis.chat_analysis.sender == Sender.OTHER
        assert analysis.chat_analysis.time_info == "오후 6:02"
        assert 0 < len(analysis.suggestions) <= 5

    def test_confidence_ignores_noise_and_defaults_missing(self):
        analysis = self.engine.analyze(_conversation(), self.screen)
        # 민지 0.9, 저녁 0.9 + 0.8, 아직 0.95 + default 0.5, 너는 0.9, 나는 0.9
        expected = (0.9 + 0.9 + 0.8 + 0.95 + 0.5 + 0.9 + 0.9) / 7
        assert analysis.confidence == pytest.approx(expected)

    def test_messages_follow_vertical_order(self):
        blocks = _conversation()
        shuffled = list(blocks)
        random.Random(7).shuffle(shuffled)
        analysis = self.engine.analyze(shuffled, self.screen)
        ys = [m.y for m in analysis.transcript.messages]
        assert ys == sorted(ys)
        assert analysis.original_text == self.engine.analyze(blocks, self.screen).original_text

    def test_identical_input_gives_identical_output(self):
        first = self.engine.analyze(_conversation(), self.screen).to_dict()
        second = self.engine.analyze(_conversation(), self.screen).to_dict()
        assert json.dumps(first, ensure_ascii=False) == json.dumps(second, ensure_ascii=False)

    def test_noise_never_reaches_transcript(self):
        analysis = self.engine.analyze(_conversation(), self.screen)
        segments = analysis.original_text.split("\n")
        for noise in ("9:41", "오후 6:02", "2025년 10월 22일 수요일", "←"):
            assert noise not in segments

    def test_no_message_repeats_its_sender_name(self):
        analysis = self.engine.analyze(_conversation(), self.screen)
        for message in analysis.transcript.messages:
            assert message.sender_name != message.text

    def test_far_right_block_is_me(self):
        block = make_block("회의 끝나고 연락할게", 850, 600, width=100, line_height=60)
        analysis = self.engine.analyze([block], self.screen)
        assert [m.sender for m in analysis.transcript.messages] == [Sender.ME]

    def test_name_pairing(self):
        screen = ScreenGeometry(width=1000, height=2000)
        analysis = self.engine.analyze([_name("민지", 100), left_block("저녁 먹었어?", 130)], screen)
        messages = analysis.transcript.messages
        assert len(messages) == 1
        assert messages[0].sender == Sender.OTHER
        assert messages[0].text == "저녁 먹었어?"
        assert analysis.chat_analysis.other_person_name == "민지"

    def test_merge_of_consecutive_other_messages(self):
        screen = ScreenGeometry(width=1000, height=2000)
        title = make_block("민지", 440, 5, width=80, height=30)
        blocks = [title, left_block("안녕", 10), left_block("잘 지내?", 40)]
        analysis = self.engine.analyze(blocks, screen)
        messages = analysis.transcript.messages
        assert len(messages) == 1
        assert messages[0].sender == Sender.OTHER
        assert messages[0].text == "안녕\n잘 지내?"

    def test_my_message_near_the_top_is_kept(self):
        blocks = [make_block("좋아요", 520, 80, width=140), left_block("그럼 내일 봐", 300)]
        analysis = self.engine.analyze(blocks, self.screen)
        assert [(m.sender, m.text) for m in analysis.transcript.messages] == [
            (Sender.ME, "좋아요"),
            (Sender.UNKNOWN, "그럼 내일 봐"),
        ]
        assert analysis.chat_analysis.other_person_name is None

    def test_unnamed_left_messages_are_unknown(self):
        analysis = self.engine.analyze([left_block("누구세요", 300)], self.screen)
        assert analysis.original_text == "[미분류]\n누구세요"
        assert analysis.transcript.messages[0].sender == Sender.UNKNOWN

    def test_entities_index_into_original_text(self):
        analysis = self.engine.analyze(
            [right_block("연락처는 a@b.com, 010-1234-5678 입니다", 300, width=270)], self.screen
        )
        assert [(e.type, e.text) for e in analysis.entities] == [
            (EntityType.EMAIL, "a@b.com"),
            (EntityType.PHONE, "010-1234-5678"),
        ]
        for e in analysis.entities:
            assert analysis.original_text[e.start_index:e.end_index] == e.text

    def test_question_precedence_end_to_end(self):
        analysis = self.engine.analyze([right_block("이거 얼마예요?", 300)], self.screen)
        assert analysis.text_type == TextType.QUESTION

    def test_to_dict_uses_camel_case(self):
        record = self.engine.analyze(_conversation(), self.screen).to_dict()
        assert set(record) == {
            "originalText", "textType", "confidence", "language",
            "suggestions", "keywords", "entities", "chatAnalysis",
        }
        assert record["textType"] == "QUESTION"
        assert record["chatAnalysis"]["otherPersonName"] == "민지"
        json.dumps(record, ensure_ascii=False)

    def test_custom_config_is_used(self):
        engine = OcrAnalysisEngine(EngineConfig(default_element_confidence=0.3))
        assert engine.analyze([], self.screen).confidence == 0.3

    def test_engine_from_config_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "engine:\n  default_element_confidence: 0.3\n  name_pair_max_gap_px: 150\n",
            encoding="utf-8",
        )
        engine = OcrAnalysisEngine.from_config_file(str(path))
        assert engine.config.name_pair_max_gap_px == 150
        assert engine.analyze([], self.screen).confidence == 0.3

        screen = ScreenGeometry(width=1000, height=2000)
        analysis = engine.analyze([_name("민지", 300), left_block("저녁 먹었어?", 400)], screen)
        assert analysis.original_text == "[민지]\n저녁 먹었어?"

    def test_engine_from_missing_config_file_uses_defaults(self, tmp_path):
        engine = OcrAnalysisEngine.from_config_file(str(tmp_path / "absent.yaml"))
        assert engine.config == EngineConfig()


class TestAnalyzePayload:
    def setup_method(self):
        self.engine = OcrAnalysisEngine()

    def test_payload_contract(self):
        payload = {
            "screenWidth": 1000,
            "screenHeight": 2000,
            "excludedTopBandHeight": 0,
            "blocks": [
                {"text": "민지", "box": {"left": 40, "top": 100, "right": 120, "bottom": 124},
                 "avgLineHeight": 24, "elementConfidences": [0.9]},
                {"text": "저녁 먹었어?", "box": {"left": 40, "top": 130, "right": 240, "bottom": 170},
                 "avgLineHeight": 36, "elementConfidences": [0.8, None]},
            ],
        }
        analysis = self.engine.analyze_payload(payload)
        assert analysis.original_text == "[민지]\n저녁 먹었어?"

    def test_missing_blocks_is_a_contract_violation(self):
        with pytest.raises(ValueError):
            self.engine.analyze_payload({"screenWidth": 1000, "screenHeight": 2000})

    def test_missing_screen_size_is_a_contract_violation(self):
        with pytest.raises(ValueError):
            self.engine.analyze_payload({"blocks": []})


def test_analyze_blocks_helper(screen):
    assert analyze_blocks([], screen).original_text == ""
