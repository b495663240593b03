"""
OCR analysis pipeline.

Runs preprocessing, block classification, bubble assembly and sender
attribution, then derives text type, language, entities, keywords, chat
analysis, suggestions and confidence from the resulting transcript.
"""
from typing import Any, Dict, Iterable, List, Optional
import logging

from chat_transcript.models.config import EngineConfig
from chat_transcript.models.data_models import (
    ChatAnalysis,
    OcrAnalysis,
    ScreenGeometry,
    TextBlock,
    TextType,
)
from chat_transcript.services.block_classifier import BlockClassifier
from chat_transcript.services.bubble_assembler import BubbleAssembler
from chat_transcript.services.chat_analyzer import ChatAnalyzer
from chat_transcript.services.config_manager import ConfigManager
from chat_transcript.services.confidence_estimator import estimate_confidence
from chat_transcript.services.entity_extractor import extract_entities, extract_keywords
from chat_transcript.services.preprocessor import preprocess
from chat_transcript.services.sender_attributor import SenderAttributor
from chat_transcript.services.suggestion_generator import generate_suggestions
from chat_transcript.services.text_type_classifier import classify_text_type, detect_language


logger = logging.getLogger(__name__)


class OcrAnalysisEngine:
    """Turns one capture's OCR blocks into an OcrAnalysis.

    The engine keeps only its configuration, so a single instance can
    serve concurrent calls for independent captures.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self.classifier = BlockClassifier(self.config)
        self.assembler = BubbleAssembler(self.config)
        self.attributor = SenderAttributor(self.config)
        self.chat_analyzer = ChatAnalyzer(self.config)

    @classmethod
    def from_config_file(cls, config_path: Optional[str] = None) -> "OcrAnalysisEngine":
        """Build an engine from the ``engine`` section of a YAML or JSON config file.

        Without a path the usual config locations are searched; defaults are
        used when none exists.

        Raises:
            ValueError: when the file is malformed or fails validation
        """
        return cls(ConfigManager(config_path).load_engine_config())

    def empty_analysis(self) -> OcrAnalysis:
        return OcrAnalysis(
            original_text="",
            text_type=TextType.GENERAL_TEXT,
            confidence=self.config.default_element_confidence,
            language=detect_language(""),
            chat_analysis=ChatAnalysis(),
        )

    def analyze(self, blocks: Iterable[TextBlock], screen: ScreenGeometry) -> OcrAnalysis:
        cfg = self.config
        cleaned = preprocess(blocks, screen, cfg)
        if not cleaned:
            logger.info("No text blocks left after preprocessing")
            return self.empty_analysis()

        classified = self.classifier.classify_all(cleaned, screen)
        bubbles = self.assembler.assemble(classified, screen)
        transcript = self.attributor.attribute(bubbles)

        original_text = transcript.to_text()
        body = transcript.body_text()

        text_type = classify_text_type(body)
        chat_analysis = self.chat_analyzer.analyze(transcript, classified, screen)
        analysis = OcrAnalysis(
            original_text=original_text,
            text_type=text_type,
            confidence=estimate_confidence(classified, cfg.default_element_confidence),
            language=detect_language(body),
            suggestions=generate_suggestions(body, text_type, chat_analysis, cfg.max_suggestions),
            keywords=extract_keywords(body, cfg.max_keywords),
            entities=extract_entities(original_text),
            chat_analysis=chat_analysis,
            transcript=transcript,
        )
        logger.info(
            f"Analysis complete: {len(transcript.messages)} messages, type={text_type.name}, "
            f"confidence={analysis.confidence:.2f}"
        )
        return analysis

    def analyze_payload(self, payload: Dict[str, Any]) -> OcrAnalysis:
        """Analyze a provider payload with ``blocks`` and the screen scalars.

        Raises:
            ValueError: when the payload violates the input contract
        """
        if not isinstance(payload, dict):
            raise ValueError(f"payload must be a mapping, got {type(payload).__name__}")
        raw_blocks = payload.get("blocks")
        if raw_blocks is None:
            raise ValueError("payload is missing required field 'blocks'")
        if not isinstance(raw_blocks, list):
            raise ValueError("payload.blocks must be a list")
        screen = ScreenGeometry.from_dict(payload)
        blocks: List[TextBlock] = [TextBlock.from_dict(b) for b in raw_blocks]
        return self.analyze(blocks, screen)


def analyze_blocks(
    blocks: Iterable[TextBlock],
    screen: ScreenGeometry,
    config: Optional[EngineConfig] = None,
) -> OcrAnalysis:
    """Convenience wrapper around a one-off OcrAnalysisEngine."""
    return OcrAnalysisEngine(config).analyze(blocks, screen)
