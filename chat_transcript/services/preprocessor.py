"""
Block preprocessing: status-bar exclusion, trimming and geometry sanity checks.
"""
from dataclasses import replace
from typing import Iterable, List, Optional
import logging

from chat_transcript.models.config import EngineConfig
from chat_transcript.models.data_models import ScreenGeometry, TextBlock


logger = logging.getLogger(__name__)


def preprocess(
    blocks: Iterable[TextBlock],
    screen: ScreenGeometry,
    config: Optional[EngineConfig] = None,
) -> List[TextBlock]:
    """Drop blocks that can never carry conversation text.

    A block is discarded when its top edge lies inside the excluded top band,
    when its box has no area, when it is icon-sized, or when its text is
    blank. Surviving blocks keep their input order with trimmed text.
    """
    cfg = config or EngineConfig()
    band = max(screen.excluded_top_band_height, 0)
    kept: List[TextBlock] = []

    for block in blocks:
        box = block.box
        if box.top < band:
            logger.debug(f"Dropping block in top band (top={box.top}): {block.text[:20]!r}")
            continue
        if box.is_degenerate:
            logger.debug(f"Dropping degenerate box {box}: {block.text[:20]!r}")
            continue
        if box.width < cfg.min_block_width or box.height < cfg.min_block_height:
            logger.debug(f"Dropping icon-sized block ({box.width}x{box.height}): {block.text[:20]!r}")
            continue

        text = (block.text or "").strip()
        if not text:
            continue

        kept.append(block if text == block.text else replace(block, text=text))

    logger.debug(f"Preprocessor kept {len(kept)} blocks")
    return kept
