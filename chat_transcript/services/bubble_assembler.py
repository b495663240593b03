"""
Bubble assembly.

Turns classified blocks into provisional speech bubbles. Blocks are
ordered top-to-bottom and folded into an immutable scan state; a small
left-side name block is paired with the left-side block directly beneath
it, and unlabelled left-side blocks inherit the last name seen (or the
chat-room title). Right-side blocks always belong to the device owner.
"""
from dataclasses import replace
from functools import reduce
from typing import Iterable, List, NamedTuple, Optional, Sequence, Tuple
import logging
import re

from chat_transcript.models.config import EngineConfig
from chat_transcript.models.data_models import (
    BlockRole,
    Bubble,
    ClassifiedBlock,
    ME_LABEL,
    Message,
    ScreenGeometry,
)


logger = logging.getLogger(__name__)

_TITLE_NAME = re.compile(r"^[가-힣]{2,4}$")
_TITLE_BASE_SCORE = 100.0
_TITLE_CENTER_BONUS = 50.0
# Distance from the screen center, as a share of width, at which the bonus reaches zero
_TITLE_CENTER_FALLOFF = 0.3


class _ScanState(NamedTuple):
    bubbles: Tuple[Bubble, ...] = ()
    last_left_sender_name: Optional[str] = None
    pending_name: Optional[ClassifiedBlock] = None


class BubbleAssembler:
    """Groups classified blocks into named bubbles."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    def find_room_title(self, blocks: Sequence[ClassifiedBlock], screen: ScreenGeometry) -> Optional[ClassifiedBlock]:
        """Locate the chat-room title in the top-center strip of the screen.

        Candidates are left-side 2-4 syllable Korean name candidates whose
        top edge lies in the strip right below the excluded band and whose
        center is inside the middle span of the screen. Each scores 100 plus up to 50 for being
        close to the horizontal center; the best candidate is accepted when
        it reaches ``title_min_score``.
        """
        cfg = self.config
        strip_top = screen.excluded_top_band_height
        strip_bottom = strip_top + int(screen.height * cfg.title_strip_height_ratio)
        span_left = screen.width * cfg.title_strip_left_ratio
        span_right = screen.width * cfg.title_strip_right_ratio
        falloff = screen.width * _TITLE_CENTER_FALLOFF

        best: Optional[ClassifiedBlock] = None
        best_score = float("-inf")
        for cb in blocks:
            # right-side blocks are the owner's bubbles, never the title
            if cb.role is not BlockRole.NAME_CANDIDATE or not cb.is_left_side:
                continue
            box = cb.box
            if box.top < strip_top or box.top > strip_bottom:
                continue
            if box.center_x < span_left or box.center_x > span_right:
                continue
            if not _TITLE_NAME.match(cb.text):
                continue
            distance = abs(box.center_x - screen.center_x)
            ratio = min(distance / falloff, 1.0) if falloff > 0 else 1.0
            score = _TITLE_BASE_SCORE + (1.0 - ratio) * _TITLE_CENTER_BONUS
            logger.debug(f"Title candidate {cb.text!r} at y={box.top} scored {score:.1f}")
            if score > best_score:
                best, best_score = cb, score

        if best is not None and best_score >= cfg.title_min_score:
            logger.info(f"Chat-room title found: {best.text!r}")
            return best
        return None

    def assemble(self, blocks: Iterable[ClassifiedBlock], screen: ScreenGeometry) -> List[Bubble]:
        """Build bubbles from classified blocks in top-to-bottom order.

        NOISE blocks are ignored. The room title only seeds the last left
        sender name; the title block itself stays in the scan and is dropped
        with every other bubble whose sender name equals its own text.
        """
        content = [b for b in blocks if not b.is_noise]
        title = self.find_room_title(content, screen)

        ordered = sorted(content, key=lambda b: (b.box.top, b.box.left))
        seed = _ScanState(last_left_sender_name=title.text if title is not None else None)
        final = self._flush(reduce(self._step, ordered, seed))

        bubbles = [b for b in final.bubbles if b.sender_name != b.text]
        logger.info(f"Assembled {len(bubbles)} bubbles from {len(ordered)} blocks")
        return bubbles

    def _step(self, state: _ScanState, block: ClassifiedBlock) -> _ScanState:
        text, y = block.text, block.box.top

        if not block.is_left_side:
            flushed = self._flush(state)
            return flushed._replace(bubbles=flushed.bubbles + (Bubble(text, y, ME_LABEL, is_left_side=False),))

        pending = state.pending_name
        if pending is not None and y - pending.box.top < self.config.name_pair_max_gap_px:
            name = pending.text
            logger.debug(f"Paired name {name!r} with {text[:30]!r} (gap={y - pending.box.top})")
            return _ScanState(
                bubbles=state.bubbles + (Bubble(text, y, name),),
                last_left_sender_name=name,
                pending_name=None,
            )

        if self._can_be_name(block):
            return self._flush(state)._replace(pending_name=block)

        flushed = self._flush(state)
        bubble = Bubble(text, y, flushed.last_left_sender_name)
        if bubble.sender_name is None:
            logger.debug(f"Left bubble without a known name: {text[:30]!r}")
        return flushed._replace(bubbles=flushed.bubbles + (bubble,))

    def _can_be_name(self, block: ClassifiedBlock) -> bool:
        if block.role is not BlockRole.NAME_CANDIDATE:
            return False
        return block.is_small_font or not self.config.name_pair_requires_small_font

    @staticmethod
    def _flush(state: _ScanState) -> _ScanState:
        """Emit an unpaired pending name as an ordinary left-side bubble."""
        pending = state.pending_name
        if pending is None:
            return state
        bubble = Bubble(pending.text, pending.box.top, state.last_left_sender_name)
        return state._replace(bubbles=state.bubbles + (bubble,), pending_name=None)


def merge_messages(messages: Iterable[Message]) -> List[Message]:
    """Concatenate consecutive messages of the same speaker with a newline.

    Messages with empty text, or whose sender name equals their text, are
    skipped. A merged message keeps the position of its first part.
    """
    merged: List[Message] = []
    for message in messages:
        text = message.text.strip()
        if not text:
            continue
        if message.sender_name is not None and message.sender_name.strip() == text:
            continue
        if merged and merged[-1].speaker_key() == message.speaker_key():
            previous = merged[-1]
            merged[-1] = replace(previous, text=f"{previous.text}\n{text}")
            continue
        merged.append(message if text == message.text else replace(message, text=text))
    return merged
