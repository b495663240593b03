"""
OCR confidence aggregation.
"""
from typing import Iterable

from chat_transcript.models.data_models import ClassifiedBlock


DEFAULT_ELEMENT_CONFIDENCE = 0.5


def estimate_confidence(blocks: Iterable[ClassifiedBlock], default: float = DEFAULT_ELEMENT_CONFIDENCE) -> float:
    """Mean element confidence over non-noise blocks, clamped to [0, 1].

    Missing element confidences count as ``default``; with no elements at
    all the default itself is returned.
    """
    total = 0.0
    count = 0
    for cb in blocks:
        if cb.is_noise:
            continue
        for value in cb.block.element_confidences:
            total += default if value is None else value
            count += 1
    if count == 0:
        return default
    return min(max(total / count, 0.0), 1.0)
