"""
Pytest configuration and shared fixtures for chat transcript tests.
"""
import logging
import os
import sys

import pytest

# Ensure project root is on sys.path so tests can import local packages without installing
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from chat_transcript.models.data_models import Rect, ScreenGeometry, TextBlock


SCREEN_WIDTH = 1000
SCREEN_HEIGHT = 2000


def make_block(text, left, top, width=200, height=30, line_height=30.0, confidences=(0.9,)):
    """Build a TextBlock from a top-left corner and a size."""
    return TextBlock(
        text=text,
        box=Rect(left, top, left + width, top + height),
        avg_line_height=line_height,
        element_confidences=tuple(confidences),
    )


def left_block(text, top, **kwargs):
    return make_block(text, 40, top, **kwargs)


def right_block(text, top, **kwargs):
    kwargs.setdefault("width", 240)
    return make_block(text, 720, top, **kwargs)


@pytest.fixture
def screen():
    """Portrait screen without a status-bar band."""
    return ScreenGeometry(width=SCREEN_WIDTH, height=SCREEN_HEIGHT, excluded_top_band_height=0)


@pytest.fixture(autouse=True)
def setup_logging():
    """Setup logging for tests."""
    logging.basicConfig(
        level=logging.DEBUG,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


@pytest.fixture
def sample_config_dict():
    """Sample configuration dictionary for testing."""
    return {
        "engine": {
            "small_font_threshold_px": 36,
            "name_pair_max_gap_px": 120,
            "default_element_confidence": 0.4,
            "group_chat_indicators": ["여러분", "단체"],
        },
        "logging": {
            "level": "DEBUG",
            "file": "./logs/test.log",
            "max_size": "1MB",
        },
    }
