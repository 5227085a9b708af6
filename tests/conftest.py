"""
pytest configuration and shared fixtures.
"""

import sys
from pathlib import Path

import cv2
import numpy as np
import pytest

# run against the source tree without installing
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))


def make_corner_image(shift=0):
    """Black 320x240 image with two filled white rectangles, shifted right by `shift` px."""
    img = np.zeros((240, 320), dtype=np.uint8)
    cv2.rectangle(img, (60 + shift, 60), (120 + shift, 120), 255, -1)
    cv2.rectangle(img, (170 + shift, 90), (250 + shift, 170), 255, -1)
    cv2.circle(img, (150 + shift, 190), 15, 180, -1)
    return img


@pytest.fixture
def corner_image():
    return make_corner_image()


@pytest.fixture
def corner_image_pair():
    return make_corner_image(), make_corner_image(shift=4)


@pytest.fixture
def sample_config():
    return {
        'detector': 'FAST',
        'descriptor': 'ORB',
        'matcher': 'MAT_BF',
        'selector': 'SEL_NN',
        'focus_on_vehicle': False,
    }
