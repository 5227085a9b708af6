"""
Detector, descriptor and matcher wrappers around OpenCV.
"""

from .detectors import build_detector, detect_keypoints
from .descriptors import build_extractor, describe_keypoints
from .matcher import build_matcher, match_descriptors, ratio_test
from .nms import suppress_overlapping
from .types import DescriptorFamily, DescriptorType, DetectorType, MatcherType, SelectorType

__all__ = [
    'build_detector',
    'detect_keypoints',
    'build_extractor',
    'describe_keypoints',
    'build_matcher',
    'match_descriptors',
    'ratio_test',
    'suppress_overlapping',
    'DescriptorFamily',
    'DescriptorType',
    'DetectorType',
    'MatcherType',
    'SelectorType',
]
