#!/usr/bin/env python3
"""
Algorithm selectors and their parameters.

Every detector, descriptor, matcher and selector is a closed enum so that an
unknown name is rejected up front instead of silently producing no detector.
"""
from dataclasses import dataclass
from enum import Enum

from featmatch.errors import InvalidConfiguration


class _ParsableEnum(Enum):
    """Enum that can be built from its name or one of its config aliases."""

    @classmethod
    def _aliases(cls):
        return {}

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise InvalidConfiguration(
                f"{cls.__name__} must be a string, got {type(value).__name__}")
        key = value.strip().upper()
        aliases = cls._aliases()
        if key in aliases:
            return cls[aliases[key]]
        if key in cls.__members__:
            return cls[key]
        choices = ", ".join(list(cls.__members__) + list(aliases))
        raise InvalidConfiguration(
            f"Unknown {cls.__name__}: {value!r} (expected one of {choices})")


class DetectorType(_ParsableEnum):
    SHITOMASI = "Shi-Tomasi"
    HARRIS = "Harris"
    FAST = "FAST"
    BRISK = "BRISK"
    ORB = "ORB"
    AKAZE = "AKAZE"
    SIFT = "SIFT"

    @classmethod
    def _aliases(cls):
        return {"SHI-TOMASI": "SHITOMASI", "SHI_TOMASI": "SHITOMASI"}

    @property
    def is_classic(self):
        """True for the corner detectors that are not OpenCV Feature2D objects."""
        return self in (DetectorType.SHITOMASI, DetectorType.HARRIS)


class DescriptorFamily(_ParsableEnum):
    BINARY = "DES_BINARY"
    HOG = "DES_HOG"

    @classmethod
    def _aliases(cls):
        return {"DES_BINARY": "BINARY", "DES_HOG": "HOG"}


class DescriptorType(_ParsableEnum):
    BRISK = "BRISK"
    BRIEF = "BRIEF"
    ORB = "ORB"
    FREAK = "FREAK"
    AKAZE = "AKAZE"
    SIFT = "SIFT"

    @property
    def family(self):
        if self is DescriptorType.SIFT:
            return DescriptorFamily.HOG
        return DescriptorFamily.BINARY


class MatcherType(_ParsableEnum):
    BF = "MAT_BF"
    FLANN = "MAT_FLANN"

    @classmethod
    def _aliases(cls):
        return {"MAT_BF": "BF", "MAT_FLANN": "FLANN"}


class SelectorType(_ParsableEnum):
    NN = "SEL_NN"
    KNN = "SEL_KNN"

    @classmethod
    def _aliases(cls):
        return {"SEL_NN": "NN", "SEL_KNN": "KNN"}


@dataclass
class ShiTomasiParams:
    block_size: int = 4          # neighbourhood for the derivative covariance matrix
    max_overlap: float = 0.0     # max. permissible overlap between two features, ratio
    quality_level: float = 0.01  # minimal accepted quality of image corners
    k: float = 0.04

    @property
    def min_distance(self):
        return (1.0 - self.max_overlap) * self.block_size


@dataclass
class HarrisParams:
    block_size: int = 2
    aperture_size: int = 3
    min_response: float = 100    # on the [0, 255] normalized response
    k: float = 0.04
    max_overlap_pct: float = 0.0  # max. permissible overlap, percent

    @property
    def keypoint_size(self):
        return 2 * self.aperture_size


@dataclass
class BriskParams:
    threshold: int = 30          # FAST/AGAST detection threshold score
    octaves: int = 3             # 0 means single scale
    pattern_scale: float = 1.0


@dataclass
class MatcherParams:
    matcher: MatcherType = MatcherType.BF
    selector: SelectorType = SelectorType.NN
    family: DescriptorFamily = DescriptorFamily.BINARY
    ratio: float = 0.8
    cross_check: bool = False


def check_combination(detector, descriptor):
    """
    Reject detector/descriptor pairs that OpenCV cannot process.

    Args:
        detector: DetectorType or its name
        descriptor: DescriptorType or its name

    Returns:
        (DetectorType, DescriptorType)
    """
    detector = DetectorType.parse(detector)
    descriptor = DescriptorType.parse(descriptor)
    # AKAZE descriptors need the class_id/octave layout written by the AKAZE detector
    if descriptor is DescriptorType.AKAZE and detector is not DetectorType.AKAZE:
        raise InvalidConfiguration(
            f"AKAZE descriptors require AKAZE keypoints, got {detector.name}")
    # SIFT octaves exceed ORB's pyramid and exhaust memory
    if detector is DetectorType.SIFT and descriptor is DescriptorType.ORB:
        raise InvalidConfiguration("ORB descriptors cannot be computed on SIFT keypoints")
    return detector, descriptor
