#!/usr/bin/env python3
import logging

import cv2

from featmatch.errors import InvalidConfiguration
from featmatch.features.types import BriskParams, DescriptorType

logger = logging.getLogger(__name__)


def _xfeatures2d():
    if not hasattr(cv2, "xfeatures2d"):
        raise InvalidConfiguration(
            "BRIEF and FREAK need cv2.xfeatures2d, install opencv-contrib-python")
    return cv2.xfeatures2d


def build_extractor(descriptor_type, brisk_params=None):
    """
    Create the OpenCV descriptor extractor for descriptor_type.

    Args:
        descriptor_type: DescriptorType or its name
        brisk_params: BriskParams, only used for BRISK

    Returns:
        cv2.Feature2D with a compute() method
    """
    descriptor_type = DescriptorType.parse(descriptor_type)
    if descriptor_type is DescriptorType.BRISK:
        p = brisk_params or BriskParams()
        return cv2.BRISK_create(thresh=p.threshold, octaves=p.octaves,
                                patternScale=p.pattern_scale)
    if descriptor_type is DescriptorType.BRIEF:
        return _xfeatures2d().BriefDescriptorExtractor_create()
    if descriptor_type is DescriptorType.ORB:
        return cv2.ORB_create()
    if descriptor_type is DescriptorType.FREAK:
        return _xfeatures2d().FREAK_create()
    if descriptor_type is DescriptorType.AKAZE:
        return cv2.AKAZE_create()
    if descriptor_type is DescriptorType.SIFT:
        return cv2.SIFT_create()
    raise InvalidConfiguration(f"Unsupported descriptor type: {descriptor_type}")


def compute_descriptors(extractor, image, keypoints):
    """
    Works for any Feature2D (ORB, BRISK, ... double as extractors)
    Returns: keypoints, descriptor ndarray
    """
    if hasattr(extractor, "compute"):
        return extractor.compute(image, keypoints)
    raise InvalidConfiguration("Extractor has no compute() method")


def describe_keypoints(image, keypoints, descriptor_type):
    """
    Compute descriptors for keypoints, timing the extraction.

    Keypoints for which no descriptor can be computed (e.g. too close to the
    border) are dropped by OpenCV, so use the returned list afterwards.

    Returns:
        keypoints: list of cv2.KeyPoint that were described
        descriptors: ndarray with one row per keypoint, or None
        elapsed_ms: extraction time in milliseconds
    """
    descriptor_type = DescriptorType.parse(descriptor_type)
    extractor = build_extractor(descriptor_type)

    t = cv2.getTickCount()
    keypoints, descriptors = compute_descriptors(extractor, image, list(keypoints))
    elapsed_ms = 1000.0 * (cv2.getTickCount() - t) / cv2.getTickFrequency()

    logger.info("%s descriptor extraction in %.3f ms", descriptor_type.name, elapsed_ms)
    return list(keypoints), descriptors, elapsed_ms
