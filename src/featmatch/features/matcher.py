#!/usr/bin/env python3
import logging

import cv2
import numpy as np

from featmatch.errors import InvalidConfiguration, InvalidInput
from featmatch.features.types import DescriptorFamily, MatcherType, SelectorType

logger = logging.getLogger(__name__)

FLANN_INDEX_KDTREE = 1


def build_matcher(matcher_type, family=DescriptorFamily.BINARY, cross_check=False):
    """
    Create a brute-force or FLANN descriptor matcher.

    Args:
        matcher_type: MatcherType or its name (MAT_BF, MAT_FLANN)
        family: DescriptorFamily, picks Hamming vs. L2 for brute force
        cross_check: brute-force cross check, only meaningful for SEL_NN

    Returns:
        cv2.DescriptorMatcher
    """
    matcher_type = MatcherType.parse(matcher_type)
    family = DescriptorFamily.parse(family)
    if matcher_type is MatcherType.BF:
        norm = cv2.NORM_HAMMING if family is DescriptorFamily.BINARY else cv2.NORM_L2
        return cv2.BFMatcher(norm, crossCheck=cross_check)
    if matcher_type is MatcherType.FLANN:
        index_params = dict(algorithm=FLANN_INDEX_KDTREE, trees=5)
        search_params = dict(checks=50)
        return cv2.FlannBasedMatcher(index_params, search_params)
    raise InvalidConfiguration(f"Unsupported matcher type: {matcher_type}")


def ratio_test(candidates, ratio=0.8):
    """
    Lowe's ratio test over k=2 nearest-neighbour candidates.

    Args:
        candidates: per query descriptor, its (best, second best) cv2.DMatch
        ratio: keep best iff best.distance <= ratio * second.distance

    Returns:
        good_matches: at most one cv2.DMatch per query, in query order
    """
    if not 0.0 < ratio <= 1.0:
        raise InvalidConfiguration(f"ratio must be within (0, 1], got {ratio}")

    good_matches = []
    for i, pair in enumerate(candidates):
        if len(pair) != 2:
            raise InvalidInput(
                f"Query {i} has {len(pair)} candidate(s), the ratio test needs exactly 2")
        best, second = pair
        if best.distance > second.distance:
            raise InvalidInput(
                f"Query {i} candidates are not ordered by ascending distance "
                f"({best.distance} > {second.distance})")
        if best.distance <= ratio * second.distance:
            good_matches.append(best)
    return good_matches


def match_descriptors(desc_source, desc_ref, matcher_type, selector_type,
                      family=DescriptorFamily.BINARY, ratio=0.8, cross_check=False):
    """
    Match source descriptors against reference descriptors.

    Args:
        desc_source: Descriptors of the current frame (queries)
        desc_ref: Descriptors of the previous frame (train set)
        matcher_type: MAT_BF or MAT_FLANN
        selector_type: SEL_NN (best match) or SEL_KNN (k=2 + ratio test)
        family: DES_BINARY or DES_HOG
        ratio: ratio for the k-NN ratio test

    Returns:
        matches: list of cv2.DMatch
        elapsed_ms: matching time in milliseconds
    """
    matcher_type = MatcherType.parse(matcher_type)
    selector_type = SelectorType.parse(selector_type)
    if selector_type is SelectorType.KNN and not 0.0 < ratio <= 1.0:
        raise InvalidConfiguration(f"ratio must be within (0, 1], got {ratio}")

    if desc_source is None or desc_ref is None or len(desc_source) == 0 or len(desc_ref) == 0:
        logger.info("Matched 0 keypoints using %s (no descriptors)", selector_type.value)
        return [], 0.0

    if selector_type is SelectorType.KNN and len(desc_ref) < 2:
        # k=2 needs two reference descriptors, a sparse frame simply has no matches
        logger.info("Matched 0 keypoints using %s (%d reference descriptor)",
                    selector_type.value, len(desc_ref))
        return [], 0.0

    if matcher_type is MatcherType.FLANN:
        # FLANN's KD-tree only handles float32
        if desc_source.dtype != np.float32:
            desc_source = desc_source.astype(np.float32)
        if desc_ref.dtype != np.float32:
            desc_ref = desc_ref.astype(np.float32)

    matcher = build_matcher(matcher_type, family, cross_check=cross_check)

    t = cv2.getTickCount()
    if selector_type is SelectorType.NN:
        matches = list(matcher.match(desc_source, desc_ref))
    else:
        matches = ratio_test(matcher.knnMatch(desc_source, desc_ref, k=2), ratio)
    elapsed_ms = 1000.0 * (cv2.getTickCount() - t) / cv2.getTickFrequency()

    logger.info("Matched %d keypoints using %s", len(matches), selector_type.value)
    return matches, elapsed_ms
