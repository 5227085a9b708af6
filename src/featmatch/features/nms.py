#!/usr/bin/env python3
"""
Non-maximum suppression of a dense corner response map.

Pixels above a response threshold become keypoints of a fixed size; keypoints
whose circles overlap by more than the allowed percentage are collapsed onto
the strongest one.
"""
import cv2
import numpy as np

from featmatch.errors import InvalidConfiguration


def overlap_percent(kp1, kp2):
    """Intersection-over-union of two keypoint circles, in percent."""
    return 100.0 * cv2.KeyPoint_overlap(kp1, kp2)


def suppress_overlapping(response, response_threshold, overlap_threshold=0.0, keypoint_size=6):
    """
    Turn a corner response grid into non-overlapping keypoints.

    The grid is scanned row by row. A pixel above ``response_threshold`` is a
    candidate; it is appended when it overlaps no accepted keypoint, dropped
    when an overlapped keypoint is at least as strong, and otherwise takes the
    slot of the first keypoint it overlaps (any other overlapped ones are
    removed).

    Args:
        response: 2D array of non-negative corner responses
        response_threshold: minimum response (exclusive) for a candidate
        overlap_threshold: max. allowed overlap between kept keypoints, in [0, 100]
        keypoint_size: diameter assigned to every keypoint

    Returns:
        keypoints: list of cv2.KeyPoint in first-accepted order
    """
    if not 0.0 <= overlap_threshold <= 100.0:
        raise InvalidConfiguration(
            f"overlap_threshold must be within [0, 100], got {overlap_threshold}")
    if keypoint_size <= 0:
        raise InvalidConfiguration(f"keypoint_size must be positive, got {keypoint_size}")

    response = np.asarray(response)
    if not np.issubdtype(response.dtype, np.floating):
        response = response.astype(np.float32)
    if response.size == 0:
        return []
    if response.ndim != 2:
        raise InvalidConfiguration(f"response must be a 2D grid, got shape {response.shape}")

    keypoints = []
    # centers[i] is keypoints[i].pt; equal-size circles further apart than
    # their diameter have zero overlap, so only nearby ones are compared
    centers = np.empty((0, 2), dtype=np.float64)
    reach = float(keypoint_size) + 1e-3

    rows, cols = np.nonzero(response > response_threshold)  # row-major order
    for r, c in zip(rows, cols):
        candidate = cv2.KeyPoint(float(c), float(r), float(keypoint_size), -1,
                                 float(response[r, c]))

        near = np.flatnonzero(np.hypot(centers[:, 0] - c, centers[:, 1] - r) < reach)
        overlapping = [i for i in near if overlap_percent(candidate, keypoints[i]) > overlap_threshold]
        if not overlapping:
            keypoints.append(candidate)
            centers = np.vstack([centers, (c, r)])
            continue
        if any(keypoints[i].response >= candidate.response for i in overlapping):
            continue

        keypoints[overlapping[0]] = candidate
        centers[overlapping[0]] = (c, r)
        for i in reversed(overlapping[1:]):
            del keypoints[i]
        centers = np.delete(centers, overlapping[1:], axis=0)

    return keypoints
