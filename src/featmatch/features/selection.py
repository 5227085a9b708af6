#!/usr/bin/env python3
"""Keypoint subset selection applied between detection and description."""
from featmatch.errors import InvalidConfiguration

# x, y, width, height of the preceding vehicle in the KITTI sequence
VEHICLE_RECT = (535, 180, 180, 150)


def crop_to_region(keypoints, rect=VEHICLE_RECT):
    """Keep keypoints inside rect = (x, y, w, h), edges included."""
    x, y, w, h = rect
    if w < 0 or h < 0:
        raise InvalidConfiguration(f"Region width and height must be >= 0, got {rect}")
    return [kp for kp in keypoints
            if x <= kp.pt[0] <= x + w and y <= kp.pt[1] <= y + h]


def retain_best(keypoints, max_keypoints):
    """Keep the max_keypoints strongest keypoints; ties keep detection order."""
    if max_keypoints <= 0:
        raise InvalidConfiguration(f"max_keypoints must be positive, got {max_keypoints}")
    if len(keypoints) <= max_keypoints:
        return list(keypoints)
    return sorted(keypoints, key=lambda kp: kp.response, reverse=True)[:max_keypoints]
