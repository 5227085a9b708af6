#!/usr/bin/env python3
import logging

import cv2

from featmatch.errors import InvalidConfiguration
from featmatch.features.draw import draw_keypoints, show_image
from featmatch.features.nms import suppress_overlapping
from featmatch.features.types import DetectorType, HarrisParams, ShiTomasiParams

logger = logging.getLogger(__name__)


def build_detector(detector_type="orb"):
    """
    Create an OpenCV Feature2D detector with default parameters.

    Shi-Tomasi and Harris are plain corner functions, use detect_keypoints()
    for those.
    """
    detector_type = DetectorType.parse(detector_type)
    if detector_type.is_classic:
        raise InvalidConfiguration(
            f"{detector_type.name} is not a Feature2D detector, use detect_keypoints()")
    if detector_type is DetectorType.FAST:
        return cv2.FastFeatureDetector_create()
    if detector_type is DetectorType.BRISK:
        return cv2.BRISK_create()
    if detector_type is DetectorType.ORB:
        return cv2.ORB_create()
    if detector_type is DetectorType.AKAZE:
        return cv2.AKAZE_create()
    if detector_type is DetectorType.SIFT:
        return cv2.SIFT_create()
    raise InvalidConfiguration(f"Unsupported detector type: {detector_type}")


def detect_shi_tomasi(image, params=None):
    """
    Detect corners with the Shi-Tomasi minimum eigenvalue criterion.

    Args:
        image: 8-bit grayscale image
        params: ShiTomasiParams

    Returns:
        keypoints: list of cv2.KeyPoint of size params.block_size
    """
    params = params or ShiTomasiParams()
    min_distance = params.min_distance
    rows, cols = image.shape[:2]
    max_corners = int(rows * cols / max(1.0, min_distance))

    corners = cv2.goodFeaturesToTrack(
        image, max_corners, params.quality_level, min_distance,
        mask=None, blockSize=params.block_size, useHarrisDetector=False, k=params.k)
    if corners is None:
        return []
    return [cv2.KeyPoint(float(x), float(y), float(params.block_size))
            for x, y in corners.reshape(-1, 2)]


def detect_harris(image, params=None):
    """
    Detect Harris corners and suppress overlapping ones.

    The Harris response is normalized to [0, 255] before thresholding with
    params.min_response.
    """
    params = params or HarrisParams()
    dst = cv2.cornerHarris(image, params.block_size, params.aperture_size, params.k,
                           borderType=cv2.BORDER_DEFAULT)
    dst_norm = cv2.normalize(dst, None, 0, 255, cv2.NORM_MINMAX, cv2.CV_32F)
    return suppress_overlapping(dst_norm, params.min_response,
                                overlap_threshold=params.max_overlap_pct,
                                keypoint_size=params.keypoint_size)


def detect_keypoints(image, detector_type, visualize=False):
    """
    Detect keypoints with the selected algorithm.

    Args:
        image: 8-bit grayscale image
        detector_type: DetectorType or its name
        visualize: show the detections in a window

    Returns:
        keypoints: list of cv2.KeyPoint
        elapsed_ms: detection time in milliseconds
    """
    detector_type = DetectorType.parse(detector_type)

    t = cv2.getTickCount()
    if detector_type is DetectorType.SHITOMASI:
        keypoints = detect_shi_tomasi(image)
    elif detector_type is DetectorType.HARRIS:
        keypoints = detect_harris(image)
    else:
        keypoints = list(build_detector(detector_type).detect(image, None))
    elapsed_ms = 1000.0 * (cv2.getTickCount() - t) / cv2.getTickFrequency()

    logger.info("%s detection with n=%d keypoints in %.3f ms",
                detector_type.value, len(keypoints), elapsed_ms)

    if visualize:
        show_image(f"{detector_type.value} Detector Results", draw_keypoints(image, keypoints))

    return keypoints, elapsed_ms
