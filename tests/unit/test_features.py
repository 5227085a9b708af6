#!/usr/bin/env python3
"""
Detector and descriptor tests on a synthetic image
"""

import itertools

import cv2
import numpy as np
import pytest

from featmatch.errors import InvalidConfiguration
from featmatch.features.descriptors import build_extractor, compute_descriptors, describe_keypoints
from featmatch.features.detectors import (
    build_detector,
    detect_harris,
    detect_keypoints,
    detect_shi_tomasi,
)
from featmatch.features.nms import overlap_percent
from featmatch.features.types import HarrisParams, ShiTomasiParams

requires_contrib = pytest.mark.skipif(
    not hasattr(cv2, "xfeatures2d"), reason="needs opencv-contrib-python")


class TestDetectors:

    def test_shi_tomasi(self, corner_image):
        keypoints = detect_shi_tomasi(corner_image)

        assert len(keypoints) > 0
        assert all(kp.size == ShiTomasiParams().block_size for kp in keypoints)

    def test_shi_tomasi_blank_image(self):
        assert detect_shi_tomasi(np.zeros((50, 50), dtype=np.uint8)) == []

    def test_harris(self, corner_image):
        params = HarrisParams()
        keypoints = detect_harris(corner_image, params)

        assert len(keypoints) > 0
        assert all(kp.size == params.keypoint_size for kp in keypoints)
        assert all(kp.response > params.min_response for kp in keypoints)
        for a, b in itertools.combinations(keypoints, 2):
            assert overlap_percent(a, b) <= params.max_overlap_pct

    def test_harris_finds_rectangle_corner(self, corner_image):
        keypoints = detect_harris(corner_image)
        distances = [np.hypot(kp.pt[0] - 60, kp.pt[1] - 60) for kp in keypoints]
        assert min(distances) < 4

    @pytest.mark.parametrize("name", ["FAST", "BRISK", "ORB", "AKAZE", "SIFT"])
    def test_build_detector(self, name, corner_image):
        detector = build_detector(name)
        assert hasattr(detector, "detect")
        assert isinstance(list(detector.detect(corner_image, None)), list)

    @pytest.mark.parametrize("name", ["SHITOMASI", "HARRIS", "SURF"])
    def test_build_detector_rejects(self, name):
        with pytest.raises(InvalidConfiguration):
            build_detector(name)

    @pytest.mark.parametrize("name", ["SHITOMASI", "HARRIS", "FAST"])
    def test_detect_keypoints(self, name, corner_image):
        keypoints, elapsed_ms = detect_keypoints(corner_image, name)

        assert len(keypoints) > 0
        assert elapsed_ms >= 0.0

    def test_detect_keypoints_logs(self, corner_image, caplog):
        with caplog.at_level("INFO", logger="featmatch"):
            keypoints, _ = detect_keypoints(corner_image, "FAST")
        assert f"FAST detection with n={len(keypoints)} keypoints" in caplog.text


class TestDescriptors:

    @pytest.fixture
    def keypoints(self, corner_image):
        keypoints, _ = detect_keypoints(corner_image, "FAST")
        return keypoints

    @pytest.mark.parametrize("name", ["BRISK", "ORB", "AKAZE", "SIFT"])
    def test_build_extractor(self, name):
        assert hasattr(build_extractor(name), "compute")

    @requires_contrib
    @pytest.mark.parametrize("name", ["BRIEF", "FREAK"])
    def test_build_contrib_extractor(self, name):
        assert hasattr(build_extractor(name), "compute")

    def test_unknown_descriptor(self):
        with pytest.raises(InvalidConfiguration):
            build_extractor("SURF")

    def test_compute_needs_compute_method(self, corner_image):
        with pytest.raises(InvalidConfiguration):
            compute_descriptors(object(), corner_image, [])

    def test_orb(self, corner_image, keypoints):
        described, descriptors, elapsed_ms = describe_keypoints(corner_image, keypoints, "ORB")

        assert len(described) > 0
        assert descriptors.shape == (len(described), 32)
        assert descriptors.dtype == np.uint8
        assert elapsed_ms >= 0.0

    def test_sift(self, corner_image, keypoints):
        described, descriptors, _ = describe_keypoints(corner_image, keypoints, "SIFT")

        assert descriptors.shape == (len(described), 128)
        assert descriptors.dtype == np.float32

    @requires_contrib
    def test_brief(self, corner_image, keypoints):
        described, descriptors, _ = describe_keypoints(corner_image, keypoints, "BRIEF")
        assert descriptors.shape[0] == len(described)

    def test_akaze_on_akaze_keypoints(self, corner_image):
        keypoints, _ = detect_keypoints(corner_image, "AKAZE")
        described, descriptors, _ = describe_keypoints(corner_image, keypoints, "AKAZE")
        if described:
            assert descriptors.shape[0] == len(described)
