#!/usr/bin/env python3
"""
Ratio test and descriptor matching tests
"""

import cv2
import numpy as np
import pytest

from featmatch.errors import InvalidConfiguration, InvalidInput
from featmatch.features.matcher import (
    build_matcher,
    match_descriptors,
    ratio_test,
)
from featmatch.features.types import DescriptorFamily


def pair(query_idx, best, second):
    return [cv2.DMatch(query_idx, 0, best), cv2.DMatch(query_idx, 1, second)]


class TestRatioTest:

    def test_boundary_kept(self):
        good = ratio_test([pair(0, 40.0, 50.0)], 0.8)
        assert len(good) == 1
        assert good[0].distance == pytest.approx(40.0)
        assert good[0].trainIdx == 0

    def test_boundary_discarded(self):
        assert ratio_test([pair(0, 41.0, 50.0)], 0.8) == []

    def test_one_match_per_query_in_order(self):
        n = 25
        good = ratio_test([pair(i, 1.0, 100.0) for i in range(n)])
        assert [m.queryIdx for m in good] == list(range(n))

    def test_mixed_keeps_query_order(self):
        candidates = [pair(0, 10.0, 50.0), pair(1, 49.0, 50.0), pair(2, 5.0, 60.0)]
        assert [m.queryIdx for m in ratio_test(candidates, 0.8)] == [0, 2]

    def test_equal_distances_with_unit_ratio(self):
        assert len(ratio_test([pair(0, 30.0, 30.0)], 1.0)) == 1

    def test_empty(self):
        assert ratio_test([], 0.8) == []

    @pytest.mark.parametrize("candidates", [
        [[cv2.DMatch(0, 0, 1.0)]],
        [[]],
        [[cv2.DMatch(0, 0, 1.0), cv2.DMatch(0, 1, 2.0), cv2.DMatch(0, 2, 3.0)]],
    ])
    def test_wrong_candidate_count(self, candidates):
        with pytest.raises(InvalidInput):
            ratio_test(candidates, 0.8)

    def test_unordered_distances(self):
        with pytest.raises(InvalidInput):
            ratio_test([pair(0, 50.0, 40.0)], 0.8)

    def test_invalid_input_is_value_error(self):
        with pytest.raises(ValueError):
            ratio_test([[cv2.DMatch(0, 0, 1.0)]], 0.8)

    @pytest.mark.parametrize("ratio", [0.0, -0.5, 1.01])
    def test_invalid_ratio(self, ratio):
        with pytest.raises(InvalidConfiguration):
            ratio_test([pair(0, 1.0, 2.0)], ratio)


class TestBuildMatcher:

    def test_brute_force(self):
        assert isinstance(build_matcher("MAT_BF", DescriptorFamily.BINARY), cv2.BFMatcher)
        assert isinstance(build_matcher("BF", "DES_HOG"), cv2.BFMatcher)

    def test_flann(self):
        assert isinstance(build_matcher("MAT_FLANN"), cv2.FlannBasedMatcher)

    def test_unknown(self):
        with pytest.raises(InvalidConfiguration):
            build_matcher("MAT_BRUTE")


class TestMatchDescriptors:

    @pytest.fixture
    def binary_descriptors(self):
        rng = np.random.default_rng(0)
        return rng.integers(0, 256, size=(30, 32), dtype=np.uint8)

    @pytest.fixture
    def float_descriptors(self):
        rng = np.random.default_rng(1)
        return rng.random((30, 128), dtype=np.float32)

    def test_bf_nn_self_match(self, binary_descriptors):
        matches, elapsed_ms = match_descriptors(
            binary_descriptors, binary_descriptors, "MAT_BF", "SEL_NN", DescriptorFamily.BINARY)

        assert len(matches) == 30
        assert all(m.queryIdx == m.trainIdx for m in matches)
        assert all(m.distance == 0 for m in matches)
        assert elapsed_ms >= 0.0

    def test_bf_knn_self_match(self, binary_descriptors):
        matches, _ = match_descriptors(
            binary_descriptors, binary_descriptors, "MAT_BF", "SEL_KNN", DescriptorFamily.BINARY)

        assert [m.queryIdx for m in matches] == list(range(30))
        assert all(m.queryIdx == m.trainIdx for m in matches)

    def test_bf_l2(self, float_descriptors):
        matches, _ = match_descriptors(
            float_descriptors, float_descriptors, "MAT_BF", "SEL_NN", DescriptorFamily.HOG)
        assert all(m.queryIdx == m.trainIdx for m in matches)

    def test_flann_converts_binary_descriptors(self, binary_descriptors):
        matches, _ = match_descriptors(
            binary_descriptors, binary_descriptors, "MAT_FLANN", "SEL_NN", DescriptorFamily.BINARY)
        assert len(matches) == 30

    def test_flann_knn(self, float_descriptors):
        matches, _ = match_descriptors(
            float_descriptors, float_descriptors, "MAT_FLANN", "SEL_KNN", DescriptorFamily.HOG)
        assert len(matches) <= 30
        assert len({m.queryIdx for m in matches}) == len(matches)

    @pytest.mark.parametrize("desc_ref", [None, np.zeros((0, 32), dtype=np.uint8)])
    def test_missing_descriptors(self, binary_descriptors, desc_ref):
        matches, elapsed_ms = match_descriptors(binary_descriptors, desc_ref, "MAT_BF", "SEL_KNN")
        assert matches == []
        assert elapsed_ms == 0.0

    def test_knn_with_single_reference(self, binary_descriptors):
        matches, elapsed_ms = match_descriptors(
            binary_descriptors, binary_descriptors[:1], "MAT_BF", "SEL_KNN")
        assert matches == []
        assert elapsed_ms == 0.0

    def test_nn_with_single_reference(self, binary_descriptors):
        matches, _ = match_descriptors(
            binary_descriptors, binary_descriptors[:1], "MAT_BF", "SEL_NN")
        assert len(matches) == 30
        assert all(m.trainIdx == 0 for m in matches)

    def test_unknown_selector(self, binary_descriptors):
        with pytest.raises(InvalidConfiguration):
            match_descriptors(binary_descriptors, binary_descriptors, "MAT_BF", "SEL_ALL")
