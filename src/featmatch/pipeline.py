#!/usr/bin/env python3
import logging
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional

import cv2
import numpy as np

from featmatch.config import PipelineConfig
from featmatch.features.descriptors import describe_keypoints
from featmatch.features.detectors import detect_keypoints
from featmatch.features.draw import draw_matches, show_image
from featmatch.features.matcher import match_descriptors
from featmatch.features.selection import crop_to_region, retain_best
from featmatch.features.types import DetectorType

logger = logging.getLogger(__name__)


@dataclass
class DataFrame:
    """One processed camera image."""
    image: np.ndarray
    keypoints: List[Any] = field(default_factory=list)
    descriptors: Optional[np.ndarray] = None
    matches: List[Any] = field(default_factory=list)   # against the previous frame


@dataclass
class FrameStats:
    index: int
    num_keypoints: int = 0
    detection_ms: float = 0.0
    description_ms: float = 0.0
    num_matches: Optional[int] = None   # None for the first frame
    matching_ms: float = 0.0


def load_image_sequence(directory, prefix="", start=0, end=9, fill_width=10, extension=".png"):
    """
    Yield (index, grayscale image) for zero-padded files <prefix><index><extension>.

    Raises FileNotFoundError for the first missing or unreadable file.
    """
    directory = Path(directory)
    for index in range(start, end + 1):
        path = directory / f"{prefix}{index:0{fill_width}d}{extension}"
        img = cv2.imread(str(path), cv2.IMREAD_GRAYSCALE)
        if img is None:
            raise FileNotFoundError(f"Image not found or unreadable: {path}")
        yield index, img


def to_grayscale(img):
    if img.ndim == 3:
        return cv2.cvtColor(img, cv2.COLOR_BGR2GRAY)
    return img


class MatchingPipeline:
    """
    Detect, describe and match keypoints over a sequence of frames.
    Keeps the last few frames in a ring buffer and matches each new frame
    against its predecessor.
    """

    def __init__(self, config=None):
        """
        Args:
            config: PipelineConfig, defaults if None
        """
        self.config = config or PipelineConfig()
        self.config.validate()

        self.buffer = deque(maxlen=self.config.buffer_size)
        self.stats: List[FrameStats] = []

    def process_frame(self, image, index=None):
        """
        Process a new frame and match it against the previous one.

        Args:
            image: Current frame (grayscale or BGR)
            index: Frame number used in the statistics, defaults to a running count

        Returns:
            FrameStats of this frame
        """
        cfg = self.config
        index = len(self.stats) if index is None else index
        img_gray = to_grayscale(image)
        stats = FrameStats(index=index)

        keypoints, stats.detection_ms = detect_keypoints(img_gray, cfg.detector, visualize=cfg.visualize)

        if cfg.focus_on_vehicle:
            keypoints = crop_to_region(keypoints, cfg.vehicle_rect)
            logger.debug("Frame %d: %d keypoints on the preceding vehicle", index, len(keypoints))

        if cfg.limit_keypoints:
            if cfg.detector is DetectorType.SHITOMASI:
                # Shi-Tomasi keypoints carry no response, keep the first ones
                keypoints = keypoints[:cfg.max_keypoints]
            else:
                keypoints = retain_best(keypoints, cfg.max_keypoints)
            logger.debug("Frame %d: keypoints limited to %d", index, len(keypoints))

        keypoints, descriptors, stats.description_ms = describe_keypoints(
            img_gray, keypoints, cfg.descriptor)
        stats.num_keypoints = len(keypoints)

        frame = DataFrame(image=img_gray, keypoints=keypoints, descriptors=descriptors)

        if self.buffer:
            prev = self.buffer[-1]
            params = cfg.matcher_params
            frame.matches, stats.matching_ms = match_descriptors(
                descriptors, prev.descriptors, params.matcher, params.selector,
                family=params.family, ratio=params.ratio, cross_check=params.cross_check)
            stats.num_matches = len(frame.matches)

            if cfg.visualize:
                vis = draw_matches(frame.image, frame.keypoints, prev.image, prev.keypoints,
                                   frame.matches)
                show_image("Matching keypoints between two camera images", vis)

        self.buffer.append(frame)
        self.stats.append(stats)
        return stats

    def run(self, images):
        """
        Process a sequence of frames.

        Args:
            images: iterable of images or of (index, image) tuples

        Returns:
            list of FrameStats, one per frame
        """
        results = []
        for item in images:
            if isinstance(item, tuple):
                index, image = item
            else:
                index, image = None, item
            results.append(self.process_frame(image, index))
        return results

    def summary(self):
        """Aggregate keypoint/match counts and mean timings over all processed frames."""
        matched = [s for s in self.stats if s.num_matches is not None]

        def mean(values):
            values = list(values)
            return float(np.mean(values)) if values else 0.0

        return {
            'detector': self.config.detector.name,
            'descriptor': self.config.descriptor.name,
            'matcher': self.config.matcher.name,
            'selector': self.config.selector.name,
            'frames': len(self.stats),
            'total_keypoints': sum(s.num_keypoints for s in self.stats),
            'total_matches': sum(s.num_matches for s in matched),
            'mean_keypoints': mean(s.num_keypoints for s in self.stats),
            'mean_matches': mean(s.num_matches for s in matched),
            'mean_detection_ms': mean(s.detection_ms for s in self.stats),
            'mean_description_ms': mean(s.description_ms for s in self.stats),
            'mean_matching_ms': mean(s.matching_ms for s in matched),
        }
