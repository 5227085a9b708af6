#!/usr/bin/env python3
"""
Configuration loading and validation.

Pipeline settings live in YAML files. A file may name a parent through
``inherit_from`` (path relative to the file) whose values it overrides.
"""
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from featmatch.errors import InvalidConfiguration
from featmatch.features.selection import VEHICLE_RECT
from featmatch.features.types import (
    DescriptorType,
    DetectorType,
    MatcherParams,
    MatcherType,
    SelectorType,
    check_combination,
)


class ConfigManager:
    """YAML configuration files."""

    @staticmethod
    def load_config(config_path) -> Dict[str, Any]:
        """
        Load a YAML configuration file, resolving ``inherit_from``.

        Args:
            config_path: path of the YAML file

        Returns:
            config: configuration dict
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f) or {}
        if not isinstance(config, dict):
            raise InvalidConfiguration(f"{config_path} must contain a mapping at top level")

        if 'inherit_from' in config:
            parent_path = config_path.parent / config.pop('inherit_from')
            parent_config = ConfigManager.load_config(parent_path)
            config = ConfigManager.merge_configs(parent_config, config)

        return config

    @staticmethod
    def merge_configs(base_config: Dict[str, Any], override_config: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge override_config into a copy of base_config."""
        merged = base_config.copy()

        for key, value in override_config.items():
            if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
                merged[key] = ConfigManager.merge_configs(merged[key], value)
            else:
                merged[key] = value

        return merged

    @staticmethod
    def save_config(config: Dict[str, Any], save_path):
        save_path = Path(save_path)
        save_path.parent.mkdir(parents=True, exist_ok=True)

        with open(save_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(config, f, default_flow_style=False, allow_unicode=True, indent=2)


def _as_float(value):
    if isinstance(value, bool) or value is None:
        raise TypeError(f"expected a number, got {value!r}")
    return float(value)


def _as_int(value):
    if isinstance(value, bool) or value is None:
        raise TypeError(f"expected an integer, got {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"expected an integer, got {value!r}")
    return int(value)


def _as_bool(value):
    if not isinstance(value, bool):
        raise TypeError(f"expected true or false, got {value!r}")
    return value


def _as_str(value):
    if not isinstance(value, str):
        raise TypeError(f"expected a string, got {value!r}")
    return value


def _as_rect(value):
    if not isinstance(value, (list, tuple)):
        raise TypeError(f"expected [x, y, w, h], got {value!r}")
    return tuple(_as_int(v) for v in value)


def _parse_fields(values, parsers, prefix):
    """Apply parsers[key] to every present key, mapping failures to InvalidConfiguration."""
    parsed = dict(values)
    for key, parse in parsers.items():
        if key in parsed:
            try:
                parsed[key] = parse(parsed[key])
            except (TypeError, ValueError) as e:
                raise InvalidConfiguration(f"Invalid value for '{prefix}{key}': {e}") from e
    return parsed


@dataclass
class ImageSource:
    directory: str = "images/KITTI/2011_09_26/image_00/data"
    prefix: str = ""
    start: int = 0
    end: int = 9
    fill_width: int = 10
    extension: str = ".png"


@dataclass
class PipelineConfig:
    detector: DetectorType = DetectorType.SHITOMASI
    descriptor: DescriptorType = DescriptorType.BRISK
    matcher: MatcherType = MatcherType.BF
    selector: SelectorType = SelectorType.NN
    ratio: float = 0.8
    cross_check: bool = False
    focus_on_vehicle: bool = True
    vehicle_rect: Tuple[int, int, int, int] = VEHICLE_RECT
    limit_keypoints: bool = False
    max_keypoints: int = 50
    visualize: bool = False
    buffer_size: int = 2
    images: ImageSource = field(default_factory=ImageSource)

    @property
    def descriptor_family(self):
        return self.descriptor.family

    @property
    def matcher_params(self):
        return MatcherParams(matcher=self.matcher, selector=self.selector,
                             family=self.descriptor_family, ratio=self.ratio,
                             cross_check=self.cross_check)

    @classmethod
    def from_dict(cls, config: Optional[Dict[str, Any]] = None) -> 'PipelineConfig':
        """
        Build a validated PipelineConfig from a plain dict (e.g. a loaded YAML file).

        Missing keys take the defaults; unknown keys are rejected.
        """
        config = dict(config or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(config) - known)
        if unknown:
            raise InvalidConfiguration(f"Unknown configuration keys: {', '.join(unknown)}")

        images = config.pop('images', None) or {}
        if not isinstance(images, dict):
            raise InvalidConfiguration("'images' must be a mapping")
        image_keys = {f.name for f in fields(ImageSource)}
        unknown = sorted(set(images) - image_keys)
        if unknown:
            raise InvalidConfiguration(f"Unknown images keys: {', '.join(unknown)}")

        parsers = {
            'detector': DetectorType.parse,
            'descriptor': DescriptorType.parse,
            'matcher': MatcherType.parse,
            'selector': SelectorType.parse,
            'ratio': _as_float,
            'cross_check': _as_bool,
            'focus_on_vehicle': _as_bool,
            'vehicle_rect': _as_rect,
            'limit_keypoints': _as_bool,
            'max_keypoints': _as_int,
            'visualize': _as_bool,
            'buffer_size': _as_int,
        }
        image_parsers = {
            'directory': _as_str,
            'prefix': _as_str,
            'start': _as_int,
            'end': _as_int,
            'fill_width': _as_int,
            'extension': _as_str,
        }
        config = _parse_fields(config, parsers, '')
        images = _parse_fields(images, image_parsers, 'images.')

        instance = cls(images=ImageSource(**images), **config)
        instance.validate()
        return instance

    def validate(self):
        """Raise InvalidConfiguration if any setting is out of range."""
        check_combination(self.detector, self.descriptor)
        if not 0.0 < self.ratio <= 1.0:
            raise InvalidConfiguration(f"ratio must be within (0, 1], got {self.ratio}")
        if self.cross_check and self.selector is SelectorType.KNN:
            raise InvalidConfiguration("cross_check cannot be combined with the SEL_KNN selector")
        if len(self.vehicle_rect) != 4 or any(v < 0 for v in self.vehicle_rect):
            raise InvalidConfiguration(
                f"vehicle_rect must be four non-negative ints (x, y, w, h), got {self.vehicle_rect}")
        if self.max_keypoints <= 0:
            raise InvalidConfiguration(f"max_keypoints must be positive, got {self.max_keypoints}")
        if self.buffer_size < 2:
            raise InvalidConfiguration(f"buffer_size must be at least 2, got {self.buffer_size}")
        if self.images.start < 0 or self.images.end < self.images.start:
            raise InvalidConfiguration(
                f"images.start/end must satisfy 0 <= start <= end, got "
                f"{self.images.start}..{self.images.end}")

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict with enum names, suitable for ConfigManager.save_config()."""
        d = asdict(self)
        for key in ('detector', 'descriptor', 'matcher', 'selector'):
            d[key] = getattr(self, key).name
        d['vehicle_rect'] = list(self.vehicle_rect)
        return d

    @classmethod
    def load(cls, config_path) -> 'PipelineConfig':
        return cls.from_dict(ConfigManager.load_config(config_path))
