"""
featmatch: configurable OpenCV keypoint detection, description and matching.
"""

from .version import __version__

__all__ = ['__version__']
