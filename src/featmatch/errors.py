#!/usr/bin/env python3
"""
Exceptions raised by featmatch.
"""


class FeatureMatchError(ValueError):
    """Base class for all featmatch errors."""


class InvalidConfiguration(FeatureMatchError):
    """Unknown algorithm name, bad parameter or unsupported combination."""


class InvalidInput(FeatureMatchError):
    """Malformed runtime data, e.g. a k-NN candidate list of the wrong length."""
