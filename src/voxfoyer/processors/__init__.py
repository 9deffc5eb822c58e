"""Text Processing Module

Processors that ground French text fragments, such as deadline phrases.
"""

from .core.temporal_resolver import TemporalResolution, TemporalResolver, TemporalSource

__all__ = [
    "TemporalResolver",
    "TemporalResolution",
    "TemporalSource",
]
