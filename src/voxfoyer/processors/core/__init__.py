"""Core French text processors."""

from .temporal_resolver import TemporalResolution, TemporalResolver, TemporalSource
from .text_normalizer import fold_text, normalize_text

__all__ = [
    "TemporalResolver",
    "TemporalResolution",
    "TemporalSource",
    "fold_text",
    "normalize_text",
]
