"""Offline voice-to-ambience transformation engine."""

from zenscape.core.analyzer import EnvelopeExtractor, FeatureAnalyzer, PitchEstimator
from zenscape.core.composer import ComposerConfig, LayerMix, ZenComposer
from zenscape.core.signal import SignalBuffer, StereoOutputBuffer, Track
from zenscape.errors import (
    CompositionCancelled,
    EncodeError,
    InvalidInputError,
    ZenscapeError,
)
from zenscape.io.exporter import AudioExporter
from zenscape.pipeline import ZenPipeline

__version__ = "0.1.0"
__all__ = [
    "SignalBuffer",
    "StereoOutputBuffer",
    "Track",
    "EnvelopeExtractor",
    "PitchEstimator",
    "FeatureAnalyzer",
    "LayerMix",
    "ComposerConfig",
    "ZenComposer",
    "AudioExporter",
    "ZenPipeline",
    "ZenscapeError",
    "InvalidInputError",
    "CompositionCancelled",
    "EncodeError",
]
