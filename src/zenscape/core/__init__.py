"""Core analysis and composition modules."""

from zenscape.core.analyzer import FeatureAnalyzer
from zenscape.core.composer import ZenComposer
from zenscape.core.signal import SignalBuffer, StereoOutputBuffer, Track

__all__ = ["FeatureAnalyzer", "ZenComposer", "SignalBuffer", "StereoOutputBuffer", "Track"]
