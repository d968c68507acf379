"""Generative synthesis layers."""

from zenscape.synthesis.layers import (
    AmbientPad,
    GentlePiano,
    RainDrops,
    ReverbTail,
    Shimmer,
    SoftSynth,
    SubBass,
    SynthesisLayer,
)

__all__ = [
    "SynthesisLayer",
    "AmbientPad",
    "SoftSynth",
    "GentlePiano",
    "ReverbTail",
    "SubBass",
    "Shimmer",
    "RainDrops",
]
