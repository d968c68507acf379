"""
Fixed harmonic material for the synthesis layers.
"""

# Am - G - C - Am, one chord per quarter of the output.
CHORD_TABLE = (
    (220.0, 277.18, 329.63),   # Am (A, C, E)
    (196.0, 246.94, 293.66),   # G (G, B, D)
    (261.63, 329.63, 392.0),   # C (C, E, G)
    (220.0, 277.18, 329.63),   # Am (A, C, E)
)

# Ratios against the 220 Hz synth base note
PENTATONIC_RATIOS = (1.0, 9 / 8, 5 / 4, 3 / 2, 5 / 3)

# C4 D4 E4 G4 A4 C5
PIANO_SCALE = (261.63, 293.66, 329.63, 392.0, 440.0, 523.25)

SYNTH_BASE_HZ = 220.0
