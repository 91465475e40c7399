"""Default settings and drawing styles.

Tempo and bar defaults match the demonstration chart::

	20 BPM, 4 beats per bar, 4 subdivisions per beat, 6 strings

Colours are RGB tuples so that no drawing-library type crosses into the
render commands.  Sizes marked as fractions are relative to one lane
(string) height.
"""

import typing


Color = typing.Tuple[int, int, int]

# Transport

DEFAULT_BPM = 20.0
DEFAULT_FPS = 30.0

# Bar layout

DEFAULT_BEATS_PER_BAR = 4.0
DEFAULT_SUBDIVISIONS_PER_BEAT = 4.0
DEFAULT_FRET_COUNT = 6

# Strokes

STRING_COLOR: Color = (128, 128, 128)
BAR_LINE_COLOR: Color = (255, 255, 255)
SUB_LINE_COLOR: Color = (64, 64, 64)
NOTE_FILL_COLOR: Color = (255, 128, 128)
NOTE_STROKE_COLOR: Color = (255, 255, 255)
TEXT_COLOR: Color = (255, 255, 255)

LINE_STROKE_WIDTH = 1.0
NOTE_STROKE_WIDTH = 2.0

# Sizes (fractions of one lane height unless noted)

FONT_SIZE_FRACTION = 0.4
CORNER_RADIUS_FRACTION = 0.1
GRID_LABEL_OFFSET = 20.0  # pixels below the viewport top
