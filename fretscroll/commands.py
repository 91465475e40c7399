"""Render commands handed to a drawing surface.

A frame is described entirely by plain frozen dataclasses carrying geometry,
style (RGB tuples and stroke widths) and optional text.  Each command has a
``kind`` tag so that a surface can dispatch on it, and ``to_dict()`` gives a
JSON-ready form for surfaces outside the process (see ``fretscroll.web_ui``).
"""

import dataclasses
import typing

import fretscroll.constants


@dataclasses.dataclass (frozen=True)
class Viewport:

	"""
	Pixel rectangle the chart is drawn into.
	"""

	left: float
	top: float
	right: float
	bottom: float

	def __post_init__ (self) -> None:

		if self.right < self.left or self.bottom < self.top:
			raise ValueError(f"Degenerate viewport {self!r}")

	@property
	def width (self) -> float:
		return self.right - self.left

	@property
	def height (self) -> float:
		return self.bottom - self.top

	@classmethod
	def sized (cls, width: float, height: float) -> "Viewport":

		"""Viewport anchored at the origin."""

		return cls(0.0, 0.0, float(width), float(height))


class _Command:

	def to_dict (self) -> typing.Dict[str, typing.Any]:

		"""Return the command as a dict of plain values, including ``kind``."""

		return dataclasses.asdict(self)  # type: ignore[call-overload]


@dataclasses.dataclass (frozen=True)
class GridLine (_Command):

	"""
	A vertical beat or subdivision line with its sub-beat index label.
	"""

	x: float
	top: float
	bottom: float
	is_bar: bool
	label: str
	label_y: float
	font_size: float
	color: fretscroll.constants.Color = fretscroll.constants.SUB_LINE_COLOR
	stroke_width: float = fretscroll.constants.LINE_STROKE_WIDTH
	kind: str = dataclasses.field(default="grid_line", init=False)


@dataclasses.dataclass (frozen=True)
class StringLine (_Command):

	"""
	A horizontal line through the middle of one lane.
	"""

	y: float
	left: float
	right: float
	color: fretscroll.constants.Color = fretscroll.constants.STRING_COLOR
	stroke_width: float = fretscroll.constants.LINE_STROKE_WIDTH
	kind: str = dataclasses.field(default="string_line", init=False)


@dataclasses.dataclass (frozen=True)
class NoteCircle (_Command):

	"""
	A point note: filled circle with the fret label centred on it.
	"""

	center_x: float
	center_y: float
	radius: float
	label: str
	font_size: float
	fill: fretscroll.constants.Color = fretscroll.constants.NOTE_FILL_COLOR
	stroke: fretscroll.constants.Color = fretscroll.constants.NOTE_STROKE_COLOR
	stroke_width: float = fretscroll.constants.NOTE_STROKE_WIDTH
	text_color: fretscroll.constants.Color = fretscroll.constants.TEXT_COLOR
	kind: str = dataclasses.field(default="note_circle", init=False)


@dataclasses.dataclass (frozen=True)
class NoteSpan (_Command):

	"""
	One rounded rectangle of a sustained note.

	A sustain that crosses the loop seam is drawn as two spans; only the one
	holding the onset carries the label (``label`` is None on the other).
	"""

	left: float
	top: float
	right: float
	bottom: float
	corner_radius: float
	label: typing.Optional[str]
	label_x: float
	label_y: float
	font_size: float
	fill: fretscroll.constants.Color = fretscroll.constants.NOTE_FILL_COLOR
	stroke: fretscroll.constants.Color = fretscroll.constants.NOTE_STROKE_COLOR
	stroke_width: float = fretscroll.constants.NOTE_STROKE_WIDTH
	text_color: fretscroll.constants.Color = fretscroll.constants.TEXT_COLOR
	kind: str = dataclasses.field(default="note_span", init=False)


NoteCommand = typing.Union[NoteCircle, NoteSpan]


class Frame (typing.NamedTuple):

	"""Everything needed to draw one frame, apart from the static string lines."""

	grid: typing.List[GridLine]
	notes: typing.List[NoteCommand]
