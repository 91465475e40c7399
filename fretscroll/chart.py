"""Chart: bar layout, notes, and per-frame render lists.

A ``Chart`` is the fretboard being scrolled: a ``BarConfig`` that fixes the
grid, a number of strings (lanes), and an immutable collection of notes.
Given a playhead beat and a viewport it produces a ``Frame`` of grid lines
and note glyphs.  It holds no per-frame state, so rendering the same inputs
twice yields equal frames.

Notes come in two shapes::

	PointNote(string_index=1, label=3, onset_beat=5.25)
	SustainedNote(string_index=5, label=2, onset_beat=4.0, sustain_end_beat=4.5)

Only notes inside a one-bar look-ahead window are drawn::

	onset_beat <= playhead + beats_per_bar  and  end_beat >= playhead
"""

import bisect
import dataclasses
import logging
import math
import typing

import fretscroll.commands
import fretscroll.constants
import fretscroll.projection


logger = logging.getLogger(__name__)


# Slack on the bisect bounds so that float error in the index never drops a
# note the exact visibility test would keep.
_INDEX_SLACK = 1e-9


@dataclasses.dataclass (frozen=True)
class BarConfig:

	"""
	Beats per bar and grid subdivisions per beat.
	"""

	beats_per_bar: float = fretscroll.constants.DEFAULT_BEATS_PER_BAR
	subdivisions_per_beat: float = fretscroll.constants.DEFAULT_SUBDIVISIONS_PER_BEAT

	def __post_init__ (self) -> None:

		for name in ("beats_per_bar", "subdivisions_per_beat"):
			if not math.isfinite(getattr(self, name)):
				raise ValueError(f"{name} must be finite")

		if self.beats_per_bar <= 0:
			raise ValueError("beats_per_bar must be positive")

		if self.subdivisions_per_beat <= 0:
			raise ValueError("subdivisions_per_beat must be positive")

		# Fractional bars or subdivisions leave a partial grid cell.
		for name in ("beats_per_bar", "subdivisions_per_beat"):
			value = getattr(self, name)
			if value != int(value):
				raise ValueError(f"{name} must be a whole number, got {value}")

	@property
	def total_subdivisions (self) -> int:

		"""Number of grid lines in one bar."""

		return int(self.beats_per_bar * self.subdivisions_per_beat)

	def bar_position (self, beat: float) -> typing.Tuple[int, int]:

		"""Return ``(bar, beat_in_bar)``, both counted from zero.

		Example: with 4 beats per bar, beat ``9.5`` → ``(2, 1)``.
		"""

		whole = int(beat // 1)
		beats = int(self.beats_per_bar)

		return whole // beats, whole % beats


def _check_note_fields (string_index: int, label: int) -> None:

	if string_index < 0:
		raise ValueError(f"string_index must be non-negative, got {string_index}")

	if label < 0:
		raise ValueError(f"label must be non-negative, got {label}")


@dataclasses.dataclass (frozen=True)
class PointNote:

	"""
	A note drawn as a single circle at its onset.
	"""

	string_index: int
	label: int
	onset_beat: float

	def __post_init__ (self) -> None:
		_check_note_fields(self.string_index, self.label)

	@property
	def end_beat (self) -> float:
		return self.onset_beat


@dataclasses.dataclass (frozen=True)
class SustainedNote:

	"""
	A held note drawn as a span from onset to ``sustain_end_beat``.
	"""

	string_index: int
	label: int
	onset_beat: float
	sustain_end_beat: float

	def __post_init__ (self) -> None:

		_check_note_fields(self.string_index, self.label)

		if self.sustain_end_beat <= self.onset_beat:
			raise ValueError(
				f"sustain_end_beat ({self.sustain_end_beat}) must be after onset_beat ({self.onset_beat})"
			)

	@property
	def end_beat (self) -> float:
		return self.sustain_end_beat


Note = typing.Union[PointNote, SustainedNote]


def make_note (
	string_index: int,
	label: int,
	onset_beat: float,
	sustain_end_beat: typing.Optional[float] = None,
) -> Note:

	"""Build a ``PointNote`` or ``SustainedNote`` depending on ``sustain_end_beat``."""

	if sustain_end_beat is None:
		return PointNote(string_index, label, float(onset_beat))

	return SustainedNote(string_index, label, float(onset_beat), float(sustain_end_beat))


class Chart:

	"""The fretboard: bar layout, string count and notes.

	Example:
		```python
		chart = Chart(
			notes = [make_note(0, 3, 0.0), make_note(5, 2, 4.0, 4.5)],
			bar_config = BarConfig(beats_per_bar=4, subdivisions_per_beat=4),
			fret_count = 6,
		)

		frame = chart.render_frame(playhead, Viewport.sized(1920, 540), looping=True)
		```
	"""

	def __init__ (
		self,
		notes: typing.Iterable[Note] = (),
		bar_config: typing.Optional[BarConfig] = None,
		fret_count: int = fretscroll.constants.DEFAULT_FRET_COUNT,
	) -> None:

		"""Validate and index the notes.

		Parameters:
			notes: Notes in any order.
			bar_config: Grid layout (default 4 beats of 4 subdivisions).
			fret_count: Number of strings (lanes); every note's
				``string_index`` must be below it.

		Raises:
			ValueError: If ``fret_count`` is not positive or a note sits on a
				string outside the board.
		"""

		if fret_count <= 0:
			raise ValueError("fret_count must be positive")

		self.bar_config = bar_config if bar_config is not None else BarConfig()
		self.fret_count = fret_count
		self.notes: typing.Tuple[Note, ...] = tuple(notes)

		for note in self.notes:
			if note.string_index >= fret_count:
				raise ValueError(
					f"{note!r} is on string {note.string_index} but the chart has {fret_count} strings"
				)

		# Onset-sorted index.  A note can only be visible if its onset lies
		# within the longest sustain before the playhead.
		self._by_onset: typing.List[Note] = sorted(self.notes, key=lambda n: n.onset_beat)
		self._onsets: typing.List[float] = [n.onset_beat for n in self._by_onset]
		self._max_span: float = max((n.end_beat - n.onset_beat for n in self.notes), default=0.0)

	@classmethod
	def default (cls) -> "Chart":

		"""The demonstration chart: six strings of 4/4 with two sustains."""

		return cls(
			notes = [
				make_note(0, 3, 0.0),
				make_note(1, 1, 1.0),
				make_note(2, 0, 2.0),
				make_note(3, 5, 3.0),
				make_note(4, 2, 4.0),
				make_note(5, 2, 4.0, 4.5),
				make_note(1, 2, 5.0),
				make_note(1, 3, 5.25),
				make_note(2, 3, 6.0),
				make_note(2, 10, 10.0, 11.0),
			],
		)

	@classmethod
	def from_dict (cls, data: typing.Dict[str, typing.Any]) -> "Chart":

		"""Build a chart from a ``chart:`` configuration mapping.

		Falls back to the demonstration notes when ``notes`` is absent.
		Each note entry takes ``string``, ``label``, ``onset`` and optional
		``sustain_end``.
		"""

		bar_config = BarConfig(
			beats_per_bar = float(data.get("beats_per_bar", fretscroll.constants.DEFAULT_BEATS_PER_BAR)),
			subdivisions_per_beat = float(data.get("subdivisions_per_beat", fretscroll.constants.DEFAULT_SUBDIVISIONS_PER_BEAT)),
		)

		fret_count = int(data.get("fret_count", fretscroll.constants.DEFAULT_FRET_COUNT))

		if "notes" not in data:
			return cls(cls.default().notes, bar_config, fret_count)

		notes: typing.List[Note] = []

		for entry in data["notes"] or []:

			if not isinstance(entry, dict):
				raise ValueError(f"Note entry must be a mapping, got {entry!r}")

			unknown = set(entry) - {"string", "label", "onset", "sustain_end"}

			if unknown:
				raise ValueError(f"Unknown note fields {sorted(unknown)} in {entry!r}")

			try:
				notes.append(make_note(
					int(entry["string"]),
					int(entry.get("label", 0)),
					float(entry["onset"]),
					None if entry.get("sustain_end") is None else float(entry["sustain_end"]),
				))
			except (KeyError, TypeError) as e:
				raise ValueError(f"Invalid note entry {entry!r}: {e}") from e

		return cls(notes, bar_config, fret_count)

	# ------------------------------------------------------------------
	# Geometry
	# ------------------------------------------------------------------

	def bar_pixels (self, viewport: fretscroll.commands.Viewport) -> float:

		"""Pixels per beat: one bar fills the viewport width."""

		return viewport.width / self.bar_config.beats_per_bar

	def lane_height (self, viewport: fretscroll.commands.Viewport) -> float:
		return viewport.height / self.fret_count

	def lane_y (self, string_index: int, viewport: fretscroll.commands.Viewport) -> float:

		"""Vertical centre of a string's lane."""

		return viewport.top + self.lane_height(viewport) * (0.5 + string_index)

	# ------------------------------------------------------------------
	# Visibility
	# ------------------------------------------------------------------

	def is_visible (self, note: Note, playhead: float) -> bool:

		"""True when the note overlaps the one-bar window ahead of the playhead."""

		return note.onset_beat <= playhead + self.bar_config.beats_per_bar and note.end_beat >= playhead

	def visible_notes (self, playhead: float) -> typing.List[Note]:

		"""Return the notes to draw at ``playhead``, ordered by onset."""

		lo = bisect.bisect_left(self._onsets, playhead - self._max_span - _INDEX_SLACK)
		hi = bisect.bisect_right(self._onsets, playhead + self.bar_config.beats_per_bar + _INDEX_SLACK)

		visible = [note for note in self._by_onset[lo:hi] if self.is_visible(note, playhead)]

		if logger.isEnabledFor(logging.DEBUG):
			logger.debug(f"playhead {playhead:.3f}: {len(visible)} of {len(self.notes)} notes visible")

		return visible

	# ------------------------------------------------------------------
	# Render lists
	# ------------------------------------------------------------------

	def string_lines (self, viewport: fretscroll.commands.Viewport) -> typing.List[fretscroll.commands.StringLine]:

		"""One horizontal line per string.  Independent of the playhead."""

		return [
			fretscroll.commands.StringLine(
				y = self.lane_y(i, viewport),
				left = viewport.left,
				right = viewport.right,
			)
			for i in range(self.fret_count)
		]

	def grid_lines (
		self,
		playhead: float,
		viewport: fretscroll.commands.Viewport,
	) -> typing.List[fretscroll.commands.GridLine]:

		"""Lines for every subdivision of one bar, scrolled to the playhead.

		The grid repeats every bar and one bar spans the viewport, so grid
		lines always wrap, whether or not the session is looping.
		"""

		subs = self.bar_config.subdivisions_per_beat
		subs_per_line = int(subs)
		bar_pixels = self.bar_pixels(viewport)
		font_size = self.lane_height(viewport) * fretscroll.constants.FONT_SIZE_FRACTION

		lines: typing.List[fretscroll.commands.GridLine] = []

		for i in range(self.bar_config.total_subdivisions):

			x = fretscroll.projection.beat_to_x(
				i / subs,
				playhead,
				viewport.width,
				bar_pixels,
				left = viewport.left,
				looping = True,
			)

			is_bar = i % subs_per_line == 0

			lines.append(fretscroll.commands.GridLine(
				x = x,
				top = viewport.top,
				bottom = viewport.bottom,
				is_bar = is_bar,
				label = str(i % subs_per_line),
				label_y = viewport.top + fretscroll.constants.GRID_LABEL_OFFSET,
				font_size = font_size,
				color = fretscroll.constants.BAR_LINE_COLOR if is_bar else fretscroll.constants.SUB_LINE_COLOR,
			))

		return lines

	def note_commands (
		self,
		playhead: float,
		viewport: fretscroll.commands.Viewport,
		looping: bool = False,
	) -> typing.List[fretscroll.commands.NoteCommand]:

		"""Glyphs for every visible note."""

		bar_pixels = self.bar_pixels(viewport)
		lane = self.lane_height(viewport)
		half_lane = lane / 2
		font_size = lane * fretscroll.constants.FONT_SIZE_FRACTION

		def project (beat: float) -> float:
			return fretscroll.projection.beat_to_x(
				beat,
				playhead,
				viewport.width,
				bar_pixels,
				left = viewport.left,
				looping = looping,
				snap = False,
			)

		commands: typing.List[fretscroll.commands.NoteCommand] = []

		for note in self.visible_notes(playhead):

			y = self.lane_y(note.string_index, viewport)
			x = project(note.onset_beat)
			label = str(note.label)

			if isinstance(note, PointNote):
				commands.append(fretscroll.commands.NoteCircle(
					center_x = x,
					center_y = y,
					radius = half_lane,
					label = label,
					font_size = font_size,
				))
				continue

			top = viewport.top + lane * note.string_index

			if looping and (note.sustain_end_beat - note.onset_beat) * bar_pixels >= viewport.width:
				# Longer than the whole ring: it covers every column.
				segments = [(viewport.left, viewport.right)]
			else:
				segments = fretscroll.projection.span_segments(
					x,
					project(note.sustain_end_beat),
					viewport.left,
					viewport.right,
					pad = half_lane,
				)

			for index, (left, right) in enumerate(segments):
				commands.append(fretscroll.commands.NoteSpan(
					left = left,
					top = top,
					right = right,
					bottom = top + lane,
					corner_radius = lane * fretscroll.constants.CORNER_RADIUS_FRACTION,
					label = label if index == 0 else None,
					label_x = x,
					label_y = y,
					font_size = font_size,
				))

		return commands

	def render_frame (
		self,
		playhead: float,
		viewport: fretscroll.commands.Viewport,
		looping: bool = False,
	) -> fretscroll.commands.Frame:

		"""Build the grid and note command lists for one frame.

		Parameters:
			playhead: Current beat from ``Transport.advance()``.
			viewport: Pixel rectangle to draw into; must have positive width
				and height.
			looping: Wrap note positions around the viewport.
		"""

		assert viewport.width > 0 and viewport.height > 0, f"Viewport must have a positive size: {viewport!r}"

		return fretscroll.commands.Frame(
			grid = self.grid_lines(playhead, viewport),
			notes = self.note_commands(playhead, viewport, looping),
		)
