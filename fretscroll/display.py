"""Terminal drawing surface.

Rasterises each frame's commands into a block of characters, one column per
pixel, with a status line underneath.  Log messages scroll above the block
without disruption.

The frame looks like (one row per string)::

	0   1   2   3   0   1   2   3
	|---:-3-:---:---|---:---:---
	|---:---:---:---1---:---:---
	|---:---:---:---|---:---:---
	|---:---:---:---|---:---:-5-
	|---:---:---:---|-2=:===:---
	Freq: 30  Transport: 12.400s  Beat 1, Pos 4  20.00 BPM  [loop]

Bar lines are ``|``, subdivision lines ``:``, strings ``-``, point notes
show their fret label, and sustains are drawn as ``=`` runs.
"""

import logging
import math
import shutil
import sys
import typing

import fretscroll.chart
import fretscroll.commands


_MIN_TERMINAL_WIDTH = 16
_BAR_CHAR = "|"
_SUB_CHAR = ":"
_STRING_CHAR = "-"
_SUSTAIN_CHAR = "="


class TextCanvas:

	"""Character grid the render commands are drawn onto.

	Column ``c`` covers pixels ``[left + c, left + c + 1)`` and row ``r``
	covers ``[top + r, top + r + 1)``.  Anything outside the grid is
	clipped, which is how non-looping notes scroll off the left edge.
	"""

	def __init__ (self, viewport: fretscroll.commands.Viewport) -> None:

		self._viewport = viewport
		self.columns = max(0, int(viewport.width))
		self.rows = max(0, int(viewport.height))
		self._header = [" "] * self.columns
		self._cells = [[" "] * self.columns for _ in range(self.rows)]

	def lines (self) -> typing.List[str]:

		"""The header row of grid labels followed by one line per row."""

		return ["".join(self._header).rstrip()] + ["".join(row).rstrip() for row in self._cells]

	# ------------------------------------------------------------------
	# Coordinate helpers
	# ------------------------------------------------------------------

	def _column (self, x: float) -> int:
		return int(math.floor(x - self._viewport.left + 0.5))

	def _row (self, y: float) -> int:
		return int(math.floor(y - self._viewport.top))

	def _put (self, row: int, column: int, char: str) -> None:

		if 0 <= row < self.rows and 0 <= column < self.columns:
			self._cells[row][column] = char

	def _put_text (self, row: int, center_column: int, text: str) -> None:

		start = center_column - (len(text) - 1) // 2

		for offset, char in enumerate(text):
			self._put(row, start + offset, char)

	# ------------------------------------------------------------------
	# Commands
	# ------------------------------------------------------------------

	def draw_string (self, line: fretscroll.commands.StringLine) -> None:

		row = self._row(line.y)

		for column in range(self._column(line.left), self._column(line.right)):
			self._put(row, column, _STRING_CHAR)

	def draw_grid_line (self, line: fretscroll.commands.GridLine) -> None:

		column = self._column(line.x)
		char = _BAR_CHAR if line.is_bar else _SUB_CHAR

		for row in range(self._row(line.top), self._row(line.bottom) + 1):
			self._put(row, column, char)

		if 0 <= column < self.columns:
			self._header[column] = line.label[:1]

	def draw_note (self, note: fretscroll.commands.NoteCommand) -> None:

		if isinstance(note, fretscroll.commands.NoteCircle):
			self._put_text(self._row(note.center_y), self._column(note.center_x), note.label)
			return

		row = self._row(note.label_y)

		# Span ends sit half a lane outside the beat positions; shrink them
		# back to whole columns so adjacent notes stay distinguishable.
		first = int(math.ceil(note.left - self._viewport.left))
		last = int(math.floor(note.right - self._viewport.left))

		for column in range(first, last):
			self._put(row, column, _SUSTAIN_CHAR)

		if note.label is not None:
			self._put_text(row, self._column(note.label_x), note.label)

	def draw_frame (
		self,
		strings: typing.Sequence[fretscroll.commands.StringLine],
		frame: fretscroll.commands.Frame,
	) -> None:

		"""Draw strings, then grid lines, then notes on top."""

		for string in strings:
			self.draw_string(string)

		for line in frame.grid:
			self.draw_grid_line(line)

		for note in frame.notes:
			self.draw_note(note)


class DisplayLogHandler (logging.Handler):

	"""Logging handler that erases the frame, writes the record, then redraws.

	Installed by ``Display.start()`` and removed by ``Display.stop()``.
	"""

	def __init__ (self, display: "Display") -> None:

		super().__init__()
		self._display = display

	def emit (self, record: logging.LogRecord) -> None:

		try:
			self._display.clear_line()

			sys.stderr.write(self.format(record) + "\n")
			sys.stderr.flush()

			self._display.draw()

		except Exception:
			self.handleError(record)


class Display:

	"""Live terminal rendering of the scrolling chart.

	The viewport is measured in characters: one column per pixel across the
	terminal and ``rows_per_string`` rows per lane.  ``Session`` asks for
	``viewport`` before rendering each frame, so resizing the terminal takes
	effect on the next frame.

	Example:
		```python
		display = Display(chart)
		display.start()
		display.update(chart.render_frame(beat, display.viewport), "Beat 1, Pos 0")
		display.stop()
		```
	"""

	def __init__ (
		self,
		chart: fretscroll.chart.Chart,
		width: typing.Optional[int] = None,
		rows_per_string: int = 1,
	) -> None:

		"""Store the chart for its string layout.

		Parameters:
			chart: The chart being displayed.
			width: Fixed width in columns.  Follows the terminal width when
				omitted.
			rows_per_string: Character rows per lane.
		"""

		if rows_per_string <= 0:
			raise ValueError("rows_per_string must be positive")

		self._chart = chart
		self._width = width
		self._rows_per_string = rows_per_string
		self._active: bool = False
		self._handler: typing.Optional[DisplayLogHandler] = None
		self._saved_handlers: typing.List[logging.Handler] = []
		self._lines: typing.List[str] = []
		self._drawn_line_count: int = 0

	@property
	def viewport (self) -> fretscroll.commands.Viewport:

		"""Character-cell viewport for the next frame."""

		if self._width is not None:
			width = self._width
		else:
			width = max(_MIN_TERMINAL_WIDTH, shutil.get_terminal_size(fallback=(80, 24)).columns - 1)

		return fretscroll.commands.Viewport.sized(width, self._chart.fret_count * self._rows_per_string)

	def start (self) -> None:

		"""Swap the root log handlers for a ``DisplayLogHandler``.

		The original handlers are restored by ``stop()``.
		"""

		if self._active:
			return

		self._active = True

		root_logger = logging.getLogger()
		self._saved_handlers = list(root_logger.handlers)
		self._handler = DisplayLogHandler(self)

		if self._saved_handlers and self._saved_handlers[0].formatter:
			self._handler.setFormatter(self._saved_handlers[0].formatter)
		else:
			self._handler.setFormatter(logging.Formatter("%(levelname)s:%(name)s:%(message)s"))

		root_logger.handlers.clear()
		root_logger.addHandler(self._handler)

	def stop (self) -> None:

		"""Erase the frame and restore the original log handlers."""

		if not self._active:
			return

		self.clear_line()
		self._active = False

		root_logger = logging.getLogger()
		root_logger.handlers.clear()

		for handler in self._saved_handlers:
			root_logger.addHandler(handler)

		self._saved_handlers = []
		self._handler = None

	def render (self, frame: fretscroll.commands.Frame, status: str) -> typing.List[str]:

		"""Rasterise a frame and append the status line."""

		viewport = self.viewport
		canvas = TextCanvas(viewport)
		canvas.draw_frame(self._chart.string_lines(viewport), frame)

		return canvas.lines() + [status]

	def update (self, frame: fretscroll.commands.Frame, status: str) -> None:

		"""Replace the drawn frame; a no-op while the display is inactive."""

		if not self._active:
			return

		self._lines = self.render(frame, status)
		self.draw()

	def draw (self) -> None:

		"""Write the current frame to the terminal."""

		if not self._active or not self._lines:
			return

		# The cursor rests on the status line, so the block starts
		# (drawn - 1) lines up.
		if self._drawn_line_count > 1:
			sys.stderr.write(f"\033[{self._drawn_line_count - 1}A")

		for line in self._lines[:-1]:
			sys.stderr.write(f"\r\033[K{line}\n")

		sys.stderr.write(f"\r\033[K{self._lines[-1]}")
		sys.stderr.flush()

		self._drawn_line_count = len(self._lines)

	def clear_line (self) -> None:

		"""Erase the whole drawn region."""

		if not self._active:
			return

		if self._drawn_line_count > 1:
			sys.stderr.write(f"\033[{self._drawn_line_count - 1}A")

			for _ in range(self._drawn_line_count):
				sys.stderr.write("\r\033[K\n")

			sys.stderr.write(f"\033[{self._drawn_line_count}A")
		else:
			sys.stderr.write("\r\033[K")

		sys.stderr.flush()
		self._drawn_line_count = 0
