import logging

import pytest

import fretscroll.chart
import fretscroll.display


def _make_display () -> fretscroll.display.Display:

	"""Two strings, four one-beat grid lines, 16 columns: 4 columns per beat."""

	chart = fretscroll.chart.Chart(
		[
			fretscroll.chart.PointNote(0, 7, 1.0),
			fretscroll.chart.SustainedNote(1, 5, 2.0, 3.0),
		],
		bar_config = fretscroll.chart.BarConfig(beats_per_bar=4, subdivisions_per_beat=1),
		fret_count = 2,
	)

	return fretscroll.display.Display(chart, width=16)


def _frame (display: fretscroll.display.Display, playhead: float, looping: bool = False):

	return display._chart.render_frame(playhead, display.viewport, looping)


def test_viewport_in_character_cells () -> None:

	"""The viewport is one column per pixel and rows_per_string rows per lane."""

	display = _make_display()

	assert display.viewport.width == 16
	assert display.viewport.height == 2

	tall = fretscroll.display.Display(display._chart, width=20, rows_per_string=3)

	assert tall.viewport.height == 6


def test_render_draws_strings_grid_and_notes () -> None:

	"""Grid lines cross the strings, point notes show their label, sustains are '=' runs."""

	display = _make_display()
	lines = display.render(_frame(display, 0.0), "status")

	assert lines == [
		"0   0   0   0",
		"|---7---|---|---",
		"|---|---5===|---",
		"status",
	]


def test_render_scrolls_with_playhead () -> None:

	"""One beat later every glyph has moved four columns to the left."""

	display = _make_display()
	lines = display.render(_frame(display, 1.0), "status")

	assert lines[1] == "7---|---|---|---"
	assert lines[2] == "|---5===|---|---"


def test_render_clips_notes_off_the_left_edge () -> None:

	"""Without looping, the part of a sustain behind the playhead is clipped."""

	display = _make_display()
	lines = display.render(_frame(display, 2.5), "status")

	assert lines[2].startswith("==")


def test_rows_per_string_rejected_when_not_positive () -> None:

	with pytest.raises(ValueError):
		fretscroll.display.Display(fretscroll.chart.Chart.default(), rows_per_string=0)


def test_draw_writes_to_stderr (capsys) -> None:

	"""draw() writes every line with ANSI clear codes."""

	display = _make_display()
	display._active = True
	display._lines = ["frame", "test status"]

	display.draw()

	output = capsys.readouterr().err

	assert "\r\033[Kframe\n" in output
	assert output.endswith("\r\033[Ktest status")


def test_redraw_moves_cursor_up (capsys) -> None:

	"""A second draw returns to the top of the previously drawn block."""

	display = _make_display()
	display._active = True
	display._lines = ["a", "b", "c"]

	display.draw()
	capsys.readouterr()
	display.draw()

	assert capsys.readouterr().err.startswith("\033[2A")


def test_clear_line_writes_ansi (capsys) -> None:

	"""clear_line() with nothing drawn clears the current line only."""

	display = _make_display()
	display._active = True

	display.clear_line()

	assert capsys.readouterr().err == "\r\033[K"


def test_update_inactive_is_noop () -> None:

	"""update() does nothing until the display is started."""

	display = _make_display()
	display.update(_frame(display, 0.0), "status")

	assert display._lines == []


def test_start_installs_handler_and_stop_restores () -> None:

	"""start() swaps the root handlers for a DisplayLogHandler; stop() puts them back."""

	display = _make_display()

	root_logger = logging.getLogger()
	original_handlers = list(root_logger.handlers)

	display.start()

	try:
		assert len(root_logger.handlers) == 1
		assert isinstance(root_logger.handlers[0], fretscroll.display.DisplayLogHandler)
	finally:
		display.stop()

	assert root_logger.handlers == original_handlers


def test_log_handler_clears_writes_and_redraws (capsys) -> None:

	"""A log record erases the frame, prints above it, then draws the frame again."""

	display = _make_display()
	display._active = True
	display._lines = ["frame", "status"]
	display.draw()
	capsys.readouterr()

	handler = fretscroll.display.DisplayLogHandler(display)
	handler.setFormatter(logging.Formatter("%(levelname)s:%(message)s"))
	handler.emit(logging.LogRecord("fretscroll.test", logging.INFO, __file__, 1, "hello", None, None))

	output = capsys.readouterr().err

	cleared = output.index("\r\033[K\n")
	written = output.index("INFO:hello\n")
	redrawn = output.index("\r\033[Kframe\n")

	assert cleared < written < redrawn
	assert output.endswith("\r\033[Kstatus")
	assert display._drawn_line_count == 2
