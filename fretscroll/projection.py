"""Beat-to-pixel projection.

Maps beat positions onto a fixed-width viewport relative to the playhead.
The playhead always sits at the viewport's left edge; beats ahead of it lie
to the right.  With looping enabled the whole viewport is treated as a ring,
so positions behind the playhead reappear at the right-hand side::

	raw     = (beat - playhead) * bar_pixels
	wrapped = wrap_into_range(raw, viewport_width)   # looping
	x       = left + round(wrapped)

Every function here is pure.  Callers are responsible for passing a positive
``viewport_width`` and ``bar_pixels``.
"""

import math
import typing


def wrap_into_range (value: float, size: float) -> float:

	"""Wrap ``value`` into ``[0, size)`` using a non-negative modulo.

	``math.fmod`` (and the remainder operator of many other languages)
	truncates toward zero, so ``fmod(-25, 400)`` is ``-25`` rather than
	``375``.  Positions behind the playhead would then jump instead of
	scrolling, which is why every wraparound goes through this function.

	Examples: ``wrap_into_range(-25, 400)`` → ``375``,
	``wrap_into_range(425, 400)`` → ``25``.
	"""

	wrapped = value % size

	if wrapped < 0:
		wrapped = (wrapped + size) % size

	# A tiny negative value can round up to exactly ``size``.
	if wrapped >= size:
		wrapped = 0.0

	return wrapped


def beat_to_x (
	beat: float,
	playhead: float,
	viewport_width: float,
	bar_pixels: float,
	left: float = 0.0,
	looping: bool = True,
	snap: bool = True,
) -> float:

	"""Project a beat position to a horizontal pixel coordinate.

	Parameters:
		beat: Absolute beat position to place.
		playhead: Current playhead beat (projects to ``left``).
		viewport_width: Width of the viewport in pixels.
		bar_pixels: Pixels per beat (``viewport_width / beats_per_bar``),
			so one bar spans the whole viewport.
		left: Pixel coordinate of the viewport's left edge.
		looping: Wrap the offset into ``[0, viewport_width)``.  When False
			the offset is returned unclamped and the caller culls.
		snap: Round to the nearest whole pixel.  Grid lines snap to avoid
			shimmer; note centres pass ``snap=False`` for smoother motion.
	"""

	raw = (beat - playhead) * bar_pixels
	offset = wrap_into_range(raw, viewport_width) if looping else raw

	if snap:
		offset = math.floor(offset + 0.5)

		# Rounding up from just below the right edge lands on the seam.
		if looping:
			offset = wrap_into_range(offset, viewport_width)

	return left + offset


def span_segments (
	start_x: float,
	end_x: float,
	left: float,
	right: float,
	pad: float = 0.0,
) -> typing.List[typing.Tuple[float, float]]:

	"""Split a projected span into segments that never run backwards.

	When ``start_x`` lies to the right of ``end_x`` the span crossed the
	wrap seam: it is returned as two segments, one ending at the right edge
	of the viewport and one starting at its left edge.  ``pad`` widens the
	outer ends of the span (half a lane for note glyphs) but never the seam
	ends.
	"""

	if start_x <= end_x:
		return [(start_x - pad, end_x + pad)]

	return [(start_x - pad, right), (left, end_x + pad)]
