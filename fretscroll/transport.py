"""Wall-clock to beat conversion.

The transport turns a monotonic clock into an unbounded playhead beat::

	beat = max(0, now - origin) * bpm / 60

Looping is stored here because it is session state toggled by the user, but
the transport itself never wraps the beat.  Wraparound is applied by the
projection at draw time, so note beats stay directly comparable with the
playhead and no rounding error accumulates from repeated resets.
"""

import logging
import time
import typing

import fretscroll.constants


logger = logging.getLogger(__name__)


Clock = typing.Callable[[], float]


class Transport:

	"""
	The session clock: origin, tempo and the looping flag.
	"""

	def __init__ (
		self,
		bpm: float = fretscroll.constants.DEFAULT_BPM,
		looping: bool = False,
		now: typing.Optional[float] = None,
		clock: Clock = time.perf_counter,
	) -> None:

		"""Start the transport at beat 0.

		Parameters:
			bpm: Tempo in beats per minute (must be positive).
			looping: Initial state of the looping flag.
			now: Timestamp for beat 0.  Sampled from ``clock`` when omitted.
			clock: Monotonic time source in seconds (default
				``time.perf_counter``).
		"""

		if bpm <= 0:
			raise ValueError("BPM must be positive")

		self._clock = clock
		self.bpm: float = float(bpm)
		self.looping: bool = looping
		self.origin: float = self._now(now)

	def _now (self, now: typing.Optional[float]) -> float:

		return self._clock() if now is None else now

	def elapsed (self, now: typing.Optional[float] = None) -> float:

		"""Seconds since the origin, clamped at zero."""

		elapsed = self._now(now) - self.origin

		if elapsed < 0:
			logger.debug(f"Clock sample {-elapsed:.6f}s before origin - clamped to 0")
			return 0.0

		return elapsed

	def advance (self, now: typing.Optional[float] = None) -> float:

		"""Return the playhead beat at ``now``.

		Non-decreasing for increasing ``now``.  A sample earlier than the
		origin yields beat 0.
		"""

		return self.elapsed(now) * self.bpm / 60.0

	def restart (self, now: typing.Optional[float] = None) -> None:

		"""Move the origin to ``now`` so the playhead returns to beat 0."""

		self.origin = self._now(now)
		logger.info("Transport restarted")

	def set_looping (self, looping: bool) -> None:

		self.looping = looping
		logger.info(f"Looping {'on' if looping else 'off'}")

	def toggle_looping (self) -> bool:

		"""Flip the looping flag and return the new state."""

		self.set_looping(not self.looping)
		return self.looping

	def set_bpm (self, bpm: float, now: typing.Optional[float] = None) -> None:

		"""Change the tempo without moving the playhead.

		The origin is rebased so that ``advance(now)`` returns the same beat
		before and after the change; from then on the beat advances at the
		new rate.
		"""

		if bpm <= 0:
			raise ValueError("BPM must be positive")

		now = self._now(now)
		beat = self.advance(now)

		self.bpm = float(bpm)
		self.origin = now - beat * 60.0 / self.bpm

		logger.info(f"BPM set to {self.bpm:.2f}")
