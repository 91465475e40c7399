"""Frame driver tying the transport, chart and drawing surfaces together.

Each tick samples the clock, applies any pending hotkeys, turns the playhead
into a ``Frame`` and hands it to the terminal display.  The web UI, when
enabled, renders its own frames from the same transport on its own cadence.

```python
session = Session(Chart.default(), Transport(bpm=90))
session.display()
session.hotkeys()
session.play()   # blocks until 'q' or Ctrl+C
```
"""

import asyncio
import logging
import signal
import time
import typing

import fretscroll.chart
import fretscroll.commands
import fretscroll.constants
import fretscroll.display
import fretscroll.keystroke
import fretscroll.transport


logger = logging.getLogger(__name__)


class Session:

	"""
	One running chart: owns the transport and the surfaces that draw it.
	"""

	def __init__ (
		self,
		chart: fretscroll.chart.Chart,
		transport: typing.Optional[fretscroll.transport.Transport] = None,
		fps: float = fretscroll.constants.DEFAULT_FPS,
		clock: fretscroll.transport.Clock = time.perf_counter,
	) -> None:

		"""Set up a session that has not started drawing yet.

		Parameters:
			chart: The chart to scroll.
			transport: Session clock.  A new one at the default BPM, sharing
				``clock``, is created when omitted.
			fps: Target frames per second for the terminal display.
			clock: Monotonic time source in seconds.
		"""

		if fps <= 0:
			raise ValueError("fps must be positive")

		self.chart = chart
		self.transport = transport if transport is not None else fretscroll.transport.Transport(clock=clock)
		self.fps = fps
		self._clock = clock

		self._display: typing.Optional[fretscroll.display.Display] = None
		self._web_ui: typing.Any = None
		self._keystroke_listener: typing.Optional[fretscroll.keystroke.KeystrokeListener] = None
		self._hotkeys_enabled: bool = False
		self._stop_event: typing.Optional[asyncio.Event] = None
		self._last_tick: typing.Optional[float] = None

		#: Frames per second measured over the most recent tick.
		self.frequency: float = 0.0

		self._bindings: typing.Dict[str, typing.Callable[[], None]] = {
			"r": lambda: self.transport.restart(self._clock()),
			"l": self.transport.toggle_looping,
			"q": self.stop,
		}

	# ------------------------------------------------------------------
	# Configuration
	# ------------------------------------------------------------------

	def display (self, enabled: bool = True, width: typing.Optional[int] = None, rows_per_string: int = 1) -> None:

		"""Draw frames to the terminal while playing."""

		self._display = fretscroll.display.Display(self.chart, width=width, rows_per_string=rows_per_string) if enabled else None

	def hotkeys (self, enabled: bool = True) -> None:

		"""Listen for ``r`` (restart), ``l`` (looping) and ``q`` (quit) while playing."""

		self._hotkeys_enabled = enabled

	def web_ui (
		self,
		http_port: int = 8080,
		ws_port: int = 8765,
		width: float = 1920.0,
		height: float = 540.0,
	) -> None:

		"""Serve a browser view of the chart while playing.

		Raises:
			ValueError: If ``width`` or ``height`` is not positive.
		"""

		import fretscroll.web_ui

		if width <= 0 or height <= 0:
			raise ValueError(f"Web view size must be positive, got {width} x {height}")

		self._web_ui = fretscroll.web_ui.WebUI(
			self,
			http_port = http_port,
			ws_port = ws_port,
			viewport = fretscroll.commands.Viewport.sized(width, height),
		)

	# ------------------------------------------------------------------
	# Frames
	# ------------------------------------------------------------------

	def now (self) -> float:

		"""Sample the session clock."""

		return self._clock()

	def render (self, viewport: fretscroll.commands.Viewport, now: typing.Optional[float] = None) -> fretscroll.commands.Frame:

		"""Render the chart at the transport's beat for ``now``."""

		playhead = self.transport.advance(self._clock() if now is None else now)

		return self.chart.render_frame(playhead, viewport, self.transport.looping)

	def status (self, now: typing.Optional[float] = None) -> str:

		"""Readout shown under the terminal frame.

		Example: ``Freq: 30  Transport: 12.400s  Beat 1, Pos 4  20.00 BPM  [loop]``
		"""

		now = self._clock() if now is None else now
		beat = self.transport.advance(now)
		_, beat_in_bar = self.chart.bar_config.bar_position(beat)

		parts = [
			f"Freq: {self.frequency:.0f}",
			f"Transport: {self.transport.elapsed(now):.3f}s",
			f"Beat {beat_in_bar + 1}, Pos {int(beat)}",
			f"{self.transport.bpm:.2f} BPM",
		]

		if self.transport.looping:
			parts.append("[loop]")

		return "  ".join(parts)

	def handle_key (self, key: str) -> bool:

		"""Run the action bound to ``key``.  Returns False for unbound keys."""

		action = self._bindings.get(key.lower())

		if action is None:
			return False

		action()
		return True

	def tick (self, now: typing.Optional[float] = None) -> typing.Optional[fretscroll.commands.Frame]:

		"""Advance one frame: hotkeys, frequency measurement, redraw.

		Returns the frame drawn on the terminal, or None without a display.
		"""

		now = self._clock() if now is None else now

		if self._keystroke_listener is not None:
			self._keystroke_listener.dispatch()

		if self._last_tick is not None and now > self._last_tick:
			self.frequency = 1.0 / (now - self._last_tick)

		self._last_tick = now

		if self._display is None:
			return None

		frame = self.render(self._display.viewport, now)
		self._display.update(frame, self.status(now))

		return frame

	# ------------------------------------------------------------------
	# Playback
	# ------------------------------------------------------------------

	def stop (self) -> None:

		"""Ask the frame loop to finish after the current frame."""

		logger.info("Stopping...")

		if self._stop_event is not None:
			self._stop_event.set()

	def play (self) -> None:

		"""Run the frame loop until ``q``, Ctrl+C or SIGTERM."""

		try:
			asyncio.run(self.run())

		except KeyboardInterrupt:
			pass

	async def run (self, max_frames: typing.Optional[int] = None) -> None:

		"""Async frame loop.

		Parameters:
			max_frames: Stop after this many ticks (None runs until stopped).
		"""

		self._stop_event = asyncio.Event()
		loop = asyncio.get_running_loop()

		signals = (signal.SIGINT, signal.SIGTERM)
		for sig in signals:
			loop.add_signal_handler(sig, self.stop)

		if self._display is not None:
			self._display.start()

		if self._hotkeys_enabled:
			self._keystroke_listener = fretscroll.keystroke.KeystrokeListener(self._bindings)
			self._keystroke_listener.start()

			if self._keystroke_listener.active:
				logger.info("Hotkeys: r = restart, l = toggle looping, q = quit")

		if self._web_ui is not None:
			self._web_ui.start()

		interval = 1.0 / self.fps
		next_tick = self._clock()
		frames = 0

		try:
			while not self._stop_event.is_set():

				self.tick()
				frames += 1

				if max_frames is not None and frames >= max_frames:
					break

				# Pace against a fixed schedule so a slow frame does not push
				# every later frame back; skip ahead after a long stall.
				next_tick += interval
				delay = next_tick - self._clock()

				if delay < -interval:
					next_tick = self._clock()
					delay = 0.0

				try:
					await asyncio.wait_for(self._stop_event.wait(), timeout=max(0.0, delay))
				except asyncio.TimeoutError:
					pass

		finally:
			for sig in signals:
				loop.remove_signal_handler(sig)

			if self._web_ui is not None:
				self._web_ui.stop()

			if self._keystroke_listener is not None:
				self._keystroke_listener.stop()
				self._keystroke_listener = None

			if self._display is not None:
				self._display.stop()

			self._stop_event = None
