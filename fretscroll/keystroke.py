"""Single-keystroke hotkeys for the terminal session.

A daemon thread reads stdin one character at a time (cbreak mode, no Enter
needed) and keeps only the keys that have a binding.  The frame loop calls
:meth:`KeystrokeListener.dispatch` between frames, so every binding runs on
the loop's thread and never races a render.

Works on Linux and macOS with an interactive terminal.  Elsewhere the
listener logs a warning on ``start()`` and stays inactive; check
:data:`HOTKEYS_SUPPORTED` to branch on this up front.
"""

import collections
import contextlib
import logging
import select
import sys
import threading
import typing


logger = logging.getLogger(__name__)


Action = typing.Callable[[], typing.Any]

# Seconds between checks of the stop flag while stdin is idle.
_POLL_INTERVAL = 0.1


def _unavailable_reason () -> typing.Optional[str]:

	"""Why stdin cannot deliver single keystrokes, or None if it can."""

	try:
		import termios  # noqa: PLC0415
		import tty      # noqa: PLC0415, F401
	except ImportError:
		return "Hotkeys need the POSIX 'tty' and 'termios' modules (Linux or macOS)."

	try:
		if not sys.stdin.isatty():
			return "Hotkeys need an interactive terminal on stdin."
		termios.tcgetattr(sys.stdin.fileno())
	except (AttributeError, OSError, ValueError, termios.error) as e:
		return f"Hotkeys need an interactive terminal on stdin ({e})."

	return None


#: Why hotkeys are unavailable, or ``None`` when they are supported.
HOTKEYS_UNAVAILABLE_REASON: typing.Optional[str] = _unavailable_reason()

#: ``True`` when stdin is a TTY on a POSIX platform.
HOTKEYS_SUPPORTED: bool = HOTKEYS_UNAVAILABLE_REASON is None


@contextlib.contextmanager
def _cbreak (fd: int) -> typing.Iterator[None]:

	"""Put the terminal in cbreak mode, restoring it however the block exits."""

	import termios  # noqa: PLC0415
	import tty      # noqa: PLC0415

	saved = termios.tcgetattr(fd)

	try:
		tty.setcbreak(fd)
		yield
	finally:
		termios.tcsetattr(fd, termios.TCSADRAIN, saved)


class KeystrokeListener:

	"""Reads bound keys from the terminal and runs their actions on demand.

	Keys are matched case-insensitively.  Unbound keys are dropped by the
	reader thread and never reach :meth:`dispatch`.
	"""

	def __init__ (self, bindings: typing.Mapping[str, Action]) -> None:

		self._bindings: typing.Dict[str, Action] = {key.lower(): action for key, action in bindings.items()}

		# deque appends and pops are atomic, so the reader thread needs no lock.
		self._pending: typing.Deque[str] = collections.deque()
		self._stop = threading.Event()
		self._thread: typing.Optional[threading.Thread] = None

	@property
	def active (self) -> bool:

		"""``True`` while the reader thread is running."""

		return self._thread is not None and self._thread.is_alive()

	def start (self) -> None:

		"""Start the reader thread; a no-op if already running or unsupported."""

		if self.active:
			return

		if not HOTKEYS_SUPPORTED:
			logger.warning(f"Hotkeys disabled. {HOTKEYS_UNAVAILABLE_REASON}")
			return

		self._stop.clear()
		self._thread = threading.Thread(target=self._read_keys, name="fretscroll-hotkeys", daemon=True)
		self._thread.start()

	def stop (self) -> None:

		"""Ask the reader to exit; it notices within one poll interval."""

		self._stop.set()

	def feed (self, key: str) -> bool:

		"""Queue ``key`` if it is bound.  Returns whether it was queued."""

		key = key.lower()

		if key not in self._bindings:
			return False

		self._pending.append(key)
		return True

	def dispatch (self) -> int:

		"""Run the action of every key queued since the last call, oldest first.

		Returns the number of actions run.
		"""

		count = 0

		while self._pending:
			key = self._pending.popleft()
			logger.debug(f"Hotkey '{key}'")
			self._bindings[key]()
			count += 1

		return count

	def _read_keys (self) -> None:

		fd = sys.stdin.fileno()

		try:
			with _cbreak(fd):
				while not self._stop.is_set():
					ready, _, _ = select.select([sys.stdin], [], [], _POLL_INTERVAL)
					if ready:
						char = sys.stdin.read(1)
						if char:
							self.feed(char)

		except Exception:
			logger.exception("Hotkey reader stopped")
