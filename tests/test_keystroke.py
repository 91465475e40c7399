"""Tests for the hotkey listener.

Reading real keys needs an interactive terminal, so these feed keys directly
and cover the degraded paths that must stay safe no-ops.
"""

import unittest.mock

import fretscroll.keystroke as keystroke_mod
from fretscroll.keystroke import KeystrokeListener


def _recording_listener ():

	"""A listener on r/l/q whose actions append their key to a list."""

	pressed = []
	bindings = {key: (lambda key=key: pressed.append(key)) for key in "rlq"}

	return KeystrokeListener(bindings), pressed


class TestKeystrokeListenerPlatform:

	def test_supported_flag_matches_reason (self):
		assert isinstance(keystroke_mod.HOTKEYS_SUPPORTED, bool)
		assert keystroke_mod.HOTKEYS_SUPPORTED == (keystroke_mod.HOTKEYS_UNAVAILABLE_REASON is None)

	def test_start_on_unsupported_platform_logs_warning (self, caplog):
		"""An unsupported platform leaves the listener inactive without raising."""
		listener, _ = _recording_listener()
		with unittest.mock.patch.object(keystroke_mod, "HOTKEYS_SUPPORTED", False):
			with unittest.mock.patch.object(keystroke_mod, "HOTKEYS_UNAVAILABLE_REASON", "Test: no TTY"):
				listener.start()

		assert listener.active is False
		assert listener._thread is None
		assert "Test: no TTY" in caplog.text

	def test_stop_safe_when_never_started (self):
		listener, _ = _recording_listener()
		listener.stop()
		assert listener.active is False


class TestKeystrokeDispatch:

	def test_bound_keys_run_in_order (self):
		listener, pressed = _recording_listener()
		for key in "rlq":
			assert listener.feed(key) is True

		assert listener.dispatch() == 3
		assert pressed == ["r", "l", "q"]

	def test_unbound_keys_are_dropped (self):
		listener, pressed = _recording_listener()

		assert listener.feed("x") is False
		assert listener.feed(" ") is False
		assert listener.dispatch() == 0
		assert pressed == []

	def test_keys_match_case_insensitively (self):
		listener, pressed = _recording_listener()
		listener.feed("R")
		listener.feed("q")

		listener.dispatch()

		assert pressed == ["r", "q"]

	def test_dispatch_empties_the_queue (self):
		listener, pressed = _recording_listener()
		listener.feed("l")

		assert listener.dispatch() == 1
		assert listener.dispatch() == 0
		assert pressed == ["l"]

	def test_binding_keys_are_lowercased (self):
		pressed = []
		listener = KeystrokeListener({"Q": lambda: pressed.append("quit")})

		assert listener.feed("q") is True
		listener.dispatch()
		assert pressed == ["quit"]
