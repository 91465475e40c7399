import typing

import pytest

import fretscroll.chart
import fretscroll.commands


class FakeClock:

	"""Manually advanced clock for transport and session tests."""

	def __init__ (self, start: float = 100.0) -> None:

		self.now = start

	def __call__ (self) -> float:

		return self.now

	def advance (self, seconds: float) -> None:

		"""Move the clock forward by ``seconds``."""

		self.now += seconds


@pytest.fixture
def clock () -> FakeClock:

	"""A fake clock starting at t = 100 s."""

	return FakeClock()


@pytest.fixture
def viewport () -> fretscroll.commands.Viewport:

	"""400 x 600 viewport: 100 px per beat in 4/4, 100 px lanes on six strings."""

	return fretscroll.commands.Viewport.sized(400, 600)


def make_chart (*notes: fretscroll.chart.Note, **kwargs: typing.Any) -> fretscroll.chart.Chart:

	"""Build a six-string 4/4 chart from the given notes."""

	return fretscroll.chart.Chart(notes, **kwargs)
