import asyncio
import json
import urllib.error
import urllib.request

import pytest

import fretscroll.chart
import fretscroll.commands
import fretscroll.session
import fretscroll.transport
import fretscroll.web_ui


def test_get_state_carries_frame_commands (clock) -> None:

	"""The broadcast state holds the viewport, transport readout and every command."""

	transport = fretscroll.transport.Transport(bpm=60, looping=True, clock=clock)
	session = fretscroll.session.Session(fretscroll.chart.Chart.default(), transport, clock=clock)
	viewport = fretscroll.commands.Viewport.sized(1920, 540)
	web_ui = fretscroll.web_ui.WebUI(session, viewport=viewport)

	clock.advance(4.25)
	state = web_ui.get_state(session)

	assert state["viewport"] == {"left": 0.0, "top": 0.0, "right": 1920.0, "bottom": 540.0}
	assert state["bpm"] == 60
	assert state["looping"] is True
	assert state["beat"] == 4.25
	assert len(state["strings"]) == 6
	assert len(state["grid"]) == 16
	assert {note["kind"] for note in state["notes"]} == {"note_circle", "note_span"}

	# The 4.0-4.5 sustain straddles the seam at beat 4.25.
	assert len([note for note in state["notes"] if note["kind"] == "note_span"]) == 2

	json.dumps(state)


def test_session_web_ui_configures_viewport () -> None:

	session = fretscroll.session.Session(fretscroll.chart.Chart.default())
	session.web_ui(http_port=9000, ws_port=9001, width=800, height=300)

	assert session._web_ui.http_port == 9000
	assert session._web_ui.ws_port == 9001
	assert session._web_ui.viewport == fretscroll.commands.Viewport.sized(800, 300)


def test_render_page_injects_port_and_viewport () -> None:

	page = fretscroll.web_ui.render_page(9001, fretscroll.commands.Viewport.sized(800, 300)).decode("utf-8")

	assert fretscroll.web_ui.CONFIG_PLACEHOLDER not in page
	assert '"ws_port": 9001' in page
	assert '"right": 800.0' in page
	assert '"bottom": 300.0' in page


def test_page_server_serves_only_the_canvas_page () -> None:

	"""The HTTP side answers / with the filled-in page and 404s anything else."""

	session = fretscroll.session.Session(fretscroll.chart.Chart.default())
	web_ui = fretscroll.web_ui.WebUI(session, viewport=fretscroll.commands.Viewport.sized(640, 240), http_port=0, ws_port=9123)

	web_ui.serve_page()

	# Talk to the server directly even when a proxy is configured.
	opener = urllib.request.build_opener(urllib.request.ProxyHandler({}))

	try:
		assert web_ui.http_port != 0

		with opener.open(f"http://127.0.0.1:{web_ui.http_port}/", timeout=5) as response:
			assert response.status == 200
			body = response.read().decode("utf-8")

		assert '"ws_port": 9123' in body
		assert "<canvas" in body

		with pytest.raises(urllib.error.HTTPError) as error:
			opener.open(f"http://127.0.0.1:{web_ui.http_port}/config.example.yaml", timeout=5)

		assert error.value.code == 404

	finally:
		web_ui.stop()

	assert web_ui._page_server is None


@pytest.mark.asyncio
async def test_push_frames_survives_a_failed_frame (monkeypatch, caplog) -> None:

	"""A frame that raises is logged and the following frames still go out."""

	session = fretscroll.session.Session(fretscroll.chart.Chart.default(), fps=500)
	web_ui = fretscroll.web_ui.WebUI(session, viewport=fretscroll.commands.Viewport.sized(400, 600))
	web_ui._clients.add(object())

	sent = []
	monkeypatch.setattr(fretscroll.web_ui.websockets, "broadcast", lambda clients, message: sent.append(message))

	original_render = session.render
	calls = []

	def render (viewport, now=None):
		calls.append(now)
		if len(calls) == 1:
			raise RuntimeError("bad frame")
		return original_render(viewport, now)

	session.render = render  # type: ignore[method-assign]

	task = asyncio.create_task(web_ui.push_frames())

	try:
		for _ in range(200):
			if sent:
				break
			await asyncio.sleep(0.005)

		assert not task.done()
	finally:
		task.cancel()
	assert sent
	assert "Web view frame failed" in caplog.text
	assert json.loads(sent[0])["viewport"]["right"] == 400.0
