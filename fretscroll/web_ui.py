import asyncio
import http.server
import json
import logging
import os
import threading
import typing
import weakref

import websockets
import websockets.asyncio.server

logger = logging.getLogger(__name__)


PAGE_PATH = os.path.join(os.path.dirname(__file__), "assets", "web", "index.html")

# Replaced with the page settings (WebSocket port and viewport) when served.
CONFIG_PLACEHOLDER = "__FRETSCROLL_CONFIG__"


def render_page (ws_port: int, viewport: typing.Any) -> bytes:

    """The canvas page with its WebSocket port and viewport filled in."""

    with open(PAGE_PATH, encoding="utf-8") as f:
        template = f.read()

    config = {
        "ws_port": ws_port,
        "viewport": {
            "left": viewport.left,
            "top": viewport.top,
            "right": viewport.right,
            "bottom": viewport.bottom,
        },
    }

    return template.replace(CONFIG_PLACEHOLDER, json.dumps(config)).encode("utf-8")


class _PageHandler (http.server.BaseHTTPRequestHandler):

    """Serves the one canvas page; everything else is a 404."""

    server: "_PageServer"

    def do_GET (self) -> None:

        if self.path.split("?", 1)[0] not in ("/", "/index.html"):
            self.send_error(404)
            return

        self.send_response(200)
        self.send_header("Content-Type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(self.server.page)))
        self.send_header("Cache-Control", "no-store")
        self.end_headers()
        self.wfile.write(self.server.page)

    def log_message (self, format: str, *args: typing.Any) -> None:
        pass # Access logs would scroll through the terminal display


class _PageServer (http.server.ThreadingHTTPServer):

    daemon_threads = True
    allow_reuse_address = True

    def __init__ (self, port: int, page: bytes) -> None:

        self.page = page
        super().__init__(("", port), _PageHandler)


class WebUI:

    """
    Browser drawing surface.
    Serves a canvas page over HTTP and pushes every frame's render commands
    to connected clients as JSON over WebSockets, at the session's frame rate.
    """

    def __init__ (self, session: typing.Any, viewport: typing.Any, http_port: int = 8080, ws_port: int = 8765) -> None:

        self.session_ref = weakref.ref(session)
        self.viewport = viewport
        self.http_port = http_port
        self.ws_port = ws_port
        self._page_server: typing.Optional[_PageServer] = None
        self._ws_server: typing.Optional[websockets.asyncio.server.Server] = None
        self._push_task: typing.Optional[asyncio.Task] = None
        self._clients: typing.Set[websockets.asyncio.server.ServerConnection] = set()

    def start (self) -> None:

        """Serve the page now and the frame stream once the loop gets to it."""

        self.serve_page()
        asyncio.create_task(self._serve_frames())

    def serve_page (self) -> None:

        """Start the HTTP server on a daemon thread.

        Port 0 picks a free port; ``http_port`` is updated to the bound one.
        """

        if self._page_server is not None:
            return

        try:
            self._page_server = _PageServer(self.http_port, render_page(self.ws_port, self.viewport))
        except OSError as e:
            logger.error(f"Web view unavailable on port {self.http_port}: {e}")
            return

        self.http_port = self._page_server.server_address[1]

        threading.Thread(target=self._page_server.serve_forever, name="fretscroll-web-page", daemon=True).start()
        logger.info(f"Web view available at http://localhost:{self.http_port}/")

    async def _follow (self, websocket: websockets.asyncio.server.ServerConnection) -> None:

        self._clients.add(websocket)

        try:
            # The page never sends anything; wait for it to go away.
            await websocket.wait_closed()
        finally:
            self._clients.discard(websocket)

    async def _serve_frames (self) -> None:

        try:
            self._ws_server = await websockets.asyncio.server.serve(self._follow, "0.0.0.0", self.ws_port)
        except OSError as e:
            logger.error(f"Web view frame stream unavailable on port {self.ws_port}: {e}")
            return

        self._push_task = asyncio.create_task(self.push_frames())

    async def push_frames (self) -> None:

        """Broadcast one state per frame until the session is gone.

        A failed frame is logged and the next one is tried, so one bad frame
        never leaves the page frozen.
        """

        while True:
            session = self.session_ref()
            if session is None:
                break

            await asyncio.sleep(1.0 / session.fps)

            if not self._clients:
                continue

            try:
                websockets.broadcast(self._clients, json.dumps(self.get_state(session)))
            except Exception:
                logger.exception("Web view frame failed")

    def get_state (self, session: typing.Any, now: typing.Optional[float] = None) -> typing.Dict[str, typing.Any]:

        """Everything the page needs to draw one frame."""

        now = session.now() if now is None else now
        frame = session.render(self.viewport, now)
        transport = session.transport

        return {
            "viewport": {
                "left": self.viewport.left,
                "top": self.viewport.top,
                "right": self.viewport.right,
                "bottom": self.viewport.bottom,
            },
            "bpm": transport.bpm,
            "looping": transport.looping,
            "beat": transport.advance(now),
            "strings": [line.to_dict() for line in session.chart.string_lines(self.viewport)],
            "grid": [line.to_dict() for line in frame.grid],
            "notes": [note.to_dict() for note in frame.notes],
        }

    def stop (self) -> None:

        if self._push_task is not None:
            self._push_task.cancel()
            self._push_task = None

        if self._ws_server is not None:
            self._ws_server.close()
            try:
                asyncio.get_running_loop().create_task(self._ws_server.wait_closed())
            except RuntimeError:
                pass
            self._ws_server = None

        if self._page_server is not None:
            self._page_server.shutdown()
            self._page_server.server_close()
            self._page_server = None
