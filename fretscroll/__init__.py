"""
fretscroll - a scrolling, beat-synchronised tablature display.

A horizontal timeline of beats and subdivisions scrolls past a fixed
playhead while fretted notes, point and sustained, are drawn where a running
musical clock says they belong.

How it fits together:

- **Transport.** Converts a monotonic wall clock into an unbounded playhead
  beat (``elapsed * bpm / 60``).  Restart, looping and tempo are explicit
  calls on one object, not global state.
- **Projection.** Pure functions mapping beats to pixels.  One bar fills the
  viewport; with looping on, positions wrap with a non-negative modulo
  (``wrap_into_range``) so beats behind the playhead scroll smoothly round
  to the right-hand side instead of jumping.
- **Chart.** Bar layout, string count and notes.  Each frame it culls notes
  to a one-bar look-ahead window and emits plain render commands: grid
  lines, note circles, and sustain spans, split in two where a sustain
  crosses the loop seam.
- **Surfaces.** A terminal display (``session.display()``), single-key
  hotkeys (``r`` restart, ``l`` looping, ``q`` quit) and an optional
  browser view over WebSockets (``session.web_ui()``).

Minimal example:

    ```python
    import fretscroll

    session = fretscroll.Session(fretscroll.Chart.default(), fretscroll.Transport(bpm=60))
    session.display()
    session.hotkeys()
    session.play()
    ```

Or from the command line with a YAML configuration::

    python -m fretscroll config.yaml

Package-level exports: ``BarConfig``, ``Chart``, ``Session``, ``Transport``,
``Viewport``, ``make_note``.
"""

import fretscroll.chart
import fretscroll.commands
import fretscroll.session
import fretscroll.transport


BarConfig = fretscroll.chart.BarConfig
Chart = fretscroll.chart.Chart
Session = fretscroll.session.Session
Transport = fretscroll.transport.Transport
Viewport = fretscroll.commands.Viewport
make_note = fretscroll.chart.make_note
