import logging

import fretscroll

logging.basicConfig(level=logging.INFO)

# A two-bar riff in 3/4 with eighth-note subdivisions.
# Strings are numbered from the top lane (0) down.
chart = fretscroll.Chart(
	notes = [
		fretscroll.make_note(5, 0, 0.0),
		fretscroll.make_note(4, 2, 0.5),
		fretscroll.make_note(3, 2, 1.0, 2.0),
		fretscroll.make_note(2, 1, 2.0),
		fretscroll.make_note(5, 3, 3.0),
		fretscroll.make_note(4, 2, 3.5),
		fretscroll.make_note(3, 0, 4.0, 5.5),
	],
	bar_config = fretscroll.BarConfig(beats_per_bar=3, subdivisions_per_beat=2),
)

# Loop on so the sustain on beat 4 visibly wraps across the seam.
transport = fretscroll.Transport(bpm=45, looping=True)

session = fretscroll.Session(chart, transport, fps=30)
session.display(rows_per_string=2)
session.hotkeys()

# Uncomment to also watch it in a browser at http://localhost:8080
# session.web_ui()

session.play()
