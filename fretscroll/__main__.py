import logging
import os
import sys

import yaml

import fretscroll.chart
import fretscroll.constants
import fretscroll.session
import fretscroll.transport


# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def load_config (config_path: str = 'config.yaml') -> dict:

	"""
	Load configuration from a YAML file.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return {}

	with open(config_path, 'r') as f:
		return yaml.safe_load(f) or {}


def build_session (config: dict) -> fretscroll.session.Session:

	"""
	Create a session (transport, chart and surfaces) from a configuration mapping.
	"""

	transport_config = config.get('transport', {})
	display_config = config.get('display', {})
	web_config = config.get('web_ui', {})

	transport = fretscroll.transport.Transport(
		bpm = float(transport_config.get('bpm', fretscroll.constants.DEFAULT_BPM)),
		looping = bool(transport_config.get('looping', False)),
	)

	chart = fretscroll.chart.Chart.from_dict(config.get('chart', {}))

	session = fretscroll.session.Session(
		chart,
		transport,
		fps = float(display_config.get('fps', fretscroll.constants.DEFAULT_FPS)),
	)

	session.display(
		enabled = bool(display_config.get('enabled', True)),
		width = display_config.get('width'),
		rows_per_string = int(display_config.get('rows_per_string', 1)),
	)
	session.hotkeys()

	if web_config.get('enabled', False):
		session.web_ui(
			http_port = int(web_config.get('http_port', 8080)),
			ws_port = int(web_config.get('ws_port', 8765)),
			width = float(web_config.get('width', 1920)),
			height = float(web_config.get('height', 540)),
		)

	return session


def main () -> None:

	"""
	Main entry point: ``python -m fretscroll [config.yaml]``.
	"""

	logger.info("fretscroll starting...")

	config = load_config(sys.argv[1] if len(sys.argv) > 1 else 'config.yaml')
	session = build_session(config)
	session.play()


if __name__ == "__main__":
	main()
