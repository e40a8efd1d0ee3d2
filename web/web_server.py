#!/usr/bin/python3

# Standard library imports
import logging
import os
import sys
from datetime import datetime

_CURRENT_DIR = os.path.dirname(__file__)
_PROJECT_ROOT = os.path.abspath(os.path.join(_CURRENT_DIR, '..'))
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

# Third-party imports
from flask import Flask

from src.utils.logging_utils import setup_logging
from web.config import LOCAL_TZ, USE_DEBUG_MODE, WEB_SERVER_PORT
from web.routes import register_all_blueprints

logger = logging.getLogger(__name__)


def create_app() -> Flask:
    """Build the Flask app with all countdown routes registered."""
    flask_app = Flask(__name__)
    flask_app.config['SERVER_START_TIME'] = datetime.now(LOCAL_TZ)
    register_all_blueprints(flask_app)
    return flask_app


app = create_app()


def main():
    """Entry point for launching the web server."""
    setup_logging(
        app_name='web_server',
        log_level=logging.INFO,
        info_modules=['__main__', 'src.components.countdown_gif_maker'],
    )
    logging.getLogger('werkzeug').setLevel(logging.WARNING)
    logging.getLogger('waitress').setLevel(logging.WARNING)

    logger.warning("=" * 100)
    logger.warning(f"WEB SERVER STARTED - {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    logger.warning("=" * 100)

    host = '0.0.0.0'
    print(f"Attempting to start web server on http://{host}:{WEB_SERVER_PORT}")

    if USE_DEBUG_MODE:
        print("Using Flask dev server with auto-reload (debug mode)")
        app.run(debug=True, host=host, port=WEB_SERVER_PORT, threaded=True, use_reloader=True)
    else:
        from waitress import serve
        print("Using Waitress WSGI server for production deployment")
        serve(app, host=host, port=WEB_SERVER_PORT, threads=8, channel_timeout=120)


if __name__ == "__main__":
    main()
