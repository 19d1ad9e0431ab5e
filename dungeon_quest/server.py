"""
project: Dungeon Quest
module: server.py
License: MIT

Server bootstrap for the JSON game API.
"""

import sys

from dungeon_quest import app
from dungeon_quest.logging_utils import log


def start_server(host="0.0.0.0", port=5000, debug: bool = False):  # pragma: no cover (runtime only)
    """Run the Flask development server (threaded; sessions are lock-guarded)."""
    log.info(event="server_start", host=host, port=port, debug=debug)
    try:
        app.run(host=host, port=port, debug=debug, threaded=True)
    except KeyboardInterrupt:
        print("\n[INFO] Server stopped by user (Ctrl+C)")
        sys.exit(0)
