"""
project: Levelforge
module: server.py
License: MIT

Server bootstrap.

Starts the Flask-SocketIO server that exposes the level HTTP API and the
``level_generated`` notifications, after wiring stdlib logging to a rotating
file under ``instance/`` and the console.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler

from levelforge import app, socketio

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def start_server(host="0.0.0.0", port=5000, debug: bool = False):  # pragma: no cover (runtime only)
    """Start the Socket.IO server.

    When debug=True, Flask's debugger and reloader provide verbose tracebacks.
    """
    _configure_logging()
    try:
        print(f"[INFO] Starting Socket.IO server on {host}:{port} (async_mode={socketio.async_mode})")
        socketio.run(app, host=host, port=port, debug=debug)
    except KeyboardInterrupt:
        print("\n[INFO] Server stopped by user (Ctrl+C)")
        sys.exit(0)


def _configure_logging(log_dir=None, level=logging.INFO):
    """Configure logging to both console and a rotating file.

    The file path defaults to instance/app.log with a few backups retained.
    Returns the log file path.
    """
    log_dir = log_dir or app.instance_path
    try:
        os.makedirs(log_dir, exist_ok=True)
    except OSError:
        pass
    log_path = os.path.join(log_dir, "app.log")

    root = logging.getLogger()
    root.setLevel(level)

    file_handler = RotatingFileHandler(log_path, maxBytes=1_000_000, backupCount=3)
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter(LOG_FORMAT))

    # Avoid duplicate handlers if reconfigured
    for h in list(root.handlers):
        root.removeHandler(h)

    root.addHandler(file_handler)
    root.addHandler(console)
    return log_path
