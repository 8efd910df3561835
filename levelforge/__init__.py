"""
project: Levelforge
module: __init__.py
License: MIT

Flask application and core extensions setup.

This module wires together the Flask app, Flask-SocketIO and the level
synthesis engine. Configuration is sourced from environment variables with
reasonable defaults for development. A local `instance/` directory is used
for logs and other runtime data.
"""

import logging
import os
import uuid

from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_socketio import SocketIO

from levelforge.level import GenerationConfig, LevelCache, LevelSynthesizer, ProviderSettings, create_provider

# Load .env if present so provider credentials etc. can be supplied
# without exporting shell variables during development.
load_dotenv()

app = Flask(__name__, instance_relative_config=True)

# Ensure instance directory exists for log files
try:
    os.makedirs(app.instance_path, exist_ok=True)
except OSError:
    # In some constrained environments this might fail; ignore
    pass

app.config.update(
    SECRET_KEY=os.getenv("SECRET_KEY", "dev-secret-change-me"),
    LEVELFORGE_GENERATION=GenerationConfig.from_env(),
    LEVELFORGE_PROVIDER=ProviderSettings.from_env(),
)

# Let Flask-SocketIO select best async_mode based on installed deps (eventlet/gevent/threading)
socketio = SocketIO(
    app,
    async_mode=os.getenv("SOCKETIO_ASYNC_MODE") or None,
    cors_allowed_origins=os.getenv("CORS_ALLOWED_ORIGINS", "*"),
    engineio_logger=bool(os.getenv("ENGINEIO_LOGGER", "0") == "1"),
    ping_interval=20,
    ping_timeout=10,
)


def build_synthesizer(config: GenerationConfig | None = None, provider_settings: ProviderSettings | None = None):
    """Compose a LevelSynthesizer with its own cache and optional external provider."""
    config = config or app.config["LEVELFORGE_GENERATION"]
    provider = create_provider(provider_settings or app.config["LEVELFORGE_PROVIDER"])
    return LevelSynthesizer(config, provider=provider, cache=LevelCache(config.cache_size))


def get_synthesizer() -> LevelSynthesizer:
    return app.extensions["levelforge"]


app.extensions["levelforge"] = build_synthesizer()

# Register HTTP blueprints and Socket.IO sinks (import after app/socketio created)
from levelforge.routes.level_api import bp_level  # noqa: E402
from levelforge.websockets import notifications as _ws_notifications  # noqa: E402

app.register_blueprint(bp_level)
_ws_notifications.attach(app.extensions["levelforge"])


def create_app():
    """Return the Flask app instance."""
    return app


@app.errorhandler(500)
def internal_error(e):
    error_id = uuid.uuid4().hex[:8]
    logging.exception("Unhandled exception (id=%s)", error_id)
    return jsonify({"error": "internal error", "error_id": error_id}), 500
