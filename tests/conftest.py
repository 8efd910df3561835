import os
import sys

import pytest

# Ensure repository root importable early
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Never reach out to a real provider from the test suite
os.environ["LEVELFORGE_PROVIDER_ENABLED"] = "0"

from levelforge import create_app, socketio  # noqa: E402
from levelforge.level import GenerationConfig, LevelCache, LevelSynthesizer  # noqa: E402


@pytest.fixture(scope="session")
def test_app():
    app = create_app()
    app.config.update({"TESTING": True})
    return app


@pytest.fixture(autouse=True)
def _push_app_context(test_app):
    ctx = test_app.app_context()
    ctx.push()
    try:
        yield
    finally:
        ctx.pop()


@pytest.fixture(autouse=True)
def _clear_level_cache(test_app):
    """Keep the app-wide cache from leaking levels between tests."""
    test_app.extensions["levelforge"].clear_cache()
    yield
    test_app.extensions["levelforge"].clear_cache()


@pytest.fixture()
def client(test_app):
    return test_app.test_client()


@pytest.fixture()
def socket_client(test_app):
    test_client = socketio.test_client(test_app, flask_test_client=test_app.test_client())
    yield test_client
    test_client.disconnect()


@pytest.fixture()
def small_config():
    return GenerationConfig(width=24, height=24, max_room_size=8, cache_size=3)


@pytest.fixture()
def synthesizer(small_config):
    return LevelSynthesizer(small_config, cache=LevelCache(small_config.cache_size))
