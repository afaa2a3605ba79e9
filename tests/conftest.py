"""
Pytest configuration and fixtures for pollhttp tests
"""

import asyncio
import threading
import time
from pathlib import Path

import pytest
from dotenv import load_dotenv

import pollhttp

# Load .env file for local testing (e.g. POLLHTTP_TRANSPORT)
env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)

TRANSPORT_NAMES = ["multiplexed", "threaded", "host"]


@pytest.fixture(scope="session")
def http_server():
    """Shared test HTTP server"""
    from tests.test_server import MockHTTPServer

    server = MockHTTPServer()
    server.start()
    yield server
    server.stop()


@pytest.fixture
def host_loop():
    """An asyncio loop run by a stand-in host runtime on its own thread"""
    loop = asyncio.new_event_loop()
    thread = threading.Thread(target=loop.run_forever, name="host-loop", daemon=True)
    thread.start()
    yield loop
    loop.call_soon_threadsafe(loop.stop)
    thread.join(timeout=5)
    loop.close()


@pytest.fixture(params=TRANSPORT_NAMES)
def transport_name(request):
    return request.param


@pytest.fixture
def client(transport_name, host_loop):
    """A client for each transport variant"""
    options = {"loop": host_loop} if transport_name == "host" else {}
    client = pollhttp.Client(transport=transport_name, **options)
    yield client
    client.close()


@pytest.fixture
def drain():
    """Tick a client until it has no pending requests"""

    def _drain(client, timeout=10.0, interval=0.001):
        deadline = time.monotonic() + timeout
        ticks = 0
        while client.active():
            client.perform()
            ticks += 1
            if time.monotonic() > deadline:
                raise AssertionError(f"{client!r} still active after {timeout}s")
            time.sleep(interval)
        return ticks

    return _drain


def pytest_configure(config):
    """Configure pytest"""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test (requires network)"
    )
    config.addinivalue_line("markers", "slow: mark test as slow running")


def pytest_runtest_teardown(item, nextitem):
    """Force garbage collection after each test to release curl handles"""
    import gc
    gc.collect()
