"""
Pytest configuration for mongo-entity tests.

This module manages the MongoDB test container lifecycle:
- Checks if MongoDB is already reachable
- Starts the compose service if needed before integration tests
- Stops it after tests only if we started it

Shared connection constants are defined here so every test file can import them
instead of hardcoding hosts, credentials, and ports.
"""

import os
import subprocess
import time
from collections.abc import Generator

import pytest
from pymongo import MongoClient
from pymongo.errors import PyMongoError

# ---------------------------------------------------------------------------
# Shared connection constants (import these in test files)
# ---------------------------------------------------------------------------
TEST_PORT = int(os.getenv("MONGO_PORT", "27017"))
MONGO_HOST = os.getenv("MONGO_TEST_HOST", f"localhost:{TEST_PORT}")
MONGO_USER = os.getenv("MONGO_USER", "root")
MONGO_PASS = os.getenv("MONGO_PASSWORD", "root")
MONGO_AUTH_DB = os.getenv("MONGO_AUTH_DATABASE", "admin")

# Container configuration
CONTAINER_NAME = "mongo-entity"
COMPOSE_FILE = "devops/docker-compose.yml"
HEALTH_CHECK_TIMEOUT = 30  # seconds
SKIP_CONTAINER = os.getenv("MONGO_SKIP_CONTAINER", "").lower() in ("1", "true", "yes")


def is_mongodb_healthy() -> bool:
    """Check if MongoDB answers a ping with the test credentials."""
    client: MongoClient = MongoClient(
        f"mongodb://{MONGO_USER}:{MONGO_PASS}@{MONGO_HOST}/{MONGO_AUTH_DB}",
        serverSelectionTimeoutMS=1000,
        connectTimeoutMS=1000,
    )
    try:
        client.admin.command("ping")
        return True
    except PyMongoError:
        return False
    finally:
        client.close()


def start_container() -> bool:
    """Start the MongoDB test container."""
    try:
        result = subprocess.run(
            ["docker", "compose", "-f", COMPOSE_FILE, "up", "-d", "mongo"],
            capture_output=True,
            text=True,
            timeout=120,
        )
        if result.returncode != 0:
            print(f"Failed to start container: {result.stderr}")
            return False

        # Wait for MongoDB to accept authenticated commands (not just port open)
        start_time = time.time()
        while time.time() - start_time < HEALTH_CHECK_TIMEOUT:
            if is_mongodb_healthy():
                return True
            time.sleep(0.5)

        print(f"Container did not become healthy within {HEALTH_CHECK_TIMEOUT}s")
        return False
    except (subprocess.TimeoutExpired, FileNotFoundError) as e:
        print(f"Failed to start container: {e}")
        return False


def stop_container() -> None:
    """Stop the MongoDB test container."""
    try:
        subprocess.run(
            ["docker", "compose", "-f", COMPOSE_FILE, "stop", "mongo"],
            capture_output=True,
            text=True,
            timeout=30,
        )
    except (subprocess.TimeoutExpired, FileNotFoundError):
        pass


# Track if we started the container (so we know whether to stop it)
_container_started_by_tests = False


def pytest_configure(config: pytest.Config) -> None:
    """
    Start the MongoDB container if integration tests are selected and the
    server is not already reachable.
    """
    global _container_started_by_tests

    markers = config.getoption("-m", default="")
    if markers and "not integration" in markers:
        return

    if SKIP_CONTAINER:
        print(f"\n[conftest] MONGO_SKIP_CONTAINER set - skipping container management ({MONGO_HOST})")
        return

    if is_mongodb_healthy():
        print(f"\n[conftest] MongoDB already healthy on {MONGO_HOST}")
        return

    print(f"\n[conftest] Starting MongoDB container on port {TEST_PORT}...")
    if start_container():
        print("[conftest] MongoDB container started successfully")
        _container_started_by_tests = True
    else:
        print("[conftest] WARNING: Could not start MongoDB container. Integration tests will be skipped.")


def pytest_unconfigure(config: pytest.Config) -> None:
    """Stop the MongoDB container only if we started it."""
    global _container_started_by_tests

    if _container_started_by_tests:
        print("\n[conftest] Stopping MongoDB container (started by tests)...")
        stop_container()
        _container_started_by_tests = False


@pytest.fixture(scope="session")
def mongodb_available() -> Generator[bool, None, None]:
    """
    Session-scoped fixture that indicates if MongoDB is available.

        def test_something(mongodb_available):
            if not mongodb_available:
                pytest.skip("MongoDB not available")
    """
    yield is_mongodb_healthy()
