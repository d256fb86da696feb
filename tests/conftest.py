"""Shared pytest fixtures for SCIM API test suites."""

from collections.abc import Generator
from pathlib import Path
import sys

import pytest
from fastapi.testclient import TestClient

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


class RecordingSink:
    """Failure sink that keeps recorded messages in memory."""

    def __init__(self) -> None:
        self.records: list[str] = []

    def record(self, message: str) -> None:
        self.records.append(message)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """Provide an API test client for contract suites."""
    from scim_api.main import app

    with TestClient(app) as test_client:
        yield test_client
