"""
pytest configuration and fixtures.
"""

from typing import Generator

import pytest
from fastapi.testclient import TestClient

from library_api.app.api.dispatcher import Dispatcher
from library_api.app.main import create_app
from library_api.app.services.library_service import LibraryService


@pytest.fixture(autouse=True)
def seeded_library() -> Generator[None, None, None]:
    """Every test starts from the five seed titles."""
    LibraryService.reset()
    yield
    LibraryService.reset()


@pytest.fixture
def dispatcher() -> Dispatcher:
    return Dispatcher()


@pytest.fixture
def client() -> TestClient:
    """HTTP client bound to a freshly built application."""
    return TestClient(create_app())
