"""
Pytest configuration and fixtures for graph-http-core tests.
"""

import pytest

from fakes import ResponseMap, StubSerializer, make_provider
from graph_http.core.logging.config import LoggingConfig


@pytest.fixture
def base_url():
    """Base URL for testing."""
    return "https://localhost"


@pytest.fixture
def response_map():
    return ResponseMap()


@pytest.fixture
def serializer():
    return StubSerializer()


@pytest.fixture
async def provider(response_map, serializer):
    """SimpleHTTPProvider over the response map, closed after the test."""
    provider = make_provider(response_map, serializer)
    yield provider
    await provider.close()


@pytest.fixture
def logging_config_with_file(tmp_path):
    """LoggingConfig writing JSON records to a temporary file."""
    return LoggingConfig.create(
        level="DEBUG",
        format="json",
        enable_console=False,
        enable_file=True,
        file_path=str(tmp_path / "provider.log"),
    )
