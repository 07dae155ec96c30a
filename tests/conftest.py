"""
Pytest configuration for the ragstore test suite.

Provides common fixtures, a fake google-genai client exposing the ``aio``
surface, and test configuration for all test modules.
"""

import pytest
import logging
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

from ragstore.config.settings import Settings, clear_settings_cache
from ragstore.services.gemini_client import GeminiFileSearchClient


@pytest.fixture(autouse=True)
def reset_logging_state():
    """Reset logging state before each test."""
    # Clear any existing handlers
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # Reset to default level
    root_logger.setLevel(logging.WARNING)

    yield

    # Cleanup after test
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Drop the cached settings singleton around each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def settings():
    """Settings with a test key and no wait between status checks."""
    return Settings(
        gemini_api_key="test-key",
        gemini_model="gemini-2.5-flash",
        poll_interval_seconds=0,
        log_level="DEBUG",
        enable_file_logging=False,
        _env_file=None
    )


class FakePager:
    """Async iterable standing in for the SDK's AsyncPager.

    Yields records page by page. When ``fail_after`` is set, the given
    exception is raised once that many pages have been yielded.
    """

    def __init__(self, pages, fail_after=None, error=None):
        self.pages = pages
        self.fail_after = fail_after
        self.error = error
        self.pages_fetched = 0

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for page in self.pages:
            if self.fail_after is not None and self.pages_fetched >= self.fail_after:
                raise self.error
            self.pages_fetched += 1
            for item in page:
                yield item


def make_operation(name="fileSearchStores/store-a/operations/op-1", done=False, error=None, response=None):
    """Build a fake long-running operation."""
    return SimpleNamespace(name=name, done=done, error=error, response=response)


def make_store(name, display_name):
    return SimpleNamespace(name=name, display_name=display_name)


def make_file(name, display_name=None, custom_metadata=None, mime_type="application/pdf", size_bytes="1024"):
    return SimpleNamespace(
        name=name,
        display_name=display_name,
        custom_metadata=custom_metadata,
        mime_type=mime_type,
        size_bytes=size_bytes
    )


def make_response(text="Answer", chunks=None):
    """Build a fake GenerateContentResponse with grounding chunks."""
    grounding_chunks = [
        SimpleNamespace(retrieved_context=SimpleNamespace(text=t, title=title, uri=uri))
        for t, title, uri in (chunks or [])
    ]
    candidate = SimpleNamespace(
        grounding_metadata=SimpleNamespace(grounding_chunks=grounding_chunks)
    )
    return SimpleNamespace(text=text, candidates=[candidate])


@pytest.fixture
def fake_genai():
    """Fake google-genai client exposing the async surface the wrapper uses."""
    aio = SimpleNamespace(
        file_search_stores=SimpleNamespace(
            list=AsyncMock(return_value=FakePager([])),
            create=AsyncMock(),
            delete=AsyncMock(return_value=None),
            upload_to_file_search_store=AsyncMock()
        ),
        files=SimpleNamespace(
            list=AsyncMock(return_value=FakePager([])),
            delete=AsyncMock(return_value=None)
        ),
        operations=SimpleNamespace(
            get=AsyncMock()
        ),
        models=SimpleNamespace(
            generate_content=AsyncMock()
        )
    )
    return SimpleNamespace(aio=aio)


@pytest.fixture
def gemini_client(settings, fake_genai):
    """Initialized GeminiFileSearchClient backed by the fake SDK client."""
    with patch('ragstore.services.gemini_client.genai.Client', return_value=fake_genai) as mock_client_class:
        client = GeminiFileSearchClient(settings)
        client.initialize()
        mock_client_class.assert_called_once_with(api_key="test-key")
    return client


@pytest.fixture
def no_sleep():
    """Awaitable sleep that records requested waits instead of sleeping."""
    return AsyncMock(return_value=None)


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test"
    )
    config.addinivalue_line(
        "markers", "unit: mark test as unit test"
    )


def pytest_collection_modifyitems(config, items):
    """Add markers to tests based on their location."""
    for item in items:
        if "assistant" in item.fspath.basename:
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)
