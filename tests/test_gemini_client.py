"""
Unit tests for GeminiFileSearchClient.

Tests store and document CRUD, pagination draining, store scoping,
ingestion submission and error translation against a fake SDK client.
"""

import asyncio
import io
import pytest
from types import SimpleNamespace
from unittest.mock import Mock, patch

import aiohttp
import httpx
from google.genai import errors as genai_errors

from ragstore.services.gemini_client import GeminiFileSearchClient, DEFAULT_MIME_TYPE
from ragstore.store_management.store_models import CustomMetadata, Document, Store
from ragstore.utils.error_handlers import (
    BackendUnavailableError,
    ConfigurationError,
    InvalidResponseError,
    TransportError,
)
from tests.conftest import FakePager, make_file, make_operation, make_response, make_store


def _not_found():
    return genai_errors.ClientError(
        404,
        {'error': {'code': 404, 'message': 'Requested entity was not found.', 'status': 'NOT_FOUND'}}
    )


class TestInitialization:
    """Test client construction and initialization."""

    def test_not_initialized_by_default(self, settings):
        """A freshly built client has no SDK handle."""
        client = GeminiFileSearchClient(settings)

        assert client.is_initialized is False
        assert "initialized=False" in repr(client)

    def test_initialize_without_key(self):
        """Initialization fails fast when no API key is configured."""
        from ragstore.config.settings import Settings
        settings = Settings(gemini_api_key=None, _env_file=None)
        client = GeminiFileSearchClient(settings)

        with pytest.raises(ConfigurationError) as exc_info:
            client.initialize()

        assert exc_info.value.context['missing_config'] == "GEMINI_API_KEY"
        assert client.is_initialized is False

    def test_initialize_is_idempotent(self, settings, fake_genai):
        """Calling initialize twice builds the SDK client once."""
        with patch('ragstore.services.gemini_client.genai.Client', return_value=fake_genai) as mock_client_class:
            client = GeminiFileSearchClient(settings)
            client.initialize()
            client.initialize()

        mock_client_class.assert_called_once_with(api_key="test-key")
        assert client.is_initialized is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("call", [
        lambda c: c.list_stores(),
        lambda c: c.create_store("Manuals"),
        lambda c: c.delete_store("fileSearchStores/a"),
        lambda c: c.list_documents("fileSearchStores/a"),
        lambda c: c.delete_document("fileSearchStores/a/documents/d"),
        lambda c: c.start_upload("fileSearchStores/a", b"data", display_name="a.txt"),
        lambda c: c.get_operation(make_operation()),
        lambda c: c.generate_content("hello", ["fileSearchStores/a"]),
    ])
    async def test_operations_require_initialization(self, settings, call):
        """Every backend operation raises BackendUnavailableError before initialize()."""
        client = GeminiFileSearchClient(settings)

        with pytest.raises(BackendUnavailableError):
            await call(client)


class TestStores:
    """Test store operations."""

    @pytest.mark.asyncio
    async def test_list_stores_drains_all_pages(self, gemini_client, fake_genai):
        """Records from every page are returned in page order, malformed ones omitted."""
        # Arrange
        pager = FakePager([
            [make_store("fileSearchStores/a", "Alpha"), make_store("fileSearchStores/b", "Beta")],
            [make_store("fileSearchStores/c", None), make_store(None, "Nameless")],
            [make_store("fileSearchStores/d", "Delta")],
        ])
        fake_genai.aio.file_search_stores.list.return_value = pager

        # Act
        stores = await gemini_client.list_stores()

        # Assert
        assert stores == [
            Store(name="fileSearchStores/a", display_name="Alpha"),
            Store(name="fileSearchStores/b", display_name="Beta"),
            Store(name="fileSearchStores/d", display_name="Delta"),
        ]
        assert pager.pages_fetched == 3

    @pytest.mark.asyncio
    async def test_list_stores_page_failure_returns_nothing(self, gemini_client, fake_genai):
        """A failure on a later page raises instead of returning a partial listing."""
        fake_genai.aio.file_search_stores.list.return_value = FakePager(
            [[make_store("fileSearchStores/a", "Alpha")], [make_store("fileSearchStores/b", "Beta")]],
            fail_after=1,
            error=httpx.ConnectError("connection reset")
        )

        with pytest.raises(TransportError):
            await gemini_client.list_stores()

    @pytest.mark.asyncio
    async def test_create_store(self, gemini_client, fake_genai):
        """Creating a store returns the server-assigned name."""
        fake_genai.aio.file_search_stores.create.return_value = make_store("fileSearchStores/new-123", "Manuals")

        store_name = await gemini_client.create_store("Manuals")

        assert store_name == "fileSearchStores/new-123"
        fake_genai.aio.file_search_stores.create.assert_awaited_once_with(
            config={'display_name': "Manuals"}
        )

    @pytest.mark.asyncio
    async def test_create_store_missing_name(self, gemini_client, fake_genai):
        """A create response without a name raises InvalidResponseError."""
        fake_genai.aio.file_search_stores.create.return_value = make_store(None, "Manuals")

        with pytest.raises(InvalidResponseError) as exc_info:
            await gemini_client.create_store("Manuals")

        assert exc_info.value.context['missing_field'] == "name"

    @pytest.mark.asyncio
    async def test_delete_store_forces_cascade(self, gemini_client, fake_genai):
        """Store deletion always requests a forced cascade."""
        await gemini_client.delete_store("fileSearchStores/a")

        fake_genai.aio.file_search_stores.delete.assert_awaited_once_with(
            name="fileSearchStores/a",
            config={'force': True}
        )

    @pytest.mark.asyncio
    async def test_delete_store_api_error(self, gemini_client, fake_genai):
        """SDK API errors surface as TransportError with the HTTP status."""
        fake_genai.aio.file_search_stores.delete.side_effect = _not_found()

        with pytest.raises(TransportError) as exc_info:
            await gemini_client.delete_store("fileSearchStores/missing")

        assert exc_info.value.context['status_code'] == 404
        assert exc_info.value.context['operation'] == "delete_store"
        assert exc_info.value.error_code == "TRANSPORT_ERROR_404"


class TestDocuments:
    """Test document operations."""

    @pytest.mark.asyncio
    async def test_list_documents_scoped_to_store(self, gemini_client, fake_genai):
        """Only documents whose name is prefixed by the store name are returned."""
        # Arrange
        fake_genai.aio.files.list.return_value = FakePager([
            [
                make_file("fileSearchStores/a/documents/1", "one.pdf"),
                make_file("fileSearchStores/b/documents/2", "two.pdf"),
            ],
            [
                make_file("fileSearchStores/ab/documents/3", "three.pdf"),
                make_file(None, "broken.pdf"),
                make_file(
                    "fileSearchStores/a/documents/4",
                    "four.pdf",
                    custom_metadata=[SimpleNamespace(key="author", string_value="Kim")]
                ),
            ],
        ])

        # Act
        documents = await gemini_client.list_documents("fileSearchStores/a")

        # Assert
        assert [doc.name for doc in documents] == [
            "fileSearchStores/a/documents/1",
            "fileSearchStores/a/documents/4",
        ]
        assert all(isinstance(doc, Document) for doc in documents)
        assert documents[1].metadata_dict() == {"author": "Kim"}
        assert documents[0].size_bytes == 1024

    @pytest.mark.asyncio
    async def test_list_documents_empty(self, gemini_client, fake_genai):
        """An empty global listing yields an empty store listing."""
        fake_genai.aio.files.list.return_value = FakePager([[]])

        assert await gemini_client.list_documents("fileSearchStores/a") == []

    @pytest.mark.asyncio
    async def test_delete_document(self, gemini_client, fake_genai):
        """Documents are deleted by name."""
        await gemini_client.delete_document("fileSearchStores/a/documents/1")

        fake_genai.aio.files.delete.assert_awaited_once_with(name="fileSearchStores/a/documents/1")

    @pytest.mark.asyncio
    async def test_delete_document_network_error(self, gemini_client, fake_genai):
        """Network failures surface as TransportError."""
        fake_genai.aio.files.delete.side_effect = httpx.ReadTimeout("timed out")

        with pytest.raises(TransportError) as exc_info:
            await gemini_client.delete_document("fileSearchStores/a/documents/1")

        assert exc_info.value.error_code == "TRANSPORT_ERROR"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        asyncio.TimeoutError(),
        aiohttp.ClientConnectorError(Mock(), OSError(111, "Connection refused")),
    ])
    async def test_delete_document_aiohttp_transport_error(self, gemini_client, fake_genai, error):
        """Timeouts and aiohttp failures surface as TransportError."""
        fake_genai.aio.files.delete.side_effect = error

        with pytest.raises(TransportError) as exc_info:
            await gemini_client.delete_document("fileSearchStores/a/documents/1")

        assert exc_info.value.context['operation'] == "delete_document"


class TestUpload:
    """Test ingestion submission."""

    @pytest.mark.asyncio
    async def test_start_upload_from_path(self, gemini_client, fake_genai, tmp_path):
        """Path uploads default the display name and guess the MIME type."""
        # Arrange
        path = tmp_path / "safety_manual.pdf"
        path.write_bytes(b"%PDF-1.4")
        operation = make_operation()
        fake_genai.aio.file_search_stores.upload_to_file_search_store.return_value = operation

        # Act
        result = await gemini_client.start_upload(
            "fileSearchStores/a",
            path,
            metadata=[CustomMetadata("author", "Kim")]
        )

        # Assert
        assert result is operation
        fake_genai.aio.file_search_stores.upload_to_file_search_store.assert_awaited_once_with(
            file=str(path),
            file_search_store_name="fileSearchStores/a",
            config={
                'display_name': "safety_manual.pdf",
                'custom_metadata': [{'key': "author", 'string_value': "Kim"}],
                'mime_type': "application/pdf",
            }
        )

    @pytest.mark.asyncio
    async def test_start_upload_from_bytes(self, gemini_client, fake_genai):
        """Raw bytes are wrapped in a stream with an explicit MIME type."""
        fake_genai.aio.file_search_stores.upload_to_file_search_store.return_value = make_operation()

        await gemini_client.start_upload("fileSearchStores/a", b"plain text", display_name="notes.txt")

        kwargs = fake_genai.aio.file_search_stores.upload_to_file_search_store.await_args.kwargs
        assert isinstance(kwargs['file'], io.BytesIO)
        assert kwargs['file'].read() == b"plain text"
        assert kwargs['config'] == {'display_name': "notes.txt", 'mime_type': "text/plain"}

    @pytest.mark.asyncio
    async def test_start_upload_unknown_type(self, gemini_client, fake_genai):
        """Streams without a guessable type fall back to a generic MIME type."""
        fake_genai.aio.file_search_stores.upload_to_file_search_store.return_value = make_operation()

        await gemini_client.start_upload("fileSearchStores/a", io.BytesIO(b"\x00\x01"))

        kwargs = fake_genai.aio.file_search_stores.upload_to_file_search_store.await_args.kwargs
        assert kwargs['config'] == {'mime_type': DEFAULT_MIME_TYPE}

    @pytest.mark.asyncio
    async def test_get_operation(self, gemini_client, fake_genai):
        """Operation status is re-fetched through the operations API."""
        submitted = make_operation()
        refreshed = make_operation(done=True)
        fake_genai.aio.operations.get.return_value = refreshed

        assert await gemini_client.get_operation(submitted) is refreshed
        fake_genai.aio.operations.get.assert_awaited_once_with(submitted)


class TestGeneration:
    """Test grounded generation and health checks."""

    @pytest.mark.asyncio
    async def test_generate_content_scopes_file_search(self, gemini_client, fake_genai):
        """Generation uses the configured model and a File Search tool over the given stores."""
        response = make_response("Grounded answer")
        fake_genai.aio.models.generate_content.return_value = response

        result = await gemini_client.generate_content("What is step one?", ["fileSearchStores/a"])

        assert result is response
        kwargs = fake_genai.aio.models.generate_content.await_args.kwargs
        assert kwargs['model'] == "gemini-2.5-flash"
        assert kwargs['contents'] == "What is step one?"
        file_search = kwargs['config'].tools[0].file_search
        assert file_search.file_search_store_names == ["fileSearchStores/a"]

    @pytest.mark.asyncio
    async def test_generate_content_server_error(self, gemini_client, fake_genai):
        """Server errors surface as TransportError with the status code."""
        fake_genai.aio.models.generate_content.side_effect = genai_errors.ServerError(
            503,
            {'error': {'code': 503, 'message': 'The model is overloaded.', 'status': 'UNAVAILABLE'}}
        )

        with pytest.raises(TransportError) as exc_info:
            await gemini_client.generate_content("hello", ["fileSearchStores/a"])

        assert exc_info.value.context['status_code'] == 503

    @pytest.mark.asyncio
    async def test_health_check_healthy(self, gemini_client, fake_genai):
        """A successful store listing reports healthy."""
        fake_genai.aio.file_search_stores.list.return_value = FakePager(
            [[make_store("fileSearchStores/a", "Alpha")]]
        )

        health = await gemini_client.health_check()

        assert health['status'] == 'healthy'
        assert health['store_count'] == 1

    @pytest.mark.asyncio
    async def test_health_check_unhealthy(self, gemini_client, fake_genai):
        """Backend failures are reported, never raised."""
        fake_genai.aio.file_search_stores.list.side_effect = httpx.ConnectError("refused")

        health = await gemini_client.health_check()

        assert health['status'] == 'unhealthy'
        assert 'error' in health

    @pytest.mark.asyncio
    async def test_health_check_not_initialized(self, settings):
        """An uninitialized client reports unavailable."""
        health = await GeminiFileSearchClient(settings).health_check()

        assert health['status'] == 'unavailable'
