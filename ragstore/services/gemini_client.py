"""
Gemini File Search client wrapper with structured logging.
Thin typed facade over the google-genai async surface for store CRUD, document CRUD,
ingestion and grounded generation.
"""

import io
import mimetypes
import time
from pathlib import Path
from typing import List, Dict, Any, Optional, Sequence, Union, BinaryIO

import structlog
from google import genai
from google.genai import types

from ragstore.config.settings import Settings
from ragstore.store_management.pagination import collect_pages
from ragstore.store_management.store_models import (
    Store, Document, CustomMetadata, belongs_to_store
)
from ragstore.utils.error_handlers import (
    BackendUnavailableError, ConfigurationError, InvalidResponseError, translate_backend_errors
)
from ragstore.utils.logging_helpers import log_operation

logger = structlog.get_logger(__name__)

FileInput = Union[str, Path, bytes, BinaryIO]

DEFAULT_MIME_TYPE = "application/octet-stream"


class GeminiFileSearchClient:
    """
    Gemini File Search client wrapper.

    The client is an explicitly constructed handle: ``initialize()`` must be
    called before any other operation. Operations attempted earlier raise
    BackendUnavailableError without touching the network. SDK and network
    failures surface as TransportError; nothing is retried locally.
    """

    def __init__(self, settings: Settings):
        """
        Initialize the client wrapper.

        Args:
            settings: Application settings instance
        """
        self.settings = settings
        self.logger = logger.bind(
            log_type="GEMINI",
            component="gemini_file_search_client",
            model=settings.gemini_model
        )
        self._client: Optional[genai.Client] = None

    @property
    def is_initialized(self) -> bool:
        """Whether initialize() has completed."""
        return self._client is not None

    def initialize(self) -> None:
        """
        Build the underlying google-genai client from settings.

        Calling it again on an initialized client is a no-op.

        Raises:
            ConfigurationError: If no Gemini API key is configured
        """
        if self._client is not None:
            return

        if not self.settings.has_gemini_config():
            raise ConfigurationError(
                "Gemini API configuration is incomplete",
                missing_config="GEMINI_API_KEY"
            )

        self._client = genai.Client(api_key=self.settings.gemini_api_key)
        self.logger.info("Gemini File Search client initialized")

    def _require_client(self, operation: str) -> genai.Client:
        """Return the SDK client or fail fast when not initialized."""
        if self._client is None:
            raise BackendUnavailableError(operation=operation)
        return self._client

    @log_operation("list_stores", component="gemini_client")
    async def list_stores(self) -> List[Store]:
        """
        List every store, draining all result pages.

        Returns:
            Stores in backend iteration order
        """
        client = self._require_client("list_stores")
        async with translate_backend_errors("list_stores"):
            pager = await client.aio.file_search_stores.list()
            return await collect_pages(pager, Store.from_backend)

    @log_operation("create_store", component="gemini_client")
    async def create_store(self, display_name: str) -> str:
        """
        Create a store.

        Args:
            display_name: Human-readable store name

        Returns:
            Server-assigned store name
        """
        client = self._require_client("create_store")
        async with translate_backend_errors("create_store"):
            store = await client.aio.file_search_stores.create(
                config={'display_name': display_name}
            )

        store_name = getattr(store, 'name', None)
        if not store_name:
            raise InvalidResponseError(
                "Failed to create store: name is missing from the response",
                missing_field="name",
                operation="create_store"
            )
        return store_name

    @log_operation("delete_store", component="gemini_client")
    async def delete_store(self, store_name: str) -> None:
        """
        Delete a store and, by cascade, every document it contains.

        Args:
            store_name: Server-assigned store name
        """
        client = self._require_client("delete_store")
        async with translate_backend_errors("delete_store"):
            await client.aio.file_search_stores.delete(
                name=store_name,
                config={'force': True}
            )

    @log_operation("list_documents", component="gemini_client")
    async def list_documents(self, store_name: str) -> List[Document]:
        """
        List documents belonging to a store.

        The backend's file listing is global, so every page is drained and
        records are kept only when ``belongs_to_store`` holds. Cost grows with
        the total number of files across all stores.

        Args:
            store_name: Server-assigned store name

        Returns:
            Documents of the store in backend iteration order
        """
        client = self._require_client("list_documents")
        async with translate_backend_errors("list_documents"):
            pager = await client.aio.files.list()
            return await collect_pages(
                pager,
                Document.from_backend,
                scope=lambda document: belongs_to_store(document.name, store_name)
            )

    @log_operation("delete_document", component="gemini_client")
    async def delete_document(self, document_name: str) -> None:
        """
        Delete a single document.

        Args:
            document_name: Hierarchical document name
        """
        client = self._require_client("delete_document")
        async with translate_backend_errors("delete_document"):
            await client.aio.files.delete(name=document_name)

    @log_operation("start_upload", component="gemini_client")
    async def start_upload(
        self,
        store_name: str,
        file: FileInput,
        display_name: Optional[str] = None,
        metadata: Optional[Sequence[CustomMetadata]] = None,
        mime_type: Optional[str] = None
    ) -> Any:
        """
        Submit a file for ingestion into a store.

        Args:
            store_name: Target store name
            file: Path, raw bytes or binary file object
            display_name: Document display name (defaults to the file name for paths)
            metadata: Custom metadata entries attached to the document
            mime_type: Explicit MIME type (guessed from the display name otherwise)

        Returns:
            The just-started long-running operation
        """
        client = self._require_client("start_upload")
        upload_file, display_name, mime_type = self._prepare_upload(file, display_name, mime_type)

        config: Dict[str, Any] = {}
        if display_name:
            config['display_name'] = display_name
        if metadata:
            config['custom_metadata'] = [entry.to_wire() for entry in metadata]
        if mime_type:
            config['mime_type'] = mime_type

        self.logger.info(
            "Submitting document for ingestion",
            store_name=store_name,
            display_name=display_name,
            metadata_count=len(metadata or [])
        )

        async with translate_backend_errors("start_upload"):
            return await client.aio.file_search_stores.upload_to_file_search_store(
                file=upload_file,
                file_search_store_name=store_name,
                config=config
            )

    @log_operation("get_operation", component="gemini_client")
    async def get_operation(self, operation: Any) -> Any:
        """
        Re-fetch the status of a long-running operation.

        Args:
            operation: Operation handle returned by start_upload or a previous fetch

        Returns:
            Refreshed operation
        """
        client = self._require_client("get_operation")
        async with translate_backend_errors("get_operation"):
            return await client.aio.operations.get(operation)

    @log_operation("generate_content", component="gemini_client")
    async def generate_content(self, prompt: str, store_names: Sequence[str]) -> Any:
        """
        Generate a response grounded in the given stores.

        Args:
            prompt: Full prompt text
            store_names: Stores retrieval is scoped to

        Returns:
            Raw GenerateContentResponse
        """
        client = self._require_client("generate_content")
        config = types.GenerateContentConfig(
            tools=[
                types.Tool(
                    file_search=types.FileSearch(
                        file_search_store_names=list(store_names)
                    )
                )
            ]
        )
        async with translate_backend_errors("generate_content"):
            return await client.aio.models.generate_content(
                model=self.settings.gemini_model,
                contents=prompt,
                config=config
            )

    async def health_check(self) -> Dict[str, Any]:
        """
        Perform health check by listing stores.

        Returns:
            Dictionary containing health check results
        """
        if not self.is_initialized:
            return {
                'status': 'unavailable',
                'error': 'client not initialized',
                'model': self.settings.gemini_model,
                'timestamp': time.time()
            }

        start_time = time.time()
        try:
            stores = await self.list_stores()
            return {
                'status': 'healthy',
                'response_time': time.time() - start_time,
                'store_count': len(stores),
                'model': self.settings.gemini_model,
                'timestamp': time.time()
            }
        except Exception as e:
            return {
                'status': 'unhealthy',
                'error': str(e),
                'model': self.settings.gemini_model,
                'timestamp': time.time()
            }

    @staticmethod
    def _prepare_upload(
        file: FileInput,
        display_name: Optional[str],
        mime_type: Optional[str]
    ):
        """Normalize upload input into something the SDK accepts."""
        if isinstance(file, (str, Path)):
            path = Path(file)
            display_name = display_name or path.name
            mime_type = mime_type or mimetypes.guess_type(path.name)[0]
            return str(path), display_name, mime_type

        if isinstance(file, (bytes, bytearray)):
            file = io.BytesIO(bytes(file))
        elif display_name is None:
            file_name = getattr(file, 'name', None)
            if isinstance(file_name, str) and file_name:
                display_name = Path(file_name).name

        # Stream uploads carry no file name, so the SDK needs an explicit type
        if mime_type is None and display_name:
            mime_type = mimetypes.guess_type(display_name)[0]
        return file, display_name, mime_type or DEFAULT_MIME_TYPE

    def __repr__(self) -> str:
        """String representation of the client."""
        return (
            f"GeminiFileSearchClient("
            f"model={self.settings.gemini_model}, "
            f"initialized={self.is_initialized}"
            f")"
        )
