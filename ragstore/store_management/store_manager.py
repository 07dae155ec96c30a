"""
StoreManager - Orchestrator for store and document lifecycle management.

Handles store CRUD, document listing and deletion, and ingestion with
operation polling. Does not handle queries.
"""

import time
from typing import Any, Awaitable, Callable, Iterable, List, Mapping, Optional, Tuple, Union

import structlog

from ragstore.config.settings import Settings
from ragstore.services.gemini_client import FileInput, GeminiFileSearchClient
from ragstore.utils.logging_helpers import log_performance_metrics
from .operation_poller import OperationPoller
from .store_models import CustomMetadata, Document, IngestionResult, Store

logger = structlog.get_logger(__name__)

MetadataInput = Union[Mapping[str, str], Iterable[Union[CustomMetadata, Mapping[str, str], Tuple[str, str]]]]


class StoreManager:
    """
    Orchestrator for store and document lifecycle.

    Responsibilities:
    - Store creation, listing and deletion
    - Document listing (scoped to one store) and deletion
    - Document ingestion, polling the backend operation to completion

    Failures propagate unchanged; nothing is retried here. Concurrent uploads
    into the same store are not serialized, each runs its own poll loop.
    """

    def __init__(
        self,
        settings: Settings,
        client: GeminiFileSearchClient,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None
    ):
        """
        Initialize store manager.

        Args:
            settings: Application settings
            client: Backend client shared with the query layer
            sleep: Optional awaitable sleep used by the operation poller
        """
        self.settings = settings
        self.client = client
        self.logger = logger.bind(
            log_type="SYSTEM",
            component="store_manager"
        )
        self.poller = OperationPoller.from_settings(settings, client.get_operation, sleep=sleep)

    async def list_stores(self) -> List[Store]:
        """List all stores."""
        stores = await self.client.list_stores()
        self.logger.info("Stores listed", store_count=len(stores))
        return stores

    async def create_store(self, display_name: str) -> str:
        """
        Create a store.

        Args:
            display_name: Human-readable store name

        Returns:
            Server-assigned store name
        """
        store_name = await self.client.create_store(display_name)
        self.logger.info("Store created", store_name=store_name, display_name=display_name)
        return store_name

    async def delete_store(self, store_name: str) -> None:
        """Delete a store and all its documents."""
        self.logger.info("Deleting store", store_name=store_name)
        await self.client.delete_store(store_name)
        self.logger.info("Store deleted", store_name=store_name)

    async def list_documents(self, store_name: str) -> List[Document]:
        """List the documents that belong to a store."""
        documents = await self.client.list_documents(store_name)
        self.logger.info("Documents listed", store_name=store_name, document_count=len(documents))
        return documents

    async def delete_document(self, document_name: str) -> None:
        """Delete a single document."""
        self.logger.info("Deleting document", document_name=document_name)
        await self.client.delete_document(document_name)
        self.logger.info("Document deleted", document_name=document_name)

    async def upload_document(
        self,
        store_name: str,
        file: FileInput,
        metadata: Optional[MetadataInput] = None,
        display_name: Optional[str] = None,
        mime_type: Optional[str] = None
    ) -> IngestionResult:
        """
        Ingest a file into a store and wait for server-side processing.

        Args:
            store_name: Target store name
            file: Path, raw bytes or binary file object
            metadata: Custom metadata as a dict, or a list whose entries are CustomMetadata,
                {key, stringValue} mappings or (key, value) pairs
            display_name: Document display name
            mime_type: Explicit MIME type

        Returns:
            IngestionResult describing the completed ingestion

        Raises:
            IngestionFailedError: The backend reported a terminal failure
            OperationTimeoutError: Polling gave up after the configured attempts
            TransportError: Submitting or polling failed
            ValidationError: A metadata entry has an unsupported shape
        """
        start_time = time.time()
        entries = self._normalize_metadata(metadata)

        operation = await self.client.start_upload(
            store_name,
            file,
            display_name=display_name,
            metadata=entries,
            mime_type=mime_type
        )
        operation_name = getattr(operation, 'name', None)
        self.logger.info(
            "Ingestion started",
            store_name=store_name,
            operation_name=operation_name
        )

        outcome = await self.poller.wait_for_completion(operation, store_name=store_name)

        result = IngestionResult(
            store_name=store_name,
            display_name=display_name or self._display_name_of(file),
            operation_name=operation_name,
            document_name=self._document_name_of(outcome.operation),
            poll_count=outcome.poll_count,
            processing_time=time.time() - start_time
        )
        self.logger.info(
            "Document ingestion completed",
            store_name=store_name,
            document_name=result.document_name,
            poll_count=result.poll_count,
            processing_time=result.processing_time
        )
        log_performance_metrics(
            "upload_document",
            result.processing_time,
            store_name=store_name,
            poll_count=result.poll_count
        )
        return result

    @staticmethod
    def _normalize_metadata(metadata: Optional[MetadataInput]) -> List[CustomMetadata]:
        if not metadata:
            return []
        if isinstance(metadata, Mapping):
            return CustomMetadata.from_pairs(metadata.items())
        return CustomMetadata.from_entries(metadata)

    @staticmethod
    def _document_name_of(operation: Any) -> Optional[str]:
        response = getattr(operation, 'response', None)
        if response is None:
            return None
        if isinstance(response, dict):
            return response.get('document_name') or response.get('documentName')
        return getattr(response, 'document_name', None)

    @staticmethod
    def _display_name_of(file: FileInput) -> Optional[str]:
        name = file if isinstance(file, str) else getattr(file, 'name', None)
        if isinstance(name, str) and name:
            return name.replace('\\', '/').rsplit('/', 1)[-1]
        return None
