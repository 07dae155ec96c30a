"""
RagStoreAssistant - caller-facing surface for UI collaborators.

Wires the backend client, store manager, search service and suggestion
service together behind the functions a presentation layer calls.
"""

from typing import Any, Awaitable, Callable, Dict, List, Optional

import structlog

from ragstore.config.settings import Settings, get_settings
from ragstore.rag_access.rag_models import QueryResult
from ragstore.rag_access.search_service import SearchService
from ragstore.rag_access.suggestion_service import SuggestionService
from ragstore.services.gemini_client import FileInput, GeminiFileSearchClient
from ragstore.store_management.store_manager import MetadataInput, StoreManager
from ragstore.store_management.store_models import Document, IngestionResult, Store

logger = structlog.get_logger(__name__).bind(log_type="SYSTEM")


class RagStoreAssistant:
    """
    Facade over store management, grounded queries and suggestion seeding.

    ``initialize()`` must be called once before any other method; until then
    every operation raises BackendUnavailableError.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[GeminiFileSearchClient] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None
    ):
        """
        Initialize the assistant.

        Args:
            settings: Application settings (loaded from the environment when omitted)
            client: Backend client to use instead of building one from settings
            sleep: Optional awaitable sleep used between operation status checks
        """
        self.settings = settings or get_settings()
        self.client = client or GeminiFileSearchClient(self.settings)
        self.store_manager = StoreManager(self.settings, self.client, sleep=sleep)
        self.search_service = SearchService(self.client)
        self.suggestion_service = SuggestionService(self.client)

    def initialize(self) -> None:
        """Initialize backend credentials."""
        self.client.initialize()
        logger.info("Assistant initialized", settings=repr(self.settings))

    async def list_stores(self) -> List[Store]:
        return await self.store_manager.list_stores()

    async def create_store(self, display_name: str) -> str:
        return await self.store_manager.create_store(display_name)

    async def delete_store(self, store_name: str) -> None:
        await self.store_manager.delete_store(store_name)

    async def list_documents(self, store_name: str) -> List[Document]:
        return await self.store_manager.list_documents(store_name)

    async def upload_document(
        self,
        store_name: str,
        file: FileInput,
        metadata: Optional[MetadataInput] = None,
        display_name: Optional[str] = None
    ) -> IngestionResult:
        return await self.store_manager.upload_document(
            store_name, file, metadata=metadata, display_name=display_name
        )

    async def delete_document(self, document_name: str) -> None:
        await self.store_manager.delete_document(document_name)

    async def query(self, store_name: str, text: str, language_code: Optional[str] = None) -> QueryResult:
        return await self.search_service.query(
            store_name, text, self._language_code(language_code)
        )

    async def generate_suggested_questions(self, store_name: str, language_code: Optional[str] = None) -> List[str]:
        return await self.suggestion_service.generate_suggested_questions(
            store_name, self._language_code(language_code)
        )

    async def health_check(self) -> Dict[str, Any]:
        """Report backend reachability."""
        return await self.client.health_check()

    def _language_code(self, language_code: Optional[str]) -> str:
        """Only an omitted code takes the configured default; anything else is passed on as given."""
        if language_code is None:
            return self.settings.default_language
        return language_code
