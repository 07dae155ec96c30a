"""
SearchService - AI access layer for grounded queries.

Answers one natural-language question from one store's documents.
"""

from typing import Any, List, Optional

import structlog

from ragstore.services.gemini_client import GeminiFileSearchClient
from .rag_models import GroundingCitation, QueryResult
from .rag_prompts import RAGPrompts

logger = structlog.get_logger(__name__)


class SearchService:
    """
    Query orchestrator.

    Builds the grounded prompt, scopes retrieval to a single store and
    normalizes the backend response into a QueryResult. Backend failures
    propagate as TransportError; nothing is retried.
    """

    def __init__(self, client: GeminiFileSearchClient):
        """
        Initialize search service.

        Args:
            client: Backend client
        """
        self.client = client
        self.logger = logger.bind(
            log_type="GEMINI",
            component="search_service"
        )

    async def query(self, store_name: str, query: str, language_code: Optional[str] = None) -> QueryResult:
        """
        Answer a question grounded in one store.

        Args:
            store_name: Store retrieval is scoped to
            query: User question
            language_code: Response language code; unknown codes fall back to the query's language

        Returns:
            QueryResult with the answer text and cited fragments
        """
        prompt = RAGPrompts.build_query_prompt(query, language_code)

        self.logger.info(
            "Running grounded query",
            store_name=store_name,
            language_code=language_code,
            query_length=len(query)
        )

        response = await self.client.generate_content(prompt, [store_name])
        result = QueryResult(
            text=getattr(response, 'text', None) or '',
            grounding_chunks=self._extract_citations(response)
        )

        self.logger.info(
            "Grounded query completed",
            store_name=store_name,
            answer_length=len(result.text),
            citations=result.source_count
        )
        return result

    @staticmethod
    def _extract_citations(response: Any) -> List[GroundingCitation]:
        """Pull grounding chunks from the first candidate, if any."""
        candidates = getattr(response, 'candidates', None) or []
        if not candidates:
            return []

        metadata = getattr(candidates[0], 'grounding_metadata', None)
        chunks = getattr(metadata, 'grounding_chunks', None) or []
        return [GroundingCitation.from_backend(chunk) for chunk in chunks]
