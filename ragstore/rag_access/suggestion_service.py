"""
SuggestionService - seeds example questions for a store.

Advisory only: every failure degrades to an empty list.
"""

from typing import List, Optional

import structlog

from ragstore.services.gemini_client import GeminiFileSearchClient
from ragstore.utils.error_handlers import RagStoreBaseError
from .rag_prompts import RAGPrompts
from .suggestion_parser import extract_questions

logger = structlog.get_logger(__name__)


class SuggestionService:
    """Asks the backend for example questions per topic found in a store."""

    def __init__(self, client: GeminiFileSearchClient, questions_per_topic: int = 4):
        self.client = client
        self.questions_per_topic = questions_per_topic
        self.logger = logger.bind(
            log_type="GEMINI",
            component="suggestion_service"
        )

    async def generate_suggested_questions(
        self,
        store_name: str,
        language_code: Optional[str] = None
    ) -> List[str]:
        """
        Generate example questions grounded in a store.

        Args:
            store_name: Store to draw topics from
            language_code: Language for the questions (English when unknown)

        Returns:
            Flat list of question strings; empty on any failure
        """
        prompt = RAGPrompts.build_suggestion_prompt(language_code, self.questions_per_topic)

        try:
            response = await self.client.generate_content(prompt, [store_name])
            questions = extract_questions(getattr(response, 'text', None))
        except RagStoreBaseError as e:
            self.logger.error(
                "Failed to generate example questions",
                store_name=store_name,
                error_type=type(e).__name__,
                error=e.message
            )
            return []
        except Exception as e:
            self.logger.error(
                "Unexpected error while generating example questions",
                store_name=store_name,
                error_type=type(e).__name__,
                error=str(e)
            )
            return []

        self.logger.info(
            "Example questions generated",
            store_name=store_name,
            question_count=len(questions)
        )
        return questions
