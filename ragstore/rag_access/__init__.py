"""
RAG Access - grounded queries and suggested questions.

- Prompt building with language directives
- Grounded generation scoped to one store
- Response normalization into QueryResult
- Suggested-question extraction from free-form output
"""

from .rag_models import QueryResult, GroundingCitation, TopicGroups, FlatStrings, Malformed
from .rag_prompts import RAGPrompts, SUPPORTED_LANGUAGES, resolve_language
from .search_service import SearchService
from .suggestion_parser import extract_questions, parse_suggestions
from .suggestion_service import SuggestionService

__all__ = [
    'QueryResult',
    'GroundingCitation',
    'TopicGroups',
    'FlatStrings',
    'Malformed',
    'RAGPrompts',
    'SUPPORTED_LANGUAGES',
    'resolve_language',
    'SearchService',
    'extract_questions',
    'parse_suggestions',
    'SuggestionService'
]
