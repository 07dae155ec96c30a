"""
Data models for RAG access system.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional


@dataclass
class GroundingCitation:
    """Source fragment the backend cites as evidence for its answer."""
    text: Optional[str] = None
    title: Optional[str] = None
    uri: Optional[str] = None

    @classmethod
    def from_backend(cls, chunk: Any) -> 'GroundingCitation':
        """Convert an SDK grounding chunk; fields the backend omits stay None."""
        context = getattr(chunk, 'retrieved_context', None)
        if context is None:
            return cls()
        return cls(
            text=getattr(context, 'text', None),
            title=getattr(context, 'title', None),
            uri=getattr(context, 'uri', None)
        )


@dataclass
class QueryResult:
    """Normalized answer to one grounded query."""
    text: str
    grounding_chunks: List[GroundingCitation] = field(default_factory=list)

    @property
    def has_sources(self) -> bool:
        """Check if the answer cites any source text."""
        return any(chunk.text for chunk in self.grounding_chunks)

    @property
    def source_count(self) -> int:
        """Get number of citations."""
        return len(self.grounding_chunks)


# Suggested-question payload variants produced by the suggestion parser

@dataclass
class TopicGroups:
    """Array of ``{topic, questions[]}`` objects."""
    groups: List[Any]

    def questions(self) -> List[str]:
        flattened = []
        for group in self.groups:
            if not isinstance(group, dict):
                continue
            items = group.get('questions')
            # A bare string stands for a single question
            if isinstance(items, str):
                flattened.append(items)
            elif isinstance(items, list):
                flattened.extend(item for item in items if isinstance(item, str))
        return flattened


@dataclass
class FlatStrings:
    """Bare array of question strings."""
    items: List[Any]

    def questions(self) -> List[str]:
        return [item for item in self.items if isinstance(item, str)]


@dataclass
class Malformed:
    """Anything that could not be interpreted as suggested questions."""
    reason: str
    raw: Any = None

    def questions(self) -> List[str]:
        return []
