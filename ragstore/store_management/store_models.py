"""
Data models for store and document management.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any, Iterable, Mapping, Tuple

from ragstore.utils.error_handlers import ValidationError


def belongs_to_store(document_name: Optional[str], store_name: str) -> bool:
    """
    Derived store membership for a document.

    The file listing cannot be scoped by store on the server, so ownership is
    inferred from the hierarchical name: ``<store name>/<document id>``.
    """
    if not document_name or not store_name:
        return False
    return document_name.startswith(f"{store_name}/")


@dataclass(frozen=True)
class CustomMetadata:
    """Key/string-value annotation attached to a document at ingestion time."""
    key: str
    string_value: str

    def to_wire(self) -> Dict[str, str]:
        """Convert to the request shape expected by the upload call."""
        return {'key': self.key, 'string_value': self.string_value}

    @classmethod
    def from_entry(cls, entry: Any) -> Optional['CustomMetadata']:
        """
        Build one metadata entry from caller input.

        Accepts a CustomMetadata, a ``{key, stringValue}`` (or ``string_value``)
        mapping, or a ``(key, value)`` pair. Keys and values are stripped; a
        blank key yields None.

        Raises:
            ValidationError: The entry has none of the accepted shapes
        """
        if isinstance(entry, CustomMetadata):
            key, value = entry.key, entry.string_value
        elif isinstance(entry, Mapping) and 'key' in entry:
            key = entry['key']
            value = entry.get('stringValue', entry.get('string_value'))
        elif isinstance(entry, (tuple, list)) and len(entry) == 2:
            key, value = entry
        else:
            raise ValidationError(
                f"Unsupported custom metadata entry: {entry!r}",
                field="metadata",
                value=entry,
                expected_type="CustomMetadata, {key, stringValue} mapping or (key, value) pair"
            )

        if key is None or not str(key).strip():
            return None
        return cls(
            key=str(key).strip(),
            string_value=str(value).strip() if value is not None else ''
        )

    @classmethod
    def from_entries(cls, entries: Iterable[Any]) -> List['CustomMetadata']:
        """Normalize each entry on its own, dropping entries with a blank key."""
        normalized = []
        for entry in entries:
            converted = cls.from_entry(entry)
            if converted is not None:
                normalized.append(converted)
        return normalized

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[str, str]]) -> List['CustomMetadata']:
        """Build metadata entries from ``(key, value)`` pairs, e.g. ``dict.items()``."""
        return cls.from_entries(tuple(pair) for pair in pairs)

    @classmethod
    def from_backend(cls, item: Any) -> Optional['CustomMetadata']:
        """Convert an SDK metadata entry, ignoring entries without a key."""
        key = getattr(item, 'key', None)
        if not key:
            return None
        return cls(key=key, string_value=getattr(item, 'string_value', None) or '')


@dataclass
class Store:
    """Named server-side collection that documents are ingested into."""
    name: str
    display_name: str

    @classmethod
    def from_backend(cls, item: Any) -> Optional['Store']:
        """Convert an SDK store record; returns None when identity fields are missing."""
        name = getattr(item, 'name', None)
        display_name = getattr(item, 'display_name', None)
        if not name or not display_name:
            return None
        return cls(name=name, display_name=display_name)


@dataclass
class Document:
    """A file ingested into exactly one store."""
    name: str
    display_name: Optional[str] = None
    custom_metadata: List[CustomMetadata] = field(default_factory=list)
    mime_type: Optional[str] = None
    size_bytes: Optional[int] = None

    @property
    def store_name(self) -> Optional[str]:
        """Owning store name derived from the document name, if well-formed."""
        store_name, separator, _ = self.name.partition('/documents/')
        return store_name if separator else None

    def metadata_dict(self) -> Dict[str, str]:
        """Custom metadata as a plain dictionary (last entry wins on duplicate keys)."""
        return {entry.key: entry.string_value for entry in self.custom_metadata}

    @classmethod
    def from_backend(cls, item: Any) -> Optional['Document']:
        """Convert an SDK file/document record; returns None when the name is missing."""
        name = getattr(item, 'name', None)
        if not name:
            return None

        metadata = []
        for entry in getattr(item, 'custom_metadata', None) or []:
            converted = CustomMetadata.from_backend(entry)
            if converted is not None:
                metadata.append(converted)

        size_bytes = getattr(item, 'size_bytes', None)
        return cls(
            name=name,
            display_name=getattr(item, 'display_name', None),
            custom_metadata=metadata,
            mime_type=getattr(item, 'mime_type', None),
            size_bytes=int(size_bytes) if size_bytes is not None else None
        )


@dataclass
class IngestionResult:
    """Result of a completed document ingestion."""
    store_name: str
    display_name: Optional[str]
    operation_name: Optional[str]
    document_name: Optional[str] = None
    poll_count: int = 0
    processing_time: Optional[float] = None
