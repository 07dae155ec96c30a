"""
Store Management - store and document lifecycle.

- Store creation, listing and deletion
- Document listing scoped to a store, and deletion
- Ingestion with long-running operation polling

StoreManager lives in store_management.store_manager; it depends on the
backend client and is imported from there directly.
"""

from .store_models import (
    Store, Document, CustomMetadata, IngestionResult, belongs_to_store
)
from .pagination import collect_pages
from .operation_poller import OperationPoller, PollResult

__all__ = [
    'Store',
    'Document',
    'CustomMetadata',
    'IngestionResult',
    'belongs_to_store',
    'collect_pages',
    'OperationPoller',
    'PollResult'
]
