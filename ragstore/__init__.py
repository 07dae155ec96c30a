"""
ragstore - orchestration client for Gemini File Search stores.

Manages stores and documents, ingests files with operation polling, and
answers grounded questions scoped to a single store.
"""

from .assistant import RagStoreAssistant

__version__ = "0.1.0"

__all__ = ["RagStoreAssistant"]
