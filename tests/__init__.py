"""
ragstore test suite

Test Structure:
- test_settings.py: Settings loading and validation
- test_error_handlers.py: Error taxonomy and backend error translation
- test_logging.py: Logging setup and the log_operation decorator
- test_store_models.py: Store/document models and store membership
- test_gemini_client.py: Backend client against a fake SDK
- test_operation_poller.py: Long-running operation polling
- test_store_manager.py: Store and document lifecycle
- test_search_service.py: Grounded queries and prompts
- test_suggestion_parser.py: Suggested-question extraction
- test_assistant.py: Caller-facing assistant wiring
- conftest.py: Test configuration and fixtures

Usage:
    pytest
    pytest -m unit
"""
