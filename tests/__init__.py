"""Test package for RAG Chatbot.

Provides comprehensive test coverage for all components with unit tests
for isolated logic and integration tests for workflows.

Structure:
    - unit/: Individual function and class tests
    - integration/: End-to-end workflow tests
    - data/: Sample PDFs and fixtures

Uses real sample files for integration tests. No mocks in integration tests.
Leverages pytest with pytest-check for soft assertions.
"""
