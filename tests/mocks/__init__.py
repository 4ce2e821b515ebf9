"""Mock implementations for isolated firewall tests.

This module provides mock implementations for:
- LLM provider transport (mock_llm)
- Downstream tool-dispatch executor (mock_llm)

These mocks enable testing without network access or real credentials.
"""
