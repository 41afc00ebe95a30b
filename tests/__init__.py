"""Unit tests for TransRouter.

This package contains test modules for the translation manager, provider adapters, cache, statistics,
speech synthesis, configuration loading and utilities.
Tests use pytest with asyncio support and mock HTTP/SDK calls via monkeypatch.
"""
