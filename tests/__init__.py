"""Unit tests for the universal translator.

This package contains test modules for the cache, the translation service, the engines and the console.
Tests use pytest with asyncio support and mock HTTP calls via monkeypatch.
"""
