"""Base exception for prompt-router.

Concrete errors live beside the code that raises them:

- ``ConfigError`` / ``UnsupportedProtocolError`` — ``prompt_router.config``
  and ``prompt_router.protocol``
- ``PayloadError`` — ``prompt_router.context.payload``
- ``PluginLoadError`` / ``InvalidExportError`` — ``prompt_router.matching.loader``
"""
from __future__ import annotations


class PromptRouterError(Exception):
    """Root of every error raised deliberately by prompt-router."""
