"""Rewrite provider implementations."""

from .base import VERIFIED, RewriteProvider
from .factory import available_providers, create_provider
from .openai_compatible import OpenAICompatibleProvider

__all__ = [
    "RewriteProvider",
    "OpenAICompatibleProvider",
    "VERIFIED",
    "create_provider",
    "available_providers",
]
