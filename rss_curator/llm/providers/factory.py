"""Provider factory and registry for swappable rewrite backends."""

from __future__ import annotations

import logging

import httpx

from ...config import LoggingConfig, ProviderConfig
from .base import RewriteProvider
from .openai_compatible import OpenAICompatibleProvider


ProviderBuilder = type[RewriteProvider]

_PROVIDER_REGISTRY: dict[str, ProviderBuilder] = {
    "venice": OpenAICompatibleProvider,
    "openai": OpenAICompatibleProvider,
    "openai_compatible": OpenAICompatibleProvider,
    "openai-compatible": OpenAICompatibleProvider,
}


def available_providers() -> list[str]:
    """Return the set of registered provider names."""
    return sorted(_PROVIDER_REGISTRY.keys())


def create_provider(
    provider_cfg: ProviderConfig,
    log_cfg: LoggingConfig,
    llm_logger: logging.Logger | None = None,
    client: httpx.Client | None = None,
) -> RewriteProvider:
    """Build a provider instance from runtime config."""
    name = provider_cfg.name.lower().strip()
    builder = _PROVIDER_REGISTRY.get(name)
    if builder is None:
        supported = ", ".join(available_providers())
        raise ValueError(f"Unsupported provider: {provider_cfg.name}. Supported: {supported}")
    return builder(provider_cfg, log_cfg, llm_logger, client)
