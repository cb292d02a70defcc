"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- ProviderConfig: Generative-text API settings (credential, prompt, model)
- FetchConfig: Feed fetching settings
- CacheConfig: Aggregation cache backend and TTL
- StoreConfig: Document store location
- RegistryConfig: Feed source registry location
- LoggingConfig: Logging behavior
- LangfuseConfig: Langfuse tracing settings
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
import os
from typing import Any

import yaml

from .llm.prompts import default_system_prompt


@dataclass
class ProviderConfig:
    """Configuration for the generative-text provider.

    Attributes:
        name: Provider name ("openai_compatible" currently supported)
        model: Model identifier sent with every request
        base_url: Base URL of the OpenAI-compatible API
        api_key: Optional inline API key (overrides env var)
        api_key_env: Environment variable name containing the API key
        system_prompt: Instruction sent as the system message; None uses the default
        temperature: Sampling temperature
        max_tokens: Maximum output length in tokens
        timeout_seconds: Request timeout
        trust_env: Whether to respect system proxy settings for API requests
    """

    name: str = "openai_compatible"
    model: str = "venice-uncensored"
    base_url: str = "https://api.venice.ai/api/v1"
    api_key: str | None = None
    api_key_env: str = "VENICE_API_KEY"
    system_prompt: str | None = None
    temperature: float = 0.7
    max_tokens: int = 2000
    timeout_seconds: float = 60.0
    trust_env: bool = True


@dataclass
class FetchConfig:
    """Configuration for feed fetching.

    Attributes:
        timeout_seconds: HTTP request timeout
        trust_env: Whether to respect system proxy settings
        user_agent: HTTP User-Agent header string
        per_source_limit: Maximum items drawn from one source per aggregation
    """

    timeout_seconds: float = 20.0
    trust_env: bool = True
    user_agent: str = "rss-curator/0.1 (+https://github.com/rss-curator)"
    per_source_limit: int = 10


@dataclass
class CacheConfig:
    """Configuration for the aggregation cache.

    Attributes:
        backend: "memory" for a per-process cache, "file" for a shared on-disk cache
        dir: Directory for the file backend and the cache index
        ttl_seconds: Time-to-live of an aggregation entry
        write_index: Whether to write the cache index JSONL file
        index_filename: Name of the cache index file
    """

    backend: str = "file"
    dir: str = ".rss_curator/cache"
    ttl_seconds: int = 900
    write_index: bool = True
    index_filename: str = "index.jsonl"


@dataclass
class StoreConfig:
    """Configuration for the document store.

    Attributes:
        path: SQLite database path (":memory:" for a throwaway store)
        edit_url_template: Format string producing an edit reference from a document id
    """

    path: str = ".rss_curator/curator.db"
    edit_url_template: str = "/drafts/{id}/edit"


@dataclass
class RegistryConfig:
    """Configuration for the feed source registry.

    Attributes:
        path: YAML file holding the registered feed sources
    """

    path: str = "feeds.yaml"


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        filename: Name of the main log file
        dir: Directory receiving log files
        llm_log_enabled: Whether to enable separate LLM interaction logging
        llm_log_detail: LLM log detail level ("response_only", "prompt_response")
        llm_log_redaction: Redaction mode for LLM logs ("none", "redact_content", "redact_urls_authors")
        llm_log_file: Name of the LLM log file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = False
    format: str = "jsonl"
    filename: str = "curator.jsonl"
    dir: str = ".rss_curator/logs"
    llm_log_enabled: bool = True
    llm_log_detail: str = "response_only"
    llm_log_redaction: str = "redact_urls_authors"
    llm_log_file: str = "llm.jsonl"


@dataclass
class LangfuseConfig:
    """Configuration for Langfuse tracing.

    Attributes:
        enabled: Whether to enable Langfuse tracing
        public_key: Langfuse public key (optional)
        secret_key: Langfuse secret key (optional)
        host: Langfuse host URL (optional)
        environment: Langfuse environment label (optional)
        release: Langfuse release identifier (optional)
        redaction: Redaction mode for prompt/response payloads
        max_text_chars: Maximum characters for prompt/response payloads
    """

    enabled: bool = False
    public_key: str | None = None
    secret_key: str | None = None
    host: str | None = None
    environment: str | None = None
    release: str | None = None
    redaction: str = "redact_urls_authors"
    max_text_chars: int = 20000


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    provider: ProviderConfig = field(default_factory=ProviderConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    registry: RegistryConfig = field(default_factory=RegistryConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    langfuse: LangfuseConfig = field(default_factory=LangfuseConfig)


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults."""
    if not path:
        return AppConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    return _merge_config(AppConfig(), raw)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig.

    Unknown top-level sections are ignored; unknown keys inside a known
    section raise TypeError when the section is rebuilt.
    """
    data = asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict) and isinstance(data[key], dict):
            data[key].update(value)
    return _fromdict(data)


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    return AppConfig(
        provider=ProviderConfig(**data["provider"]),
        fetch=FetchConfig(**data["fetch"]),
        cache=CacheConfig(**data["cache"]),
        store=StoreConfig(**data["store"]),
        registry=RegistryConfig(**data["registry"]),
        logging=LoggingConfig(**data["logging"]),
        langfuse=LangfuseConfig(**data.get("langfuse", {})),
    )


def get_api_key(cfg: ProviderConfig) -> str | None:
    """Get API key from inline config or environment variable."""
    if cfg.api_key:
        return cfg.api_key
    return os.getenv(cfg.api_key_env)


def get_system_prompt(cfg: ProviderConfig) -> str:
    """Return the configured system prompt, or the built-in one when unset."""
    if cfg.system_prompt and cfg.system_prompt.strip():
        return cfg.system_prompt
    return default_system_prompt()
