"""Generative-text providers, prompts and tracing.

Submodules are imported directly (``rss_curator.llm.providers``,
``rss_curator.llm.tracing``) because ``rss_curator.config`` depends on
``rss_curator.llm.prompts``.
"""
