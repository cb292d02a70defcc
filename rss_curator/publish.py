"""
Rewrite-and-publish workflow.

Runs one rewrite per call and stores the result as a new draft. The
workflow is not idempotent: publishing the same link twice
creates two drafts and two draft records ("Rewrite Again").
"""

from __future__ import annotations

import logging

from .context import CuratorContext
from .core.errors import ConfigError, StorageError
from .core.types import PublishResult
from .store import STATUS_DRAFT

logger = logging.getLogger(__name__)

MISSING_CREDENTIAL = "Venice API key missing."


def publish(
    ctx: CuratorContext,
    title: str,
    link: str,
    content: str,
    credential: str | None = None,
    system_prompt: str | None = None,
    author: str | None = None,
) -> PublishResult:
    """Rewrite ``content`` and save it as a draft titled ``title``.

    Args:
        ctx: Runtime context
        title: Draft title, used as supplied
        link: Canonical link of the source item, recorded against the draft
        content: Raw item content sent to the rewrite provider
        credential: API key; defaults to the configured one
        system_prompt: Instruction; defaults to the configured or built-in prompt
        author: Acting user; defaults to the context author

    Returns:
        PublishResult with the new document id and its edit reference

    Raises:
        ConfigError: No usable credential (no network call is made)
        RewriteError: Propagated unchanged from the provider
        StorageError: The document store could not create or record the draft
    """
    if credential is None:
        credential = ctx.credential
    if not credential or not credential.strip():
        raise ConfigError(MISSING_CREDENTIAL)
    prompt = system_prompt if system_prompt is not None else ctx.system_prompt

    logger.info("Rewriting %s", link or title)
    text = ctx.provider.rewrite(content, prompt, credential)

    try:
        document_id = ctx.store.create(title, text, STATUS_DRAFT, author or ctx.author)
    except StorageError:
        raise
    except Exception as exc:  # noqa: BLE001
        logger.error("Document store failed: %s", exc)
        raise StorageError("insert failed") from exc

    try:
        ctx.tracker.record(document_id, link)
    except StorageError:
        logger.error("Draft %s was created but not recorded against %s", document_id, link)
        raise
    edit_url = ctx.store.edit_reference(document_id)
    logger.info("Created draft %s for %s", document_id, link)
    return PublishResult(document_id=document_id, edit_url=edit_url)


def verify_credential(ctx: CuratorContext, credential: str | None = None) -> str:
    """Check an API key against the remote service; returns "Verified"."""
    if credential is None:
        credential = ctx.credential
    if not credential or not credential.strip():
        raise ConfigError(MISSING_CREDENTIAL)
    return ctx.provider.verify(credential)
