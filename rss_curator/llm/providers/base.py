"""Abstract interface for generative-text rewrite providers."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..prompts import VERIFY_CONTENT, verify_system_prompt

VERIFIED = "Verified"


class RewriteProvider(ABC):
    """Provider interface for the rewrite engine.

    Providers are stateless with respect to credentials: the caller passes
    the API key on every call.
    """

    @abstractmethod
    def rewrite(self, content: str, system_prompt: str, credential: str) -> str:
        """Return the transformed text or raise a RewriteError subclass."""
        raise NotImplementedError

    def verify(self, credential: str) -> str:
        """Check that the remote service accepts ``credential``.

        Sends a trivial prompt through the same path as ``rewrite`` so the
        error taxonomy is identical; the generated text is discarded.
        """
        self.rewrite(VERIFY_CONTENT, verify_system_prompt(), credential)
        return VERIFIED
