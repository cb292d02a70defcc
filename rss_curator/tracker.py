"""Draft tracking keyed by canonical item link."""

from __future__ import annotations

from .core.types import DraftRecord
from .store import DocumentStore


class DuplicateTracker:
    """Answers "has this link already been rewritten, and into which draft?".

    Lookups compare links byte-for-byte, with no URL normalization. The
    tracker never blocks publishing; it only drives which action a listing
    offers for an item.
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    def find_latest_draft(self, link: str) -> int | None:
        """Return the highest document id recorded for ``link``, or None."""
        return self.store.latest_document_for_link(link)

    def lookup_many(self, links: list[str]) -> dict[str, int | None]:
        return {link: self.find_latest_draft(link) for link in dict.fromkeys(links)}

    def record(self, document_id: int, link: str) -> DraftRecord:
        """Append a draft record; earlier records for the same link are kept."""
        return self.store.add_draft_record(document_id, link)
