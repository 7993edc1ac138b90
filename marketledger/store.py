import threading
from typing import Optional

from marketledger.models import AccountId, Listing


class ListingStore:
    """Append-only, creation-ordered collection of listings.

    ``product_id`` is not unique. The index maps each id to the position of
    its earliest listing, so lookups resolve to the same record a scan in
    storage order would find.
    """

    def __init__(self) -> None:
        self._listings: list[Listing] = []
        self._index: dict[int, int] = {}

    def __len__(self) -> int:
        return len(self._listings)

    # ── writes ────────────────────────────────────────────────────────────────

    def append(self, listing: Listing) -> None:
        self._index.setdefault(listing.product_id, len(self._listings))
        self._listings.append(listing)

    def clear(self) -> None:
        self._listings.clear()
        self._index.clear()

    # ── reads ─────────────────────────────────────────────────────────────────

    def find(self, product_id: int) -> Optional[Listing]:
        """Return the stored (mutable) record, or None."""
        pos = self._index.get(product_id)
        if pos is None:
            return None
        return self._listings[pos]

    def list(self) -> list[Listing]:
        return [l.model_copy(deep=True) for l in self._listings]


class IdentityMap:
    """Caller account -> external (nova) account id. Last write wins."""

    def __init__(self) -> None:
        self._entries: dict[AccountId, str] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def upsert(self, account: AccountId, external_id: str) -> None:
        self._entries[account] = external_id

    def lookup(self, account: AccountId) -> Optional[str]:
        return self._entries.get(account)

    def clear(self) -> None:
        self._entries.clear()


class DataStore:
    """The two persisted regions: listings and the identity map."""

    def __init__(self) -> None:
        self.listings = ListingStore()
        self.identities = IdentityMap()
        # one call at a time; FastAPI runs sync routes on a threadpool
        self.lock = threading.RLock()

    def clear(self) -> None:
        self.listings.clear()
        self.identities.clear()


# module-level singleton used by the app
store = DataStore()
