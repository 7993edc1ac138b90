from typing import Optional

from marketledger.models import AccountId, Listing, PendingBuyer
from marketledger.store import DataStore

# Unknown product ids are not errors here: every read returns an empty or
# absent result instead.


def get_listings(store: DataStore) -> list[Listing]:
    with store.lock:
        return store.listings.list()


def get_listing(store: DataStore, product_id: int) -> Optional[Listing]:
    """Earliest-created listing with this product id, as a detached copy."""
    with store.lock:
        listing = store.listings.find(product_id)
        return listing.model_copy(deep=True) if listing is not None else None


def get_nova_account(store: DataStore, account: AccountId) -> Optional[str]:
    with store.lock:
        return store.identities.lookup(account)


def get_pending_access_buyers(store: DataStore, product_id: int) -> list[AccountId]:
    """Buyers still waiting for access, in the order they first purchased."""
    with store.lock:
        listing = store.listings.find(product_id)
        if listing is None:
            return []
        granted = set(listing.buyers_with_access)
        return [b for b in listing.buyers if b not in granted]


def get_buyers_with_access(store: DataStore, product_id: int) -> list[AccountId]:
    with store.lock:
        listing = store.listings.find(product_id)
        return list(listing.buyers_with_access) if listing is not None else []


def get_pending_buyers_with_nova_accounts(store: DataStore, product_id: int) -> list[PendingBuyer]:
    """Pending buyers joined with their external account id.

    Buyers that have no identity-map entry are left out of the result.
    """
    with store.lock:
        result = []
        for buyer in get_pending_access_buyers(store, product_id):
            external_id = store.identities.lookup(buyer)
            if external_id is not None:
                result.append(PendingBuyer(account=buyer, external_account_id=external_id))
        return result


def has_access(store: DataStore, product_id: int, account: AccountId) -> bool:
    with store.lock:
        listing = store.listings.find(product_id)
        return listing is not None and account in listing.buyers_with_access


def has_purchased(store: DataStore, product_id: int, account: AccountId) -> bool:
    with store.lock:
        listing = store.listings.find(product_id)
        return listing is not None and account in listing.buyers
