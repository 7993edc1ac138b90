"""
Mutating ledger operations.

Every operation runs its precondition checks before touching state, so a
call that raises leaves the store exactly as it found it. The caller
account is always supplied by the hosting environment, never by the
request payload.
"""

import logging
from typing import Optional

from marketledger.errors import AuthorizationError, ListingNotFoundError, PreconditionError
from marketledger.models import U32_MAX, AccountId, Listing, ListingKind
from marketledger.store import DataStore

logger = logging.getLogger(__name__)


def _owned_listing(store: DataStore, product_id: int, caller: AccountId, action: str) -> Listing:
    listing = store.listings.find(product_id)
    if listing is None:
        logger.warning("%s rejected: listing %s not found", action, product_id)
        raise ListingNotFoundError(product_id)
    if listing.owner != caller:
        logger.warning("%s on listing %s rejected: %s is not the owner", action, product_id, caller)
        raise AuthorizationError(f"Only the listing owner may {action}")
    return listing


def create_listing(
    store: DataStore,
    product_id: int,
    price: int,
    group_id: str,
    kind: ListingKind,
    content_ref: str,
    owner: AccountId,
    tee_verified: bool = False,
    tee_signature: Optional[str] = None,
) -> Listing:
    # product_id is not unique; lookups resolve duplicates to the earliest listing.
    listing = Listing(
        product_id=product_id,
        price=price,
        group_id=group_id,
        owner=owner,
        kind=kind,
        content_ref=content_ref,
        tee_verified=tee_verified,
        tee_signature=tee_signature,
    )
    with store.lock:
        if store.listings.find(product_id) is not None:
            logger.info("Listing %s already exists; new record is shadowed by the earlier one", product_id)
        store.listings.append(listing)
    logger.info("Created listing %s (%s) owned by %s", product_id, kind.value, owner)
    return listing.model_copy(deep=True)


def buy(store: DataStore, product_id: int, caller: AccountId, external_account_id: str) -> None:
    """Record a purchase of ``product_id`` by ``caller``.

    The identity-map write and the listing update are independent: the
    caller's external account is stored even when the listing does not exist.
    ``purchase_count`` counts calls, so repeat purchases increment it while
    ``buyers`` keeps each account once.
    """
    with store.lock:
        listing = store.listings.find(product_id)
        if listing is not None and listing.purchase_count >= U32_MAX:
            raise PreconditionError(f"Purchase counter for listing {product_id} is exhausted")

        store.identities.upsert(caller, external_account_id)

        if listing is None:
            logger.info("Purchase by %s of unknown listing %s; only the account mapping was stored",
                        caller, product_id)
            return

        listing.purchase_count += 1
        if caller not in listing.buyers:
            listing.buyers.append(caller)
    logger.info("Recorded purchase of listing %s by %s (count=%d)", product_id, caller, listing.purchase_count)


def grant_buyer_access(store: DataStore, product_id: int, buyer: AccountId, caller: AccountId) -> None:
    with store.lock:
        listing = _owned_listing(store, product_id, caller, "grant access")
        if buyer not in listing.buyers:
            logger.warning("Grant on listing %s rejected: %s has not purchased it", product_id, buyer)
            raise PreconditionError("Account has not purchased this listing")
        if buyer in listing.buyers_with_access:
            return
        listing.buyers_with_access.append(buyer)
    logger.info("Granted %s access to listing %s", buyer, product_id)


def revoke_buyer_access(store: DataStore, product_id: int, buyer: AccountId, caller: AccountId) -> None:
    with store.lock:
        listing = _owned_listing(store, product_id, caller, "revoke access")
        if buyer not in listing.buyers_with_access:
            return
        listing.buyers_with_access.remove(buyer)
    logger.info("Revoked %s access to listing %s", buyer, product_id)


def set_listing_active(store: DataStore, product_id: int, active: bool, caller: AccountId) -> None:
    """Deactivate or reactivate a listing. Only the owner may do either."""
    action = "reactivate the listing" if active else "deactivate the listing"
    with store.lock:
        listing = _owned_listing(store, product_id, caller, action)
        listing.active = active
    logger.info("Listing %s %s by %s", product_id, "reactivated" if active else "deactivated", caller)
