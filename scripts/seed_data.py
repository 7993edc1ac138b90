"""
Deterministic demo-data generator.

Produces:
  - 6 listings across the four kinds, owned by 3 sellers
  - 20 purchases by 8 buyers (some repeat purchases)
  - access granted to roughly half of the buyers of each listing
  - 2 buyers whose external account is never recorded through a purchase
    (they appear as buyers via a direct store write, the way a migrated
    record would)
"""

import random

from marketledger import ledger
from marketledger.models import ListingKind
from marketledger.store import DataStore

SEED = 42

OWNERS = ["alice.near", "studio-k.near", "datahaus.near"]
BUYERS = [f"buyer{i}.near" for i in range(1, 9)]


def _cid(rng: random.Random) -> str:
    return "bafy" + "".join(rng.choice("abcdefghijklmnopqrstuvwxyz234567") for _ in range(52))


def seed(store: DataStore) -> None:
    rng = random.Random(SEED)

    # ── listings ─────────────────────────────────────────────────────────────
    kinds = [ListingKind.IMAGE, ListingKind.DATASET, ListingKind.AUDIO,
             ListingKind.OTHER, ListingKind.DATASET, ListingKind.IMAGE]
    for i, kind in enumerate(kinds, start=1):
        tee = kind == ListingKind.DATASET
        ledger.create_listing(
            store,
            product_id=i,
            price=rng.randint(1, 50) * 100,
            group_id=f"group-{i:03d}",
            kind=kind,
            content_ref=_cid(rng),
            owner=OWNERS[i % len(OWNERS)],
            tee_verified=tee,
            tee_signature=f"{rng.getrandbits(128):032x}" if tee else None,
        )

    # ── purchases ────────────────────────────────────────────────────────────
    for _ in range(20):
        buyer = rng.choice(BUYERS)
        product_id = rng.randint(1, len(kinds))
        ledger.buy(store, product_id, buyer, buyer.replace(".near", ".nova-sdk.near"))

    # ── grants ───────────────────────────────────────────────────────────────
    for listing in store.listings.list():
        for buyer in listing.buyers:
            if rng.random() < 0.5:
                ledger.grant_buyer_access(store, listing.product_id, buyer, listing.owner)

    # ── unmapped buyers ──────────────────────────────────────────────────────
    target = store.listings.find(1)
    assert target is not None
    for buyer in ("legacy1.near", "legacy2.near"):
        if buyer not in target.buyers:
            target.buyers.append(buyer)
