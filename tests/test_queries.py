"""
Tests for the read-only projections and the identity map.
"""

from marketledger import ledger, queries
from marketledger.models import ListingKind
from marketledger.store import DataStore, IdentityMap


def make_store(buyers=("bob", "carol", "dave")) -> DataStore:
    s = DataStore()
    ledger.create_listing(s, product_id=1, price=10, group_id="g", kind=ListingKind.AUDIO,
                          content_ref="bafy-1", owner="alice")
    for b in buyers:
        ledger.buy(s, 1, b, f"{b}.nova")
    return s


class TestIdentityMap:
    def test_upsert_then_lookup(self):
        m = IdentityMap()
        m.upsert("bob", "bob.nova")
        assert m.lookup("bob") == "bob.nova"

    def test_second_upsert_overwrites(self):
        m = IdentityMap()
        m.upsert("bob", "x")
        m.upsert("bob", "y")
        assert m.lookup("bob") == "y"
        assert len(m) == 1

    def test_lookup_unknown_returns_none(self):
        assert IdentityMap().lookup("nobody") is None


class TestPendingAndGranted:
    def test_partition_of_buyers(self):
        store = make_store()
        ledger.grant_buyer_access(store, 1, "carol", "alice")
        ledger.grant_buyer_access(store, 1, "bob", "alice")
        ledger.revoke_buyer_access(store, 1, "carol", "alice")

        pending = queries.get_pending_access_buyers(store, 1)
        granted = queries.get_buyers_with_access(store, 1)
        buyers = store.listings.find(1).buyers

        assert set(pending) | set(granted) == set(buyers)
        assert set(pending) & set(granted) == set()
        assert pending == ["carol", "dave"]
        assert granted == ["bob"]

    def test_pending_keeps_purchase_order(self):
        store = make_store(buyers=("dave", "bob", "carol"))
        ledger.grant_buyer_access(store, 1, "bob", "alice")
        assert queries.get_pending_access_buyers(store, 1) == ["dave", "carol"]

    def test_unknown_listing_gives_empty_results(self):
        store = make_store()
        assert queries.get_pending_access_buyers(store, 99) == []
        assert queries.get_buyers_with_access(store, 99) == []
        assert queries.get_pending_buyers_with_nova_accounts(store, 99) == []
        assert queries.has_access(store, 99, "bob") is False
        assert queries.has_purchased(store, 99, "bob") is False
        assert queries.get_listing(store, 99) is None

    def test_returned_lists_are_detached(self):
        store = make_store()
        queries.get_buyers_with_access(store, 1).append("mallory")
        queries.get_listing(store, 1).buyers.append("mallory")
        assert "mallory" not in store.listings.find(1).buyers
        assert store.listings.find(1).buyers_with_access == []


class TestPendingWithNovaAccounts:
    def test_joins_external_ids(self):
        store = make_store()
        ledger.grant_buyer_access(store, 1, "carol", "alice")
        pending = queries.get_pending_buyers_with_nova_accounts(store, 1)
        assert [(p.account, p.external_account_id) for p in pending] == [
            ("bob", "bob.nova"),
            ("dave", "dave.nova"),
        ]

    def test_uses_latest_external_id(self):
        store = make_store()
        ledger.buy(store, 1, "bob", "bob2.nova")
        pending = queries.get_pending_buyers_with_nova_accounts(store, 1)
        assert pending[0].external_account_id == "bob2.nova"

    def test_unmapped_buyer_is_dropped(self):
        store = make_store()
        store.listings.find(1).buyers.append("legacy")

        assert "legacy" in queries.get_pending_access_buyers(store, 1)
        accounts = [p.account for p in queries.get_pending_buyers_with_nova_accounts(store, 1)]
        assert "legacy" not in accounts
        assert accounts == ["bob", "carol", "dave"]
