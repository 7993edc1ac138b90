class LedgerError(Exception):
    """Base class for errors that abort a ledger call without side effects."""


class AuthorizationError(LedgerError):
    """Caller is not allowed to perform the operation on this listing."""


class PreconditionError(LedgerError):
    """Listing state does not permit the operation."""


class ListingNotFoundError(LedgerError):
    def __init__(self, product_id: int):
        super().__init__(f"Listing {product_id} not found")
        self.product_id = product_id
