import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from marketledger import ledger, queries
from marketledger.config import settings
from marketledger.errors import AuthorizationError, ListingNotFoundError, PreconditionError
from marketledger.models import AccessRequest, BuyRequest, CreateListingRequest
from marketledger.store import DataStore, store

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.seed_on_startup:
        from scripts.seed_data import seed
        seed(store)
        logger.info("Seeded %d listings", len(store.listings))
    yield


app = FastAPI(
    title="Marketplace Listing Ledger",
    version="1.0.0",
    description="Listings, purchases and owner-gated content access for a digital-goods marketplace",
    lifespan=lifespan,
)


# ── Dependencies ─────────────────────────────────────────────────────────────

def get_store() -> DataStore:
    return store


def caller_account(request: Request) -> str:
    """Authenticated caller, injected by the gateway. Never read from the body."""
    caller = request.headers.get(settings.caller_header)
    if not caller:
        raise HTTPException(401, f"Missing {settings.caller_header} header")
    return caller


# ── Error mapping ────────────────────────────────────────────────────────────

@app.exception_handler(AuthorizationError)
def _authorization_error(request: Request, exc: AuthorizationError):
    return JSONResponse(status_code=403, content={"detail": str(exc)})


@app.exception_handler(PreconditionError)
def _precondition_error(request: Request, exc: PreconditionError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(ListingNotFoundError)
def _listing_not_found(request: Request, exc: ListingNotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


# ── Listings ─────────────────────────────────────────────────────────────────

@app.post("/api/v1/listings", status_code=201, summary="Create a listing")
def create_listing(body: CreateListingRequest, db: DataStore = Depends(get_store)):
    listing = ledger.create_listing(db, **body.model_dump())
    return listing.model_dump()


@app.get("/api/v1/listings", summary="List all listings in creation order")
def list_listings(db: DataStore = Depends(get_store)):
    return {"listings": [l.model_dump() for l in queries.get_listings(db)]}


@app.get("/api/v1/listings/{product_id}", summary="Get a listing by product id")
def get_listing(product_id: int, db: DataStore = Depends(get_store)):
    listing = queries.get_listing(db, product_id)
    if not listing:
        raise HTTPException(404, f"Listing {product_id} not found")
    return listing.model_dump()


@app.post("/api/v1/listings/{product_id}/deactivate", summary="Deactivate a listing (owner only)")
def deactivate_listing(product_id: int, caller: str = Depends(caller_account),
                       db: DataStore = Depends(get_store)):
    ledger.set_listing_active(db, product_id, False, caller)
    return {"product_id": product_id, "active": False}


@app.post("/api/v1/listings/{product_id}/reactivate", summary="Reactivate a listing (owner only)")
def reactivate_listing(product_id: int, caller: str = Depends(caller_account),
                       db: DataStore = Depends(get_store)):
    ledger.set_listing_active(db, product_id, True, caller)
    return {"product_id": product_id, "active": True}


# ── Purchases ────────────────────────────────────────────────────────────────

@app.post("/api/v1/listings/{product_id}/buy", summary="Record a purchase by the caller")
def buy(product_id: int, body: BuyRequest, caller: str = Depends(caller_account),
        db: DataStore = Depends(get_store)):
    ledger.buy(db, product_id, caller, body.external_account_id)
    return {"product_id": product_id, "buyer": caller, "status": "recorded"}


@app.get("/api/v1/listings/{product_id}/purchases/{account}", summary="Has the account purchased the listing")
def has_purchased(product_id: int, account: str, db: DataStore = Depends(get_store)):
    return {"product_id": product_id, "account": account,
            "has_purchased": queries.has_purchased(db, product_id, account)}


@app.get("/api/v1/accounts/{account}/nova-account", summary="External account recorded for a caller")
def get_nova_account(account: str, db: DataStore = Depends(get_store)):
    nova_account = queries.get_nova_account(db, account)
    if nova_account is None:
        raise HTTPException(404, f"No nova account recorded for '{account}'")
    return {"account": account, "nova_account": nova_account}


# ── Access ───────────────────────────────────────────────────────────────────

@app.post("/api/v1/listings/{product_id}/access/grant", summary="Grant a buyer access (owner only)")
def grant_access(product_id: int, body: AccessRequest, caller: str = Depends(caller_account),
                 db: DataStore = Depends(get_store)):
    ledger.grant_buyer_access(db, product_id, body.buyer, caller)
    return {"product_id": product_id, "buyer": body.buyer, "has_access": True}


@app.post("/api/v1/listings/{product_id}/access/revoke", summary="Revoke a buyer's access (owner only)")
def revoke_access(product_id: int, body: AccessRequest, caller: str = Depends(caller_account),
                  db: DataStore = Depends(get_store)):
    ledger.revoke_buyer_access(db, product_id, body.buyer, caller)
    return {"product_id": product_id, "buyer": body.buyer, "has_access": False}


@app.get("/api/v1/listings/{product_id}/access/{account}", summary="Does the account have access")
def has_access(product_id: int, account: str, db: DataStore = Depends(get_store)):
    return {"product_id": product_id, "account": account,
            "has_access": queries.has_access(db, product_id, account)}


@app.get("/api/v1/listings/{product_id}/pending-buyers", summary="Buyers awaiting access")
def pending_buyers(product_id: int, db: DataStore = Depends(get_store)):
    return {"product_id": product_id, "buyers": queries.get_pending_access_buyers(db, product_id)}


@app.get(
    "/api/v1/listings/{product_id}/pending-buyers/nova-accounts",
    summary="Buyers awaiting access, with their nova accounts",
)
def pending_buyers_with_nova_accounts(product_id: int, db: DataStore = Depends(get_store)):
    pending = queries.get_pending_buyers_with_nova_accounts(db, product_id)
    return {"product_id": product_id, "buyers": [p.model_dump() for p in pending]}


@app.get("/api/v1/listings/{product_id}/buyers-with-access", summary="Buyers currently granted access")
def buyers_with_access(product_id: int, db: DataStore = Depends(get_store)):
    return {"product_id": product_id, "buyers": queries.get_buyers_with_access(db, product_id)}


# ── Admin ─────────────────────────────────────────────────────────────────────

@app.post("/api/v1/admin/seed", summary="Re-seed demo data")
def reseed(db: DataStore = Depends(get_store)):
    from scripts.seed_data import seed
    with db.lock:
        db.clear()
        seed(db)
    return {
        "status": "seeded",
        "listings": len(db.listings),
        "accounts": len(db.identities),
    }
