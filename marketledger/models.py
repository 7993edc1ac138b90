from pydantic import BaseModel, Field
from enum import Enum
from typing import Optional

U64_MAX = 2**64 - 1
U32_MAX = 2**32 - 1

# Opaque account token supplied by the hosting environment.
AccountId = str


class ListingKind(str, Enum):
    IMAGE = "Image"
    DATASET = "Dataset"
    AUDIO = "Audio"
    OTHER = "Other"


class Listing(BaseModel):
    product_id: int = Field(ge=0, le=U64_MAX)
    price: int = Field(ge=0, le=U32_MAX)
    group_id: str
    owner: AccountId
    purchase_count: int = Field(default=0, ge=0, le=U32_MAX)
    kind: ListingKind
    content_ref: str  # e.g. an IPFS CID
    active: bool = True
    # ordered sets: insertion order is first-purchase / first-grant order
    buyers: list[AccountId] = Field(default_factory=list)
    buyers_with_access: list[AccountId] = Field(default_factory=list)
    tee_verified: bool = False
    tee_signature: Optional[str] = None


# ── Request models ───────────────────────────────────────────────────────────

class CreateListingRequest(BaseModel):
    product_id: int = Field(ge=0, le=U64_MAX)
    price: int = Field(ge=0, le=U32_MAX)
    group_id: str
    kind: ListingKind
    content_ref: str
    owner: AccountId
    tee_verified: bool = False
    tee_signature: Optional[str] = None


class BuyRequest(BaseModel):
    external_account_id: str


class AccessRequest(BaseModel):
    buyer: AccountId


# ── Response models ──────────────────────────────────────────────────────────

class PendingBuyer(BaseModel):
    account: AccountId
    external_account_id: str
