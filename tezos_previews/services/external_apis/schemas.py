"""Typed shapes of the TzKT and OBJKT payloads we consume"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class UpstreamModel(BaseModel):
    """Lenient base: unknown fields ignored, numeric ids accepted as strings"""
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)


# TzKT

class TzktAccount(UpstreamModel):
    address: str
    alias: Optional[str] = None


class TzktAttribute(UpstreamModel):
    name: Optional[str] = None
    trait_type: Optional[str] = None
    value: Any = None

    @property
    def label(self) -> str:
        return self.name or self.trait_type or "Trait"


class TzktTokenMetadata(UpstreamModel):
    name: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    displayUri: Optional[str] = None
    thumbnailUri: Optional[str] = None
    artifactUri: Optional[str] = None
    attributes: Optional[List[TzktAttribute]] = None

    @field_validator("attributes", mode="before")
    @classmethod
    def keep_attribute_objects(cls, value):
        # Token metadata is user-authored; drop anything that isn't a list of objects
        if not isinstance(value, list):
            return None
        return [item for item in value if isinstance(item, dict)]


class TzktContract(UpstreamModel):
    address: str
    alias: Optional[str] = None


class TzktTokenInfo(UpstreamModel):
    id: Optional[int] = None
    contract: TzktContract
    tokenId: str
    standard: Optional[str] = None
    totalSupply: Optional[str] = None
    metadata: Optional[TzktTokenMetadata] = None

    @field_validator("metadata", mode="before")
    @classmethod
    def metadata_object(cls, value):
        return value if isinstance(value, dict) else None


class TzktToken(UpstreamModel):
    """A token balance row from /v1/tokens"""
    id: Optional[int] = None
    account: TzktAccount
    token: TzktTokenInfo
    balance: Optional[str] = None
    transfersCount: Optional[int] = None
    firstTime: Optional[str] = None
    lastTime: Optional[str] = None


class TzktContractInfo(UpstreamModel):
    address: str
    alias: Optional[str] = None
    kind: Optional[str] = None
    tzips: Optional[List[str]] = None
    creator: Optional[TzktAccount] = None
    firstActivityTime: Optional[str] = None


# OBJKT

class ObjktHolder(UpstreamModel):
    address: Optional[str] = None
    alias: Optional[str] = None
    logo: Optional[str] = None
    website: Optional[str] = None
    description: Optional[str] = None
    discord: Optional[str] = None
    twitter: Optional[str] = None
    instagram: Optional[str] = None
    tzdomain: Optional[str] = None


class ObjktCreator(UpstreamModel):
    creator_address: str
    creator_name: Optional[str] = None
    holder: Optional[ObjktHolder] = None


class ObjktCurrency(UpstreamModel):
    symbol: Optional[str] = None
    decimals: Optional[int] = None


class ObjktListing(UpstreamModel):
    price: Optional[int] = None
    price_xtz: Optional[int] = None
    amount_left: Optional[int] = None
    currency: Optional[ObjktCurrency] = None


class ObjktDutchAuction(UpstreamModel):
    start_price: Optional[int] = None
    start_price_xtz: Optional[int] = None
    end_price: Optional[int] = None
    end_price_xtz: Optional[int] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    amount_left: Optional[int] = None
    currency: Optional[ObjktCurrency] = None


class ObjktEnglishAuction(UpstreamModel):
    reserve: Optional[int] = None
    reserve_xtz: Optional[int] = None
    highest_bid: Optional[int] = None
    highest_bid_xtz: Optional[int] = None
    end_time: Optional[str] = None
    currency: Optional[ObjktCurrency] = None


class ObjktOffer(UpstreamModel):
    price: Optional[int] = None
    price_xtz: Optional[int] = None


class ObjktOpenEdition(UpstreamModel):
    price: Optional[int] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    max_per_wallet: Optional[int] = None


class ObjktFa(UpstreamModel):
    """A collection (FA2 contract) record"""
    contract: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    logo: Optional[str] = None
    collection_type: Optional[str] = None
    collection_id: Optional[str] = None
    path: Optional[str] = None
    floor_price: Optional[float] = None
    items: Optional[int] = None
    editions: Optional[int] = None
    owners: Optional[int] = None
    twitter: Optional[str] = None
    website: Optional[str] = None
    verified_creators: Optional[List[str]] = None
    volume_24h: Optional[float] = None
    volume_total: Optional[float] = None


class ObjktToken(UpstreamModel):
    """A token with its active sales and parent collection"""
    token_id: Optional[str] = None
    fa_contract: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    artifact_uri: Optional[str] = None
    display_uri: Optional[str] = None
    thumbnail_uri: Optional[str] = None
    mime: Optional[str] = None
    supply: Optional[int] = None
    lowest_ask: Optional[int] = None
    creators: List[ObjktCreator] = []
    listings_active: List[ObjktListing] = []
    dutch_auctions_active: List[ObjktDutchAuction] = []
    english_auctions_active: List[ObjktEnglishAuction] = []
    offers_active: List[ObjktOffer] = []
    open_edition_active: Optional[ObjktOpenEdition] = None
    fa: Optional[ObjktFa] = None

    @field_validator(
        "creators",
        "listings_active",
        "dutch_auctions_active",
        "english_auctions_active",
        "offers_active",
        mode="before",
    )
    @classmethod
    def null_to_empty(cls, value):
        return value or []


class ObjktGalleryTokenDetail(UpstreamModel):
    token_id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    artifact_uri: Optional[str] = None
    display_uri: Optional[str] = None
    thumbnail_uri: Optional[str] = None
    fa_contract: Optional[str] = None
    fa: Optional[ObjktFa] = None


class ObjktGalleryToken(UpstreamModel):
    token: ObjktGalleryTokenDetail


class ObjktGallery(UpstreamModel):
    """A generative project with aggregate stats and a token sample"""
    gallery_id: Optional[str] = None
    slug: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    editions: Optional[int] = None
    items: Optional[int] = None
    owners: Optional[int] = None
    logo: Optional[str] = None
    volume_24h: Optional[float] = None
    floor_price: Optional[float] = None
    published_at: Optional[str] = None
    tokens: List[ObjktGalleryToken] = []

    @field_validator("tokens", mode="before")
    @classmethod
    def null_to_empty(cls, value):
        return value or []

    @property
    def sample_tokens(self) -> List[ObjktGalleryTokenDetail]:
        return [entry.token for entry in self.tokens]
