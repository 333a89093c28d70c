"""Canonical NFT preview record"""

from enum import Enum
from typing import Any, List, Optional
from dataclasses import dataclass


class SaleType(str, Enum):
    """Active sale mechanism, in precedence order"""
    OPEN_EDITION = "open_edition"
    LISTING = "listing"
    ENGLISH_AUCTION = "english_auction"
    DUTCH_AUCTION = "dutch_auction"
    NONE = "none"


@dataclass
class Creator:
    address: str
    alias: Optional[str] = None
    discord: Optional[str] = None
    twitter: Optional[str] = None
    website: Optional[str] = None
    description: Optional[str] = None


@dataclass
class CollectionSummary:
    """Parent collection as shown on a token card"""
    name: str
    description: Optional[str] = None
    logo: Optional[str] = None
    collection_type: Optional[str] = None
    floor_price: Optional[float] = None
    items: Optional[int] = None
    editions: Optional[int] = None
    owners: Optional[int] = None
    twitter: Optional[str] = None
    website: Optional[str] = None
    volume_24h: Optional[float] = None
    volume_total: Optional[float] = None
    verified_creators: Optional[List[str]] = None


@dataclass
class Price:
    amount: float  # major units (tez)
    currency: str = "XTZ"
    symbol: str = "ꜩ"


@dataclass
class OpenEditionInfo:
    max_per_wallet: Optional[int] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    minted_count: Optional[int] = None


@dataclass
class Edition:
    current: int
    total: int


@dataclass
class MarketplaceRef:
    name: str
    url: str


@dataclass
class Attribute:
    trait_type: str
    value: Any


@dataclass
class MediaMetadata:
    mime_type: Optional[str] = None
    artifact_uri: Optional[str] = None
    display_uri: Optional[str] = None
    thumbnail_uri: Optional[str] = None


@dataclass
class TezosNFT:
    """A single token, normalized from either indexer"""
    id: str
    name: str
    creator: Creator
    marketplace: MarketplaceRef
    sale_type: SaleType = SaleType.NONE
    description: Optional[str] = None
    image_url: Optional[str] = None
    collection: Optional[CollectionSummary] = None
    price: Optional[Price] = None
    open_edition_info: Optional[OpenEditionInfo] = None
    edition: Optional[Edition] = None
    attributes: Optional[List[Attribute]] = None
    metadata: Optional[MediaMetadata] = None
