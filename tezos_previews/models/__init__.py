"""Canonical preview records"""

from tezos_previews.models.nft import (
    Attribute,
    CollectionSummary,
    Creator,
    Edition,
    MarketplaceRef,
    MediaMetadata,
    OpenEditionInfo,
    Price,
    SaleType,
    TezosNFT,
)
from tezos_previews.models.collection import TezosCollection

__all__ = [
    "Attribute",
    "CollectionSummary",
    "Creator",
    "Edition",
    "MarketplaceRef",
    "MediaMetadata",
    "OpenEditionInfo",
    "Price",
    "SaleType",
    "TezosNFT",
    "TezosCollection",
]
