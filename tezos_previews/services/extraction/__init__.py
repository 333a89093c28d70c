"""Marketplace link extraction"""

from tezos_previews.services.extraction.patterns import (
    Marketplace,
    NFTLinkMatch,
    CollectionMatch,
    detect_nft_links,
    detect_collection_links,
    has_nft_links,
    extract_urls,
)
from tezos_previews.services.extraction.contract_resolver import ContractResolver

__all__ = [
    "Marketplace",
    "NFTLinkMatch",
    "CollectionMatch",
    "detect_nft_links",
    "detect_collection_links",
    "has_nft_links",
    "extract_urls",
    "ContractResolver",
]
