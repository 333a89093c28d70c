"""Canonical collection preview record"""

from typing import List, Optional
from dataclasses import dataclass

from tezos_previews.models.nft import MarketplaceRef


@dataclass
class TezosCollection:
    """A collection or generative project, normalized from OBJKT"""
    contract: str
    name: str
    marketplace: MarketplaceRef
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
    project_id: Optional[str] = None
    published_at: Optional[str] = None
