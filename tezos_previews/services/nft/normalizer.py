"""
Record Normalizer - Reconciles indexer payloads into preview records.

Three upstream shapes end up as two canonical records:

- OBJKT token (sales, creators, parent fa) -> TezosNFT
- TzKT token balance row -> TezosNFT
- OBJKT fa record, or OBJKT gallery with sampled tokens -> TezosCollection

Every amount arriving from either indexer is in mutez and is divided by
1,000,000 here; canonical records only ever carry tez.
"""

from typing import Callable, Optional, Union
from dataclasses import dataclass
from datetime import datetime, timezone

import structlog

from tezos_previews.models import (
    Attribute,
    CollectionSummary,
    Creator,
    Edition,
    MarketplaceRef,
    MediaMetadata,
    OpenEditionInfo,
    Price,
    SaleType,
    TezosCollection,
    TezosNFT,
)
from tezos_previews.services.extraction.patterns import CollectionMatch, NFTLinkMatch
from tezos_previews.services.external_apis.schemas import (
    ObjktDutchAuction,
    ObjktFa,
    ObjktGallery,
    ObjktToken,
    TzktToken,
)

logger = structlog.get_logger()


MUTEZ_PER_TEZ = 1_000_000
IPFS_PREFIX = "ipfs://"
IPFS_GATEWAY = "https://ipfs.io/ipfs/"

FXHASH_DEFAULT_LOGO = "https://assets.objkt.media/file/assets-002/collection-logos/fxhash.jpg"

# Defaults for synthesized project collections, keyed by project platform
PROJECT_DEFAULTS = {
    "fxhash": {
        "logo": FXHASH_DEFAULT_LOGO,
        "twitter": "fx_hash_",
        "website": "https://www.fxhash.xyz/generative/{project_id}",
    },
    "bootloader": {
        "logo": None,
        "twitter": None,
        "website": "https://bootloader.art/generator/{project_id}",
    },
}


def utcnow() -> datetime:
    """Get current UTC time as timezone-aware datetime"""
    return datetime.now(timezone.utc)


def parse_timestamp(ts_str: Optional[str]) -> Optional[datetime]:
    """Parse an ISO timestamp into a timezone-aware datetime"""
    if not ts_str:
        return None
    try:
        dt = datetime.fromisoformat(ts_str.replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def mutez_to_tez(value: Optional[Union[int, float, str]]) -> Optional[float]:
    """Convert a mutez amount to tez"""
    if value is None or value == "":
        return None
    return float(value) / MUTEZ_PER_TEZ


def format_image_url(url: Optional[str]) -> Optional[str]:
    """Rewrite ipfs:// URIs onto the public HTTP gateway"""
    if not url:
        return None
    if url.startswith(IPFS_PREFIX):
        return IPFS_GATEWAY + url[len(IPFS_PREFIX):]
    return url


def select_image_uri(
    display_uri: Optional[str],
    thumbnail_uri: Optional[str],
    artifact_uri: Optional[str],
) -> Optional[str]:
    """Display, then thumbnail, then artifact unless it is an inline data: URI"""
    if display_uri:
        return display_uri
    if thumbnail_uri:
        return thumbnail_uri
    if artifact_uri and not artifact_uri.startswith("data:"):
        return artifact_uri
    return None


def _stat(value: Optional[int]) -> Optional[int]:
    # OBJKT reports unknown aggregates as 0
    return value or None


def _text(value: Optional[str]) -> Optional[str]:
    return value or None


@dataclass
class SaleInfo:
    """Sale-dependent fields of a TezosNFT"""
    sale_type: SaleType
    price: Optional[Price] = None
    edition: Optional[Edition] = None
    open_edition_info: Optional[OpenEditionInfo] = None


def current_dutch_price(auction: ObjktDutchAuction, now: datetime) -> Optional[int]:
    """
    Current price of a descending auction, in mutez.

    OBJKT dutch auctions fall linearly from start_price at start_time to
    end_price at end_time.
    """
    start_price = auction.start_price if auction.start_price is not None else auction.start_price_xtz
    end_price = auction.end_price if auction.end_price is not None else auction.end_price_xtz

    if start_price is None:
        return end_price
    if end_price is None:
        return start_price

    start_time = parse_timestamp(auction.start_time)
    end_time = parse_timestamp(auction.end_time)
    if not start_time or not end_time or end_time <= start_time or now <= start_time:
        return start_price
    if now >= end_time:
        return end_price

    elapsed = (now - start_time) / (end_time - start_time)
    return round(start_price - (start_price - end_price) * elapsed)


def determine_sale_type(token: ObjktToken, now: Optional[datetime] = None) -> SaleInfo:
    """
    Pick the single sale mechanism to show.

    Priority: open edition > listing > english auction > dutch auction.
    Lower-priority sales are ignored even when present.
    """
    supply = token.supply

    open_edition = token.open_edition_active
    if open_edition is not None:
        return SaleInfo(
            sale_type=SaleType.OPEN_EDITION,
            price=Price(amount=mutez_to_tez(open_edition.price or 0)),
            open_edition_info=OpenEditionInfo(
                max_per_wallet=open_edition.max_per_wallet,
                start_time=open_edition.start_time,
                end_time=open_edition.end_time,
                minted_count=supply,
            ),
        )

    if token.listings_active:
        listing = token.listings_active[0]
        amount = listing.price if listing.price is not None else listing.price_xtz
        return SaleInfo(
            sale_type=SaleType.LISTING,
            price=Price(amount=mutez_to_tez(amount)) if amount is not None else None,
            edition=Edition(current=listing.amount_left or 0, total=supply or 0),
        )

    if token.english_auctions_active:
        auction = token.english_auctions_active[0]
        amount = auction.highest_bid or auction.reserve
        return SaleInfo(
            sale_type=SaleType.ENGLISH_AUCTION,
            price=Price(amount=mutez_to_tez(amount)) if amount is not None else None,
            edition=Edition(current=1, total=supply or 1),
        )

    if token.dutch_auctions_active:
        auction = token.dutch_auctions_active[0]
        amount = current_dutch_price(auction, now or utcnow())
        return SaleInfo(
            sale_type=SaleType.DUTCH_AUCTION,
            price=Price(amount=mutez_to_tez(amount)) if amount is not None else None,
            edition=Edition(current=1, total=supply or 1),
        )

    return SaleInfo(
        sale_type=SaleType.NONE,
        edition=Edition(current=1, total=supply) if supply else None,
    )


class RecordNormalizer:
    """Builds TezosNFT and TezosCollection records from typed payloads"""

    def __init__(self, clock: Callable[[], datetime] = utcnow):
        self._clock = clock

    def to_nft(self, token: ObjktToken, match: NFTLinkMatch) -> TezosNFT:
        """Normalize an OBJKT token"""
        sale = determine_sale_type(token, self._clock())
        logger.debug(
            "sale_type_selected",
            marketplace=match.marketplace.value,
            token_id=match.token_id,
            sale_type=sale.sale_type.value,
        )

        return TezosNFT(
            id=match.token_id,
            name=token.name or "Unknown NFT",
            description=_text(token.description),
            image_url=format_image_url(
                select_image_uri(token.display_uri, token.thumbnail_uri, token.artifact_uri)
            ),
            creator=self._objkt_creator(token),
            collection=self._collection_summary(token.fa),
            price=sale.price,
            sale_type=sale.sale_type,
            open_edition_info=sale.open_edition_info,
            edition=sale.edition,
            marketplace=MarketplaceRef(name=match.marketplace.value, url=match.url),
            metadata=MediaMetadata(
                mime_type=token.mime,
                artifact_uri=token.artifact_uri,
                display_uri=token.display_uri,
                thumbnail_uri=token.thumbnail_uri,
            ),
        )

    def to_nft_from_tzkt(self, token: TzktToken, match: NFTLinkMatch) -> TezosNFT:
        """Normalize a TzKT token balance row (no sale data available)"""
        metadata = token.token.metadata
        supply = None
        if token.token.totalSupply and token.token.totalSupply.isdigit():
            supply = int(token.token.totalSupply)

        attributes = None
        if metadata and metadata.attributes:
            attributes = [
                Attribute(trait_type=attr.label, value=attr.value)
                for attr in metadata.attributes
            ]

        return TezosNFT(
            id=match.token_id,
            name=(metadata.name if metadata else None) or "Unknown NFT",
            description=_text(metadata.description) if metadata else None,
            image_url=format_image_url(
                (metadata.displayUri or metadata.image) if metadata else None
            ),
            creator=Creator(address=token.account.address, alias=token.account.alias),
            sale_type=SaleType.NONE,
            edition=Edition(current=1, total=supply) if supply else None,
            marketplace=MarketplaceRef(name=match.marketplace.value, url=match.url),
            metadata=MediaMetadata(
                artifact_uri=metadata.artifactUri if metadata else None,
                display_uri=metadata.displayUri if metadata else None,
                thumbnail_uri=metadata.thumbnailUri if metadata else None,
            ),
            attributes=attributes,
        )

    def to_collection(
        self,
        source: Union[ObjktFa, ObjktGallery],
        match: CollectionMatch,
    ) -> TezosCollection:
        """Normalize a direct fa record or a gallery project into one shape"""
        if isinstance(source, ObjktGallery):
            return self._collection_from_gallery(source, match)
        return self._collection_from_fa(source, match)

    def _collection_from_fa(self, fa: ObjktFa, match: CollectionMatch) -> TezosCollection:
        return TezosCollection(
            contract=fa.contract or match.contract_address or "Unknown",
            name=fa.name or "Unknown Collection",
            description=_text(fa.description),
            logo=_text(fa.logo),
            collection_type=_text(fa.collection_type),
            floor_price=mutez_to_tez(fa.floor_price or None),
            items=_stat(fa.items),
            editions=_stat(fa.editions),
            owners=_stat(fa.owners),
            twitter=_text(fa.twitter),
            website=_text(fa.website),
            volume_24h=mutez_to_tez(fa.volume_24h or None),
            volume_total=mutez_to_tez(fa.volume_total or None),
            verified_creators=fa.verified_creators or None,
            project_id=match.project_id,
            marketplace=MarketplaceRef(name=match.marketplace.value, url=match.url),
        )

    def _collection_from_gallery(self, gallery: ObjktGallery, match: CollectionMatch) -> TezosCollection:
        """
        Synthesize a collection from a generative project.

        The contract comes from the first sampled token; stats come from
        the gallery aggregate, never from the individual tokens.
        """
        samples = gallery.sample_tokens
        first = samples[0] if samples else None
        first_fa = first.fa if first else None

        contract = None
        if first:
            contract = first.fa_contract or (first_fa.contract if first_fa else None)

        project_id = match.project_id or gallery.gallery_id or gallery.slug or ""
        defaults = PROJECT_DEFAULTS.get(match.platform.lower(), {})
        website = defaults.get("website")

        return TezosCollection(
            contract=contract or match.contract_address or "Unknown",
            name=gallery.name or "Unknown Collection",
            description=_text(gallery.description),
            logo=gallery.logo or (first_fa.logo if first_fa else None) or defaults.get("logo"),
            collection_type="generative",
            floor_price=mutez_to_tez(gallery.floor_price or None),
            items=_stat(gallery.items),
            editions=_stat(gallery.editions),
            owners=_stat(gallery.owners),
            twitter=defaults.get("twitter"),
            website=website.format(project_id=project_id) if website else None,
            volume_24h=mutez_to_tez(gallery.volume_24h or None),
            project_id=project_id or None,
            published_at=gallery.published_at,
            marketplace=MarketplaceRef(name=match.marketplace.value, url=match.url),
        )

    @staticmethod
    def _objkt_creator(token: ObjktToken) -> Creator:
        if not token.creators:
            return Creator(address="Unknown")

        first = token.creators[0]
        holder = first.holder
        return Creator(
            address=first.creator_address or "Unknown",
            alias=(holder.alias if holder else None) or first.creator_name,
            discord=_text(holder.discord) if holder else None,
            twitter=_text(holder.twitter) if holder else None,
            website=_text(holder.website) if holder else None,
            description=_text(holder.description) if holder else None,
        )

    @staticmethod
    def _collection_summary(fa: Optional[ObjktFa]) -> Optional[CollectionSummary]:
        if fa is None:
            return None

        return CollectionSummary(
            name=fa.name or "Unknown Collection",
            description=_text(fa.description),
            logo=_text(fa.logo),
            collection_type=_text(fa.collection_type),
            floor_price=mutez_to_tez(fa.floor_price or None),
            items=fa.items,
            editions=fa.editions,
            owners=fa.owners,
            twitter=_text(fa.twitter),
            website=_text(fa.website),
            volume_24h=mutez_to_tez(fa.volume_24h or None),
            volume_total=mutez_to_tez(fa.volume_total or None),
            verified_creators=fa.verified_creators or None,
        )

