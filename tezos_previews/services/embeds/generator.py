"""Preview cards for NFTs and collections, rendered as Telegram HTML"""

import html
import re
from typing import Callable, List, Optional
from dataclasses import dataclass, field
from datetime import datetime
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import structlog

from tezos_previews.core.config import Settings, settings as default_settings
from tezos_previews.models import Creator, SaleType, TezosCollection, TezosNFT
from tezos_previews.services.nft.normalizer import format_image_url, parse_timestamp, utcnow

logger = structlog.get_logger()


COLORS = {
    "primary": 0x2B2D31,
    "success": 0x5CB85C,
    "warning": 0xF0AD4E,
    "error": 0xD9534F,
    "info": 0x5BC0DE,
    "tezos": 0x0066FF,
}

MARKETPLACE_ICONS = {
    "OBJKT": "https://objkt.com/favicon.ico",
    "fxhash": "https://www.fxhash.xyz/favicon.ico",
    "Teia": "https://teia.art/favicon.ico",
    "Versum": "https://versum.xyz/favicon.ico",
    "EditArt": "https://www.editart.xyz/favicon.ico",
    "Bootloader": "https://bootloader.art/favicon.ico",
}

PRICE_LABELS = {
    SaleType.OPEN_EDITION: "🎆 Open Edition Price",
    SaleType.LISTING: "💰 Lowest Ask",
    SaleType.DUTCH_AUCTION: "🔽 Dutch Auction",
    SaleType.ENGLISH_AUCTION: "🔼 English Auction",
}

MAX_TITLE_LENGTH = 256
MAX_DESCRIPTION_LENGTH = 4096
MAX_FIELDS = 25
MAX_MESSAGE_LENGTH = 4096
NFT_DESCRIPTION_PREVIEW = 300
MAX_ATTRIBUTES_SHOWN = 3

TWITTER_URL_RE = re.compile(r'(?:twitter\.com/|x\.com/)([^/?]+)')


def _h(text) -> str:
    return html.escape(str(text) if text is not None else "")


def _link(url: str, label: str) -> str:
    return f'<a href="{_h(url)}">{_h(label)}</a>'


def format_tez(amount: float) -> str:
    """Tez amount with thousands separators and no trailing zeros"""
    text = f"{amount:,.6f}".rstrip("0").rstrip(".")
    return text or "0"


def format_address(address: str) -> str:
    """Shorten a Tezos address for display"""
    if len(address) <= 10:
        return address
    return f"{address[:6]}...{address[-4:]}"


def format_time_left(end: datetime, now: datetime) -> Optional[str]:
    """'2d 3h 15m' until end, or None once it has passed"""
    remaining = int((end - now).total_seconds())
    if remaining <= 0:
        return None

    days, rest = divmod(remaining, 86400)
    hours, rest = divmod(rest, 3600)
    minutes = rest // 60

    parts = []
    if days:
        parts.append(f"{days}d")
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    return " ".join(parts) or "under 1m"


def default_mention(handle: str) -> str:
    return f"@{handle}"


@dataclass
class CardField:
    name: str
    value: str  # already-rendered HTML
    inline: bool = False


@dataclass
class Card:
    """A platform-neutral rich card; plain-text title and description"""
    title: str
    color: int = COLORS["tezos"]
    description: Optional[str] = None
    url: Optional[str] = None
    image: Optional[str] = None
    thumbnail: Optional[str] = None
    fields: List[CardField] = field(default_factory=list)
    footer: Optional[str] = None
    footer_icon: Optional[str] = None

    def add_field(self, name: str, value: str, inline: bool = False):
        self.fields.append(CardField(name=name, value=value, inline=inline))

    def to_html(self) -> str:
        """Render for Telegram's HTML parse mode"""
        lines = []

        # Zero-width link so Telegram unfurls the artwork as the preview
        preview = self.image or self.thumbnail
        head = f'<a href="{_h(preview)}">&#8203;</a>' if preview else ""

        title = f"<b>{_h(self.title)}</b>"
        if self.url:
            title = f'<a href="{_h(self.url)}"><b>{_h(self.title)}</b></a>'
        lines.append(head + title)

        if self.description:
            lines.append(_h(self.description))

        for card_field in self.fields:
            if card_field.name.strip("\u200b "):
                lines.append(f"\n<b>{_h(card_field.name)}</b>\n{card_field.value}")
            else:
                lines.append(card_field.value)

        if self.footer:
            lines.append(f"\n<i>{_h(self.footer)}</i>")

        return "\n".join(lines)


class CardGenerator:
    """Builds preview cards from canonical records"""

    def __init__(
        self,
        config: Optional[Settings] = None,
        resolve_mention: Callable[[str], str] = default_mention,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.config = config or default_settings
        self.resolve_mention = resolve_mention
        self._clock = clock

    def create_nft_card(self, nft: TezosNFT) -> Card:
        """Rich card for a single token"""
        title = nft.name or "Unknown NFT"
        if nft.collection and nft.collection.name:
            title = f"{nft.collection.name} - {title}"

        card = Card(title=title, color=COLORS["tezos"])

        if nft.description:
            description = nft.description
            if len(description) > NFT_DESCRIPTION_PREVIEW:
                description = f"{description[:NFT_DESCRIPTION_PREVIEW]}..."
            card.description = description

        if nft.image_url:
            card.image = nft.image_url
        elif nft.metadata and nft.metadata.display_uri:
            card.image = format_image_url(nft.metadata.display_uri)
        elif nft.metadata and nft.metadata.thumbnail_uri:
            card.thumbnail = format_image_url(nft.metadata.thumbnail_uri)

        self._add_nft_fields(card, nft)

        card.footer = f"{nft.marketplace.name} • Tezos NFT Preview • a TTC tool"
        card.footer_icon = MARKETPLACE_ICONS.get(nft.marketplace.name)
        if nft.marketplace.url:
            card.url = self.process_marketplace_url(nft.marketplace.url)

        self._add_community_link(card)
        return card

    def _add_nft_fields(self, card: Card, nft: TezosNFT):
        if nft.creator.alias or nft.creator.address:
            card.add_field("👤 Creator", self.format_creator(nft.creator), inline=True)

        if nft.price:
            label = PRICE_LABELS.get(nft.sale_type, "💰 Price")
            card.add_field(label, _h(f"{format_tez(nft.price.amount)} {nft.price.symbol or nft.price.currency}"), inline=True)

        if nft.sale_type == SaleType.OPEN_EDITION and nft.open_edition_info:
            info = nft.open_edition_info
            details = []
            if info.minted_count is not None:
                details.append(f"<b>Minted:</b> {info.minted_count:,}")
            if info.max_per_wallet:
                details.append(f"<b>Max per wallet:</b> {info.max_per_wallet}")

            end_time = parse_timestamp(info.end_time)
            if end_time:
                left = format_time_left(end_time, self._clock())
                details.append(f"<b>Time left:</b> {left}" if left else "<b>Status:</b> Ended")

            if details:
                card.add_field("🎆 Open Edition Details", "\n".join(details), inline=True)

        if nft.edition and nft.sale_type != SaleType.OPEN_EDITION:
            label = "🔢 Available" if nft.sale_type == SaleType.LISTING else "🔢 Edition"
            card.add_field(label, f"{nft.edition.current}/{nft.edition.total}", inline=True)

        card.add_field("🆔 Token ID", _h(nft.id), inline=True)

        if nft.attributes:
            shown = nft.attributes[:MAX_ATTRIBUTES_SHOWN]
            card.add_field(
                "✨ Attributes",
                "\n".join(f"<b>{_h(attr.trait_type)}:</b> {_h(attr.value)}" for attr in shown),
            )
            hidden = len(nft.attributes) - len(shown)
            if hidden > 0:
                card.add_field("\u200b", f"<i>+{hidden} more attributes</i>")

        collection = nft.collection
        if collection and collection.name:
            details = []
            if collection.collection_type:
                details.append(f"<b>Type:</b> {_h(self.format_collection_type(collection.collection_type))}")
            if collection.floor_price is not None:
                details.append(f"<b>Floor:</b> {format_tez(collection.floor_price)} ꜩ")
            if collection.items is not None:
                details.append(f"<b>Items:</b> {collection.items:,}")
            if collection.owners is not None:
                details.append(f"<b>Owners:</b> {collection.owners:,}")

            card.add_field(f"🎨 {collection.name}", " • ".join(details) if details else "Collection info")

            links = self.social_links(collection.website, collection.twitter)
            if links:
                card.add_field("\u200b", " • ".join(links))

    def create_collection_card(self, collection: TezosCollection) -> Card:
        """Rich card for a collection or generative project"""
        card = Card(title=f"🎨 {collection.name}", color=COLORS["tezos"])
        card.description = collection.description

        if collection.logo:
            card.thumbnail = format_image_url(collection.logo)

        stats = []
        if collection.items is not None:
            stats.append(f"<b>Items:</b> {collection.items:,}")
        if collection.owners is not None:
            stats.append(f"<b>Owners:</b> {collection.owners:,}")
        if collection.editions is not None:
            stats.append(f"<b>Editions:</b> {collection.editions:,}")
        if stats:
            card.add_field("📊 Collection Stats", " • ".join(stats))

        market = []
        if collection.floor_price is not None:
            market.append(f"<b>Floor:</b> {format_tez(collection.floor_price)} ꜩ")
        if collection.volume_24h is not None:
            market.append(f"<b>24h Volume:</b> {format_tez(collection.volume_24h)} ꜩ")
        if collection.volume_total is not None:
            market.append(f"<b>Total Volume:</b> {format_tez(collection.volume_total)} ꜩ")
        if market:
            card.add_field("💰 Market Data", " • ".join(market))

        if collection.collection_type:
            card.add_field("🏷️ Collection Type", _h(self.format_collection_type(collection.collection_type)), inline=True)

        card.add_field("📜 Contract", f"<code>{_h(collection.contract)}</code>", inline=True)

        links = self.social_links(collection.website, collection.twitter)
        if links:
            card.add_field("🔗 Links", " • ".join(links))

        card.footer = f"{collection.marketplace.name} • Tezos Collection Preview • a TTC tool"
        card.footer_icon = MARKETPLACE_ICONS.get(collection.marketplace.name)
        if collection.marketplace.url:
            card.url = self.process_marketplace_url(collection.marketplace.url)

        self._add_community_link(card)
        return card

    def create_error_card(self, message: str, details: Optional[str] = None) -> Card:
        card = Card(title="❌ Error", color=COLORS["error"], description=message)
        if details:
            card.add_field("Details", _h(details))
        return card

    def create_loading_card(self) -> Card:
        return Card(
            title="🔍 Loading NFT Preview...",
            color=COLORS["info"],
            description="Fetching data from Tezos APIs...",
        )

    def validate_card(self, card: Card) -> bool:
        """Check platform limits; cards that fail are not sent"""
        if card.title and len(card.title) > MAX_TITLE_LENGTH:
            logger.warning("card_title_too_long", length=len(card.title))
            return False

        if card.description and len(card.description) > MAX_DESCRIPTION_LENGTH:
            logger.warning("card_description_too_long", length=len(card.description))
            return False

        if len(card.fields) > MAX_FIELDS:
            logger.warning("card_too_many_fields", count=len(card.fields))
            return False

        rendered = len(card.to_html())
        if rendered > MAX_MESSAGE_LENGTH:
            logger.warning("card_message_too_long", length=rendered)
            return False

        return True

    def format_creator(self, creator: Creator) -> str:
        """Creator name plus Discord, Twitter and website links"""
        name = _h(creator.alias or format_address(creator.address))
        links = []

        if creator.discord:
            links.append(f"💬 {_h(self.resolve_mention(creator.discord))}")

        if creator.twitter:
            links.append(f"🐦 {self.twitter_link(creator.twitter)}")

        if creator.website:
            links.append(f"🌐 {_link(self.website_url(creator.website), 'Website')}")

        if links:
            return f"<b>{name}</b>\n" + " • ".join(links)
        return name

    def social_links(self, website: Optional[str], twitter: Optional[str]) -> List[str]:
        links = []
        if website:
            links.append(_link(self.website_url(website), "🌐 Website"))
        if twitter:
            handle = self.twitter_handle(twitter)
            links.append(_link(f"https://twitter.com/{handle}", f"🐦 @{handle}"))
        return links

    def twitter_link(self, twitter: str) -> str:
        handle = self.twitter_handle(twitter)
        return _link(f"https://twitter.com/{handle}", f"@{handle}")

    @staticmethod
    def twitter_handle(twitter: str) -> str:
        """Username from a handle or a twitter.com / x.com profile URL"""
        match = TWITTER_URL_RE.search(twitter)
        if match:
            return match.group(1)
        return twitter.lstrip("@")

    @staticmethod
    def website_url(website: str) -> str:
        return website if website.startswith("http") else f"https://{website}"

    @staticmethod
    def format_collection_type(collection_type: str) -> str:
        return collection_type.replace("_", " ", 1).upper()

    def process_marketplace_url(self, url: str) -> str:
        """Replace any ref query parameter with the configured referral address"""
        if not self.config.referral_address:
            return url

        try:
            parts = urlsplit(url if "://" in url else f"https://{url}")
        except ValueError as e:
            logger.warning("marketplace_url_invalid", url=url, error=str(e))
            return url

        query = [(key, value) for key, value in parse_qsl(parts.query, keep_blank_values=True) if key != "ref"]
        query.append(("ref", self.config.referral_address))
        return urlunsplit(parts._replace(query=urlencode(query)))

    def _add_community_link(self, card: Card):
        if self.config.community_link:
            card.add_field("\u200b", _link(self.config.community_link, "Join TTC Discord"))
