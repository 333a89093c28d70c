"""Pattern matching for Tezos marketplace links"""

import re
from enum import Enum
from typing import Dict, List, Optional, Pattern, Tuple
from dataclasses import dataclass


class Marketplace(str, Enum):
    """Supported marketplaces, valued by display name"""
    OBJKT = "OBJKT"
    FXHASH = "fxhash"
    TEIA = "Teia"
    VERSUM = "Versum"
    BOOTLOADER = "Bootloader"
    EDITART = "EditArt"


@dataclass(frozen=True)
class NFTLinkMatch:
    """A recognized link to a single token page"""
    marketplace: Marketplace
    token_id: str
    url: str  # exact substring matched in the message
    contract_address: Optional[str] = None


@dataclass(frozen=True)
class CollectionMatch:
    """A recognized link to a collection or project page"""
    marketplace: Marketplace
    url: str
    contract_address: Optional[str] = None
    project_id: Optional[str] = None

    @property
    def identifier(self) -> str:
        return self.contract_address or self.project_id or "unknown"

    @property
    def platform(self) -> str:
        """Namespace a project id lives in: the URL path segment, else the marketplace"""
        return self.contract_address or self.marketplace.value.lower()


CONTRACT_ADDRESS_RE = re.compile(r'KT1[1-9A-HJ-NP-Za-km-z]{33}')

# Case-sensitive even inside IGNORECASE patterns so l/I/O never slip through
_KT1 = r'(?-i:KT1[1-9A-HJ-NP-Za-km-z]{33})'
_PREFIX = r'(?:https?://)?(?:www\.)?'
_QUERY = r'(?:\?[^\s]*)?'
_SEGMENT = r'[^/?\s]+'


def _url(host_and_path: str) -> Pattern:
    return re.compile(_PREFIX + host_and_path, re.IGNORECASE)


# Token link patterns, most specific first within each marketplace.
# Named groups map straight onto NFTLinkMatch fields.
NFT_PATTERNS: Dict[Marketplace, Tuple[Pattern, ...]] = {
    Marketplace.OBJKT: (
        _url(rf'objkt\.com/asset/(?P<contract_address>{_SEGMENT})/(?P<token_id>\d+){_QUERY}'),
        _url(rf'objkt\.com/tokens/(?P<contract_address>{_SEGMENT})/(?P<token_id>\d+){_QUERY}'),
        _url(rf'objkt\.com/objkt/(?P<token_id>\d+){_QUERY}'),
    ),
    Marketplace.FXHASH: (
        _url(rf'fxhash\.xyz/gentk/(?P<token_id>\d+){_QUERY}'),
    ),
    Marketplace.TEIA: (
        _url(rf'teia\.art/objkt/(?P<token_id>\d+){_QUERY}'),
    ),
    Marketplace.VERSUM: (
        _url(rf'versum\.xyz/token/(?P<contract_address>{_SEGMENT})/(?P<token_id>\d+){_QUERY}'),
    ),
    Marketplace.BOOTLOADER: (
        _url(rf'bootloader\.art/token/(?P<token_id>\d+){_QUERY}'),
    ),
    Marketplace.EDITART: (
        _url(rf'editart\.xyz/token-detail/(?P<contract_address>{_KT1})/(?P<token_id>\d+){_QUERY}'),
    ),
}

COLLECTION_PATTERNS: Dict[Marketplace, Tuple[Pattern, ...]] = {
    Marketplace.OBJKT: (
        _url(rf'objkt\.com/collections/(?P<contract_address>{_SEGMENT})/projects/(?P<project_id>\d+){_QUERY}'),
        # path must be consumed whole and not be followed by /projects/
        _url(rf'objkt\.com/collections/(?P<contract_address>{_SEGMENT})(?![^/?\s]|/projects/){_QUERY}'),
    ),
    Marketplace.FXHASH: (
        _url(rf'fxhash\.xyz/generative/(?P<project_id>\d+){_QUERY}'),
        _url(rf'fxhash\.xyz/project/(?P<project_id>{_SEGMENT}){_QUERY}'),
    ),
    Marketplace.BOOTLOADER: (
        _url(rf'bootloader\.art/generator/(?P<project_id>\d+){_QUERY}'),
    ),
    Marketplace.EDITART: (
        _url(rf'editart\.xyz/series/(?P<contract_address>{_KT1})(?:/[^\s]*)?'),
    ),
}

URL_PATTERN = re.compile(r'https?://[^\s]+', re.IGNORECASE)


def is_contract_address(value: Optional[str]) -> bool:
    """Check if value is a canonical KT1 contract address"""
    return bool(value) and bool(CONTRACT_ADDRESS_RE.fullmatch(value))


def detect_nft_links(text: str) -> List[NFTLinkMatch]:
    """
    Scan text for marketplace token links.

    Every pattern of every marketplace is tried, and each pattern
    contributes at most its first occurrence in the text.
    """
    matches = []

    for marketplace, patterns in NFT_PATTERNS.items():
        for pattern in patterns:
            match = pattern.search(text)
            if not match:
                continue

            fields = match.groupdict()
            token_id = fields.get("token_id") or ""
            if not token_id:
                continue

            matches.append(NFTLinkMatch(
                marketplace=marketplace,
                token_id=token_id,
                contract_address=fields.get("contract_address") or None,
                url=match.group(0),
            ))

    return matches


def detect_collection_links(text: str) -> List[CollectionMatch]:
    """Scan text for collection and project links"""
    matches = []

    for marketplace, patterns in COLLECTION_PATTERNS.items():
        for pattern in patterns:
            match = pattern.search(text)
            if not match:
                continue

            fields = match.groupdict()
            contract_address = fields.get("contract_address") or None
            project_id = fields.get("project_id") or None
            if not contract_address and not project_id:
                continue

            matches.append(CollectionMatch(
                marketplace=marketplace,
                contract_address=contract_address,
                project_id=project_id,
                url=match.group(0),
            ))

    return matches


def has_nft_links(text: str) -> bool:
    """Check if text contains any marketplace token links"""
    return len(detect_nft_links(text)) > 0


def extract_urls(text: str) -> List[str]:
    """Extract every http(s) URL from text"""
    return URL_PATTERN.findall(text)
