"""NFT preview service - message in, canonical records out"""

import asyncio
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence
from dataclasses import dataclass, field

import structlog

from tezos_previews.core.config import Settings, settings as default_settings
from tezos_previews.core.results import ErrorKind, Result
from tezos_previews.models import TezosCollection, TezosNFT
from tezos_previews.services.extraction.contract_resolver import (
    FXHASH_GENTK_CONTRACT,
    ContractResolver,
)
from tezos_previews.services.extraction.patterns import (
    CollectionMatch,
    Marketplace,
    NFTLinkMatch,
    detect_collection_links,
    detect_nft_links,
)
from tezos_previews.services.external_apis.objkt import ObjktClient
from tezos_previews.services.external_apis.rate_limit import RateLimiter
from tezos_previews.services.external_apis.tzkt import TzktClient
from tezos_previews.services.nft.normalizer import RecordNormalizer

logger = structlog.get_logger()


class Indexer(str, Enum):
    OBJKT = "objkt"
    TZKT = "tzkt"


@dataclass(frozen=True)
class TokenSource:
    """Where a marketplace's tokens are read from"""
    indexer: Indexer
    # Contract or resolvable path used when the URL carries none
    default_path: Optional[str] = None


TOKEN_SOURCES: Dict[Marketplace, TokenSource] = {
    # objkt.com/objkt/{id} is the legacy hic et nunc token route
    Marketplace.OBJKT: TokenSource(Indexer.OBJKT, default_path="hicetnunc"),
    Marketplace.TEIA: TokenSource(Indexer.OBJKT, default_path="hicetnunc"),
    Marketplace.BOOTLOADER: TokenSource(Indexer.OBJKT, default_path="bootloader"),
    Marketplace.EDITART: TokenSource(Indexer.OBJKT),
    Marketplace.FXHASH: TokenSource(Indexer.TZKT, default_path=FXHASH_GENTK_CONTRACT),
    Marketplace.VERSUM: TokenSource(Indexer.TZKT),
}


@dataclass
class PreviewResult(Result):
    """Result of a whole message, with per-link failures kept for logging"""
    errors: List[str] = field(default_factory=list)


class NFTPreviewService:
    """Detects marketplace links in a message and builds preview records for them"""

    def __init__(
        self,
        tzkt_client: Optional[TzktClient] = None,
        objkt_client: Optional[ObjktClient] = None,
        rate_limiter: Optional[RateLimiter] = None,
        resolver: Optional[ContractResolver] = None,
        normalizer: Optional[RecordNormalizer] = None,
        config: Optional[Settings] = None,
    ):
        self.config = config or default_settings
        # One gate shared by both indexers
        self.rate_limiter = rate_limiter or RateLimiter(self.config.api_rate_limit)
        self.tzkt_client = tzkt_client or TzktClient(rate_limiter=self.rate_limiter, config=self.config)
        self.objkt_client = objkt_client or ObjktClient(rate_limiter=self.rate_limiter, config=self.config)
        self.resolver = resolver or ContractResolver(self.objkt_client)
        self.normalizer = normalizer or RecordNormalizer()

    async def process_message(self, text: str) -> PreviewResult:
        """Build a TezosNFT for every token link in the message"""
        try:
            matches = detect_nft_links(text)

            if not matches:
                return PreviewResult.failure(
                    ErrorKind.NO_LINKS_FOUND,
                    "No Tezos marketplace links found in message",
                )

            logger.info("nft_links_found", count=len(matches))

            return await self._run_all(
                matches,
                self.fetch_nft,
                describe=lambda m: f"Token {m.token_id}",
                what="NFT",
            )

        except Exception as e:
            logger.exception("process_message_error", error=str(e))
            return PreviewResult.failure(
                ErrorKind.UNEXPECTED,
                "An unexpected error occurred while processing the message",
            )

    async def process_collections(self, text: str) -> PreviewResult:
        """Build a TezosCollection for every collection link in the message"""
        try:
            matches = detect_collection_links(text)

            if not matches:
                return PreviewResult.failure(
                    ErrorKind.NO_LINKS_FOUND,
                    "No Tezos collection links found in message",
                )

            logger.info("collection_links_found", count=len(matches))

            return await self._run_all(
                matches,
                self.fetch_collection,
                describe=lambda m: f"Collection {m.identifier}",
                what="collection",
            )

        except Exception as e:
            logger.exception("process_collections_error", error=str(e))
            return PreviewResult.failure(
                ErrorKind.UNEXPECTED,
                "An unexpected error occurred while processing collections",
            )

    async def _run_all(
        self,
        matches: Sequence[Any],
        fetch: Callable[[Any], Awaitable[Result]],
        describe: Callable[[Any], str],
        what: str,
    ) -> PreviewResult:
        """
        Fetch every match concurrently and aggregate in match order.

        A failing or raising task only loses its own record. The call
        fails as a whole only when no task succeeded.
        """
        outcomes = await asyncio.gather(
            *(fetch(match) for match in matches),
            return_exceptions=True,
        )

        records = []
        errors = []
        kinds = []

        for match, outcome in zip(matches, outcomes):
            if isinstance(outcome, BaseException):
                logger.error("preview_task_error", url=match.url, error=str(outcome))
                outcome = Result.failure(ErrorKind.UNEXPECTED, f"Unexpected error: {outcome}")

            if outcome.ok and outcome.data is not None:
                records.append(outcome.data)
            else:
                errors.append(f"{describe(match)}: {outcome.error or 'Unknown error'}")
                kinds.append(outcome.error_kind or ErrorKind.UNEXPECTED)

        if errors:
            logger.warning("preview_partial_failures", what=what, failed=len(errors), errors=errors)

        if not records:
            return PreviewResult(
                ok=False,
                error=f"Failed to fetch {what} data: {', '.join(errors)}",
                error_kind=kinds[0],
                errors=errors,
            )

        logger.info("previews_built", what=what, count=len(records))
        return PreviewResult(ok=True, data=records, errors=errors)

    async def fetch_nft(self, match: NFTLinkMatch) -> Result[TezosNFT]:
        """Resolve the contract, fetch the token, normalize it"""
        source = TOKEN_SOURCES.get(match.marketplace)
        if source is None:
            return Result.failure(ErrorKind.UNSUPPORTED, f"Unsupported marketplace: {match.marketplace}")

        logger.info("nft_fetch", marketplace=match.marketplace.value, token_id=match.token_id)

        path = match.contract_address or source.default_path
        if not path:
            return Result.failure(
                ErrorKind.NOT_FOUND,
                f"Contract address is required for {match.marketplace.value} tokens",
            )

        resolved = await self.resolver.resolve(path)
        if not resolved.ok:
            return Result.from_failure(resolved)
        contract = resolved.data

        if source.indexer is Indexer.TZKT:
            token_result = await self.tzkt_client.get_token_info(contract, match.token_id)
            if not token_result.ok:
                return Result.from_failure(token_result)
            return Result.success(self.normalizer.to_nft_from_tzkt(token_result.data, match))

        token_result = await self.objkt_client.get_token_metadata(contract, match.token_id)
        if not token_result.ok:
            return Result.from_failure(token_result, "Failed to fetch token metadata")
        return Result.success(self.normalizer.to_nft(token_result.data, match))

    async def fetch_collection(self, match: CollectionMatch) -> Result[TezosCollection]:
        """
        Fetch a collection by project id or contract.

        Project links try the project lookup first and fall back to the
        contract lookup when the URL also carries a contract path.
        """
        logger.info("collection_fetch", marketplace=match.marketplace.value, identifier=match.identifier)

        project_failure = None
        if match.project_id:
            project = await self.objkt_client.get_collection_by_project(match.platform, match.project_id)
            if project.ok:
                return Result.success(self.normalizer.to_collection(project.data, match))

            project_failure = project
            logger.warning(
                "collection_project_fallback",
                platform=match.platform,
                project_id=match.project_id,
                error=project.error,
            )

        if not match.contract_address:
            if project_failure is not None:
                return Result.from_failure(project_failure)
            return Result.failure(ErrorKind.NOT_FOUND, "No contract address available for collection")

        resolved = await self.resolver.resolve(match.contract_address)
        if not resolved.ok:
            return Result.from_failure(resolved)

        collection = await self.objkt_client.get_collection_info(resolved.data)
        if not collection.ok:
            return Result.from_failure(collection)

        return Result.success(self.normalizer.to_collection(collection.data, match))

    async def close(self):
        """Close both API clients"""
        await self.tzkt_client.close()
        await self.objkt_client.close()
