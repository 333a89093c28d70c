"""OBJKT API client - Tezos marketplace indexer (GraphQL)"""

from typing import Any, Dict, List, Union

import structlog
from pydantic import ValidationError

from tezos_previews.core.results import ErrorKind, Result
from tezos_previews.services.external_apis.base import IndexerClient, UpstreamError
from tezos_previews.services.external_apis.schemas import ObjktFa, ObjktGallery, ObjktToken

logger = structlog.get_logger()


TOKEN_QUERY = """
query GetToken($fa_contract: String!, $token_id: String!) {
    token(where: {token_id: {_eq: $token_id}, fa_contract: {_eq: $fa_contract}}) {
        artifact_uri
        description
        display_uri
        lowest_ask
        mime
        name
        supply
        thumbnail_uri
        fa_contract
        token_id
        creators {
            creator_address
            holder {
                address
                alias
                logo
                website
                description
                discord
                twitter
                instagram
                tzdomain
            }
        }
        listings_active {
            price
            price_xtz
            amount_left
            currency { symbol decimals }
        }
        dutch_auctions_active {
            start_price
            start_price_xtz
            end_price
            end_price_xtz
            start_time
            end_time
            amount_left
            currency { symbol decimals }
        }
        english_auctions_active {
            reserve
            reserve_xtz
            highest_bid
            highest_bid_xtz
            end_time
            currency { symbol decimals }
        }
        offers_active {
            price
            price_xtz
        }
        open_edition_active {
            price
            start_time
            end_time
            max_per_wallet
        }
        fa {
            contract
            name
            description
            logo
            collection_type
            floor_price
            items
            editions
            owners
            twitter
            website
            verified_creators
            volume_24h
            volume_total
        }
    }
}
"""

CONTRACT_BY_PATH_QUERY = """
query GetContractByPath($path: String!) {
    fa(where: {path: {_eq: $path}}) {
        contract
        name
    }
}
"""

COLLECTION_FIELDS = """
        contract
        name
        description
        logo
        collection_type
        collection_id
        path
        floor_price
        items
        editions
        owners
        twitter
        website
        verified_creators
        volume_24h
        volume_total
"""

COLLECTION_QUERY = """
query GetCollection($contract: String!) {
    fa(where: {contract: {_eq: $contract}}) {%s    }
}
""" % COLLECTION_FIELDS

COLLECTION_BY_PROJECT_QUERY = """
query GetCollectionByProject($platform: String!, $projectId: String!) {
    fa(
        where: {
            _or: [
                {path: {_eq: $platform}, collection_id: {_eq: $projectId}}
                {path: {_eq: $platform}, name: {_ilike: $projectId}}
                {name: {_ilike: $projectId}, collection_type: {_eq: "generative"}}
            ]
        }
        limit: 5
    ) {%s    }
}
""" % COLLECTION_FIELDS

GALLERY_QUERY = """
query GetProjectByIdOrSlug($projectId: String!) {
    gallery(
        where: {
            _or: [
                {gallery_id: {_eq: $projectId}}
                {slug: {_eq: $projectId}}
                {name: {_ilike: $projectId}}
            ]
        }
        limit: 1
    ) {
        gallery_id
        slug
        name
        description
        editions
        items
        owners
        logo
        volume_24h
        floor_price
        published_at
        tokens(limit: 10) {
            token {
                token_id
                name
                description
                artifact_uri
                display_uri
                thumbnail_uri
                fa_contract
                fa {
                    contract
                    name
                    description
                    logo
                    collection_type
                    path
                }
            }
        }
    }
}
"""

# Platforms whose projects live in OBJKT's gallery table rather than as fa records
GALLERY_PLATFORMS = {"fxhash", "bootloader"}


class ObjktClient(IndexerClient):
    """Client for the OBJKT GraphQL API (free, no auth required)"""

    SERVICE = "OBJKT"
    GRAPHQL_PATH = "/v3/graphql"

    def _default_base_url(self) -> str:
        return self.config.objkt_base_url

    async def _graphql(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        """Run a query and return its data object"""
        logger.debug("objkt_graphql_request", query=" ".join(query.split()), variables=variables)

        body = await self._request_json(
            "POST",
            self.GRAPHQL_PATH,
            json={"query": query, "variables": variables},
        )

        if not isinstance(body, dict):
            raise UpstreamError(ErrorKind.TRANSPORT_ERROR, "OBJKT API error: unexpected response body")

        if body.get("errors"):
            messages = "; ".join(str(err.get("message", err)) for err in body["errors"] if isinstance(err, dict))
            raise UpstreamError(ErrorKind.TRANSPORT_ERROR, f"OBJKT API error: {messages or 'query failed'}")

        return body.get("data") or {}

    @staticmethod
    def _rows(data: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
        rows = data.get(key)
        return rows if isinstance(rows, list) else []

    async def get_token_metadata(self, contract_address: str, token_id: str) -> Result[ObjktToken]:
        """Get a token with its listings, auctions, open edition, creators and collection"""
        limited = self._rate_limited(f"token/{contract_address}_{token_id}")
        if limited:
            return limited

        logger.info("objkt_token_fetch", contract=contract_address, token_id=token_id)

        try:
            data = await self._graphql(
                TOKEN_QUERY,
                {"fa_contract": contract_address, "token_id": token_id},
            )
            rows = self._rows(data, "token")
            if not rows:
                logger.warning("objkt_token_not_found", contract=contract_address, token_id=token_id)
                return Result.failure(ErrorKind.NOT_FOUND, "Token not found")

            return Result.success(ObjktToken.model_validate(rows[0]))

        except UpstreamError as e:
            return self._failure(e, contract=contract_address, token_id=token_id)
        except ValidationError as e:
            return self._failure(
                UpstreamError(ErrorKind.TRANSPORT_ERROR, f"OBJKT API error: unexpected token shape ({e.error_count()} errors)"),
                contract=contract_address,
                token_id=token_id,
            )

    async def resolve_contract_from_path(self, path: str) -> Result[str]:
        """Resolve a marketplace path (e.g. 'bootloader') to its contract address"""
        logger.info("objkt_path_resolve", path=path)

        try:
            data = await self._graphql(CONTRACT_BY_PATH_QUERY, {"path": path})
        except UpstreamError as e:
            logger.error("objkt_path_resolve_error", path=path, error=e.message)
            return Result.failure(ErrorKind.NOT_FOUND, f"Failed to resolve contract: {e.message}")

        rows = self._rows(data, "fa")
        contract = rows[0].get("contract") if rows else None

        if not contract:
            logger.warning("objkt_path_unresolved", path=path)
            return Result.failure(ErrorKind.NOT_FOUND, f"No contract found for path: {path}")

        logger.info("objkt_path_resolved", path=path, contract=contract)
        return Result.success(contract)

    async def get_collection_info(self, contract_address: str) -> Result[ObjktFa]:
        """Get a collection record by contract address"""
        limited = self._rate_limited("collection")
        if limited:
            return limited

        logger.info("objkt_collection_fetch", contract=contract_address)

        try:
            data = await self._graphql(COLLECTION_QUERY, {"contract": contract_address})
            rows = self._rows(data, "fa")
            if not rows:
                return Result.failure(ErrorKind.NOT_FOUND, "Collection not found")

            return Result.success(ObjktFa.model_validate(rows[0]))

        except UpstreamError as e:
            return self._failure(e, contract=contract_address)
        except ValidationError as e:
            return self._failure(
                UpstreamError(ErrorKind.TRANSPORT_ERROR, f"OBJKT API error: unexpected collection shape ({e.error_count()} errors)"),
                contract=contract_address,
            )

    async def get_collection_by_project(
        self,
        platform: str,
        project_id: str,
    ) -> Result[Union[ObjktFa, ObjktGallery]]:
        """
        Look up a project-addressed collection.

        fxhash and Bootloader projects are gallery rows (matched by
        gallery id, slug, or case-insensitive name) carrying aggregate
        stats and up to 10 sample tokens. Other platforms are searched as
        fa records by path plus collection id or name.
        """
        limited = self._rate_limited("collection-project")
        if limited:
            return limited

        logger.info("objkt_project_fetch", platform=platform, project_id=project_id)

        try:
            if platform.lower() in GALLERY_PLATFORMS:
                data = await self._graphql(GALLERY_QUERY, {"projectId": project_id})
                rows = self._rows(data, "gallery")
                if not rows:
                    logger.warning("objkt_gallery_not_found", platform=platform, project_id=project_id)
                    return Result.failure(ErrorKind.NOT_FOUND, "No gallery found for project")

                gallery = ObjktGallery.model_validate(rows[0])
                if not gallery.sample_tokens:
                    return Result.failure(ErrorKind.NOT_FOUND, "No tokens found in gallery")

                logger.info(
                    "objkt_gallery_found",
                    project_id=project_id,
                    name=gallery.name,
                    items=gallery.items,
                )
                return Result.success(gallery)

            data = await self._graphql(
                COLLECTION_BY_PROJECT_QUERY,
                {"platform": platform, "projectId": project_id},
            )
            rows = self._rows(data, "fa")
            if not rows:
                return Result.failure(ErrorKind.NOT_FOUND, "Collection project not found")

            return Result.success(ObjktFa.model_validate(rows[0]))

        except UpstreamError as e:
            return self._failure(e, platform=platform, project_id=project_id)
        except ValidationError as e:
            return self._failure(
                UpstreamError(ErrorKind.TRANSPORT_ERROR, f"OBJKT API error: unexpected project shape ({e.error_count()} errors)"),
                platform=platform,
                project_id=project_id,
            )
