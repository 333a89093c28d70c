"""TzKT API client - Tezos chain indexer (REST)"""

import structlog
from pydantic import ValidationError

from tezos_previews.core.results import ErrorKind, Result
from tezos_previews.services.external_apis.base import IndexerClient, UpstreamError
from tezos_previews.services.external_apis.schemas import TzktContractInfo, TzktToken

logger = structlog.get_logger()


class TzktClient(IndexerClient):
    """Client for the TzKT REST API (free, no auth required)"""

    SERVICE = "TZKT"

    def _default_base_url(self) -> str:
        return self.config.tzkt_base_url

    async def get_token_info(self, contract_address: str, token_id: str) -> Result[TzktToken]:
        """
        Get a token by contract address and token id.

        /v1/tokens returns balance rows: the account is the holder the
        indexer lists first, which for single-edition tokens is the minter.
        """
        limited = self._rate_limited(f"tokens/{contract_address}_{token_id}")
        if limited:
            return limited

        logger.info("tzkt_token_fetch", contract=contract_address, token_id=token_id)

        try:
            data = await self._request_json(
                "GET",
                "/v1/tokens",
                params={"contract": contract_address, "tokenId": token_id, "limit": 1},
            )
        except UpstreamError as e:
            return self._failure(e, contract=contract_address, token_id=token_id)

        if isinstance(data, list):
            data = data[0] if data else None

        if not data:
            logger.warning("tzkt_token_not_found", contract=contract_address, token_id=token_id)
            return Result.failure(ErrorKind.NOT_FOUND, "Token not found")

        try:
            token = TzktToken.model_validate(data)
        except ValidationError as e:
            return self._failure(
                UpstreamError(ErrorKind.TRANSPORT_ERROR, f"TZKT API error: unexpected token shape ({e.error_count()} errors)"),
                contract=contract_address,
                token_id=token_id,
            )

        return Result.success(token)

    async def get_contract_info(self, contract_address: str) -> Result[TzktContractInfo]:
        """Get contract details (alias, kind, creator)"""
        limited = self._rate_limited(f"contracts/{contract_address}")
        if limited:
            return limited

        try:
            data = await self._request_json("GET", f"/v1/contracts/{contract_address}")
        except UpstreamError as e:
            return self._failure(e, contract=contract_address)

        if not data:
            return Result.failure(ErrorKind.NOT_FOUND, "Contract not found")

        try:
            return Result.success(TzktContractInfo.model_validate(data))
        except ValidationError as e:
            return self._failure(
                UpstreamError(ErrorKind.TRANSPORT_ERROR, f"TZKT API error: unexpected contract shape ({e.error_count()} errors)"),
                contract=contract_address,
            )
