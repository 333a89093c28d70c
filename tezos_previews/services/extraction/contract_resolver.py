"""
Contract Resolver - Turns marketplace path fragments into KT1 addresses.

Some marketplace URLs carry a human-readable path ("hicetnunc",
"bootloader", a collection slug) where the contract address would be.
Resolution order:

1. Already a KT1 address - returned as is
2. Static table of known legacy paths
3. OBJKT path lookup - first fa record's contract
"""

from typing import Dict, Optional

import structlog

from tezos_previews.core.results import ErrorKind, Result
from tezos_previews.services.extraction.patterns import is_contract_address
from tezos_previews.services.external_apis.objkt import ObjktClient

logger = structlog.get_logger()


HEN_CONTRACT = "KT1RJ6PbjHpwc3M5rw5s2Nbmefwbuwbdxton"  # HicEtNunc 2.0 / Teia
FXHASH_GENTK_CONTRACT = "KT1KEa8z6vWXDJrVqtMrAeDVzsvxat3kHaCE"  # fx(hash) v2

KNOWN_CONTRACTS: Dict[str, str] = {
    "hicetnunc": HEN_CONTRACT,
}


class ContractResolver:
    """Resolves marketplace paths to canonical contract addresses"""

    def __init__(self, objkt_client: ObjktClient, known_contracts: Optional[Dict[str, str]] = None):
        self.objkt_client = objkt_client
        self.known_contracts = dict(KNOWN_CONTRACTS if known_contracts is None else known_contracts)

    def lookup_static(self, path: str) -> Optional[str]:
        """Exact match against the static table"""
        return self.known_contracts.get(path)

    async def resolve(self, path: Optional[str]) -> Result[str]:
        """
        Resolve a path fragment to a KT1 address.

        Never raises: a missing row and a failed lookup both come back
        as NOT_FOUND, with the cause in the message.
        """
        if not path:
            return Result.failure(ErrorKind.NOT_FOUND, "No contract address or path to resolve")

        if is_contract_address(path):
            return Result.success(path)

        static = self.lookup_static(path)
        if static:
            logger.info("contract_mapped", path=path, contract=static)
            return Result.success(static)

        try:
            result = await self.objkt_client.resolve_contract_from_path(path)
        except Exception as e:
            logger.error("contract_resolve_error", path=path, error=str(e))
            return Result.failure(ErrorKind.NOT_FOUND, f"Could not resolve contract address for path: {path} ({e})")

        if not result.ok or not is_contract_address(result.data):
            reason = result.error or f"resolved to non-contract value {result.data!r}"
            return Result.failure(
                ErrorKind.NOT_FOUND,
                f"Could not resolve contract address for path: {path} ({reason})",
            )

        return Result.success(result.data)
