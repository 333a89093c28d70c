"""Tezos indexer API clients"""

from tezos_previews.services.external_apis.rate_limit import RateLimiter
from tezos_previews.services.external_apis.tzkt import TzktClient
from tezos_previews.services.external_apis.objkt import ObjktClient

__all__ = [
    "RateLimiter",
    "TzktClient",
    "ObjktClient",
]
