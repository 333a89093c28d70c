"""Service modules for the Tezos previews bot"""

from tezos_previews.services.nft import NFTPreviewService
from tezos_previews.services.embeds import CardGenerator
from tezos_previews.services.telegram import TezosPreviewBot

__all__ = [
    "NFTPreviewService",
    "CardGenerator",
    "TezosPreviewBot",
]
