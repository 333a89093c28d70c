"""NFT and collection previews"""

from tezos_previews.services.nft.normalizer import RecordNormalizer
from tezos_previews.services.nft.preview_service import NFTPreviewService, PreviewResult

__all__ = ["RecordNormalizer", "NFTPreviewService", "PreviewResult"]
