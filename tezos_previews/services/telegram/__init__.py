"""Telegram bot wiring"""

from tezos_previews.services.telegram.bot import TezosPreviewBot

__all__ = ["TezosPreviewBot"]
