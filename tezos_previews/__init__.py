"""Tezos NFT marketplace link previews for Telegram"""

__version__ = "1.0.0"
