"""Telegram bot that replies to marketplace links with preview cards"""

import asyncio
from pathlib import Path
from typing import List, Optional

from telethon import TelegramClient, events
from telethon.errors import FloodWaitError, MessageNotModifiedError
import structlog

from tezos_previews.core.config import Settings, settings as default_settings
from tezos_previews.core.results import ErrorKind
from tezos_previews.services.embeds.generator import Card, CardGenerator
from tezos_previews.services.nft.preview_service import NFTPreviewService

logger = structlog.get_logger()


class TezosPreviewBot:
    """Listens to every chat the bot is in and answers link messages"""

    def __init__(
        self,
        config: Optional[Settings] = None,
        preview_service: Optional[NFTPreviewService] = None,
        card_generator: Optional[CardGenerator] = None,
        client: Optional[TelegramClient] = None,
    ):
        self.config = config or default_settings
        self.preview_service = preview_service or NFTPreviewService(config=self.config)
        self.cards = card_generator or CardGenerator(config=self.config)
        self._client = client

    @property
    def client(self) -> TelegramClient:
        if self._client is None:
            session_path = Path(self.config.telegram_session_path)
            session_path.parent.mkdir(parents=True, exist_ok=True)
            self._client = TelegramClient(
                str(session_path),
                self.config.telegram_api_id,
                self.config.telegram_api_hash,
                device_model="Tezos Previews Bot",
                system_version="1.0",
                app_version=self.config.app_version,
            )
        return self._client

    async def build_cards(self, text: str) -> Optional[List[Card]]:
        """
        Cards for every NFT and collection link in the text.

        None means nothing was recognized, or everything failed, and the
        bot should stay silent.
        """
        nft_result, collection_result = await asyncio.gather(
            self.preview_service.process_message(text),
            self.preview_service.process_collections(text),
        )

        for kind, result in (("nft", nft_result), ("collection", collection_result)):
            if not result.ok and result.error_kind != ErrorKind.NO_LINKS_FOUND:
                logger.warning("preview_failed", kind=kind, error_kind=result.error_kind, error=result.error)

        nfts = nft_result.data if nft_result.ok and nft_result.data else []
        collections = collection_result.data if collection_result.ok and collection_result.data else []

        if not nfts and not collections:
            logger.debug("no_previews_for_message")
            return None

        logger.info("building_cards", nfts=len(nfts), collections=len(collections))

        cards = []
        for nft in nfts:
            card = self.cards.create_nft_card(nft)
            if self.cards.validate_card(card):
                cards.append(card)
            else:
                logger.warning("invalid_nft_card_skipped", token_id=nft.id, error_kind=ErrorKind.VALIDATION_ERROR)

        for collection in collections:
            card = self.cards.create_collection_card(collection)
            if self.cards.validate_card(card):
                cards.append(card)
            else:
                logger.warning(
                    "invalid_collection_card_skipped",
                    contract=collection.contract,
                    error_kind=ErrorKind.VALIDATION_ERROR,
                )

        return cards

    async def handle_message(self, event: events.NewMessage.Event):
        """Reply to one incoming message"""
        try:
            text = event.message.message or ""

            sender = await event.get_sender()
            if sender is not None and getattr(sender, "bot", False):
                logger.debug("ignoring_bot_message", chat_id=event.chat_id)
                return

            if not text.strip():
                return

            cards = await self.build_cards(text)
            if cards is None:
                return

            loading = await event.reply(self.cards.create_loading_card().to_html(), parse_mode="html")

            sent = await self.send_cards(event, loading, cards[:self.config.max_cards_per_message])

            if sent:
                logger.info("previews_sent", chat_id=event.chat_id, count=sent)
            else:
                logger.error("preview_render_error", chat_id=event.chat_id, cards=len(cards))
                error_card = self.cards.create_error_card(
                    "Failed to generate NFT preview",
                    "Unable to fetch or process NFT data. Please try again later.",
                )
                await loading.edit(error_card.to_html(), parse_mode="html")

        except FloodWaitError as e:
            logger.warning("telegram_flood_wait", seconds=e.seconds)
        except Exception as e:
            logger.error("message_handler_error", error=str(e))

    async def send_cards(self, event, loading, cards: List[Card]) -> int:
        """
        Send each card as its own message.

        The first delivered card replaces the loading message, the rest are
        replies. A card Telegram rejects is skipped. Returns how many were sent.
        """
        sent = 0
        for card in cards:
            html = card.to_html()
            try:
                if sent == 0:
                    await loading.edit(html, parse_mode="html", link_preview=True)
                else:
                    await event.reply(html, parse_mode="html", link_preview=True)
            except MessageNotModifiedError:
                pass
            except FloodWaitError:
                raise
            except Exception as e:
                logger.warning("card_send_failed", chat_id=event.chat_id, title=card.title, error=str(e))
                continue
            sent += 1

        return sent

    async def start(self):
        """Log in with the bot token and register the message handler"""
        logger.info("bot_starting", app=self.config.app_name, version=self.config.app_version)

        await self.client.start(bot_token=self.config.telegram_bot_token)
        self.client.add_event_handler(self.handle_message, events.NewMessage(incoming=True))

        me = await self.client.get_me()
        logger.info("bot_ready", username=getattr(me, "username", None))

    async def run_until_disconnected(self):
        await self.client.run_until_disconnected()

    async def shutdown(self):
        """Close API clients and disconnect from Telegram"""
        logger.info("bot_shutting_down")

        try:
            await self.preview_service.close()
            if self._client is not None and self._client.is_connected():
                await self._client.disconnect()
            logger.info("bot_shutdown_complete")
        except Exception as e:
            logger.error("bot_shutdown_error", error=str(e))
