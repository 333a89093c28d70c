"""Bot entry point"""

import asyncio
import signal
import sys

import structlog

from tezos_previews.core.config import settings, validate_settings
from tezos_previews.core.logging import configure_logging
from tezos_previews.services.telegram.bot import TezosPreviewBot

logger = structlog.get_logger()


async def run():
    """Start the bot and block until a signal or a disconnect"""
    bot = TezosPreviewBot(config=settings)
    stop = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:
            # Windows event loops have no signal handlers
            pass

    try:
        await bot.start()

        disconnected = asyncio.ensure_future(bot.run_until_disconnected())
        stopped = asyncio.ensure_future(stop.wait())
        done, pending = await asyncio.wait({disconnected, stopped}, return_when=asyncio.FIRST_COMPLETED)

        if stopped in done:
            logger.info("shutdown_signal_received")
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
    finally:
        await bot.shutdown()


def main():
    configure_logging(settings)

    try:
        validate_settings(settings)
    except ValueError as e:
        logger.error("invalid_configuration", error=str(e))
        sys.exit(1)

    try:
        asyncio.run(run())
    except Exception as e:
        logger.exception("bot_crashed", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
