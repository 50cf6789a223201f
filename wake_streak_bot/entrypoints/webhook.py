"""Webhook entrypoint for WakeStreakBot.

Hosting platforms expect a web process that listens on the PORT env var. We
launch an aiohttp web server that hands Telegram webhooks to the aiogram 3
dispatcher built in ``bot_main``.
"""
from __future__ import annotations

import logging

from aiohttp import web
from aiogram import Bot
from aiogram.webhook.aiohttp_server import SimpleRequestHandler, setup_application

from wake_streak_bot import config
from wake_streak_bot.entrypoints import bot_main  # re-use handlers & service wiring

logger = logging.getLogger(__name__)


def create_app() -> web.Application:
    if not config.BASE_URL:
        raise RuntimeError("BASE_URL env variable not set")

    bot: Bot = bot_main.create_bot()
    dp = bot_main.build_dispatcher(bot_main.build_services())

    app = web.Application()

    async def on_startup(app: web.Application) -> None:
        await bot.set_webhook(f"{config.BASE_URL}/webhook", secret_token=config.WEBHOOK_SECRET)
        logger.info("Webhook set")

    async def on_cleanup(app: web.Application) -> None:
        await bot.delete_webhook()

    SimpleRequestHandler(dispatcher=dp, bot=bot, secret_token=config.WEBHOOK_SECRET).register(app, path="/webhook")

    # dispatcher startup/shutdown hooks follow the aiohttp app lifecycle
    setup_application(app, dp, bot=bot)

    app.on_startup.append(on_startup)
    app.on_cleanup.append(on_cleanup)
    return app


def main() -> None:
    bot_main.configure_logging()
    web.run_app(create_app(), host="0.0.0.0", port=config.PORT)


if __name__ == "__main__":
    main()
