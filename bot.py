# -*- coding: utf-8 -*-
import asyncio
import logging

from aiohttp import web
from aiogram import Bot, Dispatcher
from aiogram.webhook.aiohttp_server import SimpleRequestHandler, setup_application

from config import settings
from db import migrate
from handlers import admin as admin_handlers
from handlers import moderation as moderation_handlers
from keywords import load_keywords
from services.matcher import KeywordMatcher
from services.moderation import ModerationService
from services.probation import ProbationCounter

ALLOWED_UPDATES = ["message", "edited_message"]


def build_moderation(counter: ProbationCounter) -> ModerationService:
    matcher = KeywordMatcher(load_keywords(settings.KEYWORDS_FILE))
    return ModerationService(
        matcher,
        counter,
        settings.always_moderate_ids(),
        probation_limit=settings.PROBATION_LIMIT,
        store_failure_policy=settings.STORE_FAILURE_POLICY,
    )


async def _health(_: web.Request) -> web.Response:
    return web.Response(text="OK")


async def run_webhook(bot: Bot, dp: Dispatcher) -> None:
    app = web.Application()
    app.router.add_get("/", _health)
    # Неверный X-Telegram-Bot-Api-Secret-Token aiogram отбивает сам (401)
    SimpleRequestHandler(
        dispatcher=dp,
        bot=bot,
        secret_token=settings.WEBHOOK_SECRET or None,
    ).register(app, path=settings.WEBHOOK_PATH)
    setup_application(app, dp, bot=bot)

    await bot.set_webhook(
        settings.WEBHOOK_URL.rstrip("/") + settings.WEBHOOK_PATH,
        secret_token=settings.WEBHOOK_SECRET or None,
        allowed_updates=ALLOWED_UPDATES,
    )

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, settings.WEBHOOK_HOST, settings.WEBHOOK_PORT)
    await site.start()
    try:
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()


async def main() -> None:
    logging.basicConfig(
        level=getattr(logging, (settings.LOG_LEVEL or "INFO").upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    logger = logging.getLogger(__name__)
    logger.info("APP_ENV: %s", settings.APP_ENV)
    logger.info("Mode: %s", "webhook" if settings.use_webhook() else "polling")
    logger.info("LOG_CHANNEL_ID: %s", settings.LOG_CHANNEL_ID or "(not set)")
    logger.info(
        "Probation limit: %s, store failure policy: %s",
        settings.PROBATION_LIMIT, settings.STORE_FAILURE_POLICY,
    )
    logger.info(
        "ALWAYS_MODERATE_USER_IDS: %s",
        ",".join(str(x) for x in sorted(settings.always_moderate_ids())) or "(not set)",
    )

    await migrate()

    if not settings.BOT_TOKEN:
        raise RuntimeError("BOT_TOKEN is not configured")

    counter = ProbationCounter()
    moderation = build_moderation(counter)
    logger.info("Keywords loaded: %s", len(moderation.matcher))

    bot = Bot(token=settings.BOT_TOKEN)
    dp = Dispatcher(moderation=moderation)

    # Команды админов раньше общего фильтра
    dp.include_router(admin_handlers.router)
    dp.include_router(moderation_handlers.router)

    try:
        if settings.use_webhook():
            await run_webhook(bot, dp)
        else:
            await bot.delete_webhook()
            await dp.start_polling(bot, allowed_updates=ALLOWED_UPDATES)
    finally:
        await counter.close()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
