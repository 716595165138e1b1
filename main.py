# main.py
import asyncio
import contextlib
import logging

from aiohttp import web
from aiogram import Bot, Dispatcher, BaseMiddleware
from aiogram.types import Message, CallbackQuery, BotCommand
from aiogram.types.error_event import ErrorEvent

from config import TELEGRAM_TOKEN, LOG_LEVEL, PORT, DISABLE_HTTP
from handlers import commands, messages

log = logging.getLogger("app")

BOT_COMMANDS = [
    BotCommand(command="markov", description="Фраза в твоём стиле"),
    BotCommand(command="markov_all", description="Фраза из всех сообщений"),
    BotCommand(command="forget", description="Забыть мои сообщения"),
]


def setup_logging(level: str = LOG_LEVEL):
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)


# =================== AIOGRAM MIDDLEWARE ===================
class UpdateLoggerMiddleware(BaseMiddleware):
    async def __call__(self, handler, event, data):
        if isinstance(event, Message):
            log.info("[update.message] chat=%s user=%s len=%s",
                     event.chat.id, getattr(event.from_user, "id", None), len(event.text or ""))
        elif isinstance(event, CallbackQuery):
            log.info("[update.callback] user=%s data=%r",
                     getattr(event.from_user, "id", None), event.data)
        return await handler(event, data)


def install_error_logging(dp: Dispatcher):
    @dp.errors()
    async def on_error(event: ErrorEvent):
        log.error("[aiogram] unhandled error. update_id=%s", event.update.update_id,
                  exc_info=event.exception)


def build_dispatcher() -> Dispatcher:
    dp = Dispatcher()
    # команды раньше, чем «запоминалка» обычного текста
    dp.include_router(commands.router)
    dp.include_router(messages.router)
    dp.message.outer_middleware(UpdateLoggerMiddleware())
    dp.callback_query.outer_middleware(UpdateLoggerMiddleware())
    install_error_logging(dp)
    return dp


# --- HTTP: минимальный сервер для хостинга (healthcheck) ---
async def handle_root(_: web.Request):
    return web.Response(text="MarkovBot is running")


async def handle_health(_: web.Request):
    return web.Response(text="OK")


def build_http_app() -> web.Application:
    app = web.Application()
    app.add_routes([
        web.get("/", handle_root),
        web.get("/healthz", handle_health),
    ])
    return app


async def start_http_server(port: int = PORT):
    runner = web.AppRunner(build_http_app())
    await runner.setup()
    site = web.TCPSite(runner, host="0.0.0.0", port=port)
    await site.start()
    log.info("HTTP health server on :%s", port)
    try:
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()


# --- Точка входа ---
async def main():
    if not TELEGRAM_TOKEN:
        raise RuntimeError("TELEGRAM_TOKEN is not set")

    bot = Bot(token=TELEGRAM_TOKEN)
    dp = build_dispatcher()
    await bot.set_my_commands(BOT_COMMANDS)

    tasks = []
    if not DISABLE_HTTP:
        tasks.append(asyncio.create_task(start_http_server()))

    log.info("Bot is online")
    try:
        await dp.start_polling(bot)
    finally:
        for t in tasks:
            t.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await t
        await bot.session.close()


if __name__ == "__main__":
    setup_logging()
    asyncio.run(main())
