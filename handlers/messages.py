# handlers/messages.py
import asyncio
import logging
from aiogram import Router, types, F
from utils.chains import chains_store, event_id, StoreError

logger = logging.getLogger(__name__)

router = Router()


async def remember(message: types.Message) -> bool:
    """Store the message text as part of its author's chain. Bots are skipped."""
    author = message.from_user
    if author is None or author.is_bot:
        logger.debug("skip message from bot in chat=%s", message.chat.id)
        return False
    text = (message.text or "").strip()
    if not text:
        return False
    try:
        await asyncio.to_thread(
            chains_store.insert,
            event_id(message.chat.id, message.message_id),
            str(author.id),
            text,
        )
    except StoreError:
        # не отвечаем в чат: пользователь ничего не спрашивал
        logger.exception("cannot store message chat=%s msg=%s", message.chat.id, message.message_id)
        return False
    logger.debug("stored message chat=%s user=%s", message.chat.id, author.id)
    return True


@router.message(F.text & ~F.text.startswith("/"))
async def any_text(message: types.Message):
    await remember(message)


@router.edited_message(F.text & ~F.text.startswith("/"))
async def edited_text(message: types.Message):
    await remember(message)
