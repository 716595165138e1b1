# handlers/commands.py
import asyncio
import logging
import random
from typing import Optional
from aiogram import Router, types, F
from aiogram.exceptions import TelegramAPIError
from aiogram.filters import CommandStart, Command, CommandObject
from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton
from config import MARKOV_WORDS, MARKOV_MAX_CHARS
from services.generator_markov import build_markov_from_texts, make_sentence
from utils.chains import chains_store, event_id, StoreError

logger = logging.getLogger(__name__)

router = Router()

ALL = "*"
SIGN_SEP = " — "
DEBUG_TABLE_CHARS = 1500

TEXTS = {
    "start": (
        "Я запоминаю сообщения в чате и сочиняю из них новые.\n"
        "/markov — фраза в твоём стиле (или ответом на чужое сообщение — в стиле автора)\n"
        "/markov <id> — фраза в стиле пользователя с этим id\n"
        "/markov_all — фраза из всех сообщений\n"
        "/forget — забыть твои сообщения (или ответом — одно сообщение)"
    ),
    "empty": "Мне пока нечего сказать: сообщений ещё нет.",
    "again": "🔁 Ещё",
    "share": "📣 Поделиться",
    "shared": "Готово 👍",
    "forgot_one": "🗑 Забыл это сообщение.",
    "forgot_none": "Такого сообщения я не помню.",
    "forget_foreign": "Можно забыть только свои сообщения.",
    "forgot_all": "🗑 Забыл твои сообщения: {n}.",
}

# ответы, когда что-то пошло не так
FALLBACKS = [
    "[Бот смотрит на тебя с неодобрением]",
    "[Бот молча смотрит на тебя]",
    "[Бот смотрит на твои руки, но так ничего и не говорит]",
    "[ИИ бота смотрит на тебя, будто пытается вспомнить, кто ты]",
]


def markov_kbd(target: str) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[[
        InlineKeyboardButton(text=TEXTS["again"], callback_data=f"markov:again:{target}"),
        InlineKeyboardButton(text=TEXTS["share"], callback_data="markov:share"),
    ]])


async def compose(target: str) -> str:
    """Build a fresh chain from the stored corpus and generate one sentence.

    `target` is a chain id, or ALL for every stored message.
    """
    if target == ALL:
        texts = await asyncio.to_thread(chains_store.all)
    else:
        texts = await asyncio.to_thread(chains_store.chain, target)
    return make_sentence(texts, MARKOV_WORDS, MARKOV_MAX_CHARS)


def _signed(sentence: str, name: Optional[str]) -> str:
    return f"{sentence}{SIGN_SEP}{name}" if name else sentence


def _pick_target(message: types.Message, command: Optional[CommandObject]):
    args = ((command.args if command else None) or "").strip()
    if args.isdigit():
        return args, args
    reply = message.reply_to_message
    if reply and reply.from_user and not reply.from_user.is_bot:
        return str(reply.from_user.id), reply.from_user.full_name
    return str(message.from_user.id), message.from_user.full_name


async def _answer_markov(message: types.Message, target: str, name: Optional[str]):
    try:
        sentence = await compose(target)
    except StoreError:
        logger.exception("markov failed target=%s", target)
        await message.answer(random.choice(FALLBACKS))
        return
    if not sentence:
        await message.answer(TEXTS["empty"])
        return
    await message.answer(_signed(sentence, name), reply_markup=markov_kbd(target))


@router.message(CommandStart())
async def cmd_start(message: types.Message):
    await message.answer(TEXTS["start"])


@router.message(Command("markov"))
async def cmd_markov(message: types.Message, command: Optional[CommandObject] = None):
    target, name = _pick_target(message, command)
    logger.info("[markov] chat=%s target=%s", message.chat.id, target)
    await _answer_markov(message, target, name)


@router.message(Command("markov_all"))
async def cmd_markov_all(message: types.Message):
    logger.info("[markov_all] chat=%s", message.chat.id)
    await _answer_markov(message, ALL, None)


@router.callback_query(F.data.startswith("markov:again:"))
async def cb_again(cq: types.CallbackQuery):
    target = cq.data.split(":", 2)[2]
    old = cq.message.text or ""
    name = old.rpartition(SIGN_SEP)[2] if target != ALL and SIGN_SEP in old else None
    try:
        sentence = await compose(target)
    except StoreError:
        logger.exception("markov regenerate failed target=%s", target)
        await cq.answer(random.choice(FALLBACKS), show_alert=True)
        return
    if not sentence:
        await cq.answer(TEXTS["empty"], show_alert=True)
        return
    try:
        await cq.message.edit_text(_signed(sentence, name), reply_markup=markov_kbd(target))
    except TelegramAPIError:
        # например «message is not modified», если вышла та же фраза
        logger.exception("[again] edit failed chat=%s", cq.message.chat.id)
    await cq.answer()


@router.callback_query(F.data == "markov:share")
async def cb_share(cq: types.CallbackQuery):
    content = cq.message.text or ""
    try:
        await cq.message.answer(f"{content}\n\nсгенерировано по запросу {cq.from_user.full_name}")
        await cq.message.edit_text(TEXTS["shared"])
    except TelegramAPIError:
        # пользователь уже получил ответ, падать не из-за чего
        logger.exception("[share] failed chat=%s", cq.message.chat.id)
    await cq.answer()


@router.message(Command("forget"))
async def cmd_forget(message: types.Message):
    user_id = message.from_user.id
    reply = message.reply_to_message
    try:
        if reply:
            if not reply.from_user or reply.from_user.id != user_id:
                await message.answer(TEXTS["forget_foreign"])
                return
            n = await asyncio.to_thread(
                chains_store.delete_id, event_id(message.chat.id, reply.message_id)
            )
            await message.answer(TEXTS["forgot_one"] if n else TEXTS["forgot_none"])
        else:
            n = await asyncio.to_thread(chains_store.delete_chain, str(user_id))
            await message.answer(TEXTS["forgot_all"].format(n=n))
    except StoreError:
        logger.exception("forget failed user=%s", user_id)
        await message.answer(random.choice(FALLBACKS))
        return
    logger.info("[forget] chat=%s user=%s removed=%s", message.chat.id, user_id, n)


# /debug — статус в чат
@router.message(Command("debug"))
async def cmd_debug(message: types.Message):
    chain_id = str(message.from_user.id)
    try:
        mine = await asyncio.to_thread(chains_store.chain, chain_id)
        total = await asyncio.to_thread(chains_store.count)
    except StoreError:
        logger.exception("debug failed user=%s", chain_id)
        await message.answer(random.choice(FALLBACKS))
        return
    mg = build_markov_from_texts(mine)
    text = (
        f"🧪 DEBUG\n"
        f"- messages total: {total}\n"
        f"- your messages: {len(mine)}\n"
        f"- your chain words: {len(mg)}\n"
        f"- your chain transitions: {mg.transitions}\n"
        f"- words per sentence: {MARKOV_WORDS}\n"
    )
    table = mg.dump()
    if table:
        text += "\n" + table[:DEBUG_TABLE_CHARS]
    await message.answer(text)
