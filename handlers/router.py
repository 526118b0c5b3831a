from __future__ import annotations
import asyncio
import logging
from typing import Awaitable, Callable
from weakref import WeakValueDictionary

from telegram import Update
from telegram.ext import ContextTypes

from .dispatcher import CommandDispatcher, Reply
from .keyboards import inline_keyboard, main_menu_keyboard


logger = logging.getLogger(__name__)


DISPATCHER_KEY = "dispatcher"
CHAT_LOCKS_KEY = "chat_locks"
DEFAULT_PLAYER_NAME = "Игрок"


def _dispatcher(context: ContextTypes.DEFAULT_TYPE) -> CommandDispatcher:
    return context.bot_data[DISPATCHER_KEY]


def _chat_lock(context: ContextTypes.DEFAULT_TYPE, chat_id: int) -> asyncio.Lock:
    """Return the lock serialising updates of one chat.

    Webhook updates are processed concurrently, so two commands from the same
    chat could otherwise interleave around their remote calls.  Locks live
    only while some handler holds a reference to them.
    """
    locks = context.bot_data.setdefault(CHAT_LOCKS_KEY, WeakValueDictionary())
    lock = locks.get(chat_id)
    if lock is None:
        lock = asyncio.Lock()
        locks[chat_id] = lock
    return lock


def _user_name(user) -> str:
    if user is None:
        return DEFAULT_PLAYER_NAME
    return getattr(user, "username", None) or getattr(user, "first_name", None) or DEFAULT_PLAYER_NAME


def _reply_markup(reply: Reply):
    if reply.main_menu:
        return main_menu_keyboard()
    return inline_keyboard(reply.keyboard)


async def _send_reply(send: Callable[..., Awaitable[object]], reply: Reply) -> None:
    markup = _reply_markup(reply)
    if markup is None:
        await send(reply.text, parse_mode="HTML")
    else:
        await send(reply.text, parse_mode="HTML", reply_markup=markup)


async def _notify(context: ContextTypes.DEFAULT_TYPE, reply: Reply) -> None:
    """Deliver the reply's notifications to other chats.

    A failed delivery is logged and does not affect the sender's reply.
    """
    for note in reply.notifications:
        try:
            markup = inline_keyboard(note.keyboard)
            if markup is None:
                await context.bot.send_message(note.chat_id, note.text, parse_mode="HTML")
            else:
                await context.bot.send_message(
                    note.chat_id, note.text, parse_mode="HTML", reply_markup=markup
                )
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Failed to notify chat %s", note.chat_id)


async def router_text(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    message = update.message
    if message is None or not message.text:
        logger.warning("Update without text skipped")
        return
    chat_id = update.effective_chat.id
    logger.info("Message from chat_id=%s: %s", chat_id, message.text)

    async with _chat_lock(context, chat_id):
        reply = await _dispatcher(context).handle(
            chat_id, message.text, _user_name(update.effective_user)
        )
        if reply.empty:
            return
        await _send_reply(message.reply_text, reply)
    await _notify(context, reply)


async def router_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    query = update.callback_query
    await query.answer()
    chat_id = update.effective_chat.id
    logger.info("Callback from chat_id=%s: %s", chat_id, query.data)

    async def send(text: str, **kwargs) -> object:
        return await context.bot.send_message(chat_id, text, **kwargs)

    async with _chat_lock(context, chat_id):
        reply = await _dispatcher(context).handle(
            chat_id, query.data or "", _user_name(query.from_user)
        )
        if reply.empty:
            return
        await _send_reply(send, reply)
    await _notify(context, reply)


async def handle_error(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    logger.error("Exception while handling update %s", update, exc_info=context.error)
