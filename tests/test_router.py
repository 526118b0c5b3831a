import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock

from telegram import InlineKeyboardMarkup, ReplyKeyboardMarkup

from handlers import router
from handlers.dispatcher import Notification, Reply
from logic.render import Button


def _context(reply):
    dispatcher = SimpleNamespace(handle=AsyncMock(return_value=reply))
    bot = SimpleNamespace(send_message=AsyncMock())
    return SimpleNamespace(bot_data={router.DISPATCHER_KEY: dispatcher}, bot=bot), dispatcher


def _text_update(text, username="alice", first_name="Alice"):
    message = SimpleNamespace(text=text, reply_text=AsyncMock())
    return SimpleNamespace(
        message=message,
        effective_chat=SimpleNamespace(id=5),
        effective_user=SimpleNamespace(username=username, first_name=first_name),
    )


def test_router_text_replies_in_html():
    async def run_test():
        context, dispatcher = _context(Reply("<b>hi</b>"))
        update = _text_update("/help")

        await router.router_text(update, context)

        dispatcher.handle.assert_awaited_once_with(5, "/help", "alice")
        update.message.reply_text.assert_awaited_once_with("<b>hi</b>", parse_mode="HTML")

    asyncio.run(run_test())


def test_router_text_falls_back_to_first_name():
    async def run_test():
        context, dispatcher = _context(Reply("ok"))
        await router.router_text(_text_update("/start", username=None), context)
        assert dispatcher.handle.await_args.args[2] == "Alice"

        await router.router_text(_text_update("/start", username=None, first_name=None), context)
        assert dispatcher.handle.await_args.args[2] == router.DEFAULT_PLAYER_NAME

    asyncio.run(run_test())


def test_router_text_attaches_main_menu():
    async def run_test():
        context, _ = _context(Reply("welcome", main_menu=True))
        update = _text_update("/start")

        await router.router_text(update, context)

        kwargs = update.message.reply_text.await_args.kwargs
        assert isinstance(kwargs["reply_markup"], ReplyKeyboardMarkup)

    asyncio.run(run_test())


def test_router_text_sends_notifications_after_reply():
    async def run_test():
        reply = Reply("moved", notifications=[Notification(9, "your turn")])
        context, _ = _context(reply)
        update = _text_update("/move e2e4")

        await router.router_text(update, context)

        update.message.reply_text.assert_awaited_once()
        context.bot.send_message.assert_awaited_once_with(9, "your turn", parse_mode="HTML")

    asyncio.run(run_test())


def test_failed_notification_does_not_raise():
    async def run_test():
        reply = Reply("moved", notifications=[Notification(9, "x"), Notification(10, "y")])
        context, _ = _context(reply)
        context.bot.send_message.side_effect = [RuntimeError("blocked"), None]

        await router.router_text(_text_update("/move e2e4"), context)

        assert context.bot.send_message.await_count == 2

    asyncio.run(run_test())


def test_router_callback_answers_and_sends_keyboard():
    async def run_test():
        reply = Reply("board", keyboard=[[Button("♙", "select:e2")]])
        context, dispatcher = _context(reply)
        query = SimpleNamespace(
            data="refresh_board",
            answer=AsyncMock(),
            from_user=SimpleNamespace(username="bob", first_name="Bob"),
        )
        update = SimpleNamespace(callback_query=query, effective_chat=SimpleNamespace(id=7))

        await router.router_callback(update, context)

        query.answer.assert_awaited_once()
        dispatcher.handle.assert_awaited_once_with(7, "refresh_board", "bob")
        args, kwargs = context.bot.send_message.await_args
        assert args == (7, "board")
        assert kwargs["parse_mode"] == "HTML"
        markup = kwargs["reply_markup"]
        assert isinstance(markup, InlineKeyboardMarkup)
        assert markup.inline_keyboard[0][0].callback_data == "select:e2"

    asyncio.run(run_test())


def test_router_callback_inert_cell_sends_nothing():
    async def run_test():
        context, _ = _context(Reply(""))
        query = SimpleNamespace(data="none", answer=AsyncMock(), from_user=None)
        update = SimpleNamespace(callback_query=query, effective_chat=SimpleNamespace(id=7))

        await router.router_callback(update, context)

        query.answer.assert_awaited_once()
        context.bot.send_message.assert_not_awaited()

    asyncio.run(run_test())


def test_notification_keyboard_is_sent_as_inline_markup():
    async def run_test():
        note = Notification(9, "draw?", keyboard=[[Button("ok", "/draw accept")]])
        context, _ = _context(Reply("offered", notifications=[note]))

        await router.router_text(_text_update("/draw"), context)

        args, kwargs = context.bot.send_message.await_args
        assert args == (9, "draw?")
        markup = kwargs["reply_markup"]
        assert isinstance(markup, InlineKeyboardMarkup)
        assert markup.inline_keyboard[0][0].callback_data == "/draw accept"

    asyncio.run(run_test())


def test_updates_of_one_chat_do_not_interleave():
    async def run_test():
        events = []

        async def handle(chat_id, text, user_name):
            events.append(("start", text))
            await asyncio.sleep(0.01)
            events.append(("end", text))
            return Reply(text)

        dispatcher = SimpleNamespace(handle=handle)
        context = SimpleNamespace(
            bot_data={router.DISPATCHER_KEY: dispatcher},
            bot=SimpleNamespace(send_message=AsyncMock()),
        )

        await asyncio.gather(
            router.router_text(_text_update("/board"), context),
            router.router_text(_text_update("/moves"), context),
        )

        assert events == [
            ("start", "/board"),
            ("end", "/board"),
            ("start", "/moves"),
            ("end", "/moves"),
        ]

    asyncio.run(run_test())


def test_different_chats_run_concurrently():
    async def run_test():
        events = []

        async def handle(chat_id, text, user_name):
            events.append(("start", chat_id))
            await asyncio.sleep(0.01)
            events.append(("end", chat_id))
            return Reply(text)

        context = SimpleNamespace(
            bot_data={router.DISPATCHER_KEY: SimpleNamespace(handle=handle)},
            bot=SimpleNamespace(send_message=AsyncMock()),
        )
        other = _text_update("/board")
        other.effective_chat = SimpleNamespace(id=6)

        await asyncio.gather(
            router.router_text(_text_update("/board"), context),
            router.router_text(other, context),
        )

        assert events[:2] == [("start", 5), ("start", 6)]

    asyncio.run(run_test())
