"""Composition root: builds the session store, API client and Telegram app."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from telegram.ext import (
    Application,
    ApplicationBuilder,
    CallbackQueryHandler,
    MessageHandler,
    filters,
)

from chess_api import ChessApiClient
from handlers.dispatcher import CommandDispatcher
from handlers.router import DISPATCHER_KEY, handle_error, router_callback, router_text
from storage import SessionStore, run_expiry_sweeper

from .config import Settings


logger = logging.getLogger(__name__)


@dataclass
class BotServices:
    settings: Settings
    store: SessionStore
    api: ChessApiClient
    dispatcher: CommandDispatcher
    sweeper: Optional[asyncio.Task] = None

    def start_sweeper(self) -> None:
        if not self.settings.session_sweep_enabled or self.sweeper is not None:
            return
        self.sweeper = asyncio.create_task(
            run_expiry_sweeper(
                self.store,
                timedelta(hours=self.settings.session_ttl_hours),
                self.settings.session_sweep_interval,
            )
        )

    async def aclose(self) -> None:
        if self.sweeper is not None:
            self.sweeper.cancel()
            try:
                await self.sweeper
            except asyncio.CancelledError:
                pass
            self.sweeper = None
        await self.api.aclose()


def build_services(settings: Settings) -> BotServices:
    store = SessionStore()
    api = ChessApiClient(settings.chess_api_url, timeout=settings.chess_api_timeout)
    logger.info("Using chess API at %s", settings.chess_api_url)
    return BotServices(
        settings=settings,
        store=store,
        api=api,
        dispatcher=CommandDispatcher(store, api),
    )


def build_application(
    settings: Settings,
    services: BotServices,
    *,
    webhook: bool = False,
) -> Application:
    builder = ApplicationBuilder().token(settings.require_token())
    if webhook:
        # updates arrive through the FastAPI endpoint, not long-polling
        builder = builder.updater(None)
    application = builder.build()
    application.bot_data[DISPATCHER_KEY] = services.dispatcher
    application.add_handler(MessageHandler(filters.TEXT, router_text))
    application.add_handler(CallbackQueryHandler(router_callback))
    application.add_error_handler(handle_error)
    return application
