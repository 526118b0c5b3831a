"""Webhook server for the chess bot.

Usage: ``uvicorn app.main:app``; requires BOT_TOKEN and WEBHOOK_URL.
"""
from __future__ import annotations

import logging
import signal
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from telegram import Update

from app.bot import build_application, build_services
from app.config import load_settings
from app.webhook_utils import WEBHOOK_PATH, webhook_endpoint


settings = load_settings()
settings.require_token()
webhook_url = webhook_endpoint(settings.require_webhook_url())

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

logger.info("Using webhook URL %s", webhook_url)


def _handle_exit(sig: int, frame: object | None) -> None:
    """Log termination signals; hosting platforms may stop the process externally."""
    logger.info("Received shutdown signal %s", sig)


signal.signal(signal.SIGTERM, _handle_exit)
signal.signal(signal.SIGINT, _handle_exit)

services = build_services(settings)
bot_app = build_application(settings, services, webhook=True)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    logger.info("Starting bot application")
    try:
        await bot_app.initialize()
        await bot_app.start()
        await bot_app.bot.set_webhook(webhook_url)
        services.start_sweeper()
    except Exception:
        logger.exception("Failed during startup")
        raise
    logger.info("Webhook set to %s", webhook_url)
    try:
        yield
    finally:
        logger.info("Shutting down bot application")
        try:
            await bot_app.bot.delete_webhook()
            await bot_app.stop()
            await bot_app.shutdown()
        finally:
            await services.aclose()
        logger.info("Bot application stopped")


app = FastAPI(lifespan=lifespan)


@app.post(WEBHOOK_PATH)
async def telegram_webhook(request: Request) -> dict[str, bool]:
    update = Update.de_json(await request.json(), bot_app.bot)
    await bot_app.process_update(update)
    return {"ok": True}


@app.api_route("/", methods=["GET", "HEAD"])
async def root() -> dict[str, str]:
    return {"status": "running"}


@app.get("/healthz")
async def healthz() -> dict[str, object]:
    """Health check used by the hosting platform; also reports tracked sessions."""
    return {"status": "ok", "sessions": services.store.count()}
