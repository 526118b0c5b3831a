"""Run the bot with long-polling instead of a webhook."""
from __future__ import annotations

import logging

from telegram.ext import Application

from .bot import build_application, build_services
from .config import load_settings


def main() -> None:
    settings = load_settings()
    logging.basicConfig(level=settings.log_level)
    services = build_services(settings)
    application = build_application(settings, services)

    async def on_start(app: Application) -> None:
        services.start_sweeper()

    async def on_stop(app: Application) -> None:
        await services.aclose()

    application.post_init = on_start
    application.post_shutdown = on_stop
    application.run_polling()


if __name__ == '__main__':
    main()
