"""
archrv_tracker.context

Composition root shared by the HTTP app and any other entry point.

Responsibilities:
- Build the DB engine, Store, HTTP client, chat client, Notifier and
  ResolutionService once, from one Settings object.
- Start the notifier tasks and tear everything down in reverse order.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx
from sqlalchemy.ext.asyncio import AsyncEngine

from archrv_tracker.chat_clients.telegram import TelegramClient
from archrv_tracker.db.init_db import init_db
from archrv_tracker.db.session import create_engine, create_sessionmaker
from archrv_tracker.db.store import Store
from archrv_tracker.observability.logging import get_logger
from archrv_tracker.services.notifier import Deliver, Notifier
from archrv_tracker.services.resolution import ResolutionService
from archrv_tracker.settings import Settings

log = get_logger(__name__)


@dataclass(slots=True)
class AppContext:
    settings: Settings
    engine: AsyncEngine
    http: httpx.AsyncClient
    store: Store
    notifier: Notifier
    resolution: ResolutionService

    @classmethod
    async def create(
        cls,
        settings: Settings,
        *,
        deliver: Deliver | None = None,
        create_tables: bool | None = None,
    ) -> AppContext:
        """
        `deliver` replaces the Telegram client as the notifier's sink (tests, dry runs).
        Tables are created automatically in dev/test unless `create_tables` says otherwise.
        """

        if create_tables is None:
            create_tables = settings.env in ("dev", "test")
        engine = create_engine(settings)
        if create_tables:
            await init_db(engine)

        http = httpx.AsyncClient(timeout=settings.telegram_timeout_seconds)
        if deliver is None:
            deliver = TelegramClient(settings=settings, http=http).send_message

        store = Store(create_sessionmaker(engine))
        notifier = Notifier(deliver=deliver, interval=settings.notify_interval_seconds)
        notifier.start()
        log.info("context_ready", env=settings.env)
        return cls(
            settings=settings,
            engine=engine,
            http=http,
            store=store,
            notifier=notifier,
            resolution=ResolutionService(
                store=store, notifier=notifier, bot_alias=settings.bot_alias
            ),
        )

    async def aclose(self) -> None:
        # The notifier flushes its last batch through the HTTP client; close it first.
        await self.notifier.aclose()
        await self.http.aclose()
        await self.engine.dispose()
        log.info("context_closed")
