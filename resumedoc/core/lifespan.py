import contextlib
from contextlib import asynccontextmanager
import asyncio
import logging

from resumedoc.analytics.db import init_db, purge_old_records
from resumedoc.core.config import settings
from resumedoc.core.config.scoring import ScoringConfigCache
from resumedoc.export.templates import TemplateCatalog

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    init_db()
    purge_old_records()

    app.state.scoring_config = ScoringConfigCache(settings.scoring_config_path)
    app.state.scoring_config.get()
    app.state.template_catalog = TemplateCatalog(settings.templates_path)
    app.state.template_catalog.get()

    stop_event = asyncio.Event()

    async def periodic_purge() -> None:
        while not stop_event.is_set():
            try:
                deleted = purge_old_records()
                if any(deleted.values()):
                    logger.info("analytics_retention_purge deleted=%s", deleted)
            except Exception as exc:  # pragma: no cover
                logger.warning("analytics_retention_purge_failed: %s", exc)
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=3600)
            except asyncio.TimeoutError:
                continue

    purge_task = asyncio.create_task(periodic_purge())
    yield
    stop_event.set()
    if not purge_task.done():
        purge_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await purge_task
