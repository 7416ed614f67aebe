# webcivil_scraper/services/status_reporter.py
import asyncio
import logging
from typing import Optional
from sqlalchemy.orm import sessionmaker
from sqlalchemy.engine import Engine

from webcivil_scraper.core.config import AppSettings
from webcivil_scraper.db import crud
from webcivil_scraper.db.models import AgentStatusEnum
from webcivil_scraper.utils import common

logger = logging.getLogger(__name__)


class StatusReporter:
    """Progress sink for a scrape run. Implementations must never raise from report()."""

    async def report(self, index_number: str, step: str, status: AgentStatusEnum = AgentStatusEnum.SEARCHING) -> None:
        raise NotImplementedError

    def close(self) -> None:
        pass


class NullStatusReporter(StatusReporter):
    async def report(self, index_number: str, step: str, status: AgentStatusEnum = AgentStatusEnum.SEARCHING) -> None:
        logger.debug(f"[{index_number}] {step} ({status.value})")


class DatabaseStatusReporter(StatusReporter):
    def __init__(self, session_factory: sessionmaker, engine: Optional[Engine] = None):
        self.session_factory = session_factory
        self.engine = engine

    def _write(self, agent_id: str, step: str, status: AgentStatusEnum) -> None:
        db = self.session_factory()
        try:
            crud.update_agent_status(db, agent_id, step, status)
        finally:
            db.close()

    async def report(self, index_number: str, step: str, status: AgentStatusEnum = AgentStatusEnum.SEARCHING) -> None:
        agent_id = common.agent_id_for(index_number)
        try:
            await asyncio.to_thread(self._write, agent_id, step, status)
            logger.debug(f"[{index_number}] Status '{step}' ({status.value}) written for {agent_id}.")
        except Exception as e:
            logger.warning(f"[{index_number}] Ignoring status sink error for {agent_id}: {e}")

    def close(self) -> None:
        if self.engine is not None:
            self.engine.dispose()


def build_status_reporter(settings: AppSettings) -> StatusReporter:
    if not settings.STATUS_DATABASE_URL:
        logger.info("STATUS_DATABASE_URL not configured. Progress reporting disabled.")
        return NullStatusReporter()
    try:
        from webcivil_scraper.db.session import create_session_factory
        session_factory, engine = create_session_factory(settings.STATUS_DATABASE_URL)
        return DatabaseStatusReporter(session_factory, engine)
    except Exception as e:
        logger.warning(f"Could not set up status database ({e}). Progress reporting disabled.")
        return NullStatusReporter()
