# tests/test_status_reporter.py
import pytest
from unittest.mock import MagicMock

from webcivil_scraper.core.config import AppSettings
from webcivil_scraper.db import crud
from webcivil_scraper.db.init_db import init_db
from webcivil_scraper.db.models import AgentStatusEnum
from webcivil_scraper.db.session import create_session_factory
from webcivil_scraper.services.status_reporter import (
    DatabaseStatusReporter,
    NullStatusReporter,
    build_status_reporter,
)


@pytest.fixture
def sqlite_factory(tmp_path):
    session_factory, engine = create_session_factory(f"sqlite:///{tmp_path / 'status.db'}")
    init_db(engine)
    yield session_factory, engine
    engine.dispose()


@pytest.mark.asyncio
async def test_report_upserts_agent_row(sqlite_factory):
    session_factory, engine = sqlite_factory
    reporter = DatabaseStatusReporter(session_factory, engine)

    await reporter.report("606529/2023", "Searching for case...")
    await reporter.report("606529/2023", "No case found", AgentStatusEnum.FAILED)

    db = session_factory()
    try:
        row = crud.get_agent_status(db, "scraper-606529-2023")
        assert row.current_step == "No case found"
        assert row.status == "failed"
        assert row.last_update is not None
    finally:
        db.close()


@pytest.mark.asyncio
async def test_report_swallows_database_errors():
    broken_factory = MagicMock(side_effect=RuntimeError("could not connect to server"))
    reporter = DatabaseStatusReporter(broken_factory)
    await reporter.report("606529/2023", "Connecting to browser...")
    broken_factory.assert_called_once()


def test_build_without_url_is_null(tmp_path):
    settings = AppSettings(DOWNLOAD_DIR=str(tmp_path), STATUS_DATABASE_URL=None)
    assert isinstance(build_status_reporter(settings), NullStatusReporter)


def test_build_with_url_is_database(tmp_path):
    settings = AppSettings(DOWNLOAD_DIR=str(tmp_path), STATUS_DATABASE_URL=f"sqlite:///{tmp_path / 'status.db'}")
    reporter = build_status_reporter(settings)
    try:
        assert isinstance(reporter, DatabaseStatusReporter)
    finally:
        reporter.close()


def test_build_with_unusable_url_falls_back(tmp_path):
    settings = AppSettings(DOWNLOAD_DIR=str(tmp_path), STATUS_DATABASE_URL="nosuchdialect://x")
    assert isinstance(build_status_reporter(settings), NullStatusReporter)
