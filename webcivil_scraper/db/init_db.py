# webcivil_scraper/db/init_db.py
import logging
from sqlalchemy.engine import Engine
from webcivil_scraper.db.session import Base
from webcivil_scraper.db.models import AgentStatus  # noqa: F401  registers the table

logger = logging.getLogger(__name__)

def init_db(engine: Engine):
    logger.info("Initializing status database...")
    Base.metadata.create_all(bind=engine)
    logger.info("Status database tables verified.")

if __name__ == "__main__":
    from webcivil_scraper.core.config import load_settings
    from webcivil_scraper.db.session import create_session_factory
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    app_settings = load_settings()
    if not app_settings.STATUS_DATABASE_URL:
        logger.error("STATUS_DATABASE_URL is not configured; nothing to initialize.")
    else:
        _, db_engine = create_session_factory(app_settings.STATUS_DATABASE_URL)
        init_db(db_engine)
