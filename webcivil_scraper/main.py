# webcivil_scraper/main.py
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI

from webcivil_scraper.core.config import load_settings, get_app_settings
from webcivil_scraper.core.lifespan import lifespan_manager
from webcivil_scraper.api.routers import cases as cases_router, health as health_router

initial_settings = load_settings()

logging.basicConfig(
    level=getattr(logging, initial_settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app_fastapi: FastAPI):
    logger.info("FastAPI application startup...")
    async with lifespan_manager(app_fastapi):
        logger.info("FastAPI application startup complete.")
        yield
        logger.info("FastAPI application shutdown...")
    logger.info("FastAPI application shutdown complete.")


app = FastAPI(
    title="WebCivil Foreclosure Document Scraper API",
    lifespan=app_lifespan,
    openapi_url="/api/v1/openapi.json"
)

app.include_router(health_router.router, prefix="/api/v1", tags=["Health"])
app.include_router(cases_router.router, prefix="/api/v1/cases", tags=["Cases"])


def run():
    import uvicorn
    effective_settings = get_app_settings()
    logger.info(f"Starting Uvicorn server on {effective_settings.HOST}:{effective_settings.PORT}")
    uvicorn.run(
        "webcivil_scraper.main:app",
        host=effective_settings.HOST,
        port=effective_settings.PORT,
        log_level=effective_settings.LOG_LEVEL.lower()
    )


if __name__ == "__main__":
    run()
