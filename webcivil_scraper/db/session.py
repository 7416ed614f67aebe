# webcivil_scraper/db/session.py
from typing import Tuple
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
import logging

logger = logging.getLogger(__name__)

Base = declarative_base()


def create_session_factory(database_url: str) -> Tuple[sessionmaker, Engine]:
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    engine = create_engine(database_url, connect_args=connect_args, pool_pre_ping=True)
    logger.info(f"Status database engine created for dialect '{engine.dialect.name}'.")
    return sessionmaker(autocommit=False, autoflush=False, bind=engine), engine
