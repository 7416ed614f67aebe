# webcivil_scraper/db/crud.py
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy.orm import Session
from webcivil_scraper.db import models as db_models
import logging

logger = logging.getLogger(__name__)

def get_agent_status(db: Session, agent_id: str) -> Optional[db_models.AgentStatus]:
    return db.query(db_models.AgentStatus).filter(db_models.AgentStatus.agent_id == agent_id).first()

def update_agent_status(
    db: Session,
    agent_id: str,
    current_step: str,
    status: db_models.AgentStatusEnum = db_models.AgentStatusEnum.SEARCHING,
) -> db_models.AgentStatus:
    """Updates the agent's row, inserting it if the dashboard has not registered the agent yet."""
    db_agent = get_agent_status(db, agent_id)
    if db_agent is None:
        db_agent = db_models.AgentStatus(agent_id=agent_id)
        db.add(db_agent)
    db_agent.current_step = current_step
    db_agent.status = status.value
    db_agent.last_update = datetime.now(timezone.utc)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(db_agent)
    return db_agent
