# webcivil_scraper/db/models.py
from sqlalchemy import Column, String, DateTime, Text
from sqlalchemy.sql import func
from webcivil_scraper.db.session import Base
import enum


class AgentStatusEnum(str, enum.Enum):
    SEARCHING = "searching"
    FAILED = "failed"


class AgentStatus(Base):
    """One row per scraper agent, polled by the progress dashboard."""
    __tablename__ = "agent_status"

    agent_id = Column(String, primary_key=True)
    current_step = Column(Text, nullable=True)
    status = Column(String, default=AgentStatusEnum.SEARCHING.value, nullable=False)
    last_update = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<AgentStatus(agent_id='{self.agent_id}', status='{self.status}')>"
