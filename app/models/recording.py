"""Recording model."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String

from app.database import Base

# Reserved name of the row holding the portal configuration. Respondent names
# equal to it are rejected on commit.
PORTAL_SENTINEL_NAME = "__portal_config__"


class Recording(Base):
    """Submitted video, or the portal configuration when named with the sentinel."""

    __tablename__ = "recording"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(256), nullable=False, index=True)
    url = Column(String(1024), nullable=False)  # canonical object URL, or the slug for the sentinel row
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
