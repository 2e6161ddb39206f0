"""Job model definitions."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Text
from jobboard.database import Base

JOB_TYPES = ("Full-Time", "Part-Time", "Contract")


class Job(Base):
    """Represents a posted job."""
    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    location = Column(String, nullable=False, default="")
    job_type = Column("type", String, nullable=False, default="Full-Time")
    company = Column(String, nullable=False, default="")
    posted_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
