"""Application model definitions."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from jobboard.database import Base
from jobboard.models.job import Job
from jobboard.models.user import User

STATUS_PENDING = "pending"


class Application(Base):
    """One user's submission for one job."""
    __tablename__ = "applications"
    __table_args__ = (
        UniqueConstraint("job_id", "user_id", name="uq_applications_job_user"),
    )

    id = Column(Integer, primary_key=True)
    job_id = Column(Integer, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    resume_ref = Column(String, nullable=False)
    message = Column(Text)
    status = Column(String, nullable=False, default=STATUS_PENDING)
    applied_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    job = relationship(Job, lazy="joined")
    user = relationship(User, lazy="joined")
