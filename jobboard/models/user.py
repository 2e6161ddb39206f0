"""User model definitions."""

from sqlalchemy import Column, ForeignKey, Integer, String, Table
from jobboard.database import Base

ROLE_STUDENT = "student"
ROLE_ADMIN = "admin"
ROLES = frozenset({ROLE_STUDENT, ROLE_ADMIN})


user_favorites = Table(
    "user_favorites",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("job_id", Integer, ForeignKey("jobs.id", ondelete="CASCADE"), primary_key=True),
)


class User(Base):
    """Represents a registered account."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(String, nullable=False, default=ROLE_STUDENT)  # student/admin
    first_name = Column(String, nullable=False, default="")
    last_name = Column(String, nullable=False, default="")
