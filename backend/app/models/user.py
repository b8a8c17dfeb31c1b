"""
User database model.

Staff, administrators and candidate portal users. Staff users are also
balance-bearing participants (EntityKind.STAFF) in the transaction log.
"""

from sqlalchemy import Column, String, Boolean, DateTime, Enum, JSON
from sqlalchemy.sql import func
from backend.app.db.session import Base, generate_id
from backend.app.models.enums import UserRole


class User(Base):
    """
    User model for authentication and staff management.
    """
    __tablename__ = "users"

    id = Column(String(64), primary_key=True, default=generate_id)
    name = Column(String(200), nullable=False)
    username = Column(String(255), unique=True, index=True, nullable=False)
    email = Column(String(255), nullable=True)
    hashed_password = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    role = Column(Enum(UserRole), default=UserRole.STAFF, nullable=False)

    # Module permissions for staff, e.g. ["candidates", "finance", "users"]
    modules = Column(JSON, default=list, nullable=False)

    # Candidate portal users point at their candidate record
    linked_candidate_id = Column(String(64), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}', role='{self.role.value}')>"
