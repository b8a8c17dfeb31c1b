"""
Candidate database model.

A person enrolled in training. The amount paid and the amount due are
derived from the transaction log, never stored.
"""

from sqlalchemy import Column, String, Boolean, DateTime, Float, Text
from sqlalchemy.sql import func
from backend.app.db.session import Base, generate_id
from backend.app.models.ledger_enums import CandidateStatus, WorkSupportStatus


class Candidate(Base):
    """
    Candidate model.

    Soft-deleted through `is_active` once financial history exists.
    """
    __tablename__ = "candidates"

    id = Column(String(64), primary_key=True, default=generate_id)
    name = Column(String(200), nullable=False)
    batch_id = Column(String(100), nullable=False, index=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    alternate_phone = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    referred_by = Column(String(200), nullable=True)

    # Total fee owed under the agreement
    agreed_amount = Column(Float, default=0.0, nullable=False)

    status = Column(String(100), default=CandidateStatus.TRAINING.value, nullable=False, index=True)
    placed_company = Column(String(200), nullable=True)
    package_details = Column(String(200), nullable=True)

    agreement_sent_date = Column(String(40), nullable=True)
    agreement_text = Column(Text, nullable=True)
    agreement_accepted_date = Column(String(40), nullable=True)

    work_support_status = Column(String(20), default=WorkSupportStatus.NONE.value, nullable=False)
    work_support_start_date = Column(String(40), nullable=True)
    work_support_end_date = Column(String(40), nullable=True)
    work_support_monthly_amount = Column(Float, nullable=True)

    # Base64-encoded file as uploaded, with its original filename
    resume = Column(Text, nullable=True)
    resume_name = Column(String(255), nullable=True)

    is_active = Column(Boolean, default=True, nullable=False, index=True)
    joined_date = Column(String(40), nullable=False)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Candidate(id={self.id}, name='{self.name}', status='{self.status}', active={self.is_active})>"
