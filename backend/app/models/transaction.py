"""
Transaction database model.

The atomic money-movement fact. Direction is encoded by the from/to
parties, never by the sign of the amount.
"""

from sqlalchemy import Column, String, Boolean, DateTime, Float, Enum, Text
from sqlalchemy.sql import func
from backend.app.db.session import Base, generate_id
from backend.app.models.ledger_enums import TransactionType, EntityKind


class Transaction(Base):
    """
    Transaction model.

    Parties are polymorphic references (id + kind) with no foreign keys;
    referential integrity is checked before deleting accounts, candidates
    and staff. Locked rows may only be changed by an admin.
    """
    __tablename__ = "transactions"

    id = Column(String(64), primary_key=True, default=generate_id)
    date = Column(String(40), nullable=False, index=True)  # ISO-8601, kept verbatim
    type = Column(Enum(TransactionType), nullable=False, index=True)
    amount = Column(Float, nullable=False)

    from_entity_id = Column(String(64), nullable=False, index=True)
    from_entity_type = Column(Enum(EntityKind), nullable=False)
    to_entity_id = Column(String(64), nullable=False, index=True)
    to_entity_type = Column(Enum(EntityKind), nullable=False)

    description = Column(Text, nullable=False, default="")
    category = Column(String(100), nullable=True)
    is_locked = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return (
            f"<Transaction(id={self.id}, type='{self.type.value}', amount={self.amount}, "
            f"from={self.from_entity_type.value}:{self.from_entity_id}, "
            f"to={self.to_entity_type.value}:{self.to_entity_id})>"
        )
