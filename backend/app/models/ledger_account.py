"""
Ledger Account database model.

A named bucket of money with an economic classification. Balances are
never stored; they are derived from the transaction log.
"""

from sqlalchemy import Column, String, Boolean, DateTime, Float, Integer, Enum, Text
from sqlalchemy.sql import func
from backend.app.db.session import Base, generate_id
from backend.app.models.ledger_enums import AccountType


class LedgerAccount(Base):
    """
    Ledger account model.

    System accounts (the default Office Cash account) cannot be deleted.
    Accounts with a recurring amount (salaries, rent) feed the payroll report.
    """
    __tablename__ = "ledger_accounts"

    id = Column(String(64), primary_key=True, default=generate_id)
    name = Column(String(200), nullable=False)
    type = Column(Enum(AccountType), nullable=False, index=True)
    sub_type = Column(String(100), nullable=True)
    is_system = Column(Boolean, default=False, nullable=False)
    opening_balance = Column(Float, default=0.0, nullable=False)
    description = Column(Text, nullable=True)

    # Fixed monthly obligation (payroll / rent)
    recurring_amount = Column(Float, nullable=True)
    recurring_start_date = Column(String(40), nullable=True)  # ISO-8601 date
    recurring_end_date = Column(String(40), nullable=True)
    recurring_due_day = Column(Integer, nullable=True)  # 1-31, clamped per month

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<LedgerAccount(id={self.id}, name='{self.name}', type='{self.type.value}')>"
