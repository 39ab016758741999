"""SQLAlchemy ORM models for the four record collections"""

import uuid
from sqlalchemy import Column, String, Boolean, Date, DateTime, Integer, Numeric, Text, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class IncomeRecordRow(Base):
    """Income record, internal or external depending on source"""

    __tablename__ = "income_record"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    source = Column(String(16), nullable=False)
    person_id = Column(String(20), nullable=False)
    full_name = Column(Text, nullable=False)
    institution_name = Column(Text, nullable=False)
    product_type = Column(Text, nullable=False)
    average_monthly_balance = Column(Numeric(14, 2), nullable=False)
    account_number = Column(String(32), nullable=False)
    last_updated = Column(Date, nullable=False)
    created_on = Column(Date, nullable=False)
    version = Column(Integer, nullable=False)
    inserted_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Optimistic locking: every UPDATE bumps version and checks the old value
    __mapper_args__ = {"version_id_col": version}
    __table_args__ = (Index("ix_income_record_source_person", "source", "person_id"),)


class ExpenseRecordRow(Base):
    """Expense (debt) record, internal or external depending on source"""

    __tablename__ = "expense_record"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    source = Column(String(16), nullable=False)
    person_id = Column(String(20), nullable=False)
    full_name = Column(Text, nullable=False)
    institution_name = Column(Text, nullable=False)
    product_type = Column(String(16), nullable=False)
    outstanding_balance = Column(Numeric(14, 2), nullable=False)
    months_remaining = Column(Integer, nullable=False)
    installment_amount = Column(Numeric(14, 2), nullable=False)
    delinquent = Column(Boolean, nullable=False, default=False)
    delinquent_last_three_months = Column(Boolean, nullable=False, default=False)
    last_updated = Column(Date, nullable=False)
    created_on = Column(Date, nullable=False)
    version = Column(Integer, nullable=False)
    inserted_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __mapper_args__ = {"version_id_col": version}
    __table_args__ = (Index("ix_expense_record_source_person", "source", "person_id"),)
