"""SQLAlchemy models for bilanzkit database."""

from datetime import datetime, UTC
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import column_property, declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class ChartOfAccounts(Base):
    """Chart of accounts (Kontenrahmen) model."""

    __tablename__ = "charts_of_accounts"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    account_templates = relationship(
        "AccountTemplate", back_populates="chart_of_accounts", cascade="all, delete-orphan"
    )


class AccountTemplate(Base):
    """Account template model."""

    __tablename__ = "account_templates"

    id = Column(Integer, primary_key=True)
    chart_of_accounts_id = Column(Integer, ForeignKey("charts_of_accounts.id"), nullable=False)
    code = Column(String(5), nullable=False)
    name = Column(String, nullable=False)
    account_type = Column(String, nullable=False)
    presentation_rule = Column(String, nullable=True)
    is_system_account = Column(Boolean, default=False, nullable=False)

    __table_args__ = (UniqueConstraint("chart_of_accounts_id", "code", name="uq_template_chart_code"),)

    # Relationships
    chart_of_accounts = relationship("ChartOfAccounts", back_populates="account_templates")


class Company(Base):
    """Company model."""

    __tablename__ = "companies"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    chart_of_accounts_id = Column(Integer, ForeignKey("charts_of_accounts.id"), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    accounts = relationship("Account", back_populates="company", cascade="all, delete-orphan")
    fiscal_years = relationship("FiscalYear", back_populates="company", cascade="all, delete-orphan")


class Account(Base):
    """Ledger account model."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False)
    code = Column(String(5), nullable=False)
    name = Column(String, nullable=False)
    account_type = Column(String, nullable=False)
    presentation_rule = Column(String, nullable=True)
    is_system_account = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (UniqueConstraint("company_id", "code", name="uq_account_company_code"),)

    # Relationships
    company = relationship("Company", back_populates="accounts")
    line_items = relationship("LineItem", back_populates="account")


class FiscalYear(Base):
    """Fiscal year model."""

    __tablename__ = "fiscal_years"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False)
    year = Column(Integer, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    opening_balance_posted_at = Column(DateTime, nullable=True)
    closing_balance_posted_at = Column(DateTime, nullable=True)
    closed = column_property(Column(Boolean, default=False, nullable=False), active_history=True)
    closed_at = Column(DateTime, nullable=True)

    __table_args__ = (UniqueConstraint("company_id", "year", name="uq_fiscal_year_company_year"),)

    # Relationships
    company = relationship("Company", back_populates="fiscal_years")
    journal_entries = relationship("JournalEntry", back_populates="fiscal_year")
    balance_sheets = relationship("BalanceSheet", back_populates="fiscal_year")


class JournalEntry(Base):
    """Journal entry model."""

    __tablename__ = "journal_entries"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False)
    fiscal_year_id = Column(Integer, ForeignKey("fiscal_years.id"), nullable=False)
    booking_date = Column(Date, nullable=False)
    description = Column(String, nullable=False)
    entry_type = Column(String, default="normal", nullable=False)
    sequence = Column(Integer, nullable=False)
    posted_at = column_property(Column(DateTime, nullable=True), active_history=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    fiscal_year = relationship("FiscalYear", back_populates="journal_entries")
    line_items = relationship(
        "LineItem",
        back_populates="journal_entry",
        cascade="all, delete-orphan",
        order_by="LineItem.id",
    )


class LineItem(Base):
    """Journal entry line item model."""

    __tablename__ = "line_items"

    id = Column(Integer, primary_key=True)
    journal_entry_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=False)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    amount = Column(Numeric(13, 2), nullable=False)
    direction = Column(String, nullable=False)

    # Relationships
    journal_entry = relationship("JournalEntry", back_populates="line_items")
    account = relationship("Account", back_populates="line_items")


class BalanceSheet(Base):
    """Stored balance sheet snapshot model."""

    __tablename__ = "balance_sheets"

    id = Column(Integer, primary_key=True)
    fiscal_year_id = Column(Integer, ForeignKey("fiscal_years.id"), nullable=False)
    sheet_type = Column(String, nullable=False)
    source = Column(String, nullable=False)
    balance_date = Column(Date, nullable=False)
    data = Column(JSON, nullable=False)
    posted_at = column_property(Column(DateTime, nullable=True), active_history=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        UniqueConstraint("fiscal_year_id", "sheet_type", name="uq_balance_sheet_year_type"),
    )

    # Relationships
    fiscal_year = relationship("FiscalYear", back_populates="balance_sheets")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory with the immutability guards attached."""
    from bilanzkit.database.immutability import register_immutability_guards

    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    session_factory = sessionmaker(bind=engine)
    register_immutability_guards(session_factory)
    return session_factory
