"""SQLAlchemy models for the feeledger database."""

from datetime import datetime, UTC
from typing import Optional
from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session
from sqlalchemy.types import TypeDecorator

from feeledger.domain.errors import ImmutabilityViolation
from feeledger.logging_config import get_logger

logger = get_logger(__name__)

Base = declarative_base()

# Execution option marking a unit that only reads
READ_ONLY_OPTION = "feeledger_read_only"


def utcnow() -> datetime:
    return datetime.now(UTC)


class UTCDateTime(TypeDecorator):
    """Timezone-aware datetime stored as naive UTC.

    SQLite drops tzinfo on the way back, so values are normalized to UTC
    when bound and re-tagged with UTC when loaded.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is not None:
            value = value.astimezone(UTC)
        return value.replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return value.replace(tzinfo=UTC)


class Household(Base):
    """Paying family model."""

    __tablename__ = "households"

    id = Column(Integer, primary_key=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    middle_name = Column(String, nullable=True)
    contact_number = Column(String, nullable=True)
    email = Column(String, unique=True, nullable=True)
    address = Column(String, nullable=True)
    paid = Column(Boolean, default=False, nullable=False)
    paid_at = Column(UTCDateTime, nullable=True)
    version = Column(Integer, nullable=False)
    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    # Relationships
    members = relationship("Member", back_populates="household", passive_deletes="all")
    income_transactions = relationship("IncomeTransaction", back_populates="household")


class MemberGroup(Base):
    """Section/class model."""

    __tablename__ = "member_groups"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    school_year = Column(String, nullable=False)
    grade_level = Column(Integer, nullable=True)
    created_at = Column(UTCDateTime, default=utcnow, nullable=False)

    __table_args__ = (UniqueConstraint("name", "school_year", name="uq_group_name_year"),)

    members = relationship("Member", back_populates="group")


class Member(Base):
    """Member (student) model."""

    __tablename__ = "members"

    id = Column(Integer, primary_key=True)
    member_code = Column(String, unique=True, nullable=False)
    household_id = Column(Integer, ForeignKey("households.id", ondelete="RESTRICT"), nullable=False)
    group_id = Column(Integer, ForeignKey("member_groups.id", ondelete="SET NULL"), nullable=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    middle_name = Column(String, nullable=True)
    paid = Column(Boolean, default=False, nullable=False)
    paid_at = Column(UTCDateTime, nullable=True)
    version = Column(Integer, nullable=False)
    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (Index("idx_members_household", "household_id"),)
    __mapper_args__ = {"version_id_col": version}

    # Relationships
    household = relationship("Household", back_populates="members")
    group = relationship("MemberGroup", back_populates="members")


class Category(Base):
    """Income or expense category model."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    kind = Column(String, nullable=False)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    scope = Column(String, nullable=True)
    default_amount = Column(Numeric(10, 2), nullable=True)
    budget_ceiling = Column(Numeric(12, 2), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("kind", "name", name="uq_category_kind_name"),
        CheckConstraint("kind IN ('income', 'expense')", name="ck_category_kind"),
        CheckConstraint(
            "(kind = 'income' AND scope IN ('household', 'member')) OR "
            "(kind = 'expense' AND scope IS NULL)",
            name="ck_category_scope",
        ),
        CheckConstraint("default_amount IS NULL OR default_amount >= 0", name="ck_category_default_amount"),
        CheckConstraint("budget_ceiling IS NULL OR budget_ceiling >= 0", name="ck_category_budget_ceiling"),
    )


class IncomeTransaction(Base):
    """Income transaction model."""

    __tablename__ = "income_transactions"

    id = Column(Integer, primary_key=True)
    transaction_number = Column(String, unique=True, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False)
    household_id = Column(Integer, ForeignKey("households.id", ondelete="RESTRICT"), nullable=False)
    member_id = Column(Integer, ForeignKey("members.id", ondelete="SET NULL"), nullable=True)
    amount = Column(Numeric(10, 2), nullable=False)
    payment_method = Column(String, nullable=False, default="Cash")
    reference_number = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    receipt_issued = Column(Boolean, default=False, nullable=False)
    school_year = Column(String, nullable=False)
    recorded_by = Column(String, nullable=False)
    recorded_at = Column(UTCDateTime, nullable=False)

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_income_amount_positive"),
        Index("idx_income_household", "household_id"),
        Index("idx_income_school_year", "school_year"),
    )

    # Relationships
    household = relationship("Household", back_populates="income_transactions")
    category = relationship("Category")
    attachments = relationship("Attachment", back_populates="income_transaction", passive_deletes="all")


class ExpenseTransaction(Base):
    """Expense transaction model."""

    __tablename__ = "expense_transactions"

    id = Column(Integer, primary_key=True)
    transaction_number = Column(String, unique=True, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    description = Column(String, nullable=False)
    vendor_name = Column(String, nullable=True)
    payment_method = Column(String, nullable=False, default="Cash")
    reference_number = Column(String, nullable=True)
    approved_by = Column(String, nullable=True)
    expense_date = Column(Date, nullable=False)
    school_year = Column(String, nullable=False)
    recorded_by = Column(String, nullable=False)
    recorded_at = Column(UTCDateTime, nullable=False)

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_expense_amount_positive"),
        Index("idx_expense_school_year", "school_year"),
    )

    category = relationship("Category")
    attachments = relationship("Attachment", back_populates="expense_transaction", passive_deletes="all")


class Attachment(Base):
    """Receipt attachment model owned by exactly one transaction."""

    __tablename__ = "attachments"

    id = Column(Integer, primary_key=True)
    income_transaction_id = Column(
        Integer, ForeignKey("income_transactions.id", ondelete="CASCADE"), nullable=True
    )
    expense_transaction_id = Column(
        Integer, ForeignKey("expense_transactions.id", ondelete="CASCADE"), nullable=True
    )
    file_name = Column(String, nullable=False)
    file_path = Column(String, nullable=False)
    file_size = Column(Integer, nullable=True)
    mime_type = Column(String, nullable=True)
    uploaded_by = Column(String, nullable=False)
    created_at = Column(UTCDateTime, default=utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "(income_transaction_id IS NOT NULL AND expense_transaction_id IS NULL) OR "
            "(income_transaction_id IS NULL AND expense_transaction_id IS NOT NULL)",
            name="ck_attachment_single_owner",
        ),
    )

    income_transaction = relationship("IncomeTransaction", back_populates="attachments")
    expense_transaction = relationship("ExpenseTransaction", back_populates="attachments")


class AuditEntry(Base):
    """Append-only audit log model."""

    __tablename__ = "audit_entries"

    id = Column(Integer, primary_key=True)
    entity_name = Column(String, nullable=False)
    entity_id = Column(Integer, nullable=False)
    seq = Column(Integer, nullable=False)
    operation = Column(String, nullable=False)
    prior_values = Column(JSON, nullable=True)
    new_values = Column(JSON, nullable=True)
    principal = Column(String, nullable=False)
    recorded_at = Column(UTCDateTime, default=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("entity_name", "entity_id", "seq", name="uq_audit_entity_seq"),
        CheckConstraint("operation IN ('insert', 'update', 'delete')", name="ck_audit_operation"),
    )


class SequenceCounter(Base):
    """Named monotonic counter; one row per sequence."""

    __tablename__ = "sequence_counters"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    current_value = Column(Integer, nullable=False, default=0)


def _refuse_audit_update(mapper, connection, target):
    logger.error(
        "immutability_violation_blocked",
        extra={"entity_type": "AuditEntry", "entity_id": target.id, "operation": "UPDATE"},
    )
    raise ImmutabilityViolation(f"Audit entry {target.id} is immutable and cannot be modified")


def _refuse_audit_delete(mapper, connection, target):
    logger.error(
        "immutability_violation_blocked",
        extra={"entity_type": "AuditEntry", "entity_id": target.id, "operation": "DELETE"},
    )
    raise ImmutabilityViolation(f"Audit entry {target.id} cannot be deleted")


event.listen(AuditEntry, "before_update", _refuse_audit_update)
event.listen(AuditEntry, "before_delete", _refuse_audit_delete)


def begin_statement(conn) -> str:
    """Return the statement that opens a SQLite unit on ``conn``."""
    if conn.get_execution_options().get(READ_ONLY_OPTION):
        return "BEGIN"
    return "BEGIN IMMEDIATE"


def _install_sqlite_hooks(engine: Engine) -> None:
    """Make SQLite write units begin with BEGIN IMMEDIATE and enforce foreign keys.

    pysqlite's own transaction handling is switched off so that the write
    lock is taken when a write unit starts, serializing concurrent writers.
    Read-only units begin DEFERRED and only take a shared lock.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql(begin_statement(conn))


def create_session_factory(database_url: str, busy_timeout: Optional[float] = None) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory and the schema it needs."""
    connect_args = {}
    is_sqlite = database_url.startswith("sqlite")
    if is_sqlite:
        connect_args = {"check_same_thread": False}
        if busy_timeout is not None:
            connect_args["timeout"] = busy_timeout
    engine = create_engine(database_url, echo=False, connect_args=connect_args)
    if is_sqlite:
        _install_sqlite_hooks(engine)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)
