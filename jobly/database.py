"""
Database schema and connection management.

Tables are declared with SQLAlchemy; queries run as parameterized text
statements through an Engine (see jobly.repositories).
"""

from pathlib import Path

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Company(Base):
    """Company table."""

    __tablename__ = "companies"

    handle = Column(String(25), primary_key=True)  # lowercase slug
    name = Column(Text, nullable=False, unique=True)
    num_employees = Column(Integer, CheckConstraint("num_employees >= 0"))
    description = Column(Text, nullable=False)
    logo_url = Column(Text)


class Job(Base):
    """Job posting table."""

    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False)
    salary = Column(Integer, CheckConstraint("salary >= 0"))
    equity = Column(Numeric, CheckConstraint("equity <= 1.0"))
    company_handle = Column(
        String(25),
        ForeignKey("companies.handle", ondelete="CASCADE"),
        nullable=False,
    )


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_engine(db_url: str) -> Engine:
    """
    Create an engine for `db_url`.

    Args:
        db_url: SQLAlchemy URL, e.g. postgresql+psycopg2://localhost/jobly
            or sqlite:///data/jobly.db

    Returns:
        SQLAlchemy Engine
    """
    url = make_url(db_url)
    is_sqlite = url.get_backend_name() == "sqlite"
    if is_sqlite and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(url)
    if is_sqlite:
        # ON DELETE CASCADE needs foreign key enforcement
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def init_database(db_url: str) -> Engine:
    """
    Initialize database and create tables.

    Args:
        db_url: SQLAlchemy URL

    Returns:
        Engine bound to the initialized database
    """
    engine = get_engine(db_url)
    Base.metadata.create_all(engine)
    return engine
