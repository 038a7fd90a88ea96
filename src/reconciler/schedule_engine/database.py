"""Database setup and models for storing schedule runs."""

from datetime import datetime, timezone
from typing import Iterable

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint, create_engine
from sqlalchemy.orm import DeclarativeBase, Session

from .models import ComparisonResult, ScheduleEntry


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


class ScheduleSource(Base):
    """One processed schedule document."""
    __tablename__ = "schedule_sources"

    id = Column(Integer, primary_key=True)
    file_path = Column(String(500), nullable=False)
    location = Column(String(200), nullable=False)
    processed_at = Column(DateTime, nullable=True)


class DerivedClass(Base):
    """A class slot recovered from the schedule document."""
    __tablename__ = "derived_classes"
    __table_args__ = (UniqueConstraint("source_id", "identity_key"),)

    id = Column(Integer, primary_key=True)
    source_id = Column(Integer, ForeignKey("schedule_sources.id"), nullable=False)
    identity_key = Column(String(500), nullable=False)
    day = Column(String(20), nullable=False)
    time = Column(String(20), nullable=False)
    class_name = Column(String(200), nullable=False)
    trainer = Column(String(200), nullable=False)
    location = Column(String(200), nullable=False)
    theme = Column(String(200), nullable=True)


class ReconciliationRow(Base):
    """One row of the reconciliation report for a source."""
    __tablename__ = "reconciliation_rows"

    id = Column(Integer, primary_key=True)
    source_id = Column(Integer, ForeignKey("schedule_sources.id"), nullable=False)
    is_match = Column(Boolean, nullable=False)
    mismatch_reason = Column(String(200), nullable=True)
    # comma-separated field names
    discrepancy_fields = Column(String(200), nullable=True)
    authoritative_key = Column(String(500), nullable=True)
    derived_key = Column(String(500), nullable=True)


def get_db_engine(db_path: str = "schedule_data.db"):
    """
    Create and return a SQLAlchemy Engine connected to SQLite database.

    Args:
        db_path: Path to the SQLite database file, or ":memory:"

    Returns:
        sqlalchemy.Engine: Database engine instance
    """
    return create_engine(f"sqlite:///{db_path}", echo=False)


def create_tables(engine) -> None:
    """
    Create all database tables defined in Base.metadata.

    Args:
        engine: SQLAlchemy Engine instance
    """
    Base.metadata.create_all(engine)


def save_run(
    engine,
    file_path: str,
    location: str,
    entries: Iterable[ScheduleEntry],
    results: Iterable[ComparisonResult] = (),
) -> int:
    """
    Store a derived schedule and its reconciliation report.

    Args:
        engine: SQLAlchemy Engine instance
        file_path: Processed document
        location: Studio location
        entries: Derived schedule entries
        results: Reconciliation results, if any

    Returns:
        ID of the new ScheduleSource row
    """
    with Session(engine) as session:
        source = ScheduleSource(
            file_path=str(file_path),
            location=location,
            processed_at=datetime.now(timezone.utc),
        )
        session.add(source)
        session.flush()

        session.add_all([
            DerivedClass(
                source_id=source.id,
                identity_key=entry.identity_key,
                day=entry.day,
                time=entry.time,
                class_name=entry.class_name,
                trainer=entry.trainer,
                location=entry.location,
                theme=entry.theme,
            )
            for entry in entries
        ])
        session.add_all([
            ReconciliationRow(
                source_id=source.id,
                is_match=result.is_match,
                mismatch_reason=result.mismatch_reason or None,
                discrepancy_fields=','.join(sorted(result.discrepancy_fields)) or None,
                authoritative_key=result.authoritative.identity_key if result.authoritative else None,
                derived_key=result.derived.identity_key if result.derived else None,
            )
            for result in results
        ])

        session.commit()
        return source.id
