"""SQLAlchemy-backed store for prediction verdicts.

Records are keyed by their generated id, written once per successful
prediction and read back in full for the history endpoint.
"""
from __future__ import annotations

from typing import List, Tuple

from sqlalchemy import Column, String, Text, create_engine, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from ..errors import StoreError
from ..schemas import VerdictRecord
from ..utils.logger import get_logger

logger = get_logger(__name__)

Base = declarative_base()


class PredictionRow(Base):
    __tablename__ = "predictions"
    id = Column(String(36), primary_key=True)
    result = Column(String(32), nullable=False)
    suggestion = Column(Text, nullable=False)
    created_at = Column(String(32), nullable=False)

    def to_record(self) -> VerdictRecord:
        return VerdictRecord(
            id=self.id,
            result=self.result,
            suggestion=self.suggestion,
            createdAt=self.created_at,
        )


class ResultStore:
    def __init__(self, database_url: str) -> None:
        connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
        self.engine = create_engine(database_url, future=True, connect_args=connect_args)
        self._session_factory = sessionmaker(bind=self.engine, autoflush=False, future=True)

    def create_schema(self) -> None:
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not create schema: {exc}") from exc

    def save(self, record: VerdictRecord) -> None:
        """Write ``record`` under its id, replacing any existing row with that id."""
        row = PredictionRow(
            id=record.id,
            result=record.result,
            suggestion=record.suggestion,
            created_at=record.createdAt,
        )
        try:
            with self._session_factory.begin() as session:
                session.merge(row)
        except SQLAlchemyError as exc:
            logger.error("Failed to persist prediction", id=record.id, error=str(exc))
            raise StoreError(f"Could not save prediction {record.id}") from exc

    def list_all(self) -> List[Tuple[str, VerdictRecord]]:
        """Return every stored record as ``(id, record)`` pairs, unpaginated."""
        try:
            with self._session_factory() as session:
                rows = session.execute(select(PredictionRow)).scalars().all()
                return [(row.id, row.to_record()) for row in rows]
        except SQLAlchemyError as exc:
            logger.error("Failed to read prediction history", error=str(exc))
            raise StoreError("Could not read prediction history") from exc

    def close(self) -> None:
        self.engine.dispose()
