# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Data-access layer for identities and visits on a relational database."""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import (
    JSON, CheckConstraint, Column, DateTime, ForeignKey, Index, MetaData,
    String, Table, Text, func, insert, select, text, update,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from checkin.core.errors import ConflictError, NotFoundError
from checkin.repositories.base import VisitorRepository, as_utc, store_errors

metadata = MetaData()

users = Table(
    "users", metadata,
    Column("id", String(36), primary_key=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("name", String(100), nullable=False),
    Column("preferred_name", String(100), nullable=False),
    Column("workplace", String(255), nullable=False),
    Column("disciplines", JSON, nullable=False),
    Column("pin_hash", String(200)),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    Index("idx_users_updated_at", "updated_at"),
)

visits = Table(
    "visits", metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("timestamp", DateTime(timezone=True), nullable=False),
    Column("reason", Text, nullable=False),
    Column("disciplines_at_visit", JSON, nullable=False),
    CheckConstraint("length(reason) >= 10 AND length(reason) <= 500", name="visits_reason_length"),
    Index("idx_visits_user_id", "user_id"),
    Index("idx_visits_timestamp", "timestamp"),
    Index("idx_visits_user_timestamp", "user_id", "timestamp"),
)

USER_COLS = (
    users.c.id, users.c.email, users.c.name, users.c.preferred_name, users.c.workplace,
    users.c.disciplines, users.c.pin_hash, users.c.created_at, users.c.updated_at,
)
VISIT_COLS = (
    visits.c.id, visits.c.user_id, visits.c.timestamp, visits.c.reason,
    visits.c.disciplines_at_visit,
)


def _utc(value: datetime) -> datetime:
    return value.astimezone(timezone.utc)


def _user_to_dict(row) -> Dict[str, Any]:
    m = row._mapping
    return {
        "id": m["id"],
        "email": m["email"],
        "name": m["name"],
        "preferred_name": m["preferred_name"] or "",
        "workplace": m["workplace"] or "",
        "disciplines": list(m["disciplines"] or []),
        "pin_hash": m["pin_hash"] or "",
        "created_at": as_utc(m["created_at"]),
        "updated_at": as_utc(m["updated_at"]),
    }


def _visit_to_dict(row) -> Dict[str, Any]:
    m = row._mapping
    out = {
        "id": m["id"],
        "user_id": m["user_id"],
        "timestamp": as_utc(m["timestamp"]),
        "reason": m["reason"],
        "disciplines_at_visit": list(m["disciplines_at_visit"] or []),
    }
    if "name" in m:
        out["name"] = m["name"]
        out["email"] = m["email"]
    return out


class SQLVisitorRepository(VisitorRepository):
    backend = "sql"

    def __init__(self, engine: Engine):
        self._engine = engine

    def create_schema(self):
        with store_errors("create_schema", SQLAlchemyError):
            metadata.create_all(self._engine)

    # ── Identities ─────────────────────────────────────────────────────

    def get_user_by_id(self, user_id: str) -> Optional[Dict[str, Any]]:
        with store_errors("get_user_by_id", SQLAlchemyError):
            with self._engine.connect() as conn:
                row = conn.execute(select(*USER_COLS).where(users.c.id == user_id)).first()
        return _user_to_dict(row) if row else None

    def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        with store_errors("get_user_by_email", SQLAlchemyError):
            with self._engine.connect() as conn:
                row = conn.execute(select(*USER_COLS).where(users.c.email == email)).first()
        return _user_to_dict(row) if row else None

    def list_users(self) -> List[Dict[str, Any]]:
        with store_errors("list_users", SQLAlchemyError):
            with self._engine.connect() as conn:
                rows = conn.execute(
                    select(*USER_COLS).order_by(users.c.updated_at.desc())
                ).fetchall()
        return [_user_to_dict(r) for r in rows]

    def create_user(self, user: Dict[str, Any]) -> None:
        values = dict(user)
        values["created_at"] = _utc(values["created_at"])
        values["updated_at"] = _utc(values["updated_at"])
        with store_errors("create_user", SQLAlchemyError):
            try:
                with self._engine.begin() as conn:
                    conn.execute(insert(users).values(**values))
            except IntegrityError as exc:
                raise ConflictError("Email already registered") from exc

    def update_user(self, user_id: str, fields: Dict[str, Any]) -> None:
        values = dict(fields)
        if "updated_at" in values:
            values["updated_at"] = _utc(values["updated_at"])
        with store_errors("update_user", SQLAlchemyError):
            with self._engine.begin() as conn:
                updated = conn.execute(
                    update(users).where(users.c.id == user_id).values(**values)
                ).rowcount
        if updated == 0:
            raise NotFoundError("User not found")

    # ── Visits ─────────────────────────────────────────────────────────

    def get_latest_visit(self, user_id: str) -> Optional[Dict[str, Any]]:
        with store_errors("get_latest_visit", SQLAlchemyError):
            with self._engine.connect() as conn:
                row = conn.execute(
                    select(*VISIT_COLS)
                    .where(visits.c.user_id == user_id)
                    .order_by(visits.c.timestamp.desc())
                    .limit(1)
                ).first()
        return _visit_to_dict(row) if row else None

    def record_visit(self, visit: Dict[str, Any], since: datetime) -> bool:
        ts = _utc(visit["timestamp"])
        with store_errors("record_visit", SQLAlchemyError):
            with self._engine.begin() as conn:
                recent = conn.execute(
                    select(visits.c.id)
                    .where(visits.c.user_id == visit["user_id"], visits.c.timestamp >= _utc(since))
                    .limit(1)
                ).first()
                if recent:
                    return False
                conn.execute(insert(visits).values(**{**visit, "timestamp": ts}))
                conn.execute(
                    update(users).where(users.c.id == visit["user_id"]).values(updated_at=ts)
                )
        return True

    def count_visits_since(self, since: datetime) -> int:
        with store_errors("count_visits_since", SQLAlchemyError):
            with self._engine.connect() as conn:
                return conn.execute(
                    select(func.count()).select_from(visits).where(visits.c.timestamp >= _utc(since))
                ).scalar() or 0

    def list_visit_disciplines(self) -> List[List[str]]:
        with store_errors("list_visit_disciplines", SQLAlchemyError):
            with self._engine.connect() as conn:
                rows = conn.execute(select(visits.c.disciplines_at_visit)).fetchall()
        return [list(r[0] or []) for r in rows]

    def list_visits(self, start: Optional[datetime] = None, end: Optional[datetime] = None,
                    limit: Optional[int] = None) -> List[Dict[str, Any]]:
        stmt = (
            select(*VISIT_COLS, users.c.name, users.c.email)
            .select_from(visits.join(users, visits.c.user_id == users.c.id))
        )
        if start is not None:
            stmt = stmt.where(visits.c.timestamp >= _utc(start))
        if end is not None:
            stmt = stmt.where(visits.c.timestamp <= _utc(end))
        stmt = stmt.order_by(visits.c.timestamp.desc())
        if limit is not None:
            stmt = stmt.limit(limit)
        with store_errors("list_visits", SQLAlchemyError):
            with self._engine.connect() as conn:
                rows = conn.execute(stmt).fetchall()
        return [_visit_to_dict(r) for r in rows]

    def list_user_visits(self, user_id: str) -> List[Dict[str, Any]]:
        with store_errors("list_user_visits", SQLAlchemyError):
            with self._engine.connect() as conn:
                rows = conn.execute(
                    select(*VISIT_COLS)
                    .where(visits.c.user_id == user_id)
                    .order_by(visits.c.timestamp.desc())
                ).fetchall()
        return [_visit_to_dict(r) for r in rows]

    def count_visits_by_user(self) -> Dict[str, int]:
        with store_errors("count_visits_by_user", SQLAlchemyError):
            with self._engine.connect() as conn:
                rows = conn.execute(
                    select(visits.c.user_id, func.count()).group_by(visits.c.user_id)
                ).fetchall()
        return {r[0]: r[1] for r in rows}

    # ── Lifecycle ──────────────────────────────────────────────────────

    def verify_connection(self):
        with self._engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def dispose(self):
        self._engine.dispose()
