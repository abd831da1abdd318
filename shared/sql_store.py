"""
SQLAlchemy-backed document store.

All collections share the `documents` table; query predicates are pushed down as
JSON path expressions so Postgres (JSONB) and SQLite (JSON1) both evaluate them.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import NotFound, StoreFault
from .models import Document
from .store import OPS, Predicate, Snapshot, check_predicates, now_iso

logger = logging.getLogger(__name__)


def _string_expr(field: str, dialect_name: str):
    expr = Document.data[tuple(field.split("."))].as_string()
    # prefix ranges ("s1" <= x < "s1~") need byte order, not the database locale
    if dialect_name == "postgresql":
        expr = expr.collate("C")
    return expr


def _path_expr(field: str, value: Any, dialect_name: str):
    path = Document.data[tuple(field.split("."))]
    if isinstance(value, bool):
        return path.as_boolean()
    if isinstance(value, (int, float)):
        return path.as_float()
    return _string_expr(field, dialect_name)


def build_query(collection: str, predicates: Sequence[Predicate], dialect_name: str = ""):
    """SELECT for `collection` filtered by `predicates`, ordered by the range field then id."""
    range_field = check_predicates(predicates)
    stmt = select(Document).where(Document.collection == collection)
    for p in predicates:
        stmt = stmt.where(OPS[p.op](_path_expr(p.field, p.value, dialect_name), p.value))
    if range_field:
        stmt = stmt.order_by(_string_expr(range_field, dialect_name))
    return stmt.order_by(Document.id)


class SqlDocumentStore:
    def __init__(self, session: Session):
        self.session = session

    def _fault(self, action: str, exc: SQLAlchemyError) -> StoreFault:
        self.session.rollback()
        logger.error("store %s failed: %s", action, exc)
        return StoreFault(f"{action} failed: {exc}")

    def get(self, collection: str, doc_id: str) -> dict | None:
        try:
            row = self.session.get(Document, (collection, doc_id))
        except SQLAlchemyError as e:
            raise self._fault(f"get {collection}/{doc_id}", e) from e
        return copy.deepcopy(row.data) if row is not None else None

    def set(self, collection: str, doc_id: str, record: dict) -> None:
        try:
            row = self.session.get(Document, (collection, doc_id))
            data = copy.deepcopy(record)
            now = now_iso()
            data["createdAt"] = (row.data.get("createdAt") if row is not None else None) or now
            data["updatedAt"] = now
            if row is None:
                self.session.add(Document(collection=collection, id=doc_id, data=data))
            else:
                row.data = data
            self.session.commit()
        except SQLAlchemyError as e:
            raise self._fault(f"set {collection}/{doc_id}", e) from e

    def update(self, collection: str, doc_id: str, partial: dict) -> None:
        try:
            row = self.session.get(Document, (collection, doc_id))
            if row is None:
                raise NotFound(f"{collection}/{doc_id} not found")
            # reassign so the ORM sees the change on a plain JSON column
            row.data = {**row.data, **copy.deepcopy(partial), "updatedAt": now_iso()}
            self.session.commit()
        except SQLAlchemyError as e:
            raise self._fault(f"update {collection}/{doc_id}", e) from e

    def query(self, collection: str, predicates: Sequence[Predicate]) -> list[Snapshot]:
        try:
            stmt = build_query(collection, predicates, self.session.get_bind().dialect.name)
            rows = self.session.scalars(stmt).all()
        except SQLAlchemyError as e:
            raise self._fault(f"query {collection}", e) from e
        return [Snapshot(row.id, copy.deepcopy(row.data)) for row in rows]
