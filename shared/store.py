"""
Document store contract and the in-memory implementation.

Documents are plain JSON-shaped dicts grouped in named collections and keyed by a
string id. Queries take a list of `Predicate`s on dotted field paths
(`"services.deep-cleaning"`); a range predicate (`>=`, `>`, `<`, `<=`) orders the
results by that field, the way sorted-key document databases do.
"""

from __future__ import annotations

import copy
import operator
from datetime import datetime, timezone
from typing import Any, Callable, NamedTuple, Protocol, Sequence

from .errors import InvalidRequest, NotFound

_MISSING = object()

OPS: dict[str, Callable[[Any, Any], bool]] = {
    "==": operator.eq,
    ">=": operator.ge,
    ">": operator.gt,
    "<": operator.lt,
    "<=": operator.le,
}
RANGE_OPS = frozenset({">=", ">", "<", "<="})


class Predicate(NamedTuple):
    field: str
    op: str
    value: Any


class Snapshot(NamedTuple):
    id: str
    data: dict


class DocumentStore(Protocol):
    def get(self, collection: str, doc_id: str) -> dict | None: ...

    def set(self, collection: str, doc_id: str, record: dict) -> None: ...

    def update(self, collection: str, doc_id: str, partial: dict) -> None: ...

    def query(self, collection: str, predicates: Sequence[Predicate]) -> list[Snapshot]: ...


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def check_predicates(predicates: Sequence[Predicate]) -> str | None:
    """Validate operators and return the range field, if any.

    Only one field may carry range predicates per query.
    """
    range_fields = set()
    for p in predicates:
        if p.op not in OPS:
            raise InvalidRequest(f"unsupported query operator {p.op!r}")
        if p.op in RANGE_OPS:
            range_fields.add(p.field)
    if len(range_fields) > 1:
        raise InvalidRequest(f"range predicates on more than one field: {sorted(range_fields)}")
    return next(iter(range_fields), None)


def resolve_path(data: Any, field: str) -> Any:
    value = data
    for part in field.split("."):
        if not isinstance(value, dict) or part not in value:
            return _MISSING
        value = value[part]
    return value


def _same_kind(a: Any, b: Any) -> bool:
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool)
    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        return True
    return isinstance(a, str) and isinstance(b, str)


def matches(data: dict, predicate: Predicate) -> bool:
    value = resolve_path(data, predicate.field)
    if value is _MISSING or not _same_kind(value, predicate.value):
        return False
    return OPS[predicate.op](value, predicate.value)


class InMemoryDocumentStore:
    """Process-local store. Reads and writes copy, so callers never share state with it."""

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict]] = {}

    def get(self, collection: str, doc_id: str) -> dict | None:
        doc = self._collections.get(collection, {}).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    def set(self, collection: str, doc_id: str, record: dict) -> None:
        docs = self._collections.setdefault(collection, {})
        previous = docs.get(doc_id) or {}
        data = copy.deepcopy(record)
        now = now_iso()
        data["createdAt"] = previous.get("createdAt", now)
        data["updatedAt"] = now
        docs[doc_id] = data

    def update(self, collection: str, doc_id: str, partial: dict) -> None:
        docs = self._collections.get(collection, {})
        if doc_id not in docs:
            raise NotFound(f"{collection}/{doc_id} not found")
        docs[doc_id].update(copy.deepcopy(partial))
        docs[doc_id]["updatedAt"] = now_iso()

    def query(self, collection: str, predicates: Sequence[Predicate]) -> list[Snapshot]:
        range_field = check_predicates(predicates)
        hits = [
            Snapshot(doc_id, copy.deepcopy(data))
            for doc_id, data in self._collections.get(collection, {}).items()
            if all(matches(data, p) for p in predicates)
        ]
        if range_field:
            hits.sort(key=lambda s: (resolve_path(s.data, range_field), s.id))
        else:
            hits.sort(key=lambda s: s.id)
        return hits
