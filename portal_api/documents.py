"""Document store client: named collections of JSON documents over SQLAlchemy.

Each collection behaves like a small document database: documents are free-form
dicts addressed by a store-assigned ``_id`` and are written and read as whole
JSON bodies. Filters support equality on top-level keys and ``{"$in": [...]}``;
updates support ``$set`` and ``$unset`` on top-level keys and are atomic per
document.
"""

from __future__ import annotations

import re
import secrets
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional

from pydantic_core import to_jsonable_python
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from .db import Base, make_engine, make_session_factory
from .errors import DuplicateKey, StoreUnavailable
from .logging_config import get_logger
from .models import DocumentORM

logger = get_logger(__name__)

_OBJECT_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")
_MISSING = object()

Document = Dict[str, Any]
Filter = Dict[str, Any]


def new_object_id() -> str:
    """4-byte epoch seconds + 8 random bytes, as 24 lowercase hex digits."""
    return f"{int(time.time()) & 0xFFFFFFFF:08x}{secrets.token_hex(8)}"


def is_valid_object_id(value: Any) -> bool:
    return isinstance(value, str) and bool(_OBJECT_ID_RE.match(value))


@dataclass(frozen=True)
class InsertOneResult:
    inserted_id: Optional[str]
    acknowledged: bool = True


@dataclass(frozen=True)
class UpdateResult:
    matched_count: int
    modified_count: int
    acknowledged: bool = True


@dataclass(frozen=True)
class DeleteResult:
    deleted_count: int
    acknowledged: bool = True


def _as_document(row: DocumentORM) -> Document:
    return {"_id": row.doc_id, **(row.body or {})}


def _is_operator(condition: Any) -> bool:
    return isinstance(condition, dict) and any(str(k).startswith("$") for k in condition)


def _check_condition(condition: Any) -> None:
    if _is_operator(condition) and set(condition) != {"$in"}:
        raise ValueError(f"unsupported filter operator(s): {sorted(condition)}")


def _normalize_id(value: Any) -> Any:
    # ids are stored lowercase; hex is case-insensitive
    return value.lower() if isinstance(value, str) else value


def _condition_matches(value: Any, condition: Any) -> bool:
    if _is_operator(condition):
        return value is not _MISSING and value in list(condition["$in"])
    return value is not _MISSING and value == condition


def _matches(document: Document, filter: Filter) -> bool:
    return all(_condition_matches(document.get(key, _MISSING), cond) for key, cond in filter.items())


class _WriteConflict(Exception):
    """The row changed between read and write (version check failed)."""


_MAX_UPDATE_ATTEMPTS = 10


class Collection:
    """One named collection inside a DocumentStore."""

    def __init__(self, store: "DocumentStore", name: str):
        self._store = store
        self.name = name

    def __repr__(self) -> str:
        return f"Collection(name={self.name!r})"

    def _rows(self, session: Session, filter: Optional[Filter], lock: bool = False) -> List[DocumentORM]:
        filter = filter or {}
        query = session.query(DocumentORM).filter(DocumentORM.collection == self.name)
        body_filter = {}
        for key, cond in filter.items():
            _check_condition(cond)
            if key == "_id":
                if _is_operator(cond):
                    query = query.filter(DocumentORM.doc_id.in_([_normalize_id(v) for v in cond["$in"]]))
                else:
                    query = query.filter(DocumentORM.doc_id == _normalize_id(cond))
                continue
            body_filter[key] = cond
            # string comparisons go to SQL; the Python pass below stays authoritative
            field = DocumentORM.body[key].as_string()
            if _is_operator(cond):
                values = list(cond["$in"])
                if all(isinstance(v, str) for v in values):
                    query = query.filter(field.in_(values))
            elif isinstance(cond, str):
                query = query.filter(field == cond)
        if lock:
            query = query.with_for_update()
        rows = query.order_by(DocumentORM.id).all()
        return [r for r in rows if _matches(_as_document(r), body_filter)]

    def insert_one(self, document: Document, unique_key: Optional[str] = None) -> InsertOneResult:
        body = to_jsonable_python({k: v for k, v in document.items() if k != "_id"})
        doc_id = new_object_id()
        with self._store.session() as session:
            session.add(DocumentORM(collection=self.name, doc_id=doc_id, unique_key=unique_key, body=body))
        logger.debug("insert collection=%s id=%s", self.name, doc_id)
        return InsertOneResult(inserted_id=doc_id)

    def find(self, filter: Optional[Filter] = None) -> List[Document]:
        with self._store.session() as session:
            return [_as_document(r) for r in self._rows(session, filter)]

    def find_one(self, filter: Optional[Filter] = None) -> Optional[Document]:
        with self._store.session() as session:
            rows = self._rows(session, filter)
            return _as_document(rows[0]) if rows else None

    def count_documents(self, filter: Optional[Filter] = None) -> int:
        with self._store.session() as session:
            return len(self._rows(session, filter))

    def update_one(self, filter: Filter, update: Dict[str, Dict[str, Any]]) -> UpdateResult:
        """Apply ``$set``/``$unset`` to the first matching document atomically.

        The row is locked where the database supports ``FOR UPDATE``; the
        version column catches a concurrent writer everywhere else, and the
        update is replayed on the fresh document.
        """
        unknown = set(update) - {"$set", "$unset"}
        if unknown:
            raise ValueError(f"unsupported update operator(s): {sorted(unknown)}")
        to_set = to_jsonable_python(update.get("$set") or {})
        to_unset = update.get("$unset") or {}
        if "_id" in to_set or "_id" in to_unset:
            raise ValueError("_id is immutable")

        for attempt in range(1, _MAX_UPDATE_ATTEMPTS + 1):
            try:
                return self._update_once(filter, to_set, to_unset)
            except _WriteConflict:
                logger.info("update conflict collection=%s attempt=%d", self.name, attempt)
        raise StoreUnavailable(f"Gave up updating {self.name} after {_MAX_UPDATE_ATTEMPTS} conflicting writes")

    def _update_once(self, filter: Filter, to_set: Dict[str, Any], to_unset: Dict[str, Any]) -> UpdateResult:
        with self._store.session() as session:
            rows = self._rows(session, filter, lock=True)
            if not rows:
                return UpdateResult(matched_count=0, modified_count=0)
            row = rows[0]
            old_body = dict(row.body or {})
            new_body = dict(old_body)
            new_body.update(to_set)
            for key in to_unset:
                new_body.pop(key, None)
            if new_body == old_body:
                return UpdateResult(matched_count=1, modified_count=0)
            # reassign so the JSON column is flagged dirty
            row.body = new_body
        logger.debug("update collection=%s id=%s", self.name, row.doc_id)
        return UpdateResult(matched_count=1, modified_count=1)

    def delete_one(self, filter: Filter) -> DeleteResult:
        with self._store.session() as session:
            rows = self._rows(session, filter)
            if not rows:
                return DeleteResult(deleted_count=0)
            # bulk delete skips the version check; a concurrent delete shows as 0
            deleted = (
                session.query(DocumentORM)
                .filter(DocumentORM.id == rows[0].id)
                .delete(synchronize_session=False)
            )
        return DeleteResult(deleted_count=deleted)


class DocumentStore:
    """Long-lived store client, constructed once and injected into every store.

    ``init()`` creates the schema and checks connectivity; ``close()`` releases
    the connection pool.
    """

    def __init__(self, url: str, **engine_options):
        self.url = url
        self.engine = make_engine(url, **engine_options)
        self._sessions = make_session_factory(self.engine)
        self._collections: Dict[str, Collection] = {}

    def init(self) -> None:
        try:
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"Failed to initialise document store: {exc}") from exc
        self.ping()
        logger.info("document store ready url=%s", self.engine.url.render_as_string(hide_password=True))

    def ping(self) -> None:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"Document store ping failed: {exc}") from exc

    def close(self) -> None:
        self.engine.dispose()
        logger.info("document store closed")

    def collection(self, name: str) -> Collection:
        if name not in self._collections:
            self._collections[name] = Collection(self, name)
        return self._collections[name]

    @contextmanager
    def session(self) -> Iterator[Session]:
        session = self._sessions()
        try:
            yield session
            session.commit()
        except IntegrityError as exc:
            session.rollback()
            raise DuplicateKey(str(exc.orig)) from exc
        except StaleDataError as exc:
            session.rollback()
            raise _WriteConflict(str(exc)) from exc
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("document store operation failed: %s", exc)
            raise StoreUnavailable(f"Document store operation failed: {exc}") from exc
        finally:
            session.close()
