"""
Record store: a bucketed key -> bytes mapping on top of the `kv_records` table.

Buckets
-------
Days    YYYY-MM-DD -> JSON {date, count, done}
Streak  "current"  -> JSON {current, longest, lastDate}
Config  "firstDay" -> raw YYYY-MM-DD string

Writes are flushed immediately so later reads in the same transaction see
them; nothing is committed until `transaction()` exits cleanly. On SQLite
every transaction holds the write lock from its first statement (see
app.db.base), so read-check-write sequences never interleave.
"""
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import StorageError
from app.models.record import KVRecord

DAYS = "Days"
STREAK = "Streak"
CONFIG = "Config"


class RecordStore:
    def __init__(self, db: Session):
        self.db = db

    def get(self, bucket: str, key: str, lock: bool = False) -> Optional[bytes]:
        """With `lock`, the row stays locked until the transaction ends."""
        row = self._row(bucket, key, lock=lock)
        return row.value if row is not None else None

    def put(self, bucket: str, key: str, value: bytes) -> None:
        try:
            row = self._row(bucket, key)
            if row is None:
                self.db.add(KVRecord(bucket=bucket, key=key, value=value))
            else:
                row.value = value
            self.db.flush()
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not write {bucket}/{key}.") from exc

    def first_key(self, bucket: str) -> Optional[str]:
        try:
            row = (
                self.db.query(KVRecord.key)
                .filter(KVRecord.bucket == bucket)
                .order_by(KVRecord.key.asc())
                .first()
            )
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not read bucket {bucket}.") from exc
        return row.key if row is not None else None

    def items(self, bucket: str, prefix: str = "") -> Iterator[tuple[str, bytes]]:
        """Yield (key, value) pairs of a bucket in ascending key order."""
        query = self.db.query(KVRecord).filter(KVRecord.bucket == bucket)
        if prefix:
            query = query.filter(KVRecord.key.startswith(prefix, autoescape=True))
        try:
            rows = query.order_by(KVRecord.key.asc()).all()
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not read bucket {bucket}.") from exc
        for row in rows:
            yield row.key, row.value

    @contextmanager
    def transaction(self) -> Iterator["RecordStore"]:
        """Commit everything written inside the block, or nothing at all."""
        try:
            yield self
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError("Transaction could not be committed.") from exc
        except BaseException:
            self.db.rollback()
            raise

    def _row(self, bucket: str, key: str, lock: bool = False) -> Optional[KVRecord]:
        query = self.db.query(KVRecord).filter(KVRecord.bucket == bucket, KVRecord.key == key)
        if lock:
            query = query.with_for_update()
        try:
            return query.first()
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not read {bucket}/{key}.") from exc
