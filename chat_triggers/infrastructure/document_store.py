# chat_triggers/infrastructure/document_store.py
import operator
import re
from datetime import UTC, datetime
from typing import Any, Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from chat_triggers.domain.entities import DocumentSnapshot
from chat_triggers.domain.exceptions import BatchLimitExceeded
from chat_triggers.gateways.interfaces import (
    MAX_BATCH_SIZE,
    SERVER_TIMESTAMP,
    FieldFilter,
    IDocumentStore,
    IWriteBatch,
)
from chat_triggers.infrastructure.database import Database
from chat_triggers.infrastructure.models import Document

# Fixed width so that timestamps stored in JSON compare correctly as strings.
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"

# Date and time of day are required; a bare date or free text is left alone.
_ISO_TIMESTAMP = re.compile(
    r"\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}:?\d{2})?"
)

_OPERATORS = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}

Operation = tuple[str, str, dict[str, Any] | None, bool]


def split_path(path: str) -> tuple[str, str]:
    segments = [segment for segment in path.split("/") if segment]
    if not segments or len(segments) % 2:
        raise ValueError(f"Not a document path: {path!r}")
    return "/".join(segments[:-1]), segments[-1]


def encode_value(value: Any, now: datetime) -> Any:
    if value is SERVER_TIMESTAMP:
        value = now
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC).strftime(TIMESTAMP_FORMAT)
    if isinstance(value, str) and _ISO_TIMESTAMP.fullmatch(value):
        return _normalise_timestamp(value)
    if isinstance(value, dict):
        return {str(key): encode_value(item, now) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [encode_value(item, now) for item in value]
    return value


def _normalise_timestamp(value: str) -> str:
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return value
    return encode_value(parsed, parsed)


class SqlWriteBatch(IWriteBatch):
    def __init__(self, store: "SqlDocumentStore", max_operations: int = MAX_BATCH_SIZE):
        self._store = store
        self.max_operations = max_operations
        self.operations: list[Operation] = []
        self.committed = False

    def set(self, path: str, data: dict[str, Any], merge: bool = False) -> "SqlWriteBatch":
        self._register(("set", path, data, merge))
        return self

    def delete(self, path: str) -> "SqlWriteBatch":
        self._register(("delete", path, None, False))
        return self

    def _register(self, operation: Operation) -> None:
        if self.committed:
            raise RuntimeError("Write batch has already been committed")
        if len(self.operations) >= self.max_operations:
            raise BatchLimitExceeded(
                f"A write batch holds at most {self.max_operations} operations"
            )
        split_path(operation[1])
        self.operations.append(operation)

    async def commit(self) -> None:
        if self.committed:
            raise RuntimeError("Write batch has already been committed")
        if self.operations:
            await self._store.apply(self.operations)
        self.committed = True

    def __len__(self) -> int:
        return len(self.operations)


class SqlDocumentStore(IDocumentStore):
    def __init__(self, database: Database, max_batch_size: int = MAX_BATCH_SIZE):
        self.database = database
        self.max_batch_size = max_batch_size

    async def get(self, path: str) -> DocumentSnapshot | None:
        split_path(path)
        async with self.database.session() as session:
            document = await session.get(Document, path)
            return self._snapshot(document) if document else None

    async def query(
        self,
        collection: str,
        filters: Sequence[FieldFilter] = (),
        limit: int | None = None,
        start_after: str | None = None,
    ) -> list[DocumentSnapshot]:
        now = datetime.now(UTC)
        stmt = select(Document).filter(Document.collection == collection.strip("/"))
        for field_filter in filters:
            stmt = stmt.filter(self._filter_clause(field_filter, now))
        if start_after is not None:
            stmt = stmt.filter(Document.doc_id > start_after)
        stmt = stmt.order_by(Document.doc_id)
        if limit is not None:
            stmt = stmt.limit(limit)

        async with self.database.session() as session:
            result = await session.execute(stmt)
            return [self._snapshot(document) for document in result.scalars().all()]

    async def set(self, path: str, data: dict[str, Any], merge: bool = False) -> None:
        await self.apply([("set", path, data, merge)])

    async def delete(self, path: str) -> bool:
        return bool(await self.apply([("delete", path, None, False)]))

    def batch(self) -> SqlWriteBatch:
        return SqlWriteBatch(self, self.max_batch_size)

    async def apply(self, operations: Sequence[Operation]) -> int:
        """Apply all operations in one transaction; returns the number of
        documents removed."""
        now = datetime.now(UTC)
        removed = 0
        async with self.database.session() as session:
            async with session.begin():
                for kind, path, data, merge in operations:
                    if kind == "delete":
                        removed += await self._delete(session, path)
                    else:
                        await self._set(session, path, data or {}, merge, now)
        return removed

    async def _set(
        self,
        session: AsyncSession,
        path: str,
        data: dict[str, Any],
        merge: bool,
        now: datetime,
    ) -> None:
        collection, doc_id = split_path(path)
        encoded = encode_value(data, now)
        existing = await session.get(Document, path)
        if existing is None:
            session.add(
                Document(path=path, collection=collection, doc_id=doc_id, data=encoded)
            )
            await session.flush()
        elif merge:
            existing.data = {**existing.data, **encoded}
        else:
            existing.data = encoded

    async def _delete(self, session: AsyncSession, path: str) -> int:
        split_path(path)
        result = await session.execute(delete(Document).where(Document.path == path))
        await session.flush()
        return result.rowcount or 0

    @staticmethod
    def _filter_clause(field_filter: FieldFilter, now: datetime):
        compare = _OPERATORS.get(field_filter.op)
        if compare is None:
            raise ValueError(f"Unsupported filter operator: {field_filter.op!r}")
        value = encode_value(field_filter.value, now)
        element = Document.data[field_filter.field]
        if isinstance(value, bool):
            column = element.as_boolean()
        elif isinstance(value, (int, float)):
            column = element.as_float()
        else:
            column = element.as_string()
        return compare(column, value)

    @staticmethod
    def _snapshot(document: Document) -> DocumentSnapshot:
        return DocumentSnapshot(path=document.path, data=dict(document.data or {}))
