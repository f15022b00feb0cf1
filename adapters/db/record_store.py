"""
SQLite 레코드 저장소

record_store 테이블 위에 IRecordStore 구현.
레코드는 payload_json 컬럼에 JSON으로 저장, 필드 조회는 json_extract 사용.
"""

import json
import logging
import re
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)

# query_by_index에 허용하는 필드 이름 (SQL에 리터럴로 삽입되므로 엄격히 제한)
_FIELD_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class SQLiteRecordStore:
    """SQLite 레코드 저장소

    IRecordStore Protocol 구현.
    atomic() 범위 밖의 쓰기는 즉시 커밋, 범위 안의 쓰기는 범위 종료 시 일괄 커밋.

    Args:
        db: 연결된 SQLiteAdapter (init_schema 완료 상태)

    사용 예시:
    ```python
    async with SQLiteAdapter(db_path) as db:
        await init_schema(db)
        store = SQLiteRecordStore(db)

        async with store.atomic():
            await store.save("vouchers", voucher_record)
            await store.save("transactions", txn_record)
    ```
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db
        self._atomic_depth = 0

    async def _commit_unless_atomic(self) -> None:
        if self._atomic_depth == 0:
            await self.db.commit()

    async def save(self, collection: str, record: dict[str, Any]) -> str:
        """레코드 저장 (collection, id 기준 upsert)

        upsert는 rowid를 유지하므로 조회 순서(저장 순서)가 바뀌지 않음.
        """
        record_id = record.get("id")
        if not record_id:
            raise ValueError("record에 'id'가 없습니다")

        await self.db.execute(
            """
            INSERT INTO record_store (collection, record_id, payload_json)
            VALUES (?, ?, ?)
            ON CONFLICT(collection, record_id) DO UPDATE SET
                payload_json = excluded.payload_json,
                updated_at = datetime('now')
            """,
            (collection, str(record_id), json.dumps(record, ensure_ascii=False)),
        )
        await self._commit_unless_atomic()

        logger.debug(f"Saved {collection}/{record_id}")
        return str(record_id)

    async def get(self, collection: str, record_id: str) -> dict[str, Any] | None:
        row = await self.db.fetchone(
            """
            SELECT payload_json FROM record_store
            WHERE collection = ? AND record_id = ?
            """,
            (collection, record_id),
        )
        return json.loads(row[0]) if row else None

    async def get_all(self, collection: str) -> list[dict[str, Any]]:
        rows = await self.db.fetchall(
            """
            SELECT payload_json FROM record_store
            WHERE collection = ?
            ORDER BY rowid
            """,
            (collection,),
        )
        return [json.loads(row[0]) for row in rows]

    async def query_by_index(
        self,
        collection: str,
        field_name: str,
        value: Any,
    ) -> list[dict[str, Any]]:
        """최상위 필드 값 일치 조회

        Raises:
            ValueError: 허용되지 않는 필드 이름
        """
        if not _FIELD_NAME_PATTERN.match(field_name):
            raise ValueError(f"허용되지 않는 필드 이름: {field_name!r}")

        # 표현식 인덱스(ix_record_store_account)를 타도록 경로를 리터럴로 작성
        rows = await self.db.fetchall(
            f"""
            SELECT payload_json FROM record_store
            WHERE collection = ?
              AND json_extract(payload_json, '$.{field_name}') = ?
            ORDER BY rowid
            """,
            (collection, value),
        )
        return [json.loads(row[0]) for row in rows]

    async def remove(self, collection: str, record_id: str) -> bool:
        cursor = await self.db.execute(
            "DELETE FROM record_store WHERE collection = ? AND record_id = ?",
            (collection, record_id),
        )
        await self._commit_unless_atomic()
        return cursor.rowcount > 0

    async def clear(self, collection: str) -> None:
        await self.db.execute(
            "DELETE FROM record_store WHERE collection = ?",
            (collection,),
        )
        await self._commit_unless_atomic()
        logger.info(f"Cleared collection '{collection}'")

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator[None]:
        """원자적 쓰기 범위

        SQLiteAdapter.transaction()으로 커밋/롤백.
        중첩 시 가장 바깥 범위에서만 커밋.
        """
        if self._atomic_depth > 0:
            self._atomic_depth += 1
            try:
                yield
            finally:
                self._atomic_depth -= 1
            return

        self._atomic_depth = 1
        try:
            async with self.db.transaction():
                yield
        finally:
            self._atomic_depth = 0
