"""
Mock 레코드 저장소

테스트용 인메모리 저장소.
IRecordStore Protocol 준수.
"""

import copy
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator


class InMemoryRecordStore:
    """인메모리 레코드 저장소

    IRecordStore Protocol 구현.
    컬렉션별 dict (삽입 순서 유지)에 레코드 사본을 저장.
    atomic()은 스냅샷을 떠 두었다가 예외 시 복원.

    사용 예시:
    ```python
    store = InMemoryRecordStore()
    await store.save("accounts", {"id": "a1", "code": "1001"})

    # 실패 시나리오 테스트
    store.fail_on_save = 2  # 두 번째 save에서 RuntimeError
    ```
    """

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._atomic_depth = 0

        # 테스트 헬퍼: N번째 save 호출에서 실패 (0이면 비활성화)
        self.fail_on_save = 0
        self.save_calls = 0

    def _collection(self, name: str) -> dict[str, dict[str, Any]]:
        return self._collections.setdefault(name, {})

    async def save(self, collection: str, record: dict[str, Any]) -> str:
        """레코드 저장 (id 기준 upsert)"""
        record_id = record.get("id")
        if not record_id:
            raise ValueError("record에 'id'가 없습니다")

        self.save_calls += 1
        if self.fail_on_save and self.save_calls == self.fail_on_save:
            raise RuntimeError(f"Simulated save failure (call #{self.save_calls})")

        self._collection(collection)[record_id] = copy.deepcopy(record)
        return record_id

    async def get(self, collection: str, record_id: str) -> dict[str, Any] | None:
        record = self._collection(collection).get(record_id)
        return copy.deepcopy(record) if record is not None else None

    async def get_all(self, collection: str) -> list[dict[str, Any]]:
        return [copy.deepcopy(r) for r in self._collection(collection).values()]

    async def query_by_index(
        self,
        collection: str,
        field_name: str,
        value: Any,
    ) -> list[dict[str, Any]]:
        return [
            copy.deepcopy(r)
            for r in self._collection(collection).values()
            if r.get(field_name) == value
        ]

    async def remove(self, collection: str, record_id: str) -> bool:
        return self._collection(collection).pop(record_id, None) is not None

    async def clear(self, collection: str) -> None:
        self._collection(collection).clear()

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator[None]:
        """원자적 쓰기 범위 (스냅샷 복원 방식)

        중첩 시 가장 바깥 범위만 스냅샷/복원.
        """
        if self._atomic_depth > 0:
            self._atomic_depth += 1
            try:
                yield
            finally:
                self._atomic_depth -= 1
            return

        snapshot = copy.deepcopy(self._collections)
        self._atomic_depth = 1
        try:
            yield
        except Exception:
            self._collections = snapshot
            raise
        finally:
            self._atomic_depth = 0

    # -------------------------------------------------------------------------
    # 테스트 헬퍼 메서드
    # -------------------------------------------------------------------------

    def count(self, collection: str) -> int:
        """컬렉션 레코드 수"""
        return len(self._collection(collection))
