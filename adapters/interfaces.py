"""
어댑터 인터페이스 정의

Protocol 기반으로 정의하여 의존성 주입 및 Mock 교체 가능.
모든 구현체는 이 Protocol을 준수해야 함.
"""

from contextlib import AbstractAsyncContextManager
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class IRecordStore(Protocol):
    """레코드 저장소 인터페이스

    이름 있는 컬렉션 위에서 id 기반 레코드를 저장/조회.
    회계 코어는 이 인터페이스만 사용하며 저장 기술(SQLite, 메모리 등)에 무관.
    레코드는 JSON 직렬화 가능한 dict이며 "id" 키 필수.
    """

    # -------------------------------------------------------------------------
    # 쓰기
    # -------------------------------------------------------------------------

    async def save(self, collection: str, record: dict[str, Any]) -> str:
        """레코드 저장 (id 기준 upsert)

        Args:
            collection: 컬렉션 이름
            record: 저장할 레코드 ("id" 필수)

        Returns:
            저장된 레코드 id
        """
        ...

    async def remove(self, collection: str, record_id: str) -> bool:
        """레코드 삭제

        Returns:
            삭제 여부 (없으면 False)
        """
        ...

    async def clear(self, collection: str) -> None:
        """컬렉션 전체 삭제"""
        ...

    def atomic(self) -> AbstractAsyncContextManager[None]:
        """원자적 쓰기 범위

        블록 안의 모든 save/remove는 함께 반영되거나 전혀 반영되지 않음.
        예외 발생 시 롤백 후 예외를 다시 발생시킴.

        사용 예시:
        ```python
        async with store.atomic():
            await store.save("vouchers", voucher)
            await store.save("transactions", txn)
        ```
        """
        ...

    # -------------------------------------------------------------------------
    # 조회
    # -------------------------------------------------------------------------

    async def get(self, collection: str, record_id: str) -> dict[str, Any] | None:
        """id로 레코드 조회

        Returns:
            레코드 또는 None (없음)
        """
        ...

    async def get_all(self, collection: str) -> list[dict[str, Any]]:
        """컬렉션 전체 조회 (저장 순서)"""
        ...

    async def query_by_index(
        self,
        collection: str,
        field_name: str,
        value: Any,
    ) -> list[dict[str, Any]]:
        """필드 값이 일치하는 레코드 조회 (저장 순서)

        Args:
            collection: 컬렉션 이름
            field_name: 최상위 필드 이름 (예: account_id)
            value: 일치해야 하는 값
        """
        ...
