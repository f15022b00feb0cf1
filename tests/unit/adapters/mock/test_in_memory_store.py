"""
InMemoryRecordStore 테스트

IRecordStore 계약 (upsert, 저장 순서, atomic 롤백) 검증
"""

import pytest

from adapters.interfaces import IRecordStore
from adapters.mock.record_store import InMemoryRecordStore


class TestBasicOperations:
    """저장/조회 테스트"""

    def test_implements_protocol(self) -> None:
        """Protocol 준수"""
        assert isinstance(InMemoryRecordStore(), IRecordStore)

    @pytest.mark.asyncio
    async def test_save_and_get(self) -> None:
        """저장 후 조회"""
        store = InMemoryRecordStore()
        await store.save("accounts", {"id": "a1", "code": "1001"})

        assert await store.get("accounts", "a1") == {"id": "a1", "code": "1001"}
        assert await store.get("accounts", "missing") is None

    @pytest.mark.asyncio
    async def test_save_requires_id(self) -> None:
        """id 없는 레코드"""
        store = InMemoryRecordStore()

        with pytest.raises(ValueError):
            await store.save("accounts", {"code": "1001"})

    @pytest.mark.asyncio
    async def test_upsert_keeps_order(self) -> None:
        """upsert는 저장 순서 유지"""
        store = InMemoryRecordStore()
        await store.save("accounts", {"id": "a1", "name": "Cash"})
        await store.save("accounts", {"id": "a2", "name": "Bank"})
        await store.save("accounts", {"id": "a1", "name": "Cash in Hand"})

        records = await store.get_all("accounts")

        assert [r["id"] for r in records] == ["a1", "a2"]
        assert records[0]["name"] == "Cash in Hand"

    @pytest.mark.asyncio
    async def test_returns_copies(self) -> None:
        """반환 레코드 수정이 저장소에 영향 없음"""
        store = InMemoryRecordStore()
        await store.save("accounts", {"id": "a1", "name": "Cash"})

        record = await store.get("accounts", "a1")
        record["name"] = "changed"

        assert (await store.get("accounts", "a1"))["name"] == "Cash"

    @pytest.mark.asyncio
    async def test_query_by_index(self) -> None:
        """필드 값 일치 조회"""
        store = InMemoryRecordStore()
        await store.save("transactions", {"id": "t1", "account_id": "a1"})
        await store.save("transactions", {"id": "t2", "account_id": "a2"})
        await store.save("transactions", {"id": "t3", "account_id": "a1"})

        records = await store.query_by_index("transactions", "account_id", "a1")

        assert [r["id"] for r in records] == ["t1", "t3"]

    @pytest.mark.asyncio
    async def test_remove_and_clear(self) -> None:
        """삭제"""
        store = InMemoryRecordStore()
        await store.save("accounts", {"id": "a1"})
        await store.save("accounts", {"id": "a2"})

        assert await store.remove("accounts", "a1") is True
        assert await store.remove("accounts", "a1") is False

        await store.clear("accounts")
        assert store.count("accounts") == 0


class TestAtomic:
    """atomic() 테스트"""

    @pytest.mark.asyncio
    async def test_commit(self) -> None:
        """정상 종료 시 반영"""
        store = InMemoryRecordStore()

        async with store.atomic():
            await store.save("vouchers", {"id": "v1"})
            await store.save("transactions", {"id": "t1"})

        assert store.count("vouchers") == 1
        assert store.count("transactions") == 1

    @pytest.mark.asyncio
    async def test_rollback_on_error(self) -> None:
        """예외 시 전체 롤백"""
        store = InMemoryRecordStore()
        await store.save("vouchers", {"id": "v0"})

        with pytest.raises(RuntimeError):
            async with store.atomic():
                await store.save("vouchers", {"id": "v1"})
                raise RuntimeError("boom")

        assert [r["id"] for r in await store.get_all("vouchers")] == ["v0"]

    @pytest.mark.asyncio
    async def test_nested_rolls_back_outer(self) -> None:
        """중첩 범위의 예외는 바깥 범위 전체 롤백"""
        store = InMemoryRecordStore()

        with pytest.raises(RuntimeError):
            async with store.atomic():
                await store.save("vouchers", {"id": "v1"})
                async with store.atomic():
                    await store.save("transactions", {"id": "t1"})
                    raise RuntimeError("boom")

        assert store.count("vouchers") == 0
        assert store.count("transactions") == 0

    @pytest.mark.asyncio
    async def test_fail_on_save(self) -> None:
        """N번째 save 실패 시뮬레이션"""
        store = InMemoryRecordStore()
        store.fail_on_save = 2

        with pytest.raises(RuntimeError):
            async with store.atomic():
                await store.save("transactions", {"id": "t1"})
                await store.save("transactions", {"id": "t2"})

        assert store.count("transactions") == 0
        assert store.save_calls == 2
