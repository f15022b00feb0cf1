"""
Books Bootstrap

설정 로드, 저장소 연결, 회계 컴포넌트 의존성 주입.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from adapters.db.record_store import SQLiteRecordStore
from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from adapters.interfaces import IRecordStore
from core.config.loader import BooksSettings
from core.ledger.accounts import ChartOfAccounts
from core.ledger.engine import AccountingEngine
from core.ledger.vouchers import VoucherManager

logger = logging.getLogger(__name__)


@dataclass
class Books:
    """장부 (회계 컴포넌트 묶음)

    open_books()로 생성하고 사용 후 close() 호출.
    """

    settings: BooksSettings
    store: IRecordStore
    accounts: ChartOfAccounts
    engine: AccountingEngine
    vouchers: VoucherManager
    db: SQLiteAdapter | None = None

    @property
    def fiscal_year(self) -> str:
        return self.vouchers.fiscal_year

    async def close_fiscal_year(self, fiscal_year: str | None = None):
        """설정된 자본 계정으로 회계연도 결산"""
        return await self.engine.close_fiscal_year(
            fiscal_year or self.fiscal_year,
            capital_code=self.settings.capital_account_code,
        )

    async def close(self) -> None:
        if self.db is not None:
            await self.db.close()
            self.db = None

    async def __aenter__(self) -> "Books":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


async def build_books(
    store: IRecordStore,
    settings: BooksSettings,
    seed_defaults: bool = True,
    db: SQLiteAdapter | None = None,
) -> Books:
    """저장소 위에 회계 컴포넌트 구성

    Args:
        store: 레코드 저장소 (SQLite 또는 인메모리)
        settings: 장부 설정
        seed_defaults: 장부가 비어 있으면 기본 계정과목 생성
        db: 닫을 때 함께 종료할 SQLite 연결

    Returns:
        Books 인스턴스 (전표 번호 초기화 완료)
    """
    fiscal_year = settings.resolve_fiscal_year()

    accounts = ChartOfAccounts(store)
    engine = AccountingEngine(store, strict_calendar=settings.strict_calendar)
    vouchers = VoucherManager(
        store,
        engine,
        accounts,
        fiscal_year=fiscal_year,
        vat_rate=settings.vat_rate,
    )

    if seed_defaults:
        created = await accounts.initialize_default_accounts()
        if created:
            logger.info(f"새 장부: 기본 계정과목 {created}개 생성")

    await vouchers.init_sequences()

    logger.info(
        f"장부 준비 완료: {settings.company_name or '(unnamed)'} FY {fiscal_year}"
    )
    return Books(
        settings=settings,
        store=store,
        accounts=accounts,
        engine=engine,
        vouchers=vouchers,
        db=db,
    )


async def open_books(settings: BooksSettings, seed_defaults: bool = True) -> Books:
    """SQLite 장부 열기

    DB 연결 → 스키마 초기화 → 컴포넌트 구성.

    사용 예시:
    ```python
    settings = load_settings()
    async with await open_books(settings) as books:
        rows = await books.engine.get_trial_balance()
    ```
    """
    db = SQLiteAdapter(settings.db_path)
    await db.connect()

    try:
        await init_schema(db)
        store = SQLiteRecordStore(db)
        return await build_books(store, settings, seed_defaults=seed_defaults, db=db)
    except Exception:
        await db.close()
        raise
