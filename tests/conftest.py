"""
pytest 공통 fixture 정의

인메모리 저장소 위의 장부 컴포넌트와 설정 파일 fixture
"""

import tempfile
from pathlib import Path

import pytest
import pytest_asyncio

from adapters.mock.record_store import InMemoryRecordStore
from core.ledger.accounts import ChartOfAccounts
from core.ledger.engine import AccountingEngine
from core.ledger.models import Account
from core.ledger.vouchers import VoucherManager


TEST_FISCAL_YEAR = "2080/81"


@pytest.fixture
def temp_dir() -> Path:
    """OS 독립적인 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_settings_file(temp_dir: Path) -> Path:
    """테스트용 settings.yaml 파일 생성"""
    settings_content = f"""# 테스트용 settings.yaml
company:
  name: "Test Traders"
  pan: "123456789"
  fiscal_year: "{TEST_FISCAL_YEAR}"

books:
  db_path: "{(temp_dir / 'books.db').as_posix()}"
  strict_calendar: true
  capital_account_code: "3001"

vat:
  rate: 13
"""
    settings_path = temp_dir / "settings.yaml"
    settings_path.write_text(settings_content, encoding="utf-8")
    return settings_path


# -------------------------------------------------------------------------
# 장부 컴포넌트 (인메모리)
# -------------------------------------------------------------------------

@pytest.fixture
def store() -> InMemoryRecordStore:
    """빈 인메모리 저장소"""
    return InMemoryRecordStore()


@pytest.fixture
def engine(store: InMemoryRecordStore) -> AccountingEngine:
    return AccountingEngine(store)


@pytest_asyncio.fixture
async def chart(store: InMemoryRecordStore) -> ChartOfAccounts:
    """기본 계정과목이 생성된 계정과목표"""
    chart = ChartOfAccounts(store)
    await chart.initialize_default_accounts()
    return chart


@pytest_asyncio.fixture
async def manager(
    store: InMemoryRecordStore,
    engine: AccountingEngine,
    chart: ChartOfAccounts,
) -> VoucherManager:
    """전표 번호가 초기화된 전표 관리자"""
    manager = VoucherManager(store, engine, chart, TEST_FISCAL_YEAR)
    await manager.init_sequences()
    return manager


@pytest_asyncio.fixture
async def accounts(chart: ChartOfAccounts) -> dict[str, Account]:
    """코드 → Account (기본 계정과목)"""
    return {a.code: a for a in await chart.get_all_accounts(include_disabled=True)}
