"""AccountingEngine 테스트

잔액 계산, 원장, 시산표, 손익계산서, 재무상태표, 현금/은행장
"""

from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio

from adapters.mock.record_store import InMemoryRecordStore
from core.calendar import BSDate
from core.constants import Collections
from core.ledger.accounts import ChartOfAccounts
from core.ledger.engine import AccountingEngine
from core.ledger.errors import UnbalancedEntryError, ValidationError
from core.ledger.models import Account, JournalLine, Voucher
from core.ledger.types import AccountType, VoucherType
from core.ledger.vouchers import VoucherManager


def dr(account: Account, amount: str) -> JournalLine:
    return JournalLine(account.id, debit=Decimal(amount))


def cr(account: Account, amount: str) -> JournalLine:
    return JournalLine(account.id, credit=Decimal(amount))


@pytest_asyncio.fixture
async def posted(manager: VoucherManager, accounts: dict[str, Account]) -> dict[str, Account]:
    """FY 2080/81 샘플 거래

    - 2024-08-01 RV: 서비스 수입 7,000 (다음 회계연도, 먼저 입력)
    - 2023-08-01 JV: 자본금 100,000
    - 2023-08-02 CV: 현금 → 은행 40,000
    - 2023-09-15 RV: 매출 50,000
    - 2023-10-01 PV: 임차료 15,000 (현금)
    - 2023-11-01 PV: 급여 20,000 (은행)
    """
    cash, bank = accounts["1001"], accounts["1002"]
    capital, sales, service = accounts["3001"], accounts["4001"], accounts["4002"]
    rent, salary = accounts["5001"], accounts["5002"]

    await manager.create_voucher(VoucherType.RV, "2024-08-01", [dr(cash, "7000"), cr(service, "7000")])
    await manager.create_voucher(VoucherType.JV, "2023-08-01", [dr(cash, "100000"), cr(capital, "100000")])
    await manager.create_voucher(VoucherType.CV, "2023-08-02", [dr(bank, "40000"), cr(cash, "40000")])
    await manager.create_voucher(VoucherType.RV, "2023-09-15", [dr(cash, "50000"), cr(sales, "50000")])
    await manager.create_voucher(VoucherType.PV, "2023-10-01", [dr(rent, "15000"), cr(cash, "15000")])
    await manager.create_voucher(VoucherType.PV, "2023-11-01", [dr(salary, "20000"), cr(bank, "20000")])
    return accounts


class TestValidateJournalEntry:
    """균형 검증 테스트"""

    def test_balanced(self, engine: AccountingEngine) -> None:
        """균형 분개"""
        result = engine.validate_journal_entry(
            [{"account_id": "a", "debit": 1000}, {"account_id": "b", "credit": 1000}]
        )

        assert result.is_valid is True
        assert result.total_debit == Decimal("1000")
        assert result.difference == Decimal("0")

    def test_unbalanced(self, engine: AccountingEngine) -> None:
        """불균형 분개"""
        result = engine.validate_journal_entry(
            [{"account_id": "a", "debit": 500}, {"account_id": "b", "credit": 400}]
        )

        assert result.is_valid is False
        assert result.difference == Decimal("100")

    def test_within_tolerance(self, engine: AccountingEngine) -> None:
        """0.01 미만 차이는 균형"""
        result = engine.validate_journal_entry(
            [{"account_id": "a", "debit": "100.004"}, {"account_id": "b", "credit": "100"}]
        )

        assert result.is_valid is True

    def test_at_tolerance(self, engine: AccountingEngine) -> None:
        """0.01 차이는 불균형"""
        result = engine.validate_journal_entry(
            [{"account_id": "a", "debit": "100.01"}, {"account_id": "b", "credit": "100"}]
        )

        assert result.is_valid is False

    def test_missing_and_non_numeric_amounts(self, engine: AccountingEngine) -> None:
        """누락/숫자 아닌 금액은 0"""
        result = engine.validate_journal_entry(
            [
                {"account_id": "a", "debit": "250"},
                {"account_id": "b", "credit": "250", "debit": "n/a"},
                {"account_id": "c"},
            ]
        )

        assert result.is_valid is True
        assert result.total_debit == Decimal("250")

    def test_empty(self, engine: AccountingEngine) -> None:
        """빈 분개는 (합계 0으로) 균형"""
        assert engine.validate_journal_entry([]).is_valid is True


class TestConcreteScenario:
    """현금 매출 1,000 시나리오"""

    @pytest.mark.asyncio
    async def test_cash_sale(
        self,
        engine: AccountingEngine,
        manager: VoucherManager,
        accounts: dict[str, Account],
    ) -> None:
        """JV: Dr 1001 1000 / Cr 4001 1000"""
        cash, sales = accounts["1001"], accounts["4001"]
        entries = [dr(cash, "1000"), cr(sales, "1000")]

        validation = engine.validate_journal_entry(entries)
        assert validation.is_valid is True
        assert validation.difference == Decimal("0")

        await manager.create_voucher(VoucherType.JV, "2024-01-19", entries)

        assert await engine.get_account_balance(cash.id) == Decimal("1000")
        assert await engine.get_account_balance(sales.id) == Decimal("1000")

        rows = {r.account_code: r for r in await engine.get_trial_balance()}
        assert rows["1001"].debit == Decimal("1000")
        assert rows["1001"].credit == Decimal("0")
        assert rows["4001"].credit == Decimal("1000")
        assert rows["4001"].debit == Decimal("0")


class TestPostVoucher:
    """전기 테스트"""

    def _voucher(self, entries: list[JournalLine]) -> Voucher:
        return Voucher(
            id="v-test",
            voucher_no="JV-2080-81-0100",
            voucher_type=VoucherType.JV,
            date=date(2024, 1, 19),
            date_bs=BSDate(2080, 10, 1),
            narration="Test voucher",
            entries=entries,
        )

    @pytest.mark.asyncio
    async def test_one_transaction_per_line(
        self,
        engine: AccountingEngine,
        store: InMemoryRecordStore,
        accounts: dict[str, Account],
    ) -> None:
        """라인마다 차변 또는 대변 거래 1건"""
        voucher = self._voucher(
            [dr(accounts["5001"], "600"), dr(accounts["5003"], "400"), cr(accounts["1001"], "1000")]
        )

        transactions = await engine.post_voucher(voucher)

        assert len(transactions) == 3
        assert store.count(Collections.VOUCHERS) == 1
        assert store.count(Collections.TRANSACTIONS) == 3
        assert all(t.voucher_no == "JV-2080-81-0100" for t in transactions)
        assert all(t.date_bs == BSDate(2080, 10, 1) for t in transactions)
        assert all(t.particulars == "Test voucher" for t in transactions)
        assert [(t.debit, t.credit) for t in transactions] == [
            (Decimal("600"), Decimal("0")),
            (Decimal("400"), Decimal("0")),
            (Decimal("0"), Decimal("1000")),
        ]

    @pytest.mark.asyncio
    async def test_line_particulars_override_narration(
        self,
        engine: AccountingEngine,
        accounts: dict[str, Account],
    ) -> None:
        """라인 적요 우선"""
        voucher = self._voucher(
            [
                JournalLine(accounts["5001"].id, debit=Decimal("100"), particulars="Shrawan rent"),
                cr(accounts["1001"], "100"),
            ]
        )

        transactions = await engine.post_voucher(voucher)

        assert transactions[0].particulars == "Shrawan rent"
        assert transactions[1].particulars == "Test voucher"

    @pytest.mark.asyncio
    async def test_unbalanced_persists_nothing(
        self,
        engine: AccountingEngine,
        store: InMemoryRecordStore,
        accounts: dict[str, Account],
    ) -> None:
        """불균형 전표는 아무것도 저장하지 않음"""
        voucher = self._voucher([dr(accounts["1001"], "500"), cr(accounts["4001"], "400")])

        with pytest.raises(UnbalancedEntryError) as exc_info:
            await engine.post_voucher(voucher)

        assert exc_info.value.difference == Decimal("100")
        assert store.count(Collections.VOUCHERS) == 0
        assert store.count(Collections.TRANSACTIONS) == 0

    @pytest.mark.asyncio
    async def test_partial_failure_rolls_back(
        self,
        engine: AccountingEngine,
        store: InMemoryRecordStore,
        accounts: dict[str, Account],
    ) -> None:
        """거래 저장 중 실패 시 전표/거래 모두 롤백"""
        voucher = self._voucher([dr(accounts["1001"], "500"), cr(accounts["4001"], "500")])
        # 전표(1) → 거래(2) → 거래(3): 두 번째 거래에서 실패
        store.fail_on_save = store.save_calls + 3

        with pytest.raises(RuntimeError):
            await engine.post_voucher(voucher)

        assert store.count(Collections.VOUCHERS) == 0
        assert store.count(Collections.TRANSACTIONS) == 0
        assert await engine.get_account_balance(accounts["1001"].id) == Decimal("0")


class TestAccountBalance:
    """잔액 테스트"""

    @pytest.mark.asyncio
    async def test_balances(self, engine: AccountingEngine, posted: dict[str, Account]) -> None:
        """정상 잔액 방향 기준 잔액"""
        assert await engine.get_account_balance(posted["1001"].id) == Decimal("102000")
        assert await engine.get_account_balance(posted["1002"].id) == Decimal("20000")
        assert await engine.get_account_balance(posted["3001"].id) == Decimal("100000")
        assert await engine.get_account_balance(posted["4001"].id) == Decimal("50000")
        assert await engine.get_account_balance(posted["5002"].id) == Decimal("20000")

    @pytest.mark.asyncio
    async def test_up_to_date(self, engine: AccountingEngine, posted: dict[str, Account]) -> None:
        """기준일 이후 거래 제외 (기준일 포함)"""
        cash = posted["1001"].id

        assert await engine.get_account_balance(cash, "2023-08-01") == Decimal("100000")
        assert await engine.get_account_balance(cash, date(2023, 9, 15)) == Decimal("110000")
        assert await engine.get_account_balance(cash, "2023-07-31") == Decimal("0")

    @pytest.mark.asyncio
    async def test_includes_opening_balance(
        self,
        engine: AccountingEngine,
        chart: ChartOfAccounts,
        manager: VoucherManager,
        accounts: dict[str, Account],
    ) -> None:
        """기초 잔액 + 거래"""
        petty = await chart.create_account(AccountType.ASSET, "Petty Cash", opening_balance="2500")
        await manager.create_voucher(
            VoucherType.PV, "2023-08-10", [dr(accounts["5006"], "300"), cr(petty, "300")]
        )

        assert await engine.get_account_balance(petty.id) == Decimal("2200")

    @pytest.mark.asyncio
    async def test_unknown_account_is_zero(self, engine: AccountingEngine) -> None:
        """존재하지 않는 계정은 0"""
        assert await engine.get_account_balance("missing") == Decimal("0")

    @pytest.mark.asyncio
    async def test_invalid_date(self, engine: AccountingEngine, posted: dict[str, Account]) -> None:
        """날짜 형식 오류"""
        with pytest.raises(ValidationError):
            await engine.get_account_balance(posted["1001"].id, "15/01/2024")

    @pytest.mark.asyncio
    async def test_reads_are_idempotent(
        self,
        engine: AccountingEngine,
        store: InMemoryRecordStore,
        posted: dict[str, Account],
    ) -> None:
        """조회는 저장소를 변경하지 않고 같은 결과를 반환"""
        saves_before = store.save_calls

        async def run_reports() -> list:
            return [
                await engine.get_account_balance(posted["1001"].id),
                await engine.get_account_ledger(posted["1001"].id),
                await engine.get_trial_balance(),
                await engine.get_profit_and_loss("2023-07-21", "2024-07-20"),
                await engine.get_balance_sheet(),
                await engine.get_vat_report("2023-07-21", "2024-07-20"),
                await engine.get_cash_book(),
                await engine.get_bank_book(),
            ]

        first = await run_reports()
        second = await run_reports()

        for before, after in zip(first, second):
            assert before == after
        assert store.save_calls == saves_before


class TestAccountLedger:
    """원장 테스트"""

    @pytest.mark.asyncio
    async def test_sorted_with_running_balance(
        self,
        engine: AccountingEngine,
        posted: dict[str, Account],
    ) -> None:
        """날짜순 정렬 + 누적 잔액"""
        rows = await engine.get_account_ledger(posted["1001"].id)

        assert [r.date for r in rows] == [
            date(2023, 8, 1),
            date(2023, 8, 2),
            date(2023, 9, 15),
            date(2023, 10, 1),
            date(2024, 8, 1),
        ]
        assert [r.balance for r in rows] == [
            Decimal("100000"),
            Decimal("60000"),
            Decimal("110000"),
            Decimal("95000"),
            Decimal("102000"),
        ]

    @pytest.mark.asyncio
    async def test_last_balance_matches_account_balance(
        self,
        engine: AccountingEngine,
        posted: dict[str, Account],
    ) -> None:
        """마지막 누적 잔액 = 계정 잔액"""
        for code in ("1001", "1002", "3001", "4001", "5001"):
            rows = await engine.get_account_ledger(posted[code].id)
            assert rows[-1].balance == await engine.get_account_balance(posted[code].id)

    @pytest.mark.asyncio
    async def test_date_filter_folds_window_only(
        self,
        engine: AccountingEngine,
        posted: dict[str, Account],
    ) -> None:
        """기간 밖 거래는 누적 잔액에 포함하지 않음"""
        rows = await engine.get_account_ledger(posted["1001"].id, "2023-09-01", "2023-12-31")

        assert [r.date for r in rows] == [date(2023, 9, 15), date(2023, 10, 1)]
        assert [r.balance for r in rows] == [Decimal("50000"), Decimal("35000")]

    @pytest.mark.asyncio
    async def test_from_date_starts_at_opening_balance(
        self,
        engine: AccountingEngine,
        manager: VoucherManager,
        chart: ChartOfAccounts,
        accounts: dict[str, Account],
    ) -> None:
        """from_date 지정 시 기초 잔액에서 시작"""
        cash, sales = accounts["1001"], accounts["4001"]
        await chart.update_account(cash.id, opening_balance="200")
        await manager.create_voucher(VoucherType.RV, "2023-08-01", [dr(cash, "1000"), cr(sales, "1000")])
        await manager.create_voucher(VoucherType.RV, "2023-09-01", [dr(cash, "50"), cr(sales, "50")])

        rows = await engine.get_account_ledger(cash.id, "2023-09-01")

        assert len(rows) == 1
        assert rows[0].balance == Decimal("250")

    @pytest.mark.asyncio
    async def test_same_date_keeps_insertion_order(
        self,
        engine: AccountingEngine,
        manager: VoucherManager,
        accounts: dict[str, Account],
    ) -> None:
        """같은 날짜는 저장 순서 유지"""
        cash, sales, rent = accounts["1001"], accounts["4001"], accounts["5001"]
        await manager.create_voucher(VoucherType.RV, "2023-08-05", [dr(cash, "300"), cr(sales, "300")])
        await manager.create_voucher(VoucherType.PV, "2023-08-05", [dr(rent, "100"), cr(cash, "100")])
        await manager.create_voucher(VoucherType.RV, "2023-08-05", [dr(cash, "50"), cr(sales, "50")])

        rows = await engine.get_account_ledger(cash.id)

        assert [r.voucher_no for r in (row.transaction for row in rows)] == [
            "RV-2080-81-0001",
            "PV-2080-81-0001",
            "RV-2080-81-0002",
        ]
        assert [r.balance for r in rows] == [Decimal("300"), Decimal("200"), Decimal("250")]

    @pytest.mark.asyncio
    async def test_unknown_account(self, engine: AccountingEngine) -> None:
        """존재하지 않는 계정은 빈 원장"""
        assert await engine.get_account_ledger("missing") == []

    @pytest.mark.asyncio
    async def test_row_to_dict(self, engine: AccountingEngine, posted: dict[str, Account]) -> None:
        """dict 변환에 잔액 포함"""
        row = (await engine.get_account_ledger(posted["3001"].id))[0]

        data = row.to_dict()
        assert data["balance"] == "100000"
        assert data["credit"] == "100000"


class TestTrialBalance:
    """시산표 테스트"""

    @pytest.mark.asyncio
    async def test_columns_balance(self, engine: AccountingEngine, posted: dict[str, Account]) -> None:
        """차변 합계 = 대변 합계"""
        rows = await engine.get_trial_balance()

        assert sum(r.debit for r in rows) == Decimal("157000")
        assert sum(r.credit for r in rows) == Decimal("157000")

    @pytest.mark.asyncio
    async def test_as_of_date(self, engine: AccountingEngine, posted: dict[str, Account]) -> None:
        """기준일 시산표"""
        rows = {r.account_code: r for r in await engine.get_trial_balance("2024-07-20")}

        assert rows["1001"].debit == Decimal("95000")
        assert rows["4002"].credit == Decimal("0")

    @pytest.mark.asyncio
    async def test_negative_balance_in_neither_column(
        self,
        engine: AccountingEngine,
        manager: VoucherManager,
        accounts: dict[str, Account],
    ) -> None:
        """음수 잔액은 어느 칸에도 표시되지 않아 합계가 맞지 않음"""
        await manager.create_voucher(
            VoucherType.PV, "2023-08-01", [dr(accounts["5001"], "500"), cr(accounts["1001"], "500")]
        )

        rows = await engine.get_trial_balance()
        cash = next(r for r in rows if r.account_code == "1001")

        assert cash.balance == Decimal("-500")
        assert cash.debit == Decimal("0")
        assert cash.credit == Decimal("0")
        assert sum(r.debit for r in rows) == Decimal("500")
        assert sum(r.credit for r in rows) == Decimal("0")

    @pytest.mark.asyncio
    async def test_sorted_by_code_string(
        self,
        engine: AccountingEngine,
        chart: ChartOfAccounts,
    ) -> None:
        """계정 코드 문자열 순 정렬"""
        await chart.create_account(AccountType.ASSET, "Suspense", code="999")

        codes = [r.account_code for r in await engine.get_trial_balance()]

        assert codes == sorted(codes)
        assert codes[-1] == "999"

    @pytest.mark.asyncio
    async def test_excludes_disabled(
        self,
        engine: AccountingEngine,
        chart: ChartOfAccounts,
        accounts: dict[str, Account],
    ) -> None:
        """비활성 계정 제외"""
        await chart.disable_account(accounts["5010"].id)

        codes = {r.account_code for r in await engine.get_trial_balance()}

        assert "5010" not in codes
        assert len(codes) == 26


class TestProfitAndLoss:
    """손익계산서 테스트"""

    @pytest.mark.asyncio
    async def test_fiscal_year(self, engine: AccountingEngine, posted: dict[str, Account]) -> None:
        """FY 2080/81 손익 (기간 밖 서비스 수입 제외)"""
        pl = await engine.get_profit_and_loss("2023-07-21", "2024-07-20")

        assert [(l.account_code, l.amount) for l in pl.income] == [("4001", Decimal("50000"))]
        assert [(l.account_code, l.amount) for l in pl.expenses] == [
            ("5001", Decimal("15000")),
            ("5002", Decimal("20000")),
        ]
        assert pl.total_income == Decimal("50000")
        assert pl.total_expenses == Decimal("35000")
        assert pl.net_profit == Decimal("15000")

    @pytest.mark.asyncio
    async def test_window_is_inclusive(self, engine: AccountingEngine, posted: dict[str, Account]) -> None:
        """기간 양 끝 포함"""
        pl = await engine.get_profit_and_loss(date(2023, 9, 15), date(2023, 10, 1))

        assert pl.total_income == Decimal("50000")
        assert pl.total_expenses == Decimal("15000")

    @pytest.mark.asyncio
    async def test_ignores_opening_balance(
        self,
        engine: AccountingEngine,
        chart: ChartOfAccounts,
    ) -> None:
        """수익 계정 기초 잔액은 손익에 포함하지 않음"""
        await chart.create_account(AccountType.INCOME, "Rental Income", opening_balance="9000")

        pl = await engine.get_profit_and_loss("2023-07-21", "2024-07-20")

        assert pl.income == []
        assert pl.net_profit == Decimal("0")

    @pytest.mark.asyncio
    async def test_loss(
        self,
        engine: AccountingEngine,
        manager: VoucherManager,
        accounts: dict[str, Account],
    ) -> None:
        """순손실은 음수"""
        await manager.create_voucher(
            VoucherType.PV, "2023-08-01", [dr(accounts["5003"], "1200"), cr(accounts["1001"], "1200")]
        )

        pl = await engine.get_profit_and_loss("2023-07-21", "2024-07-20")

        assert pl.net_profit == Decimal("-1200")

    @pytest.mark.asyncio
    async def test_requires_valid_dates(self, engine: AccountingEngine) -> None:
        """날짜 형식 오류"""
        with pytest.raises(ValidationError):
            await engine.get_profit_and_loss("2080/04/01", "2024-07-20")


class TestBalanceSheet:
    """재무상태표 테스트"""

    @pytest.mark.asyncio
    async def test_sections(self, engine: AccountingEngine, posted: dict[str, Account]) -> None:
        """자산/부채/자본 (수익/비용 제외, 0 잔액 제외)"""
        sheet = await engine.get_balance_sheet("2024-07-20")

        assert [(l.account_code, l.amount) for l in sheet.assets] == [
            ("1001", Decimal("95000")),
            ("1002", Decimal("20000")),
        ]
        assert sheet.liabilities == []
        assert [(l.account_code, l.amount) for l in sheet.equity] == [("3001", Decimal("100000"))]
        assert sheet.total_assets == Decimal("115000")
        assert sheet.total_equity == Decimal("100000")

    @pytest.mark.asyncio
    async def test_abs_amount_signed_total(
        self,
        engine: AccountingEngine,
        manager: VoucherManager,
        accounts: dict[str, Account],
    ) -> None:
        """항목은 절대값, 합계는 부호 유지"""
        await manager.create_voucher(
            VoucherType.PV, "2023-08-01", [dr(accounts["5001"], "500"), cr(accounts["1001"], "500")]
        )

        sheet = await engine.get_balance_sheet()

        assert sheet.assets[0].amount == Decimal("500")
        assert sheet.total_assets == Decimal("-500")


class TestBooks:
    """현금출납장/은행장 테스트"""

    @pytest.mark.asyncio
    async def test_cash_book(self, engine: AccountingEngine, posted: dict[str, Account]) -> None:
        """이름에 cash가 포함된 계정"""
        sections = await engine.get_cash_book()

        assert [s.account_code for s in sections] == ["1001"]
        assert len(sections[0].transactions) == 5

    @pytest.mark.asyncio
    async def test_bank_book_matches_by_name(
        self,
        engine: AccountingEngine,
        posted: dict[str, Account],
    ) -> None:
        """이름 기준 매칭 (Bank Charges 포함)"""
        sections = await engine.get_bank_book("2023-07-21", "2024-07-20")

        assert [s.account_name for s in sections] == ["Bank Account", "Bank Charges"]
        assert [r.balance for r in sections[0].transactions] == [Decimal("40000"), Decimal("20000")]
        assert sections[1].transactions == []

    @pytest.mark.asyncio
    async def test_cash_book_window(self, engine: AccountingEngine, posted: dict[str, Account]) -> None:
        """기간 지정 시 기간 내 거래만 누적"""
        sections = await engine.get_cash_book(from_date="2023-09-01")

        assert [r.balance for r in sections[0].transactions] == [
            Decimal("50000"),
            Decimal("35000"),
            Decimal("42000"),
        ]
