"""
복식부기 엔진

전표 검증/전기와 저장된 거래로부터 계산하는 모든 보고서.
잔액은 저장하지 않으며 항상 기초 잔액 + 거래 합산으로 계산.

잔액 계산 규칙:
    ASSET/EXPENSE:              balance += debit - credit
    LIABILITY/EQUITY/INCOME:    balance += credit - debit
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import uuid4

from adapters.interfaces import IRecordStore
from core.calendar import date_to_bs, fiscal_year_date_range
from core.constants import Collections, Defaults
from core.ledger.errors import UnbalancedEntryError, ValidationError
from core.ledger.models import (
    Account,
    BalanceSheet,
    BookSection,
    JournalLine,
    JournalValidation,
    LedgerRow,
    ProfitAndLoss,
    StatementLine,
    Transaction,
    TrialBalanceRow,
    VATLine,
    VATReport,
    Voucher,
    format_voucher_number,
    signed_amount,
)
from core.ledger.types import AccountType, JournalSide, VoucherStatus, VoucherType
from core.utils.money import ZERO, to_decimal
from core.utils.timezone import now_utc, to_date

logger = logging.getLogger(__name__)

DateLike = date | datetime | str

CASH_BOOK_KEYWORD = "cash"
BANK_BOOK_KEYWORD = "bank"
CAPITAL_NAME_KEYWORD = "capital"


def to_date_value(value: DateLike) -> date:
    """날짜 인자 변환

    Raises:
        ValidationError: 날짜로 해석할 수 없는 값
    """
    try:
        return to_date(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid date: {value!r}") from e


def _optional_date(value: DateLike | None) -> date | None:
    return None if value is None else to_date_value(value)


def _in_range(value: date, start: date | None, end: date | None) -> bool:
    if start is not None and value < start:
        return False
    if end is not None and value > end:
        return False
    return True


class AccountingEngine:
    """복식부기 엔진

    Args:
        store: 레코드 저장소
        strict_calendar: BS 변환 테이블 범위 밖 연도를 오류로 처리할지 여부

    사용 예시:
    ```python
    engine = AccountingEngine(store)

    balance = await engine.get_account_balance(cash.id)
    rows = await engine.get_trial_balance()
    pl = await engine.get_profit_and_loss("2023-07-21", "2024-07-20")
    ```
    """

    def __init__(self, store: IRecordStore, strict_calendar: bool = True):
        self.store = store
        self.strict_calendar = strict_calendar

    # -------------------------------------------------------------------------
    # 검증 / 전기
    # -------------------------------------------------------------------------

    def validate_journal_entry(
        self,
        entries: Iterable[JournalLine | Mapping[str, Any]],
    ) -> JournalValidation:
        """차변/대변 균형 검증

        |총 차변 - 총 대변| < 0.01 이면 균형.
        누락되거나 숫자가 아닌 금액은 0으로 간주.
        """
        total_debit = ZERO
        total_credit = ZERO

        for entry in entries:
            if isinstance(entry, JournalLine):
                total_debit += entry.debit
                total_credit += entry.credit
            else:
                total_debit += to_decimal(entry.get("debit"))
                total_credit += to_decimal(entry.get("credit"))

        difference = abs(total_debit - total_credit)
        return JournalValidation(
            is_valid=difference < Defaults.BALANCE_TOLERANCE,
            total_debit=total_debit,
            total_credit=total_credit,
            difference=difference,
        )

    def _expand_voucher(self, voucher: Voucher) -> list[Transaction]:
        """전표 라인 → 원장 거래 (라인당 1건, 0이 아닌 쪽만)"""
        transactions: list[Transaction] = []
        is_closing = voucher.status == VoucherStatus.CLOSING

        for entry in voucher.entries:
            common = dict(
                voucher_id=voucher.id,
                voucher_no=voucher.voucher_no,
                voucher_type=voucher.voucher_type,
                account_id=entry.account_id,
                date=voucher.date,
                date_bs=voucher.date_bs,
                particulars=entry.particulars or voucher.narration,
                is_closing=is_closing,
            )
            if entry.side == JournalSide.DEBIT:
                transactions.append(Transaction(id=uuid4().hex, debit=entry.amount, **common))
            else:
                transactions.append(Transaction(id=uuid4().hex, credit=entry.amount, **common))

        return transactions

    async def post_journal_entry(self, voucher: Voucher) -> list[Transaction]:
        """전표 라인을 원장 거래로 저장

        전체 거래가 함께 저장되거나 하나도 저장되지 않음.
        균형 검증은 호출자 책임 (post_voucher 사용 권장).

        Returns:
            생성된 Transaction 목록
        """
        transactions = self._expand_voucher(voucher)

        async with self.store.atomic():
            for txn in transactions:
                await self.store.save(Collections.TRANSACTIONS, txn.to_record())

        logger.debug(f"{voucher.voucher_no}: {len(transactions)}건 전기")
        return transactions

    async def post_voucher(self, voucher: Voucher) -> list[Transaction]:
        """전표 검증 + 전표 저장 + 원장 전기 (단일 원자 단위)

        Raises:
            UnbalancedEntryError: 차변/대변 불균형
        """
        validation = self.validate_journal_entry(voucher.entries)
        if not validation.is_valid:
            raise UnbalancedEntryError(
                validation.total_debit,
                validation.total_credit,
                validation.difference,
            )

        async with self.store.atomic():
            await self.store.save(Collections.VOUCHERS, voucher.to_record())
            transactions = await self.post_journal_entry(voucher)

        logger.info(
            f"전표 전기: {voucher.voucher_no} "
            f"(차변 {validation.total_debit}, 라인 {len(voucher.entries)})"
        )
        return transactions

    # -------------------------------------------------------------------------
    # 조회 헬퍼
    # -------------------------------------------------------------------------

    async def _load_account(self, account_id: str) -> Account | None:
        record = await self.store.get(Collections.ACCOUNTS, account_id)
        return Account.from_record(record) if record is not None else None

    async def _load_accounts(self, include_disabled: bool = False) -> list[Account]:
        accounts = [Account.from_record(r) for r in await self.store.get_all(Collections.ACCOUNTS)]
        if include_disabled:
            return accounts
        return [a for a in accounts if not a.is_disabled]

    async def _account_transactions(self, account_id: str) -> list[Transaction]:
        records = await self.store.query_by_index(
            Collections.TRANSACTIONS, "account_id", account_id
        )
        return [Transaction.from_record(r) for r in records]

    # -------------------------------------------------------------------------
    # 잔액 / 원장
    # -------------------------------------------------------------------------

    async def get_account_balance(
        self,
        account_id: str,
        up_to_date: DateLike | None = None,
    ) -> Decimal:
        """계정 잔액 (정상 잔액 방향 기준)

        Args:
            account_id: 계정 id
            up_to_date: 이 날짜까지의 거래만 포함 (None이면 전체)

        Returns:
            잔액 (존재하지 않는 계정은 0)
        """
        account = await self._load_account(account_id)
        if account is None:
            logger.debug(f"잔액 조회: 존재하지 않는 계정 {account_id}")
            return ZERO

        cutoff = _optional_date(up_to_date)
        balance = account.opening_balance

        for txn in await self._account_transactions(account_id):
            if cutoff is not None and txn.date > cutoff:
                continue
            balance += signed_amount(account.account_type, txn.debit, txn.credit)

        return balance

    async def get_account_ledger(
        self,
        account_id: str,
        from_date: DateLike | None = None,
        to_date: DateLike | None = None,
    ) -> list[LedgerRow]:
        """계정 원장 (날짜순, 누적 잔액 포함)

        기간 안의 거래만 기초 잔액에서부터 누적.
        같은 날짜의 거래는 저장 순서 유지.

        Returns:
            LedgerRow 목록 (존재하지 않는 계정은 빈 목록)
        """
        account = await self._load_account(account_id)
        if account is None:
            return []

        start = _optional_date(from_date)
        end = _optional_date(to_date)

        transactions = sorted(
            await self._account_transactions(account_id),
            key=lambda t: t.date,
        )

        balance = account.opening_balance
        rows: list[LedgerRow] = []

        for txn in transactions:
            if not _in_range(txn.date, start, end):
                continue
            balance += signed_amount(account.account_type, txn.debit, txn.credit)
            rows.append(LedgerRow(transaction=txn, balance=balance))

        return rows

    # -------------------------------------------------------------------------
    # 보고서
    # -------------------------------------------------------------------------

    async def get_trial_balance(self, as_of_date: DateLike | None = None) -> list[TrialBalanceRow]:
        """시산표

        활성 계정별 잔액을 정상 잔액 방향 칸에 배치.
        음수 잔액은 debit/credit 어느 칸에도 나타나지 않고 balance에만 남음.

        Returns:
            계정 코드 순 TrialBalanceRow 목록
        """
        rows: list[TrialBalanceRow] = []

        for account in await self._load_accounts():
            balance = await self.get_account_balance(account.id, as_of_date)
            debit_normal = account.account_type.is_debit_normal

            rows.append(
                TrialBalanceRow(
                    account_code=account.code,
                    account_name=account.name,
                    account_type=account.account_type,
                    debit=balance if debit_normal and balance > 0 else ZERO,
                    credit=balance if not debit_normal and balance > 0 else ZERO,
                    balance=balance,
                )
            )

        rows.sort(key=lambda r: r.account_code)
        return rows

    async def _period_activity(
        self,
        from_date: DateLike,
        to_date: DateLike,
    ) -> list[tuple[Account, Decimal]]:
        """기간 내 수익/비용 계정별 발생액 (결산 거래 제외, 0 제외)"""
        start = to_date_value(from_date)
        end = to_date_value(to_date)
        activity: list[tuple[Account, Decimal]] = []

        for account in await self._load_accounts():
            if account.account_type not in (AccountType.INCOME, AccountType.EXPENSE):
                continue

            amount = ZERO
            for txn in await self._account_transactions(account.id):
                if txn.is_closing or not _in_range(txn.date, start, end):
                    continue
                amount += signed_amount(account.account_type, txn.debit, txn.credit)

            if amount != 0:
                activity.append((account, amount))

        return activity

    async def get_profit_and_loss(self, from_date: DateLike, to_date: DateLike) -> ProfitAndLoss:
        """손익계산서 (기간 양 끝 포함)

        기초 잔액은 포함하지 않으며 결산 전표 거래는 제외.
        """
        income: list[StatementLine] = []
        expenses: list[StatementLine] = []

        for account, amount in await self._period_activity(from_date, to_date):
            line = StatementLine(account.code, account.name, amount)
            if account.account_type == AccountType.INCOME:
                income.append(line)
            else:
                expenses.append(line)

        total_income = sum((line.amount for line in income), ZERO)
        total_expenses = sum((line.amount for line in expenses), ZERO)

        return ProfitAndLoss(
            income=income,
            expenses=expenses,
            total_income=total_income,
            total_expenses=total_expenses,
            net_profit=total_income - total_expenses,
        )

    async def get_balance_sheet(self, as_of_date: DateLike | None = None) -> BalanceSheet:
        """재무상태표

        항목 금액은 절대값, 합계는 부호 있는 잔액의 합.
        수익/비용 계정은 포함하지 않음.
        """
        sections: dict[AccountType, list[StatementLine]] = {
            AccountType.ASSET: [],
            AccountType.LIABILITY: [],
            AccountType.EQUITY: [],
        }
        totals: dict[AccountType, Decimal] = {t: ZERO for t in sections}

        for account in await self._load_accounts():
            if account.account_type not in sections:
                continue

            balance = await self.get_account_balance(account.id, as_of_date)
            if balance == 0:
                continue

            sections[account.account_type].append(
                StatementLine(account.code, account.name, abs(balance))
            )
            totals[account.account_type] += balance

        return BalanceSheet(
            assets=sections[AccountType.ASSET],
            liabilities=sections[AccountType.LIABILITY],
            equity=sections[AccountType.EQUITY],
            total_assets=totals[AccountType.ASSET],
            total_liabilities=totals[AccountType.LIABILITY],
            total_equity=totals[AccountType.EQUITY],
        )

    async def _book(
        self,
        keyword: str,
        from_date: DateLike | None,
        to_date: DateLike | None,
    ) -> list[BookSection]:
        sections: list[BookSection] = []

        for account in await self._load_accounts():
            if keyword not in account.name.lower():
                continue
            rows = await self.get_account_ledger(account.id, from_date, to_date)
            sections.append(BookSection(account.code, account.name, rows))

        return sections

    async def get_cash_book(
        self,
        from_date: DateLike | None = None,
        to_date: DateLike | None = None,
    ) -> list[BookSection]:
        """현금출납장 (이름에 "cash"가 포함된 활성 계정)"""
        return await self._book(CASH_BOOK_KEYWORD, from_date, to_date)

    async def get_bank_book(
        self,
        from_date: DateLike | None = None,
        to_date: DateLike | None = None,
    ) -> list[BookSection]:
        """은행장 (이름에 "bank"가 포함된 활성 계정)

        이름 기준 매칭이므로 "Bank Charges" 같은 비용 계정도 포함됨.
        """
        return await self._book(BANK_BOOK_KEYWORD, from_date, to_date)

    async def get_vat_report(self, from_date: DateLike, to_date: DateLike) -> VATReport:
        """VAT 보고서

        기간 내 VAT > 0인 SI 전표는 매출 VAT, PI 전표는 매입 VAT.
        """
        start = to_date_value(from_date)
        end = to_date_value(to_date)

        sales: list[VATLine] = []
        purchases: list[VATLine] = []

        vouchers = [Voucher.from_record(r) for r in await self.store.get_all(Collections.VOUCHERS)]
        vouchers.sort(key=lambda v: (v.date, v.voucher_no))

        for voucher in vouchers:
            if not _in_range(voucher.date, start, end):
                continue

            vat_amount = voucher.vat_amount or ZERO
            line = VATLine(
                date=voucher.date_bs,
                voucher_no=voucher.voucher_no,
                party=voucher.party_name,
                pan_vat=voucher.party_pan,
                taxable_amount=voucher.subtotal or ZERO,
                vat_amount=vat_amount,
                total_amount=voucher.total or ZERO,
            )

            if voucher.voucher_type == VoucherType.SI and vat_amount > 0:
                sales.append(line)
            elif voucher.voucher_type == VoucherType.PI and vat_amount > 0:
                purchases.append(line)

        total_sales_vat = sum((line.vat_amount for line in sales), ZERO)
        total_purchase_vat = sum((line.vat_amount for line in purchases), ZERO)

        return VATReport(
            sales_vat=sales,
            purchase_vat=purchases,
            total_sales_vat=total_sales_vat,
            total_purchase_vat=total_purchase_vat,
            net_vat=total_sales_vat - total_purchase_vat,
        )

    # -------------------------------------------------------------------------
    # 결산
    # -------------------------------------------------------------------------

    async def _find_capital_account(self, capital_code: str | None) -> Account | None:
        accounts = await self._load_accounts()

        if capital_code:
            for account in accounts:
                if account.code == capital_code:
                    return account
            return None

        for account in accounts:
            if CAPITAL_NAME_KEYWORD in account.name.lower():
                return account
        return None

    async def close_fiscal_year(
        self,
        fiscal_year: str,
        capital_code: str | None = None,
    ) -> Decimal:
        """회계연도 결산

        해당 회계연도(BS Shrawan 1일 ~ 다음 해 Ashadh 말일)의 수익/비용을
        자본 계정으로 대체하는 균형 결산 전표(JV-{fy}-9999) 전기.
        순이익이 0이거나 자본 계정이 없으면 전표를 만들지 않음.

        Args:
            fiscal_year: 회계연도 ("2080/81")
            capital_code: 자본 계정 코드 (None이면 이름에 "capital"이 포함된 첫 계정)

        Returns:
            순이익 (손실이면 음수)

        Raises:
            ValidationError: 잘못된 회계연도 또는 이미 결산된 회계연도
        """
        try:
            start, end = fiscal_year_date_range(fiscal_year, self.strict_calendar)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        closing_no = format_voucher_number(VoucherType.JV, fiscal_year, Defaults.CLOSING_SEQUENCE)
        for record in await self.store.get_all(Collections.VOUCHERS):
            if record.get("voucher_no") == closing_no:
                raise ValidationError(f"Fiscal year {fiscal_year} is already closed ({closing_no})")

        activity = await self._period_activity(start, end)
        net_profit = sum(
            (amount if account.account_type == AccountType.INCOME else -amount
             for account, amount in activity),
            ZERO,
        )

        if net_profit == 0:
            logger.info(f"FY {fiscal_year} 결산: 순이익 0, 결산 전표 생략")
            return net_profit

        capital = await self._find_capital_account(capital_code)
        if capital is None:
            logger.warning(f"FY {fiscal_year} 결산: 자본 계정 없음, 결산 전표 생략")
            return net_profit

        entries: list[JournalLine] = []
        for account, amount in activity:
            # 수익은 차변, 비용은 대변으로 잔액을 0으로
            if account.account_type == AccountType.EXPENSE:
                amount = -amount
            if amount > 0:
                entries.append(JournalLine(account.id, debit=amount))
            else:
                entries.append(JournalLine(account.id, credit=-amount))

        if net_profit > 0:
            entries.append(JournalLine(capital.id, credit=net_profit))
        else:
            entries.append(JournalLine(capital.id, debit=-net_profit))

        voucher = Voucher(
            id=uuid4().hex,
            voucher_no=closing_no,
            voucher_type=VoucherType.JV,
            date=end,
            date_bs=date_to_bs(end, self.strict_calendar),
            narration=f"Profit/Loss transfer for FY {fiscal_year}",
            entries=entries,
            status=VoucherStatus.CLOSING,
            created_at=now_utc().isoformat(),
        )
        await self.post_voucher(voucher)

        logger.info(f"FY {fiscal_year} 결산 완료: 순이익 {net_profit} → {capital.code} {capital.name}")
        return net_profit
