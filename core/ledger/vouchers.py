"""
전표 관리자

전표 번호 발급, 전표 구성/검증, 엔진을 통한 전기.
매출/매입 인보이스(SI/PI)는 VAT 분개를 자동 구성.

전표 번호 형식:
    {TYPE}-{회계연도 ('/' → '-')}-{일련번호 4자리}
    예: JV-2080-81-0001, SI-2080-81-0012
    결산 전표는 일련번호 9999 고정 (JV-2080-81-9999)
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any
from uuid import uuid4

from adapters.interfaces import IRecordStore
from core.calendar import BSDate, date_to_bs, parse_fiscal_year
from core.constants import Collections, Defaults
from core.ledger.accounts import ChartOfAccounts
from core.ledger.engine import AccountingEngine, DateLike, to_date_value
from core.ledger.errors import NotFoundError, UnbalancedEntryError, ValidationError
from core.ledger.models import (
    JournalLine,
    Voucher,
    format_voucher_number,
    parse_voucher_sequence,
)
from core.ledger.types import InvoiceAccounts, VoucherStatus, VoucherType
from core.utils.money import calculate_vat, round_money
from core.utils.timezone import now_utc

logger = logging.getLogger(__name__)

_PAN_PATTERN = re.compile(r"^\d{9}$")


def coerce_voucher_type(value: VoucherType | str) -> VoucherType:
    """문자열/Enum을 VoucherType으로 변환

    Raises:
        ValidationError: 알 수 없는 전표 유형
    """
    if isinstance(value, VoucherType):
        return value
    try:
        return VoucherType(value)
    except ValueError:
        valid = [t.value for t in VoucherType]
        raise ValidationError(
            f"Unknown voucher type: {value!r}. Valid types: {valid}"
        ) from None


def _to_line(entry: JournalLine | Mapping[str, Any]) -> JournalLine:
    if isinstance(entry, JournalLine):
        return entry
    return JournalLine.from_mapping(entry)


def _positive_amount(value: Any, label: str) -> Decimal:
    try:
        amount = Decimal(str(value).replace(",", "").strip())
    except ArithmeticError:
        raise ValidationError(f"Invalid {label}: {value!r}") from None
    if not amount.is_finite() or amount <= 0:
        raise ValidationError(f"{label} must be greater than 0: {value!r}")
    return round_money(amount)


def _vat_rate(value: Any) -> Decimal:
    try:
        rate = Decimal(str(value).strip())
    except ArithmeticError:
        raise ValidationError(f"Invalid VAT rate: {value!r}") from None
    if not rate.is_finite() or rate < 0:
        raise ValidationError(f"VAT rate must be 0 or greater: {value!r}")
    return rate


class VoucherManager:
    """전표 관리자

    Args:
        store: 레코드 저장소
        engine: 복식부기 엔진
        accounts: 계정과목표
        fiscal_year: 전표 번호에 사용할 회계연도 ("2080/81")
        vat_rate: 인보이스 VAT 세율 (%)

    사용 예시:
    ```python
    manager = VoucherManager(store, engine, chart, "2080/81")
    await manager.init_sequences()

    voucher = await manager.create_voucher(
        VoucherType.RV,
        "2024-01-15",
        [
            {"account_id": cash.id, "debit": "5000"},
            {"account_id": sales.id, "credit": "5000"},
        ],
        narration="Cash sales",
    )
    voucher.voucher_no  # "RV-2080-81-0001"
    ```
    """

    def __init__(
        self,
        store: IRecordStore,
        engine: AccountingEngine,
        accounts: ChartOfAccounts,
        fiscal_year: str,
        vat_rate: Decimal = Defaults.VAT_RATE,
    ):
        try:
            parse_fiscal_year(fiscal_year)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        self.store = store
        self.engine = engine
        self.accounts = accounts
        self.fiscal_year = fiscal_year
        self.vat_rate = _vat_rate(vat_rate)

        self._sequences: dict[VoucherType, int] = {t: 1 for t in VoucherType}
        self._sequences_loaded = False

    # -------------------------------------------------------------------------
    # 전표 번호
    # -------------------------------------------------------------------------

    async def init_sequences(self) -> dict[VoucherType, int]:
        """저장된 전표에서 유형별 다음 일련번호 복원

        현재 회계연도 전표만 대상이며 결산 전표(9999)는 제외.

        Returns:
            유형별 다음 일련번호
        """
        highest: dict[VoucherType, int] = {t: 0 for t in VoucherType}

        for record in await self.store.get_all(Collections.VOUCHERS):
            try:
                voucher_type = VoucherType(record.get("type"))
            except ValueError:
                continue

            sequence = parse_voucher_sequence(
                str(record.get("voucher_no", "")), voucher_type, self.fiscal_year
            )
            if sequence is None or sequence == Defaults.CLOSING_SEQUENCE:
                continue
            highest[voucher_type] = max(highest[voucher_type], sequence)

        self._sequences = {t: n + 1 for t, n in highest.items()}
        self._sequences_loaded = True

        logger.info(
            f"전표 번호 초기화 (FY {self.fiscal_year}): "
            + ", ".join(f"{t.value}={n}" for t, n in self._sequences.items())
        )
        return dict(self._sequences)

    def peek_voucher_number(self, voucher_type: VoucherType | str) -> str:
        """다음에 발급될 전표 번호 (발급하지 않음)"""
        voucher_type = coerce_voucher_type(voucher_type)
        return format_voucher_number(voucher_type, self.fiscal_year, self._sequences[voucher_type])

    # -------------------------------------------------------------------------
    # 전표 생성
    # -------------------------------------------------------------------------

    async def create_voucher(
        self,
        voucher_type: VoucherType | str,
        date: DateLike,
        entries: Iterable[JournalLine | Mapping[str, Any]],
        narration: str = "",
        date_bs: BSDate | None = None,
    ) -> Voucher:
        """전표 생성 및 전기

        검증 순서: 라인 구조 → 차변/대변 균형 → 계정 존재/활성 여부.
        검증을 통과한 경우에만 일련번호를 소비.

        Args:
            voucher_type: 전표 유형
            date: 전표 일자 (AD)
            entries: 분개 라인 (JournalLine 또는 account_id/debit/credit dict)
            narration: 적요
            date_bs: BS 일자 (None이면 date에서 변환)

        Returns:
            전기된 Voucher

        Raises:
            ValidationError: 라인 2개 미만, 잘못된 라인, 비활성 계정
            UnbalancedEntryError: 차변/대변 불균형
            NotFoundError: 존재하지 않는 계정
        """
        return await self._create(
            coerce_voucher_type(voucher_type),
            date,
            [_to_line(e) for e in entries],
            narration,
            date_bs,
        )

    async def _create(
        self,
        voucher_type: VoucherType,
        date: DateLike,
        lines: list[JournalLine],
        narration: str,
        date_bs: BSDate | None,
        **invoice: Any,
    ) -> Voucher:
        if len(lines) < Defaults.MIN_VOUCHER_ENTRIES:
            raise ValidationError(
                f"Voucher requires at least {Defaults.MIN_VOUCHER_ENTRIES} entries "
                f"(got {len(lines)})"
            )

        validation = self.engine.validate_journal_entry(lines)
        if not validation.is_valid:
            logger.warning(
                f"불균형 전표 거부: 차변 {validation.total_debit}, "
                f"대변 {validation.total_credit}"
            )
            raise UnbalancedEntryError(
                validation.total_debit,
                validation.total_credit,
                validation.difference,
            )

        await self._check_accounts(lines)

        voucher_date = to_date_value(date)
        if date_bs is None:
            try:
                date_bs = date_to_bs(voucher_date, self.engine.strict_calendar)
            except ValueError as e:
                raise ValidationError(str(e)) from e

        if not self._sequences_loaded:
            await self.init_sequences()

        sequence = self._sequences[voucher_type]
        voucher = Voucher(
            id=uuid4().hex,
            voucher_no=self.peek_voucher_number(voucher_type),
            voucher_type=voucher_type,
            date=voucher_date,
            date_bs=date_bs,
            narration=narration or "",
            entries=lines,
            status=VoucherStatus.POSTED,
            created_at=now_utc().isoformat(),
            **invoice,
        )

        await self.engine.post_voucher(voucher)
        self._sequences[voucher_type] = sequence + 1

        return voucher

    async def _check_accounts(self, lines: list[JournalLine]) -> None:
        for line in lines:
            account = await self.accounts.get_account(line.account_id)
            if account.is_disabled:
                raise ValidationError(
                    f"Account {account.code} {account.name} is disabled"
                )

    # -------------------------------------------------------------------------
    # 인보이스 (VAT)
    # -------------------------------------------------------------------------

    async def _account_id(self, code: str) -> str:
        account = await self.accounts.get_account_by_code(code)
        if account is None:
            raise NotFoundError("Account", code)
        return account.id

    def _invoice_amounts(
        self,
        subtotal: Any,
        vat_rate: Decimal | None,
    ) -> tuple[Decimal, Decimal, Decimal]:
        taxable = _positive_amount(subtotal, "subtotal")
        rate = self.vat_rate if vat_rate is None else _vat_rate(vat_rate)
        vat_amount = calculate_vat(taxable, rate)
        return taxable, vat_amount, taxable + vat_amount

    @staticmethod
    def _check_party(party_name: str, party_pan: str | None) -> tuple[str, str | None]:
        party_name = (party_name or "").strip()
        if not party_name:
            raise ValidationError("Party name is required")
        if party_pan:
            party_pan = str(party_pan).strip()
            if not _PAN_PATTERN.match(party_pan):
                raise ValidationError(f"PAN must be 9 digits: {party_pan!r}")
        return party_name, party_pan or None

    async def create_sales_invoice(
        self,
        date: DateLike,
        subtotal: Decimal | str | int,
        party_name: str,
        party_pan: str | None = None,
        narration: str = "",
        vat_rate: Decimal | None = None,
        receivable_code: str = InvoiceAccounts.RECEIVABLE,
        sales_code: str = InvoiceAccounts.SALES,
        vat_code: str = InvoiceAccounts.VAT,
    ) -> Voucher:
        """매출 인보이스 (SI)

        분개:
            Dr 매출채권   subtotal + VAT
            Cr 매출       subtotal
            Cr VAT 예수금  VAT

        Raises:
            ValidationError: 금액/거래처/PAN 오류
            NotFoundError: 기본 계정 코드가 없는 경우
        """
        party_name, party_pan = self._check_party(party_name, party_pan)
        taxable, vat_amount, total = self._invoice_amounts(subtotal, vat_rate)

        lines = [
            JournalLine(await self._account_id(receivable_code), debit=total),
            JournalLine(await self._account_id(sales_code), credit=taxable),
        ]
        if vat_amount > 0:
            lines.append(JournalLine(await self._account_id(vat_code), credit=vat_amount))

        return await self._create(
            VoucherType.SI,
            date,
            lines,
            narration or f"Sales to {party_name}",
            None,
            party_name=party_name,
            party_pan=party_pan,
            subtotal=taxable,
            vat_amount=vat_amount,
            total=total,
        )

    async def create_purchase_invoice(
        self,
        date: DateLike,
        subtotal: Decimal | str | int,
        party_name: str,
        party_pan: str | None = None,
        narration: str = "",
        vat_rate: Decimal | None = None,
        purchase_code: str = InvoiceAccounts.INVENTORY,
        vat_code: str = InvoiceAccounts.VAT,
        payable_code: str = InvoiceAccounts.PAYABLE,
    ) -> Voucher:
        """매입 인보이스 (PI)

        분개:
            Dr 재고(매입)  subtotal
            Dr VAT 예수금  VAT (매입세액 공제)
            Cr 매입채무    subtotal + VAT
        """
        party_name, party_pan = self._check_party(party_name, party_pan)
        taxable, vat_amount, total = self._invoice_amounts(subtotal, vat_rate)

        lines = [JournalLine(await self._account_id(purchase_code), debit=taxable)]
        if vat_amount > 0:
            lines.append(JournalLine(await self._account_id(vat_code), debit=vat_amount))
        lines.append(JournalLine(await self._account_id(payable_code), credit=total))

        return await self._create(
            VoucherType.PI,
            date,
            lines,
            narration or f"Purchase from {party_name}",
            None,
            party_name=party_name,
            party_pan=party_pan,
            subtotal=taxable,
            vat_amount=vat_amount,
            total=total,
        )

    # -------------------------------------------------------------------------
    # 조회
    # -------------------------------------------------------------------------

    async def get_voucher(self, voucher_id: str) -> Voucher:
        """id로 전표 조회

        Raises:
            NotFoundError: 존재하지 않는 전표
        """
        record = await self.store.get(Collections.VOUCHERS, voucher_id)
        if record is None:
            raise NotFoundError("Voucher", voucher_id)
        return Voucher.from_record(record)

    async def list_vouchers(self, voucher_type: VoucherType | str | None = None) -> list[Voucher]:
        """전표 목록 (날짜, 전표 번호 순)"""
        vouchers = [Voucher.from_record(r) for r in await self.store.get_all(Collections.VOUCHERS)]
        if voucher_type is not None:
            voucher_type = coerce_voucher_type(voucher_type)
            vouchers = [v for v in vouchers if v.voucher_type == voucher_type]
        vouchers.sort(key=lambda v: (v.date, v.voucher_no))
        return vouchers
