"""
Ledger 데이터 모델

계정(Account), 분개 라인(JournalLine), 전표(Voucher), 원장 거래(Transaction).
저장소에는 to_record()의 dict 형태로 저장 (금액은 str, 날짜는 ISO 문자열).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any

from core.calendar import BSDate
from core.constants import Defaults
from core.ledger.errors import ValidationError
from core.ledger.types import AccountType, JournalSide, VoucherStatus, VoucherType
from core.utils.money import ZERO, to_decimal
from core.utils.timezone import to_date


def signed_amount(account_type: AccountType, debit: Decimal, credit: Decimal) -> Decimal:
    """정상 잔액 방향 기준 잔액 변동

    ASSET/EXPENSE: debit - credit
    LIABILITY/EQUITY/INCOME: credit - debit
    """
    if account_type.is_debit_normal:
        return debit - credit
    return credit - debit


def format_voucher_number(voucher_type: VoucherType, fiscal_year: str, sequence: int) -> str:
    """전표 번호 생성

    Example:
        >>> format_voucher_number(VoucherType.JV, "2080/81", 1)
        'JV-2080-81-0001'
    """
    fy_tag = fiscal_year.replace("/", "-")
    return f"{voucher_type.value}-{fy_tag}-{sequence:0{Defaults.VOUCHER_SEQUENCE_WIDTH}d}"


def parse_voucher_sequence(voucher_no: str, voucher_type: VoucherType, fiscal_year: str) -> int | None:
    """전표 번호에서 일련번호 추출

    유형/회계연도가 다르거나 형식이 맞지 않으면 None.
    """
    prefix = f"{voucher_type.value}-{fiscal_year.replace('/', '-')}-"
    if not voucher_no.startswith(prefix):
        return None
    suffix = voucher_no[len(prefix):]
    return int(suffix) if suffix.isdigit() else None


def _optional_decimal(value: Any) -> Decimal | None:
    return None if value is None else to_decimal(value)


def _optional_str(value: Decimal | None) -> str | None:
    return None if value is None else str(value)


@dataclass
class Account:
    """계정

    code는 장부 내에서 유일. 비활성화(is_disabled)는 소프트 삭제이며
    과거 거래와 잔액은 계속 조회 가능.
    """

    id: str
    code: str
    name: str
    account_type: AccountType
    opening_balance: Decimal = ZERO
    is_disabled: bool = False
    created_at: str = ""

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "type": self.account_type.value,
            "opening_balance": str(self.opening_balance),
            "is_disabled": self.is_disabled,
            "created_at": self.created_at,
        }

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Account:
        return cls(
            id=record["id"],
            code=str(record["code"]),
            name=record["name"],
            account_type=AccountType(record["type"]),
            opening_balance=to_decimal(record.get("opening_balance")),
            is_disabled=bool(record.get("is_disabled", False)),
            created_at=record.get("created_at", ""),
        )


@dataclass(frozen=True)
class JournalLine:
    """분개 라인 (값 객체)

    생성 시점에 검증:
    - 금액은 음수 불가
    - debit / credit 중 정확히 하나만 0보다 큼
    """

    account_id: str
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    particulars: str | None = None

    def __post_init__(self) -> None:
        debit = to_decimal(self.debit)
        credit = to_decimal(self.credit)
        object.__setattr__(self, "debit", debit)
        object.__setattr__(self, "credit", credit)

        if not self.account_id:
            raise ValidationError("Journal line requires an account_id")
        if debit < 0 or credit < 0:
            raise ValidationError(
                f"Negative amount on account {self.account_id}: debit={debit}, credit={credit}"
            )
        if (debit > 0) == (credit > 0):
            raise ValidationError(
                f"Journal line for account {self.account_id} must have exactly one "
                f"of debit/credit (debit={debit}, credit={credit})"
            )

    @property
    def side(self) -> JournalSide:
        return JournalSide.DEBIT if self.debit > 0 else JournalSide.CREDIT

    @property
    def amount(self) -> Decimal:
        return self.debit if self.debit > 0 else self.credit

    def to_record(self) -> dict[str, Any]:
        return {
            "account_id": self.account_id,
            "debit": str(self.debit),
            "credit": str(self.credit),
            "particulars": self.particulars,
        }

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> JournalLine:
        """dict 입력에서 생성 (누락 금액은 0)"""
        return cls(
            account_id=data.get("account_id", ""),
            debit=to_decimal(data.get("debit")),
            credit=to_decimal(data.get("credit")),
            particulars=data.get("particulars"),
        )


@dataclass
class Voucher:
    """전표

    하나의 거래를 표현하는 균형 분개 묶음.
    전기 후 변경 불가 (수정/역분개 기능 없음).
    SI/PI 전표는 VAT 보고서용 인보이스 필드를 함께 가짐.
    """

    id: str
    voucher_no: str
    voucher_type: VoucherType
    date: date
    date_bs: BSDate
    narration: str
    entries: list[JournalLine]
    status: VoucherStatus = VoucherStatus.POSTED
    created_at: str = ""

    # 인보이스 (SI/PI)
    party_name: str | None = None
    party_pan: str | None = None
    subtotal: Decimal | None = None
    vat_amount: Decimal | None = None
    total: Decimal | None = None

    @property
    def total_debit(self) -> Decimal:
        return sum((e.debit for e in self.entries), ZERO)

    @property
    def total_credit(self) -> Decimal:
        return sum((e.credit for e in self.entries), ZERO)

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "voucher_no": self.voucher_no,
            "type": self.voucher_type.value,
            "date": self.date.isoformat(),
            "date_bs": self.date_bs.to_dict(),
            "narration": self.narration,
            "entries": [e.to_record() for e in self.entries],
            "status": self.status.value,
            "created_at": self.created_at,
            "party_name": self.party_name,
            "party_pan": self.party_pan,
            "subtotal": _optional_str(self.subtotal),
            "vat_amount": _optional_str(self.vat_amount),
            "total": _optional_str(self.total),
        }

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Voucher:
        return cls(
            id=record["id"],
            voucher_no=record["voucher_no"],
            voucher_type=VoucherType(record["type"]),
            date=to_date(record["date"]),
            date_bs=BSDate.from_dict(record["date_bs"]),
            narration=record.get("narration") or "",
            entries=[JournalLine.from_mapping(e) for e in record.get("entries", [])],
            status=VoucherStatus(record.get("status", VoucherStatus.POSTED.value)),
            created_at=record.get("created_at", ""),
            party_name=record.get("party_name"),
            party_pan=record.get("party_pan"),
            subtotal=_optional_decimal(record.get("subtotal")),
            vat_amount=_optional_decimal(record.get("vat_amount")),
            total=_optional_decimal(record.get("total")),
        )


@dataclass(frozen=True)
class Transaction:
    """원장 거래 (전표 라인에서 파생된 차변 또는 대변 한 줄)

    추가 전용(append-only). 잔액(balance)은 저장하지 않고 조회 시 계산.
    """

    id: str
    voucher_id: str
    voucher_no: str
    voucher_type: VoucherType
    account_id: str
    date: date
    date_bs: BSDate
    particulars: str
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    is_closing: bool = False

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "voucher_id": self.voucher_id,
            "voucher_no": self.voucher_no,
            "voucher_type": self.voucher_type.value,
            "account_id": self.account_id,
            "date": self.date.isoformat(),
            "date_bs": self.date_bs.to_dict(),
            "particulars": self.particulars,
            "debit": str(self.debit),
            "credit": str(self.credit),
            "is_closing": self.is_closing,
        }

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Transaction:
        return cls(
            id=record["id"],
            voucher_id=record["voucher_id"],
            voucher_no=record["voucher_no"],
            voucher_type=VoucherType(record["voucher_type"]),
            account_id=record["account_id"],
            date=to_date(record["date"]),
            date_bs=BSDate.from_dict(record["date_bs"]),
            particulars=record.get("particulars") or "",
            debit=to_decimal(record.get("debit")),
            credit=to_decimal(record.get("credit")),
            is_closing=bool(record.get("is_closing", False)),
        )


@dataclass(frozen=True)
class JournalValidation:
    """분개 균형 검증 결과"""

    is_valid: bool
    total_debit: Decimal
    total_credit: Decimal
    difference: Decimal


@dataclass(frozen=True)
class LedgerRow:
    """원장 한 줄 (거래 + 거래 후 누적 잔액)"""

    transaction: Transaction
    balance: Decimal

    @property
    def date(self) -> date:
        return self.transaction.date

    @property
    def debit(self) -> Decimal:
        return self.transaction.debit

    @property
    def credit(self) -> Decimal:
        return self.transaction.credit

    def to_dict(self) -> dict[str, Any]:
        return {**self.transaction.to_record(), "balance": str(self.balance)}


@dataclass(frozen=True)
class TrialBalanceRow:
    account_code: str
    account_name: str
    account_type: AccountType
    debit: Decimal
    credit: Decimal
    balance: Decimal


@dataclass(frozen=True)
class StatementLine:
    """손익계산서/재무상태표 항목"""

    account_code: str
    account_name: str
    amount: Decimal


@dataclass(frozen=True)
class ProfitAndLoss:
    income: list[StatementLine]
    expenses: list[StatementLine]
    total_income: Decimal
    total_expenses: Decimal
    net_profit: Decimal


@dataclass(frozen=True)
class BalanceSheet:
    """재무상태표

    항목 금액은 절대값, 합계는 부호 유지.
    """

    assets: list[StatementLine]
    liabilities: list[StatementLine]
    equity: list[StatementLine]
    total_assets: Decimal
    total_liabilities: Decimal
    total_equity: Decimal


@dataclass(frozen=True)
class BookSection:
    """현금출납장/은행장 계정별 섹션"""

    account_code: str
    account_name: str
    transactions: list[LedgerRow] = field(default_factory=list)


@dataclass(frozen=True)
class VATLine:
    date: BSDate
    voucher_no: str
    party: str | None
    pan_vat: str | None
    taxable_amount: Decimal
    vat_amount: Decimal
    total_amount: Decimal


@dataclass(frozen=True)
class VATReport:
    """VAT 보고서 (매출 VAT - 매입 VAT = 납부 VAT)"""

    sales_vat: list[VATLine]
    purchase_vat: list[VATLine]
    total_sales_vat: Decimal
    total_purchase_vat: Decimal
    net_vat: Decimal
