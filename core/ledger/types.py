"""
복식부기 타입 정의

계정 유형, 전표 유형 등 Ledger 시스템에서 사용하는 Enum과 기본 계정과목.
"""

from enum import Enum


class AccountType(str, Enum):
    """계정 유형

    복식부기의 5대 계정 유형.
    str을 상속하여 JSON 직렬화 가능.
    """

    ASSET = "Asset"  # 자산
    LIABILITY = "Liability"  # 부채
    EQUITY = "Equity"  # 자본
    INCOME = "Income"  # 수익
    EXPENSE = "Expense"  # 비용

    @property
    def is_debit_normal(self) -> bool:
        """차변 잔액 계정 여부 (차변 증가)

        ASSET, EXPENSE: 잔액 += debit - credit
        나머지: 잔액 += credit - debit
        """
        return self in (AccountType.ASSET, AccountType.EXPENSE)

    @property
    def code_prefix(self) -> str:
        """자동 생성 계정 코드 접두사"""
        return ACCOUNT_CODE_PREFIXES[self]


class VoucherType(str, Enum):
    """전표 유형"""

    JV = "JV"  # Journal Voucher (대체)
    PV = "PV"  # Payment Voucher (지급)
    RV = "RV"  # Receipt Voucher (입금)
    CV = "CV"  # Contra Voucher (현금↔은행)
    SI = "SI"  # Sales Invoice (매출, VAT)
    PI = "PI"  # Purchase Invoice (매입, VAT)


class VoucherStatus(str, Enum):
    """전표 상태"""

    POSTED = "Posted"  # 일반 전기
    CLOSING = "Closing"  # 회계연도 결산


class JournalSide(str, Enum):
    """분개 방향 (차변/대변)"""

    DEBIT = "DEBIT"  # 차변 (자산 증가, 비용 증가)
    CREDIT = "CREDIT"  # 대변 (부채/자본/수익 증가)


ACCOUNT_CODE_PREFIXES: dict[AccountType, str] = {
    AccountType.ASSET: "1",
    AccountType.LIABILITY: "2",
    AccountType.EQUITY: "3",
    AccountType.INCOME: "4",
    AccountType.EXPENSE: "5",
}


# 기본 계정과목 (장부가 비어 있을 때 1회 생성)
DEFAULT_ACCOUNTS: list[tuple[str, AccountType, str]] = [
    # (code, account_type, name)

    # ASSET
    ("1001", AccountType.ASSET, "Cash in Hand"),
    ("1002", AccountType.ASSET, "Bank Account"),
    ("1003", AccountType.ASSET, "Accounts Receivable"),
    ("1004", AccountType.ASSET, "Inventory"),
    ("1005", AccountType.ASSET, "Furniture & Fixtures"),
    ("1006", AccountType.ASSET, "Equipment"),

    # LIABILITY
    ("2001", AccountType.LIABILITY, "Accounts Payable"),
    ("2002", AccountType.LIABILITY, "Loan Payable"),
    ("2003", AccountType.LIABILITY, "VAT Payable"),
    ("2004", AccountType.LIABILITY, "Salary Payable"),

    # EQUITY
    ("3001", AccountType.EQUITY, "Capital"),
    ("3002", AccountType.EQUITY, "Retained Earnings"),
    ("3003", AccountType.EQUITY, "Drawings"),

    # INCOME
    ("4001", AccountType.INCOME, "Sales Revenue"),
    ("4002", AccountType.INCOME, "Service Income"),
    ("4003", AccountType.INCOME, "Interest Income"),
    ("4004", AccountType.INCOME, "Other Income"),

    # EXPENSE
    ("5001", AccountType.EXPENSE, "Rent Expense"),
    ("5002", AccountType.EXPENSE, "Salary Expense"),
    ("5003", AccountType.EXPENSE, "Electricity Expense"),
    ("5004", AccountType.EXPENSE, "Internet Expense"),
    ("5005", AccountType.EXPENSE, "Transportation Expense"),
    ("5006", AccountType.EXPENSE, "Office Supplies"),
    ("5007", AccountType.EXPENSE, "Telephone Expense"),
    ("5008", AccountType.EXPENSE, "Depreciation Expense"),
    ("5009", AccountType.EXPENSE, "Bank Charges"),
    ("5010", AccountType.EXPENSE, "Miscellaneous Expense"),
]


# 인보이스 기본 계정 코드
class InvoiceAccounts:
    RECEIVABLE: str = "1003"
    INVENTORY: str = "1004"
    PAYABLE: str = "2001"
    VAT: str = "2003"
    SALES: str = "4001"
