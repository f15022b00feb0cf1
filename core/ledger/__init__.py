"""
복식부기 (Double-Entry Bookkeeping) 시스템

계정과목표, 전표, 원장 및 재무 보고서.
모든 전표는 차변 합계 = 대변 합계를 만족해야 전기됨.

사용 예시:
```python
from core.ledger import AccountingEngine, ChartOfAccounts, VoucherManager, VoucherType

# 초기화
chart = ChartOfAccounts(store)
engine = AccountingEngine(store)
manager = VoucherManager(store, engine, chart, "2080/81")

await chart.initialize_default_accounts()
await manager.init_sequences()

# 전표 전기
cash = await chart.get_account_by_code("1001")
capital = await chart.get_account_by_code("3001")
await manager.create_voucher(
    VoucherType.JV,
    "2024-01-15",
    [
        {"account_id": cash.id, "debit": "100000"},
        {"account_id": capital.id, "credit": "100000"},
    ],
    narration="Capital introduced",
)

# 잔액 조회
balance = await engine.get_account_balance(cash.id)

# 시산표 조회
trial_balance = await engine.get_trial_balance()
```
"""

from core.ledger.accounts import ChartOfAccounts
from core.ledger.books import Books, build_books, open_books
from core.ledger.engine import AccountingEngine
from core.ledger.errors import LedgerError, NotFoundError, UnbalancedEntryError, ValidationError
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
)
from core.ledger.types import (
    DEFAULT_ACCOUNTS,
    AccountType,
    InvoiceAccounts,
    JournalSide,
    VoucherStatus,
    VoucherType,
)
from core.ledger.vouchers import VoucherManager

__all__ = [
    # 핵심 클래스
    "ChartOfAccounts",
    "AccountingEngine",
    "VoucherManager",
    "Books",
    "build_books",
    "open_books",
    # 모델
    "Account",
    "JournalLine",
    "Voucher",
    "Transaction",
    "JournalValidation",
    "LedgerRow",
    "TrialBalanceRow",
    "StatementLine",
    "ProfitAndLoss",
    "BalanceSheet",
    "BookSection",
    "VATLine",
    "VATReport",
    # Enum
    "AccountType",
    "VoucherType",
    "VoucherStatus",
    "JournalSide",
    # 예외
    "LedgerError",
    "ValidationError",
    "UnbalancedEntryError",
    "NotFoundError",
    # 상수
    "DEFAULT_ACCOUNTS",
    "InvoiceAccounts",
]
