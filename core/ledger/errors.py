"""
Ledger 예외 정의

모든 예외는 호출자(UI 레이어)까지 전파되며 자동 재시도하지 않음.
"""

from decimal import Decimal


class LedgerError(Exception):
    """Ledger 예외 기본 클래스"""


class ValidationError(LedgerError):
    """입력 검증 실패

    필수 필드 누락, 알 수 없는 Enum 값, 분개 라인 부족 등.
    """


class UnbalancedEntryError(ValidationError):
    """차변/대변 불균형 분개

    검증 결과(합계, 차이)를 그대로 보관하여 호출자가 표시할 수 있게 함.
    """

    def __init__(self, total_debit: Decimal, total_credit: Decimal, difference: Decimal):
        self.total_debit = total_debit
        self.total_credit = total_credit
        self.difference = difference
        super().__init__(
            f"Journal entry not balanced. "
            f"Debit {total_debit} / Credit {total_credit} (difference {difference})"
        )


class NotFoundError(LedgerError):
    """존재하지 않는 계정/전표 참조"""

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} not found: {identifier}")
