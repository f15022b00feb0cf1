"""
금액 유틸리티

모든 금액은 Decimal로 처리. float는 str 경유로 변환하여 이진 오차 유입 방지.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")
CENT = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """임의 값을 Decimal로 변환

    None, 빈 문자열, 숫자가 아닌 값은 0으로 간주.

    Example:
        >>> to_decimal("1,000.50")
        Decimal('1000.50')
        >>> to_decimal(None)
        Decimal('0')
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO
    if isinstance(value, str):
        value = value.replace(",", "").strip()
        if not value:
            return ZERO
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return ZERO
    return result if result.is_finite() else ZERO


def round_money(value: Decimal) -> Decimal:
    """소수점 2자리 반올림 (ROUND_HALF_UP)"""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_vat(amount: Decimal, vat_rate: Decimal) -> Decimal:
    """VAT 금액 계산

    Args:
        amount: 과세 금액 (VAT 제외)
        vat_rate: 세율 (%, 예: 13)

    Returns:
        VAT 금액 (소수점 2자리 반올림)
    """
    return round_money(amount * vat_rate / Decimal("100"))
