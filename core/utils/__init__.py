"""
유틸리티 패키지

타임존 처리, 금액 변환 등 공통 유틸리티
"""

from core.utils.money import (
    ZERO,
    calculate_vat,
    round_money,
    to_decimal,
)
from core.utils.timezone import (
    NPT,
    to_npt,
    now_utc,
    now_npt,
    today_npt,
    to_date,
)

__all__ = [
    "NPT",
    "to_npt",
    "now_utc",
    "now_npt",
    "today_npt",
    "to_date",
    "ZERO",
    "calculate_vat",
    "round_money",
    "to_decimal",
]
