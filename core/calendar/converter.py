"""
BS ↔ AD 날짜 변환기

기준일(BS 2070/01/01 = AD 2013/04/14)로부터의 일수 차이를
연 단위 → 월 단위 순서로 소비하여 변환.

strict 모드 (기본):
    테이블 범위 밖 연도는 UnsupportedYearError
lenient 모드 (strict=False):
    테이블에 없는 연도는 모든 월을 30일로 근사 (양방향 동일 규칙)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any

from core.calendar.bs_data import (
    AD_MONTH_NAMES,
    BS_MONTH_NAMES,
    BS_YEAR_MONTHS,
    FISCAL_YEAR_START_MONTH,
    LENIENT_MONTHS,
    MAX_BS_YEAR,
    MIN_BS_YEAR,
    REFERENCE_AD,
    REFERENCE_BS_YEAR,
)
from core.utils.timezone import today_npt


class UnsupportedYearError(ValueError):
    """BS 연도가 변환 테이블 범위 밖

    strict 모드에서만 발생.
    """

    def __init__(self, year: int):
        self.year = year
        super().__init__(
            f"BS {year}년은 지원 범위({MIN_BS_YEAR}~{MAX_BS_YEAR}) 밖입니다"
        )


@dataclass(frozen=True, order=True)
class BSDate:
    """Bikram Sambat 날짜

    order=True로 (year, month, day) 순서 비교 가능.
    """

    year: int
    month: int
    day: int

    def __str__(self) -> str:
        return format_bs_date(self)

    def to_dict(self) -> dict[str, int]:
        return {"year": self.year, "month": self.month, "day": self.day}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BSDate:
        return cls(int(data["year"]), int(data["month"]), int(data["day"]))


# -------------------------------------------------------------------------
# 테이블 조회
# -------------------------------------------------------------------------

def _month_lengths(year: int, strict: bool) -> tuple[int, ...]:
    months = BS_YEAR_MONTHS.get(year)
    if months is None:
        if strict:
            raise UnsupportedYearError(year)
        return LENIENT_MONTHS
    return months


def days_in_bs_year(year: int, strict: bool = True) -> int:
    """BS 연도의 총 일수 (월 일수 합계)"""
    return sum(_month_lengths(year, strict))


def days_in_bs_month(year: int, month: int, strict: bool = True) -> int:
    """BS 월의 일수

    Args:
        year: BS 연도
        month: 1~12
        strict: False면 테이블 밖 연도에 30 반환

    Raises:
        ValueError: month 범위 오류
        UnsupportedYearError: strict 모드에서 테이블 밖 연도
    """
    if not 1 <= month <= 12:
        raise ValueError(f"잘못된 BS 월: {month}")
    return _month_lengths(year, strict)[month - 1]


def is_valid_bs_date(year: int, month: int, day: int) -> bool:
    """테이블 범위 안의 유효한 BS 날짜인지 확인"""
    months = BS_YEAR_MONTHS.get(year)
    if months is None:
        return False
    if not 1 <= month <= 12:
        return False
    return 1 <= day <= months[month - 1]


# -------------------------------------------------------------------------
# 변환
# -------------------------------------------------------------------------

def ad_to_bs(year: int, month: int, day: int, strict: bool = True) -> BSDate:
    """AD(그레고리력) → BS 변환

    Args:
        year, month, day: AD 날짜
        strict: False면 테이블 밖 연도를 30일 월로 근사

    Returns:
        BSDate

    Raises:
        ValueError: 존재하지 않는 AD 날짜
        UnsupportedYearError: strict 모드에서 범위 밖
    """
    offset = (date(year, month, day) - REFERENCE_AD).days
    bs_year = REFERENCE_BS_YEAR

    if offset >= 0:
        # 전진: 연 단위로 소비
        while offset >= days_in_bs_year(bs_year, strict):
            offset -= days_in_bs_year(bs_year, strict)
            bs_year += 1
    else:
        # 후진: 이전 연도 일수를 더해 0 이상으로
        while offset < 0:
            bs_year -= 1
            offset += days_in_bs_year(bs_year, strict)

    months = _month_lengths(bs_year, strict)
    bs_month = 1
    while offset >= months[bs_month - 1]:
        offset -= months[bs_month - 1]
        bs_month += 1

    return BSDate(bs_year, bs_month, offset + 1)


def bs_to_ad(year: int, month: int, day: int, strict: bool = True) -> date:
    """BS → AD(그레고리력) 변환

    기준 연도부터 대상 연도까지 연 일수 → 월 일수 → 나머지 일수 합산.

    Raises:
        ValueError: 존재하지 않는 BS 월/일
        UnsupportedYearError: strict 모드에서 범위 밖
    """
    months = _month_lengths(year, strict)
    if not 1 <= month <= 12:
        raise ValueError(f"잘못된 BS 월: {month}")
    if not 1 <= day <= months[month - 1]:
        raise ValueError(f"잘못된 BS 일: {year}/{month}/{day}")

    total_days = 0
    if year >= REFERENCE_BS_YEAR:
        for y in range(REFERENCE_BS_YEAR, year):
            total_days += days_in_bs_year(y, strict)
    else:
        for y in range(year, REFERENCE_BS_YEAR):
            total_days -= days_in_bs_year(y, strict)

    total_days += sum(months[: month - 1]) + day - 1

    return REFERENCE_AD + timedelta(days=total_days)


def date_to_bs(value: date, strict: bool = True) -> BSDate:
    """date 객체 → BSDate"""
    return ad_to_bs(value.year, value.month, value.day, strict)


def bs_to_date(value: BSDate, strict: bool = True) -> date:
    """BSDate → date 객체"""
    return bs_to_ad(value.year, value.month, value.day, strict)


def current_bs_date(today: date | None = None, strict: bool = True) -> BSDate:
    """오늘(NPT 기준)의 BS 날짜"""
    return date_to_bs(today or today_npt(), strict)


# -------------------------------------------------------------------------
# 회계연도
# -------------------------------------------------------------------------

_FISCAL_YEAR_PATTERN = re.compile(r"^(\d{4})/(\d{2})$")


def fiscal_year_for(bs_date: BSDate) -> str:
    """BS 날짜가 속한 회계연도 ("2080/81")

    회계연도는 Shrawan(4월) 1일에 시작.
    """
    if bs_date.month >= FISCAL_YEAR_START_MONTH:
        start = bs_date.year
    else:
        start = bs_date.year - 1
    return f"{start}/{str(start + 1)[-2:]}"


def parse_fiscal_year(fiscal_year: str) -> int:
    """회계연도 문자열에서 시작 연도 추출

    Example:
        >>> parse_fiscal_year("2080/81")
        2080

    Raises:
        ValueError: 형식 오류 또는 연속되지 않는 연도 ("2080/83")
    """
    match = _FISCAL_YEAR_PATTERN.match(fiscal_year.strip())
    if match is None:
        raise ValueError(f"회계연도 형식 오류 (YYYY/YY): {fiscal_year!r}")

    start = int(match.group(1))
    if int(match.group(2)) != (start + 1) % 100:
        raise ValueError(f"연속되지 않는 회계연도: {fiscal_year!r}")
    return start


def fiscal_year_bounds(fiscal_year: str, strict: bool = True) -> tuple[BSDate, BSDate]:
    """회계연도의 BS 시작/종료일

    Returns:
        (Shrawan 1일, 다음 해 Ashadh 말일)
    """
    start_year = parse_fiscal_year(fiscal_year)
    end_month = FISCAL_YEAR_START_MONTH - 1
    end_day = days_in_bs_month(start_year + 1, end_month, strict)
    return (
        BSDate(start_year, FISCAL_YEAR_START_MONTH, 1),
        BSDate(start_year + 1, end_month, end_day),
    )


def fiscal_year_date_range(fiscal_year: str, strict: bool = True) -> tuple[date, date]:
    """회계연도의 AD 시작/종료일"""
    start, end = fiscal_year_bounds(fiscal_year, strict)
    return bs_to_date(start, strict), bs_to_date(end, strict)


# -------------------------------------------------------------------------
# 문자열 변환
# -------------------------------------------------------------------------

def parse_bs_date(value: str) -> BSDate:
    """BS 날짜 문자열 파싱 (YYYY/MM/DD 또는 YYYY-MM-DD)

    Raises:
        ValueError: 형식 오류
    """
    parts = re.split(r"[/-]", value.strip())
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        raise ValueError(f"BS 날짜 형식 오류: {value!r}")
    return BSDate(int(parts[0]), int(parts[1]), int(parts[2]))


def format_bs_date(value: BSDate, fmt: str = "YYYY/MM/DD") -> str:
    """BS 날짜 포맷

    토큰: YYYY, MM, DD, MONTH (월 이름)

    Example:
        >>> format_bs_date(BSDate(2080, 4, 1), "DD MONTH YYYY")
        '01 Shrawan 2080'
    """
    return (
        fmt.replace("MONTH", BS_MONTH_NAMES[value.month - 1])
        .replace("YYYY", str(value.year))
        .replace("MM", f"{value.month:02d}")
        .replace("DD", f"{value.day:02d}")
    )


def format_ad_date(value: date, fmt: str = "YYYY-MM-DD") -> str:
    """AD 날짜 포맷 (토큰은 format_bs_date와 동일)"""
    return (
        fmt.replace("MONTH", AD_MONTH_NAMES[value.month - 1])
        .replace("YYYY", str(value.year))
        .replace("MM", f"{value.month:02d}")
        .replace("DD", f"{value.day:02d}")
    )
