"""
Bikram Sambat (BS) 달력

BS ↔ AD 변환 및 회계연도 헬퍼.
전표에 AD/BS 이중 날짜를 기록하는 용도이며 원장 계산에는 관여하지 않음.

사용 예시:
```python
from core.calendar import ad_to_bs, bs_to_ad, fiscal_year_for

bs = ad_to_bs(2024, 1, 19)          # BSDate(2080, 10, 1)
ad = bs_to_ad(bs.year, bs.month, bs.day)
fy = fiscal_year_for(bs)            # "2080/81"
```
"""

from core.calendar.bs_data import AD_MONTH_NAMES, BS_MONTH_NAMES, MAX_BS_YEAR, MIN_BS_YEAR
from core.calendar.converter import (
    BSDate,
    UnsupportedYearError,
    ad_to_bs,
    bs_to_ad,
    bs_to_date,
    current_bs_date,
    date_to_bs,
    days_in_bs_month,
    days_in_bs_year,
    fiscal_year_bounds,
    fiscal_year_date_range,
    fiscal_year_for,
    format_ad_date,
    format_bs_date,
    is_valid_bs_date,
    parse_bs_date,
    parse_fiscal_year,
)

__all__ = [
    "AD_MONTH_NAMES",
    "BS_MONTH_NAMES",
    "MAX_BS_YEAR",
    "MIN_BS_YEAR",
    "BSDate",
    "UnsupportedYearError",
    "ad_to_bs",
    "bs_to_ad",
    "bs_to_date",
    "current_bs_date",
    "date_to_bs",
    "days_in_bs_month",
    "days_in_bs_year",
    "fiscal_year_bounds",
    "fiscal_year_date_range",
    "fiscal_year_for",
    "format_ad_date",
    "format_bs_date",
    "is_valid_bs_date",
    "parse_bs_date",
    "parse_fiscal_year",
]
