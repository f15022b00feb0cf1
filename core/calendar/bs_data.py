"""
Bikram Sambat (BS) 달력 데이터

BS 연도별 월 일수 테이블과 기준일.
연도 일수는 월 일수 합계로 계산 (별도 저장하지 않음).
"""

from datetime import date

# BS 연도별 월 일수 (Baisakh ~ Chaitra)
BS_YEAR_MONTHS: dict[int, tuple[int, ...]] = {
    2070: (31, 31, 32, 31, 31, 31, 30, 29, 30, 29, 30, 30),
    2071: (31, 31, 32, 31, 32, 30, 30, 29, 30, 29, 30, 30),
    2072: (31, 32, 31, 32, 31, 30, 30, 30, 29, 29, 30, 31),
    2073: (31, 31, 32, 32, 31, 30, 30, 30, 29, 30, 29, 31),
    2074: (31, 31, 32, 32, 31, 30, 30, 30, 29, 30, 30, 30),
    2075: (31, 32, 31, 32, 31, 31, 30, 29, 30, 29, 30, 30),
    2076: (31, 32, 31, 32, 31, 31, 30, 29, 30, 29, 30, 30),
    2077: (31, 31, 32, 31, 31, 31, 30, 29, 30, 29, 30, 30),
    2078: (31, 31, 32, 32, 31, 30, 30, 29, 30, 29, 30, 30),
    2079: (31, 32, 31, 32, 31, 30, 30, 30, 29, 29, 30, 31),
    2080: (31, 31, 32, 32, 31, 30, 30, 30, 29, 30, 29, 31),
    2081: (31, 31, 32, 32, 31, 30, 30, 30, 29, 30, 30, 30),
    2082: (31, 32, 31, 32, 31, 31, 29, 30, 29, 30, 29, 31),
    2083: (31, 32, 31, 32, 31, 31, 30, 29, 29, 30, 30, 30),
    2084: (31, 31, 32, 31, 31, 31, 30, 29, 30, 29, 30, 30),
    2085: (31, 31, 32, 32, 31, 30, 30, 29, 30, 29, 30, 30),
    2086: (31, 32, 31, 32, 31, 30, 30, 30, 29, 29, 30, 31),
    2087: (31, 31, 32, 32, 31, 30, 30, 30, 29, 30, 29, 31),
    2088: (31, 31, 32, 32, 31, 30, 30, 30, 29, 30, 30, 30),
    2089: (31, 32, 31, 32, 31, 31, 29, 30, 30, 29, 29, 31),
    2090: (31, 32, 31, 32, 31, 31, 30, 29, 30, 29, 30, 30),
}

MIN_BS_YEAR: int = min(BS_YEAR_MONTHS)
MAX_BS_YEAR: int = max(BS_YEAR_MONTHS)

# 테이블에 없는 연도 (lenient 모드): 모든 월 30일
LENIENT_MONTHS: tuple[int, ...] = (30,) * 12

# 기준일: BS 2070/01/01 = AD 2013/04/14 (반드시 BS 연초여야 함)
REFERENCE_BS_YEAR: int = 2070
REFERENCE_AD: date = date(2013, 4, 14)

# 회계연도 시작 월 (Shrawan)
FISCAL_YEAR_START_MONTH: int = 4

BS_MONTH_NAMES: tuple[str, ...] = (
    "Baisakh", "Jestha", "Ashadh", "Shrawan", "Bhadra", "Ashwin",
    "Kartik", "Mangsir", "Poush", "Magh", "Falgun", "Chaitra",
)

AD_MONTH_NAMES: tuple[str, ...] = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
