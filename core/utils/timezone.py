"""
타임존 유틸리티

내부 저장: UTC | 외부 표시: NPT (네팔 표준시, UTC+5:45) 원칙 준수를 위한 헬퍼 함수
"""

from datetime import date, datetime, timezone, timedelta

# NPT 타임존 (UTC+5:45)
NPT = timezone(timedelta(hours=5, minutes=45))


def to_npt(dt: datetime) -> datetime:
    """UTC datetime을 NPT로 변환

    Args:
        dt: datetime 객체 (UTC 권장, naive면 UTC로 간주)

    Returns:
        NPT 타임존의 datetime

    Example:
        >>> utc_dt = datetime(2026, 2, 20, 20, 0, 0, tzinfo=timezone.utc)
        >>> to_npt(utc_dt).day
        21  # 다음날 01:45
    """
    if dt.tzinfo is None:
        # naive datetime은 UTC로 간주
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(NPT)


def now_utc() -> datetime:
    """현재 UTC 시간 반환 (타임존 명시)

    datetime.now(timezone.utc)의 축약형.

    Returns:
        현재 UTC 시간 (tzinfo=timezone.utc)
    """
    return datetime.now(timezone.utc)


def now_npt() -> datetime:
    """현재 NPT 시간 반환"""
    return datetime.now(NPT)


def today_npt() -> date:
    """NPT 기준 오늘 날짜

    장부 날짜는 네팔 현지 날짜 기준.
    """
    return now_npt().date()


def to_date(value: date | datetime | str) -> date:
    """date / datetime / ISO 문자열을 date로 변환

    Args:
        value: 변환할 값 (예: "2024-01-15", "2024-01-15T10:00:00")

    Returns:
        date 객체 (datetime이면 날짜 부분만)

    Raises:
        ValueError: ISO 형식이 아닌 문자열
        TypeError: 지원하지 않는 타입
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value.strip()[:10])
    raise TypeError(f"날짜로 변환할 수 없는 타입: {type(value).__name__}")
