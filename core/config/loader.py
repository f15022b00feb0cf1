"""
설정 로더

settings.yaml 로드 및 장부 설정 생성
"""

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from core.calendar import current_bs_date, fiscal_year_for, parse_fiscal_year
from core.constants import PROJECT_ROOT, Defaults, Paths

_PAN_PATTERN = re.compile(r"^\d{9}$")


@dataclass(frozen=True)
class BooksSettings:
    """장부 설정 (settings.yaml에서 로드)

    불변 데이터 구조로 설정 변경 방지
    """

    db_path: Path
    company_name: str = ""
    company_pan: str | None = None
    fiscal_year: str | None = None
    vat_rate: Decimal = Defaults.VAT_RATE
    strict_calendar: bool = True
    capital_account_code: str | None = None

    def resolve_fiscal_year(self, today: Any = None) -> str:
        """사용할 회계연도

        설정값이 없으면 오늘(NPT)의 BS 날짜로 결정.
        """
        if self.fiscal_year:
            return self.fiscal_year
        return fiscal_year_for(current_bs_date(today, self.strict_calendar))


class SettingsLoadError(Exception):
    """Settings 로드 실패 예외"""

    pass


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise SettingsLoadError(f"settings.yaml의 '{name}' 섹션 형식이 잘못되었습니다")
    return value


def load_settings(path: Path | None = None) -> BooksSettings:
    """settings.yaml 파일 로드

    Args:
        path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        BooksSettings 인스턴스

    Raises:
        SettingsLoadError: 파일이 없거나 형식이 잘못된 경우
    """
    if path is None:
        path = Paths.SETTINGS_FILE

    if not path.exists():
        raise SettingsLoadError(f"settings.yaml 파일을 찾을 수 없습니다: {path}")

    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise SettingsLoadError(f"settings.yaml 파싱 실패: {e}") from e

    if data is None:
        raise SettingsLoadError("settings.yaml이 비어 있습니다")
    if not isinstance(data, dict):
        raise SettingsLoadError("settings.yaml 최상위는 매핑이어야 합니다")

    company = _section(data, "company")
    books = _section(data, "books")
    vat = _section(data, "vat")

    # 회계연도 검증 (없으면 실행 시점에 결정)
    fiscal_year = company.get("fiscal_year")
    if fiscal_year is not None:
        fiscal_year = str(fiscal_year)
        try:
            parse_fiscal_year(fiscal_year)
        except ValueError as e:
            raise SettingsLoadError(f"settings.yaml의 fiscal_year 오류: {e}") from e

    # PAN 검증 (9자리 숫자)
    company_pan = company.get("pan")
    if company_pan is not None:
        company_pan = str(company_pan)
        if not _PAN_PATTERN.match(company_pan):
            raise SettingsLoadError(
                f"settings.yaml의 company.pan은 9자리 숫자여야 합니다: {company_pan!r}"
            )

    # VAT 세율
    try:
        vat_rate = Decimal(str(vat.get("rate", Defaults.VAT_RATE)))
    except InvalidOperation as e:
        raise SettingsLoadError(f"settings.yaml의 vat.rate 오류: {vat.get('rate')!r}") from e
    if not vat_rate.is_finite() or vat_rate < 0:
        raise SettingsLoadError(f"settings.yaml의 vat.rate는 0 이상이어야 합니다: {vat_rate}")

    # DB 경로 (상대 경로는 프로젝트 루트 기준)
    db_path = Path(books.get("db_path") or Paths.BOOKS_DB)
    if str(db_path) != ":memory:" and not db_path.is_absolute():
        db_path = PROJECT_ROOT / db_path

    capital_code = books.get("capital_account_code")

    return BooksSettings(
        db_path=db_path,
        company_name=str(company.get("name") or ""),
        company_pan=company_pan,
        fiscal_year=fiscal_year,
        vat_rate=vat_rate,
        strict_calendar=bool(books.get("strict_calendar", True)),
        capital_account_code=str(capital_code) if capital_code is not None else None,
    )


class Settings:
    """애플리케이션 설정 (싱글턴 패턴)

    settings.yaml을 로드하고 관련 설정을 제공
    """

    _instance: "Settings | None" = None
    _books: BooksSettings | None = None

    def __new__(cls, settings_path: Path | None = None) -> "Settings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, settings_path: Path | None = None) -> None:
        if self._books is None:
            self._books = load_settings(settings_path)

    @property
    def books(self) -> BooksSettings:
        """장부 설정"""
        assert self._books is not None
        return self._books

    @property
    def db_path(self) -> Path:
        """장부 DB 경로"""
        return self.books.db_path

    @property
    def fiscal_year(self) -> str:
        """현재 회계연도"""
        return self.books.resolve_fiscal_year()

    @classmethod
    def reset(cls) -> None:
        """싱글턴 인스턴스 초기화 (테스트용)"""
        cls._instance = None
        cls._books = None


def get_settings(settings_path: Path | None = None) -> Settings:
    """Settings 인스턴스 반환

    Args:
        settings_path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        Settings 싱글턴 인스턴스
    """
    return Settings(settings_path)
