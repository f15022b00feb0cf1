"""
하드코딩 상수 - 변경될 일이 거의 없는 고정값

중요: 경로는 반드시 pathlib.Path 사용 (Windows/Linux 크로스 플랫폼)
"""

from decimal import Decimal
from pathlib import Path


# 프로젝트 루트 (이 파일 기준 2단계 상위: core/constants.py → khata/)
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent


class Defaults:
    """기본값 상수"""

    # 회사 설정이 없을 때 사용하는 회계연도 (BS)
    FISCAL_YEAR: str = "2080/81"

    # 네팔 VAT 세율 (%)
    VAT_RATE: Decimal = Decimal("13")

    # 차변/대변 균형 허용 오차 (부동소수점 입력 보정용)
    BALANCE_TOLERANCE: Decimal = Decimal("0.01")

    # 전표 번호 일련번호 자릿수 (JV-2080-81-0001)
    VOUCHER_SEQUENCE_WIDTH: int = 4

    # 결산 전표 전용 일련번호
    CLOSING_SEQUENCE: int = 9999

    # 기본 계정과목 이후 자동 생성 코드 카운터 시작값
    ACCOUNT_CODE_COUNTER_START: int = 6000

    # 계정 코드 자동 생성 시 카운터 자릿수
    ACCOUNT_CODE_WIDTH: int = 3

    # 전표 최소 분개 라인 수
    MIN_VOUCHER_ENTRIES: int = 2

    LOG_LEVEL: str = "INFO"


class Collections:
    """레코드 저장소 컬렉션 이름

    계정, 전표, 원장 거래를 각각 별도 컬렉션에 저장.
    """

    ACCOUNTS: str = "accounts"
    VOUCHERS: str = "vouchers"
    TRANSACTIONS: str = "transactions"


class Paths:
    """프로젝트 경로 상수 (pathlib 사용 - OS 독립적)"""

    # 디렉토리
    CONFIG_DIR: Path = PROJECT_ROOT / "config"
    DATA_DIR: Path = PROJECT_ROOT / "data"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"

    # 설정 파일
    SETTINGS_FILE: Path = CONFIG_DIR / "settings.yaml"

    # DB 파일
    BOOKS_DB: Path = DATA_DIR / "khata.db"
