"""
계정과목표 (Chart of Accounts)

계정 생성/수정/비활성화 및 조회.
메모리 캐시는 편의용이며 조회 시마다 저장소에서 다시 읽음 (저장소가 기준).
"""

from __future__ import annotations

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Any
from uuid import uuid4

from adapters.interfaces import IRecordStore
from core.constants import Collections, Defaults
from core.ledger.errors import NotFoundError, ValidationError
from core.ledger.models import Account
from core.ledger.types import ACCOUNT_CODE_PREFIXES, DEFAULT_ACCOUNTS, AccountType
from core.utils.money import ZERO
from core.utils.timezone import now_utc

logger = logging.getLogger(__name__)

# 수정 가능한 필드 (code, type은 생성 후 변경 불가)
UPDATABLE_FIELDS = frozenset({"name", "opening_balance", "is_disabled"})


def coerce_account_type(value: AccountType | str) -> AccountType:
    """문자열/Enum을 AccountType으로 변환

    Raises:
        ValidationError: 5대 계정 유형이 아닌 경우
    """
    if isinstance(value, AccountType):
        return value
    try:
        return AccountType(value)
    except ValueError:
        valid = [t.value for t in AccountType]
        raise ValidationError(
            f"Unknown account type: {value!r}. Valid types: {valid}"
        ) from None


def _parse_opening_balance(value: Any) -> Decimal:
    if value is None or value == "":
        return ZERO
    try:
        amount = Decimal(str(value).replace(",", "").strip())
    except ArithmeticError:
        raise ValidationError(f"Invalid opening balance: {value!r}") from None
    if not amount.is_finite():
        raise ValidationError(f"Invalid opening balance: {value!r}")
    return amount


class ChartOfAccounts:
    """계정과목표

    Args:
        store: 레코드 저장소

    사용 예시:
    ```python
    chart = ChartOfAccounts(store)
    await chart.initialize_default_accounts()

    cash = await chart.get_account_by_code("1001")
    petty = await chart.create_account(AccountType.ASSET, "Petty Cash")  # 코드 16000
    ```
    """

    def __init__(self, store: IRecordStore):
        self.store = store
        self._accounts: list[Account] = []
        self._next_code = Defaults.ACCOUNT_CODE_COUNTER_START

    # -------------------------------------------------------------------------
    # 초기화
    # -------------------------------------------------------------------------

    async def initialize_default_accounts(self) -> int:
        """기본 계정과목 생성 (장부가 비어 있을 때만)

        Returns:
            생성된 계정 수 (이미 계정이 있으면 0)
        """
        existing = await self.get_all_accounts(include_disabled=True)
        if existing:
            return 0

        async with self.store.atomic():
            for code, account_type, name in DEFAULT_ACCOUNTS:
                await self.create_account(account_type, name, code=code)

        logger.info(f"기본 계정과목 생성 완료: {len(DEFAULT_ACCOUNTS)}개")
        return len(DEFAULT_ACCOUNTS)

    # -------------------------------------------------------------------------
    # 생성 / 수정
    # -------------------------------------------------------------------------

    async def create_account(
        self,
        account_type: AccountType | str,
        name: str,
        code: str | None = None,
        opening_balance: Decimal | str | int | float | None = None,
    ) -> Account:
        """계정 생성

        Args:
            account_type: 계정 유형
            name: 계정 이름
            code: 계정 코드 (None이면 유형 접두사 + 카운터로 자동 생성)
            opening_balance: 기초 잔액

        Returns:
            생성된 Account

        Raises:
            ValidationError: 알 수 없는 유형, 빈 이름, 중복 코드
        """
        account_type = coerce_account_type(account_type)
        name = (name or "").strip()
        if not name:
            raise ValidationError("Account name is required")

        existing = await self.get_all_accounts(include_disabled=True)
        existing_codes = {a.code for a in existing}

        if code is not None and str(code).strip():
            code = str(code).strip()
            if code in existing_codes:
                raise ValidationError(f"Account code already exists: {code}")
        else:
            code = self._generate_code(account_type, existing_codes)

        account = Account(
            id=uuid4().hex,
            code=code,
            name=name,
            account_type=account_type,
            opening_balance=_parse_opening_balance(opening_balance),
            is_disabled=False,
            created_at=now_utc().isoformat(),
        )

        await self.store.save(Collections.ACCOUNTS, account.to_record())
        self._accounts.append(account)

        logger.info(f"계정 생성: {account.code} {account.name} ({account.account_type.value})")
        return account

    def _generate_code(self, account_type: AccountType, existing_codes: set[str]) -> str:
        """유형 접두사 + 3자리 이상 카운터 (예: "16000")

        카운터는 기존 자동 생성 코드보다 항상 크게 유지.
        """
        for existing in existing_codes:
            suffix = existing[1:]
            if existing[:1] in ACCOUNT_CODE_PREFIXES.values() and suffix.isdigit():
                self._next_code = max(self._next_code, int(suffix) + 1)

        code = account_type.code_prefix + str(self._next_code).zfill(Defaults.ACCOUNT_CODE_WIDTH)
        self._next_code += 1
        return code

    async def update_account(self, account_id: str, **updates: Any) -> Account:
        """계정 수정 (name, opening_balance, is_disabled)

        Raises:
            NotFoundError: 존재하지 않는 계정
            ValidationError: code/type 변경 시도 또는 잘못된 값
        """
        invalid = set(updates) - UPDATABLE_FIELDS
        if invalid:
            raise ValidationError(
                f"Cannot update account fields: {sorted(invalid)} "
                f"(allowed: {sorted(UPDATABLE_FIELDS)})"
            )

        account = await self.get_account(account_id)

        changes: dict[str, Any] = {}
        if "name" in updates:
            name = (updates["name"] or "").strip()
            if not name:
                raise ValidationError("Account name is required")
            changes["name"] = name
        if "opening_balance" in updates:
            changes["opening_balance"] = _parse_opening_balance(updates["opening_balance"])
        if "is_disabled" in updates:
            changes["is_disabled"] = bool(updates["is_disabled"])

        updated = replace(account, **changes)
        await self.store.save(Collections.ACCOUNTS, updated.to_record())

        self._accounts = [updated if a.id == account_id else a for a in self._accounts]

        logger.info(f"계정 수정: {updated.code} {sorted(changes)}")
        return updated

    async def disable_account(self, account_id: str) -> Account:
        """계정 비활성화 (소프트 삭제)"""
        return await self.update_account(account_id, is_disabled=True)

    async def enable_account(self, account_id: str) -> Account:
        """계정 활성화"""
        return await self.update_account(account_id, is_disabled=False)

    # -------------------------------------------------------------------------
    # 조회
    # -------------------------------------------------------------------------

    async def get_account(self, account_id: str) -> Account:
        """id로 계정 조회

        Raises:
            NotFoundError: 존재하지 않는 계정
        """
        record = await self.store.get(Collections.ACCOUNTS, account_id)
        if record is None:
            raise NotFoundError("Account", account_id)
        return Account.from_record(record)

    async def get_all_accounts(self, include_disabled: bool = False) -> list[Account]:
        """전체 계정 조회 (매번 저장소에서 다시 읽음)"""
        records = await self.store.get_all(Collections.ACCOUNTS)
        self._accounts = [Account.from_record(r) for r in records]

        if include_disabled:
            return list(self._accounts)
        return [a for a in self._accounts if not a.is_disabled]

    async def get_accounts_by_type(self, account_type: AccountType | str) -> list[Account]:
        """유형별 활성 계정 조회"""
        account_type = coerce_account_type(account_type)
        return [a for a in await self.get_all_accounts() if a.account_type == account_type]

    async def get_account_by_code(self, code: str) -> Account | None:
        """코드로 계정 조회 (비활성 계정 포함)"""
        for account in await self.get_all_accounts(include_disabled=True):
            if account.code == code:
                return account
        return None
