"""
장부 관리 스크립트

사용법:
    python -m scripts.books init
    python -m scripts.books trial-balance --as-of 2024-07-15
    python -m scripts.books balance-sheet
    python -m scripts.books vat-report --fiscal-year 2080/81
    python -m scripts.books close-year --fiscal-year 2080/81
"""

import argparse
import asyncio
import logging
from pathlib import Path

# 프로젝트 루트를 Python 경로에 추가
import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from core.calendar import fiscal_year_date_range
from core.config.loader import SettingsLoadError, load_settings
from core.ledger.books import Books, open_books
from core.ledger.errors import LedgerError, ValidationError
from core.logging import setup_logging

logger = logging.getLogger("books")


def _print_trial_balance(rows) -> None:
    print(f"{'Code':<8} {'Account':<32} {'Debit':>14} {'Credit':>14}")
    print("-" * 70)
    for row in rows:
        print(f"{row.account_code:<8} {row.account_name:<32} {row.debit:>14,.2f} {row.credit:>14,.2f}")
    print("-" * 70)
    total_debit = sum(r.debit for r in rows)
    total_credit = sum(r.credit for r in rows)
    print(f"{'':<8} {'Total':<32} {total_debit:>14,.2f} {total_credit:>14,.2f}")


async def cmd_init(books: Books, args: argparse.Namespace) -> None:
    accounts = await books.accounts.get_all_accounts(include_disabled=True)
    print(f"DB Path: {books.settings.db_path}")
    print(f"Fiscal year: {books.fiscal_year}")
    print(f"Accounts: {len(accounts)}")


async def cmd_trial_balance(books: Books, args: argparse.Namespace) -> None:
    rows = await books.engine.get_trial_balance(args.as_of)
    _print_trial_balance(rows)


async def cmd_balance_sheet(books: Books, args: argparse.Namespace) -> None:
    sheet = await books.engine.get_balance_sheet(args.as_of)
    for title, lines, total in (
        ("Assets", sheet.assets, sheet.total_assets),
        ("Liabilities", sheet.liabilities, sheet.total_liabilities),
        ("Equity", sheet.equity, sheet.total_equity),
    ):
        print(title)
        for line in lines:
            print(f"  {line.account_code:<8} {line.account_name:<32} {line.amount:>14,.2f}")
        print(f"  {'Total':<41} {total:>14,.2f}")


async def cmd_vat_report(books: Books, args: argparse.Namespace) -> None:
    fiscal_year = args.fiscal_year or books.fiscal_year
    try:
        start, end = fiscal_year_date_range(fiscal_year, books.settings.strict_calendar)
    except ValueError as e:
        raise ValidationError(str(e)) from e
    report = await books.engine.get_vat_report(start, end)

    print(f"VAT report FY {fiscal_year} ({start} ~ {end})")
    print(f"  Sales VAT:    {report.total_sales_vat:>14,.2f} ({len(report.sales_vat)} invoices)")
    print(f"  Purchase VAT: {report.total_purchase_vat:>14,.2f} ({len(report.purchase_vat)} invoices)")
    print(f"  Net VAT:      {report.net_vat:>14,.2f}")


async def cmd_close_year(books: Books, args: argparse.Namespace) -> None:
    net_profit = await books.close_fiscal_year(args.fiscal_year)
    print(f"Net profit transferred: {net_profit:,.2f}")


COMMANDS = {
    "init": cmd_init,
    "trial-balance": cmd_trial_balance,
    "balance-sheet": cmd_balance_sheet,
    "vat-report": cmd_vat_report,
    "close-year": cmd_close_year,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="복식부기 장부 관리")
    parser.add_argument("--settings", type=Path, default=None, help="settings.yaml 경로")
    parser.add_argument("--verbose", "-v", action="store_true", help="DEBUG 로그 출력")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("init", help="DB 생성 및 기본 계정과목 생성")

    for name in ("trial-balance", "balance-sheet"):
        p = sub.add_parser(name)
        p.add_argument("--as-of", default=None, help="기준일 (YYYY-MM-DD)")

    p = sub.add_parser("vat-report")
    p.add_argument("--fiscal-year", default=None, help="회계연도 (예: 2080/81)")

    p = sub.add_parser("close-year", help="회계연도 결산 (손익 → 자본)")
    p.add_argument("--fiscal-year", default=None, help="회계연도 (예: 2080/81)")

    return parser


async def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging("books", console_level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        settings = load_settings(args.settings)
    except SettingsLoadError as e:
        logger.error(f"설정 로드 실패: {e}")
        return 1

    async with await open_books(settings) as books:
        try:
            await COMMANDS[args.command](books, args)
        except LedgerError as e:
            logger.error(f"{args.command} 실패: {e}")
            return 1

    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
