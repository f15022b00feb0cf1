"""
데이터베이스 어댑터

SQLite WAL 모드 연결 관리 및 레코드 저장소 구현.
"""

from adapters.db.record_store import SQLiteRecordStore
from adapters.db.sqlite_adapter import (
    SQLiteAdapter,
    create_connection,
    init_schema,
)

__all__ = [
    "SQLiteAdapter",
    "SQLiteRecordStore",
    "create_connection",
    "init_schema",
]
