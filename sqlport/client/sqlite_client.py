"""
SQLite 用のデータベースクライアントを提供するモジュール

Classes
-------
- `SQLiteClient` : SQLite クライアント
"""
import sqlite3
from typing import Optional

from sqlport.errors import IntrospectionError, StatementExecutionError
from ._base import SQLClient



class SQLiteClient(SQLClient):
    """SQLite クライアント

    SQLite にはストアドファンクションとストアドプロシージャが存在しないため、
    `list_routines` はトリガー以外では常に空のリストを返す。
    """
    def __init__(self, path:str=":memory:",
                 connection:Optional[sqlite3.Connection]=None):
        """コンストラクタ

        Parameters
        ----------
        path : str, default ":memory:"
            データベースファイルのパス
        connection : sqlite3.Connection, optional
            接続済みのコネクション (指定された場合は `path` を使用しない)
        """
        self._conn = connection if connection is not None else sqlite3.connect(path)

    @property
    def connection(self) -> sqlite3.Connection:
        """コネクション"""
        return self._conn

    def _fetch(self, query:str, params:tuple=(), target:Optional[str]=None) -> list[tuple]:
        try:
            return self._conn.execute(query, params).fetchall()
        except sqlite3.Error as e:
            raise IntrospectionError(str(e), target, e) from e

    def list_tables(self) -> list[str]:
        rows = self._fetch("SELECT name FROM sqlite_master "
                           "WHERE type = 'table' AND name NOT LIKE 'sqlite_%'")
        return [row[0] for row in rows]

    def get_create_table(self, name:str) -> str:
        rows = self._fetch("SELECT sql FROM sqlite_master WHERE type = 'table' AND name = ?",
                           (name,), target=name)
        if not rows or rows[0][0] is None:
            raise IntrospectionError(f"Table '{name}' not found", name)
        return rows[0][0]

    def list_routines(self, kind:str) -> list[str]:
        if self._check_routine_kind(kind) != "TRIGGER":
            return []
        rows = self._fetch("SELECT name FROM sqlite_master WHERE type = 'trigger'")
        return [row[0] for row in rows]

    def execute(self, statement:str) -> None:
        try:
            self._conn.execute(statement)
            self._conn.commit()
        except sqlite3.Error as e:
            raise StatementExecutionError(
                str(e), statement, getattr(e, "sqlite_errorcode", None)
            ) from e

    def disable_foreign_key_checks(self) -> None:
        self.execute("PRAGMA foreign_keys = OFF")

    def close(self) -> None:
        self._conn.close()
