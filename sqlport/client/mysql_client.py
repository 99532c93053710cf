"""
MySQL / MariaDB 用のデータベースクライアントを提供するモジュール

Classes
-------
- `MySQLClient` : MySQL / MariaDB クライアント (PyMySQL)
"""
from typing import Optional, TYPE_CHECKING

import pymysql

from sqlport.errors import IntrospectionError, StatementExecutionError
from ._base import SQLClient

if TYPE_CHECKING:
    from sqlport.config import ConnectionConfig



class MySQLClient(SQLClient):
    """MySQL / MariaDB クライアント"""
    def __init__(self, host:str="localhost", port:int=3306, user:str="",
                 password:str="", database:str="",
                 connection:Optional[pymysql.connections.Connection]=None):
        """コンストラクタ

        Parameters
        ----------
        host : str, default "localhost"
            ホスト名
        port : int, default 3306
            ポート番号
        user : str
            ユーザー名
        password : str
            パスワード
        database : str
            データベース名
        connection : pymysql.connections.Connection, optional
            接続済みのコネクション (指定された場合は新たに接続しない)

        Raises
        ------
        IntrospectionError
            接続に失敗した場合
        """
        self._database = database
        if connection is not None:
            self._conn = connection
            return

        try:
            self._conn = pymysql.connect(
                host=host, port=port, user=user, password=password,
                database=database
            )
        except pymysql.MySQLError as e:
            raise IntrospectionError(f"Failed to connect to '{host}:{port}': {e}",
                                     database, e) from e

    @classmethod
    def from_config(cls, config:"ConnectionConfig") -> "MySQLClient":
        """接続設定からクライアントを作成"""
        return cls(host=config.host, port=config.port, user=config.user,
                   password=config.password, database=config.database)

    def _fetch(self, query:str, params:Optional[tuple]=None,
               target:Optional[str]=None) -> list[tuple]:
        try:
            with self._conn.cursor() as cursor:
                cursor.execute(query, params)
                return list(cursor.fetchall())
        except pymysql.MySQLError as e:
            raise IntrospectionError(str(e), target, e) from e

    def list_tables(self) -> list[str]:
        rows = self._fetch("SHOW FULL TABLES WHERE Table_type = 'BASE TABLE'")
        return [row[0] for row in rows]

    def get_create_table(self, name:str) -> str:
        rows = self._fetch(f"SHOW CREATE TABLE `{name}`", target=name)
        if not rows:
            raise IntrospectionError(f"Table '{name}' not found", name)
        return rows[0][1]

    def list_routines(self, kind:str) -> list[str]:
        kind = self._check_routine_kind(kind)
        if kind == "TRIGGER":
            return [row[0] for row in self._fetch("SHOW TRIGGERS")]

        rows = self._fetch(f"SHOW {kind} STATUS WHERE Db = %s", (self._database,))
        return [row[1] for row in rows]

    def execute(self, statement:str) -> None:
        try:
            with self._conn.cursor() as cursor:
                cursor.execute(statement)
            self._conn.commit()
        except pymysql.MySQLError as e:
            code = e.args[0] if e.args and isinstance(e.args[0], int) else None
            message = e.args[1] if len(e.args) > 1 else str(e)
            raise StatementExecutionError(message, statement, code) from e

    def disable_foreign_key_checks(self) -> None:
        self.execute("SET FOREIGN_KEY_CHECKS=0")

    def close(self) -> None:
        self._conn.close()
