"""
データベースクライアントを提供するパッケージ

Classes
-------
- `SQLClient` : データベースクライアント (抽象クラス)
- `SQLiteClient` : SQLite クライアント
- `MySQLClient` : MySQL / MariaDB クライアント

Functions
---------
- `connect` : 接続設定からクライアントを作成
"""
from typing import TYPE_CHECKING

from ._base import SQLClient, ROUTINE_KINDS
from .sqlite_client import SQLiteClient
from .mysql_client import MySQLClient

if TYPE_CHECKING:
    from sqlport.config import ConnectionConfig



def connect(config:"ConnectionConfig") -> SQLClient:
    """接続設定からクライアントを作成

    Parameters
    ----------
    config : ConnectionConfig
        接続設定

    Returns
    -------
    SQLClient
        `config.driver` に対応するクライアント
    """
    if config.driver == "sqlite":
        return SQLiteClient(config.database)
    return MySQLClient.from_config(config)
