"""
データベースクライアントの基底クラスを提供するモジュール

Classes
-------
- `SQLClient` : データベースクライアント (抽象クラス)
"""
from abc import ABCMeta, abstractmethod
from typing import Final



ROUTINE_KINDS: Final = ("FUNCTION", "PROCEDURE", "TRIGGER")
"""`SQLClient.list_routines` で指定できるルーチンの種類"""


class SQLClient(metaclass=ABCMeta):
    """データベースクライアント

    `with` 文で使用すると、ブロックを抜けた時点で接続を閉じる。

    Examples
    --------
    >>> with SQLiteClient(":memory:") as client:
    ...     client.execute("CREATE TABLE t (id INTEGER)")
    ...     client.list_tables()
    ['t']
    """

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    @abstractmethod
    def list_tables(self) -> list[str]:
        """テーブル名の一覧の取得

        Returns
        -------
        list[str]
            テーブル名の一覧 (ビューは含まない)

        Raises
        ------
        IntrospectionError
            取得に失敗した場合
        """

    @abstractmethod
    def get_create_table(self, name:str) -> str:
        """テーブルの CREATE TABLE 文の取得

        Parameters
        ----------
        name : str
            テーブル名

        Returns
        -------
        str
            CREATE TABLE 文

        Raises
        ------
        IntrospectionError
            取得に失敗した場合、またはテーブルが存在しない場合
        """

    @abstractmethod
    def list_routines(self, kind:str) -> list[str]:
        """ルーチンの名前の一覧の取得

        Parameters
        ----------
        kind : str
            ルーチンの種類 ("FUNCTION", "PROCEDURE", "TRIGGER")

        Returns
        -------
        list[str]
            ルーチンの名前の一覧

        Raises
        ------
        ValueError
            `kind` が不正な場合
        IntrospectionError
            取得に失敗した場合
        """

    @abstractmethod
    def execute(self, statement:str) -> None:
        """SQL文の実行

        Parameters
        ----------
        statement : str
            SQL文

        Raises
        ------
        StatementExecutionError
            実行に失敗した場合
        """

    @abstractmethod
    def disable_foreign_key_checks(self) -> None:
        """外部キー制約の検査を無効化 (現在の接続のみ)

        Raises
        ------
        StatementExecutionError
            実行に失敗した場合
        """

    @abstractmethod
    def close(self) -> None:
        """接続を閉じる"""

    @staticmethod
    def _check_routine_kind(kind:str) -> str:
        if kind.upper() not in ROUTINE_KINDS:
            raise ValueError(f"Routine kind '{kind}' not supported: " \
                             f"choose from {', '.join(ROUTINE_KINDS)}")
        return kind.upper()
