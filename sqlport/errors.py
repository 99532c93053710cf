"""
sqlport.errors
エラー情報と例外を提供するモジュール

Classes
-------
- `ErrorData` : エラー情報 (抽象クラス)
- `UnexpectedError` : 想定していない例外のエラー情報
- `IntrospectionFailed` : データベースの構造の取得に失敗した場合のエラー情報
- `StatementFailed` : SQL文の実行に失敗した場合のエラー情報

Exceptions
----------
- `SQLPortError` : sqlport の例外の基底クラス
- `IntrospectionError` : データベースの構造の取得に失敗した場合の例外
- `StatementExecutionError` : SQL文の実行に失敗した場合の例外
"""
from abc import ABCMeta, abstractmethod
from typing import Optional, Union

ErrorSource = Union[Exception, str, None]
"""エラー情報の元になる値 (例外、またはメッセージ)"""



#
# エラー情報
#

class ErrorData(metaclass=ABCMeta):
    """エラー情報

    元になった例外の名前と最初の引数を保持する。
    メッセージのみが渡された場合、例外名は "UnexpectedError" とする。
    """
    def __init__(self, e:ErrorSource=None):
        """
        Parameters
        ----------
        e : Exception | str | None
            元になった例外、またはメッセージ
        """
        self.exception_name: Optional[str] = None
        """元になった例外のクラス名 (例外がない場合は None)"""
        self.args: Optional[str] = None
        """元になった例外の最初の引数 (例外がない場合は None)"""

        if isinstance(e, Exception):
            self.exception_name = type(e).__name__
            self.args = str(e.args[0]) if e.args else ""
        elif e is not None:
            self.exception_name = "UnexpectedError"
            self.args = e

    @property
    def name(self) -> str:
        """エラー情報の種類"""
        return type(self).__name__

    @abstractmethod
    def error_message(self) -> str:
        """利用者に表示するメッセージ"""

class UnexpectedError(ErrorData):
    """想定していない例外のエラー情報"""

    def error_message(self) -> str:
        if self.exception_name is None:
            return "An unexpected error occurred."
        return f"The following error occurred: {self.exception_name}: {self.args}"

class IntrospectionFailed(ErrorData):
    """データベースの構造の取得に失敗した場合のエラー情報

    `target` には取得できなかったテーブル名などを保持する。
    """
    def __init__(self, e:ErrorSource=None, target:Optional[str]=None):
        super().__init__(e)
        self.target = target
        """取得できなかった対象"""

    def error_message(self) -> str:
        where = f" ({self.target})" if self.target else ""
        return f"Failed to read the database structure{where}: " \
               f"{self.exception_name}: {self.args}"

class StatementFailed(ErrorData):
    """SQL文の実行に失敗した場合のエラー情報

    Parameters
    ----------
    e : Exception | str | None
        元になった例外、またはメッセージ
    statement : str
        失敗したSQL文
    code : int, optional
        データベースが返したエラーコード
    """
    def __init__(self, e:ErrorSource=None, statement:str="", code:Optional[int]=None):
        super().__init__(e)
        self.statement = statement
        """実行に失敗したSQL文"""
        self.code = code
        """データベースのエラーコード"""

    def error_message(self) -> str:
        code = f"[{self.code}] " if self.code is not None else ""
        return f"Failed to execute a statement: {code}{self.args}\n" \
               f"  {self.statement}"



#
# 例外
#

class SQLPortError(Exception):
    """sqlport の例外の基底クラス"""

class IntrospectionError(SQLPortError):
    """データベースの構造の取得に失敗した場合の例外

    Attributes
    ----------
    error : IntrospectionFailed
        エラー情報
    """
    def __init__(self, message:str, target:Optional[str]=None,
                 cause:Optional[Exception]=None):
        super().__init__(message)
        self.error = IntrospectionFailed(cause if cause is not None else message, target)

class StatementExecutionError(SQLPortError):
    """SQL文の実行に失敗した場合の例外

    Attributes
    ----------
    code : int | None
        データベースのエラーコード
    statement : str
        実行に失敗したSQL文
    """
    def __init__(self, message:str, statement:str="", code:Optional[int]=None):
        super().__init__(message)
        self.code = code
        self.statement = statement
