"""
sqlport のログ出力

ログは1行ごとに、レベル・時刻・処理の段階・メッセージの順に出力する。

```
[INFO]    2024/05/01 12:00:00, PARSE,      Parsed 4 tables, 14 ALTER statements
[WARNING] 2024/05/01 12:00:01, IMPORT,     Failed to execute a statement: ...
```

Classes
-------
- `LogLevel` : ログレベル
- `Stage` : 処理の段階
- `Logger` : ロガー
"""
import datetime
import os
from enum import Enum
from typing import Optional



class LogLevel(Enum):
    """ログレベル"""
    INFO = 1
    WARNING = 2
    ERROR = 3
MAX_LOG_LEVEL_LENGTH = max(len(s.name) for s in LogLevel)


class Stage(Enum):
    """処理の段階"""
    PARSE = 1
    """SQLダンプの解析"""
    INTROSPECT = 2
    """データベースの構造の取得"""
    COMPARE = 3
    """スキーマの比較"""
    PLAN = 4
    """実行計画の作成"""
    IMPORT = 5
    """SQL文の実行"""
MAX_STAGE_LENGTH = max(len(s.name) for s in Stage)


def format_line(stage:Stage, message:str, level:LogLevel,
                now:Optional[datetime.datetime]=None) -> str:
    """ログの1行を作成

    Parameters
    ----------
    stage : Stage
        処理の段階
    message : str
        メッセージ
    level : LogLevel
        ログレベル
    now : datetime.datetime, optional
        時刻 (None の場合は現在時刻)

    Returns
    -------
    str
        レベルと段階の列を揃えたログの1行
    """
    now = now or datetime.datetime.now()
    return f"[{level.name}]".ljust(MAX_LOG_LEVEL_LENGTH+3) \
           + now.strftime("%Y/%m/%d %H:%M:%S") + ", " \
           + f"{stage.name},".ljust(MAX_STAGE_LENGTH+2) \
           + message


class Logger:
    """ロガー

    ログファイルが設定されていない場合は、コンソールへの出力のみを行う
    (コンソールへの出力も無効な場合は何も出力しない)。
    """
    def __init__(self, log_path:Optional[str]=None, level:LogLevel=LogLevel.INFO,
                 to_console:bool=False):
        """
        Parameters
        ----------
        log_path : str, optional
            ログの出力先のファイル (None または空文字列の場合はファイルに出力しない)
            ディレクトリは作成しないため、必要であれば `set_log_file` を使用する
        level : LogLevel, default LogLevel.INFO
            このレベル以上のログのみを出力する
        to_console : bool, default False
            標準出力にもログを出力するか
        """
        self._path = log_path or None
        self._encoding = "utf-8"
        self._level = level
        self._to_console = to_console

    @property
    def path(self) -> Optional[str]:
        """ログの出力先のファイル"""
        return self._path

    def set_log_file(self, log_path:str, encoding:str="utf-8",
                     truncate:bool=False) -> bool:
        """ログの出力先のファイルを設定

        Parameters
        ----------
        log_path : str
            ログの出力先のファイル (ディレクトリがなければ作成する)
        encoding : str, default "utf-8"
            文字コード
        truncate : bool, default False
            既存のファイルの内容を消去するか

        Returns
        -------
        bool
            設定できたか
            失敗した場合は、ファイルには出力しない
        """
        try:
            if directory := os.path.dirname(log_path):
                os.makedirs(directory, exist_ok=True)
            if truncate:
                open(log_path, "w", encoding=encoding).close()
        except OSError:
            self._path = None
            return False

        self._path = log_path
        self._encoding = encoding
        return True

    def log(self, stage:Stage, message:str, level:LogLevel=LogLevel.INFO) -> bool:
        """ログの出力

        Returns
        -------
        bool
            ファイルまたはコンソールに出力したか
        """
        if level.value < self._level.value:
            return False

        line = format_line(stage, message, level)
        if self._to_console:
            print(line)
        if self._path is None:
            return self._to_console

        try:
            with open(self._path, "a", encoding=self._encoding) as f:
                f.write(line + "\n")
        except OSError:
            return False
        return True

    def info(self, stage:Stage, message:str) -> bool:
        return self.log(stage, message, LogLevel.INFO)

    def warning(self, stage:Stage, message:str) -> bool:
        return self.log(stage, message, LogLevel.WARNING)

    def error(self, stage:Stage, message:str) -> bool:
        return self.log(stage, message, LogLevel.ERROR)
