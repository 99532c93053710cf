"""
実行計画を実行するモジュール

SQL文は1文ずつ順番に実行し、失敗したSQL文は記録して次のSQL文の実行を続ける。

Classes
-------
- `FailedStatement` : 実行に失敗したSQL文
- `ImportResult` : 実行結果

Functions
---------
- `run_import` : 実行計画の実行
- `empty_database` : データベースのテーブル・ルーチンをすべて削除
- `import_dump` : SQLダンプのインポート
"""
from dataclasses import dataclass, field
from typing import Optional, TYPE_CHECKING

from sqlport.client import SQLClient
from sqlport.errors import StatementExecutionError, StatementFailed
from sqlport.logger import Logger, Stage
from sqlport.schema_toolkit import build_schemas_from_client, parse_sql_dump
from .plan import InsertMode, build_import_plan, drop_statements, exclude_existing

if TYPE_CHECKING:
    from sqlport.config import SqlConfig



@dataclass
class FailedStatement:
    """実行に失敗したSQL文"""
    code: Optional[int]
    """データベースのエラーコード"""
    message: str
    """エラーメッセージ"""
    statement: str
    """実行に失敗したSQL文"""
    error: StatementFailed
    """エラー情報"""

@dataclass
class ImportResult:
    """実行結果"""
    status: bool = True
    """すべてのSQL文の実行に成功したかどうか"""
    failed: list[FailedStatement] = field(default_factory=list)
    """実行に失敗したSQL文"""



def _execute(client:SQLClient, statements:list[str],
             logger:Optional[Logger]=None) -> list[FailedStatement]:
    failed = []
    for statement in statements:
        try:
            client.execute(statement)
        except StatementExecutionError as e:
            error = StatementFailed(e, statement, e.code)
            failed.append(FailedStatement(e.code, str(e), statement, error))
            if logger is not None:
                logger.warning(Stage.IMPORT, error.error_message())
    return failed

def run_import(client:SQLClient, plan:list[str],
               logger:Optional[Logger]=None) -> ImportResult:
    """実行計画の実行

    外部キー制約の検査を無効化してから、SQL文を1文ずつ順番に実行する。

    Parameters
    ----------
    client : SQLClient
        データベースクライアント
    plan : list[str]
        実行するSQL文
    logger : Logger, optional
        ロガー

    Returns
    -------
    ImportResult
        実行結果
    """
    try:
        client.disable_foreign_key_checks()
    except StatementExecutionError as e:
        if logger is not None:
            logger.warning(Stage.IMPORT, f"Failed to disable foreign key checks: {e}")

    failed = _execute(client, plan, logger)

    if logger is not None:
        logger.info(Stage.IMPORT, f"Executed {len(plan)} statements " \
                                  f"({len(failed)} failed)")
    return ImportResult(status=not failed, failed=failed)

def empty_database(client:SQLClient, logger:Optional[Logger]=None) -> list[FailedStatement]:
    """データベースのテーブル・ファンクション・プロシージャをすべて削除

    Parameters
    ----------
    client : SQLClient
        データベースクライアント
    logger : Logger, optional
        ロガー

    Returns
    -------
    list[FailedStatement]
        削除に失敗したSQL文

    Raises
    ------
    IntrospectionError
        テーブル・ルーチンの一覧の取得に失敗した場合
    """
    statements = drop_statements(client.list_tables(),
                                 client.list_routines("FUNCTION"),
                                 client.list_routines("PROCEDURE"))
    result = run_import(client, statements, logger)
    return result.failed

def import_dump(client:SQLClient, sql:str, config:Optional["SqlConfig"]=None,
                logger:Optional[Logger]=None) -> ImportResult:
    """SQLダンプのインポート

    `drop_first` が True の場合はデータベースを空にしてからインポートする。
    False の場合は既存のテーブル・ルーチンを除外し、既存のテーブルには
    不足している列のみを追加する。

    Parameters
    ----------
    client : SQLClient
        データベースクライアント
    sql : str
        SQLダンプ
    config : SqlConfig, optional
        設定 (None の場合は既定値)
    logger : Logger, optional
        ロガー

    Returns
    -------
    ImportResult
        実行結果

    Raises
    ------
    IntrospectionError
        既存のテーブル・ルーチンの取得に失敗した場合
    """
    with_data = config.import_.with_data if config is not None else InsertMode.MULTI
    drop_first = config.import_.drop_first if config is not None else True

    parsed = parse_sql_dump(sql, config)
    if logger is not None:
        logger.info(Stage.PARSE, f"Parsed {len(parsed.tables)} tables, " \
                                 f"{len(parsed.alters)} ALTER statements")
        if parsed.unresolved:
            logger.warning(Stage.PARSE, "Unresolved table dependencies: " \
                                        f"{', '.join(parsed.unresolved)}")

    failed: list[FailedStatement] = []
    if drop_first:
        failed.extend(empty_database(client, logger))
    else:
        existing = build_schemas_from_client(client, config, logger)
        routines = [name for kind in ("FUNCTION", "PROCEDURE", "TRIGGER")
                    for name in client.list_routines(kind)]
        parsed = exclude_existing(parsed, {t: s.columns for t, s in existing.items()}, routines)

    plan = build_import_plan(parsed, with_data, drop_first)
    if logger is not None:
        logger.info(Stage.PLAN, f"Planned {len(plan)} statements")

    result = run_import(client, plan, logger)
    failed.extend(result.failed)
    return ImportResult(status=not failed, failed=failed)
