"""
インポートの実行計画を作成するモジュール

SQLダンプの解析結果 (`ParsedDump`) から、依存関係を満たす順序で
実行するSQL文のリストを作成する。

Classes
-------
- `InsertMode` : INSERT 文の実行方法

Functions
---------
- `build_import_plan` : 実行計画の作成
- `exclude_existing` : 既存のテーブル・ルーチンを実行計画から除外
- `drop_statements` : テーブル・ルーチンを削除するSQL文の作成
"""
import re
from copy import deepcopy
from enum import Enum
from typing import Iterable, Mapping

from sqlport.schema_toolkit import ParsedDump
from sqlport.schema_toolkit.ddl_parser import (
    get_columns_from_create_table, parse_routine_name,
    split_alter_key_and_foreign_key, split_multi_value_insert
)



class InsertMode(Enum):
    """INSERT 文の実行方法"""
    NONE = 0
    """INSERT 文を実行しない"""
    MULTI = 1
    """ダンプに書かれたとおりに実行する"""
    SINGLE = 2
    """1行ずつの INSERT 文に分割して実行する"""


_CREATE_TABLE_HEADER = re.compile(
    r"^\s*CREATE\s+(?:OR\s+REPLACE\s+)?(?:TEMPORARY\s+)?TABLE\s+(?:IF\s+NOT\s+EXISTS\s+)?",
    re.I)


def _create_if_not_exists(query:str) -> str:
    return _CREATE_TABLE_HEADER.sub("CREATE TABLE IF NOT EXISTS ", query, count=1)

def drop_statements(tables:Iterable[str], functions:Iterable[str]=(),
                    procedures:Iterable[str]=()) -> list[str]:
    """テーブル・ルーチンを削除するSQL文の作成

    Parameters
    ----------
    tables : Iterable[str]
        テーブル名
    functions : Iterable[str]
        ファンクション名
    procedures : Iterable[str]
        プロシージャ名

    Returns
    -------
    list[str]
        DROP 文
    """
    statements = []
    for name in tables:
        statements.append(f"DROP TABLE IF EXISTS `{name}`")
    for name in functions:
        statements.append(f"DROP FUNCTION IF EXISTS `{name}`")
    for name in procedures:
        statements.append(f"DROP PROCEDURE IF EXISTS `{name}`")
    return statements

def build_import_plan(parsed:ParsedDump, with_data:InsertMode=InsertMode.MULTI,
                      drop_first:bool=True) -> list[str]:
    """実行計画の作成

    以下の順序でSQL文を並べる。

    1. DROP 文 (`drop_first` が True の場合のみ)
    2. CREATE TABLE 文 (依存関係の順序)
    3. CREATE FUNCTION 文、CREATE PROCEDURE 文
    4. キーを追加する ALTER 文、外部キーを追加する ALTER 文
    5. CREATE TRIGGER 文
    6. ビューと同名のテーブルの削除、CREATE VIEW 文
    7. INSERT 文 (依存関係の順序、`with_data` が NONE の場合は含まない)

    Parameters
    ----------
    parsed : ParsedDump
        SQLダンプの解析結果
    with_data : InsertMode, default InsertMode.MULTI
        INSERT 文の実行方法
    drop_first : bool, default True
        DROP 文を実行するかどうか
        False の場合、CREATE TABLE 文は CREATE TABLE IF NOT EXISTS 文に置き換える

    Returns
    -------
    list[str]
        実行するSQL文
    """
    plan: list[str] = []

    if drop_first:
        plan.extend(parsed.drops)

    for table in parsed.order:
        for query in parsed.tables.get(table, []):
            plan.append(query if drop_first else _create_if_not_exists(query))

    plan.extend(parsed.functions)
    plan.extend(parsed.procedures)

    keys, foreign = split_alter_key_and_foreign_key(parsed.alters)
    plan.extend(keys)
    plan.extend(foreign)

    plan.extend(parsed.triggers)

    # phpMyAdmin exports a stand-in table for every view
    plan.extend(drop_statements(parsed.names.views))
    plan.extend(parsed.views)

    if with_data == InsertMode.NONE:
        return plan

    # dumps with only INSERT statements have no table order
    tables = list(parsed.order) + [t for t in parsed.inserts if t not in parsed.order]
    for table in tables:
        for query in parsed.inserts.get(table, []):
            if with_data == InsertMode.SINGLE:
                plan.extend(split_multi_value_insert(query))
            else:
                plan.append(query)

    return plan

def exclude_existing(parsed:ParsedDump, existing:Mapping[str, Iterable[str]],
                     existing_routines:Iterable[str]=()) -> ParsedDump:
    """既存のテーブル・ルーチンを実行計画から除外

    既存のテーブルについては CREATE TABLE 文と INSERT 文を除外し、
    既存のテーブルに存在しない列を追加する ALTER 文を先頭に追加する。
    既存のルーチン・トリガーと同名のものは除外する。

    Parameters
    ----------
    parsed : ParsedDump
        SQLダンプの解析結果 (変更しない)
    existing : Mapping[str, Iterable[str]]
        既存のテーブル名 -> 列名
    existing_routines : Iterable[str]
        既存のファンクション・プロシージャ・トリガーの名前

    Returns
    -------
    ParsedDump
        既存のものを除外した解析結果
    """
    result = deepcopy(parsed)
    routines = set(existing_routines)

    added: list[str] = []
    for table in parsed.order:
        if table not in existing or table not in result.tables:
            continue

        columns = set(existing[table])
        for column, definition in get_columns_from_create_table(result.tables[table][0]).items():
            if column not in columns:
                added.append(f"ALTER TABLE `{table}` ADD `{column}` {definition}")

        del result.tables[table]
        result.inserts.pop(table, None)

    result.alters = added + result.alters

    for bucket in ("functions", "procedures", "triggers"):
        kept = [q for q in getattr(result, bucket) if parse_routine_name(q) not in routines]
        setattr(result, bucket, kept)

    return result
