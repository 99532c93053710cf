"""
SQLダンプのインポートを行うパッケージ

Classes
-------
- `InsertMode` : INSERT 文の実行方法
- `FailedStatement` : 実行に失敗したSQL文
- `ImportResult` : 実行結果

Functions
---------
- `build_import_plan` : 実行計画の作成
- `exclude_existing` : 既存のテーブル・ルーチンを実行計画から除外
- `run_import` : 実行計画の実行
- `empty_database` : データベースのテーブル・ルーチンをすべて削除
- `import_dump` : SQLダンプのインポート
"""
from .plan import InsertMode, build_import_plan, exclude_existing, drop_statements
from .runner import (
    FailedStatement, ImportResult,
    run_import, empty_database, import_dump
)
