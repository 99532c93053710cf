"""実行計画を実行するモジュールのテスト"""
from unittest.mock import Mock

import pytest

from sqlport.client import SQLiteClient
from sqlport.config import ImportConfig, SqlConfig
from sqlport.errors import StatementExecutionError
from sqlport.importer import InsertMode, empty_database, import_dump, run_import
from sqlport.logger import Stage



DUMP = """
--
-- Table structure for table `d_lab`
--
CREATE TABLE `d_lab` (
  `code` varchar(64) NOT NULL,
  `name` varchar(32) DEFAULT NULL
);

INSERT INTO `d_lab` (`code`, `name`) VALUES
('LT', 'Tematik'),
('SKJ', 'Kaya; Jaringan');

CREATE TABLE `d_user` (
  `id` int(11) NOT NULL,
  `lab` varchar(64) DEFAULT NULL
);

INSERT INTO `d_user` (`id`, `lab`) VALUES (1, 'LT');
"""


@pytest.fixture
def client():
    """テスト用のインメモリデータベース"""
    client = SQLiteClient()
    yield client
    client.close()

def _rows(client:SQLiteClient, query:str) -> list[tuple]:
    return client.connection.execute(query).fetchall()



def test_run_import(client) -> None:
    """失敗したSQL文を記録し、以降のSQL文の実行を続けることを確認する"""
    logger = Mock()
    plan = ["CREATE TABLE t (id INTEGER)",
            "INSERT INTO missing VALUES (1)",
            "INSERT INTO t VALUES (1)"]

    result = run_import(client, plan, logger)

    assert result.status is False
    assert len(result.failed) == 1
    assert result.failed[0].statement == "INSERT INTO missing VALUES (1)"
    assert "no such table" in result.failed[0].message
    assert result.failed[0].error.statement == "INSERT INTO missing VALUES (1)"
    assert _rows(client, "SELECT id FROM t") == [(1,)]

    logger.warning.assert_called_once_with(Stage.IMPORT, result.failed[0].error.error_message())
    logger.info.assert_called_once_with(Stage.IMPORT, "Executed 3 statements (1 failed)")

def test_run_import_success(client) -> None:
    result = run_import(client, ["CREATE TABLE t (id INTEGER)"])
    assert result.status is True
    assert result.failed == []

def test_run_import_foreign_key_checks_failed() -> None:
    """外部キー制約の検査の無効化に失敗しても実行を続ける"""
    client = Mock()
    client.disable_foreign_key_checks.side_effect = StatementExecutionError("denied")
    logger = Mock()

    result = run_import(client, ["SELECT 1"], logger)

    assert result.status is True
    client.execute.assert_called_once_with("SELECT 1")
    logger.warning.assert_called_once_with(Stage.IMPORT,
                                           "Failed to disable foreign key checks: denied")

def test_empty_database(client) -> None:
    client.execute("CREATE TABLE d_lab (code TEXT)")
    client.execute("CREATE TABLE d_user (id INTEGER)")

    assert empty_database(client) == []
    assert client.list_tables() == []

#
# SQLダンプのインポート
#

def test_import_dump(client) -> None:
    client.execute("CREATE TABLE d_lab (code TEXT)")
    client.execute("INSERT INTO d_lab VALUES ('OLD')")
    logger = Mock()

    result = import_dump(client, DUMP, logger=logger)

    assert result.status is True
    assert client.list_tables() == ["d_lab", "d_user"]
    assert _rows(client, "SELECT code, name FROM d_lab") \
           == [("LT", "Tematik"), ("SKJ", "Kaya; Jaringan")]
    assert _rows(client, "SELECT id, lab FROM d_user") == [(1, "LT")]
    logger.info.assert_any_call(Stage.PARSE, "Parsed 2 tables, 0 ALTER statements")
    logger.info.assert_any_call(Stage.PLAN, "Planned 4 statements")

def test_import_dump_single_insert(client) -> None:
    config = SqlConfig(import_=ImportConfig(with_data=InsertMode.SINGLE))
    result = import_dump(client, DUMP, config)

    assert result.status is True
    assert _rows(client, "SELECT COUNT(*) FROM d_lab") == [(2,)]

def test_import_dump_without_data(client) -> None:
    config = SqlConfig(import_=ImportConfig(with_data=InsertMode.NONE))
    import_dump(client, DUMP, config)
    assert _rows(client, "SELECT COUNT(*) FROM d_lab") == [(0,)]

def test_import_dump_keep_existing(client) -> None:
    """既存のテーブルには不足している列のみを追加し、データは挿入しない"""
    client.execute("CREATE TABLE d_lab (code varchar(64) NOT NULL)")
    client.execute("INSERT INTO d_lab VALUES ('OLD')")
    config = SqlConfig(import_=ImportConfig(drop_first=False))

    result = import_dump(client, DUMP, config)

    assert result.status is True
    assert _rows(client, "SELECT code, name FROM d_lab") == [("OLD", None)]
    assert _rows(client, "SELECT id, lab FROM d_user") == [(1, "LT")]

def test_import_dump_failed_statement(client) -> None:
    """失敗したSQL文は結果に含まれる"""
    result = import_dump(client, DUMP + "\nINSERT INTO `d_user` (`id`) VALUES (2, 'x');")

    assert result.status is False
    assert len(result.failed) == 1
    assert result.failed[0].statement == "INSERT INTO `d_user` (`id`) VALUES (2, 'x')"
