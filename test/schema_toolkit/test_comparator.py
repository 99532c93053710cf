"""テーブルの構造を比較するモジュールのテスト"""
import os
from copy import deepcopy
from unittest.mock import Mock

import pytest

from sqlport.client import SQLiteClient
from sqlport.logger import Stage
from sqlport.schema_toolkit import (
    ColumnDefinition, ComparisonResult, DiffEntry, ErrorFlag, ForeignKeyMembership,
    KeyMembership, build_schemas_from_sql, compare, compare_with_database,
    format_diff, get_errno
)
from sqlport.schema_toolkit.comparator import IDENTICAL_MESSAGE, render_column



USER_TABLE = "CREATE TABLE `d_user` (\n" \
             "  `id` int(11) NOT NULL,\n" \
             "  `name` varchar(64) NOT NULL\n" \
             ");"


@pytest.fixture
def lab_dump() -> str:
    path = os.path.join(os.path.dirname(__file__), "..", "data", "lab_dump.sql")
    with open(path, "r", encoding="utf-8") as f:
        return f.read()



@pytest.mark.parametrize("definition, expected", [
    (ColumnDefinition(type="varchar(64)", datatype="varchar", size=64, length=64, primary=True),
     "`d_user`.`name` varchar(64) NOT NULL; PRIMARY KEY;"),
    (ColumnDefinition(type="varchar(32)", datatype="varchar", size=32, length=32,
                      nullable=True, default="NULL"),
     "`d_user`.`name` varchar(32) NULL DEFAULT NULL;"),
    (ColumnDefinition(type="int(11)", datatype="int", size=11, auto_increment=True),
     "`d_user`.`name` int(11) NOT NULL AUTO_INCREMENT;"),
    (ColumnDefinition(type="varchar(64)", datatype="varchar", size=64, length=64,
                      unique=[KeyMembership("email", ["name", "lab"])],
                      index=[KeyMembership("k_name", ["name"])],
                      foreign=[ForeignKeyMembership("fk", "name", "d_lab", "code")]),
     "`d_user`.`name` varchar(64) NOT NULL; UNIQUE KEY `email`(`name`,`lab`); "
     "KEY `k_name`(`name`); CONSTRAINT `fk` FOREIGN KEY (`name`) REFERENCES `d_lab` (`code`);"),
    # 空白は1つにまとめられる
    (ColumnDefinition(type="varchar(8)", datatype="varchar", size=8, length=8,
                      default="'a  b'"),
     "`d_user`.`name` varchar(8) NOT NULL DEFAULT 'a b';"),
])
def test_render_column(definition, expected) -> None:
    assert render_column("d_user", "name", definition) == expected

#
# 比較
#

def test_compare_identical(lab_dump) -> None:
    """同じダンプ同士を比較すると一致する"""
    result = compare(build_schemas_from_sql(lab_dump), build_schemas_from_sql(lab_dump))

    assert result == ComparisonResult(status=True, diff=None)
    assert get_errno(result) == 0
    assert format_diff(result) == IDENTICAL_MESSAGE

def test_compare_empty() -> None:
    assert compare({}, {}).status is True

def test_compare_added_column() -> None:
    """ターゲットにのみ存在する列は ADDED として報告される"""
    source = build_schemas_from_sql(USER_TABLE)
    target = build_schemas_from_sql(
        USER_TABLE + "\nALTER TABLE `d_user` ADD `nickname` varchar(32) DEFAULT NULL;")

    result = compare(source, target)

    assert result.status is False
    assert result.diff == {
        "d_user": {
            "nickname": DiffEntry("d_user", "nickname", None,
                                  "`d_user`.`nickname` varchar(32) NULL DEFAULT NULL;")
        }
    }
    assert result.errno == ErrorFlag.ADDED == 0x04
    assert format_diff(result) == "@Table d_user\n" \
                                  "  source --\n" \
                                  "  target ++ `d_user`.`nickname` varchar(32) NULL DEFAULT NULL;\n"

def test_compare_modified_column() -> None:
    """両方に存在し定義が異なる列は MODIFIED として報告される"""
    source = build_schemas_from_sql(USER_TABLE)
    target = build_schemas_from_sql(USER_TABLE.replace("varchar(64)", "varchar(128)"))

    result = compare(source, target)

    assert result.status is False
    assert list(result.diff["d_user"]) == ["name"]
    assert get_errno(result) == ErrorFlag.MODIFIED == 0x02
    assert format_diff(result) == "@Table d_user\n" \
                                  "  source <- `d_user`.`name` varchar(64) NOT NULL;\n" \
                                  "  target +> `d_user`.`name` varchar(128) NOT NULL;\n"

def test_compare_removed_table() -> None:
    """ソースにのみ存在するテーブルの列は REMOVED として報告される"""
    source = build_schemas_from_sql(USER_TABLE + "\nCREATE TABLE `d_lab` (`code` varchar(64) NOT NULL);")
    target = build_schemas_from_sql(USER_TABLE)

    result = compare(source, target)

    assert list(result.diff) == ["d_lab"]
    assert result.diff["d_lab"]["code"].flag == ErrorFlag.REMOVED
    assert result.errno == 0x01

def test_compare_combined_flags() -> None:
    source = build_schemas_from_sql(
        "CREATE TABLE `a` (`x` int(11) NOT NULL, `y` int(11) NOT NULL);")
    target = build_schemas_from_sql(
        "CREATE TABLE `a` (`x` bigint(20) NOT NULL, `z` int(11) NOT NULL);")

    result = compare(source, target)

    assert [e.flag for e in result.diff["a"].values()] \
           == [ErrorFlag.MODIFIED, ErrorFlag.REMOVED, ErrorFlag.ADDED]
    assert result.errno == 0x07

def test_compare_key_difference() -> None:
    """キーの違いも差分として報告される"""
    source = build_schemas_from_sql(USER_TABLE)
    target = build_schemas_from_sql(USER_TABLE + "\nALTER TABLE `d_user` ADD PRIMARY KEY (`id`);")

    result = compare(source, target)

    assert result.diff["d_user"]["id"].target == "`d_user`.`id` int(11) NOT NULL; PRIMARY KEY;"
    assert "name" not in result.diff["d_user"]

def test_compare_does_not_modify_inputs(lab_dump) -> None:
    source = build_schemas_from_sql(lab_dump)
    target = build_schemas_from_sql(lab_dump.replace("varchar(32)", "varchar(48)"))
    source_copy, target_copy = deepcopy(source), deepcopy(target)

    result = compare(source, target)

    assert result.status is False
    assert list(result.diff) == ["d_lab"]
    assert source == source_copy
    assert target == target_copy

#
# データベースとの比較
#

def test_compare_with_database() -> None:
    client = SQLiteClient()
    client.execute("CREATE TABLE d_lab (code varchar(64) NOT NULL, "
                   "name varchar(32) NOT NULL, PRIMARY KEY (code))")
    logger = Mock()
    sql = "CREATE TABLE `d_lab` (\n" \
          "  `code` varchar(64) NOT NULL,\n" \
          "  `name` varchar(32) NOT NULL\n" \
          ") ENGINE=InnoDB;\n" \
          "ALTER TABLE `d_lab`\n" \
          "  ADD PRIMARY KEY (`code`);"

    result = compare_with_database(client, sql, logger=logger)
    client.close()

    assert result.status is True
    logger.info.assert_called_with(Stage.COMPARE, IDENTICAL_MESSAGE)

def test_compare_with_database_difference() -> None:
    client = SQLiteClient()
    client.execute("CREATE TABLE d_lab (code varchar(64) NOT NULL)")
    logger = Mock()

    result = compare_with_database(
        client, "CREATE TABLE `d_lab` (`code` varchar(64) NOT NULL, `name` varchar(32));",
        logger=logger)
    client.close()

    assert result.errno == ErrorFlag.ADDED
    logger.info.assert_called_with(Stage.COMPARE, "1 tables differ (errno: 0x04)")
