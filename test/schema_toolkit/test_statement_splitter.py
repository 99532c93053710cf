"""SQLダンプの分割・分類を行うモジュールのテスト"""
import os

import pytest

from sqlport.config import ConnectionConfig, SqlConfig
from sqlport.schema_toolkit import RawStatement, StatementType
from sqlport.schema_toolkit.statement_splitter import (
    change_definer, clean_sql_text, get_delimiters, get_non_table_creates,
    parse_sql_dump, split_statements
)



@pytest.fixture
def lab_dump() -> str:
    path = os.path.join(os.path.dirname(__file__), "..", "data", "lab_dump.sql")
    with open(path, "r", encoding="utf-8") as f:
        return f.read()

@pytest.fixture
def config() -> SqlConfig:
    return SqlConfig(connection=ConnectionConfig(user="root", host="localhost"))



def test_clean_sql_text() -> None:
    text = "-- Table structure\n\nCREATE TABLE `t` (\n  `id` int  \n);\n  -- end\n"
    assert clean_sql_text(text) == "CREATE TABLE `t` (\n  `id` int\n);"

def test_get_delimiters() -> None:
    sql = "DELIMITER $$\nSELECT 1$$\nDELIMITER ;\nDELIMITER //\nSELECT 2//\nDELIMITER ;\n" \
          "DELIMITER $$\nSELECT 3$$\nDELIMITER ;"
    assert get_delimiters(sql) == ["$$", "//"]

@pytest.mark.parametrize("query, user, host, expected", [
    ("CREATE DEFINER=`admin`@`%` PROCEDURE `p` () BEGIN END", "root", "localhost",
     "CREATE DEFINER=`root`@`localhost` PROCEDURE `p` () BEGIN END"),
    # user, host が指定されていない場合は変更しない
    ("CREATE DEFINER=`admin`@`%` PROCEDURE `p` () BEGIN END", "", "localhost",
     "CREATE DEFINER=`admin`@`%` PROCEDURE `p` () BEGIN END"),
    ("CREATE PROCEDURE `p` () BEGIN END", "root", "localhost",
     "CREATE PROCEDURE `p` () BEGIN END"),
    # mysqldump の条件付きコメント内の DEFINER
    ("/*!50017 DEFINER=`admin`@`%`*/ /*!50003 TRIGGER `t`", "root", "localhost",
     "/*!50017 DEFINER=`root`@`localhost`*/ /*!50003 TRIGGER `t`"),
    ("CREATE DEFINER=admin@localhost FUNCTION `f`() RETURNS INT RETURN 1", "root", "%",
     "CREATE DEFINER=`root`@`%` FUNCTION `f`() RETURNS INT RETURN 1"),
])
def test_change_definer(query, user, host, expected) -> None:
    assert change_definer(query, user, host) == expected

#
# DELIMITER 区間
#

def test_get_non_table_creates(lab_dump, config) -> None:
    """DELIMITER 区間内のルーチンが取得され、DEFINER が置き換えられることを確認する"""
    statements = get_non_table_creates(lab_dump, config)

    assert [(s.kind, s.name) for s in statements] == [
        (StatementType.CREATE_PROCEDURE, "p_pending"),
        (StatementType.CREATE_FUNCTION, "f_lab_count"),
        (StatementType.CREATE_TRIGGER, "t_reset_status"),
    ]
    assert statements[0].text.startswith("CREATE DEFINER=`root`@`localhost` PROCEDURE `p_pending`")
    # 区間内のセミコロンで分割されない
    assert statements[0].text.endswith("WHERE ap.statusCode = 'IDLE';\nEND")

def test_get_non_table_creates_without_config(lab_dump) -> None:
    statements = get_non_table_creates(lab_dump)
    assert statements[1].text.startswith("CREATE DEFINER=`admin`@`%` FUNCTION `f_lab_count`")

def test_get_non_table_creates_unclosed_region() -> None:
    """閉じられていない DELIMITER 区間はテキストの末尾までとする"""
    sql = "DELIMITER //\nCREATE FUNCTION f() RETURNS INT RETURN 1//\nSELECT 1//"
    statements = get_non_table_creates(sql)
    assert statements == [
        RawStatement("CREATE FUNCTION f() RETURNS INT RETURN 1",
                     StatementType.CREATE_FUNCTION, "f"),
        RawStatement("SELECT 1", StatementType.MISC),
    ]

def test_get_non_table_creates_mysqldump_trigger(config) -> None:
    """条件付きコメントで書かれたトリガー (mysqldump の形式) も取得されることを確認する"""
    sql = "DELIMITER ;;\n" \
          "/*!50003 CREATE*/ /*!50017 DEFINER=`admin`@`%`*/ /*!50003 TRIGGER `t_reset` " \
          "BEFORE INSERT ON `d_lab` FOR EACH ROW SET NEW.name = '' */;;\n" \
          "/*!50003 SET sql_mode = @saved_sql_mode */ ;;\n" \
          "DELIMITER ;\n"
    statements = get_non_table_creates(sql, config)

    assert [(s.kind, s.name) for s in statements] == [
        (StatementType.CREATE_TRIGGER, "t_reset"),
        (StatementType.MISC, None),
    ]
    assert statements[0].text == \
        "/*!50003 CREATE*/ /*!50017 DEFINER=`root`@`localhost`*/ /*!50003 TRIGGER `t_reset` " \
        "BEFORE INSERT ON `d_lab` FOR EACH ROW SET NEW.name = '' */"

def test_get_non_table_creates_table_in_region() -> None:
    """DELIMITER 区間内の CREATE TABLE 文はルーチンとして扱わない"""
    sql = "DELIMITER //\nCREATE TABLE `t_function` (`trigger` int)//\nDELIMITER ;"
    assert [s.kind for s in get_non_table_creates(sql)] == [StatementType.MISC]

#
# 文の分割
#

def test_split_statements() -> None:
    sql = "DROP TABLE IF EXISTS `t`;\n" \
          "CREATE TABLE `t` (`id` int, `note` varchar(8) DEFAULT 'a;b');\n" \
          "INSERT INTO `t` VALUES (1, 'x;y');\n" \
          "CREATE ALGORITHM=UNDEFINED VIEW `v` AS SELECT * FROM `t`;\n" \
          "ALTER TABLE `t` ADD PRIMARY KEY (`id`);\n" \
          "SET NAMES utf8mb4;\n"
    statements = split_statements(sql)

    assert [(s.kind, s.name) for s in statements] == [
        (StatementType.DROP, "t"),
        (StatementType.CREATE_TABLE, "t"),
        (StatementType.INSERT, "t"),
        (StatementType.CREATE_VIEW, "v"),
        (StatementType.ALTER, "t"),
        (StatementType.MISC, None),
    ]
    assert statements[2].text == "INSERT INTO `t` VALUES (1, 'x;y')"

def test_split_statements_keeps_order(lab_dump) -> None:
    """区間内の文と区間外の文が出現順に並ぶことを確認する"""
    kinds = [s.kind for s in split_statements(lab_dump)]
    assert kinds[:5] == [
        StatementType.MISC, StatementType.MISC,
        StatementType.CREATE_PROCEDURE, StatementType.CREATE_FUNCTION,
        StatementType.CREATE_TABLE,
    ]
    assert kinds.index(StatementType.CREATE_TRIGGER) == 6
    assert kinds[-1] == StatementType.MISC

@pytest.mark.parametrize("sql", ["", "\n\n", "-- only a comment\n", ";;"])
def test_split_statements_empty(sql) -> None:
    assert split_statements(sql) == []

#
# ダンプの解析
#

def test_parse_sql_dump(lab_dump, config) -> None:
    parsed = parse_sql_dump(lab_dump, config)

    assert list(parsed.tables) == ["d_access_proposal", "d_lab", "d_user", "d_user_lab"]
    assert parsed.order == ["d_lab", "d_user", "d_access_proposal", "d_user_lab"]
    assert parsed.unresolved == []

    assert len(parsed.alters) == 14
    assert "ALTER TABLE `d_user_lab` ADD CONSTRAINT `ulab_email` FOREIGN KEY (`email`) " \
           "REFERENCES `d_user` (`email`) ON DELETE CASCADE" in parsed.alters

    assert len(parsed.misc) == 3
    assert parsed.drops == []
    assert parsed.views == []
    assert len(parsed.inserts["d_access_proposal"]) == 1
    assert "d_user_lab" not in parsed.inserts

    assert parsed.names.functions == ["f_lab_count"]
    assert parsed.names.procedures == ["p_pending"]
    assert parsed.names.triggers == ["t_reset_status"]
    assert parsed.functions[0].startswith("CREATE DEFINER=`root`@`localhost`")

def test_parse_sql_dump_referenced_table_first() -> None:
    """参照先のテーブルが参照元のテーブルより先に並ぶことを確認する"""
    sql = "CREATE TABLE `d_access_proposal` (`labCode` varchar(64) NOT NULL);\n" \
          "CREATE TABLE `d_lab` (`code` varchar(64) NOT NULL);\n" \
          "ALTER TABLE `d_access_proposal` ADD CONSTRAINT `lab_code` FOREIGN KEY (`labCode`) " \
          "REFERENCES `d_lab` (`code`);"
    parsed = parse_sql_dump(sql)
    assert parsed.order == ["d_lab", "d_access_proposal"]

def test_parse_sql_dump_relocates_keys() -> None:
    """CREATE TABLE 内のキー定義が ALTER 文に移動されることを確認する"""
    sql = "CREATE TABLE `d_user` (\n" \
          "  `id` int(11) NOT NULL AUTO_INCREMENT,\n" \
          "  `email` varchar(64) NOT NULL,\n" \
          "  PRIMARY KEY (`id`)\n" \
          ") ENGINE=InnoDB AUTO_INCREMENT=5;"
    parsed = parse_sql_dump(sql)

    assert parsed.tables["d_user"] == [
        "CREATE TABLE `d_user` (\n  `id` int(11) NOT NULL,\n  `email` varchar(64) NOT NULL\n) "
        "ENGINE=InnoDB"
    ]
    assert parsed.alters == [
        "ALTER TABLE `d_user` ADD PRIMARY KEY (`id`)",
        "ALTER TABLE `d_user` MODIFY `id` int(11) NOT NULL AUTO_INCREMENT, AUTO_INCREMENT=5",
    ]

def test_parse_sql_dump_mysqldump_trigger(config) -> None:
    sql = "CREATE TABLE `d_lab` (\n  `code` varchar(64) NOT NULL,\n  `name` varchar(32) NOT NULL\n);\n" \
          "DELIMITER ;;\n" \
          "/*!50003 CREATE*/ /*!50017 DEFINER=`admin`@`%`*/ /*!50003 TRIGGER `t_reset` " \
          "BEFORE INSERT ON `d_lab` FOR EACH ROW SET NEW.name = '' */;;\n" \
          "DELIMITER ;\n"
    parsed = parse_sql_dump(sql, config)

    assert parsed.names.triggers == ["t_reset"]
    assert parsed.misc == []
    assert parsed.triggers[0].startswith("/*!50003 CREATE*/ /*!50017 DEFINER=`root`@`localhost`*/")

def test_parse_sql_dump_routine_definer(config) -> None:
    """DELIMITER 区間外のルーチンも DEFINER が置き換えられることを確認する"""
    sql = "CREATE DEFINER=`admin`@`%` FUNCTION `f_one`() RETURNS int RETURN 1;\n" \
          "CREATE DEFINER=`admin`@`%` PROCEDURE `p_none`() SELECT 1;\n" \
          "CREATE DEFINER=`admin`@`%` TRIGGER `t_none` BEFORE INSERT ON `d_lab` " \
          "FOR EACH ROW SET NEW.name = '';"
    parsed = parse_sql_dump(sql, config)

    assert parsed.functions == ["CREATE DEFINER=`root`@`localhost` FUNCTION `f_one`() RETURNS int RETURN 1"]
    assert parsed.procedures == ["CREATE DEFINER=`root`@`localhost` PROCEDURE `p_none`() SELECT 1"]
    assert parsed.triggers[0].startswith("CREATE DEFINER=`root`@`localhost` TRIGGER `t_none`")

def test_parse_sql_dump_views_and_drops(config) -> None:
    sql = "DROP TABLE IF EXISTS `v_lab`;\n" \
          "CREATE TABLE `d_lab` (`code` varchar(64) NOT NULL);\n" \
          "CREATE ALGORITHM=UNDEFINED DEFINER=`admin`@`%` SQL SECURITY DEFINER VIEW `v_lab` " \
          "AS SELECT `code` FROM `d_lab`;"
    parsed = parse_sql_dump(sql, config)

    assert parsed.drops == ["DROP TABLE IF EXISTS `v_lab`"]
    assert parsed.names.views == ["v_lab"]
    assert parsed.views[0].startswith(
        "CREATE ALGORITHM=UNDEFINED DEFINER=`root`@`localhost` SQL SECURITY DEFINER VIEW")

def test_parse_sql_dump_inserts_only() -> None:
    """INSERT 文のみのダンプ"""
    parsed = parse_sql_dump("INSERT INTO `d_lab` VALUES ('LT', 'Tematik');")
    assert parsed.inserts == {"d_lab": ["INSERT INTO `d_lab` VALUES ('LT', 'Tematik')"]}
    assert parsed.tables == {}
    assert parsed.order == []

def test_parse_sql_dump_unresolved() -> None:
    """存在しないテーブルを参照するテーブルは末尾に並び、未解決として記録される"""
    sql = "CREATE TABLE `a` (`x` int);\n" \
          "CREATE TABLE `b` (`y` int);\n" \
          "ALTER TABLE `a` ADD CONSTRAINT `fk` FOREIGN KEY (`x`) REFERENCES `missing` (`id`);"
    parsed = parse_sql_dump(sql)
    assert parsed.order == ["b", "a"]
    assert parsed.unresolved == ["a"]
