"""設定ファイルの読み込みのテスト"""
import pytest

from sqlport.config import (
    ConnectionConfig, ImportConfig, LoggingConfig, SqlConfig, load_config, parse_config_data
)
from sqlport.importer import InsertMode
from sqlport.logger import LogLevel



CONFIG_TEXT = """
[connection]
driver = "MySQL"
host = "db.local"
port = 3307
user = "root"
password = "secret"
database = "test_db"

[logging]
log_path = "log/sqlport.log"
level = "warning"
log_to_console = true

[import]
with_data = "single"
drop_first = false
"""



def test_parse_config_data() -> None:
    config = parse_config_data(CONFIG_TEXT)

    assert config == SqlConfig(
        connection=ConnectionConfig(driver="mysql", host="db.local", port=3307, user="root",
                                    password="secret", database="test_db"),
        logging=LoggingConfig(log_path="log/sqlport.log", level=LogLevel.WARNING,
                              log_to_console=True),
        import_=ImportConfig(with_data=InsertMode.SINGLE, drop_first=False)
    )
    assert isinstance(config.connection.port, int)
    assert type(config.connection.host) is str

def test_parse_config_data_defaults() -> None:
    """セクション・キーが存在しない場合は既定値を使用する"""
    assert parse_config_data("") == SqlConfig()
    assert parse_config_data("[connection]\ndriver = \"sqlite\"\ndatabase = \"lab.db\"\n") \
           == SqlConfig(connection=ConnectionConfig(driver="sqlite", database="lab.db"))

def test_load_config(tmp_path) -> None:
    path = tmp_path / "config.toml"
    path.write_text(CONFIG_TEXT, encoding="utf-8")

    assert load_config(str(path)).connection.database == "test_db"

def test_load_config_not_found(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "missing.toml"))

@pytest.mark.parametrize("data, message", [
    ("connection = 1", "Section 'connection' is not a table"),
    ("[connection]\nport = \"3306\"", "'connection' > 'port' must be of type int"),
    ("[connection]\nport = true", "'connection' > 'port' must be of type int"),
    ("[connection]\nhost = 1", "'connection' > 'host' must be of type str"),
    ("[connection]\ndriver = \"postgres\"", "Driver 'postgres' ('connection' > 'driver') not supported"),
    ("[logging]\nlevel = \"DEBUG\"", "Log level 'DEBUG' ('logging' > 'level') not supported"),
    ("[logging]\nlog_to_console = \"yes\"", "'logging' > 'log_to_console' must be of type bool"),
    ("[import]\nwith_data = \"all\"", "Insert mode 'all' ('import' > 'with_data') not supported"),
    ("[import]\ndrop_first = 0", "'import' > 'drop_first' must be of type bool"),
])
def test_parse_config_data_invalid(data, message) -> None:
    """不正な値の場合はセクション名とキー名を含む ValueError が送出される"""
    with pytest.raises(ValueError) as e:
        parse_config_data(data)
    assert str(e.value).startswith(message)
