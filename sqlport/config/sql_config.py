"""
This module provides the configuration of sqlport and functions such as
`load_config` to read it from TOML files.

Classes
-------
- ConnectionConfig: Database connection settings (`[connection]`)
- LoggingConfig: Log output settings (`[logging]`)
- ImportConfig: Import settings (`[import]`)
- SqlConfig: Whole configuration

Functions
---------
- load_config: Parse a TOML file and return a SqlConfig object
- parse_config_data: Parse a TOML string and return a SqlConfig object

Examples
--------
Every section and key is optional; missing ones take the default values below.

```toml
[connection]
driver = "mysql"        # "mysql" or "sqlite"
host = "localhost"
port = 3306
user = "root"
password = ""
database = "test_db"    # database name, or file path for sqlite

[logging]
log_path = "sqlport.log"   # empty: no log file
level = "INFO"             # INFO, WARNING or ERROR
log_to_console = false

[import]
with_data = "multi"        # "none", "multi" or "single"
drop_first = true
```
"""
from dataclasses import dataclass, field
from typing import Any, Optional

import tomlkit as toml
import tomlkit.items as toml_items

from sqlport.importer.plan import InsertMode
from sqlport.logger import LogLevel



SUPPORTED_DRIVERS = ("mysql", "sqlite")
"""Database drivers that can be used in `[connection]`"""


@dataclass
class ConnectionConfig:
    """Database connection settings"""
    driver: str = "mysql"
    """Database driver ("mysql" or "sqlite")"""
    host: str = "localhost"
    """Host name; also used as the host of DEFINER clauses"""
    port: int = 3306
    """Port number"""
    user: str = ""
    """User name; also used as the user of DEFINER clauses"""
    password: str = ""
    """Password"""
    database: str = ""
    """Database name (file path for sqlite)"""

@dataclass
class LoggingConfig:
    """Log output settings"""
    log_path: str = ""
    """Path to the log file (empty: no log file)"""
    level: LogLevel = LogLevel.INFO
    """Minimum log level"""
    log_to_console: bool = False
    """Whether to print logs to the console as well"""

@dataclass
class ImportConfig:
    """Import settings"""
    with_data: InsertMode = InsertMode.MULTI
    """How INSERT statements are executed"""
    drop_first: bool = True
    """Whether to execute DROP statements before creating the tables"""

@dataclass
class SqlConfig:
    """Whole configuration"""
    connection: ConnectionConfig = field(default_factory=ConnectionConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    import_: ImportConfig = field(default_factory=ImportConfig)



def load_config(file_path:str) -> SqlConfig:
    """Parse a TOML file and return a SqlConfig object

    Parameters
    ----------
    file_path : str
        Path to the TOML file

    Returns
    -------
    SqlConfig
        Configuration
    """
    with open(file_path, 'r', encoding="utf-8") as f:
        data = f.read()

    return parse_config_data(data)

def parse_config_data(data:str) -> SqlConfig:
    """Parse a TOML string and return a SqlConfig object

    Parameters
    ----------
    data : str
        TOML data

    Returns
    -------
    SqlConfig
        Configuration

    Raises
    ------
    ValueError
        If a section or a value is not valid
    """
    toml_data = toml.loads(data)

    return SqlConfig(
        connection=_parse_connection(_get_section(toml_data, "connection")),
        logging=_parse_logging(_get_section(toml_data, "logging")),
        import_=_parse_import(_get_section(toml_data, "import"))
    )

#
# Helpers
#

def _get_section(toml_data, name:str) -> Optional[toml_items.Table]:
    if (section := toml_data.get(name)) is None:
        return None
    if not isinstance(section, toml_items.Table):
        raise ValueError(f"Section '{name}' is not a table")
    return section

def _get_value(section:Optional[toml_items.Table], section_name:str, key:str,
               expected:type, default:Any) -> Any:
    """Get a value of the expected type from a section, or the default value"""
    if section is None or (item := section.get(key)) is None:
        return default

    # tomlkit returns booleans as plain bool values
    value = item.unwrap() if isinstance(item, toml_items.Item) else item
    if (not isinstance(value, expected)) \
            or (expected is int and isinstance(value, bool)):
        raise ValueError(f"'{section_name}' > '{key}' must be " \
                         f"of type {expected.__name__}")
    return value

#
# Sections
#

def _parse_connection(section:Optional[toml_items.Table]) -> ConnectionConfig:
    default = ConnectionConfig()

    driver = _get_value(section, "connection", "driver", str, default.driver).lower()
    if driver not in SUPPORTED_DRIVERS:
        raise ValueError(f"Driver '{driver}' ('connection' > 'driver') not supported: " \
                         f"choose from {', '.join(SUPPORTED_DRIVERS)}")

    return ConnectionConfig(
        driver=driver,
        host=_get_value(section, "connection", "host", str, default.host),
        port=_get_value(section, "connection", "port", int, default.port),
        user=_get_value(section, "connection", "user", str, default.user),
        password=_get_value(section, "connection", "password", str, default.password),
        database=_get_value(section, "connection", "database", str, default.database)
    )

def _parse_logging(section:Optional[toml_items.Table]) -> LoggingConfig:
    default = LoggingConfig()

    level_name = _get_value(section, "logging", "level", str, default.level.name).upper()
    try:
        level = LogLevel[level_name]
    except KeyError as e:
        raise ValueError(f"Log level '{level_name}' ('logging' > 'level') not supported: " \
                         f"choose from {', '.join(LogLevel.__members__)}") from e

    return LoggingConfig(
        log_path=_get_value(section, "logging", "log_path", str, default.log_path),
        level=level,
        log_to_console=_get_value(section, "logging", "log_to_console", bool,
                                  default.log_to_console)
    )

def _parse_import(section:Optional[toml_items.Table]) -> ImportConfig:
    default = ImportConfig()

    mode_name = _get_value(section, "import", "with_data", str,
                           default.with_data.name).upper()
    try:
        with_data = InsertMode[mode_name]
    except KeyError as e:
        raise ValueError(f"Insert mode '{mode_name.lower()}' ('import' > 'with_data') " \
                         "not supported: choose from " \
                         f"{', '.join(m.lower() for m in InsertMode.__members__)}") from e

    return ImportConfig(
        with_data=with_data,
        drop_first=_get_value(section, "import", "drop_first", bool, default.drop_first)
    )
