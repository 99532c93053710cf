from .sql_config import (
    ConnectionConfig, LoggingConfig, ImportConfig, SqlConfig,
    load_config, parse_config_data
)
