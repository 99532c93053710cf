"""
アプリケーションのエントリーポイント

Usage
-----
```
python app.py compare <dump.sql> [--config FILE]
python app.py plan <dump.sql> [--config FILE]
python app.py import <dump.sql> [--config FILE]
```
"""
import argparse
import sys
from typing import Optional

from sqlport.client import connect
from sqlport.config import SqlConfig, load_config
from sqlport.errors import IntrospectionError, UnexpectedError
from sqlport.importer import build_import_plan, import_dump
from sqlport.logger import Logger, Stage
from sqlport.schema_toolkit import compare_with_database, format_diff, parse_sql_dump



def _parse_args(argv:Optional[list[str]]=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="sqlport",
        description="Import SQL dumps and compare them with a database"
    )
    parser.add_argument("command", choices=["compare", "plan", "import"],
                        help="compare: show differences between the database and the dump, "
                             "plan: show the statements in execution order, "
                             "import: execute the dump")
    parser.add_argument("dump", help="path to the SQL dump file")
    parser.add_argument("--config", default=None, help="path to the TOML configuration file")
    return parser.parse_args(argv)

def _create_logger(config:SqlConfig) -> Logger:
    logger = Logger(level=config.logging.level,
                    to_console=config.logging.log_to_console)
    if config.logging.log_path:
        logger.set_log_file(config.logging.log_path)
    return logger

def main(argv:Optional[list[str]]=None) -> int:
    """
    アプリケーションのエントリーポイント

    Returns
    -------
    int
        終了コード
        compare の場合は差分のエラーフラグ (一致した場合は 0)
    """
    args = _parse_args(argv)
    config = load_config(args.config) if args.config else SqlConfig()
    logger = _create_logger(config)

    with open(args.dump, "r", encoding="utf-8") as f:
        sql = f.read()

    if args.command == "plan":
        parsed = parse_sql_dump(sql, config)
        plan = build_import_plan(parsed, config.import_.with_data, config.import_.drop_first)
        print(";\n\n".join(plan) + ";" if plan else "")
        return 0

    try:
        with connect(config.connection) as client:
            if args.command == "compare":
                result = compare_with_database(client, sql, config, logger)
                print(format_diff(result))
                return int(result.errno)

            result = import_dump(client, sql, config, logger)
    except IntrospectionError as e:
        logger.error(Stage.INTROSPECT, e.error.error_message())
        print(e.error.error_message(), file=sys.stderr)
        return 1
    except Exception as e:
        error = UnexpectedError(e)
        stage = Stage.COMPARE if args.command == "compare" else Stage.IMPORT
        logger.error(stage, error.error_message())
        raise

    for failed in result.failed:
        print(failed.error.error_message(), file=sys.stderr)
    return 0 if result.status else 1



if __name__ == "__main__":
    sys.exit(main())
