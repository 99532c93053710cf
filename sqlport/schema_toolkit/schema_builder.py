"""
Building table models (`TableSchema`) from SQL dumps and live databases.

A model is seeded from the column lines of each CREATE TABLE statement and
then completed by the ALTER statements of the dump (keys, constraints and
AUTO_INCREMENT), so that both a raw dump and the canonical CREATE TABLE text
returned by a database end up in the same shape.

## Functions

- `build_table_schema`: Build the model of a single CREATE TABLE statement.
- `apply_alter_clause`: Apply a parsed ALTER clause to the models.
- `build_schemas_from_dump`: Build the models of a parsed dump.
- `build_schemas_from_sql`: Build the models of SQL dump text.
- `build_schemas_from_client`: Build the models of a live database.
"""
from copy import deepcopy
from typing import Optional, TYPE_CHECKING

from sqlport.errors import IntrospectionError
from sqlport.logger import Logger, Stage
from ._core import (
    AlterClause, AlterType, DEFINITION_FIELDS, ForeignKeyMembership,
    KeyMembership, ParsedDump, TableSchema
)
from .ddl_parser import (
    get_columns_from_create_table, get_key_definitions_from_create_table,
    parse_alter_clause, parse_column_definition
)
from .statement_splitter import parse_sql_dump

if TYPE_CHECKING:
    from sqlport.client import SQLClient
    from sqlport.config import SqlConfig



def build_table_schema(name: str, create_text: str) -> TableSchema:
    """Build the model of a table from its CREATE TABLE statement.

    Key and constraint lines left in the body are applied the same way as
    the corresponding ALTER statements.

    Args
    ----
    name : str
        Table name
    create_text : str
        CREATE TABLE statement

    Returns
    -------
    TableSchema
        Table model; columns whose definition cannot be parsed are skipped
    """
    schema = TableSchema(name)
    for column, text in get_columns_from_create_table(create_text).items():
        if (definition := parse_column_definition(text)) is not None:
            schema.columns[column] = definition

    schemas = {name: schema}
    for key in get_key_definitions_from_create_table(create_text):
        if (clause := parse_alter_clause(key)) is not None:
            clause.table = name
            apply_alter_clause(schemas, clause)

    return schema

def apply_alter_clause(schemas: dict[str, TableSchema], clause: AlterClause) -> None:
    """Apply a parsed ALTER clause to the table models.

    - PRIMARY: marks the columns as primary key columns
    - MODIFY / ADD_COLUMN: replaces the column definition, keeping the keys
      the column belongs to (the column is created if it does not exist)
    - UNIQUE / INDEX: adds the key to every column of the key
    - FOREIGN: adds the constraint to every local column

    Keys on columns that are not in the model are ignored.

    Args
    ----
    schemas : dict[str, TableSchema]
        Table name -> table model; modified in place
    clause : AlterClause
        Parsed ALTER clause
    """
    if clause.table is None:
        return
    if clause.table not in schemas:
        schemas[clause.table] = TableSchema(clause.table)
    columns = schemas[clause.table].columns

    if clause.kind == AlterType.PRIMARY:
        for column in clause.columns:
            if column in columns:
                columns[column].primary = True

    elif clause.kind in (AlterType.MODIFY, AlterType.ADD_COLUMN):
        if not clause.columns or clause.definition is None:
            return
        column = clause.columns[0]
        if (current := columns.get(column)) is None:
            columns[column] = deepcopy(clause.definition)
            return
        for name in DEFINITION_FIELDS:
            setattr(current, name, getattr(clause.definition, name))
        current.primary = current.primary or clause.definition.primary

    elif clause.kind in (AlterType.UNIQUE, AlterType.INDEX):
        attr = "unique" if clause.kind == AlterType.UNIQUE else "index"
        for column in clause.columns:
            if column in columns:
                getattr(columns[column], attr).append(
                    KeyMembership(clause.name or column, list(clause.columns))
                )

    elif clause.kind == AlterType.FOREIGN and clause.reference is not None:
        ref = clause.reference
        for i, column in enumerate(clause.columns):
            if column not in columns:
                continue
            ref_column = ref.columns[min(i, len(ref.columns)-1)] if ref.columns else ""
            columns[column].foreign.append(
                ForeignKeyMembership(clause.name or "", column, ref.table, ref_column)
            )

def build_schemas_from_dump(parsed: ParsedDump) -> dict[str, TableSchema]:
    """Build the table models of a parsed dump.

    Args
    ----
    parsed : ParsedDump
        Parsed dump

    Returns
    -------
    dict[str, TableSchema]
        Table name -> table model, in CREATE TABLE order
        (tables that appear only in ALTER statements follow)
    """
    schemas: dict[str, TableSchema] = {}
    for name, creates in parsed.tables.items():
        schemas[name] = build_table_schema(name, creates[0])

    for alter in parsed.alters:
        if (clause := parse_alter_clause(alter)) is not None:
            apply_alter_clause(schemas, clause)

    return schemas

def build_schemas_from_sql(sql: str,
                           config: Optional["SqlConfig"] = None) -> dict[str, TableSchema]:
    """Build the table models of SQL dump text."""
    return build_schemas_from_dump(parse_sql_dump(sql, config))

def build_schemas_from_client(client: "SQLClient",
                              config: Optional["SqlConfig"] = None,
                              logger: Optional[Logger] = None) -> dict[str, TableSchema]:
    """Build the table models of a live database.

    Tables are listed first, then the CREATE TABLE statement of each table
    is fetched one by one, in listing order, and parsed like a dump.

    Args
    ----
    client : SQLClient
        Connected database client
    config : Optional[SqlConfig]
        Configuration
    logger : Optional[Logger]
        Logger

    Returns
    -------
    dict[str, TableSchema]
        Table name -> table model

    Raises
    ------
    IntrospectionError
        If the tables or any CREATE TABLE statement cannot be read;
        no partial model is returned
    """
    creates = []
    table = None
    try:
        tables = client.list_tables()
        for table in tables:
            creates.append(client.get_create_table(table))
    except IntrospectionError as e:
        if logger is not None:
            logger.error(Stage.INTROSPECT, e.error.error_message())
        raise
    except Exception as e:
        err = IntrospectionError(f"Failed to read the database structure: {e}", table, e)
        if logger is not None:
            logger.error(Stage.INTROSPECT, err.error.error_message())
        raise err from e

    if logger is not None:
        logger.info(Stage.INTROSPECT, f"Read the structure of {len(creates)} tables")

    return build_schemas_from_sql(";\n\n".join(creates) + ";", config)
