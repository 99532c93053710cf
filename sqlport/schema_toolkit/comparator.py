"""
Column-level comparison of two sets of table models.

The result lists, per table and column, the rendered column description of
both sides, so that every difference can be classified as removed
(only in the source), added (only in the target) or modified (different on
both sides).

## Functions

- `compare`: Compare two sets of table models.
- `compare_with_database`: Compare a live database with SQL dump text.
- `render_column`: Render a column definition as text.
- `get_errno`: Get the OR-combined error flags of a result.
- `format_diff`: Format a result as text.
"""
from copy import deepcopy
from typing import Optional, TYPE_CHECKING

from sqlport.logger import Logger, Stage
from ._core import ColumnDefinition, ComparisonResult, DiffEntry, ErrorFlag, TableSchema
from .schema_builder import build_schemas_from_client, build_schemas_from_sql

if TYPE_CHECKING:
    from sqlport.client import SQLClient
    from sqlport.config import SqlConfig



IDENTICAL_MESSAGE = "Both Tables are identical!"


def render_column(table: str, column: str, definition: ColumnDefinition) -> str:
    """Render a column definition and its keys as a single line.

    Examples
    --------
    >>> render_column("d_lab", "code", ColumnDefinition(
    ...     type="varchar(64)", datatype="varchar", size=64, length=64, primary=True))
    '`d_lab`.`code` varchar(64) NOT NULL; PRIMARY KEY;'
    """
    parts = [f"`{table}`.`{column}` {definition.type}",
             "NULL" if definition.nullable else "NOT NULL"]
    if definition.default is not None:
        parts.append(f"DEFAULT {definition.default}")
    if definition.auto_increment:
        parts.append("AUTO_INCREMENT")
    parts[-1] += ";"

    if definition.primary:
        parts.append("PRIMARY KEY;")
    for key in definition.unique:
        columns = ",".join(f"`{c}`" for c in key.columns)
        parts.append(f"UNIQUE KEY `{key.name}`({columns});")
    for key in definition.index:
        columns = ",".join(f"`{c}`" for c in key.columns)
        parts.append(f"KEY `{key.name}`({columns});")
    for fk in definition.foreign:
        parts.append(f"CONSTRAINT `{fk.name}` FOREIGN KEY (`{fk.column}`) "
                     f"REFERENCES `{fk.ref_table}` (`{fk.ref_column}`);")

    return " ".join(" ".join(parts).split())

def _is_identical(source: Optional[TableSchema], target: Optional[TableSchema]) -> bool:
    if source is None or target is None:
        return False
    if len(source.columns) != len(target.columns):
        return False
    return all(
        name in target.columns and definition == target.columns[name]
        for name, definition in source.columns.items()
    )

def _generate_diff(source: dict[str, TableSchema],
                   target: dict[str, TableSchema]) -> dict[str, dict[str, DiffEntry]]:
    diff: dict[str, dict[str, DiffEntry]] = {}
    for table in list(source) + [t for t in target if t not in source]:
        src_columns = source[table].columns if table in source else {}
        tgt_columns = target[table].columns if table in target else {}

        for column in list(src_columns) + [c for c in tgt_columns if c not in src_columns]:
            src = render_column(table, column, src_columns[column]) \
                  if column in src_columns else None
            tgt = render_column(table, column, tgt_columns[column]) \
                  if column in tgt_columns else None
            if src == tgt:
                continue
            diff.setdefault(table, {})[column] = DiffEntry(table, column, src, tgt)
    return diff

def compare(source: dict[str, TableSchema],
            target: dict[str, TableSchema]) -> ComparisonResult:
    """Compare two sets of table models.

    The tables of the source are checked first, then the tables left in the
    target. Tables that are identical on both sides are dropped from the
    working copies; the remaining tables are compared column by column.

    Args
    ----
    source : dict[str, TableSchema]
        Table models of the source (e.g. the database); not modified
    target : dict[str, TableSchema]
        Table models of the target (e.g. the dump file); not modified

    Returns
    -------
    ComparisonResult
        `status` is True and `diff` is None if every table is identical
    """
    source = deepcopy(source)
    target = deepcopy(target)
    status = True

    pair = {"reference": source, "comparee": target}
    for _ in range(2):
        for table in list(pair["reference"]):
            identical = _is_identical(source.get(table), target.get(table))
            status &= identical
            if identical:
                del source[table]
                del target[table]

        if not target:
            break
        pair = {"reference": pair["comparee"], "comparee": pair["reference"]}

    if status:
        return ComparisonResult(status=True)
    return ComparisonResult(status=False, diff=_generate_diff(source, target))

def compare_with_database(client: "SQLClient", sql: str,
                          config: Optional["SqlConfig"] = None,
                          logger: Optional[Logger] = None) -> ComparisonResult:
    """Compare the tables of a live database (source) with SQL dump text (target).

    Raises
    ------
    IntrospectionError
        If the database structure cannot be read
    """
    source = build_schemas_from_client(client, config, logger)
    target = build_schemas_from_sql(sql, config)
    result = compare(source, target)

    if logger is not None:
        if result.status:
            logger.info(Stage.COMPARE, IDENTICAL_MESSAGE)
        else:
            logger.info(Stage.COMPARE, f"{len(result.diff)} tables differ " \
                                       f"(errno: {int(result.errno):#04x})")
    return result

def get_errno(result: ComparisonResult) -> ErrorFlag:
    """Get the OR-combined flags of every difference (0 if identical)."""
    return result.errno

def format_diff(result: ComparisonResult) -> str:
    """Format a comparison result as text.

    Each table is written as an `@Table name` block with two lines per column:

    ```
    @Table d_user
      source <- `d_user`.`name` varchar(64) NOT NULL;
      target +> `d_user`.`name` varchar(128) NOT NULL;

    ```

    `<-` / `+>` mark a column that exists on both sides;
    `--` / `++` mark a column that exists on one side only.
    """
    if result.status:
        return IDENTICAL_MESSAGE

    lines = []
    for table, columns in (result.diff or {}).items():
        lines.append(f"@Table {table}")
        for entry in columns.values():
            both = entry.source is not None and entry.target is not None
            lines.append(f"  source {'<-' if both else '--'} {entry.source or ''}".rstrip())
            lines.append(f"  target {'+>' if both else '++'} {entry.target or ''}".rstrip())
            lines.append("")
    return "\n".join(lines)
