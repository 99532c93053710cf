"""
Foreign-key dependency graph and topological ordering of tables.

A table depends on every table its FOREIGN KEY constraints reference, so
the referenced tables have to be created (and filled) first.

## Functions

- `extract_foreign_keys`: Get the referenced tables of an ALTER statement.
- `build_dependency_graph`: Build a table -> referenced tables mapping.
- `topological_sort`: Sort tables so that referenced tables come first.
"""
import re
from typing import Iterable, Optional

from ._core import DependencyGraph, SortResult, StatementType
from .ddl_parser import IDENT, QUALIFIED, get_name_from_query, unquote_identifier



_FOREIGN_REFERENCE = re.compile(
    rf"FOREIGN\s+KEY\s*(?:{IDENT}\s*)?\([^)]*\)\s*REFERENCES\s+({QUALIFIED})", re.I)


def extract_foreign_keys(alter_text: str) -> tuple[Optional[str], set[str]]:
    """Get the table an ALTER statement targets and the tables it references.

    Args
    ----
    alter_text : str
        ALTER TABLE statement

    Returns
    -------
    Optional[str]
        Target table, None if the statement is not an ALTER TABLE statement
    set[str]
        Tables referenced by FOREIGN KEY clauses (empty if there is none)

    Examples
    --------
    >>> extract_foreign_keys(
    ...     "ALTER TABLE `d_user` ADD CONSTRAINT `fk_lab` FOREIGN KEY (`lab`) REFERENCES `d_lab` (`code`)")
    ('d_user', {'d_lab'})
    """
    table = get_name_from_query(StatementType.ALTER, alter_text)
    references = {
        unquote_identifier(m.group(1)) for m in _FOREIGN_REFERENCE.finditer(alter_text)
    }
    return table, references

def build_dependency_graph(alter_statements: Iterable[str],
                           tables: Iterable[str] = ()) -> DependencyGraph:
    """Build the dependency graph of tables.

    Args
    ----
    alter_statements : Iterable[str]
        ALTER TABLE statements
    tables : Iterable[str]
        Tables that have to appear in the graph even without ALTER statements
        (usually the CREATE TABLE tables, in definition order)

    Returns
    -------
    DependencyGraph
        `tables` first, then tables that appear only as ALTER targets.
        The references of several ALTER statements on the same table are merged.
    """
    graph: DependencyGraph = {table: set() for table in tables}
    for alter in alter_statements:
        table, references = extract_foreign_keys(alter)
        if table is None:
            continue
        graph.setdefault(table, set()).update(references)
    return graph

def topological_sort(graph: DependencyGraph) -> SortResult:
    """Sort tables so that every table comes after the tables it references.

    Each pass moves every table whose references are already placed to the
    result, keeping the graph order among them. When a pass places nothing
    (circular references, or references to tables outside the graph),
    the remaining tables are appended in graph order and reported as unresolved.

    Args
    ----
    graph : DependencyGraph
        Table -> referenced tables

    Returns
    -------
    SortResult
        Every table of `graph` exactly once
    """
    order: list[str] = []
    placed: set[str] = set()
    remaining = list(graph)

    while remaining:
        ready = [t for t in remaining if (graph[t] - {t}) <= placed]
        if not ready:
            order.extend(remaining)
            return SortResult(order=order, unresolved=remaining)

        order.extend(ready)
        placed.update(ready)
        remaining = [t for t in remaining if t not in placed]

    return SortResult(order=order)
