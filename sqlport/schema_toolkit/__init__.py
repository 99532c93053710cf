"""Module for analyzing SQL dump text, sorting tables by their dependencies
and comparing table structures.

Classes
-------
- Classes for representing statements
  - `StatementType`: Classification of a top-level statement
  - `RawStatement`: Classified statement
  - `ParsedDump`: Statement buckets of a parsed dump
- Classes for representing database schema
  - `ColumnDefinition`: Column definition
  - `TableSchema`: Table structure
  - `AlterClause`: Parsed ALTER clause
- Classes for representing comparison results
  - `ErrorFlag`: Bit flags of a comparison result
  - `DiffEntry`: Difference of a single column
  - `ComparisonResult`: Result of a comparison

Functions
---------
- SQL dump analysis functions
  - `split_statements`: Split SQL text into classified statements.
  - `parse_sql_dump`: Parse SQL dump text into statement buckets.
- Dependency functions
  - `build_dependency_graph`: Build the table dependency graph.
  - `topological_sort`: Sort tables so that referenced tables come first.
- Table structure functions
  - `build_schemas_from_sql`: Build table models from SQL dump text.
  - `build_schemas_from_client`: Build table models from a live database.
- Comparison functions
  - `compare`: Compare two sets of table models.
  - `format_diff`: Format a comparison result as text.
"""
from ._core import (
    StatementType, RawStatement, ParsedDump, DumpNames, StrippedCreate,
    ColumnDefinition, KeyMembership, ForeignKeyMembership, TableSchema,
    AlterType, AlterClause, ForeignReference, DependencyGraph, SortResult,
    ErrorFlag, DiffEntry, ComparisonResult
)

from .statement_splitter import split_statements, parse_sql_dump
from .dependency import build_dependency_graph, topological_sort
from .schema_builder import (
    build_table_schema, build_schemas_from_dump,
    build_schemas_from_sql, build_schemas_from_client
)
from .comparator import compare, compare_with_database, format_diff, get_errno
